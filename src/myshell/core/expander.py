"""Environment variable expansion for ``$NAME`` and ``${NAME}`` references.

The scanner is a single left-to-right pass with three states:

- ``LITERAL``: characters are copied through. ``$`` switches to a reference.
- ``BARE``: collecting ``[A-Za-z0-9_]`` after ``$``. Any other character ends
  the name and is scanned again in ``LITERAL``.
- ``BRACED``: collecting everything after ``${`` up to the closing ``}``.

Unset variables expand to an empty string. References that cannot be
completed (a lone ``$``, ``${}`` or a missing ``}``) are copied through as
written.
"""

from __future__ import annotations

import enum
import os
from collections.abc import Mapping


class _State(enum.Enum):
    LITERAL = "literal"
    BARE = "bare"
    BRACED = "braced"


def _is_name_char(ch: str) -> bool:
    return ch == "_" or (ch.isascii() and ch.isalnum())


def expand_variables(text: str, env: Mapping[str, str] | None = None) -> str:
    """Return ``text`` with every variable reference replaced by its value."""
    if "$" not in text:
        return text
    if env is None:
        env = os.environ

    out: list[str] = []
    name: list[str] = []
    state = _State.LITERAL
    i = 0
    n = len(text)

    while i < n:
        ch = text[i]

        if state is _State.LITERAL:
            if ch != "$":
                out.append(ch)
            elif i + 1 < n and text[i + 1] == "{":
                state = _State.BRACED
                i += 1
            else:
                state = _State.BARE
            i += 1
            continue

        if state is _State.BARE:
            if _is_name_char(ch):
                name.append(ch)
                i += 1
                continue
            # Terminator is re-scanned as a literal
            out.append(env.get("".join(name), "") if name else "$")
            name.clear()
            state = _State.LITERAL
            continue

        # BRACED
        if ch == "}":
            if name:
                out.append(env.get("".join(name), ""))
            else:
                out.append("${}")
            name.clear()
            state = _State.LITERAL
        else:
            name.append(ch)
        i += 1

    if state is _State.BARE:
        out.append(env.get("".join(name), "") if name else "$")
    elif state is _State.BRACED:
        out.append("${" + "".join(name))

    return "".join(out)
