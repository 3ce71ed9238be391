"""Whitespace tokenizer for input lines."""

from __future__ import annotations

from dataclasses import dataclass, field

BACKGROUND_MARKER = "&"


@dataclass
class TokenizedLine:
    tokens: list[str] = field(default_factory=list)
    background: bool = False


def tokenize(line: str, marker: str = BACKGROUND_MARKER) -> TokenizedLine:
    """Tokenize a line and strip a trailing background marker if present."""
    tokens = line.split()
    background = False
    if tokens and tokens[-1] == marker:
        tokens.pop()
        background = True
    return TokenizedLine(tokens=tokens, background=background)
