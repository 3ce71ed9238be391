"""System utility checks."""

from __future__ import annotations

import os
import shutil
from pathlib import Path


def check_interpreter(interpreter: str) -> tuple[bool, str]:
    """Check that the fallback interpreter can be executed."""
    resolved = shutil.which(interpreter)
    if not resolved:
        return False, f"Interpreter not found: {interpreter}"
    if not os.access(resolved, os.X_OK):
        return False, f"Interpreter not executable: {resolved}"
    return True, resolved


def check_history_file(path: str) -> tuple[bool, str]:
    """Validate that a history file path is usable."""
    resolved = Path(path).expanduser().resolve()
    if resolved.exists() and not resolved.is_file():
        return False, f"Not a file: {resolved}"
    if not resolved.parent.exists():
        return False, f"Directory not found: {resolved.parent}"
    return True, str(resolved)
