"""Application identity and filesystem helpers."""

from __future__ import annotations

import os
from pathlib import Path

try:
    import pwd
except ImportError:  # not available on every platform
    pwd = None

VERSION = "0.1.0"
PROGRAM = "Amadeus"
SUBNAME = "music for you"


def app_complete_name() -> str:
    """Return the program name together with its subtitle."""
    return f"{PROGRAM} - {SUBNAME}"


def home_dir() -> str:
    """Return the current user's home directory, or an empty string."""
    if pwd is None:
        return str(Path.home())
    try:
        return pwd.getpwuid(os.getuid()).pw_dir
    except KeyError:
        return ""


def create_dirs(path: str | os.PathLike[str]) -> Path:
    """Make sure ``path`` exists, creating missing directories.

    Raises ``OSError`` when the directories cannot be created.
    """
    target = Path(path)
    if not target.exists():
        target.mkdir(parents=True, exist_ok=True)
    return target