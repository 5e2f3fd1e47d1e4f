"""
`.env` loading.

The directions API keys live in a `.env` file beside `pyproject.toml`. Set
`HAMQADAM_ENV_FILE` to read a different file. Values already in the process
environment always win.
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv


def find_env_file(start: Path | None = None) -> Path | None:
    """Return the `.env` to load, or None when there is none."""
    explicit = os.getenv("HAMQADAM_ENV_FILE")
    if explicit:
        path = Path(explicit).expanduser().resolve()
        return path if path.is_file() else None

    here = (start or Path.cwd()).resolve()
    for directory in (here, *here.parents):
        if (directory / "pyproject.toml").is_file():
            candidate = directory / ".env"
            return candidate if candidate.is_file() else None
    return None


@lru_cache
def load_dotenv_if_present() -> Path | None:
    """Load the project's `.env` once; returns the loaded path."""
    path = find_env_file()
    if path is not None:
        load_dotenv(dotenv_path=path, override=False)
    return path
