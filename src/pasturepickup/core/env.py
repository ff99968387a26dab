"""
Environment + project-root helpers.

Airtable, Google Maps and Mapbox credentials normally come from a repo-local `.env`,
and the vendor seed file is configured as a repo-relative path. Both must work the
same whether the process is uvicorn, the CLI or pytest, from any working directory.

- `get_project_root()`: the repo root (`PASTUREPICKUP_PROJECT_ROOT`, the parent of
  `PASTUREPICKUP_ENV_FILE`, or the nearest ancestor that looks like this repo)
- `load_dotenv_if_present()`: load `.env` once without overriding the process env
- `resolve_project_path()`: resolve a relative path against the project root
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv

_ROOT_MARKERS = (".env", ".git", "pyproject.toml")


def _is_project_root(path: Path) -> bool:
    if any((path / marker).exists() for marker in _ROOT_MARKERS):
        return True
    return (path / "src" / "pasturepickup").is_dir()


def _find_root(start: Path) -> Path | None:
    start = start.resolve()
    return next((p for p in (start, *start.parents) if _is_project_root(p)), None)


def _explicit_env_file() -> Path | None:
    env_file = os.getenv("PASTUREPICKUP_ENV_FILE")
    return Path(env_file).expanduser().resolve() if env_file else None


@lru_cache
def get_project_root() -> Path:
    """Return the best-guess project root directory (cached)."""
    override = os.getenv("PASTUREPICKUP_PROJECT_ROOT")
    if override:
        return Path(override).expanduser().resolve()

    env_file = _explicit_env_file()
    if env_file is not None:
        return env_file.parent

    # CWD first; then this file's location for installed console scripts.
    return _find_root(Path.cwd()) or _find_root(Path(__file__).parent) or Path.cwd().resolve()


@lru_cache
def load_dotenv_if_present() -> Path | None:
    """Load `.env` once if present; returns the loaded env path (or None)."""
    env_path = _explicit_env_file() or get_project_root() / ".env"
    if not env_path.is_file():
        return None
    load_dotenv(dotenv_path=env_path, override=False)
    return env_path


def resolve_project_path(path: str | Path) -> Path:
    """Resolve a possibly-relative path against the project root."""
    p = Path(path).expanduser()
    if p.is_absolute():
        return p
    return (get_project_root() / p).resolve()
