"""Optional ``.env`` loading for CLI and host configuration.

Values from the nearest ``.env`` file (searching upward from the working
directory) are injected into ``os.environ`` without overriding variables that
are already set, so ``HEC_*`` settings can live next to a deployment.
"""

from __future__ import annotations

from pathlib import Path

from dotenv import load_dotenv

DOTENV_ENV_VAR = "HEC_USE_DOTENV"

TRUE_VALUES = frozenset({"1", "true", "yes", "on"})

_LOADED_PATH: Path | None = None


def should_use_dotenv(*, explicit: bool | None = None, env_value: str | None = None) -> bool:
    """Decide whether ``.env`` loading is active.

    An explicit CLI choice wins; otherwise the ``HEC_USE_DOTENV`` value decides.

    Examples
    --------
    >>> should_use_dotenv(explicit=False, env_value="1")
    False
    >>> should_use_dotenv(env_value=" Yes ")
    True
    >>> should_use_dotenv()
    False
    """

    if explicit is not None:
        return explicit
    return (env_value or "").strip().lower() in TRUE_VALUES


def enable_dotenv(*, search_from: Path | None = None, override: bool = False) -> Path | None:
    """Load the nearest ``.env`` file once and return its resolved path.

    Returns ``None`` when no file is found. Subsequent calls return the path
    loaded first without reading the file again.
    """

    global _LOADED_PATH
    if _LOADED_PATH is not None:
        return _LOADED_PATH
    start = (search_from or Path.cwd()).resolve()
    for directory in (start, *start.parents):
        candidate = directory / ".env"
        if candidate.is_file():
            load_dotenv(candidate, override=override)
            _LOADED_PATH = candidate.resolve()
            return _LOADED_PATH
    return None


def _reset_dotenv_state_for_testing() -> None:
    global _LOADED_PATH
    _LOADED_PATH = None


__all__ = ["DOTENV_ENV_VAR", "TRUE_VALUES", "enable_dotenv", "should_use_dotenv"]
