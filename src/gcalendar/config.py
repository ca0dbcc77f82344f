"""Centralized configuration.

Settings come from the environment, optionally seeded from a ``.env`` file in
the repository root:

    GCALENDAR_EMAIL       - Google account email
    GCALENDAR_PASSWORD    - Google account password
    GCALENDAR_SOURCE      - Application identifier sent at login
    GCALENDAR_TIMEOUT     - HTTP timeout in seconds (default: 30)
    GCALENDAR_VERIFY_TLS  - Set to 0/false to skip certificate checks

This module auto-loads the .env file on import. Variables already present in
the environment take precedence.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path

# Repository root
# __file__ is src/gcalendar/config.py, so 3 levels up
REPO_ROOT = Path(__file__).parent.parent.parent
ENV_FILE = REPO_ROOT / ".env"

DEFAULT_TIMEOUT = 30.0
DEFAULT_SOURCE = "gcalendar-python"

_FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class Settings:
    """Runtime settings resolved from the environment."""

    email: str = ""
    password: str = field(default="", repr=False)
    source: str = DEFAULT_SOURCE
    timeout: float = DEFAULT_TIMEOUT
    verify_tls: bool = True


def _load_env_file(env_path: Path) -> dict[str, str]:
    """Load environment variables from a file.

    Args:
        env_path: Path to .env file.

    Returns:
        Dictionary of loaded variables.
    """
    loaded = {}
    if not env_path.exists():
        return loaded

    with open(env_path) as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            if "=" not in line:
                continue

            key, _, value = line.partition("=")
            key = key.strip()
            value = value.strip()

            # Remove surrounding quotes
            if (value.startswith('"') and value.endswith('"')) or (
                value.startswith("'") and value.endswith("'")
            ):
                value = value[1:-1]

            if key and key not in os.environ:
                os.environ[key] = value
                loaded[key] = value

    return loaded


def _parse_timeout(raw: str | None) -> float:
    if not raw:
        return DEFAULT_TIMEOUT
    try:
        return float(raw)
    except ValueError:
        return DEFAULT_TIMEOUT


def _parse_flag(raw: str | None) -> bool:
    if raw is None:
        return True
    return raw.strip().lower() not in _FALSE_VALUES


def get_settings() -> Settings:
    """Read settings from the current environment."""
    return Settings(
        email=os.environ.get("GCALENDAR_EMAIL", ""),
        password=os.environ.get("GCALENDAR_PASSWORD", ""),
        source=os.environ.get("GCALENDAR_SOURCE") or DEFAULT_SOURCE,
        timeout=_parse_timeout(os.environ.get("GCALENDAR_TIMEOUT")),
        verify_tls=_parse_flag(os.environ.get("GCALENDAR_VERIFY_TLS")),
    )


def get_credential_status() -> dict:
    """Get status of the configured credentials.

    Returns:
        Dictionary with credential status. Values are never included.
    """
    settings = get_settings()
    return {
        "repo_root": str(REPO_ROOT),
        "env_file": ENV_FILE.exists(),
        "email": settings.email or None,
        "password": bool(settings.password),
        "source": settings.source,
        "timeout": settings.timeout,
        "verify_tls": settings.verify_tls,
    }


# Auto-load .env from repo root on import
_loaded = _load_env_file(ENV_FILE)
