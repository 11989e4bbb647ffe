# =========================================================
# --- services_config.py ---
# =========================================================

"""
Client configuration with environment overrides and defaults.
"""
import logging
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Mapping, Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# =========================================================

DEFAULT_API_URL = "https://localhost:3443"
DEFAULT_API_VERSION = "v3.2"
DEFAULT_TIMEOUT = 10.0
DEFAULT_CONFIG_DIR = Path.home() / ".nodots-backgammon"

_TRUE = ("1", "true", "yes", "on")
_FALSE = ("0", "false", "no", "off")


def _env_bool(value: Optional[str]) -> Optional[bool]:
    if value is None:
        return None
    value = value.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    return None


@dataclass(frozen=True)
class Config:
    """
    Settings of one CLI invocation.

    Attributes:
        api_url (str): Base URL of the game service.
        api_version (str): API version path segment ("v3.2").
        api_key (Optional[str]): Bearer token; falls back to the auth cache.
        user_id (Optional[str]): Current user id; falls back to the auth cache.
        timeout (float): HTTP timeout in seconds.
        verify_ssl (bool): Verify TLS certificates.
        log_level (str): Logging level name.
        config_dir (Path): Directory of the auth cache.
    """
    api_url: str = DEFAULT_API_URL
    api_version: str = DEFAULT_API_VERSION
    api_key: Optional[str] = None
    user_id: Optional[str] = None
    timeout: float = DEFAULT_TIMEOUT
    verify_ssl: bool = False
    log_level: str = "WARNING"
    config_dir: Path = DEFAULT_CONFIG_DIR

    @property
    def base_path(self) -> str:
        """Return the versioned API root, e.g. https://host/api/v3.2."""
        return f"{self.api_url.rstrip('/')}/api/{self.api_version}"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None, dotenv: bool = True) -> "Config":
        """
        Build a configuration from environment variables.

        A `.env` file in the working directory is loaded first unless
        `dotenv` is False or an explicit mapping is passed.

        Args:
            environ (Optional[Mapping[str, str]]): Variables to read. Defaults to os.environ.
            dotenv (bool): Load `.env` before reading os.environ.

        Returns:
            Config: Settings with defaults for everything unset.
        """
        if environ is None:
            if dotenv:
                load_dotenv()
            environ = os.environ

        api_url = environ.get("NODOTS_API_URL") or DEFAULT_API_URL

        timeout = DEFAULT_TIMEOUT
        raw_timeout = environ.get("NODOTS_TIMEOUT")
        if raw_timeout:
            try:
                timeout = float(raw_timeout)
            except ValueError:
                logger.warning(f"Invalid NODOTS_TIMEOUT {raw_timeout!r}, using {DEFAULT_TIMEOUT}s")

        # Self-signed certificates are the norm for local development servers
        verify_ssl = _env_bool(environ.get("NODOTS_VERIFY_SSL"))
        if verify_ssl is None:
            verify_ssl = environ.get("NODE_ENV") == "production" or environ.get("NODOTS_ENV") == "production"

        config_dir = environ.get("NODOTS_CONFIG_DIR")

        return cls(
            api_url=api_url,
            api_version=environ.get("NODOTS_API_VERSION") or DEFAULT_API_VERSION,
            api_key=environ.get("NODOTS_API_KEY") or None,
            user_id=environ.get("NODOTS_USER_ID") or None,
            timeout=timeout,
            verify_ssl=verify_ssl,
            log_level=(environ.get("NDBG_LOG_LEVEL") or "WARNING").upper(),
            config_dir=Path(config_dir).expanduser() if config_dir else DEFAULT_CONFIG_DIR,
        )

    def with_overrides(self, **overrides: object) -> "Config":
        """Return a copy with the non-None overrides applied."""
        values = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **values)
