# =========================================================
# --- services_auth.py ---
# =========================================================

"""
Local credential cache (`auth.json` in the config directory).
"""
import json
import logging
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

# =========================================================

AUTH_FILE = "auth.json"

#: Cached logins expire after this long
LOGIN_TTL = timedelta(hours=24)


class AuthService:
    """
    Reads and writes the cached user profile.

    Attributes:
        config_dir (Path): Directory holding the cache file.
        config_file (Path): The cache file itself.
    """

    def __init__(self, config_dir: Path, now=None) -> None:
        """
        Args:
            config_dir (Path): Directory holding `auth.json`; created on first write.
            now (callable, optional): Clock returning an aware datetime, for tests.
        """
        self.config_dir: Path = Path(config_dir)
        self.config_file: Path = self.config_dir / AUTH_FILE
        self._now = now or (lambda: datetime.now(timezone.utc))

    def _read(self) -> Optional[Dict[str, Any]]:
        if not self.config_file.exists():
            return None
        try:
            data = json.loads(self.config_file.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable auth cache {self.config_file}: {e}")
            return None
        return data if isinstance(data, dict) else None

    def _write(self, data: Dict[str, Any]) -> None:
        self.config_dir.mkdir(parents=True, exist_ok=True)
        self.config_file.write_text(json.dumps(data, indent=2), encoding="utf-8")

    def _expired(self, profile: Dict[str, Any]) -> bool:
        login_time = profile.get("loginTime")
        if not login_time:
            return False
        try:
            logged_in = datetime.fromisoformat(str(login_time).replace("Z", "+00:00"))
        except ValueError:
            logger.warning(f"Invalid loginTime {login_time!r} in auth cache")
            return True
        if logged_in.tzinfo is None:
            logged_in = logged_in.replace(tzinfo=timezone.utc)
        return self._now() - logged_in > LOGIN_TTL

    def get_current_user(self) -> Optional[Dict[str, Any]]:
        """
        Return the cached profile.

        Expired logins are cleared and reported as logged out.

        Returns:
            Optional[dict]: Profile with email/userId/token/loginTime, or None.
        """
        profile = self._read()
        if profile is None:
            return None
        if self._expired(profile):
            logger.info("Cached login expired")
            self.logout()
            return None
        return profile

    def is_logged_in(self) -> bool:
        """Return True when a token or user id is cached."""
        profile = self.get_current_user()
        return bool(profile and (profile.get("token") or profile.get("userId")))

    def login(self, profile: Dict[str, Any]) -> Dict[str, Any]:
        """
        Cache a profile, stamping the login time.

        Args:
            profile (dict): Fields to store (email, userId, token, ...).

        Returns:
            dict: The stored profile.
        """
        stored = {k: v for k, v in profile.items() if v is not None}
        stored["loginTime"] = self._now().isoformat()
        self._write(stored)
        logger.info(f"Stored login in {self.config_file}")
        return stored

    def logout(self) -> None:
        """Clear the cached profile; the file is kept but emptied."""
        if self.config_file.exists():
            self._write({})

    def get_api_config(self) -> Dict[str, Optional[str]]:
        """Return the cached user id and token."""
        user = self.get_current_user() or {}
        return {"user_id": user.get("userId"), "api_key": user.get("token")}
