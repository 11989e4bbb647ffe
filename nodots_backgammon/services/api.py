# =========================================================
# --- services_api.py ---
# =========================================================

"""
HTTP client for the remote backgammon service.

One method per endpoint. Each returns the decoded JSON body or raises
ApiError; no method retries.
"""
import logging
from typing import Any, Dict, List, Optional

import requests

from .config import Config

logger = logging.getLogger(__name__)

# =========================================================

DEFAULT_SIMULATION = {
    "speed": 1000,
    "robot1Difficulty": "beginner",
    "robot2Difficulty": "beginner",
}


class ApiError(Exception):
    """
    A failed request to the game service.

    Attributes:
        message (str): Best available error message.
        status_code (Optional[int]): HTTP status, None for transport errors.
    """

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message: str = message
        self.status_code: Optional[int] = status_code


class ApiContractError(ApiError):
    """The service answered, but without a field the caller relies on."""
    pass


class NotAuthenticatedError(ApiError):
    """A command needs a token and none is configured or cached."""
    pass


def error_message(response: requests.Response) -> str:
    """
    Extract an error message from a failed response.

    Prefers the JSON `message`, then `error`, then the HTTP reason.
    """
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        for key in ("message", "error"):
            if isinstance(body.get(key), str) and body[key]:
                return body[key]
    return f"HTTP {response.status_code}: {response.reason or 'request failed'}"


class ApiService:
    """
    Thin wrapper over the service's REST endpoints.

    Attributes:
        config (Config): Connection settings.
        session (requests.Session): Session carrying auth and JSON headers.
    """

    def __init__(self, config: Config, session: Optional[requests.Session] = None) -> None:
        """
        Args:
            config (Config): Connection settings; `api_key` becomes the bearer token.
            session (Optional[requests.Session]): Session to use, for tests.
        """
        self.config: Config = config
        self.session: requests.Session = session or requests.Session()
        self.session.headers.update({"Content-Type": "application/json"})
        if config.api_key:
            self.session.headers.update({"Authorization": f"Bearer {config.api_key}"})
        self.session.verify = config.verify_ssl

        if not config.verify_ssl and config.api_url.startswith("https://"):
            # Local servers run with self-signed certificates
            requests.packages.urllib3.disable_warnings(
                requests.packages.urllib3.exceptions.InsecureRequestWarning
            )

    # --------------------------------------------------
    # Transport
    # --------------------------------------------------
    def _url(self, path: str) -> str:
        return f"{self.config.base_path}/{path.lstrip('/')}"

    def request(self, method: str, path: str, payload: Optional[Dict[str, Any]] = None) -> Any:
        """
        Send a request and decode the JSON answer.

        Args:
            method (str): HTTP method.
            path (str): Path below the versioned API root.
            payload (Optional[dict]): JSON body.

        Raises:
            ApiError: On transport errors, non-2xx answers or undecodable bodies.

        Returns:
            Any: Decoded JSON, None for empty bodies.
        """
        url = self._url(path)
        logger.debug(f"{method} {url} payload={payload}")
        try:
            response = self.session.request(method, url, json=payload, timeout=self.config.timeout)
        except requests.RequestException as e:
            logger.debug(f"{method} {url} failed: {e}")
            raise ApiError(str(e)) from e

        if not response.ok:
            message = error_message(response)
            logger.info(f"{method} {url} -> {response.status_code}: {message}")
            raise ApiError(message, response.status_code)

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise ApiError(f"Invalid JSON from {url}", response.status_code) from e

    # --------------------------------------------------
    # Games
    # --------------------------------------------------
    def create_game(self, player1_id: str, player2_id: str) -> Dict[str, Any]:
        """Create a game between two users."""
        return self.request("POST", "games", {
            "player1": {"userId": player1_id},
            "player2": {"userId": player2_id},
        })

    def create_robot_game(self) -> Dict[str, Any]:
        """Create a game of the current user against a robot."""
        return self.request("POST", "games", {"opponent": "robot"})

    def get_game(self, game_id: str) -> Dict[str, Any]:
        return self.request("GET", f"games/{game_id}")

    def roll_dice(self, game_id: str) -> Dict[str, Any]:
        return self.request("POST", f"games/{game_id}/roll")

    def make_move(self, game_id: str, from_position: int, to_position: int) -> Dict[str, Any]:
        """Submit a move by origin and destination point."""
        return self.request("POST", f"games/{game_id}/move", {"from": from_position, "to": to_position})

    def make_move_with_checker_id(self, game_id: str, checker_id: str) -> Dict[str, Any]:
        """Submit a move by checker; the service picks the destination."""
        logger.info(f"Moving checker {checker_id} in game {game_id}")
        return self.request("POST", f"games/{game_id}/move", {"checkerId": checker_id})

    # --------------------------------------------------
    # Users
    # --------------------------------------------------
    def get_users(self) -> List[Dict[str, Any]]:
        return self.request("GET", "users") or []

    def get_user(self, user_id: str) -> Dict[str, Any]:
        return self.request("GET", f"users/{user_id}")

    def get_robots(self) -> List[Dict[str, Any]]:
        return self.request("GET", "robots") or []

    # --------------------------------------------------
    # Simulations
    # --------------------------------------------------
    def start_simulation(self, speed: Optional[int] = None, robot1_difficulty: Optional[str] = None,
                         robot2_difficulty: Optional[str] = None) -> Dict[str, Any]:
        """Start a robot vs robot simulation; unset fields use the service defaults."""
        payload = dict(DEFAULT_SIMULATION)
        overrides = {
            "speed": speed,
            "robot1Difficulty": robot1_difficulty,
            "robot2Difficulty": robot2_difficulty,
        }
        payload.update({k: v for k, v in overrides.items() if v is not None})
        return self.request("POST", "robots/simulations", payload)

    def get_simulation_status(self, simulation_id: str) -> Dict[str, Any]:
        return self.request("GET", f"robots/simulations/{simulation_id}")

    def pause_simulation(self, simulation_id: str) -> Dict[str, Any]:
        return self.request("POST", f"robots/simulations/{simulation_id}/pause")

    def stop_simulation(self, simulation_id: str) -> Dict[str, Any]:
        return self.request("DELETE", f"robots/simulations/{simulation_id}")

    def change_simulation_speed(self, simulation_id: str, speed: int) -> Dict[str, Any]:
        return self.request("POST", f"robots/simulations/{simulation_id}/speed", {"speed": speed})
