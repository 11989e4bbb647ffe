import json
from typing import Any, Dict, List, Optional

import pytest

from nodots_backgammon.core.game import build_point, opening_game_document
from nodots_backgammon.services.config import Config


class FakeResponse:
    """Minimal stand-in for requests.Response."""

    def __init__(self, status_code: int = 200, body: Any = None, reason: str = "OK", raw: Optional[bytes] = None):
        self.status_code = status_code
        self.reason = reason
        if raw is not None:
            self.content = raw
        else:
            self.content = json.dumps(body).encode() if body is not None else b""

    @property
    def ok(self) -> bool:
        return self.status_code < 400

    def json(self) -> Any:
        return json.loads(self.content.decode())


class FakeSession:
    """Records requests and answers them from a queue of responses."""

    def __init__(self, responses: Optional[List[Any]] = None):
        self.headers: Dict[str, str] = {}
        self.verify = True
        self.responses = list(responses or [])
        self.calls: List[Dict[str, Any]] = []

    def request(self, method, url, json=None, timeout=None):
        self.calls.append({"method": method, "url": url, "json": json, "timeout": timeout})
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture
def opening_game():
    return opening_game_document("game-1")


@pytest.fixture
def config(tmp_path):
    return Config(api_url="https://example.test", api_key="tok", config_dir=tmp_path)


def make_game(points=None, bar=None, off=None, active="white", players=None, **extra):
    """Build a small game document from (clockwise, color, count) triples."""
    game = {
        "id": "g-1",
        "stateKind": "rolled",
        "activeColor": active,
        "players": players if players is not None else [
            {"color": "white", "direction": "clockwise", "pipCount": 167},
            {"color": "black", "direction": "counterclockwise", "pipCount": 167},
        ],
        "board": {
            "points": [build_point(p, color, n) for p, color, n in (points or [])],
            "bar": bar or {},
            "off": off or {},
        },
    }
    game.update(extra)
    return game


@pytest.fixture
def game_factory():
    return make_game


@pytest.fixture
def fake_response():
    return FakeResponse


@pytest.fixture
def make_api():
    """Return a factory building an ApiService over a FakeSession."""
    from nodots_backgammon.services.api import ApiService

    def factory(*responses, **overrides):
        session = FakeSession(list(responses))
        settings = {"api_url": "https://example.test", "api_key": "tok", "timeout": 3}
        settings.update(overrides)
        return ApiService(Config(**settings), session=session), session

    return factory
