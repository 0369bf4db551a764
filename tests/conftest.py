import pytest
import requests
from fastapi.testclient import TestClient

from api_football_mcp.app import create_app
from api_football_mcp.config import Settings
from api_football_mcp.tools import ToolContext
from api_football_mcp.upstream import ApiFootballClient

BASE_URL = "https://upstream.test"


class FakeResponse:
    def __init__(self, status_code=200, body=None):
        self.status_code = status_code
        self._body = body

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error", response=self)

    def json(self):
        if isinstance(self._body, str):
            raise ValueError("Expecting value")
        return self._body


class FakeSession:
    """Stands in for requests.Session; routes by endpoint path."""

    def __init__(self):
        self.routes = {}
        self.calls = []

    def reply(self, endpoint, body=None, status_code=200):
        self.routes[endpoint] = FakeResponse(status_code, body)

    def fail(self, endpoint, exc):
        self.routes[endpoint] = exc

    def get(self, url, headers=None, params=None, timeout=None):
        endpoint = url[len(BASE_URL):]
        self.calls.append({"endpoint": endpoint, "headers": headers, "params": params, "timeout": timeout})
        route = self.routes.get(endpoint)
        if route is None:
            return FakeResponse(200, upstream([]))
        if isinstance(route, Exception):
            raise route
        return route


def upstream(items, errors=None):
    """An API-Football style envelope around ``items``."""
    return {
        "get": "test",
        "parameters": {},
        "errors": errors if errors is not None else [],
        "results": len(items) if isinstance(items, list) else 1,
        "paging": {"current": 1, "total": 1},
        "response": items,
    }


def team_item(team_id, name, country="England", founded=1900):
    return {
        "team": {"id": team_id, "name": name, "country": country, "founded": founded,
                 "code": name[:3].upper(), "logo": f"https://media.test/teams/{team_id}.png"},
        "venue": {"name": f"{name} Stadium", "city": "Manchester", "capacity": 50000},
    }


def fixture_item(fixture_id, home, away, league="Premier League"):
    return {
        "fixture": {"id": fixture_id, "date": "2025-08-16T14:00:00+00:00", "referee": "M. Oliver",
                    "status": {"long": "Not Started", "short": "NS"},
                    "venue": {"name": "Old Trafford", "city": "Manchester"}},
        "league": {"id": 39, "name": league, "round": "Regular Season - 1",
                   "logo": "https://media.test/leagues/39.png"},
        "teams": {"home": {"id": 1, "name": home}, "away": {"id": 2, "name": away}},
        "goals": {"home": None, "away": None},
    }


@pytest.fixture
def settings():
    return Settings(api_key="test-key", base_url=BASE_URL, heartbeat_seconds=0)


@pytest.fixture
def fake_session():
    return FakeSession()


@pytest.fixture
def api_client(settings, fake_session):
    return ApiFootballClient(settings.api_key, settings.base_url, settings.upstream_timeout, session=fake_session)


@pytest.fixture
def context(api_client, settings):
    return ToolContext(client=api_client, settings=settings)


@pytest.fixture
def client(settings, api_client):
    return TestClient(create_app(settings=settings, client=api_client))
