import sys
from pathlib import Path
from typing import Callable, Dict, List

import httpx
import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from ox3_client.auth.oauth1 import (  # noqa: E402
    ACCESS_TOKEN_URL,
    AUTHORIZATION_URL,
    REQUEST_TOKEN_URL,
)
from ox3_client.models import Credentials  # noqa: E402


def pytest_configure(config):
    # Add custom markers for test organization
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test"
    )
    config.addinivalue_line(
        "markers", "auth: mark test as testing authentication"
    )


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """Keep OX3_* variables and .env files of the host out of the tests."""
    for name in (
        "OX3_DOMAIN",
        "OX3_REALM",
        "OX3_CONSUMER_KEY",
        "OX3_CONSUMER_SECRET",
        "OX3_CONSUMER_SECRECT",
        "OX3_EMAIL",
        "OX3_PASSWORD",
        "OX3_CONFIG_FILE",
        "OX3_DEBUG",
        "OX3_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    yield


@pytest.fixture
def credentials():
    """Complete, syntactically valid credentials."""
    return Credentials(
        domain="http://www.example.com/",
        realm="example_realm",
        consumer_key="consumer-key",
        consumer_secret="consumer-secret",
        email="trafficker@example.com",
        password="hunter2",
    )


def _endpoint(url: httpx.URL) -> str:
    return f"{url.scheme}://{url.host}{url.path}"


class FakeOpenX:
    """In-process stand-in for the OpenX SSO host and the OX3 API.

    Installed over ``httpx.HTTPTransport.handle_request`` so that cookie
    handling, auth flows and redirects of the real clients still run.
    Each route is a factory so that tests can swap in failures.
    """

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self.routes: Dict[str, Callable[[httpx.Request], httpx.Response]] = {
            REQUEST_TOKEN_URL: lambda request: httpx.Response(
                200,
                text=(
                    "oauth_token=req-token&oauth_token_secret=req-secret"
                    "&oauth_callback_confirmed=true"
                ),
            ),
            AUTHORIZATION_URL: lambda request: httpx.Response(
                200, text="oob?oauth_token=req-token&oauth_verifier=verifier-123"
            ),
            ACCESS_TOKEN_URL: lambda request: httpx.Response(
                200, text="oauth_token=access-token&oauth_token_secret=access-secret"
            ),
        }
        self.api = lambda request: httpx.Response(200, json={"ok": True})

    def handle(self, request: httpx.Request) -> httpx.Response:
        request.read()
        self.requests.append(request)
        route = self.routes.get(_endpoint(request.url), self.api)
        return route(request)

    def requests_to(self, url: str) -> List[httpx.Request]:
        return [r for r in self.requests if _endpoint(r.url) == url]

    @property
    def api_requests(self) -> List[httpx.Request]:
        return [r for r in self.requests if r.url.host != "sso.openx.com"]


@pytest.fixture
def fake_openx(monkeypatch):
    """Route every httpx request to a :class:`FakeOpenX` instance."""
    server = FakeOpenX()

    def handle_request(self, request):
        return server.handle(request)

    monkeypatch.setattr(httpx.HTTPTransport, "handle_request", handle_request)
    return server
