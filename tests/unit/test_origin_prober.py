"""Unit tests for origin probing."""

import httpx
import pytest
import pytest_asyncio

from onegeo_connector.infrastructure.http.origin_prober import HttpOriginProber


class FakePortal:
    """Answers HEAD requests with a fixed status per path."""

    def __init__(self) -> None:
        self.statuses: dict[str, int] = {}
        self.calls: list[str] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(f"{request.method} {request.url.path}")
        status = self.statuses.get(request.url.path)
        if status is None:
            raise httpx.ConnectError("connection refused", request=request)
        return httpx.Response(status)


@pytest.fixture
def portal():
    """Create fake portal."""
    return FakePortal()


@pytest_asyncio.fixture
async def prober(portal):
    """Create prober over the fake portal."""
    async with httpx.AsyncClient(transport=httpx.MockTransport(portal)) as client:
        yield HttpOriginProber(client, timeout=1.0)


@pytest.mark.asyncio
async def test_resolve_origin_skips_server_errors(portal, prober):
    """Test a 5xx convention is rejected and the next one answering wins."""
    portal.statuses = {"/portail/fr/jeux-de-donnees": 500, "/fr/jeux-de-donnees": 200}

    origin = await prober.resolve_origin("https://portal.example.org/")

    assert origin == "https://portal.example.org/fr/jeux-de-donnees"
    assert portal.calls == ["HEAD /portail/fr/jeux-de-donnees", "HEAD /fr/jeux-de-donnees"]


@pytest.mark.asyncio
async def test_resolve_origin_accepts_client_errors(portal, prober):
    """Test a 4xx answer still proves the convention exists."""
    portal.statuses = {"/portail/fr/jeux-de-donnees": 403}

    origin = await prober.resolve_origin("https://portal.example.org")

    assert origin == "https://portal.example.org/portail/fr/jeux-de-donnees"
    assert len(portal.calls) == 1


@pytest.mark.asyncio
async def test_resolve_origin_unresolved(portal, prober):
    """Test None is returned when no convention answers."""
    portal.statuses = {"/fr/dataset": 502}

    origin = await prober.resolve_origin("https://portal.example.org")

    assert origin is None
    assert len(portal.calls) == 3


@pytest.mark.asyncio
async def test_resolve_origin_without_base_url(portal, prober):
    """Test no request is sent without a base URL."""
    assert await prober.resolve_origin("") is None
    assert portal.calls == []
