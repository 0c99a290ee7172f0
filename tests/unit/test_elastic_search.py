"""Unit tests for the Elasticsearch catalog adapter."""

import json

import httpx
import pytest
import pytest_asyncio

from onegeo_connector.application.services.priority import DEFAULT_TABLES
from onegeo_connector.domain.errors import CatalogSearchError
from onegeo_connector.infrastructure.http.elastic_search import ElasticCatalogSearch
from onegeo_connector.infrastructure.http.search_queries import (
    MAX_PAGE_SIZE,
    build_count_query,
    build_record_query,
    build_search_query,
)

SEARCH_URL = "https://portal.example.org/fr/indexer/elastic/_search/"


@pytest_asyncio.fixture
async def make_search():
    """Create search adapters over mock transports, closing their clients afterwards."""
    clients = []

    def factory(handler) -> ElasticCatalogSearch:
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        clients.append(client)
        return ElasticCatalogSearch(client, "https://portal.example.org")

    yield factory
    for client in clients:
        await client.aclose()


def test_build_search_query_pagination():
    """Test paging offsets and page size cap."""
    body = build_search_query("routes", 3, 20, DEFAULT_TABLES)

    assert body["from"] == 40
    assert body["size"] == 20
    assert body["collapse"] == {"field": "uuid.keyword"}
    assert build_search_query("*", 1, 50000, DEFAULT_TABLES)["size"] == MAX_PAGE_SIZE


def test_build_search_query_filters_supported_links():
    """Test the link filter lists known services and formats."""
    body = build_search_query("*", 1, 10, DEFAULT_TABLES)

    should = body["query"]["bool"]["must"][3]["bool"]["should"]
    terms = [next(iter(clause["term"].values())) for clause in should]
    assert "WFS" in terms
    assert "GeoJSON" in terms
    assert None not in terms


def test_build_count_query():
    """Test the count query aggregates distinct uuids."""
    body = build_count_query("routes", DEFAULT_TABLES)

    assert body["size"] == 0
    assert "unique_datasets" in body["aggs"]


def test_build_record_query():
    """Test the record lookup matches one uuid."""
    body = build_record_query("abc123")

    assert body["query"]["bool"]["must"][0] == {"term": {"uuid.keyword": "abc123"}}


@pytest.mark.asyncio
async def test_search_returns_hits_and_count(make_search):
    """Test hits and distinct count are combined into one page."""
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        requests.append(body)
        if "aggs" in body:
            return httpx.Response(200, json={"aggregations": {"unique_datasets": {"value": 42}}})
        return httpx.Response(200, json={"hits": {"hits": [{"_source": {"uuid": "a"}}, {"_source": {"uuid": "b"}}]}})

    search = make_search(handler)

    page = await search.search("routes", 1, 2)

    assert search.search_url == SEARCH_URL
    assert page == {"hits": [{"uuid": "a"}, {"uuid": "b"}], "count": 42}
    assert len(requests) == 2


@pytest.mark.asyncio
async def test_get_record(make_search):
    """Test the first hit's source is returned."""
    search = make_search(lambda request: httpx.Response(200, json={"hits": {"hits": [{"_source": {"uuid": "abc123"}}]}}))

    assert await search.get_record("abc123") == {"uuid": "abc123"}


@pytest.mark.asyncio
async def test_get_record_not_found(make_search):
    """Test None is returned when nothing matches."""
    search = make_search(lambda request: httpx.Response(200, json={"hits": {"hits": []}}))

    assert await search.get_record("missing") is None


@pytest.mark.asyncio
async def test_search_http_error(make_search):
    """Test an error status is wrapped without retrying."""
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(503, text="unavailable")

    search = make_search(handler)

    with pytest.raises(CatalogSearchError, match="Catalog search failed"):
        await search.get_record("abc123")

    assert len(calls) == 1


@pytest.mark.asyncio
async def test_search_retries_transport_errors(make_search):
    """Test transient transport errors are retried before succeeding."""
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        if len(calls) == 1:
            raise httpx.ConnectError("connection reset", request=request)
        return httpx.Response(200, json={"hits": {"hits": []}})

    search = make_search(handler)

    assert await search.get_record("abc123") is None
    assert len(calls) == 2


@pytest.mark.asyncio
async def test_search_unexpected_body(make_search):
    """Test a malformed response raises CatalogSearchError."""
    search = make_search(lambda request: httpx.Response(200, json={"error": "bad"}))

    with pytest.raises(CatalogSearchError, match="Unexpected search response"):
        await search.search("*", 1, 10)
