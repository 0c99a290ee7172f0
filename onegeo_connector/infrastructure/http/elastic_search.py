"""Elasticsearch catalog search adapter."""

from urllib.parse import urljoin

import httpx
import structlog
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from onegeo_connector.application.services.priority import DEFAULT_TABLES, PriorityTables
from onegeo_connector.domain.errors import CatalogSearchError
from onegeo_connector.domain.ports import CatalogSearchPort
from onegeo_connector.domain.types import JsonValue, RawRecordSource, SearchPage, SearchQuery
from onegeo_connector.infrastructure.http.search_queries import (
    build_count_query,
    build_record_query,
    build_search_query,
)

logger = structlog.get_logger()


class ElasticCatalogSearch(CatalogSearchPort):
    """Catalog search over the portal's Elasticsearch endpoint."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        catalog_url: str,
        search_path: str = "fr/indexer/elastic/_search/",
        timeout: float = 30.0,
        tables: PriorityTables = DEFAULT_TABLES,
    ) -> None:
        """Initialize search adapter."""
        self.client = client
        self.search_url = urljoin(catalog_url.rstrip("/") + "/", search_path)
        self.timeout = timeout
        self.tables = tables

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.5, min=0.5, max=5),
        retry=retry_if_exception_type(httpx.TransportError),
        reraise=True,
    )
    async def _post(self, body: SearchQuery) -> dict[str, JsonValue]:
        """POST a query to the search endpoint."""
        response = await self.client.post(self.search_url, json=body, timeout=self.timeout)
        response.raise_for_status()
        return response.json()

    async def _query(self, body: SearchQuery) -> dict[str, JsonValue]:
        try:
            return await self._post(body)
        except (httpx.HTTPError, ValueError) as e:
            logger.error("catalog_search_failed", url=self.search_url, error=str(e))
            raise CatalogSearchError(f"Catalog search failed at {self.search_url}: {e}") from e

    async def search(self, query: str, page: int, size: int) -> SearchPage:
        """Search records matching a free-text query."""
        hits_body = await self._query(build_search_query(query, page, size, self.tables))
        count_body = await self._query(build_count_query(query, self.tables))

        try:
            hits = [hit["_source"] for hit in hits_body["hits"]["hits"]]
            count = int(count_body["aggregations"]["unique_datasets"]["value"])
        except (KeyError, TypeError, ValueError) as e:
            raise CatalogSearchError(f"Unexpected search response from {self.search_url}: {e}") from e

        logger.info("catalog_searched", query=query, page=page, size=size, hits=len(hits), count=count)
        return {"hits": hits, "count": count}

    async def get_record(self, dataset_id: str) -> RawRecordSource | None:
        """Get one record by its uuid."""
        body = await self._query(build_record_query(dataset_id))
        try:
            hits = body["hits"]["hits"]
        except (KeyError, TypeError) as e:
            raise CatalogSearchError(f"Unexpected search response from {self.search_url}: {e}") from e

        if not hits:
            logger.info("record_not_found", dataset_id=dataset_id)
            return None
        return hits[0].get("_source")
