"""Catalog runner adapter."""

import asyncio

from pydantic import BaseModel, ValidationError

from onegeo_connector.application.dto.resources import (
    GetResourceRequest,
    ListResourcesRequest,
    ListResourcesResponse,
    ResourceResponse,
)
from onegeo_connector.application.services.priority import PriorityTables, ResolverFlags
from onegeo_connector.application.use_cases.get_resource import ResolverContext
from onegeo_connector.application.use_cases.get_resource import run as get_resource
from onegeo_connector.application.use_cases.list_resources import run as list_resources
from onegeo_connector.domain.errors import TargetingValidationError
from onegeo_connector.domain.ports import (
    CatalogSearchPort,
    DownloaderPort,
    OriginProberPort,
    TaskLogPort,
)
from onegeo_connector.domain.types import JsonValue


class CatalogRunner:
    """Entry point used by the host for listing and fetching resources.

    Holds only read-only configuration, so one instance can serve concurrent
    operations.
    """

    def __init__(
        self,
        catalog_url: str,
        flags: ResolverFlags,
        search: CatalogSearchPort,
        downloader: DownloaderPort,
        prober: OriginProberPort,
        wfs_version: str = "2.0.0",
    ) -> None:
        """Initialize catalog runner."""
        self.flags = flags
        self.tables = PriorityTables.from_flags(flags)
        self.context = ResolverContext(
            catalog_url=catalog_url,
            tables=self.tables,
            flags=flags,
            wfs_version=wfs_version,
        )
        self.search = search
        self.downloader = downloader
        self.prober = prober

    async def list(self, params: dict[str, JsonValue]) -> dict[str, JsonValue]:
        """List one page of resources."""
        request = _validate(ListResourcesRequest, params)
        resource_list = await list_resources(request, self.search, self.tables, self.flags)
        return ListResourcesResponse.from_entity(resource_list).model_dump(by_alias=True)

    async def get_resource(
        self,
        params: dict[str, JsonValue],
        log: TaskLogPort,
        cancel_event: asyncio.Event | None = None,
    ) -> dict[str, JsonValue]:
        """Download one resource into the caller's scratch directory."""
        request = _validate(GetResourceRequest, params)
        descriptor = await get_resource(
            request,
            self.context,
            self.search,
            self.downloader,
            self.prober,
            log,
            cancel_event,
        )
        return ResourceResponse.from_entity(descriptor).model_dump(by_alias=True)


def _validate(model: type[BaseModel], params: dict[str, JsonValue]) -> BaseModel:
    """Validate host parameters, reporting bad input as a targeting error."""
    try:
        return model.model_validate(params)
    except ValidationError as e:
        raise TargetingValidationError(f"Invalid {model.__name__} parameters: {e}") from e
