"""Get resource - resolve, download and project one catalog record."""

import asyncio
from dataclasses import dataclass

import structlog
from pydantic import ValidationError

from onegeo_connector.application.dto.catalog import parse_record
from onegeo_connector.application.dto.resources import GetResourceRequest
from onegeo_connector.application.services.priority import PriorityTables, ResolverFlags
from onegeo_connector.application.services.projector import origin_url, project
from onegeo_connector.application.services.ranking import rank, select_target
from onegeo_connector.application.services.resource_id import decode
from onegeo_connector.application.services.url_builder import build_url, materialize
from onegeo_connector.domain.entities import (
    Candidate,
    CatalogRecord,
    DownloadTarget,
    ResourceDescriptor,
)
from onegeo_connector.domain.errors import (
    CatalogSearchError,
    DomainError,
    DownloadCancelledError,
    DownloadExhaustedError,
    MissingProjectionError,
    NotFoundError,
    TargetingValidationError,
    UnsupportedFormatError,
)
from onegeo_connector.domain.ports import (
    CatalogSearchPort,
    DownloaderPort,
    OriginProberPort,
    TaskLogPort,
)
from onegeo_connector.infrastructure.observability.metrics import resource_requests_failed

logger = structlog.get_logger()


@dataclass(frozen=True)
class ResolverContext:
    """Static resolver configuration shared by every request."""

    catalog_url: str
    tables: PriorityTables
    flags: ResolverFlags
    wfs_version: str = "2.0.0"


async def run(
    request: GetResourceRequest,
    context: ResolverContext,
    search: CatalogSearchPort,
    downloader: DownloaderPort,
    prober: OriginProberPort,
    log: TaskLogPort,
    cancel_event: asyncio.Event | None = None,
) -> ResourceDescriptor:
    """Download a resource and describe it."""
    origin = ""
    try:
        target = _resolve_target(request)
        logger.info(
            "processing_resource",
            resource_id=request.resource_id,
            dataset_id=target.dataset_id,
            service=target.service,
            format=target.format,
        )

        await log.step(f"Resolve resource {target.dataset_id}")
        record = await _load_record(target.dataset_id, search)

        # Portal wide, computed once per request so failures can report it
        origin = origin_url(await prober.resolve_origin(context.catalog_url), record)

        candidates = _resolve_candidates(record, target, context)
        await log.info(
            f"{len(candidates)} download candidate(s) for {record.title or record.uuid}",
            urls=[candidate.url for candidate in candidates],
        )

        await log.step("Download resource file")
        result = await downloader.fetch(
            record.uuid,
            candidates,
            request.tmp_dir,
            record.slug,
            log,
            origin=origin or None,
            cancel_event=cancel_event,
        )

        descriptor = project(
            record,
            result.candidate,
            result.file_path,
            origin,
            resource_id=request.resource_id,
        )
        await log.info(
            f"Resource {request.resource_id} downloaded",
            file_path=descriptor.file_path,
            format=descriptor.format,
        )
        logger.info(
            "resource_completed",
            resource_id=request.resource_id,
            file_path=descriptor.file_path,
            format=descriptor.format,
            url=result.candidate.url,
        )
        return descriptor

    except Exception as e:
        if isinstance(e, DomainError) and origin and not e.origin:
            e.origin = origin
        error_code = classify_error(e)
        resource_requests_failed.labels(error_code=error_code).inc()
        logger.error(
            "resource_failed",
            resource_id=request.resource_id,
            error_code=error_code,
            error_message=str(e),
            origin=origin or None,
            exc_info=error_code == "INTERNAL_ERROR",
        )
        await log.error(f"{error_code}: {e}", origin=origin or None)
        raise


# ============================================================================
# Resolution
# ============================================================================


def _resolve_target(request: GetResourceRequest) -> DownloadTarget:
    """Decode the resource id and apply any caller pinned override."""
    target = decode(request.resource_id)
    if request.service or request.format:
        return DownloadTarget(
            dataset_id=target.dataset_id,
            service=request.service or target.service,
            format=request.format or target.format,
        )
    return target


async def _load_record(dataset_id: str, search: CatalogSearchPort) -> CatalogRecord:
    """Fetch and parse a record from the catalog index."""
    source = await search.get_record(dataset_id)
    if source is None:
        raise NotFoundError(f"Resource with ID {dataset_id} not found")
    try:
        return parse_record(source)
    except ValidationError as e:
        raise NotFoundError(f"Resource with ID {dataset_id} has an unreadable record: {e}") from e


def _resolve_candidates(
    record: CatalogRecord,
    target: DownloadTarget,
    context: ResolverContext,
) -> list[Candidate]:
    """Ranked candidates with URLs, or the single pinned candidate."""
    if target.is_pinned:
        candidate = select_target(record.links, target, context.tables, context.flags)
        # Pinned candidates fail closed: builder errors propagate
        return [candidate.with_url(build_url(candidate, context.wfs_version))]

    ranked = rank(record.links, context.tables, context.flags)
    if not ranked:
        raise NotFoundError(f"Resource with ID {record.uuid} has no downloadable link")
    return materialize(ranked, context.wfs_version)


# ============================================================================
# Error Handling
# ============================================================================

_ERROR_CODES: dict[type[Exception], str] = {
    NotFoundError: "NOT_FOUND",
    UnsupportedFormatError: "UNSUPPORTED_FORMAT",
    MissingProjectionError: "MISSING_PROJECTION",
    DownloadExhaustedError: "DOWNLOAD_EXHAUSTED",
    TargetingValidationError: "INVALID_TARGET",
    DownloadCancelledError: "CANCELLED",
    CatalogSearchError: "CATALOG_UNAVAILABLE",
}


def classify_error(error: Exception) -> str:
    """Stable error code of a failure."""
    for error_type, code in _ERROR_CODES.items():
        if isinstance(error, error_type):
            return code
    return "INTERNAL_ERROR"
