"""List catalog records as host resources."""

import structlog
from pydantic import ValidationError

from onegeo_connector.application.dto.catalog import parse_record
from onegeo_connector.application.dto.resources import ListResourcesRequest
from onegeo_connector.application.services.priority import PriorityTables, ResolverFlags
from onegeo_connector.application.services.projector import summarize
from onegeo_connector.application.services.ranking import rank
from onegeo_connector.application.services.resource_id import encode_candidate
from onegeo_connector.application.services.url_builder import materialize
from onegeo_connector.domain.entities import RecordSummary, ResourceList
from onegeo_connector.domain.errors import TargetingValidationError
from onegeo_connector.domain.ports import CatalogSearchPort
from onegeo_connector.domain.types import RawRecordSource
from onegeo_connector.infrastructure.observability.metrics import listings_served

logger = structlog.get_logger()


async def run(
    request: ListResourcesRequest,
    search: CatalogSearchPort,
    tables: PriorityTables,
    flags: ResolverFlags,
) -> ResourceList:
    """List one page of downloadable records."""
    page = await search.search(request.q or "*", request.page, request.size)

    results = []
    for source in page["hits"]:
        summary = _summarize_hit(source, tables, flags)
        if summary is not None:
            results.append(summary)

    logger.info(
        "resources_listed",
        query=request.q,
        page=request.page,
        size=request.size,
        count=page["count"],
        listed=len(results),
        skipped=len(page["hits"]) - len(results),
    )
    listings_served.inc()
    # Flat catalog: no folders, so the breadcrumb is always empty
    return ResourceList(count=page["count"], results=results, path=[])


def _summarize_hit(
    source: RawRecordSource,
    tables: PriorityTables,
    flags: ResolverFlags,
) -> RecordSummary | None:
    """Listing entry of a hit, or None when it has nothing to download."""
    try:
        record = parse_record(source)
    except ValidationError as e:
        logger.warning("invalid_record_skipped", error=str(e))
        return None

    candidates = rank(record.links, tables, flags)
    if not candidates:
        logger.info("record_skipped_no_candidate", uuid=record.uuid)
        return None

    resource_id = None
    if flags.composite_ids:
        buildable = materialize(candidates)
        if not buildable:
            logger.info("record_skipped_no_buildable_candidate", uuid=record.uuid)
            return None
        try:
            resource_id = encode_candidate(record.uuid, buildable[0])
        except TargetingValidationError as e:
            logger.warning("record_skipped_unencodable_id", uuid=record.uuid, error=str(e))
            return None

    return summarize(record, candidates, resource_id)
