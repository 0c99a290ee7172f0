"""Protocol specific download URL builders."""

from typing import Callable
from urllib.parse import quote

import structlog

from onegeo_connector.application.services.priority import (
    AFS_MEDIA_TYPES,
    FILE_EXTENSIONS,
    WFS_OUTPUT_FORMATS,
)
from onegeo_connector.domain.entities import Candidate
from onegeo_connector.domain.enums import ServiceKind
from onegeo_connector.domain.errors import MissingProjectionError, UnsupportedFormatError

logger = structlog.get_logger()

DEFAULT_WFS_VERSION = "2.0.0"

UrlTemplate = Callable[[Candidate, str], str]

# Strategy pattern: map service tags to URL templates
_URL_TEMPLATES: dict[str | None, UrlTemplate] = {}


def _register_template(service: str | None, template: UrlTemplate) -> None:
    """Register a URL template for a service tag."""
    _URL_TEMPLATES[service] = template


def build_url(candidate: Candidate, wfs_version: str = DEFAULT_WFS_VERSION) -> str:
    """Build the download URL of a candidate. Pure, performs no I/O."""
    service = candidate.link.service
    template = _URL_TEMPLATES.get(service)
    if template is None:
        raise UnsupportedFormatError(service, candidate.format)
    return template(candidate, wfs_version)


def materialize(
    candidates: list[Candidate],
    wfs_version: str = DEFAULT_WFS_VERSION,
) -> list[Candidate]:
    """Resolve URLs for ranked candidates, dropping those no template can serve."""
    materialized = []
    for candidate in candidates:
        try:
            materialized.append(candidate.with_url(build_url(candidate, wfs_version)))
        except (UnsupportedFormatError, MissingProjectionError) as e:
            logger.warning(
                "candidate_skipped",
                service=candidate.link.service,
                format=candidate.format,
                link_url=candidate.link.url,
                error=str(e),
            )
    return materialized


def file_extension(format_tag: str) -> str:
    """Canonical file extension of a format, or empty string if unknown."""
    return FILE_EXTENSIONS.get(format_tag, "")


def _bulk_file_url(candidate: Candidate, wfs_version: str) -> str:
    """WS: {url}/{name}/all{extension}."""
    extension = FILE_EXTENSIONS.get(candidate.format)
    if extension is None:
        raise UnsupportedFormatError(candidate.link.service, candidate.format)
    base = candidate.link.url.rstrip("/")
    return f"{base}/{candidate.link.name}/all{extension}"


_register_template(ServiceKind.WS.value, _bulk_file_url)


def _feature_query_url(candidate: Candidate, wfs_version: str) -> str:
    """WFS: GetFeature request on the link's type name."""
    output_format = WFS_OUTPUT_FORMATS.get(candidate.format)
    if output_format is None:
        raise UnsupportedFormatError(candidate.link.service, candidate.format)

    params = [
        ("SERVICE", ServiceKind.WFS.value),
        ("VERSION", wfs_version),
        ("request", "GetFeature"),
        ("typename", candidate.link.name),
        ("outputFormat", output_format),
    ]
    query = "&".join(f"{key}={quote(value, safe=':')}" for key, value in params)
    separator = "&" if "?" in candidate.link.url else "?"
    return f"{candidate.link.url}{separator}{query}"


_register_template(ServiceKind.WFS.value, _feature_query_url)


def _attribute_service_url(candidate: Candidate, wfs_version: str) -> str:
    """AFS: {url}{name}/items?crs=...&f=...&sortby=gid."""
    media_type = AFS_MEDIA_TYPES.get(candidate.format)
    if media_type is None:
        raise UnsupportedFormatError(candidate.link.service, candidate.format)
    if not candidate.link.projections:
        raise MissingProjectionError(candidate.link.name, candidate.link.url)

    base = candidate.link.url if candidate.link.url.endswith("/") else candidate.link.url + "/"
    crs = quote(candidate.link.projections[0], safe=":")
    return f"{base}{candidate.link.name}/items?crs={crs}&f={quote(media_type, safe='')}&sortby=gid"


_register_template(ServiceKind.AFS.value, _attribute_service_url)


def _direct_url(candidate: Candidate, wfs_version: str) -> str:
    """Direct link: the URL verbatim."""
    return candidate.link.url


_register_template(None, _direct_url)
