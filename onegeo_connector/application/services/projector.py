"""Projection of catalog records into resource descriptors and listing summaries."""

from onegeo_connector.application.services.url_builder import file_extension
from onegeo_connector.domain.entities import (
    Candidate,
    CatalogRecord,
    RecordSummary,
    ResourceDescriptor,
)
from onegeo_connector.domain.enums import Frequency

THUMBNAIL_TAG = "thumbnail"
FORMAT_HINT_LIMIT = 3

# ISO 19115 maintenance frequency codes seen on portals
_FREQUENCY_ALIASES: dict[str, Frequency] = {
    "continual": Frequency.CONTINUOUS,
    "fortnightly": Frequency.BIWEEKLY,
    "biannually": Frequency.SEMIANNUAL,
    "annually": Frequency.ANNUAL,
    "asneeded": Frequency.IRREGULAR,
}

_FREQUENCIES: dict[str, Frequency] = {member.value.lower(): member for member in Frequency}


def normalize_frequency(value: str | None) -> str:
    """Map a portal frequency onto the fixed enumeration; anything else is empty."""
    if not value:
        return ""
    key = value.strip().lower()
    frequency = _FREQUENCIES.get(key) or _FREQUENCY_ALIASES.get(key)
    return frequency.value if frequency else ""


def thumbnail_url(record: CatalogRecord) -> str | None:
    """URL of the record's thumbnail image, if any."""
    for image in record.images:
        if THUMBNAIL_TAG in (image.type, image.name) and image.url:
            return image.url
    return None


def origin_url(origin_prefix: str | None, record: CatalogRecord) -> str:
    """Portal page of a record, empty when the portal convention is unknown."""
    if not origin_prefix:
        return ""
    return f"{origin_prefix.rstrip('/')}/{record.slug}"


def project(
    record: CatalogRecord,
    candidate: Candidate,
    file_path: str,
    origin: str,
    resource_id: str | None = None,
) -> ResourceDescriptor:
    """Assemble the resource descriptor of a downloaded record."""
    return ResourceDescriptor(
        id=resource_id or record.uuid,
        slug=record.slug,
        title=record.title,
        description=candidate.link.description or record.abstract or "",
        file_path=file_path,
        format=candidate.format,
        frequency=normalize_frequency(record.frequency),
        license=record.license,
        keywords=record.keywords,
        origin=origin,
        image=thumbnail_url(record),
    )


def format_hint(candidates: list[Candidate], limit: int = FORMAT_HINT_LIMIT) -> str:
    """Short comma separated list of file extensions, best first."""
    extensions: list[str] = []
    for candidate in sorted(candidates, key=lambda c: c.format_rank):
        extension = file_extension(candidate.format).lstrip(".")
        if extension and extension not in extensions:
            extensions.append(extension)

    hint = ", ".join(extensions[:limit])
    if len(extensions) > limit:
        hint += ".."
    return hint


def summarize(
    record: CatalogRecord,
    candidates: list[Candidate],
    resource_id: str | None = None,
) -> RecordSummary:
    """Listing entry of a record that has at least one candidate."""
    first_link = record.links[0] if record.links else None
    description = (first_link.description if first_link else None) or record.abstract or ""
    return RecordSummary(
        id=resource_id or record.uuid,
        title=record.title,
        description=description,
        format=format_hint(candidates),
    )
