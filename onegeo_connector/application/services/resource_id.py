"""Composite resource identifiers (datasetId:service:format)."""

from onegeo_connector.domain.entities import Candidate, DownloadTarget
from onegeo_connector.domain.errors import TargetingValidationError

SEPARATOR = ":"


def encode(dataset_id: str, service: str = "", format_tag: str = "") -> str:
    """Encode a composite resource identifier."""
    if not dataset_id or SEPARATOR in dataset_id:
        raise TargetingValidationError(f"Invalid dataset id: {dataset_id!r}")
    if SEPARATOR in format_tag:
        raise TargetingValidationError(f"Invalid format: {format_tag!r}")
    return SEPARATOR.join((dataset_id, service, format_tag))


def encode_candidate(dataset_id: str, candidate: Candidate) -> str:
    """Encode the identifier that re-targets exactly this candidate."""
    return encode(dataset_id, candidate.link.service_key, candidate.format)


def decode(resource_id: str) -> DownloadTarget:
    """Decode a raw or composite resource identifier.

    A raw id has no separator. A composite id splits on the first and the
    last separator, so the service part may be a direct link URL that itself
    contains colons.
    """
    if SEPARATOR not in resource_id:
        if not resource_id:
            raise TargetingValidationError("Empty resource id")
        return DownloadTarget(dataset_id=resource_id)

    dataset_id, rest = resource_id.split(SEPARATOR, 1)
    if SEPARATOR not in rest:
        raise TargetingValidationError(
            f"Malformed composite resource id {resource_id!r}: expected datasetId:service:format"
        )
    service, format_tag = rest.rsplit(SEPARATOR, 1)
    if not dataset_id:
        raise TargetingValidationError(f"Malformed composite resource id {resource_id!r}: empty dataset id")
    return DownloadTarget(dataset_id=dataset_id, service=service, format=format_tag)
