"""Domain errors."""

from __future__ import annotations

from typing import TYPE_CHECKING

from onegeo_connector.domain.enums import FailureReason

if TYPE_CHECKING:
    from onegeo_connector.domain.entities import Candidate


class DomainError(Exception):
    """Base domain error."""

    # Portal page of the record, attached once it is known
    origin: str | None = None


class NotFoundError(DomainError):
    """Record, service or format does not exist."""


class UnsupportedFormatError(DomainError):
    """Format has no mapping for the requested protocol."""

    def __init__(self, service: str | None, format_tag: str) -> None:
        self.service = service
        self.format_tag = format_tag
        super().__init__(f"Unsupported format {format_tag!r} for service {service or 'direct'!r}")


class MissingProjectionError(DomainError):
    """Attribute/tile link declares no coordinate reference system."""

    def __init__(self, link_name: str, link_url: str) -> None:
        self.link_name = link_name
        self.link_url = link_url
        super().__init__(f"Missing projection for AFS link {link_name!r} at {link_url}")


class TargetingValidationError(DomainError):
    """Caller supplied malformed targeting parameters."""


class CatalogSearchError(DomainError):
    """Catalog search endpoint could not be queried."""


class DownloadCancelledError(DomainError):
    """Download was cancelled by the caller."""


class TransportError(DomainError):
    """Failure of one candidate, bound to that candidate."""

    def __init__(
        self,
        candidate: Candidate,
        reason: FailureReason,
        detail: str,
    ) -> None:
        self.candidate = candidate
        self.reason = reason
        self.detail = detail
        super().__init__(f"{reason.value} on {candidate.url}: {detail}")

    @property
    def url(self) -> str:
        return self.candidate.url


class DownloadExhaustedError(DomainError):
    """Every ranked candidate failed."""

    def __init__(
        self,
        dataset_id: str,
        failures: list[TransportError],
        origin: str | None = None,
    ) -> None:
        self.dataset_id = dataset_id
        self.failures = failures
        self.origin = origin
        message = f"All {self.tried} download candidates failed for dataset {dataset_id}"
        if failures:
            message += ": " + "; ".join(str(failure) for failure in failures)
        if origin:
            message += f" (origin: {origin})"
        super().__init__(message)

    @property
    def tried(self) -> int:
        return len(self.failures)

    @property
    def attempted_urls(self) -> list[str]:
        return [failure.url for failure in self.failures]
