"""Domain entities."""

from dataclasses import dataclass, field, replace


@dataclass(frozen=True)
class Link:
    """One delivery option advertised by a catalog record."""

    url: str
    formats: tuple[str, ...]
    name: str = ""
    service: str | None = None
    description: str | None = None
    is_main: bool = False
    projections: tuple[str, ...] = ()

    @property
    def is_direct(self) -> bool:
        return self.service is None

    @property
    def service_key(self) -> str:
        """Key used to re-target this link; direct links are keyed by URL."""
        return self.service if self.service is not None else self.url


@dataclass(frozen=True)
class ImageRef:
    """Image entry attached to a record."""

    url: str
    type: str | None = None
    name: str | None = None


@dataclass(frozen=True)
class License:
    """License of a record."""

    title: str
    href: str | None = None


@dataclass(frozen=True)
class CatalogRecord:
    """One dataset of the catalog."""

    uuid: str
    slug: str
    title: str
    abstract: str | None = None
    license: License | None = None
    frequency: str | None = None
    keywords: tuple[str, ...] = ()
    images: tuple[ImageRef, ...] = ()
    links: tuple[Link, ...] = ()


@dataclass(frozen=True)
class Candidate:
    """A (link, format) pairing considered for download."""

    link: Link
    format: str
    sort_key: tuple[int, ...]
    format_rank: int
    url: str = ""

    def with_url(self, url: str) -> "Candidate":
        return replace(self, url=url)


@dataclass(frozen=True)
class DownloadTarget:
    """Explicit service/format pinned by the caller."""

    dataset_id: str
    service: str = ""
    format: str = ""

    @property
    def is_pinned(self) -> bool:
        return bool(self.service or self.format)


@dataclass(frozen=True)
class DownloadResult:
    """Locally stored file bound to the candidate that produced it."""

    file_path: str
    candidate: Candidate
    size_bytes: int
    content_type: str | None = None


@dataclass(frozen=True)
class ResourceDescriptor:
    """Resource returned to the host after a successful download."""

    id: str
    title: str
    description: str
    file_path: str
    format: str
    frequency: str
    keywords: tuple[str, ...]
    origin: str
    license: License | None = None
    image: str | None = None
    slug: str | None = None


@dataclass(frozen=True)
class RecordSummary:
    """One listing entry."""

    id: str
    title: str
    description: str
    format: str
    type: str = "resource"


@dataclass(frozen=True)
class ResourceList:
    """Listing page."""

    count: int
    results: list[RecordSummary]
    path: list[dict[str, str]] = field(default_factory=list)
