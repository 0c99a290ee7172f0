"""Priority tables and resolver capability flags."""

from dataclasses import dataclass

from onegeo_connector.domain.enums import ServiceKind

# Best first. None stands for a direct URL link.
SERVICE_PRIORITY: tuple[str | None, ...] = (
    ServiceKind.WS.value,
    ServiceKind.WFS.value,
    ServiceKind.AFS.value,
    None,
)

FORMAT_PRIORITY: tuple[str, ...] = (
    "GeoJSON",
    "SHAPE-ZIP",
    "Shapefile (zip)",
    "CSV",
    "JSON",
    "Excel non structuré",
    "Microsoft Excel",
    "GML",
    "KML",
)

MARKUP_FORMATS: frozenset[str] = frozenset({"GML", "KML"})

# Format -> file extension, used by the bulk file service and for local file names
FILE_EXTENSIONS: dict[str, str] = {
    "CSV": ".csv",
    "GeoJSON": ".geojson",
    "JSON": ".json",
    "Shapefile (zip)": ".zip",
    "SHAPE-ZIP": ".zip",
    "KML": ".kml",
    "GML": ".gml",
    "Excel non structuré": ".xlsx",
    "Microsoft Excel": ".xls",
}

# Format -> WFS outputFormat code
WFS_OUTPUT_FORMATS: dict[str, str] = {
    "GeoJSON": "application/json",
    "JSON": "application/json",
    "SHAPE-ZIP": "SHAPE-ZIP",
    "Shapefile (zip)": "SHAPE-ZIP",
    "CSV": "csv",
    "GML": "GML3",
    "KML": "KML",
}

# Format -> AFS "f" media type
AFS_MEDIA_TYPES: dict[str, str] = {
    "GeoJSON": "application/geo+json",
    "JSON": "application/json",
    "CSV": "text/csv",
    "KML": "application/vnd.google-earth.kml+xml",
}


@dataclass(frozen=True)
class ResolverFlags:
    """Capability flags selecting the resolver policy variant."""

    main_links_only: bool = False
    direct_links_last: bool = False
    support_afs: bool = True
    support_markup_formats: bool = True
    composite_ids: bool = False


@dataclass(frozen=True)
class PriorityTables:
    """Ordered preference lists for services and formats."""

    services: tuple[str | None, ...] = SERVICE_PRIORITY
    formats: tuple[str, ...] = FORMAT_PRIORITY

    @classmethod
    def from_flags(cls, flags: ResolverFlags) -> "PriorityTables":
        """Build the effective tables for a set of capability flags."""
        services = tuple(
            service
            for service in SERVICE_PRIORITY
            if flags.support_afs or service != ServiceKind.AFS.value
        )
        formats = tuple(
            format_tag
            for format_tag in FORMAT_PRIORITY
            if flags.support_markup_formats or format_tag not in MARKUP_FORMATS
        )
        return cls(services=services, formats=formats)

    def service_rank(self, service: str | None) -> int:
        """Index of a service in the table; unknown services rank at len(table)."""
        try:
            return self.services.index(service)
        except ValueError:
            return len(self.services)

    def format_rank(self, format_tag: str) -> int:
        """Index of a format in the table; unknown formats rank at len(table)."""
        try:
            return self.formats.index(format_tag)
        except ValueError:
            return len(self.formats)

    def supports_service(self, service: str | None) -> bool:
        return service in self.services

    def supports_format(self, format_tag: str) -> bool:
        return format_tag in self.formats

    def sort_formats(self, formats: list[str] | tuple[str, ...]) -> list[str]:
        """Known formats of a link, best first, without duplicates."""
        known = {format_tag for format_tag in formats if self.supports_format(format_tag)}
        return sorted(known, key=self.format_rank)


DEFAULT_TABLES = PriorityTables()
