"""Unit tests for priority tables."""

from onegeo_connector.application.services.priority import (
    DEFAULT_TABLES,
    FORMAT_PRIORITY,
    PriorityTables,
    ResolverFlags,
)


def test_default_tables_rank_known_entries():
    """Test known services and formats rank by table position."""
    assert DEFAULT_TABLES.service_rank("WS") == 0
    assert DEFAULT_TABLES.service_rank("WFS") == 1
    assert DEFAULT_TABLES.service_rank("AFS") == 2
    assert DEFAULT_TABLES.service_rank(None) == 3
    assert DEFAULT_TABLES.format_rank("GeoJSON") == 0
    assert DEFAULT_TABLES.format_rank("KML") == len(FORMAT_PRIORITY) - 1


def test_unknown_entries_rank_after_table():
    """Test unknown services and formats rank at the table length."""
    assert DEFAULT_TABLES.service_rank("WMS") == len(DEFAULT_TABLES.services)
    assert DEFAULT_TABLES.format_rank("PDF") == len(DEFAULT_TABLES.formats)
    assert not DEFAULT_TABLES.supports_service("WMS")
    assert not DEFAULT_TABLES.supports_format("PDF")


def test_from_flags_drops_afs_and_markup_formats():
    """Test capability flags shrink the effective tables."""
    tables = PriorityTables.from_flags(ResolverFlags(support_afs=False, support_markup_formats=False))

    assert "AFS" not in tables.services
    assert None in tables.services
    assert "GML" not in tables.formats
    assert "KML" not in tables.formats
    assert tables.formats[0] == "GeoJSON"


def test_sort_formats_deduplicates_and_skips_unknown():
    """Test formats are sorted best first without duplicates."""
    result = DEFAULT_TABLES.sort_formats(["KML", "PDF", "CSV", "GeoJSON", "CSV"])

    assert result == ["GeoJSON", "CSV", "KML"]
