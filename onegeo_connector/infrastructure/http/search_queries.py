"""Elasticsearch request bodies for the catalog index."""

from onegeo_connector.application.services.priority import PriorityTables
from onegeo_connector.domain.types import SearchQuery

MAX_PAGE_SIZE = 10000
RECORD_TYPES = ["dataset", "nonGeographicDataset"]
PUBLIC_PERMISSION_LEVEL = 3

_SEARCH_FIELDS = [
    "data_and_metadata",
    "metadata-fr.title^5",
    "metadata-fr.abstract^3",
    "content-fr.title^5",
    "content-fr.excerpt^3",
    "content-fr.plaintext",
]


def _full_text(query: str) -> SearchQuery:
    return {
        "bool": {
            "should": [
                {
                    "query_string": {
                        "query": query or "*",
                        "fields": _SEARCH_FIELDS,
                        "analyzer": "my_search_analyzer",
                        "fuzziness": "AUTO",
                        "minimum_should_match": "90%",
                        "default_operator": "AND",
                        "boost": 5,
                    }
                }
            ]
        }
    }


def _supported_links(tables: PriorityTables) -> SearchQuery:
    """At least one link with a known service or a known format."""
    services = [
        {"term": {"metadata-fr.link.service.keyword": service}}
        for service in tables.services
        if service
    ]
    formats = [
        {"term": {"metadata-fr.link.formats.keyword": format_tag}}
        for format_tag in tables.formats
    ]
    return {"bool": {"should": services + formats}}


def _published_records(query: str, tables: PriorityTables) -> SearchQuery:
    return {
        "must": [
            _full_text(query),
            {"term": {"is_metadata": True}},
            {"term": {"editorial-metadata.defaultPermissionLevel": PUBLIC_PERMISSION_LEVEL}},
            _supported_links(tables),
        ],
        "must_not": [{"term": {"content-fr.status.keyword": "draft"}}],
    }


def build_search_query(query: str, page: int, size: int, tables: PriorityTables) -> SearchQuery:
    """Paginated full-text search, one hit per record uuid."""
    size = min(size, MAX_PAGE_SIZE)
    return {
        "from": (max(page, 1) - 1) * size,
        "size": size,
        "track_total_hits": True,
        "query": {"bool": _published_records(query, tables)},
        "_source": {"excludes": ["_dataset"]},
        "collapse": {"field": "uuid.keyword"},
        "post_filter": {"terms": {"type.keyword": RECORD_TYPES}},
    }


def build_count_query(query: str, tables: PriorityTables) -> SearchQuery:
    """Distinct record count for the same search."""
    bool_query = _published_records(query, tables)
    bool_query["filter"] = {"terms": {"type.keyword": RECORD_TYPES}}
    return {
        "size": 0,
        "track_total_hits": False,
        "query": {"bool": bool_query},
        "aggs": {
            "unique_datasets": {
                "cardinality": {"field": "uuid.keyword", "precision_threshold": 40000}
            }
        },
    }


def build_record_query(dataset_id: str) -> SearchQuery:
    """Lookup of one record by uuid."""
    return {
        "size": 1,
        "query": {
            "bool": {
                "must": [
                    {"term": {"uuid.keyword": dataset_id}},
                    {"term": {"is_metadata": True}},
                ]
            }
        },
        "_source": {"excludes": ["_dataset"]},
    }
