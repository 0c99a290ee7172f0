"""Domain types and aliases."""

from __future__ import annotations

from typing import TYPE_CHECKING, TypedDict

# JSON-serializable types (recursive)
if TYPE_CHECKING:
    JsonValue = str | int | float | bool | None | dict[str, "JsonValue"] | list["JsonValue"]
else:
    JsonValue = str | int | float | bool | None | dict | list

# Elasticsearch request body
SearchQuery = dict[str, JsonValue]


class RawLinkDict(TypedDict, total=False):
    """Link structure in an indexed record."""
    _main: bool
    name: str
    description: str
    formats: list[str]
    service: str
    url: str
    projections: list[str]


class RawImageDict(TypedDict, total=False):
    """Image structure in an indexed record."""
    type: str
    name: str
    url: str


class RawMetadataDict(TypedDict, total=False):
    """Localized metadata block of an indexed record."""
    title: str
    abstract: str
    license: str
    updateFrequency: str
    keywords: list[str]
    image: list[RawImageDict]
    link: list[RawLinkDict]


# "metadata-fr" is not a valid identifier, hence the functional syntax
RawRecordSource = TypedDict(
    "RawRecordSource",
    {"uuid": str, "slug": str, "metadata-fr": RawMetadataDict},
    total=False,
)


class SearchPage(TypedDict):
    """Raw hits and total count returned by the catalog index."""
    hits: list[RawRecordSource]
    count: int
