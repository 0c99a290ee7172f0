"""Catalog DTOs."""

import structlog
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator

from onegeo_connector.domain.entities import CatalogRecord, ImageRef, License, Link
from onegeo_connector.domain.types import RawRecordSource

logger = structlog.get_logger()


class LinkModel(BaseModel):
    """Link structure in an indexed record."""

    model_config = ConfigDict(populate_by_name=True)

    url: str = Field(min_length=1)
    name: str = ""
    service: str | None = None
    formats: list[str] = Field(default_factory=list)
    description: str | None = None
    is_main: bool = Field(False, alias="_main")
    projections: list[str] = Field(default_factory=list)

    @field_validator("service", "description", mode="before")
    @classmethod
    def _blank_to_none(cls, value: str | None) -> str | None:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    def to_entity(self) -> Link:
        return Link(
            url=self.url,
            name=self.name,
            service=self.service,
            formats=tuple(self.formats),
            description=self.description,
            is_main=self.is_main,
            projections=tuple(self.projections),
        )


class ImageModel(BaseModel):
    """Image structure in an indexed record."""

    url: str = ""
    type: str | None = None
    name: str | None = None


class LicenseModel(BaseModel):
    """License given as an object."""

    title: str = ""
    href: str | None = None


class MetadataModel(BaseModel):
    """Localized metadata block ("metadata-fr")."""

    model_config = ConfigDict(populate_by_name=True)

    title: str = ""
    # Older records carry the misspelled key
    abstract: str | None = Field(None, validation_alias=AliasChoices("abstract", "abstarct"))
    license: str | LicenseModel | None = None
    update_frequency: str | None = Field(None, alias="updateFrequency")
    keywords: list[str] = Field(default_factory=list)
    image: list[ImageModel] = Field(default_factory=list)
    link: list = Field(default_factory=list)


class RecordSourceModel(BaseModel):
    """_source of an indexed record."""

    model_config = ConfigDict(populate_by_name=True)

    uuid: str = Field(min_length=1)
    slug: str | None = None
    metadata: MetadataModel = Field(default_factory=MetadataModel, alias="metadata-fr")


def _parse_links(uuid: str, raw_links: list) -> tuple[Link, ...]:
    links = []
    for index, raw_link in enumerate(raw_links):
        try:
            links.append(LinkModel.model_validate(raw_link).to_entity())
        except ValidationError as e:
            logger.warning("invalid_link_dropped", uuid=uuid, index=index, error=str(e))
    return tuple(links)


def _parse_license(value: str | LicenseModel | None) -> License | None:
    if value is None:
        return None
    if isinstance(value, LicenseModel):
        return License(title=value.title, href=value.href) if value.title else None
    return License(title=value) if value.strip() else None


def parse_record(source: RawRecordSource) -> CatalogRecord:
    """Parse an indexed record into a catalog record."""
    model = RecordSourceModel.model_validate(source)
    metadata = model.metadata
    return CatalogRecord(
        uuid=model.uuid,
        slug=model.slug or model.uuid,
        title=metadata.title,
        abstract=metadata.abstract,
        license=_parse_license(metadata.license),
        frequency=metadata.update_frequency,
        keywords=tuple(metadata.keywords),
        images=tuple(
            ImageRef(url=image.url, type=image.type, name=image.name) for image in metadata.image
        ),
        links=_parse_links(model.uuid, metadata.link),
    )
