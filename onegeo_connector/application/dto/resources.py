"""Host facing request and response DTOs."""

from pydantic import BaseModel, ConfigDict, Field

from onegeo_connector.domain.entities import ResourceDescriptor, ResourceList


class ListResourcesRequest(BaseModel):
    """Search/list request from the host."""

    model_config = ConfigDict(populate_by_name=True)

    q: str = "*"
    page: int = Field(1, ge=1)
    size: int = Field(20, ge=1, le=10000)
    current_folder_id: str | None = Field(None, alias="currentFolderId")


class GetResourceRequest(BaseModel):
    """Resource fetch request from the host."""

    model_config = ConfigDict(populate_by_name=True)

    resource_id: str = Field(alias="resourceId", min_length=1)
    tmp_dir: str = Field(alias="tmpDir")
    service: str | None = None
    format: str | None = None


class LicenseResponse(BaseModel):
    """License of a resource."""

    title: str
    href: str | None = None


class ResourceResponse(BaseModel):
    """Downloaded resource returned to the host."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    slug: str | None = None
    title: str
    description: str
    file_path: str = Field(alias="filePath")
    format: str
    frequency: str
    license: LicenseResponse | None = None
    keywords: list[str]
    origin: str
    image: str | None = None

    @classmethod
    def from_entity(cls, descriptor: ResourceDescriptor) -> "ResourceResponse":
        license_ = descriptor.license
        return cls(
            id=descriptor.id,
            slug=descriptor.slug,
            title=descriptor.title,
            description=descriptor.description,
            file_path=descriptor.file_path,
            format=descriptor.format,
            frequency=descriptor.frequency,
            license=LicenseResponse(title=license_.title, href=license_.href) if license_ else None,
            keywords=list(descriptor.keywords),
            origin=descriptor.origin,
            image=descriptor.image,
        )


class ResourceSummaryResponse(BaseModel):
    """One listing entry."""

    id: str
    title: str
    description: str
    format: str
    type: str = "resource"


class ListResourcesResponse(BaseModel):
    """Listing page returned to the host."""

    count: int
    results: list[ResourceSummaryResponse]
    path: list[dict[str, str]] = Field(default_factory=list)

    @classmethod
    def from_entity(cls, resource_list: ResourceList) -> "ListResourcesResponse":
        return cls(
            count=resource_list.count,
            results=[
                ResourceSummaryResponse(
                    id=summary.id,
                    title=summary.title,
                    description=summary.description,
                    format=summary.format,
                    type=summary.type,
                )
                for summary in resource_list.results
            ],
            path=resource_list.path,
        )
