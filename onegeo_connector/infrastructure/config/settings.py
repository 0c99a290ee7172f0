"""Application settings."""

from pydantic_settings import BaseSettings, SettingsConfigDict

from onegeo_connector.application.services.priority import ResolverFlags


class Settings(BaseSettings):
    """Application settings."""

    catalog_url: str = ""
    search_path: str = "fr/indexer/elastic/_search/"
    search_timeout_seconds: float = 30.0
    # Bounded per-request timeout so one candidate cannot hang the fallback loop
    request_timeout_seconds: float = 30.0
    probe_timeout_seconds: float = 10.0
    download_chunk_size: int = 64 * 1024
    progress_interval_bytes: int = 1024 * 1024
    wfs_version: str = "2.0.0"

    # Resolver capability flags
    main_links_only: bool = False
    direct_links_last: bool = False
    support_afs: bool = True
    support_markup_formats: bool = True
    composite_ids: bool = False

    log_level: str = "INFO"
    log_json: bool = False
    metrics_enabled: bool = False
    prometheus_port: int = 9300

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        env_prefix="ONEGEO_",
        # Allow extra fields to be loaded but not validated
        extra="ignore",
    )

    def resolver_flags(self) -> ResolverFlags:
        """Capability flags for the resolver."""
        return ResolverFlags(
            main_links_only=self.main_links_only,
            direct_links_last=self.direct_links_last,
            support_afs=self.support_afs,
            support_markup_formats=self.support_markup_formats,
            composite_ids=self.composite_ids,
        )
