"""Ports (interfaces) for infrastructure adapters."""

import asyncio
from abc import ABC, abstractmethod

from onegeo_connector.domain.entities import Candidate, DownloadResult
from onegeo_connector.domain.types import JsonValue, RawRecordSource, SearchPage


class CatalogSearchPort(ABC):
    """Port for querying the catalog index."""

    @abstractmethod
    async def search(self, query: str, page: int, size: int) -> SearchPage:
        """Search records matching a free-text query."""

    @abstractmethod
    async def get_record(self, dataset_id: str) -> RawRecordSource | None:
        """Get one record by its uuid, or None if it does not exist."""


class TaskLogPort(ABC):
    """Port for the host's structured task log."""

    @abstractmethod
    async def step(self, message: str) -> None:
        """Start a new step."""

    @abstractmethod
    async def info(self, message: str, **context: JsonValue) -> None:
        """Log an informational message."""

    @abstractmethod
    async def warning(self, message: str, **context: JsonValue) -> None:
        """Log a warning."""

    @abstractmethod
    async def error(self, message: str, **context: JsonValue) -> None:
        """Log an error."""

    @abstractmethod
    async def task(self, key: str, message: str, total: int | None = None) -> None:
        """Declare a long running task."""

    @abstractmethod
    async def progress(self, key: str, value: int) -> None:
        """Report progress of a task declared with task()."""


class DownloaderPort(ABC):
    """Port for retrieving candidates with fallback."""

    @abstractmethod
    async def fetch(
        self,
        dataset_id: str,
        candidates: list[Candidate],
        tmp_dir: str,
        file_stem: str,
        log: TaskLogPort,
        origin: str | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> DownloadResult:
        """Download the first candidate that succeeds."""


class OriginProberPort(ABC):
    """Port for discovering the human facing portal page."""

    @abstractmethod
    async def resolve_origin(self, base_url: str) -> str | None:
        """Return the portal dataset page prefix, or None if no convention answers."""
