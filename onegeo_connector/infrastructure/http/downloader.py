"""Fallback download loop over ranked candidates."""

import asyncio
import os
import re
from pathlib import Path

import httpx
import structlog

from onegeo_connector.application.services.url_builder import file_extension
from onegeo_connector.domain.entities import Candidate, DownloadResult
from onegeo_connector.domain.enums import FailureReason
from onegeo_connector.domain.errors import (
    DownloadCancelledError,
    DownloadExhaustedError,
    TransportError,
)
from onegeo_connector.domain.ports import DownloaderPort, TaskLogPort
from onegeo_connector.infrastructure.observability.metrics import (
    candidate_attempts,
    download_mb,
    downloads_exhausted,
    downloads_succeeded,
)

logger = structlog.get_logger()

HTML_CONTENT_TYPES = ("text/html", "application/xhtml+xml")
PART_SUFFIX = ".part"
_UNSAFE_NAME_CHARS = re.compile(r"[^\w.-]+")


def is_html(content_type: str | None) -> bool:
    """Whether a declared content type is an HTML document.

    Relies on the header only; a mislabeled server defeats it.
    """
    if not content_type:
        return False
    media_type = content_type.split(";", 1)[0].strip().lower()
    return media_type in HTML_CONTENT_TYPES


def safe_file_stem(file_stem: str, fallback: str) -> str:
    """File name stem confined to the scratch directory.

    Path separators and other unsafe characters collapse to underscores and
    leading dots are dropped, so a record slug cannot climb out of tmp_dir.
    """
    for value in (file_stem, fallback):
        stem = _UNSAFE_NAME_CHARS.sub("_", value or "").strip("._")
        if stem:
            return stem
    return "resource"


def _check_cancelled(cancel_event: asyncio.Event | None, dataset_id: str) -> None:
    if cancel_event is not None and cancel_event.is_set():
        raise DownloadCancelledError(f"Download of dataset {dataset_id} cancelled")


class HttpDownloader(DownloaderPort):
    """Streams the first candidate that answers with a non HTML body.

    Candidates are tried one at a time in rank order. A failed candidate is
    never retried; the loop moves on to the next one.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        timeout: float = 30.0,
        chunk_size: int = 64 * 1024,
        progress_interval_bytes: int = 1024 * 1024,
    ) -> None:
        """Initialize downloader."""
        self.client = client
        self.timeout = timeout
        self.chunk_size = chunk_size
        self.progress_interval_bytes = progress_interval_bytes

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
        failures: list[TransportError] = []
        _check_cancelled(cancel_event, dataset_id)
        file_stem = safe_file_stem(file_stem, dataset_id)

        if candidates:
            Path(tmp_dir).mkdir(parents=True, exist_ok=True)

        for index, candidate in enumerate(candidates, start=1):
            _check_cancelled(cancel_event, dataset_id)
            service = candidate.link.service or "direct"
            await log.info(
                f"Trying candidate {index}/{len(candidates)}",
                url=candidate.url,
                service=service,
                format=candidate.format,
            )

            try:
                result = await self._download(candidate, tmp_dir, file_stem, log, dataset_id, cancel_event)
            except TransportError as e:
                failures.append(e)
                candidate_attempts.labels(service=service, outcome=e.reason.value).inc()
                logger.warning(
                    "candidate_failed",
                    dataset_id=dataset_id,
                    url=candidate.url,
                    service=service,
                    format=candidate.format,
                    reason=e.reason.value,
                    detail=e.detail,
                )
                await log.warning(
                    f"Candidate {index}/{len(candidates)} failed, trying next",
                    url=candidate.url,
                    reason=e.reason.value,
                )
                continue

            candidate_attempts.labels(service=service, outcome="success").inc()
            downloads_succeeded.inc()
            download_mb.observe(result.size_bytes / (1024 * 1024))
            logger.info(
                "candidate_downloaded",
                dataset_id=dataset_id,
                url=candidate.url,
                file_path=result.file_path,
                size_bytes=result.size_bytes,
            )
            return result

        downloads_exhausted.inc()
        logger.error(
            "download_exhausted",
            dataset_id=dataset_id,
            tried=len(failures),
            origin=origin,
        )
        raise DownloadExhaustedError(dataset_id, failures, origin)

    async def _download(
        self,
        candidate: Candidate,
        tmp_dir: str,
        file_stem: str,
        log: TaskLogPort,
        dataset_id: str,
        cancel_event: asyncio.Event | None,
    ) -> DownloadResult:
        """Stream one candidate to disk, raising TransportError on failure."""
        final_path = Path(tmp_dir) / f"{file_stem}{file_extension(candidate.format)}"
        part_path = final_path.with_name(final_path.name + PART_SUFFIX)
        task_key = f"download:{file_stem}"

        try:
            async with self.client.stream("GET", candidate.url, timeout=self.timeout) as response:
                response.raise_for_status()

                content_type = response.headers.get("content-type")
                if is_html(content_type):
                    raise TransportError(
                        candidate,
                        FailureReason.HTML_RESPONSE,
                        f"declared content type {content_type}",
                    )

                content_length = response.headers.get("content-length", "")
                total = int(content_length) if content_length.isdigit() else None
                await log.task(task_key, f"Downloading {candidate.url}", total)

                size = 0
                next_report = self.progress_interval_bytes
                with open(part_path, "wb") as f:
                    async for chunk in response.aiter_bytes(self.chunk_size):
                        _check_cancelled(cancel_event, dataset_id)
                        f.write(chunk)
                        size += len(chunk)
                        if size >= next_report:
                            await log.progress(task_key, size)
                            next_report += self.progress_interval_bytes
                await log.progress(task_key, size)
            os.replace(part_path, final_path)

        except httpx.TimeoutException as e:
            raise TransportError(candidate, FailureReason.TIMEOUT, str(e) or type(e).__name__) from e
        except httpx.HTTPStatusError as e:
            raise TransportError(
                candidate,
                FailureReason.HTTP_STATUS,
                f"HTTP {e.response.status_code}",
            ) from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            # Includes UnsupportedProtocol for relative or non-HTTP link URLs
            raise TransportError(candidate, FailureReason.NETWORK, str(e) or type(e).__name__) from e
        finally:
            # No-op once the body has been moved into place
            part_path.unlink(missing_ok=True)

        return DownloadResult(
            file_path=str(final_path),
            candidate=candidate,
            size_bytes=size,
            content_type=content_type,
        )
