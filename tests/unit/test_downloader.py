"""Unit tests for the fallback downloader."""

import asyncio
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
import pytest_asyncio

from onegeo_connector.domain.entities import Candidate, Link
from onegeo_connector.domain.enums import FailureReason
from onegeo_connector.domain.errors import DownloadCancelledError, DownloadExhaustedError
from onegeo_connector.domain.ports import TaskLogPort
from onegeo_connector.infrastructure.http.downloader import HttpDownloader, is_html, safe_file_stem

HTML_URL = "https://portal.example.org/login"
DOWN_URL = "https://down.example.org/routes.csv"
GOOD_URL = "https://files.example.org/ws/routes/all.csv"


def _candidate(url: str, service: str | None = "WS", format_tag: str = "CSV") -> Candidate:
    link = Link(url=url, formats=(format_tag,), name="routes", service=service)
    return Candidate(link=link, format=format_tag, sort_key=(3, 0), format_rank=3, url=url)


def _handler(request: httpx.Request) -> httpx.Response:
    url = str(request.url)
    if url == HTML_URL:
        return httpx.Response(200, headers={"content-type": "text/html; charset=utf-8"}, content=b"<html></html>")
    if url == DOWN_URL:
        raise httpx.ConnectError("connection refused", request=request)
    if url == GOOD_URL:
        return httpx.Response(200, headers={"content-type": "text/csv"}, content=b"id,name\n1,A7\n")
    if "timeout" in url:
        raise httpx.ReadTimeout("read timed out", request=request)
    return httpx.Response(404, content=b"not found")


@pytest.fixture
def mock_log():
    """Create mock task log."""
    log = MagicMock(spec=TaskLogPort)
    log.step = AsyncMock()
    log.info = AsyncMock()
    log.warning = AsyncMock()
    log.error = AsyncMock()
    log.task = AsyncMock()
    log.progress = AsyncMock()
    return log


@pytest_asyncio.fixture
async def client():
    """Create HTTP client over a mock transport."""
    async with httpx.AsyncClient(transport=httpx.MockTransport(_handler)) as client:
        yield client


@pytest.fixture
def downloader(client):
    """Create downloader instance."""
    return HttpDownloader(client, timeout=5.0, chunk_size=4, progress_interval_bytes=4)


@pytest.mark.parametrize(
    "content_type,expected",
    [
        ("text/html", True),
        ("TEXT/HTML; charset=utf-8", True),
        ("application/xhtml+xml", True),
        ("text/csv", False),
        ("application/json", False),
        (None, False),
    ],
)
def test_is_html(content_type, expected):
    """Test HTML detection from the declared content type."""
    assert is_html(content_type) is expected


@pytest.mark.asyncio
async def test_fetch_falls_back_until_success(downloader, mock_log, tmp_path):
    """Test failed candidates are skipped and the result is bound to the winner."""
    candidates = [_candidate(HTML_URL), _candidate(DOWN_URL, service=None), _candidate(GOOD_URL)]

    result = await downloader.fetch("abc123", candidates, str(tmp_path), "routes", mock_log)

    assert result.candidate is candidates[2]
    assert result.file_path == str(tmp_path / "routes.csv")
    assert Path(result.file_path).read_bytes() == b"id,name\n1,A7\n"
    assert result.size_bytes == 13
    assert result.content_type == "text/csv"
    assert mock_log.warning.call_count == 2
    assert mock_log.info.call_count == 3
    assert not (tmp_path / "routes.csv.part").exists()


@pytest.mark.asyncio
async def test_fetch_reports_progress(downloader, mock_log, tmp_path):
    """Test progress is reported while the body streams."""
    await downloader.fetch("abc123", [_candidate(GOOD_URL)], str(tmp_path), "routes", mock_log)

    mock_log.task.assert_called_once()
    assert mock_log.task.call_args[0][2] == 13
    assert mock_log.progress.call_count >= 2
    assert mock_log.progress.call_args[0][1] == 13


@pytest.mark.asyncio
async def test_fetch_exhausted(downloader, mock_log, tmp_path):
    """Test every failure is reported when no candidate succeeds."""
    candidates = [
        _candidate(HTML_URL),
        _candidate("https://files.example.org/timeout.csv"),
        _candidate("https://files.example.org/missing.csv"),
    ]

    with pytest.raises(DownloadExhaustedError) as exc_info:
        await downloader.fetch(
            "abc123",
            candidates,
            str(tmp_path),
            "routes",
            mock_log,
            origin="https://portal.example.org/fr/dataset/routes",
        )

    error = exc_info.value
    assert error.tried == 3
    assert [failure.reason for failure in error.failures] == [
        FailureReason.HTML_RESPONSE,
        FailureReason.TIMEOUT,
        FailureReason.HTTP_STATUS,
    ]
    assert error.attempted_urls == [c.url for c in candidates]
    assert "https://portal.example.org/fr/dataset/routes" in str(error)
    assert list(tmp_path.iterdir()) == []


@pytest.mark.asyncio
async def test_fetch_without_candidates(mock_log, tmp_path):
    """Test an empty candidate list fails without any request."""
    handler = MagicMock()
    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        downloader = HttpDownloader(client)

        with pytest.raises(DownloadExhaustedError) as exc_info:
            await downloader.fetch("abc123", [], str(tmp_path / "scratch"), "routes", mock_log)

    assert exc_info.value.tried == 0
    handler.assert_not_called()
    assert not (tmp_path / "scratch").exists()


@pytest.mark.asyncio
async def test_fetch_cancelled(downloader, mock_log, tmp_path):
    """Test a set cancel event stops the loop."""
    cancel_event = asyncio.Event()
    cancel_event.set()

    with pytest.raises(DownloadCancelledError):
        await downloader.fetch(
            "abc123",
            [_candidate(GOOD_URL)],
            str(tmp_path),
            "routes",
            mock_log,
            cancel_event=cancel_event,
        )

    mock_log.info.assert_not_called()
    assert not (tmp_path / "routes.csv").exists()


@pytest.mark.parametrize(
    "file_stem,expected",
    [
        ("routes", "routes"),
        ("../escaped", "escaped"),
        ("a/b\\c", "a_b_c"),
        ("routes départementales", "routes_départementales"),
        ("..", "abc123"),
        ("", "abc123"),
    ],
)
def test_safe_file_stem(file_stem, expected):
    """Test slugs are reduced to a name inside the scratch directory."""
    assert safe_file_stem(file_stem, "abc123") == expected


@pytest.mark.asyncio
async def test_fetch_keeps_file_inside_scratch_dir(downloader, mock_log, tmp_path):
    """Test a slug with path segments cannot write outside tmp_dir."""
    scratch = tmp_path / "scratch"

    result = await downloader.fetch("abc123", [_candidate(GOOD_URL)], str(scratch), "../escaped", mock_log)

    assert result.file_path == str(scratch / "escaped.csv")
    assert not (tmp_path / "escaped.csv").exists()

    nested = await downloader.fetch("abc123", [_candidate(GOOD_URL)], str(scratch), "dir/routes", mock_log)

    assert nested.file_path == str(scratch / "dir_routes.csv")
    assert Path(nested.file_path).read_bytes() == b"id,name\n1,A7\n"


@pytest.mark.asyncio
async def test_fetch_skips_malformed_url(downloader, mock_log, tmp_path):
    """Test a link with an unparsable URL fails alone and the next candidate wins."""
    candidates = [_candidate("http://host:abc/f.csv"), _candidate(GOOD_URL)]

    result = await downloader.fetch("abc123", candidates, str(tmp_path), "routes", mock_log)

    assert result.candidate is candidates[1]
    assert mock_log.warning.call_count == 1
    assert mock_log.warning.call_args.kwargs["reason"] == FailureReason.NETWORK.value


@pytest.mark.asyncio
async def test_fetch_cancelled_without_candidates(mock_log, tmp_path):
    """Test cancellation wins over exhaustion when nothing is left to try."""
    cancel_event = asyncio.Event()
    cancel_event.set()
    async with httpx.AsyncClient(transport=httpx.MockTransport(_handler)) as client:
        downloader = HttpDownloader(client)

        with pytest.raises(DownloadCancelledError):
            await downloader.fetch("abc123", [], str(tmp_path), "routes", mock_log, cancel_event=cancel_event)
