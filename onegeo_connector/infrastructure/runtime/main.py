"""Main entrypoint."""

import argparse
import asyncio
import json
import signal

import httpx
import structlog

from onegeo_connector.application.services.priority import PriorityTables
from onegeo_connector.domain.errors import DomainError
from onegeo_connector.infrastructure.config.settings import Settings
from onegeo_connector.infrastructure.http.downloader import HttpDownloader
from onegeo_connector.infrastructure.http.elastic_search import ElasticCatalogSearch
from onegeo_connector.infrastructure.http.origin_prober import HttpOriginProber
from onegeo_connector.infrastructure.observability.logging import configure_logging
from onegeo_connector.infrastructure.runtime.health import start_metrics_server
from onegeo_connector.infrastructure.runtime.task_log import StructlogTaskLog
from onegeo_connector.interfaces.runners.catalog_runner import CatalogRunner

logger = structlog.get_logger()

USER_AGENT = "onegeo-connector/0.1.0"

shutdown_event = asyncio.Event()


def signal_handler() -> None:
    """Handle shutdown signal."""
    logger.info("shutdown_signal_received")
    shutdown_event.set()


def build_parser() -> argparse.ArgumentParser:
    """Command line parser."""
    parser = argparse.ArgumentParser(
        prog="onegeo-connector",
        description="List and download datasets from a OneGeo Suite catalog.",
    )
    parser.add_argument("--catalog-url", help="Catalog base URL (overrides ONEGEO_CATALOG_URL)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    list_parser = subparsers.add_parser("list", help="List downloadable resources")
    list_parser.add_argument("-q", "--query", default="*", help="Full-text query")
    list_parser.add_argument("--page", type=int, default=1)
    list_parser.add_argument("--size", type=int, default=20)

    get_parser = subparsers.add_parser("get", help="Download one resource")
    get_parser.add_argument("resource_id", help="Dataset id or datasetId:service:format")
    get_parser.add_argument("--tmp-dir", required=True, help="Scratch directory for the file")
    get_parser.add_argument("--service", help="Pin a service tag or direct link URL")
    get_parser.add_argument("--format", dest="format_tag", help="Pin a format")

    return parser


def build_runner(settings: Settings, client: httpx.AsyncClient) -> CatalogRunner:
    """Wire adapters into a catalog runner."""
    flags = settings.resolver_flags()
    search = ElasticCatalogSearch(
        client,
        settings.catalog_url,
        search_path=settings.search_path,
        timeout=settings.search_timeout_seconds,
        tables=PriorityTables.from_flags(flags),
    )
    return CatalogRunner(
        catalog_url=settings.catalog_url,
        flags=flags,
        search=search,
        downloader=HttpDownloader(
            client,
            timeout=settings.request_timeout_seconds,
            chunk_size=settings.download_chunk_size,
            progress_interval_bytes=settings.progress_interval_bytes,
        ),
        prober=HttpOriginProber(client, timeout=settings.probe_timeout_seconds),
        wfs_version=settings.wfs_version,
    )


async def run_command(args: argparse.Namespace) -> int:
    """Run one CLI command and print its JSON result."""
    overrides = {"catalog_url": args.catalog_url} if args.catalog_url else {}
    settings = Settings(**overrides)
    configure_logging(settings.log_level, settings.log_json)

    if not settings.catalog_url:
        logger.error("catalog_url_missing", message="Set ONEGEO_CATALOG_URL or pass --catalog-url")
        return 2

    logger.info(
        "settings_loaded",
        catalog_url=settings.catalog_url,
        flags=settings.resolver_flags(),
        request_timeout_seconds=settings.request_timeout_seconds,
    )

    if settings.metrics_enabled:
        start_metrics_server(settings)

    try:
        async with httpx.AsyncClient(
            headers={"User-Agent": USER_AGENT},
            follow_redirects=True,
        ) as client:
            runner = build_runner(settings, client)
            if args.command == "list":
                result = await runner.list({"q": args.query, "page": args.page, "size": args.size})
            else:
                result = await runner.get_resource(
                    {
                        "resourceId": args.resource_id,
                        "tmpDir": args.tmp_dir,
                        "service": args.service,
                        "format": args.format_tag,
                    },
                    StructlogTaskLog(resource_id=args.resource_id),
                    cancel_event=shutdown_event,
                )
    except DomainError as e:
        logger.error("command_failed", command=args.command, error=str(e), origin=e.origin)
        return 1

    print(json.dumps(result, ensure_ascii=False, indent=2))
    return 0


def main(argv: list[str] | None = None) -> None:
    """Entrypoint."""
    args = build_parser().parse_args(argv)

    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)

    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(sig, signal_handler)

    exit_code = 1
    try:
        exit_code = loop.run_until_complete(run_command(args))
    except KeyboardInterrupt:
        pass
    finally:
        loop.close()

    raise SystemExit(exit_code)


if __name__ == "__main__":
    main()
