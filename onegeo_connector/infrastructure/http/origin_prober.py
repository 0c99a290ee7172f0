"""Origin URL prober."""

import httpx
import structlog

from onegeo_connector.domain.ports import OriginProberPort
from onegeo_connector.infrastructure.observability.metrics import origin_probes

logger = structlog.get_logger()

# Known portal dataset page conventions, best first
ORIGIN_PATH_CONVENTIONS: tuple[str, ...] = (
    "portail/fr/jeux-de-donnees",
    "fr/jeux-de-donnees",
    "fr/dataset",
)


class HttpOriginProber(OriginProberPort):
    """Probes portal path conventions with lightweight HEAD requests."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        timeout: float = 10.0,
        conventions: tuple[str, ...] = ORIGIN_PATH_CONVENTIONS,
    ) -> None:
        """Initialize prober."""
        self.client = client
        self.timeout = timeout
        self.conventions = conventions

    async def resolve_origin(self, base_url: str) -> str | None:
        """Return the first convention answering 2xx-4xx, or None."""
        if not base_url:
            return None

        base = base_url.rstrip("/")
        for path in self.conventions:
            url = f"{base}/{path}"
            try:
                response = await self.client.head(url, timeout=self.timeout, follow_redirects=True)
            except httpx.HTTPError as e:
                logger.info("origin_probe_failed", url=url, error=str(e) or type(e).__name__)
                continue

            if 200 <= response.status_code < 500:
                origin_probes.labels(outcome="found").inc()
                logger.info("origin_resolved", url=url, status=response.status_code)
                return url

            logger.info("origin_probe_rejected", url=url, status=response.status_code)

        origin_probes.labels(outcome="absent").inc()
        logger.warning("origin_unresolved", base_url=base_url)
        return None
