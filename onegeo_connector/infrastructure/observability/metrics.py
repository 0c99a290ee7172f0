"""Prometheus metrics."""

from prometheus_client import Counter, Histogram

candidate_attempts = Counter(
    "onegeo_candidate_attempts_total",
    "Total number of download candidates attempted",
    ["service", "outcome"],
)

downloads_succeeded = Counter(
    "onegeo_downloads_succeeded_total",
    "Total number of resources downloaded",
)

downloads_exhausted = Counter(
    "onegeo_downloads_exhausted_total",
    "Total number of downloads where every candidate failed",
)

resource_requests_failed = Counter(
    "onegeo_resource_requests_failed_total",
    "Total number of resource requests failed",
    ["error_code"],
)

download_mb = Histogram(
    "onegeo_download_mb",
    "Size of downloaded resources in MB",
    buckets=[0.1, 1, 10, 100, 1000],
)

origin_probes = Counter(
    "onegeo_origin_probes_total",
    "Origin probing results",
    ["outcome"],
)

listings_served = Counter(
    "onegeo_listings_served_total",
    "Total number of listing pages served",
)
