"""
Prometheus metrics for the Cheezus search service.

Tracks HTTP requests, search queries, fallback suggestions and catalogue
fetches.
"""

from fastapi import Response
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest

# Request metrics
http_requests_total = Counter(
    "cheezus_search_http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status"],
)

http_request_duration_seconds = Histogram(
    "cheezus_search_http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0),
)

# Search metrics
search_queries_total = Counter(
    "cheezus_search_queries_total", "Total search queries", ["mode", "status"]
)

search_query_duration_seconds = Histogram(
    "cheezus_search_query_duration_seconds",
    "Search query duration in seconds, fetch and ranking included",
    ["mode"],
    buckets=(0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0),
)

search_results_per_query = Histogram(
    "cheezus_search_results_per_query",
    "Number of results returned per query",
    ["mode"],
    buckets=(0, 1, 3, 5, 10, 15, 25, 50),
)

search_suggestions_total = Counter(
    "cheezus_search_suggestions_total",
    "Queries answered with 'did you mean' suggestions",
    ["mode"],
)

# Catalogue fetch metrics
catalogue_fetches_total = Counter(
    "cheezus_search_catalogue_fetches_total",
    "Total catalogue fetches",
    ["source", "status"],
)

catalogue_fetch_duration_seconds = Histogram(
    "cheezus_search_catalogue_fetch_duration_seconds",
    "Catalogue fetch duration in seconds",
    ["source"],
    buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0),
)


def track_request_metrics(method: str, endpoint: str, status_code: int, duration: float):
    """Track HTTP request metrics."""
    http_requests_total.labels(method=method, endpoint=endpoint, status=status_code).inc()
    http_request_duration_seconds.labels(method=method, endpoint=endpoint).observe(duration)


def track_search_query(
    mode: str,
    success: bool,
    duration: float,
    result_count: int = 0,
    suggestions: bool = False,
):
    """Track search query metrics."""
    status = "success" if success else "failure"
    search_queries_total.labels(mode=mode, status=status).inc()
    search_query_duration_seconds.labels(mode=mode).observe(duration)
    if success:
        search_results_per_query.labels(mode=mode).observe(result_count)
    if suggestions:
        search_suggestions_total.labels(mode=mode).inc()


def track_catalogue_fetch(source: str, success: bool, duration: float):
    """Track catalogue fetch metrics."""
    status = "success" if success else "failure"
    catalogue_fetches_total.labels(source=source, status=status).inc()
    catalogue_fetch_duration_seconds.labels(source=source).observe(duration)


async def metrics_endpoint():
    """
    Prometheus metrics endpoint.

    Returns:
        Response with Prometheus metrics in text format
    """
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
