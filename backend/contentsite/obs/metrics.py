"""Central registry for Prometheus metrics used across the backend."""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram


REQUEST_COUNTER = Counter(
	"contentsite_http_requests_total",
	"Total HTTP requests processed",
	["route", "method", "status"],
)

REQUEST_LATENCY = Histogram(
	"contentsite_http_request_duration_seconds",
	"HTTP request latency in seconds",
	["route", "method"],
	buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0),
)

CONTENT_READS = Counter(
	"contentsite_content_reads_total",
	"Collection reads by the source that served them",
	["collection", "source"],
)

CONTENT_MUTATIONS = Counter(
	"contentsite_content_mutations_total",
	"Admin mutations per collection",
	["collection", "op", "result"],
)

CONTENT_CAS_RETRIES = Counter(
	"contentsite_content_cas_retries_total",
	"Optimistic write retries caused by concurrent modification",
	["key"],
)

MIGRATION_COLLECTIONS = Counter(
	"contentsite_migration_collections_total",
	"Collections processed by the file-to-store migration",
	["collection", "status"],
)

RESEARCH_VIEWS = Counter(
	"contentsite_research_views_total",
	"Research article view increments",
)

DOCUMENT_DELIVERY = Counter(
	"contentsite_document_delivery_total",
	"Research document requests by delivery mode",
	["mode"],
)

REDIS_UP = Gauge(
	"contentsite_store_up",
	"Key-value store connectivity (1 when the last check succeeded)",
)

REDIS_LATENCY = Histogram(
	"contentsite_store_ping_seconds",
	"Key-value store ping latency",
	buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0),
)


def observe_request(route: str, method: str, status: int, elapsed_seconds: float) -> None:
	REQUEST_COUNTER.labels(route=route, method=method, status=str(status)).inc()
	REQUEST_LATENCY.labels(route=route, method=method).observe(elapsed_seconds)


def inc_content_read(collection: str, source: str) -> None:
	CONTENT_READS.labels(collection=collection, source=source).inc()


def inc_content_mutation(collection: str, op: str, result: str) -> None:
	CONTENT_MUTATIONS.labels(collection=collection, op=op, result=result).inc()


def inc_cas_retry(key: str) -> None:
	CONTENT_CAS_RETRIES.labels(key=key).inc()


def inc_migration(collection: str, status: str) -> None:
	MIGRATION_COLLECTIONS.labels(collection=collection, status=status).inc()


def inc_research_view() -> None:
	RESEARCH_VIEWS.inc()


def inc_document_delivery(mode: str) -> None:
	DOCUMENT_DELIVERY.labels(mode=mode).inc()


def mark_redis(ok: bool, *, latency_seconds: float | None = None) -> None:
	REDIS_UP.set(1 if ok else 0)
	if ok and latency_seconds is not None:
		REDIS_LATENCY.observe(latency_seconds)
