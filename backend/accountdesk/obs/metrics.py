"""Central registry for Prometheus metrics used across the backend."""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram


REQUEST_COUNTER = Counter(
	"accountdesk_http_requests_total",
	"Total HTTP requests processed",
	["route", "method", "status"],
)

REQUEST_LATENCY = Histogram(
	"accountdesk_http_request_duration_seconds",
	"HTTP request latency in seconds",
	["route", "method"],
	buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0),
)

REPORTS_CREATED = Counter(
	"accountdesk_reports_created_total",
	"User reports persisted",
	["reason"],
)

REPORTS_REJECTED = Counter(
	"accountdesk_reports_rejected_total",
	"User reports rejected before persistence",
	["kind"],
)

INQUIRIES_CREATED = Counter(
	"accountdesk_inquiries_created_total",
	"Support inquiries persisted",
)

INQUIRIES_REJECTED = Counter(
	"accountdesk_inquiries_rejected_total",
	"Support inquiries rejected before persistence",
)

STATUS_UPDATES = Counter(
	"accountdesk_status_updates_total",
	"Status transitions recorded",
	["entity", "status"],
)

ERRORS_RENDERED = Counter(
	"accountdesk_http_errors_total",
	"Errors translated into HTTP responses",
	["error_type", "status"],
)

POSTGRES_UP = Gauge(
	"accountdesk_postgres_up",
	"Postgres readiness (1 ok, 0 failing)",
)

POSTGRES_LATENCY = Histogram(
	"accountdesk_postgres_ping_seconds",
	"Postgres readiness probe latency",
	buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5),
)


def observe_request(route: str, method: str, status: int, elapsed_seconds: float) -> None:
	REQUEST_COUNTER.labels(route=route, method=method, status=str(status)).inc()
	REQUEST_LATENCY.labels(route=route, method=method).observe(elapsed_seconds)


def inc_report_created(reason: str) -> None:
	REPORTS_CREATED.labels(reason=reason).inc()


def inc_report_rejected(kind: str) -> None:
	REPORTS_REJECTED.labels(kind=kind).inc()


def inc_inquiry_created() -> None:
	INQUIRIES_CREATED.inc()


def inc_inquiry_rejected() -> None:
	INQUIRIES_REJECTED.inc()


def inc_status_update(entity: str, status: str) -> None:
	STATUS_UPDATES.labels(entity=entity, status=status).inc()


def inc_error_rendered(error_type: str, status: int) -> None:
	ERRORS_RENDERED.labels(error_type=error_type, status=str(status)).inc()


def mark_postgres(ok: bool, *, latency_seconds: float | None = None) -> None:
	POSTGRES_UP.set(1 if ok else 0)
	if latency_seconds is not None:
		POSTGRES_LATENCY.observe(latency_seconds)
