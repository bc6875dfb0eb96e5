"""Prometheus metric definitions shared by the checkout API and web app."""

from time import perf_counter

from fastapi import FastAPI, Request
from prometheus_client import Counter, Histogram, generate_latest
from starlette.responses import Response

from paylink.common.config import settings


payment_requests_total = Counter("payment_requests_total", "Total checkout requests", ["service"])
payment_success_total = Counter("payment_success_total", "Total payments created", ["service"])
payment_failure_total = Counter(
    "payment_failure_total",
    "Total checkout failures",
    ["service", "reason"],
)
payment_validation_failures_total = Counter(
    "payment_validation_failures_total",
    "Validation issues reported per field",
    ["service", "field"],
)
payment_latency_seconds = Histogram("payment_latency_seconds", "Checkout latency seconds", ["service"])
form_submissions_total = Counter(
    "form_submissions_total",
    "Pay link form submissions by outcome",
    ["service", "outcome"],
)
http_requests_total = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["service", "route", "method", "status_code"],
)
http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration seconds",
    ["service", "route", "method"],
)


def install_http_metrics(app: FastAPI) -> None:
    """Record request count and latency for every HTTP call served by `app`."""

    @app.middleware("http")
    async def metrics_middleware(request: Request, call_next):
        start = perf_counter()
        route = request.url.path
        method = request.method
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            route_obj = request.scope.get("route")
            if route_obj is not None and getattr(route_obj, "path", None):
                route = route_obj.path
            return response
        finally:
            elapsed = max(0.0, perf_counter() - start)
            http_request_duration_seconds.labels(
                service=settings.service_name,
                route=route,
                method=method,
            ).observe(elapsed)
            http_requests_total.labels(
                service=settings.service_name,
                route=route,
                method=method,
                status_code=str(status_code),
            ).inc()


def metrics_response() -> Response:
    """Expose all registered Prometheus metrics in text format."""

    return Response(content=generate_latest(), media_type="text/plain")
