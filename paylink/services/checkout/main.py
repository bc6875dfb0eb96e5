"""Public checkout API.

`POST /api/checkout` re-validates the payment request and stores it as a
`pending` payment. Store failures are collapsed to a generic 500 body so no
database detail reaches the caller.
"""

import json
from uuid import uuid4

from fastapi import Depends, FastAPI, Header, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from paylink.common.config import settings
from paylink.common.db import SessionLocal
from paylink.common.logging import configure_logging, logger, trace_id_ctx
from paylink.common.metrics import (
    install_http_metrics,
    metrics_response,
    payment_failure_total,
    payment_latency_seconds,
    payment_requests_total,
    payment_success_total,
    payment_validation_failures_total,
)
from paylink.common.schema import PaymentValidationError, ValidationIssue, validate_payment
from paylink.common.startup import log_startup_config
from paylink.common.tracing import instrument_app, setup_tracing
from paylink.services.checkout.schemas import CheckoutCreated, CheckoutFailed, CheckoutInvalid, PaymentRecord
from paylink.services.checkout.service import PENDING, PaymentStore

configure_logging()
setup_tracing(settings.service_name)
log_startup_config(
    settings.service_name,
    ["SERVICE_NAME", "DATABASE_URL", "CORS_ALLOW_ORIGINS", "OTEL_EXPORTER_OTLP_ENDPOINT"],
)
store = PaymentStore(SessionLocal)

app = FastAPI(title="Pay Link Checkout API")
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allow_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)
install_http_metrics(app)
instrument_app(app)


def get_payment_store() -> PaymentStore:
    """Dependency returning the process-wide payment store."""

    return store


def _invalid(issues: list[ValidationIssue]) -> JSONResponse:
    for issue in issues:
        field = issue.path[0] if issue.path else "body"
        payment_validation_failures_total.labels(service=settings.service_name, field=field).inc()
    payment_failure_total.labels(service=settings.service_name, reason="validation").inc()
    body = CheckoutInvalid(error=issues)
    return JSONResponse(status_code=400, content=body.model_dump(mode="json"))


@app.post("/api/checkout", status_code=201)
async def checkout(
    request: Request,
    payment_store: PaymentStore = Depends(get_payment_store),
    x_correlation_id: str | None = Header(default=None),
):
    """Validate the JSON body and create a `pending` payment.

    201 with the created record, 400 with the issue list, 500 with a generic
    message on any store failure.
    """

    trace_id_ctx.set(x_correlation_id or str(uuid4()))
    payment_requests_total.labels(service=settings.service_name).inc()
    with payment_latency_seconds.labels(service=settings.service_name).time():
        try:
            body = await request.json()
        except (json.JSONDecodeError, UnicodeDecodeError):
            logger.info("checkout rejected: malformed JSON body")
            return _invalid([ValidationIssue(path=[], code="invalid_json", message="Malformed JSON body")])

        try:
            payment_request = validate_payment(body)
        except PaymentValidationError as exc:
            logger.info("checkout rejected: %s", exc)
            return _invalid(exc.issues)

        try:
            payment = payment_store.create_payment(payment_request, status=PENDING)
        except Exception:
            logger.exception("payment store failed")
            payment_failure_total.labels(service=settings.service_name, reason="store").inc()
            return JSONResponse(status_code=500, content=CheckoutFailed().model_dump())

        payment_success_total.labels(service=settings.service_name).inc()
        created = CheckoutCreated(payment=PaymentRecord.model_validate(payment))
        return JSONResponse(status_code=201, content=created.model_dump(mode="json", by_alias=True))


@app.get("/metrics")
def metrics():
    """Prometheus scrape endpoint."""

    return metrics_response()


@app.get("/health")
def health():
    """Container health probe endpoint."""

    return {"ok": True}


def run() -> None:
    """Serve the checkout API with uvicorn."""

    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=settings.checkout_port)


if __name__ == "__main__":
    run()
