"""Pay link web app: serves the payment form and runs submissions.

The form is rendered server-side; `POST /` validates the posted fields and,
when they pass, forwards them to the checkout API through the submit action.
"""

from pathlib import Path

from fastapi import Depends, FastAPI, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from paylink.common.config import settings
from paylink.common.logging import configure_logging, logger
from paylink.common.metrics import form_submissions_total, install_http_metrics, metrics_response
from paylink.common.startup import log_startup_config
from paylink.common.state_machine import FormStatus
from paylink.common.tracing import instrument_app, setup_tracing
from paylink.services.web.client import create_payment
from paylink.services.web.form import PaymentForm, SubmitAction

configure_logging()
setup_tracing(settings.service_name)
log_startup_config(settings.service_name, ["SERVICE_NAME", "CHECKOUT_API_URL", "OTEL_EXPORTER_OTLP_ENDPOINT"])

app = FastAPI(title="Pay Link")
install_http_metrics(app)
instrument_app(app)

templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent / "templates"))


def get_submit_action() -> SubmitAction:
    """Dependency returning the action that submits valid forms."""

    return create_payment


def _page(request: Request, form: PaymentForm) -> HTMLResponse:
    return templates.TemplateResponse(request, "page.html", {"form_html": form.render()})


@app.get("/", response_class=HTMLResponse)
def show_form(request: Request) -> HTMLResponse:
    """Render an empty pay link form."""

    return _page(request, PaymentForm())


@app.post("/", response_class=HTMLResponse)
async def submit_form(request: Request, submit_action: SubmitAction = Depends(get_submit_action)) -> HTMLResponse:
    """Validate the posted fields, submit when valid, render the outcome."""

    posted = await request.form()
    form = PaymentForm(submit_action, values=posted)
    state = await form.submit()
    if form.field_errors:
        outcome = "invalid"
    else:
        outcome = "success" if state.status is FormStatus.SUCCESS else "error"
    form_submissions_total.labels(service=settings.service_name, outcome=outcome).inc()
    logger.info("pay link form submitted outcome=%s", outcome)
    return _page(request, form)


@app.get("/metrics")
def metrics():
    """Prometheus scrape endpoint."""

    return metrics_response()


@app.get("/health")
def health():
    """Container health probe endpoint."""

    return {"ok": True}


def run() -> None:
    """Serve the pay link form with uvicorn."""

    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=settings.web_port)


if __name__ == "__main__":
    run()
