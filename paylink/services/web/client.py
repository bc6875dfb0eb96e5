"""Remote submission of pay link form fields to the checkout API.

`create_payment` always returns a `SubmissionResult`; validation, transport
and server failures are all translated into a single error message.
"""

from collections.abc import Mapping
from typing import Any

import httpx
from pydantic import BaseModel

from paylink.common.config import settings
from paylink.common.logging import logger
from paylink.common.schema import PAYMENT_FIELDS, PaymentValidationError, validate_payment


PAYMENT_FAILED = "Payment failed"
SOMETHING_WENT_WRONG = "Something went wrong"


class SubmissionResult(BaseModel):
    """Outcome of one submission as seen by the form."""

    error: str | None = None
    success: bool = False


def form_values(form: Mapping[str, Any] | None) -> dict[str, Any]:
    """Pick the payment fields out of raw form data, trimming string values.

    Anything that is not a mapping is treated as an empty form.
    """

    if not isinstance(form, Mapping):
        form = {}
    values: dict[str, Any] = {}
    for field in PAYMENT_FIELDS:
        value = form.get(field)
        values[field] = value.strip() if isinstance(value, str) else value
    return values


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return PAYMENT_FAILED
    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, str) and error:
        return error
    if isinstance(error, list):
        messages = [item["message"] for item in error if isinstance(item, dict) and item.get("message")]
        if messages:
            return "; ".join(messages)
    return PAYMENT_FAILED


async def _post_checkout(client: httpx.AsyncClient, payload: dict[str, Any]) -> SubmissionResult:
    resp = await client.post(f"{settings.checkout_api_url}/api/checkout", json=payload)
    if resp.is_success:
        return SubmissionResult(error=None, success=True)
    message = _error_message(resp)
    logger.warning("checkout rejected status=%s error=%s", resp.status_code, message)
    return SubmissionResult(error=message, success=False)


async def create_payment(
    prev_state: SubmissionResult | None,
    form: Mapping[str, Any] | None,
    *,
    client: httpx.AsyncClient | None = None,
) -> SubmissionResult:
    """Validate `form` and forward it to `POST /api/checkout`.

    `prev_state` is accepted for parity with the form's action signature and is
    not consulted. No network call is made when validation fails.
    """

    del prev_state
    try:
        payment = validate_payment(form_values(form))
    except PaymentValidationError as exc:
        return SubmissionResult(error=str(exc), success=False)

    payload = payment.model_dump(mode="json")
    try:
        if client is not None:
            return await _post_checkout(client, payload)
        async with httpx.AsyncClient() as owned_client:
            return await _post_checkout(owned_client, payload)
    except httpx.HTTPError as exc:
        logger.warning("checkout request failed: %s", exc)
        return SubmissionResult(error=str(exc) or SOMETHING_WENT_WRONG, success=False)
    except Exception:
        logger.exception("unexpected checkout submission failure")
        return SubmissionResult(error=SOMETHING_WENT_WRONG, success=False)
