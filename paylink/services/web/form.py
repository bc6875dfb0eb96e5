"""Pay link form state and rendering.

The form validates locally on submit only; field edits never re-validate. A
valid submission is handed to the submit action and the form tracks the
outcome through `FormStatus`.
"""

from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, select_autoescape

from paylink.common.logging import logger
from paylink.common.schema import PAYMENT_FIELDS, SUPPORTED_CURRENCIES, PaymentValidationError, validate_payment
from paylink.common.state_machine import FormStatus, validate_transition
from paylink.services.web.client import SOMETHING_WENT_WRONG, SubmissionResult, create_payment, form_values


SubmitAction = Callable[[SubmissionResult, Mapping[str, Any]], Awaitable[SubmissionResult]]

_env = Environment(
    loader=FileSystemLoader(str(Path(__file__).resolve().parent / "templates")),
    autoescape=select_autoescape(["html"]),
)


@dataclass(frozen=True)
class FormState:
    """Display state; `error` is only set for `FormStatus.ERROR`."""

    status: FormStatus = FormStatus.IDLE
    error: str | None = None


class PaymentForm:
    """Holds raw field values, field errors and the submission state."""

    def __init__(self, submit_action: SubmitAction = create_payment, values: Mapping[str, Any] | None = None) -> None:
        self.submit_action = submit_action
        self.values: dict[str, Any] = {field: "" for field in PAYMENT_FIELDS}
        self.field_errors: dict[str, str] = {}
        self.state = FormState()
        self.result = SubmissionResult()
        self.attempted = False
        for field, value in (values or {}).items():
            if field in self.values:
                self.change(field, value)

    def change(self, field: str, value: Any) -> None:
        if field not in self.values:
            raise KeyError(field)
        self.values[field] = value

    def _move(self, new: FormStatus, error: str | None = None) -> None:
        validate_transition(self.state.status, new)
        self.state = FormState(status=new, error=error)

    async def submit(self) -> FormState:
        """Validate locally, then await the submit action when valid.

        A form that already succeeded is left as is.
        """

        if self.state.status is FormStatus.SUCCESS:
            return self.state
        self.attempted = True
        try:
            validate_payment(form_values(self.values))
        except PaymentValidationError as exc:
            self.field_errors = exc.field_errors()
            return self.state

        self.field_errors = {}
        self._move(FormStatus.PENDING)
        try:
            self.result = await self.submit_action(self.result, dict(self.values))
        except Exception:
            logger.exception("submit action raised")
            self.result = SubmissionResult(error=SOMETHING_WENT_WRONG, success=False)
        if self.result.success:
            self._move(FormStatus.SUCCESS)
        else:
            self._move(FormStatus.ERROR, self.result.error)
        return self.state

    def dismiss_error(self) -> None:
        if self.state.status is FormStatus.ERROR:
            self._move(FormStatus.IDLE)

    def invalid_fields(self) -> set[str]:
        """Fields whose current value fails validation, once a submit was tried."""

        if not self.attempted:
            return set()
        try:
            validate_payment(form_values(self.values))
        except PaymentValidationError as exc:
            return {field for field in exc.field_errors() if field in PAYMENT_FIELDS}
        return set()

    def render(self) -> str:
        template = _env.get_template("payment_form.html")
        return template.render(
            state=self.state,
            pending=self.state.status is FormStatus.PENDING,
            succeeded=self.state.status is FormStatus.SUCCESS,
            values=self.values,
            field_errors=self.field_errors,
            invalid_fields=self.invalid_fields(),
            currencies=SUPPORTED_CURRENCIES,
        )
