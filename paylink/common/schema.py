"""Payment request schema shared by the web form, the submission client and
the checkout API.

Every layer validates through `validate_payment`, so the rules and the
messages a payer sees are identical on both sides of the wire.
"""

from collections.abc import Mapping
from typing import Any, Literal, get_args

from email_validator import EmailNotValidError, validate_email
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator
from pydantic_core import PydanticCustomError


Currency = Literal["USD", "EUR", "GBP"]
SUPPORTED_CURRENCIES: tuple[str, ...] = get_args(Currency)
PAYMENT_FIELDS = ("amount", "currency", "email")

REQUIRED = "Required"

_MESSAGES: dict[tuple[str | None, str], str] = {
    ("amount", "required"): REQUIRED,
    ("amount", "invalid_type"): "Amount must be a number",
    ("amount", "too_small"): "Amount must be greater than 0",
    ("currency", "required"): REQUIRED,
    ("currency", "invalid_enum_value"): f"Invalid currency. Expected one of {', '.join(SUPPORTED_CURRENCIES)}",
    ("email", "required"): REQUIRED,
    ("email", "invalid_string"): "Invalid email address",
    (None, "invalid_type"): "Expected an object",
}

# Form-facing text for missing fields; the wire message stays "Required".
_REQUIRED_LABELS = {
    "amount": "Amount is required",
    "currency": "Currency is required",
    "email": "Email is required",
}


class ValidationIssue(BaseModel):
    """One rule violation, keyed by the offending field."""

    path: list[str]
    code: str
    message: str

    def label(self) -> str:
        """Message naming the field, for display next to a form input."""

        if self.code == "required" and self.path:
            return _REQUIRED_LABELS.get(self.path[0], self.message)
        return self.message


class PaymentValidationError(ValueError):
    """Raised with every issue found in a payment request, not just the first."""

    def __init__(self, issues: list[ValidationIssue]) -> None:
        self.issues = issues
        super().__init__("; ".join(issue.label() for issue in issues))

    def field_errors(self) -> dict[str, str]:
        """Map field name -> first labelled message reported for it."""

        errors: dict[str, str] = {}
        for issue in self.issues:
            field = issue.path[0] if issue.path else "form"
            errors.setdefault(field, issue.label())
        return errors


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


class PaymentRequest(BaseModel):
    """Validated checkout input: positive amount, supported currency, email."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    amount: float = Field(gt=0, allow_inf_nan=False)
    currency: Currency
    email: str

    @model_validator(mode="before")
    @classmethod
    def _drop_blank_fields(cls, data: Any) -> Any:
        # Blank inputs are reported as missing rather than malformed.
        if isinstance(data, Mapping):
            return {key: value for key, value in data.items() if not _is_blank(value)}
        return data

    @field_validator("amount", mode="before")
    @classmethod
    def _reject_bool_amount(cls, value: Any) -> Any:
        if isinstance(value, bool):
            raise PydanticCustomError("float_type", "Input should be a valid number")
        return value

    @field_validator("email")
    @classmethod
    def _check_email_shape(cls, value: str) -> str:
        # Plain addresses only; the submitted string is stored as given.
        try:
            validate_email(value, check_deliverability=False)
        except EmailNotValidError as exc:
            raise PydanticCustomError("value_error", "value is not a valid email address: {reason}", {"reason": str(exc)}) from exc
        return value


def _issue_code(field: str | None, error_type: str) -> str:
    if error_type == "missing":
        return "required"
    if field == "amount":
        return "too_small" if error_type == "greater_than" else "invalid_type"
    if field == "currency":
        return "invalid_enum_value"
    if field == "email":
        return "invalid_string"
    return "invalid_type"


def _to_issue(error: Mapping[str, Any]) -> ValidationIssue:
    path = [str(part) for part in error["loc"]]
    field = path[0] if path and path[0] in PAYMENT_FIELDS else None
    code = _issue_code(field, error["type"])
    message = _MESSAGES.get((field, code), error["msg"])
    return ValidationIssue(path=path[:1], code=code, message=message)


def validate_payment(data: Any) -> PaymentRequest:
    """Validate raw input into a `PaymentRequest`.

    Raises `PaymentValidationError` listing every violated rule.
    """

    try:
        return PaymentRequest.model_validate(data)
    except ValidationError as exc:
        raise PaymentValidationError([_to_issue(error) for error in exc.errors()]) from exc
