"""API response schemas for the checkout endpoint."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from paylink.common.schema import ValidationIssue


class PaymentRecord(BaseModel):
    """Persisted payment as returned to clients (camelCase on the wire)."""

    model_config = ConfigDict(from_attributes=True, alias_generator=to_camel, populate_by_name=True)

    id: str
    amount: float
    currency: str
    email: str
    status: str
    created_at: datetime
    updated_at: datetime


class CheckoutCreated(BaseModel):
    success: Literal[True] = True
    payment: PaymentRecord


class CheckoutInvalid(BaseModel):
    success: Literal[False] = False
    error: list[ValidationIssue]


class CheckoutFailed(BaseModel):
    success: Literal[False] = False
    error: str = "Internal server error"
