"""Pydantic schemas validating caller input before any PayPal call"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any, Literal, Mapping, Optional, Type

from pydantic import BaseModel, Field, ValidationError, model_validator

from paypal_plans.domain.models import PlanRequest


@dataclass
class ValidationResult:
    """Verdict of a schema check; ``data`` holds the parsed model when valid"""

    valid: bool
    message: str = ""
    data: Optional[BaseModel] = None


class ConfigureSchema(BaseModel):
    mode: Literal["sandbox", "live"] = "sandbox"
    client_id: str = Field(..., min_length=1)
    client_secret: str = Field(..., min_length=1)


class OneTimePaymentSchema(BaseModel):
    """Fields shared by every plan kind"""

    amount: Decimal = Field(..., gt=0, description="Price in major currency units")
    currency: str = Field(..., pattern=r"^[A-Za-z]{3}$", description="ISO 4217 code, any case")
    discount_type: Literal["percentage", "flat"] = "flat"
    discount: Decimal = Field(Decimal("0"), ge=0)
    tax: Decimal = Field(Decimal("0"), ge=0, description="Tax percentage")
    return_url: str = Field(..., min_length=1)
    cancel_url: Optional[str] = None
    plan_name: str = Field("Payment Plan", min_length=1)
    description: str = ""

    @model_validator(mode="after")
    def check_percentage(self):
        if self.discount_type == "percentage" and self.discount > 100:
            raise ValueError("percentage discount cannot exceed 100")
        return self


class RecurringPlanSchema(OneTimePaymentSchema):
    frequency: Literal["day", "week", "month", "year", "custom"]
    custom_days: Optional[int] = Field(None, ge=1)
    trial_period_days: int = Field(0, ge=0)
    start_date: Optional[datetime] = None

    @model_validator(mode="after")
    def check_custom_days(self):
        if self.frequency == "custom" and self.custom_days is None:
            raise ValueError("custom_days is required when frequency is custom")
        return self


class FixedRecurringPlanSchema(RecurringPlanSchema):
    cycles: int = Field(..., gt=0)


class InstallmentPlanSchema(FixedRecurringPlanSchema):
    initial_amount: Decimal = Field(..., ge=0, description="Upfront part of amount")

    @model_validator(mode="after")
    def check_initial_amount(self):
        if self.initial_amount > self.amount:
            raise ValueError("initial_amount cannot exceed amount")
        return self


class ExecutePaymentSchema(BaseModel):
    payment_id: str = Field(..., min_length=1)
    payer_id: str = Field(..., min_length=1)


class ExecuteAgreementSchema(BaseModel):
    token: str = Field(..., min_length=1)


class SubscriptionSchema(BaseModel):
    subscription_id: str = Field(..., min_length=1)


class RefundSchema(BaseModel):
    sale_id: str = Field(..., min_length=1)
    amount: Decimal = Field(..., gt=0)
    currency: str = Field(..., pattern=r"^[A-Za-z]{3}$")


def _first_error(exc: ValidationError) -> str:
    error = exc.errors()[0]
    location = ".".join(str(part) for part in error["loc"])
    message = error["msg"].removeprefix("Value error, ")
    return f"{location}: {message}" if location else message


def validate(schema: Type[BaseModel], body: Mapping[str, Any]) -> ValidationResult:
    """Check ``body`` against ``schema`` and report the first problem found"""
    if not isinstance(body, Mapping):
        return ValidationResult(valid=False, message="request body must be an object")
    try:
        return ValidationResult(valid=True, data=schema.model_validate(dict(body)))
    except ValidationError as e:
        return ValidationResult(valid=False, message=_first_error(e))


def to_plan_request(data: OneTimePaymentSchema) -> PlanRequest:
    """Build the mutable domain request from a validated schema"""
    return PlanRequest(**data.model_dump(exclude_none=True))
