"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional


class PlanKind(str, Enum):
    """Kinds of payment plans the gateway can be asked to create"""

    ONE_TIME = "one_time"
    RECURRING = "recurring"
    FIXED_RECURRING = "fixed_recurring"
    INSTALLMENTS = "installments"


@dataclass
class PlanRequest:
    """Caller-supplied plan parameters, normalized in place before building"""

    amount: Decimal
    currency: str
    return_url: str
    discount_type: str = "flat"  # "percentage" or "flat"
    discount: Decimal = Decimal("0")
    tax: Decimal = Decimal("0")
    initial_amount: Optional[Decimal] = None
    cycles: int = 0
    frequency: str = "month"
    custom_days: int = 1
    trial_period_days: int = 0
    cancel_url: Optional[str] = None
    plan_name: str = "Payment Plan"
    description: str = ""
    start_date: Optional[datetime] = None
    # Set by frequency resolution
    frequency_interval: int = 1


@dataclass
class NormalizedAmounts:
    """Final monetary fields after discount, tax and amortization"""

    amount: Decimal
    initial_amount: Optional[Decimal] = None


@dataclass
class Envelope:
    """Uniform result of every public operation"""

    error: bool
    message: str
    response: Any = None

    @classmethod
    def ok(cls, response: Any) -> "Envelope":
        return cls(error=False, message="", response=response)

    @classmethod
    def fail(cls, message: str) -> "Envelope":
        return cls(error=True, message=message, response=None)
