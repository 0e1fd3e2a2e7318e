"""Pydantic schemas for API responses"""

from pydantic import BaseModel
from typing import Any, Optional

from paypal_plans.domain.models import Envelope


class EnvelopeResponse(BaseModel):
    """Uniform body of every v1 endpoint"""

    error: bool
    message: str
    response: Optional[Any] = None

    @classmethod
    def from_envelope(cls, envelope: Envelope) -> "EnvelopeResponse":
        return cls(error=envelope.error, message=envelope.message, response=envelope.response)
