"""Dependency injection for FastAPI endpoints"""

from fastapi import HTTPException
from paypal_plans.config import settings
from paypal_plans.infrastructure.clients.paypal import PayPalClient
from paypal_plans.payments import configure


def get_paypal_client() -> PayPalClient:
    """Provide a PayPal handle configured from settings"""
    envelope = configure(settings.paypal_mode, settings.paypal_client_id, settings.paypal_client_secret)
    if envelope.error:
        raise HTTPException(status_code=503, detail=f"PayPal is not configured: {envelope.message}")
    return envelope.response
