"""Stripe payment gateway."""
import asyncio
import logging
from typing import Dict, Optional
import stripe

from smartorder.core.config import settings
from smartorder.services.payment.base import (
    PaymentError,
    PaymentGateway,
    PaymentIntent,
    PaymentStatus,
)

logger = logging.getLogger(__name__)


class StripePaymentGateway(PaymentGateway):
    """Payment intents through the Stripe API."""

    def __init__(self, api_key: Optional[str] = None, currency: Optional[str] = None):
        self.api_key = api_key if api_key is not None else settings.stripe_secret_key
        self.currency = currency or settings.payment_currency

    async def create_intent(
        self, amount: int, metadata: Optional[Dict[str, str]] = None
    ) -> PaymentIntent:
        if amount <= 0:
            raise PaymentError("Payment amount must be greater than zero")
        if not self.api_key:
            raise PaymentError("Payment processor is not configured")

        try:
            intent = await asyncio.to_thread(
                stripe.PaymentIntent.create,
                amount=amount,
                currency=self.currency,
                automatic_payment_methods={"enabled": True},
                metadata=metadata or {},
                api_key=self.api_key,
            )
        except stripe.StripeError as e:
            message = e.user_message or str(e)
            logger.error(f"[PAYMENT] Stripe error creating payment intent: {message}")
            raise PaymentError(f"Stripe API error: {message}") from e

        if not intent.client_secret:
            raise PaymentError("Failed to create Payment Intent or client_secret is null.")

        logger.info(f"[PAYMENT] Created payment intent {intent.id} for {amount} {self.currency}")
        return PaymentIntent(
            id=intent.id,
            client_secret=intent.client_secret,
            amount=amount,
            currency=self.currency,
            status=PaymentStatus.from_processor(intent.status),
        )

    async def get_status(self, intent_id: str) -> PaymentStatus:
        try:
            intent = await asyncio.to_thread(
                stripe.PaymentIntent.retrieve, intent_id, api_key=self.api_key
            )
        except stripe.StripeError as e:
            message = e.user_message or str(e)
            logger.error(f"[PAYMENT] Stripe error retrieving {intent_id}: {message}")
            raise PaymentError(f"Stripe API error: {message}") from e
        return PaymentStatus.from_processor(intent.status)
