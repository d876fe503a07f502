"""Payment API endpoints."""
import logging
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field, model_validator

from smartorder.core.dependencies import get_order_service, get_payment_gateway
from smartorder.services.ordering.models import OrderStatus
from smartorder.services.payment.base import (
    PaymentError,
    PaymentGateway,
    PaymentStatus,
    intent_id_from_client_secret,
    to_minor_units,
)
from smartorder.services.persistence.orders import OrderPersistenceService, OrderStateError

router = APIRouter()
logger = logging.getLogger(__name__)

GENERIC_PAYMENT_ERROR = "An unexpected error occurred during payment."

STATUS_MESSAGES = {
    PaymentStatus.SUCCEEDED: "Your payment was successful.",
    PaymentStatus.PROCESSING: "Your payment is processing. We'll update you when it completes.",
    PaymentStatus.REQUIRES_PAYMENT_METHOD: "Payment failed. Please try another payment method.",
    PaymentStatus.OTHER: "Something went wrong with your payment.",
}


class PaymentIntentRequest(BaseModel):
    """Payment intent for a raw amount."""
    amount: int = Field(gt=0, description="Amount in the smallest currency unit")


class OrderPaymentIntentRequest(BaseModel):
    """Payment intent for a stored order."""
    payment_method: Optional[str] = "card"


class PaymentIntentResponse(BaseModel):
    """Created payment intent."""
    client_secret: str
    payment_intent_id: str
    amount: int
    currency: str


class ConfirmPaymentRequest(BaseModel):
    """Client-side confirmation result to verify."""
    payment_intent_id: Optional[str] = None
    client_secret: Optional[str] = None

    @model_validator(mode="after")
    def check_reference(self):
        if not self.payment_intent_id and not self.client_secret:
            raise ValueError("payment_intent_id or client_secret is required")
        return self


class ConfirmPaymentResponse(BaseModel):
    """Payment status and resulting order status."""
    status: str
    order_status: str
    message: str


def payment_http_error(e: PaymentError) -> HTTPException:
    return HTTPException(status_code=402, detail=str(e) or GENERIC_PAYMENT_ERROR)


@router.post("/api/payments/intent", response_model=PaymentIntentResponse)
async def create_payment_intent(
    body: PaymentIntentRequest,
    gateway: PaymentGateway = Depends(get_payment_gateway),
):
    """Create a payment intent and return its client secret."""
    try:
        intent = await gateway.create_intent(body.amount)
    except PaymentError as e:
        logger.error(f"[PAYMENT] Intent creation failed: {e}")
        raise payment_http_error(e)
    return PaymentIntentResponse(
        client_secret=intent.client_secret,
        payment_intent_id=intent.id,
        amount=intent.amount,
        currency=intent.currency,
    )


@router.post("/api/orders/{order_id}/payment-intent", response_model=PaymentIntentResponse)
async def create_order_payment_intent(
    order_id: int,
    body: OrderPaymentIntentRequest,
    order_service: OrderPersistenceService = Depends(get_order_service),
    gateway: PaymentGateway = Depends(get_payment_gateway),
):
    """Create a payment intent for an order's total."""
    order = await order_service.get_order_by_id(order_id)
    if not order:
        raise HTTPException(status_code=404, detail=f"Order {order_id} not found")
    if order.status != OrderStatus.PENDING.value:
        raise HTTPException(status_code=409, detail=f"Order {order_id} is {order.status}")

    try:
        intent = await gateway.create_intent(
            to_minor_units(order.total_amount), metadata={"order_id": str(order.id)}
        )
    except PaymentError as e:
        logger.error(f"[PAYMENT] Intent creation failed for order {order_id}: {e}")
        raise payment_http_error(e)

    await order_service.attach_payment_intent(order_id, intent.id, body.payment_method)
    return PaymentIntentResponse(
        client_secret=intent.client_secret,
        payment_intent_id=intent.id,
        amount=intent.amount,
        currency=intent.currency,
    )


@router.post("/api/orders/{order_id}/confirm-payment", response_model=ConfirmPaymentResponse)
async def confirm_order_payment(
    order_id: int,
    body: ConfirmPaymentRequest,
    order_service: OrderPersistenceService = Depends(get_order_service),
    gateway: PaymentGateway = Depends(get_payment_gateway),
):
    """Check the processor status of an order's payment and update the order."""
    order = await order_service.get_order_by_id(order_id)
    if not order:
        raise HTTPException(status_code=404, detail=f"Order {order_id} not found")

    # Only the intent created through /payment-intent can settle an order
    if not order.payment_intent_id:
        raise HTTPException(status_code=409, detail="No payment started for this order")
    intent_id = body.payment_intent_id or intent_id_from_client_secret(body.client_secret)
    if intent_id != order.payment_intent_id:
        raise HTTPException(status_code=400, detail="Payment does not belong to this order")

    try:
        status = await gateway.get_status(intent_id)
    except PaymentError as e:
        logger.error(f"[PAYMENT] Status check failed for order {order_id}: {e}")
        raise payment_http_error(e)

    try:
        if status == PaymentStatus.SUCCEEDED:
            order = await order_service.mark_paid(order_id)
        elif status == PaymentStatus.PROCESSING:
            order = await order_service.confirm_order(order_id)
    except OrderStateError as e:
        raise HTTPException(status_code=409, detail=str(e))

    logger.info(f"[PAYMENT] Order {order_id} payment status: {status.value}, order: {order.status}")
    return ConfirmPaymentResponse(
        status=status.value,
        order_status=order.status,
        message=STATUS_MESSAGES[status],
    )
