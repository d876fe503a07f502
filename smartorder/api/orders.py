"""Ordering API endpoints."""
import logging
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel, Field
from sqlalchemy.exc import SQLAlchemyError

from smartorder.api.auth import require_auth
from smartorder.api.schemas import (
    CartResponse,
    OrderResponse,
    ParseOrderResponse,
    cart_line_response,
    order_response,
)
from smartorder.core.dependencies import (
    get_catalog_repository,
    get_order_interpreter,
    get_order_service,
)
from smartorder.services.catalog.repository import CatalogRepository, ProductNotFoundError
from smartorder.services.interpreter.base import InterpreterError, OrderInterpreter
from smartorder.services.ordering import cart
from smartorder.services.ordering.models import CartLine, CartResolution, ResolutionOutcome
from smartorder.services.ordering.resolver import CartResolver
from smartorder.services.persistence.orders import OrderPersistenceService, OrderStateError

router = APIRouter()
logger = logging.getLogger(__name__)

STORE_ERROR_DETAIL = "A database error occurred. Please try again."


class ParseOrderRequest(BaseModel):
    """Free-text order."""
    order_text: str = Field(min_length=1)


class CartAddRequest(BaseModel):
    """Add a menu product to the cart."""
    items: List[CartLine] = []
    product_id: str
    quantity: int = Field(default=1, ge=1)


class CartUpdateRequest(BaseModel):
    """Change the quantity of one cart line."""
    items: List[CartLine]
    index: int
    quantity: int


class OrderLineRequest(BaseModel):
    """Line of an order being placed."""
    product_id: str
    quantity: int = Field(default=1, ge=1)
    special_requests: Optional[str] = None


class CreateOrderRequest(BaseModel):
    """Order checkout request."""
    items: List[OrderLineRequest] = Field(min_length=1)
    raw_text: Optional[str] = None
    payment_method: Optional[str] = None


def resolution_message(resolution: CartResolution) -> str:
    """User-facing summary of a resolved order."""
    outcome = resolution.outcome
    if outcome == ResolutionOutcome.NOTHING_UNDERSTOOD:
        return (
            "Sorry, we couldn't understand your order. "
            "Please try describing it again in more detail."
        )
    missing = ", ".join(resolution.unmatched_names)
    if outcome == ResolutionOutcome.NOTHING_MATCHED:
        return f"We couldn't find any of these on our menu: {missing}. Please check the menu and try again."
    if outcome == ResolutionOutcome.PARTIAL:
        return (
            f"Could not find: {missing}. Please check our menu or try again. "
            "The other items were added to your order."
        )
    return "Your order has been processed. Please review it below."


def cart_response(lines: List[CartLine]) -> CartResponse:
    return CartResponse(
        items=[cart_line_response(line) for line in lines],
        total_amount=float(cart.cart_total(lines)),
    )


@router.post("/api/orders/parse", response_model=ParseOrderResponse)
async def parse_order(
    body: ParseOrderRequest,
    repository: CatalogRepository = Depends(get_catalog_repository),
    interpreter: OrderInterpreter = Depends(get_order_interpreter),
):
    """Interpret a free-text order and price it against the catalog."""
    logger.info(f"[ORDERS] Parse request - text: '{body.order_text}'")

    try:
        menu_text = await repository.get_menu_text()
        items = await interpreter.interpret(body.order_text, menu_context=menu_text)
        resolution = await CartResolver(repository.store).resolve(items)
    except InterpreterError as e:
        logger.error(f"[ORDERS] Interpreter failed - {type(e).__name__}: {e}", exc_info=True)
        raise HTTPException(
            status_code=502,
            detail="There was an error processing your order. Please try again.",
        )
    except SQLAlchemyError as e:
        logger.error(f"[ORDERS] Store error while parsing order: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=STORE_ERROR_DETAIL)

    return ParseOrderResponse(
        outcome=resolution.outcome.value,
        message=resolution_message(resolution),
        items=[cart_line_response(line) for line in resolution.lines],
        unmatched_items=resolution.unmatched_names,
        clarifications=resolution.clarifications,
        total_amount=float(resolution.total_amount),
    )


@router.post("/api/cart/add", response_model=CartResponse)
async def add_to_cart(
    body: CartAddRequest,
    repository: CatalogRepository = Depends(get_catalog_repository),
):
    """Add a product chosen from the menu to the cart."""
    try:
        product = await repository.get_product(body.product_id)
    except ProductNotFoundError:
        raise HTTPException(status_code=404, detail=f"Product '{body.product_id}' not found")
    except SQLAlchemyError as e:
        logger.error(f"[ORDERS] Store error adding to cart: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=STORE_ERROR_DETAIL)

    return cart_response(cart.add_product(body.items, product, body.quantity))


@router.post("/api/cart/update", response_model=CartResponse)
async def update_cart(body: CartUpdateRequest):
    """Set a cart line quantity; zero removes the line."""
    try:
        lines = cart.update_quantity(body.items, body.index, body.quantity)
    except IndexError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return cart_response(lines)


@router.post("/api/orders", response_model=OrderResponse)
async def create_order(
    body: CreateOrderRequest,
    repository: CatalogRepository = Depends(get_catalog_repository),
    order_service: OrderPersistenceService = Depends(get_order_service),
):
    """Place a pending order. Lines are priced from the current catalog."""
    try:
        lines = []
        for requested in body.items:
            try:
                product = await repository.get_product(requested.product_id)
            except ProductNotFoundError:
                raise HTTPException(
                    status_code=400,
                    detail=f"Product '{requested.product_id}' is not on the menu",
                )
            lines.append(
                CartLine(
                    product_id=product.id,
                    name=product.name,
                    quantity=requested.quantity,
                    unit_price=product.price,
                    special_requests=requested.special_requests,
                    image_url=product.image_url,
                    ai_hint=product.ai_hint,
                )
            )
        order = await order_service.create_order(
            lines, raw_text=body.raw_text, payment_method=body.payment_method
        )
    except SQLAlchemyError as e:
        logger.error(f"[ORDERS] Store error creating order: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=STORE_ERROR_DETAIL)

    logger.info(f"[ORDERS] Created order {order.id} - total: {order.total_amount}")
    return order_response(order)


@router.get("/api/orders/{order_id}", response_model=OrderResponse)
async def get_order(
    order_id: int,
    order_service: OrderPersistenceService = Depends(get_order_service),
):
    """Get one order."""
    order = await order_service.get_order_by_id(order_id)
    if not order:
        raise HTTPException(status_code=404, detail=f"Order {order_id} not found")
    return order_response(order)


@router.post("/api/orders/{order_id}/cancel", response_model=OrderResponse)
async def cancel_order(
    order_id: int,
    order_service: OrderPersistenceService = Depends(get_order_service),
):
    """Cancel an unpaid order."""
    try:
        order = await order_service.cancel_order(order_id)
    except OrderStateError as e:
        raise HTTPException(status_code=409, detail=str(e))
    if not order:
        raise HTTPException(status_code=404, detail=f"Order {order_id} not found")
    logger.info(f"[ORDERS] Cancelled order {order_id}")
    return order_response(order)


@router.get(
    "/api/admin/orders/history",
    response_model=List[OrderResponse],
    dependencies=[Depends(require_auth)],
)
async def get_order_history(
    request: Request,
    limit: int = 100,
    order_service: OrderPersistenceService = Depends(get_order_service),
):
    """Get recent orders with their lines."""
    logger.info(
        f"[ORDERS HISTORY] Request received - limit: {limit}, "
        f"Client: {request.client.host if request.client else 'unknown'}"
    )
    try:
        orders = await order_service.list_orders(limit)
    except SQLAlchemyError as e:
        logger.error(f"[ORDERS HISTORY] Error fetching order history: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=STORE_ERROR_DETAIL)
    logger.info(f"[ORDERS HISTORY] Found {len(orders)} orders")
    return [order_response(order) for order in orders]
