"""Order persistence service."""
from typing import List, Optional, Sequence
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, desc
from sqlalchemy.orm import selectinload

from smartorder.db.models import Order, OrderItem
from smartorder.services.ordering.cart import cart_total
from smartorder.services.ordering.models import CartLine, OrderStatus


class OrderStateError(Exception):
    """Requested status change is not allowed from the current status."""


class OrderPersistenceService:
    """Service for persisting order data."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_order(
        self,
        lines: Sequence[CartLine],
        raw_text: Optional[str] = None,
        payment_method: Optional[str] = None,
    ) -> Order:
        """Create a pending order whose total is the sum of its lines."""
        order = Order(
            status=OrderStatus.PENDING.value,
            raw_text=raw_text,
            payment_method=payment_method,
            total_amount=cart_total(lines),
        )
        order.items = [
            OrderItem(
                position=position,
                product_id=line.product_id,
                name=line.name,
                quantity=line.quantity,
                unit_price=line.unit_price,
                special_requests=line.special_requests,
                image_url=line.image_url,
                ai_hint=line.ai_hint,
            )
            for position, line in enumerate(lines)
        ]
        self.db.add(order)
        await self.db.commit()
        return await self.get_order_by_id(order.id)

    async def get_order_by_id(self, order_id: int) -> Optional[Order]:
        """Get order by ID with items."""
        result = await self.db.execute(
            select(Order)
            .where(Order.id == order_id)
            .options(selectinload(Order.items))
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def list_orders(self, limit: int = 100) -> List[Order]:
        """Most recent orders first."""
        result = await self.db.execute(
            select(Order)
            .options(selectinload(Order.items))
            .order_by(desc(Order.created_at), desc(Order.id))
            .limit(limit)
        )
        return list(result.scalars().all())

    async def _set_status(self, order: Order, status: OrderStatus) -> Order:
        order.status = status.value
        await self.db.commit()
        return await self.get_order_by_id(order.id)

    async def attach_payment_intent(
        self, order_id: int, payment_intent_id: str, payment_method: Optional[str] = None
    ) -> Optional[Order]:
        """Record the payment intent created for an order."""
        order = await self.get_order_by_id(order_id)
        if order:
            order.payment_intent_id = payment_intent_id
            if payment_method:
                order.payment_method = payment_method
            await self.db.commit()
            order = await self.get_order_by_id(order_id)
        return order

    async def confirm_order(self, order_id: int) -> Optional[Order]:
        """Confirm an order whose payment is being processed."""
        order = await self.get_order_by_id(order_id)
        if order and order.status == OrderStatus.PENDING.value:
            order = await self._set_status(order, OrderStatus.CONFIRMED)
        return order

    async def mark_paid(self, order_id: int) -> Optional[Order]:
        """Mark an order as paid."""
        order = await self.get_order_by_id(order_id)
        if order:
            if order.status == OrderStatus.CANCELLED.value:
                raise OrderStateError(f"Order {order_id} is cancelled")
            order = await self._set_status(order, OrderStatus.PAID)
        return order

    async def cancel_order(self, order_id: int) -> Optional[Order]:
        """Cancel an order that has not been paid."""
        order = await self.get_order_by_id(order_id)
        if order:
            if order.status == OrderStatus.PAID.value:
                raise OrderStateError(f"Order {order_id} is already paid")
            order = await self._set_status(order, OrderStatus.CANCELLED)
        return order
