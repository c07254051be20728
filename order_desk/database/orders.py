"""In-memory order sink for development and tests"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Optional

from ..models.checkout import OrderRequest

logger = logging.getLogger(__name__)


class InMemoryOrderSink:
    """
    Order sink that keeps requests in a dict keyed by request_id.

    Repeated submissions with the same request_id are accepted but stored once.
    Setting fail_with makes every submission raise that error instead; delay
    holds each submission for that many seconds first.
    """

    def __init__(
        self,
        fail_with: Optional[Exception] = None,
        delay: float = 0.0,
    ):
        self.orders: dict[str, OrderRequest] = {}
        self.received_at: dict[str, datetime] = {}
        self.attempts = 0
        self.fail_with = fail_with
        self.delay = delay

    async def submit(self, order: OrderRequest) -> None:
        """Record an order request"""
        self.attempts += 1

        if self.delay:
            await asyncio.sleep(self.delay)

        if self.fail_with is not None:
            raise self.fail_with

        if order.request_id in self.orders:
            logger.info(f"Duplicate order {order.request_id} ignored")
            return

        self.orders[order.request_id] = order
        self.received_at[order.request_id] = datetime.now(timezone.utc)
        logger.info(f"Order {order.request_id} stored: {order.quantity}x {order.size_label}")

    def get_order(self, request_id: str) -> Optional[OrderRequest]:
        """Get an order by request ID"""
        return self.orders.get(request_id)

    def list_orders(self, limit: int = 50) -> list[OrderRequest]:
        """List recent orders"""
        orders = list(self.orders.values())
        orders.sort(key=lambda o: self.received_at[o.request_id], reverse=True)
        return orders[:limit]
