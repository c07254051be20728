"""
Order Sink Client

Delivers finished order requests to the orders table in Supabase through its
PostgREST API. Anonymous inserts are expected to be allowed by row level
security, so the public anon key is enough.
"""

import json
import logging
from typing import Any, Optional, Protocol

import httpx

from ..models.checkout import OrderRequest

logger = logging.getLogger(__name__)


class OrderSinkError(Exception):
    """Base exception for order sink errors"""
    pass


class ConfigurationUnavailable(OrderSinkError):
    """The sink has no credentials or endpoint to talk to"""
    pass


class SubmissionRejected(OrderSinkError):
    """The sink was reached but did not accept the order"""
    pass


class SubmissionTimeout(SubmissionRejected):
    """The sink did not answer in time"""
    pass


class OrderSink(Protocol):
    async def submit(self, order: OrderRequest) -> None:
        ...


def order_to_row(order: OrderRequest) -> dict[str, Any]:
    """
    Convert an order request into an orders table row.

    Basket lines are stored as JSON text in basket_items. Optional fields
    that are blank are left out so the column defaults apply.
    """
    row: dict[str, Any] = {
        "request_id": order.request_id,
        "product_title": order.product_title,
        "product_slug": order.product_slug,
        "size_label": order.size_label,
        "sku": order.sku,
        "quantity": order.quantity,
        "basket_items": json.dumps(
            [{"size": item.label, "sku": item.sku, "qty": item.quantity} for item in order.items]
        ),
        "customer_name": order.customer_name,
        "customer_company": order.customer_company,
        "customer_email": order.customer_email,
        "customer_phone": order.customer_phone,
        "delivery_address_line1": order.delivery_address_line1,
        "delivery_address_line2": order.delivery_address_line2,
        "delivery_town": order.delivery_town,
        "delivery_county": order.delivery_county,
        "delivery_postcode": order.delivery_postcode,
        "notes": order.notes,
    }
    return {key: value for key, value in row.items() if value not in (None, "")}


class SupabaseOrderSink:
    """
    Order sink backed by a Supabase orders table.

    Inserts are keyed on request_id with duplicates ignored, so a retried
    submission of the same request is recorded once.
    """

    def __init__(
        self,
        supabase_url: Optional[str],
        anon_key: Optional[str],
        table: str = "orders",
        timeout: float = 15.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the sink.

        Args:
            supabase_url: Project URL, e.g. https://xyz.supabase.co
            anon_key: Public anon key of the project
            table: Orders table name
            timeout: HTTP timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        self.base_url = supabase_url.rstrip("/") if supabase_url else None
        self._anon_key = anon_key
        self.table = table
        self._http_client = httpx.AsyncClient(timeout=timeout, transport=transport)

        if not self.configured:
            logger.warning(
                "Missing Supabase URL or anon key - order submission will be unavailable"
            )

    @property
    def configured(self) -> bool:
        return bool(self.base_url and self._anon_key)

    async def close(self) -> None:
        """Close HTTP client"""
        await self._http_client.aclose()

    def _generate_headers(self) -> dict[str, str]:
        return {
            "apikey": self._anon_key or "",
            "Authorization": f"Bearer {self._anon_key}",
            "Content-Type": "application/json",
            "Prefer": "return=minimal,resolution=ignore-duplicates",
        }

    async def submit(self, order: OrderRequest) -> None:
        """Insert one order row"""
        if not self.configured:
            raise ConfigurationUnavailable("Supabase URL or anon key is not configured")

        url = f"{self.base_url}/rest/v1/{self.table}"

        try:
            response = await self._http_client.post(
                url,
                params={"on_conflict": "request_id"},
                headers=self._generate_headers(),
                content=json.dumps(order_to_row(order)),
            )
        except httpx.TimeoutException as e:
            raise SubmissionTimeout(f"Order insert timed out: {e}") from e
        except httpx.HTTPError as e:
            raise SubmissionRejected(f"Order insert failed: {e}") from e

        if response.status_code >= 400:
            logger.error(f"Order insert error: {response.status_code} - {response.text}")
            raise SubmissionRejected(f"Order insert rejected with status {response.status_code}")

        logger.info(f"Order {order.request_id} recorded for {order.product_slug}")


def build_order_sink(settings) -> OrderSink:
    """Create the order sink selected by configuration"""
    if settings.order_sink_backend == "memory":
        from ..database.orders import InMemoryOrderSink

        logger.info("Using in-memory order sink")
        return InMemoryOrderSink()

    return SupabaseOrderSink(
        supabase_url=settings.supabase_url,
        anon_key=settings.supabase_anon_key,
        table=settings.supabase_orders_table,
        timeout=settings.order_submit_timeout_seconds,
    )
