"""Checkout models for the order desk"""

from pydantic import BaseModel
from typing import Optional
from enum import Enum

from .basket import BasketLineView
from .product import PackSizeOffer


MULTIPLE_SIZES_LABEL = "Multiple sizes"

REQUIRED_DETAIL_FIELDS = ("name", "email", "phone", "line1", "town", "postcode")


class CheckoutStep(str, Enum):
    CLOSED = "closed"
    SELECT_SIZE = "select"
    BASKET = "basket"
    DETAILS = "form"
    SUCCESS = "success"


class CustomerDetails(BaseModel):
    """Contact and delivery details collected before submission"""
    name: str = ""
    company: str = ""
    email: str = ""
    phone: str = ""
    line1: str = ""
    line2: str = ""
    town: str = ""
    county: str = ""
    postcode: str = ""
    notes: str = ""

    def missing_fields(self) -> list[str]:
        """Required fields that are still blank"""
        return [name for name in REQUIRED_DETAIL_FIELDS if not getattr(self, name).strip()]

    @property
    def is_complete(self) -> bool:
        return not self.missing_fields()


class CustomerDetailsUpdate(BaseModel):
    """Partial update of the details form"""
    name: Optional[str] = None
    company: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    line1: Optional[str] = None
    line2: Optional[str] = None
    town: Optional[str] = None
    county: Optional[str] = None
    postcode: Optional[str] = None
    notes: Optional[str] = None


class OrderLineItem(BaseModel):
    """Snapshot of one basket line inside an order request"""
    label: str
    sku: Optional[str] = None
    quantity: int

    class Config:
        frozen = True


class OrderRequest(BaseModel):
    """Delivery-quote request handed to the order sink"""
    request_id: str
    product_title: str
    product_slug: str
    size_label: str
    sku: Optional[str] = None
    quantity: int
    items: tuple[OrderLineItem, ...]
    customer_name: str
    customer_company: Optional[str] = None
    customer_email: str
    customer_phone: str
    delivery_address_line1: str
    delivery_address_line2: Optional[str] = None
    delivery_town: str
    delivery_county: Optional[str] = None
    delivery_postcode: str
    notes: Optional[str] = None

    class Config:
        frozen = True


class CreateSessionRequest(BaseModel):
    """Request to create a checkout session for a product"""
    product_slug: str


class CheckoutView(BaseModel):
    """Everything the drawer needs to render its current step"""
    session_id: str
    product_slug: str
    product_title: str
    step: CheckoutStep
    header: str
    sizes: list[PackSizeOffer]
    pending_size: Optional[PackSizeOffer] = None
    pending_quantity: int = 1
    add_label: str
    can_view_basket: bool
    lines: list[BasketLineView]
    total_quantity: int
    size_summary_label: Optional[str] = None
    can_continue: bool
    details: CustomerDetails
    missing_fields: list[str]
    can_submit: bool
    submitting: bool = False
    error_message: Optional[str] = None
    order: Optional[OrderRequest] = None
