# Order Desk Models

from .product import PackSizeOffer, Product, ProductSummary, ProductDetailResponse
from .basket import BasketLine, BasketLineView, SelectSizeRequest, QuantityRequest
from .checkout import (
    MULTIPLE_SIZES_LABEL,
    CheckoutStep,
    CheckoutView,
    CreateSessionRequest,
    CustomerDetails,
    CustomerDetailsUpdate,
    OrderLineItem,
    OrderRequest,
)

__all__ = [
    "PackSizeOffer",
    "Product",
    "ProductSummary",
    "ProductDetailResponse",
    "BasketLine",
    "BasketLineView",
    "SelectSizeRequest",
    "QuantityRequest",
    "MULTIPLE_SIZES_LABEL",
    "CheckoutStep",
    "CheckoutView",
    "CreateSessionRequest",
    "CustomerDetails",
    "CustomerDetailsUpdate",
    "OrderLineItem",
    "OrderRequest",
]
