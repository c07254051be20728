# Services

from .basket import Basket
from .checkout import CheckoutWorkflow, UnknownPackSize, build_order_request
from .order_sink import (
    ConfigurationUnavailable,
    OrderSink,
    OrderSinkError,
    SubmissionRejected,
    SubmissionTimeout,
    SupabaseOrderSink,
    build_order_sink,
)
from .size_catalog import CANONICAL_SIZES, resolve_sizes, size_hint
from .wizard import InvalidTransition, SubmissionInProgress

__all__ = [
    "Basket",
    "CheckoutWorkflow",
    "UnknownPackSize",
    "build_order_request",
    "ConfigurationUnavailable",
    "OrderSink",
    "OrderSinkError",
    "SubmissionRejected",
    "SubmissionTimeout",
    "SupabaseOrderSink",
    "build_order_sink",
    "CANONICAL_SIZES",
    "resolve_sizes",
    "size_hint",
    "InvalidTransition",
    "SubmissionInProgress",
]
