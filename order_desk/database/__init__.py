# Database modules

from .products import product_db, ProductDatabase
from .orders import InMemoryOrderSink

__all__ = [
    "product_db",
    "ProductDatabase",
    "InMemoryOrderSink",
]
