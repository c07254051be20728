"""Basket models for the order desk"""

from pydantic import BaseModel, Field
from typing import Optional

from .product import PackSizeOffer


class BasketLine(BaseModel):
    """One pack size and how many of it the visitor wants"""
    size: PackSizeOffer
    quantity: int = Field(ge=1)


class BasketLineView(BaseModel):
    """Basket line as shown in the drawer"""
    label: str
    sku: Optional[str] = None
    price: Optional[str] = None
    quantity: int


class SelectSizeRequest(BaseModel):
    """Request to pick a pack size"""
    label: str


class QuantityRequest(BaseModel):
    """Request to set a quantity (pending selection or basket line)"""
    quantity: int
