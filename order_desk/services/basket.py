"""Basket aggregation for a single checkout session"""

import logging
from typing import Iterator, Optional

from ..models.basket import BasketLine, BasketLineView
from ..models.checkout import MULTIPLE_SIZES_LABEL, OrderLineItem
from ..models.product import PackSizeOffer

logger = logging.getLogger(__name__)

DEFAULT_MAX_QUANTITY = 999


class Basket:
    """
    In-memory basket of pack size lines, keyed by size label.

    Lines keep the order in which their label was first added. Quantities are
    kept between 1 and max_quantity; requests outside that range are ignored.
    Each mutator returns True when the basket changed.
    """

    def __init__(self, max_quantity: int = DEFAULT_MAX_QUANTITY):
        self.max_quantity = max_quantity
        self.lines: list[BasketLine] = []

    def __len__(self) -> int:
        return len(self.lines)

    def __iter__(self) -> Iterator[BasketLine]:
        return iter(self.lines)

    @property
    def is_empty(self) -> bool:
        return not self.lines

    def line_for(self, label: str) -> Optional[BasketLine]:
        """Get the line for a size label"""
        return next((line for line in self.lines if line.size.label == label), None)

    def add_or_merge(self, size: PackSizeOffer, quantity: int) -> bool:
        """Add a size to the basket, merging into an existing line for the same label"""
        if quantity < 1:
            return False

        existing_line = self.line_for(size.label)

        if existing_line:
            new_quantity = existing_line.quantity + quantity
            if new_quantity > self.max_quantity:
                logger.debug(f"Refusing to raise {size.label} to {new_quantity} (max {self.max_quantity})")
                return False
            existing_line.quantity = new_quantity
        else:
            if quantity > self.max_quantity:
                logger.debug(f"Refusing to add {quantity}x {size.label} (max {self.max_quantity})")
                return False
            self.lines.append(BasketLine(size=size, quantity=quantity))

        return True

    def set_quantity(self, label: str, quantity: int) -> bool:
        """Replace the quantity of an existing line"""
        if quantity < 1 or quantity > self.max_quantity:
            return False

        line = self.line_for(label)
        if not line:
            return False

        line.quantity = quantity
        return True

    def remove(self, label: str) -> bool:
        """Remove the line for a size label"""
        remaining = [line for line in self.lines if line.size.label != label]
        if len(remaining) == len(self.lines):
            return False
        self.lines = remaining
        return True

    def clear(self) -> None:
        """Remove all lines"""
        self.lines = []

    @property
    def total_quantity(self) -> int:
        return sum(line.quantity for line in self.lines)

    @property
    def size_summary_label(self) -> Optional[str]:
        """The single line's label, or the multiple sizes marker"""
        if not self.lines:
            return None
        if len(self.lines) == 1:
            return self.lines[0].size.label
        return MULTIPLE_SIZES_LABEL

    @property
    def single_sku(self) -> Optional[str]:
        """SKU of the only line, if there is exactly one"""
        if len(self.lines) == 1:
            return self.lines[0].size.sku
        return None

    def snapshot(self) -> tuple[OrderLineItem, ...]:
        """Freeze the current lines for an order request"""
        return tuple(
            OrderLineItem(label=line.size.label, sku=line.size.sku, quantity=line.quantity)
            for line in self.lines
        )

    def views(self) -> list[BasketLineView]:
        return [
            BasketLineView(
                label=line.size.label,
                sku=line.size.sku,
                price=line.size.price,
                quantity=line.quantity,
            )
            for line in self.lines
        ]
