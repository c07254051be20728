"""
Size Catalog

Merges the standard pack sizes with what the content source says about a
product: per-size details, extra non-standard sizes and sizes to hide.
"""

import logging
from typing import Any, Iterable, Optional, Union

from pydantic import ValidationError

from ..models.product import PackSizeOffer

logger = logging.getLogger(__name__)

# Standard pack sizes in display order
CANONICAL_SIZES: tuple[str, ...] = (
    "1L",
    "5L",
    "20L",
    "25L",
    "200L",
    "205L",
    "208L",
    "1000L",
    "Bulk Tanker",
)

_CANONICAL_SET = frozenset(CANONICAL_SIZES)

OfferInput = Union[PackSizeOffer, dict[str, Any]]


def _coerce_offers(offers: Optional[Iterable[OfferInput]]) -> list[PackSizeOffer]:
    """Turn content source records into offers, dropping anything unusable"""
    result: list[PackSizeOffer] = []
    for raw in offers or ():
        if isinstance(raw, PackSizeOffer):
            offer = raw
        elif isinstance(raw, dict):
            try:
                offer = PackSizeOffer.model_validate(raw)
            except ValidationError:
                logger.debug(f"Skipping malformed pack size record: {raw!r}")
                continue
        else:
            logger.debug(f"Skipping unexpected pack size record: {raw!r}")
            continue

        if not offer.label.strip():
            continue
        result.append(offer)
    return result


def resolve_sizes(
    offers: Optional[Iterable[OfferInput]],
    unavailable: Optional[Iterable[Any]] = None,
) -> list[PackSizeOffer]:
    """
    Build the ordered list of pack sizes to show for a product.

    Canonical sizes come first in canonical order (skipping unavailable ones),
    using the content source's offer for that label when there is one.
    Non-canonical offers follow in source order. A label never appears twice;
    when the source repeats a label the first record wins.
    """
    excluded = frozenset(str(label) for label in (unavailable or ()) if label is not None)
    source = _coerce_offers(offers)

    by_label: dict[str, PackSizeOffer] = {}
    for offer in source:
        by_label.setdefault(offer.label, offer)

    resolved = [
        by_label.get(label) or PackSizeOffer(label=label)
        for label in CANONICAL_SIZES
        if label not in excluded
    ]

    emitted = {offer.label for offer in resolved}
    for offer in source:
        if offer.label in _CANONICAL_SET or offer.label in excluded:
            continue
        if offer.label in emitted:
            continue
        resolved.append(offer)
        emitted.add(offer.label)

    return resolved


def size_hint(sizes: list[PackSizeOffer]) -> str:
    """Short caption describing the range of sizes on offer"""
    if not sizes:
        return "Size options available on request"

    count = len(sizes)
    noun = "pack size" if count == 1 else "pack sizes"
    return f"{count} {noun}: {sizes[0].label} to {sizes[-1].label}"
