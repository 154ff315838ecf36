"""Discount selection for table offers.

Works on any objects exposing the Offer attributes (``active``,
``valid_from``, ``valid_to``, ``discount_percent``, ...), so it runs the same
on ORM rows and on plain test doubles.
"""
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Sequence


@dataclass
class PriceQuote:
    price: int
    discount: int
    final_price: int
    applied_offers: list = field(default_factory=list)


def find_applicable_offers(offers: Sequence, at: datetime) -> list:
    if not offers:
        return []
    applicable = []
    for offer in offers:
        if offer is None or not offer.active:
            continue
        if offer.valid_from is not None and offer.valid_from > at:
            continue
        if offer.valid_to is not None and offer.valid_to < at:
            continue
        applicable.append(offer)
    return applicable


def pick_best_offer(offers: Sequence):
    """Highest discount_percent wins; the earlier offer keeps a tie."""
    best = None
    for offer in offers:
        if best is None or (offer.discount_percent or 0) > (best.discount_percent or 0):
            best = offer
    return best


def snapshot_offer(offer) -> dict:
    return {
        "title": offer.title,
        "description": offer.description,
        "discount_percent": offer.discount_percent,
        "bank": offer.bank,
        "valid_from": offer.valid_from.isoformat() if offer.valid_from else None,
        "valid_to": offer.valid_to.isoformat() if offer.valid_to else None,
    }


def compute_discount(price: int, percent: Optional[int]) -> int:
    if not percent:
        return 0
    amount = Decimal(price) * Decimal(percent) / Decimal(100)
    return int(amount.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def quote_price(price: Optional[int], offers: Sequence, at: datetime) -> PriceQuote:
    base_price = int(price or 0)
    best = pick_best_offer(find_applicable_offers(offers, at))

    discount = 0
    applied = []
    if best is not None and best.discount_percent:
        discount = compute_discount(base_price, best.discount_percent)
        applied.append(snapshot_offer(best))

    return PriceQuote(
        price=base_price,
        discount=discount,
        final_price=max(0, base_price - discount),
        applied_offers=applied,
    )
