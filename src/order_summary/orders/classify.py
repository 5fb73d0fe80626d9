"""Channel and payment classification for order rows.

The export's vocabulary for "picked up in person" changes between export
versions, so every synonym lives here and nowhere else. Matching is
case-insensitive containment on the normalized label.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from order_summary.orders.cleaning import normalize_label


class Channel(str, Enum):
    """Logical fulfilment channel of an order."""

    IN_STORE = "in_store"
    DELIVERY = "delivery"
    OTHER = "other"


class PaymentKind(str, Enum):
    """Logical payment category of an order."""

    CASH = "cash"
    CREDIT_CARD = "credit_card"
    OTHER = "other"


IN_STORE_TYPES = ("Pick Up", "Pickup", "To Go", "Web Pickup", "Web Pick Up")
DELIVERY_MARKER = "Delivery"

CASH_MARKER = "Cash"
CREDIT_CARD_BRANDS = ("Visa", "MC", "AMEX")

_IN_STORE_NEEDLES = tuple(normalize_label(t) for t in IN_STORE_TYPES)
_DELIVERY_NEEDLE = normalize_label(DELIVERY_MARKER)
_CASH_NEEDLE = normalize_label(CASH_MARKER)
_CARD_NEEDLES = tuple(normalize_label(b) for b in CREDIT_CARD_BRANDS)


def classify_channel(order_type: Any) -> Channel:
    """Map a free-text order type to a Channel.

    In-store synonyms win over "Delivery" when a label contains both.

    Examples:
        >>> classify_channel("Web Pick Up")
        <Channel.IN_STORE: 'in_store'>
        >>> classify_channel("DELIVERY")
        <Channel.DELIVERY: 'delivery'>
        >>> classify_channel("Dine In")
        <Channel.OTHER: 'other'>
    """
    s = normalize_label(order_type)
    if not s:
        return Channel.OTHER
    if any(needle in s for needle in _IN_STORE_NEEDLES):
        return Channel.IN_STORE
    if _DELIVERY_NEEDLE in s:
        return Channel.DELIVERY
    return Channel.OTHER


def classify_payment(payment_method: Any) -> PaymentKind:
    """Map a free-text payment label to a PaymentKind.

    Examples:
        >>> classify_payment("cash")
        <PaymentKind.CASH: 'cash'>
        >>> classify_payment("Visa ****1234")
        <PaymentKind.CREDIT_CARD: 'credit_card'>
        >>> classify_payment("Gift Card")
        <PaymentKind.OTHER: 'other'>
    """
    s = normalize_label(payment_method)
    if not s:
        return PaymentKind.OTHER
    if _CASH_NEEDLE in s:
        return PaymentKind.CASH
    if any(needle in s for needle in _CARD_NEEDLES):
        return PaymentKind.CREDIT_CARD
    return PaymentKind.OTHER
