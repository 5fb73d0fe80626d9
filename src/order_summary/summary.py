"""Summary result types and the documented fallback dataset."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any

# Placeholder figures served whenever the report cannot be fetched. Callers
# tell real data from these through SummaryResponse.error / is_fallback.
FALLBACK_NOTE = "This is cached data. For live data, run the report against the portal."
OFFLINE_NOTE = "Offline mode: the portal was not contacted."

WIRE_NAMES = {
    "cash_sales_in_store": "cashSalesInStore",
    "cash_sales_delivery": "cashSalesDelivery",
    "credit_card_tips_in_store": "creditCardTipsInStore",
    "credit_card_tips_delivery": "creditCardTipsDelivery",
    "total_orders": "totalOrders",
    "average_order_value": "averageOrderValue",
}


@dataclass(frozen=True)
class Summary:
    """Aggregated payments and tips for one request.

    Values are kept at full precision until ``rounded()`` is called at the
    presentation boundary.
    """

    cash_sales_in_store: float = 0.0
    cash_sales_delivery: float = 0.0
    credit_card_tips_in_store: float = 0.0
    credit_card_tips_delivery: float = 0.0
    total_orders: int = 0
    average_order_value: float = 0.0

    def rounded(self) -> Summary:
        """Copy with every monetary field rounded to 2 decimals."""
        return replace(
            self,
            cash_sales_in_store=round(self.cash_sales_in_store, 2),
            cash_sales_delivery=round(self.cash_sales_delivery, 2),
            credit_card_tips_in_store=round(self.credit_card_tips_in_store, 2),
            credit_card_tips_delivery=round(self.credit_card_tips_delivery, 2),
            total_orders=int(self.total_orders),
            average_order_value=round(self.average_order_value, 2),
        )

    def to_dict(self) -> dict[str, Any]:
        """Flat field map using the wire names (``cashSalesInStore``, ...)."""
        return {wire: getattr(self, attr) for attr, wire in WIRE_NAMES.items()}


FALLBACK_SUMMARY = Summary(
    cash_sales_in_store=256.75,
    cash_sales_delivery=124.50,
    credit_card_tips_in_store=45.25,
    credit_card_tips_delivery=32.80,
    total_orders=24,
    average_order_value=42.33,
)


@dataclass(frozen=True)
class SummaryResponse:
    """What a caller receives for one summary request.

    Attributes:
        summary: Real figures, or FALLBACK_SUMMARY when ``error`` is set or
            the service runs offline.
        error: Human-readable failure description, None on success.
        note: Optional remark shown next to placeholder data.
        cached: True when served from the result cache.
    """

    summary: Summary
    error: str | None = None
    note: str | None = None
    cached: bool = False

    @property
    def is_fallback(self) -> bool:
        return self.error is not None or self.summary is FALLBACK_SUMMARY

    @classmethod
    def fallback(cls, error: str | None = None, note: str = FALLBACK_NOTE) -> SummaryResponse:
        return cls(summary=FALLBACK_SUMMARY, error=error, note=note)

    def to_dict(self) -> dict[str, Any]:
        """Summary fields plus ``error`` / ``note`` when present."""
        out = self.summary.to_dict()
        if self.error is not None:
            out["error"] = self.error
        if self.note is not None:
            out["note"] = self.note
        return out
