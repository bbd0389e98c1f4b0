"""Price estimate for an intake answer record."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence, Tuple

from .config import PricingConfig
from .models import ProjectPayment
from .schema import WizardSchema


@dataclass(slots=True)
class PriceEstimate:
    currency: str
    base: int
    pages: int
    features: List[Tuple[str, int]] = field(default_factory=list)
    addons: List[Tuple[str, int]] = field(default_factory=list)

    @property
    def total(self) -> int:
        return self.base + self.pages + sum(p for _, p in self.features) + sum(p for _, p in self.addons)


def _selected(schema: WizardSchema, answers: Dict[str, Any], path: str) -> List[str]:
    if schema.field(path) is None:
        return []
    value = answers.get(path)
    return list(value) if isinstance(value, list) else []


def estimate_price(schema: WizardSchema, answers: Dict[str, Any], pricing: PricingConfig) -> PriceEstimate:
    """Base price by goal tag, one page price per section after the first,
    plus listed feature and add-on prices. Unpriced items cost nothing."""

    goal = answers.get(schema.goal_path) or "custom"
    base = pricing.base_prices.get(goal, pricing.base_prices["custom"])
    sections = _selected(schema, answers, "sections")
    pages = max(len(sections) - 1, 0) * pricing.page_price
    features = [
        (name, pricing.feature_prices[name])
        for name in _selected(schema, answers, "features")
        if name in pricing.feature_prices
    ]
    addons = [
        (name, pricing.addon_prices[name])
        for name in _selected(schema, answers, "addons")
        if name in pricing.addon_prices
    ]
    return PriceEstimate(currency=pricing.currency, base=base, pages=pages, features=features, addons=addons)


@dataclass(slots=True)
class PaymentSummary:
    paid: float
    pending: float
    total: float

    @property
    def progress(self) -> int:
        """Share of the total already paid, as a whole percentage."""

        if self.total <= 0:
            return 0
        return round(self.paid / self.total * 100)


def summarize_payments(payments: Sequence[ProjectPayment], total: float) -> PaymentSummary:
    """Sum paid and pending installments against the project total.

    Overdue and unknown statuses count towards neither sum.
    """

    paid = sum(p.amount for p in payments if p.status == "paid")
    pending = sum(p.amount for p in payments if p.status == "pending")
    return PaymentSummary(paid=paid, pending=pending, total=total)


__all__ = ["PriceEstimate", "PaymentSummary", "estimate_price", "summarize_payments"]
