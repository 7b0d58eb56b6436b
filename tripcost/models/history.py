"""Pricing history models - change trail for one planning session."""

from datetime import datetime

from pydantic import BaseModel, Field

from tripcost.models.common import ChangeType, ComponentKind, Money, SignedMoney
from tripcost.models.pricing import PricingUpdate


class ChangeDescriptor(BaseModel):
    """Caller-supplied description of what triggered a recalculation."""

    change_type: ChangeType = ChangeType.modify
    component: ComponentKind = ComponentKind.activity
    component_name: str = "Updated Selection"


class ChangeRecord(BaseModel):
    """A single detected price delta and its cause."""

    timestamp: datetime
    change_type: ChangeType
    component: ComponentKind
    component_name: str
    price_difference: SignedMoney
    new_total: Money


class PricingHistory(BaseModel):
    """Diff trail between the first and the most recent update.

    `original` is the first update exactly as recorded. After a display
    currency switch, `display_original` holds it re-expressed in the
    currency of `current`; change records keep the currency they were
    recorded in.
    """

    original: PricingUpdate
    current: PricingUpdate
    changes: list[ChangeRecord] = Field(default_factory=list)
    display_original: PricingUpdate | None = None

    @property
    def baseline(self) -> PricingUpdate:
        """Original update in the currency of `current`."""
        return self.display_original or self.original


class CategoryChange(BaseModel):
    """Change of a single category between two updates."""

    amount: SignedMoney
    percentage: float


class PriceComparison(BaseModel):
    """Comparison between an original and a current update."""

    total_difference: SignedMoney
    percentage_change: float
    category_changes: dict[str, CategoryChange]
