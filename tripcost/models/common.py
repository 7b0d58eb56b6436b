"""Common types and enums shared across all models."""

from enum import Enum

from pydantic import BaseModel, Field


class Money(BaseModel):
    """Non-negative monetary amount tagged with a currency code."""

    amount: float = Field(..., ge=0)
    currency: str = "USD"


class SignedMoney(BaseModel):
    """Monetary delta; positive means a cost increase."""

    amount: float
    currency: str = "USD"


class PricingCategory(str, Enum):
    """Cost category in a pricing breakdown."""

    accommodations = "accommodations"
    activities = "activities"
    transportation = "transportation"
    meals = "meals"
    miscellaneous = "miscellaneous"


class ComponentKind(str, Enum):
    """Kind of selected trip component."""

    accommodation = "accommodation"
    activity = "activity"
    transportation = "transportation"


class ChangeType(str, Enum):
    """How a selection change affected the trip."""

    add = "add"
    remove = "remove"
    modify = "modify"
