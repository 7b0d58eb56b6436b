"""Selection models - the trip-in-progress chosen by the user."""

from datetime import date, time, timedelta

from pydantic import BaseModel, Field, model_validator

from tripcost.models.common import Money


class SelectedComponent(BaseModel):
    """Fields shared by every selectable trip component."""

    id: str = Field(..., min_length=1)
    name: str
    estimated_cost: Money
    confidence: float | None = Field(
        default=None, ge=0, le=1, description="Data-source confidence; engine default if unset"
    )


class Accommodation(SelectedComponent):
    """Accommodation priced per night."""

    type: str = "hotel"
    location: str = ""
    check_in: date | None = None
    check_out: date | None = None

    def covers(self, day: date) -> bool:
        """True if the stay includes the night starting on `day`."""
        if self.check_in is None or self.check_out is None:
            return False
        return self.check_in <= day < self.check_out


class Activity(SelectedComponent):
    """Activity with an optional day and time slot."""

    category: str | None = None
    scheduled_date: date | None = None
    start_time: time | None = None
    duration_minutes: int = Field(default=60, gt=0)


class Transportation(SelectedComponent):
    """Single transportation leg."""

    mode: str = "flight"
    origin: str = ""
    destination: str = ""
    travel_date: date | None = None


class SelectedItems(BaseModel):
    """Three collections of selected components.

    Order is irrelevant for pricing but preserved for display.
    """

    accommodations: list[Accommodation] = Field(default_factory=list)
    activities: list[Activity] = Field(default_factory=list)
    transportation: list[Transportation] = Field(default_factory=list)

    @model_validator(mode="after")
    def _ids_unique_per_collection(self) -> "SelectedItems":
        for label, items in (
            ("accommodations", self.accommodations),
            ("activities", self.activities),
            ("transportation", self.transportation),
        ):
            ids = [item.id for item in items]
            if len(ids) != len(set(ids)):
                raise ValueError(f"duplicate ids in {label}")
        return self

    def sorted_ids(self) -> tuple[list[str], list[str], list[str]]:
        """Sorted ids per collection, used for content-based cache keys."""
        return (
            sorted(a.id for a in self.accommodations),
            sorted(a.id for a in self.activities),
            sorted(t.id for t in self.transportation),
        )


class Travelers(BaseModel):
    """Traveler counts."""

    adults: int = Field(default=1, ge=1)
    children: int = Field(default=0, ge=0)
    infants: int = Field(default=0, ge=0)

    @property
    def total(self) -> int:
        return self.adults + self.children + self.infants


class TripContext(BaseModel):
    """Trip date range (inclusive) and travelers."""

    start_date: date
    end_date: date
    travelers: Travelers = Field(default_factory=Travelers)

    @model_validator(mode="after")
    def _start_before_end(self) -> "TripContext":
        if self.start_date > self.end_date:
            raise ValueError("start_date must be on or before end_date")
        return self

    def days(self) -> list[date]:
        """Every calendar day from start_date to end_date inclusive."""
        span = (self.end_date - self.start_date).days
        return [self.start_date + timedelta(days=i) for i in range(span + 1)]
