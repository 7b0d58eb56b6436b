"""Itinerary models - day-by-day structure handed to the cost engine."""

from datetime import date

from pydantic import BaseModel

from tripcost.models.selection import Accommodation, Activity, Transportation, Travelers


class ItineraryDay(BaseModel):
    """Components assigned to a single calendar day."""

    day_number: int
    date: date
    accommodation: Accommodation | None
    activities: list[Activity]
    transportation: list[Transportation]


class Itinerary(BaseModel):
    """Full trip as a sequence of days."""

    days: list[ItineraryDay]
    travelers: Travelers
