"""
Itinerary models - Stage two of structured generation.
"""
from pydantic import Field, model_validator

from .base import CamelModel


class Activity(CamelModel):
    """A single scheduled activity."""
    time: str = Field(..., description="Activity time, e.g. '09:00'")
    activity: str = Field(..., description="Activity name")
    location: str = Field(..., description="Activity location")
    cost: str = Field(..., description="Estimated cost")
    duration: str = Field(..., description="Activity duration")


class Meals(CamelModel):
    breakfast: str = Field(..., description="Breakfast recommendation")
    lunch: str = Field(..., description="Lunch recommendation")
    dinner: str = Field(..., description="Dinner recommendation")


class DayPlan(CamelModel):
    """Plan for a single day."""
    day: int = Field(..., ge=1, description="Day number, starting at 1")
    theme: str = Field(..., description="Day theme or focus")
    activities: list[Activity] = Field(default_factory=list)
    meals: Meals
    daily_budget: str = Field(..., description="Daily budget breakdown")
    tips: list[str] = Field(default_factory=list, description="Daily tips")


class EmergencyInfo(CamelModel):
    embassy: str = Field(..., description="Embassy contact info")
    emergency: str = Field(..., description="Emergency numbers")
    hospitals: list[str] = Field(default_factory=list, description="Nearby hospitals")


class Itinerary(CamelModel):
    """Complete day-by-day travel itinerary."""
    destination: str = Field(..., description="Destination name")
    duration: str = Field(..., description="Trip duration")
    total_budget: str = Field(..., description="Total estimated budget")
    daily_itinerary: list[DayPlan] = Field(..., min_length=1)
    packing_list: list[str] = Field(default_factory=list)
    cultural_tips: list[str] = Field(default_factory=list)
    emergency_info: EmergencyInfo

    @model_validator(mode="after")
    def days_are_contiguous(self) -> "Itinerary":
        """Day numbers must run 1..N in order with no gaps or repeats."""
        days = [plan.day for plan in self.daily_itinerary]
        expected = list(range(1, len(days) + 1))
        if days != expected:
            raise ValueError(f"day numbers must be {expected}, got {days}")
        return self

    @property
    def total_days(self) -> int:
        return len(self.daily_itinerary)
