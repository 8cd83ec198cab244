"""
Destination analysis - Stage one of structured generation.
"""
from pydantic import Field
from enum import Enum

from .base import CamelModel


class Feasibility(str, Enum):
    """How comfortably the stated budget covers the destination."""
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class BestTimeToVisit(CamelModel):
    months: list[str] = Field(..., description="Best months to visit")
    season: str = Field(..., description="Best season")
    weather: str = Field(..., description="Expected weather conditions")


class DailyBudget(CamelModel):
    budget: str = Field(..., description="Recommended daily budget range")
    accommodation: str = Field(..., description="Accommodation cost range")
    food: str = Field(..., description="Food cost range")
    activities: str = Field(..., description="Activities cost range")


class BudgetAnalysis(CamelModel):
    feasibility: Feasibility = Field(..., description="Budget feasibility")
    daily_budget: DailyBudget


class Attraction(CamelModel):
    name: str = Field(..., description="Attraction name")
    type: str = Field(..., description="Type of attraction")
    estimated_cost: str = Field(..., description="Estimated cost")
    time_needed: str = Field(..., description="Time needed to visit")


class Transportation(CamelModel):
    primary: str = Field(..., description="Primary transportation method")
    cost: str = Field(..., description="Transportation cost estimate")
    tips: list[str] = Field(default_factory=list, description="Transportation tips")


class DestinationAnalysis(CamelModel):
    """Structured analysis of a destination for a given budget and style."""
    destination: str = Field(..., description="The destination name")
    best_time_to_visit: BestTimeToVisit
    budget_analysis: BudgetAnalysis
    top_attractions: list[Attraction] = Field(
        ...,
        min_length=3,
        max_length=3,
        description="Top 3 must-see attractions"
    )
    transportation: Transportation
