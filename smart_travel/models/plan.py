"""
Plan response - The value returned for every planning request.
"""
from pydantic import ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Optional
from datetime import datetime

from .base import CamelModel
from .profile import UserProfile
from .analysis import DestinationAnalysis
from .itinerary import Itinerary


class TravelRequest(CamelModel):
    """Request parameters after defaults have been applied."""
    destination: str
    duration: str
    budget: str
    interests: str
    group_size: str


class CurrentConditions(CamelModel):
    """Environment tool output for the resolved destination."""
    weather: str
    currency: str
    booking: Optional[str] = None


class PlanResponse(CamelModel):
    """Complete planning result. Immutable once built."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    user_id: str
    timestamp: datetime = Field(default_factory=datetime.now)
    profile: UserProfile
    travel_plan: TravelRequest
    knowledge: str = ""
    current_conditions: CurrentConditions
    destination_analysis: DestinationAnalysis
    itinerary: Itinerary
    recommendations: list[str] = Field(default_factory=list)
    next_steps: list[str] = Field(default_factory=list)

    def to_display_dict(self) -> dict:
        """JSON-ready dictionary with camelCase keys."""
        return self.model_dump(mode="json", by_alias=True)
