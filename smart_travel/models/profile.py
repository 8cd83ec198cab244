"""
User profile models - Preferences accumulated across requests.
"""
from pydantic import Field
from typing import Optional
from datetime import datetime
from enum import Enum

from .base import CamelModel


class TravelStyle(str, Enum):
    """Recognised travel styles, in extraction priority order."""
    LUXURY = "Luxury"
    BUDGET = "Budget"
    ADVENTURE = "Adventure"
    CULTURAL = "Cultural"
    ROMANTIC = "Romantic"
    FAMILY = "Family"


class ProfilePatch(CamelModel):
    """Partial profile produced by preference extraction. None means 'not mentioned'."""
    preferred_budget: Optional[str] = None
    travel_style: Optional[TravelStyle] = None
    destination_hint: Optional[str] = None
    dietary_restrictions: set[str] = Field(default_factory=set)

    def is_empty(self) -> bool:
        return (
            self.preferred_budget is None
            and self.travel_style is None
            and self.destination_hint is None
            and not self.dietary_restrictions
        )


class UserProfile(CamelModel):
    """Per-user travel preferences."""
    preferred_budget: Optional[str] = Field(
        None,
        description="Budget literal as the user wrote it, e.g. '$2000'"
    )
    travel_style: Optional[TravelStyle] = Field(
        None,
        description="Most recently detected travel style"
    )
    favorite_destinations: set[str] = Field(
        default_factory=set,
        description="Destinations the user has asked about"
    )
    dietary_restrictions: set[str] = Field(
        default_factory=set,
        description="Dietary restrictions mentioned by the user"
    )
    last_destination: Optional[str] = Field(
        None,
        description="Most recently mentioned gazetteer destination"
    )
    updated_at: Optional[datetime] = None

    def merge(self, patch: ProfilePatch) -> "UserProfile":
        """
        Merge-patch: non-null fields of the patch overwrite, sets are unioned.

        Returns a new profile; the receiver is left untouched.
        """
        data = self.model_copy(deep=True)
        changed = False

        if patch.preferred_budget is not None:
            data.preferred_budget = patch.preferred_budget
            changed = True
        if patch.travel_style is not None:
            data.travel_style = patch.travel_style
            changed = True
        if patch.destination_hint is not None:
            data.last_destination = patch.destination_hint
            data.favorite_destinations.add(patch.destination_hint)
            changed = True
        if patch.dietary_restrictions:
            data.dietary_restrictions |= patch.dietary_restrictions
            changed = True

        if changed:
            data.updated_at = datetime.now()
        return data
