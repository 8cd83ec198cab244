"""Data models for the travel planner."""
from .profile import TravelStyle, UserProfile, ProfilePatch
from .session import SessionRecord, SessionStore, ConversationEntry
from .analysis import DestinationAnalysis, Attraction, Feasibility
from .itinerary import Itinerary, DayPlan, Activity
from .plan import PlanResponse, TravelRequest, CurrentConditions

__all__ = [
    "TravelStyle",
    "UserProfile",
    "ProfilePatch",
    "SessionRecord",
    "SessionStore",
    "ConversationEntry",
    "DestinationAnalysis",
    "Attraction",
    "Feasibility",
    "Itinerary",
    "DayPlan",
    "Activity",
    "PlanResponse",
    "TravelRequest",
    "CurrentConditions",
]
