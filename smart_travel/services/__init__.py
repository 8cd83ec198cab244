"""Services for the travel planner."""
from .llm_client import LLMClient
from .knowledge import KnowledgeRetriever
from .tools import EnvironmentToolSet
from .itinerary_generator import ItineraryGenerator
from .travel_planner import TravelPlanner, InvalidUserIdError

__all__ = [
    "LLMClient",
    "KnowledgeRetriever",
    "EnvironmentToolSet",
    "ItineraryGenerator",
    "TravelPlanner",
    "InvalidUserIdError",
]
