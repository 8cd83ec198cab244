"""Shared fixtures for the travel planner tests."""
import copy
import json

import pytest

from smart_travel.models.session import SessionStore
from smart_travel.services.itinerary_generator import ItineraryGenerator
from smart_travel.services.knowledge import KnowledgeRetriever
from smart_travel.services.tools import EnvironmentToolSet
from smart_travel.services.travel_planner import TravelPlanner


ANALYSIS_PAYLOAD = {
    "destination": "Costa Rica",
    "bestTimeToVisit": {
        "months": ["December", "January", "February"],
        "season": "Dry season",
        "weather": "Warm and sunny",
    },
    "budgetAnalysis": {
        "feasibility": "High",
        "dailyBudget": {
            "budget": "$80-150 per day",
            "accommodation": "$30-60",
            "food": "$20-35",
            "activities": "$20-50",
        },
    },
    "topAttractions": [
        {"name": "Arenal Volcano", "type": "Nature", "estimatedCost": "$15", "timeNeeded": "Full day"},
        {"name": "Monteverde Cloud Forest", "type": "Nature", "estimatedCost": "$25", "timeNeeded": "Half day"},
        {"name": "Manuel Antonio", "type": "Beach/Park", "estimatedCost": "$18", "timeNeeded": "Full day"},
    ],
    "transportation": {"primary": "Shuttle buses", "cost": "$50 per leg", "tips": ["Book shuttles early"]},
}


def make_day(day: int) -> dict:
    return {
        "day": day,
        "theme": f"Day {day} highlights",
        "activities": [
            {"time": "09:00", "activity": "Hike", "location": "Arenal", "cost": "$15", "duration": "3 hours"}
        ],
        "meals": {"breakfast": "Gallo pinto", "lunch": "Casado", "dinner": "Ceviche"},
        "dailyBudget": "$120",
        "tips": ["Bring rain gear"],
    }


def make_itinerary(days=(1, 2, 3)) -> dict:
    return {
        "destination": "Costa Rica",
        "duration": f"{len(days)} days",
        "totalBudget": "$2000",
        "dailyItinerary": [make_day(day) for day in days],
        "packingList": ["Rain jacket"],
        "culturalTips": ["Pura vida"],
        "emergencyInfo": {"embassy": "San José", "emergency": "911", "hospitals": ["Hospital CIMA"]},
    }


class FakeLLM:
    """
    Stand-in for LLMClient.

    Replies are consumed in order; an Exception instance in the list is raised
    instead of returned.
    """

    def __init__(self, replies=None, available=True, embeddings=False, vectors=None):
        self.replies = list(replies or [])
        self.available = available
        self.embeddings_available = embeddings
        self.vectors = vectors or {}
        self.prompts: list[tuple] = []
        self.embed_calls = 0

    async def generate_text(self, prompt, system=None, json_mode=True):
        self.prompts.append((system, prompt))
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply

    async def embed(self, texts):
        self.embed_calls += 1
        return [self.vectors.get(text, [0.0, 0.0, 1.0]) for text in texts]


@pytest.fixture
def analysis_payload():
    return copy.deepcopy(ANALYSIS_PAYLOAD)


@pytest.fixture
def analysis_json():
    return json.dumps(ANALYSIS_PAYLOAD)


@pytest.fixture
def itinerary_json():
    return json.dumps(make_itinerary())


@pytest.fixture
def offline_planner():
    """Planner with no generation or embedding capability configured."""
    return TravelPlanner(
        store=SessionStore(history_limit=10),
        generator=ItineraryGenerator(llm=FakeLLM(available=False)),
        retriever=KnowledgeRetriever(llm=FakeLLM(available=False)),
        tools=EnvironmentToolSet(timeout=2.0),
        default_destination="Paris",
    )
