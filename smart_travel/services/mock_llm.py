"""
Mock LLM Client - Deterministic generation grounded in the bundled resource file.

Answers the destination-analysis and itinerary prompts with schema-shaped
JSON built from ``resources/destinations.json`` and provides hashed
bag-of-words embeddings. Useful for demos and tests without a provider.
"""
import hashlib
import json
import logging
import math
import re
from typing import Any, Optional

from .extractor import duration_in_days
from .knowledge import load_destination_data

logger = logging.getLogger(__name__)

EMBEDDING_DIMENSIONS = 256
MAX_MOCK_DAYS = 14


class MockLLMClient:
    """
    Grounded Mock LLM Client.
    Source of truth: resources/destinations.json
    """

    def __init__(self):
        self.model = "mock-resource-grounded"
        self.profiles: dict[str, Any] = load_destination_data().get("profiles", {})

    async def chat(
        self,
        messages: list[dict],
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        json_mode: bool = False
    ) -> str:
        """Route the request by the system prompt, as a real model would by instruction."""
        user_msg = next((m["content"] for m in reversed(messages) if m["role"] == "user"), "")
        system_msg = next((m["content"] for m in messages if m["role"] == "system"), "")

        if "travel analyst" in system_msg.lower():
            return json.dumps(self._analysis(user_msg))
        if "travel planner" in system_msg.lower():
            return json.dumps(self._itinerary(user_msg))

        return "I am grounded in backend data. Ask me for a destination analysis or an itinerary."

    def embed(self, texts: list[str]) -> list[list[float]]:
        return [self._embed_one(text) for text in texts]

    def _embed_one(self, text: str) -> list[float]:
        vector = [0.0] * EMBEDDING_DIMENSIONS
        for token in re.findall(r"[a-z0-9]+", text.lower()):
            digest = hashlib.md5(token.encode("utf-8")).digest()
            vector[int.from_bytes(digest[:4], "big") % EMBEDDING_DIMENSIONS] += 1.0
        norm = math.sqrt(sum(x * x for x in vector)) or 1.0
        return [x / norm for x in vector]

    def _profile(self, destination: str) -> Optional[dict[str, Any]]:
        for name, profile in self.profiles.items():
            if name.lower() == destination.lower():
                return profile
        return None

    def _field(self, prompt: str, label: str, default: str = "") -> str:
        match = re.search(rf"^-?\s*{label}:\s*(.+)$", prompt, re.IGNORECASE | re.MULTILINE)
        return match.group(1).strip() if match else default

    def _feasibility(self, budget: str, daily_cost: list[int]) -> str:
        match = re.search(r"\$(\d+(?:,\d{3})*)", budget)
        if not match:
            return "Medium"
        amount = int(match.group(1).replace(",", ""))
        low, high = daily_cost
        if amount >= high:
            return "High"
        if amount >= low:
            return "Medium"
        return "Low"

    def _analysis(self, prompt: str) -> dict:
        destination = self._field(prompt, "DESTINATION", "Paris")
        budget = self._field(prompt, "BUDGET", "$150 per day")
        profile = self._profile(destination)

        if profile is None:
            # Unknown places get a plausible generic answer
            return {
                "destination": destination,
                "bestTimeToVisit": {"months": ["May", "September"], "season": "Shoulder season", "weather": "Mild"},
                "budgetAnalysis": {
                    "feasibility": "Medium",
                    "dailyBudget": {"budget": budget, "accommodation": "$50-100", "food": "$25-40", "activities": "$15-30"},
                },
                "topAttractions": [
                    {"name": f"{destination} Old Town", "type": "Historic District", "estimatedCost": "Free", "timeNeeded": "3 hours"},
                    {"name": f"{destination} Central Market", "type": "Food/Market", "estimatedCost": "$10-20", "timeNeeded": "2 hours"},
                    {"name": f"{destination} Museum", "type": "Museum", "estimatedCost": "$15", "timeNeeded": "2 hours"},
                ],
                "transportation": {"primary": "Public transport", "cost": "$10 per day", "tips": ["Walk the center"]},
            }

        low, high = profile["daily_cost"]
        return {
            "destination": destination,
            "bestTimeToVisit": {
                "months": profile["months"],
                "season": profile["season"],
                "weather": profile["weather"],
            },
            "budgetAnalysis": {
                "feasibility": self._feasibility(budget, profile["daily_cost"]),
                "dailyBudget": {
                    "budget": f"${low}-{high} per day",
                    "accommodation": f"${round(low * 0.35)}-{round(high * 0.35)}",
                    "food": f"${round(low * 0.25)}-{round(high * 0.25)}",
                    "activities": f"${round(low * 0.2)}-{round(high * 0.2)}",
                },
            },
            "topAttractions": [
                {key: value for key, value in attraction.items() if key != "location"}
                for attraction in profile["attractions"][:3]
            ],
            "transportation": profile["transport"],
        }

    def _itinerary(self, prompt: str) -> dict:
        analysis_match = re.search(
            r"DESTINATION ANALYSIS:\s*(\{.*?\})\s*TRIP DETAILS:", prompt, re.DOTALL
        )
        analysis = json.loads(analysis_match.group(1)) if analysis_match else {}

        destination = self._field(prompt, "Destination", analysis.get("destination", "Paris"))
        duration = self._field(prompt, "Duration", "3 days")
        budget = self._field(prompt, "Budget", "$150 per day")
        interests = self._field(prompt, "Interests", "sightseeing, culture")

        profile = self._profile(destination) or {}
        attractions = analysis.get("topAttractions") or [
            {"name": f"{destination} center", "estimatedCost": "Free", "timeNeeded": "2 hours"}
        ]
        locations = {a["name"]: a.get("location", destination) for a in profile.get("attractions", [])}
        daily_budget = analysis.get("budgetAnalysis", {}).get("dailyBudget", {}).get("budget", budget)
        tips = analysis.get("transportation", {}).get("tips", [])
        dietary = self._field(prompt, "DIETARY RESTRICTIONS", "None")
        if dietary != "None":
            tips = [f"Ask for {dietary} dishes at every meal"] + tips
        meals = profile.get("meals", {
            "breakfast": "Local café",
            "lunch": "Neighbourhood restaurant",
            "dinner": "Regional specialties",
        })

        days = []
        for day in range(1, min(duration_in_days(duration), MAX_MOCK_DAYS) + 1):
            morning = attractions[(day - 1) % len(attractions)]
            afternoon = attractions[day % len(attractions)]
            days.append({
                "day": day,
                "theme": f"{morning['name']} and surroundings",
                "activities": [
                    {
                        "time": "09:00",
                        "activity": f"Visit {morning['name']}",
                        "location": locations.get(morning["name"], destination),
                        "cost": morning.get("estimatedCost", "Free"),
                        "duration": morning.get("timeNeeded", "2 hours"),
                    },
                    {
                        "time": "14:00",
                        "activity": f"Explore {afternoon['name']} ({interests})",
                        "location": locations.get(afternoon["name"], destination),
                        "cost": afternoon.get("estimatedCost", "Free"),
                        "duration": afternoon.get("timeNeeded", "2 hours"),
                    },
                ],
                "meals": meals,
                "dailyBudget": daily_budget,
                "tips": tips[:2],
            })

        return {
            "destination": destination,
            "duration": duration,
            "totalBudget": budget,
            "dailyItinerary": days,
            "packingList": ["Comfortable walking shoes", "Reusable water bottle", "Travel adapter", "Light rain jacket"],
            "culturalTips": profile.get("cultural_tips", ["Learn a few local phrases"]),
            "emergencyInfo": profile.get("emergency", {
                "embassy": "Contact your nearest embassy",
                "emergency": "112",
                "hospitals": [],
            }),
        }
