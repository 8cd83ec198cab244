"""
Structured Itinerary Generator - Two-stage schema-validated generation.

Stage one produces a DestinationAnalysis, stage two a day-by-day Itinerary
built from the serialized analysis. Each stage returns a tagged result; the
fixed skeletons below are what callers substitute on the degraded branch.
"""
import asyncio
import json
import logging
from typing import Optional

from pydantic import BaseModel, ValidationError

from .llm_client import LLMClient, get_llm_client, parse_json_response
from .outcomes import StageResult, Valid, Invalid, Unavailable
from ..models.analysis import (
    DestinationAnalysis,
    BestTimeToVisit,
    BudgetAnalysis,
    DailyBudget,
    Attraction,
    Transportation,
    Feasibility,
)
from ..models.itinerary import Itinerary, DayPlan, Activity, Meals, EmergencyInfo
from ..models.plan import TravelRequest
from ..models.profile import UserProfile

logger = logging.getLogger(__name__)


ANALYSIS_SYSTEM_PROMPT = """You are a professional travel analyst. Analyze the destination and provide a comprehensive structured analysis.

STRICT RULES:
1. Respond with ONLY a valid JSON object
2. Use EXACTLY the field names of the schema you are given
3. topAttractions must contain exactly 3 attractions
4. budgetAnalysis.feasibility must be one of "Low", "Medium", "High"
"""

ITINERARY_SYSTEM_PROMPT = """You are an expert travel planner. Based on the destination analysis, create a detailed structured itinerary.

STRICT RULES:
1. Respond with ONLY a valid JSON object, no wrapper keys
2. Use EXACTLY the field names of the schema you are given
3. Number the days of dailyItinerary 1, 2, 3, ... with no gaps
4. Use the destination analysis as the source of facts; do not contradict it
5. Every meal must respect the traveller's dietary restrictions
"""


def traveller_context(profile: UserProfile, conversation_summary: str = "") -> str:
    """Profile facts and recent exchanges, shown to the model in both stages."""
    dietary = ", ".join(sorted(profile.dietary_restrictions)) or "None"
    favorites = ", ".join(sorted(profile.favorite_destinations)) or "None"
    return f"""DIETARY RESTRICTIONS: {dietary}
FAVORITE DESTINATIONS: {favorites}
RECENT CONVERSATIONS:
{conversation_summary or "No previous conversations"}"""


def schema_instructions(schema: type[BaseModel]) -> str:
    """JSON schema of a model, as shown to the model in prompts."""
    return json.dumps(schema.model_json_schema(by_alias=True), indent=2)


def fallback_analysis(destination: str, budget: str) -> DestinationAnalysis:
    """Schema-valid analysis used when stage one cannot produce one."""
    return DestinationAnalysis(
        destination=destination,
        best_time_to_visit=BestTimeToVisit(
            months=["April", "May", "September", "October"],
            season="Spring or Autumn",
            weather="Check local forecasts before travelling",
        ),
        budget_analysis=BudgetAnalysis(
            feasibility=Feasibility.MEDIUM,
            daily_budget=DailyBudget(
                budget=budget,
                accommodation="About 35% of the daily budget",
                food="About 25% of the daily budget",
                activities="About 20% of the daily budget",
            ),
        ),
        top_attractions=[
            Attraction(
                name=f"{destination} city center",
                type="Sightseeing",
                estimated_cost="Free",
                time_needed="Half day",
            ),
            Attraction(
                name=f"{destination} local markets",
                type="Food/Market",
                estimated_cost="$10-30",
                time_needed="2-3 hours",
            ),
            Attraction(
                name=f"{destination} cultural sites",
                type="Cultural",
                estimated_cost="$10-25",
                time_needed="2-3 hours",
            ),
        ],
        transportation=Transportation(
            primary="Public transport and walking",
            cost="$10-20 per day",
            tips=["Buy a day pass where available", "Keep some cash for local transport"],
        ),
    )


def fallback_itinerary(request: TravelRequest) -> Itinerary:
    """Schema-valid one-day itinerary used when stage two cannot produce one."""
    destination = request.destination
    return Itinerary(
        destination=destination,
        duration=request.duration,
        total_budget=request.budget,
        daily_itinerary=[
            DayPlan(
                day=1,
                theme=f"Discover {destination}",
                activities=[
                    Activity(
                        time="Morning",
                        activity=f"Explore {destination} city center and main attractions",
                        location=f"{destination} city center",
                        cost="Free",
                        duration="3 hours",
                    ),
                    Activity(
                        time="Afternoon",
                        activity="Visit local markets and cultural sites",
                        location=f"{destination} old town",
                        cost="$10-30",
                        duration="3 hours",
                    ),
                    Activity(
                        time="Evening",
                        activity=f"Enjoy traditional {destination} cuisine",
                        location="Local restaurant district",
                        cost="$20-40",
                        duration="2 hours",
                    ),
                ],
                meals=Meals(
                    breakfast="Breakfast at a local café",
                    lunch="Lunch at a traditional restaurant",
                    dinner="Dinner featuring local specialties",
                ),
                daily_budget=request.budget,
                tips=[f"Interests to explore: {request.interests}"],
            )
        ],
        packing_list=[
            "Comfortable walking shoes",
            "Camera for sightseeing",
            "Weather-appropriate clothing",
            "Travel documents and ID",
            "Portable phone charger",
        ],
        cultural_tips=[
            f"Check visa requirements for {destination}",
            "Research local customs and etiquette",
            "Book accommodations in advance",
        ],
        emergency_info=EmergencyInfo(
            embassy=f"Look up your embassy in {destination} before departure",
            emergency="International emergency number: 112",
            hospitals=["Ask your accommodation for the nearest hospital"],
        ),
    )


class ItineraryGenerator:
    """Runs the analysis and itinerary generation stages."""

    def __init__(self, llm: Optional[LLMClient] = None):
        self.llm = llm or get_llm_client()

    async def analyze(
        self,
        destination: str,
        budget: str,
        travel_style: Optional[str] = None,
        knowledge: str = "",
        traveller: str = ""
    ) -> StageResult[DestinationAnalysis]:
        """
        Stage one: structured destination analysis.

        Args:
            destination: Resolved destination name
            budget: Budget as stated by the user or defaulted
            travel_style: The profile's travel style, if known
            knowledge: Retrieved background passages, may be empty
            traveller: Profile and history context from traveller_context()

        Returns:
            Valid(DestinationAnalysis), or Invalid / Unavailable
        """
        prompt = f"""DESTINATION: {destination}
BUDGET: {budget}
TRAVEL STYLE: {travel_style or "Not specified"}

BACKGROUND KNOWLEDGE:
{knowledge or "None available"}

TRAVELLER PROFILE:
{traveller or "Not available"}

Respond with a JSON object matching this schema:
{schema_instructions(DestinationAnalysis)}"""

        return await self._run_stage(
            "destination analysis", ANALYSIS_SYSTEM_PROMPT, prompt, DestinationAnalysis
        )

    async def draft_itinerary(
        self,
        analysis: DestinationAnalysis,
        request: TravelRequest,
        traveller: str = ""
    ) -> StageResult[Itinerary]:
        """
        Stage two: day-by-day itinerary from a validated analysis.

        The analysis is passed through verbatim as JSON; destination facts are
        not re-derived here.
        """
        prompt = f"""DESTINATION ANALYSIS:
{analysis.model_dump_json(by_alias=True, indent=2)}

TRIP DETAILS:
- Destination: {request.destination}
- Duration: {request.duration}
- Budget: {request.budget}
- Interests: {request.interests}
- Group Size: {request.group_size}

TRAVELLER PROFILE:
{traveller or "Not available"}

Respond with a JSON object matching this schema:
{schema_instructions(Itinerary)}"""

        return await self._run_stage(
            "itinerary", ITINERARY_SYSTEM_PROMPT, prompt, Itinerary
        )

    async def _run_stage(
        self,
        stage: str,
        system: str,
        prompt: str,
        schema: type[BaseModel]
    ) -> StageResult:
        if not self.llm.available:
            return Unavailable("generation capability not configured")

        try:
            raw = await self.llm.generate_text(prompt, system=system)
        except asyncio.TimeoutError:
            logger.warning(f"{stage} generation timed out")
            return Unavailable("timed out")
        except Exception as e:
            logger.warning(f"{stage} generation failed: {e!r}")
            return Unavailable(str(e) or type(e).__name__)

        try:
            data = parse_json_response(raw)
            return Valid(schema.model_validate(data))
        except ValidationError as e:
            logger.warning(f"{stage} output failed validation with {e.error_count()} error(s)")
            return Invalid(raw=raw, error=str(e).splitlines()[0])
        except ValueError as e:
            logger.warning(f"{stage} output could not be parsed: {e}")
            return Invalid(raw=raw, error=str(e))


# Global generator instance
itinerary_generator: Optional[ItineraryGenerator] = None


def get_itinerary_generator() -> ItineraryGenerator:
    """Get or create the global itinerary generator."""
    global itinerary_generator
    if itinerary_generator is None:
        itinerary_generator = ItineraryGenerator()
    return itinerary_generator
