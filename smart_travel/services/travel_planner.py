"""
Travel Planner - Orchestrates one planning request end to end.

Session -> preference extraction -> parameter resolution -> retrieval ->
environment tools -> two-stage generation -> recommendations -> history.
Only an invalid user id (or a failure to create the session) aborts a
request; every other stage degrades to a fallback value.
"""
import asyncio
import logging
import re
from typing import Optional

from .extractor import (
    extract_preferences,
    extract_destination,
    extract_duration,
    extract_interests,
    extract_group_size,
    duration_in_days,
    group_headcount,
)
from .itinerary_generator import (
    ItineraryGenerator,
    get_itinerary_generator,
    fallback_analysis,
    fallback_itinerary,
    traveller_context,
)
from .knowledge import KnowledgeRetriever, get_knowledge_retriever
from .outcomes import Valid, value_or, describe
from .tools import EnvironmentToolSet
from ..models.profile import TravelStyle, UserProfile, ProfilePatch
from ..models.session import SessionStore
from ..models.plan import PlanResponse, TravelRequest, CurrentConditions

logger = logging.getLogger(__name__)


DEFAULT_DURATION = "3 days"
DEFAULT_BUDGET = "$150 per day"
DEFAULT_INTERESTS = "sightseeing, culture"
DEFAULT_GROUP_SIZE = "2 adults"

KNOWLEDGE_QUERY_TERMS = "travel guide attractions culture"
KNOWLEDGE_EXCERPT_LENGTH = 300

STYLE_RECOMMENDATIONS = {
    TravelStyle.LUXURY: "Look for premium accommodations and fine dining in {destination}",
    TravelStyle.BUDGET: "Focus on free attractions and budget-friendly options in {destination}",
    TravelStyle.ADVENTURE: "Consider adventure activities and outdoor experiences around {destination}",
    TravelStyle.CULTURAL: "Seek out museums, heritage sites and local performances in {destination}",
    TravelStyle.ROMANTIC: "Plan sunset viewpoints and intimate dinners in {destination}",
    TravelStyle.FAMILY: "Choose kid-friendly attractions and family restaurants in {destination}",
}

NEXT_STEPS = [
    "Review and customize your itinerary",
    "Book accommodations and flights in advance",
    "Check visa requirements for your destination",
    "Consider purchasing travel insurance",
]


class InvalidUserIdError(ValueError):
    """The request did not carry a usable user identifier."""


class TravelPlanner:
    """
    Coordinates the planning pipeline.

    Holds no per-user state of its own; everything user-specific lives in
    the session store and is read or written through it on every call.
    """

    def __init__(
        self,
        store: Optional[SessionStore] = None,
        generator: Optional[ItineraryGenerator] = None,
        retriever: Optional[KnowledgeRetriever] = None,
        tools: Optional[EnvironmentToolSet] = None,
        default_destination: Optional[str] = None
    ):
        from ..config import settings
        self.store = store or SessionStore(history_limit=settings.history_limit)
        self.generator = generator or get_itinerary_generator()
        self.retriever = retriever or get_knowledge_retriever()
        self.tools = tools or EnvironmentToolSet(timeout=settings.external_call_timeout)
        self.default_destination = default_destination or settings.default_destination

    async def plan_travel(self, user_id: str, request: str) -> PlanResponse:
        """
        Produce a complete travel plan for one request.

        Args:
            user_id: Non-empty user identifier
            request: Free-text travel request, may be empty

        Returns:
            PlanResponse, always structurally complete

        Raises:
            InvalidUserIdError: if user_id is missing or blank
        """
        user_id = self._validate_user_id(user_id)
        request = request or ""
        logger.info(f"Planning travel for user {user_id}")

        # 1-2. Session and profile
        await self.store.get_or_create(user_id)
        history = self.store.conversation_summary(user_id)
        patch = extract_preferences(request)
        explicit = extract_destination(request)
        if explicit:
            # Explicitly named places become the remembered destination too
            patch = patch.model_copy(update={"destination_hint": explicit})
        profile = await self.store.update_profile(user_id, patch)
        traveller = traveller_context(profile, history)

        # 3. Effective parameters
        travel_plan = self.resolve_request(request, patch, profile)
        destination = travel_plan.destination
        logger.debug(f"Resolved request for {user_id}: {travel_plan.model_dump()}")

        # 4. Background knowledge
        passages = await self.retriever.retrieve(f"{destination} {KNOWLEDGE_QUERY_TERMS}")
        knowledge = "\n\n".join(passages)

        # 5. Environment tools
        conditions = await self._current_conditions(travel_plan)

        # 6. Structured generation; stage two always receives a valid analysis
        analysis_result = await self.generator.analyze(
            destination,
            travel_plan.budget,
            profile.travel_style.value if profile.travel_style else None,
            knowledge,
            traveller,
        )
        if not isinstance(analysis_result, Valid):
            logger.warning(f"Destination analysis fell back: {describe(analysis_result)}")
        analysis = value_or(analysis_result, fallback_analysis(destination, travel_plan.budget))

        itinerary_result = await self.generator.draft_itinerary(analysis, travel_plan, traveller)
        if not isinstance(itinerary_result, Valid):
            logger.warning(f"Itinerary fell back: {describe(itinerary_result)}")
        itinerary = value_or(itinerary_result, fallback_itinerary(travel_plan))

        # 7. Personalisation
        recommendations = self.personalized_recommendations(profile, destination)

        # 8. History
        summary = (
            f"{itinerary.duration} plan for {destination} "
            f"({itinerary.total_days} day(s) scheduled)"
        )
        await self.store.record_conversation(user_id, request, summary)

        return PlanResponse(
            user_id=user_id,
            profile=profile,
            travel_plan=travel_plan,
            knowledge=self._excerpt(knowledge),
            current_conditions=conditions,
            destination_analysis=analysis,
            itinerary=itinerary,
            recommendations=recommendations,
            next_steps=list(NEXT_STEPS),
        )

    def resolve_request(
        self,
        request: str,
        patch: ProfilePatch,
        profile: UserProfile
    ) -> TravelRequest:
        """Apply the documented precedence and defaults to every parameter."""
        destination = (
            extract_destination(request)
            or patch.destination_hint
            or profile.last_destination
            or self.default_destination
        )
        return TravelRequest(
            destination=destination,
            duration=extract_duration(request) or DEFAULT_DURATION,
            budget=profile.preferred_budget or DEFAULT_BUDGET,
            interests=extract_interests(request) or DEFAULT_INTERESTS,
            group_size=extract_group_size(request) or DEFAULT_GROUP_SIZE,
        )

    def personalized_recommendations(self, profile: UserProfile, destination: str) -> list[str]:
        recommendations = []
        if profile.travel_style in STYLE_RECOMMENDATIONS:
            recommendations.append(
                STYLE_RECOMMENDATIONS[profile.travel_style].format(destination=destination)
            )
        recommendations.append(
            f"Based on your interest in {destination}, also consider nearby destinations"
        )
        recommendations.append("Book popular attractions in advance to avoid disappointment")
        return recommendations

    async def _current_conditions(self, travel_plan: TravelRequest) -> CurrentConditions:
        """Weather, currency and (for larger or longer trips) booking, dispatched together."""
        calls = [
            self.tools.weather.invoke(travel_plan.destination),
            self._convert_budget(travel_plan.budget),
        ]
        wants_booking = (
            group_headcount(travel_plan.group_size) > 2
            or duration_in_days(travel_plan.duration) > 3
        )
        if wants_booking:
            calls.append(self.tools.booking.invoke(
                f"{travel_plan.group_size} group booking for "
                f"{travel_plan.destination}, {travel_plan.duration}"
            ))

        results = await asyncio.gather(*calls)
        return CurrentConditions(
            weather=results[0],
            currency=results[1],
            booking=results[2] if wants_booking else None,
        )

    async def _convert_budget(self, budget: str) -> str:
        match = re.search(r"\$(\d+(?:,\d{3})*)", budget)
        if not match:
            return "Currency unavailable: no dollar amount in budget"
        amount = match.group(1).replace(",", "")
        return await self.tools.currency.invoke(f"{amount} USD to EUR")

    def _validate_user_id(self, user_id) -> str:
        if not isinstance(user_id, str) or not user_id.strip():
            raise InvalidUserIdError("user_id must be a non-empty string")
        return user_id.strip()

    def _excerpt(self, knowledge: str) -> str:
        if len(knowledge) <= KNOWLEDGE_EXCERPT_LENGTH:
            return knowledge
        return knowledge[:KNOWLEDGE_EXCERPT_LENGTH] + "..."


# Global planner instance
travel_planner: Optional[TravelPlanner] = None


def get_travel_planner() -> TravelPlanner:
    """Get or create the global travel planner."""
    global travel_planner
    if travel_planner is None:
        travel_planner = TravelPlanner()
    return travel_planner
