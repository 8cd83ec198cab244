"""Tests for the planner orchestrator."""
import asyncio

import pytest

from conftest import FakeLLM
from smart_travel.config import Settings
from smart_travel.models.profile import TravelStyle
from smart_travel.models.session import SessionStore
from smart_travel.services.itinerary_generator import ItineraryGenerator
from smart_travel.services.knowledge import KnowledgeRetriever
from smart_travel.services.llm_client import LLMClient
from smart_travel.services.tools import EnvironmentToolSet
from smart_travel.services.travel_planner import TravelPlanner, InvalidUserIdError, NEXT_STEPS


COSTA_RICA = "I want a 5-day adventure trip to Costa Rica with a $2000 budget"


class TestPlanTravel:
    """Test the end-to-end planning flow without a model."""

    @pytest.mark.asyncio
    async def test_costa_rica_scenario(self, offline_planner):
        """Destination, duration, style and budget are all picked up."""
        response = await offline_planner.plan_travel("user_001", COSTA_RICA)

        assert response.travel_plan.destination == "Costa Rica"
        assert response.travel_plan.duration == "5 days"
        assert response.travel_plan.budget == "$2000"
        assert response.profile.travel_style == TravelStyle.ADVENTURE
        assert response.profile.preferred_budget == "$2000"
        assert response.current_conditions.weather.startswith("28°C")
        assert response.current_conditions.currency == "2000 USD = 1700.00 EUR"
        # Five days triggers the booking stub
        assert response.current_conditions.booking.startswith("Booking confirmed!")

    @pytest.mark.asyncio
    async def test_empty_request_uses_defaults(self, offline_planner):
        """An empty request still gets a complete plan."""
        response = await offline_planner.plan_travel("user_002", "")

        assert response.travel_plan.destination == "Paris"
        assert response.travel_plan.duration == "3 days"
        assert response.travel_plan.group_size == "2 adults"
        assert response.travel_plan.budget == "$150 per day"
        assert response.current_conditions.booking is None
        assert len(response.destination_analysis.top_attractions) == 3
        assert [d.day for d in response.itinerary.daily_itinerary] == [1]
        assert response.next_steps == NEXT_STEPS

    @pytest.mark.asyncio
    async def test_budget_persists(self, offline_planner):
        """A budget given once is reused by later requests."""
        await offline_planner.plan_travel("user_003", "Tokyo for $2000")
        response = await offline_planner.plan_travel("user_003", "Something relaxing")

        assert response.profile.preferred_budget == "$2000"
        assert response.travel_plan.budget == "$2000"
        # Last destination is remembered too
        assert response.travel_plan.destination == "Tokyo"

    @pytest.mark.asyncio
    async def test_history_eviction(self, offline_planner):
        """Eleven requests leave the ten most recent."""
        for i in range(11):
            await offline_planner.plan_travel("user_004", f"request {i}")

        history = offline_planner.store.get("user_004").conversation_history
        assert len(history) == 10
        assert history[0].request == "request 1"
        assert history[-1].request == "request 10"

    @pytest.mark.asyncio
    async def test_recommendations(self, offline_planner):
        """Style sentence first, then the two generic ones."""
        response = await offline_planner.plan_travel("user_005", COSTA_RICA)

        assert len(response.recommendations) == 3
        assert "adventure" in response.recommendations[0].lower()
        assert response.recommendations[1] == (
            "Based on your interest in Costa Rica, also consider nearby destinations"
        )

    @pytest.mark.asyncio
    async def test_no_style_no_style_sentence(self, offline_planner):
        """Without a style only the generic sentences remain."""
        response = await offline_planner.plan_travel("user_006", "Paris please")

        assert len(response.recommendations) == 2

    @pytest.mark.asyncio
    async def test_response_is_frozen(self, offline_planner):
        """The plan cannot be modified after return."""
        response = await offline_planner.plan_travel("user_007", COSTA_RICA)

        with pytest.raises(Exception):
            response.user_id = "someone_else"

    @pytest.mark.asyncio
    async def test_display_dict_is_camel_case(self, offline_planner):
        """Serialised plans use camelCase keys."""
        data = (await offline_planner.plan_travel("user_008", COSTA_RICA)).to_display_dict()

        assert data["userId"] == "user_008"
        assert data["travelPlan"]["groupSize"] == "2 adults"
        assert "dailyItinerary" in data["itinerary"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("user_id", ["", "   ", None])
    async def test_invalid_user_id(self, offline_planner, user_id):
        """Missing ids abort the request."""
        with pytest.raises(InvalidUserIdError):
            await offline_planner.plan_travel(user_id, COSTA_RICA)


class TestConcurrency:
    """Test concurrent requests."""

    @pytest.mark.asyncio
    async def test_users_do_not_mix(self, offline_planner):
        """Each user sees only their own budget and destination."""
        requests = {
            "u1": "Tokyo on $1000",
            "u2": "Bali on $2000",
            "u3": "Barcelona on $3000",
        }

        responses = await asyncio.gather(*[
            offline_planner.plan_travel(user, text) for user, text in requests.items()
        ])

        assert [(r.user_id, r.profile.preferred_budget, r.travel_plan.destination) for r in responses] == [
            ("u1", "$1000", "Tokyo"),
            ("u2", "$2000", "Bali"),
            ("u3", "$3000", "Barcelona"),
        ]

    @pytest.mark.asyncio
    async def test_same_user_fields_both_survive(self, offline_planner):
        """Concurrent requests patching different fields keep both."""
        await asyncio.gather(
            offline_planner.plan_travel("u9", "My budget is $3000"),
            offline_planner.plan_travel("u9", "Something romantic please"),
        )

        profile = offline_planner.store.get("u9").profile
        assert profile.preferred_budget == "$3000"
        assert profile.travel_style == TravelStyle.ROMANTIC
        assert len(offline_planner.store.get("u9").conversation_history) == 2


class TestGeneration:
    """Test the flow with a model answering."""

    @pytest.mark.asyncio
    async def test_model_output_is_used(self, analysis_json, itinerary_json):
        """Valid stage outputs flow into the response."""
        planner = TravelPlanner(
            store=SessionStore(),
            generator=ItineraryGenerator(llm=FakeLLM([analysis_json, itinerary_json])),
            retriever=KnowledgeRetriever(llm=None),
            tools=EnvironmentToolSet(),
        )

        response = await planner.plan_travel("user_010", COSTA_RICA)

        assert response.destination_analysis.top_attractions[0].name == "Arenal Volcano"
        assert response.itinerary.total_days == 3

    @pytest.mark.asyncio
    async def test_invalid_analysis_falls_back(self, itinerary_json):
        """A bad stage-one answer still yields a complete plan."""
        llm = FakeLLM(["not json at all", itinerary_json])
        planner = TravelPlanner(
            store=SessionStore(),
            generator=ItineraryGenerator(llm=llm),
            retriever=KnowledgeRetriever(llm=None),
            tools=EnvironmentToolSet(),
        )

        response = await planner.plan_travel("user_011", COSTA_RICA)

        assert response.destination_analysis.top_attractions[0].name == "Costa Rica city center"
        # Stage two saw the fallback analysis
        assert "Costa Rica city center" in llm.prompts[1][1]
        assert response.itinerary.total_days == 3

    @pytest.mark.asyncio
    async def test_mock_provider(self):
        """The bundled mock provider produces grounded, valid plans."""
        llm = LLMClient(Settings(llm_provider="mock"))
        planner = TravelPlanner(
            store=SessionStore(),
            generator=ItineraryGenerator(llm=llm),
            retriever=KnowledgeRetriever(llm=llm),
            tools=EnvironmentToolSet(),
        )

        response = await planner.plan_travel("user_012", COSTA_RICA)

        assert response.destination_analysis.destination == "Costa Rica"
        assert response.destination_analysis.budget_analysis.feasibility.value == "High"
        assert [d.day for d in response.itinerary.daily_itinerary] == [1, 2, 3, 4, 5]
        assert response.knowledge


class TestMemory:
    """Test what a session carries into later requests."""

    @pytest.mark.asyncio
    async def test_interest_phrase_keeps_gazetteer_destination(self, offline_planner):
        """Capitalised interests are not mistaken for the destination."""
        response = await offline_planner.plan_travel(
            "user_020", "Interested in Food and Art, thinking about Tokyo"
        )

        assert response.travel_plan.destination == "Tokyo"
        assert response.current_conditions.weather.startswith("22°C")

    @pytest.mark.asyncio
    async def test_named_destination_is_remembered(self, offline_planner):
        """A place outside the gazetteer carries over to the next request."""
        first = await offline_planner.plan_travel("user_021", "Plan a 4 day trip to Lisbon")
        second = await offline_planner.plan_travel("user_021", "Add some food ideas")

        assert first.travel_plan.destination == "Lisbon"
        assert second.travel_plan.destination == "Lisbon"
        assert second.profile.last_destination == "Lisbon"
        assert "Lisbon" in second.profile.favorite_destinations

    @pytest.mark.asyncio
    async def test_profile_and_history_reach_both_stages(self, analysis_json, itinerary_json):
        """Dietary needs, favourites and recent exchanges are in both prompts."""
        store = SessionStore()
        await store.record_conversation("user_022", "Weekend ideas for Bali", "3 days plan for Bali")
        llm = FakeLLM([analysis_json, itinerary_json])
        planner = TravelPlanner(
            store=store,
            generator=ItineraryGenerator(llm=llm),
            retriever=KnowledgeRetriever(llm=None),
            tools=EnvironmentToolSet(),
        )

        await planner.plan_travel("user_022", "I'm vegan, plan a trip to Costa Rica")

        assert len(llm.prompts) == 2
        for _, prompt in llm.prompts:
            assert "DIETARY RESTRICTIONS: vegan" in prompt
            assert "FAVORITE DESTINATIONS: Costa Rica" in prompt
            assert 'User asked: "Weekend ideas for Bali' in prompt

    @pytest.mark.asyncio
    async def test_mock_provider_respects_diet(self):
        """The bundled mock turns dietary needs into daily tips."""
        llm = LLMClient(Settings(llm_provider="mock"))
        planner = TravelPlanner(
            store=SessionStore(),
            generator=ItineraryGenerator(llm=llm),
            retriever=KnowledgeRetriever(llm=None),
            tools=EnvironmentToolSet(),
        )

        response = await planner.plan_travel("user_023", "I'm vegan, 3 day trip to Bali")

        assert response.itinerary.daily_itinerary[0].tips[0] == "Ask for vegan dishes at every meal"
