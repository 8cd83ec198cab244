"""
Environment Tools - Weather, currency and booking capabilities.

Each tool owns a fixed lookup table and a fallback answer. ``invoke`` never
raises: errors and timeouts come back as "<Tool> unavailable: <reason>".
There are no retries; tool output is supplementary to the plan.
"""
import asyncio
import logging
import re
import uuid
from abc import ABC, abstractmethod
from typing import Optional

logger = logging.getLogger(__name__)

DEFAULT_TOOL_TIMEOUT = 10.0


class EnvironmentTool(ABC):
    """A single-argument text tool."""

    name: str = ""
    label: str = ""
    description: str = ""

    def __init__(self, timeout: float = DEFAULT_TOOL_TIMEOUT):
        self.timeout = timeout

    async def invoke(self, argument: str) -> str:
        """Run the tool once, converting any failure into a readable string."""
        try:
            return await asyncio.wait_for(self._run((argument or "").strip()), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.warning(f"{self.name} timed out after {self.timeout}s")
            return f"{self.label} unavailable: timed out"
        except Exception as e:
            logger.warning(f"{self.name} failed: {e!r}")
            return f"{self.label} unavailable: {e}"

    @abstractmethod
    async def _run(self, argument: str) -> str:
        ...


class WeatherTool(EnvironmentTool):
    name = "weather_checker"
    label = "Weather"
    description = "Get current weather conditions for a destination. Input: city name."

    CONDITIONS = {
        "tokyo": "22°C, Partly Cloudy, Perfect for sightseeing",
        "paris": "18°C, Light Rain, Bring an umbrella",
        "barcelona": "25°C, Sunny, Great beach weather",
        "costa rica": "28°C, Tropical, Afternoon showers expected",
        "bali": "30°C, Humid, Tropical paradise weather",
        "new york": "15°C, Clear, Crisp autumn day",
    }
    FALLBACK = "20°C, Variable conditions"

    async def _run(self, argument: str) -> str:
        return self.CONDITIONS.get(argument.lower(), self.FALLBACK)


class CurrencyTool(EnvironmentTool):
    name = "currency_converter"
    label = "Currency"
    description = 'Convert currency for travel budgeting. Input: "amount FROM_CURRENCY to TO_CURRENCY".'

    RATES = {
        "usd_jpy": 150.25, "usd_eur": 0.85, "usd_gbp": 0.73,
        "usd_cad": 1.35, "usd_aud": 1.52, "usd_inr": 83.12,
        "usd_crc": 512.0, "usd_idr": 15650.0,
        "eur_usd": 1.18, "gbp_usd": 1.37, "jpy_usd": 0.0067,
    }
    PATTERN = re.compile(r"(\d+(?:\.\d+)?)\s*([a-z]{3})\s+to\s+([a-z]{3})", re.IGNORECASE)
    USAGE = 'Format: "amount FROM_CURRENCY to TO_CURRENCY"'

    async def _run(self, argument: str) -> str:
        match = self.PATTERN.search(argument.replace(",", ""))
        if not match:
            return self.USAGE

        amount, source, target = match.groups()
        rate = self.RATES.get(f"{source.lower()}_{target.lower()}", 1.0)
        converted = float(amount) * rate
        return f"{amount} {source.upper()} = {converted:.2f} {target.upper()}"


class BookingTool(EnvironmentTool):
    name = "booking_assistant"
    label = "Booking"
    description = "Simulate a travel booking confirmation. Input: booking details."

    async def _run(self, argument: str) -> str:
        if not argument:
            return "Booking assistance available: provide trip details to reserve"
        booking_id = "TRV" + uuid.uuid4().hex[:6].upper()
        return f"Booking confirmed! ID: {booking_id} | Details: {argument}"


class EnvironmentToolSet:
    """The closed set of environment tools, addressable by name."""

    def __init__(self, timeout: float = DEFAULT_TOOL_TIMEOUT):
        self.weather = WeatherTool(timeout)
        self.currency = CurrencyTool(timeout)
        self.booking = BookingTool(timeout)
        self._tools: dict[str, EnvironmentTool] = {
            tool.name: tool for tool in (self.weather, self.currency, self.booking)
        }

    @property
    def names(self) -> list[str]:
        return list(self._tools)

    def get(self, name: str) -> Optional[EnvironmentTool]:
        return self._tools.get(name)

    async def invoke(self, name: str, argument: str) -> str:
        tool = self.get(name)
        if tool is None:
            return f"Tool unavailable: unknown tool '{name}'"
        return await tool.invoke(argument)
