"""
Preference Extractor - Pulls travel facts out of free-text requests.

Everything here is a pure function over the request text: no model calls,
no side effects, and unmatched fields are simply absent from the result.
"""
import re
from typing import Optional

from ..models.profile import ProfilePatch, TravelStyle


# Checked in order; the first style with any keyword hit wins.
# Budget keywords are phrases so that "a $2000 budget" is not read as a style.
STYLE_KEYWORDS: list[tuple[TravelStyle, tuple[str, ...]]] = [
    (TravelStyle.LUXURY, ("luxury", "luxurious", "5-star", "five-star", "premium")),
    (TravelStyle.BUDGET, ("budget travel", "budget trip", "on a budget", "budget-friendly",
                          "cheap", "backpack", "hostel", "low-cost", "affordable")),
    (TravelStyle.ADVENTURE, ("adventure", "hiking", "trekking", "zip-lining", "outdoor")),
    (TravelStyle.CULTURAL, ("cultural", "museum", "heritage", "historic")),
    (TravelStyle.ROMANTIC, ("romantic", "honeymoon", "getaway for two")),
    (TravelStyle.FAMILY, ("family", "kids", "children")),
]

# Lowercase key -> display name
DESTINATION_GAZETTEER: dict[str, str] = {
    "tokyo": "Tokyo",
    "paris": "Paris",
    "barcelona": "Barcelona",
    "costa rica": "Costa Rica",
    "bali": "Bali",
    "new york": "New York",
}

DIETARY_KEYWORDS: dict[str, str] = {
    "vegetarian": "vegetarian",
    "vegan": "vegan",
    "gluten-free": "gluten-free",
    "gluten free": "gluten-free",
    "halal": "halal",
    "kosher": "kosher",
    "dairy-free": "dairy-free",
    "lactose": "dairy-free",
}

INTEREST_KEYWORDS = [
    "food", "culture", "adventure", "art", "history", "nature",
    "shopping", "nightlife", "hiking", "wildlife", "beaches",
]

# Capitalised words after "to"/"in"/"visit" that are not places
NOT_PLACES = {
    "january", "february", "march", "april", "may", "june", "july", "august",
    "september", "october", "november", "december", "monday", "tuesday",
    "wednesday", "thursday", "friday", "saturday", "sunday", "spring",
    "summer", "autumn", "fall", "winter", "i",
    "the", "a", "an", "my", "our", "me", "us", "you", "and", "or", "with",
    "plan", "trip", "travel", "vacation", "holiday", "please", "some", "see",
} | set(INTEREST_KEYWORDS) | {
    keyword for _, keywords in STYLE_KEYWORDS for keyword in keywords if " " not in keyword
}

BUDGET_PATTERN = re.compile(r"\$\d+(?:,\d{3})*")
DURATION_PATTERN = re.compile(r"(\d+)[\s-]*(day|week)s?\b", re.IGNORECASE)
GROUP_PATTERN = re.compile(
    r"(\d+)\s*(people|adults|adult|persons|person|travelers|travellers)\b",
    re.IGNORECASE
)
# "in" only counts after a trip noun: "a week in Lisbon", not "interested in Food"
EXPLICIT_DESTINATION_PATTERN = re.compile(
    r"\b(?i:to|visit|visiting|(?:trip|stay|holiday|vacation|weekend|days?|weeks?|nights?)\s+in)\s+([A-Z][\w'-]*(?:\s+[A-Z][\w'-]*)*)"
)


def extract_budget(text: str) -> Optional[str]:
    """First dollar amount in the text, verbatim."""
    match = BUDGET_PATTERN.search(text)
    return match.group(0) if match else None


def extract_travel_style(text: str) -> Optional[TravelStyle]:
    lowered = text.lower()
    for style, keywords in STYLE_KEYWORDS:
        if any(re.search(rf"\b{re.escape(keyword)}", lowered) for keyword in keywords):
            return style
    return None


def extract_destination_hint(text: str) -> Optional[str]:
    """First gazetteer destination mentioned anywhere in the text."""
    lowered = text.lower()
    for key, name in DESTINATION_GAZETTEER.items():
        if key in lowered:
            return name
    return None


def extract_dietary_restrictions(text: str) -> set[str]:
    lowered = text.lower()
    return {label for keyword, label in DIETARY_KEYWORDS.items() if keyword in lowered}


def extract_preferences(text: str) -> ProfilePatch:
    """
    Extract a partial profile from a free-text request.

    Args:
        text: The user's request, any length, possibly empty

    Returns:
        ProfilePatch with only the fields that were found
    """
    text = text or ""
    return ProfilePatch(
        preferred_budget=extract_budget(text),
        travel_style=extract_travel_style(text),
        destination_hint=extract_destination_hint(text),
        dietary_restrictions=extract_dietary_restrictions(text),
    )


def extract_destination(text: str) -> Optional[str]:
    """
    Destination the user names explicitly ("trip to Costa Rica", "visiting Lisbon").

    Known destinations are returned in gazetteer spelling.
    """
    for match in EXPLICIT_DESTINATION_PATTERN.finditer(text or ""):
        words = []
        # Stop at the first non-place word: "to Lisbon April" -> "Lisbon"
        for word in match.group(1).split():
            if word.lower() in NOT_PLACES:
                break
            words.append(word)
        if not words:
            continue
        candidate = " ".join(words)
        return DESTINATION_GAZETTEER.get(candidate.lower(), candidate)
    return None


def extract_duration(text: str) -> Optional[str]:
    match = DURATION_PATTERN.search(text or "")
    if not match:
        return None
    count = int(match.group(1))
    unit = match.group(2).lower()
    return f"{count} {unit}" if count == 1 else f"{count} {unit}s"


def extract_interests(text: str) -> Optional[str]:
    lowered = (text or "").lower()
    found = [
        keyword for keyword in INTEREST_KEYWORDS
        if re.search(rf"\b{keyword}\b", lowered)
    ]
    return ", ".join(found) if found else None


def extract_group_size(text: str) -> Optional[str]:
    match = GROUP_PATTERN.search(text or "")
    if not match:
        return None
    return f"{match.group(1)} {match.group(2).lower()}"


def duration_in_days(duration: str) -> int:
    """Number of days a duration string covers ("2 weeks" -> 14); 3 when unknown."""
    match = DURATION_PATTERN.search(duration or "")
    if not match:
        return 3
    count = int(match.group(1))
    return count * 7 if match.group(2).lower() == "week" else count


def group_headcount(group_size: str) -> int:
    match = re.search(r"\d+", group_size or "")
    return int(match.group(0)) if match else 1
