"""
Weather vocabulary shared by the extractor, the context optimizer and the
answer generator.

All patterns are compiled once at import. Query routing is a pure function of
the query string: the same query always takes the same branch.
"""
import re
from typing import Optional

INDIAN_CITIES = [
    "meerut", "delhi", "mumbai", "bangalore", "chennai", "kolkata", "hyderabad",
    "pune", "ahmedabad", "jaipur", "lucknow", "kanpur", "nagpur", "indore",
    "bhopal", "visakhapatnam", "patna", "vadodara", "ghaziabad", "ludhiana",
    "agra", "nashik", "faridabad", "rajkot",
]

CONDITIONS = [
    "partly cloudy", "thunderstorm", "sunny", "cloudy", "rainy", "stormy", "clear",
    "overcast", "snow", "fog", "mist", "drizzle", "hot", "warm", "cool", "cold",
    "humid", "dry", "pleasant", "moderate", "extreme", "hazy", "dusty",
]

_CITY_ALT = "|".join(INDIAN_CITIES)
_CONDITION_ALT = "|".join(re.escape(c) for c in CONDITIONS)

# Used by the context optimizer to pick the weather path.
WEATHER_QUERY_RE = re.compile(
    r"\b(?:weather|temperature|forecast|climate|rain\w*|sunny|cloudy)\b", re.I
)

# Broader check used by the answer generator when choosing a prompt template.
WEATHER_PROMPT_RE = re.compile(
    r"\b(?:weather|temperature|forecast|climate|rain\w*|sunny|cloudy|humid\w*|wind\w*|degrees?)\b|°",
    re.I,
)

# Raw page scan patterns, in the order their matches are collected.
PAGE_PATTERNS = [re.compile(p, re.I) for p in (
    r"temperature[^\d]{0,20}\d+\s*°?\s*[CF]?\b",
    r"-?\d+\s*°\s*[CF]?",
    r"feels like[^\d]{0,20}\d+\s*°?\s*[CF]?",
    rf"\b(?:{_CONDITION_ALT})\b",
    r"humidity[^\d]{0,20}\d+\s*%",
    r"\d+\s*%\W{0,5}humidity",
    r"wind[^\d]{0,30}\d+(?:\.\d+)?\s*(?:mph|kmh|km/h|kph)",
    r"\b(?:today|tomorrow|tonight)\b[^.]{0,40}?\d+\s*°\s*[CF]?",
    r"\b(?:high|low)\b[^\d]{0,15}\d+\s*°\s*[CF]?",
    r"\b(?:pre-monsoon|post-monsoon|monsoon)\b",
    r"(?:air quality|\baqi\b)[^\d]{0,20}\d+",
    r"visibility[^\d]{0,20}\d+(?:\.\d+)?\s*(?:km|miles?)\b",
    r"\buv(?: index)?\b[^\d]{0,10}\d+",
    rf"\b(?:{_CITY_ALT})\b[^.]{{0,40}}?\d+\s*°\s*[CF]?",
)]

SENTENCE_KEYWORD_RE = re.compile(
    r"temperature|weather|°|degrees|humidity|wind|\d+°[CF]?", re.I
)

FALLBACK_KEYWORD_RE = re.compile(
    r"temperature|weather|forecast|climate|°|degrees|celsius|fahrenheit|sunny|cloudy|rain|wind|humidity",
    re.I,
)

# Structured fields pulled out of a passage, in output order.
TEMPERATURE_RES = [
    re.compile(r"(-?\d+(?:\.\d+)?)\s*°\s*([CF])?", re.I),
    re.compile(r"temperature[^\d-]{0,20}(-?\d+(?:\.\d+)?)", re.I),
    re.compile(r"(-?\d+(?:\.\d+)?)\s*degrees?", re.I),
]
CONDITION_RE = re.compile(rf"\b({_CONDITION_ALT})\b", re.I)
HUMIDITY_RE = re.compile(r"humidity[^\d]{0,20}(\d+)\s*%|(\d+)\s*%\W{0,5}humidity", re.I)
WIND_RE = re.compile(r"wind[^\d]{0,30}(\d+(?:\.\d+)?)\s*(mph|kmh|km/h|kph)", re.I)
FEELS_LIKE_RE = re.compile(r"feels like[^\d-]{0,20}(-?\d+(?:\.\d+)?)\s*(°\s*[CF]?)?", re.I)
VISIBILITY_RE = re.compile(r"visibility[^\d]{0,20}(\d+(?:\.\d+)?)\s*(km|miles?)\b", re.I)
UV_RE = re.compile(r"\buv(?: index)?\b[^\d]{0,10}(\d+)", re.I)

_LOCATION_IN_RE = re.compile(r"\bweather\s+(?:in|of|for)\s+([^,?!.]+)", re.I)
_LOCATION_CITY_RE = re.compile(rf"\b({_CITY_ALT})\b", re.I)
_LOCATION_BEFORE_RE = re.compile(r"\b([a-z][\w-]*)\s+weather\b", re.I)
_LOCATION_STOPWORDS = {"the", "today", "todays", "current", "what", "is", "s", "how", "tomorrow"}


def is_weather_query(query: str) -> bool:
    return bool(WEATHER_QUERY_RE.search(query or ""))


def is_weather_prompt(query: str) -> bool:
    return bool(WEATHER_PROMPT_RE.search(query or ""))


def extract_location(query: str) -> Optional[str]:
    """
    Find the place a weather query is about.

    Example:
        >>> extract_location("weather in new delhi today?")
        'New Delhi Today'
        >>> extract_location("mumbai weather")
        'Mumbai'
    """
    match = _LOCATION_IN_RE.search(query)
    if match and match.group(1).strip():
        return match.group(1).strip().title()

    match = _LOCATION_CITY_RE.search(query)
    if match:
        return match.group(1).title()

    match = _LOCATION_BEFORE_RE.search(query)
    if match and match.group(1).lower() not in _LOCATION_STOPWORDS:
        return match.group(1).title()
    return None
