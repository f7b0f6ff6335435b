"""
Context optimization for ranked passages.

Each passage that comes back from the vector store is compressed into a short,
query-relevant excerpt before it is put into the prompt:

• Weather queries get a structured one-line report
  ("Weather in Delhi: Temperature: 32°C. Condition: sunny. Humidity: 60%.")
• Every other query gets the passage's sentences ranked by how many query
  words they contain

`optimize` is a pure function: the same (content, query) always gives the same
excerpt, and running it on its own output changes nothing.

Example:
    ```python
    excerpt = optimize(passage.content, "weather in Delhi")
    context = "\\n\\n---\\n\\n".join(f"**{p.title}**\\n{optimize(p.content, q)}" for p in passages)
    ```
"""
import re
from typing import List, Optional, Sequence

from verixa.core.interfaces.storage import RankedPassage
from verixa.core.weather import (
    CONDITION_RE,
    FALLBACK_KEYWORD_RE,
    FEELS_LIKE_RE,
    HUMIDITY_RE,
    TEMPERATURE_RES,
    UV_RE,
    VISIBILITY_RE,
    WIND_RE,
    extract_location,
    is_weather_query,
)

_TAG_RE = re.compile(r"<[^>]+>")
_ATTR_NOISE_RE = re.compile(r"\s*\b(?:class|data-[\w-]+|aria-[\w-]+)\s*=\s*\"[^\"]*\"", re.I)
_WHITESPACE_RE = re.compile(r"\s+")
_SENTENCE_SPLIT_RE = re.compile(r"[.!?]+")

WEATHER_EXCERPT_CHARS = 500
GENERAL_EXCERPT_CHARS = 800
MAX_WEATHER_SENTENCES = 3
MAX_GENERAL_SENTENCES = 5


def strip_markup(content: str) -> str:
    """Remove tags and attribute noise, collapse whitespace."""
    text = _TAG_RE.sub(" ", content)
    text = _ATTR_NOISE_RE.sub(" ", text)
    return _WHITESPACE_RE.sub(" ", text).strip()


def _truncate(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return text[:limit] + "..."


def _sentences(text: str, min_chars: int) -> List[str]:
    parts = (s.strip() for s in _SENTENCE_SPLIT_RE.split(text))
    return [s for s in parts if len(s) > min_chars]


def _temperature(text: str) -> Optional[str]:
    for i, pattern in enumerate(TEMPERATURE_RES):
        match = pattern.search(text)
        if match:
            unit = match.group(2).upper() if i == 0 and match.group(2) else ""
            return f"{match.group(1)}°{unit}"
    return None


def weather_fields(text: str) -> List[str]:
    """
    Pull structured weather fields out of a passage, in display order.

    Example:
        >>> weather_fields("Temperature 32°C, sunny, humidity 60%")
        ['Temperature: 32°C', 'Condition: sunny', 'Humidity: 60%']
    """
    fields = []

    temperature = _temperature(text)
    if temperature:
        fields.append(f"Temperature: {temperature}")

    match = CONDITION_RE.search(text)
    if match:
        fields.append(f"Condition: {match.group(1).lower()}")

    match = HUMIDITY_RE.search(text)
    if match:
        fields.append(f"Humidity: {match.group(1) or match.group(2)}%")

    match = WIND_RE.search(text)
    if match:
        fields.append(f"Wind: {match.group(1)} {match.group(2).lower()}")

    match = FEELS_LIKE_RE.search(text)
    if match:
        unit = re.sub(r"[\s°]", "", match.group(2) or "").upper()
        fields.append(f"Feels like: {match.group(1)}°{unit}")

    match = VISIBILITY_RE.search(text)
    if match:
        fields.append(f"Visibility: {match.group(1)} {match.group(2).lower()}")

    match = UV_RE.search(text)
    if match:
        fields.append(f"UV Index: {match.group(1)}")

    return fields


def optimize_weather(text: str, query: str) -> str:
    location = extract_location(query)
    header = f"Weather in {location}:" if location else ""
    # Already-optimized input starts with our own header; keep it out of the field scan.
    body = text[len(header):] if header and text.startswith(header) else text

    fields = weather_fields(body)
    if fields:
        report = ". ".join(fields) + "."
        return f"{header} {report}" if header else report

    sentences = [s for s in _sentences(text, 10) if FALLBACK_KEYWORD_RE.search(s)]
    if sentences:
        return ". ".join(sentences[:MAX_WEATHER_SENTENCES]) + "."

    return _truncate(text, WEATHER_EXCERPT_CHARS)


def optimize_general(text: str, query: str) -> str:
    words = list(dict.fromkeys(w for w in query.lower().split() if w))
    sentences = _sentences(text, 20)

    scored = []
    for sentence in sentences:
        lowered = sentence.lower()
        scored.append((sum(1 for w in words if w in lowered), sentence))

    keep_all = len(scored) < 3
    kept = [item for item in scored if item[0] > 0 or keep_all]
    # sorted() is stable, so equal scores keep their original order.
    kept = sorted(kept, key=lambda item: item[0], reverse=True)[:MAX_GENERAL_SENTENCES]

    if kept:
        return ". ".join(s for _, s in kept) + "."
    return _truncate(text, GENERAL_EXCERPT_CHARS)


def optimize(content: str, query: str) -> str:
    """
    Compress one passage into a prompt-ready excerpt.

    Args:
        content: Passage text (may still contain markup fragments)
        query: The user's query

    Returns:
        A weather report or the most query-relevant sentences

    Example:
        >>> optimize("Delhi today: Temperature 32°C, sunny with humidity 60%.", "weather in Delhi")
        'Weather in Delhi: Temperature: 32°C. Condition: sunny. Humidity: 60%.'
    """
    text = strip_markup(content)
    if is_weather_query(query):
        return optimize_weather(text, query)
    return optimize_general(text, query)


class ContextOptimizer:
    """
    Builds the prompt context from ranked passages.

    Attributes:
        min_passage_chars: Passages this short or shorter are dropped
        separator: Placed between excerpts
    """
    separator = "\n\n---\n\n"

    def __init__(self, min_passage_chars: int = 50):
        self.min_passage_chars = min_passage_chars

    def select(self, passages: Sequence[RankedPassage]) -> List[RankedPassage]:
        """Passages long enough to be worth quoting."""
        return [p for p in passages if len(p.content) > self.min_passage_chars]

    def build_context(self, passages: Sequence[RankedPassage], query: str) -> str:
        """
        Join optimized excerpts into the prompt context.

        Example:
            >>> ContextOptimizer().build_context([passage], "weather in Delhi")
            '**Delhi Weather**\\nWeather in Delhi: Temperature: 32°C. Condition: sunny. Humidity: 60%.'
        """
        return self.separator.join(
            f"**{p.title}**\n{optimize(p.content, query)}" for p in self.select(passages)
        )
