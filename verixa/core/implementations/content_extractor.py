"""
BeautifulSoup-based content extraction.

This module turns a fetched HTML page into a title and a block of readable
text. It tries three heuristics in a fixed order and keeps the first one that
produces enough text:

1. WeatherExtraction - temperature/condition/humidity/wind fragments and
   weather sentences (weather pages are the most common answer source)
2. StructuralExtraction - <article>, <main> and content-like containers
3. GeneralExtraction - whole-page text with navigation and boilerplate removed

Example:
    ```python
    extractor = ContentExtractor()
    page = extractor.extract(html, query_hint="weather in Delhi")
    print(page.title)    # "Delhi Weather Forecast"
    print(page.content)  # "Temperature: 32°C sunny Humidity: 60% ..."
    ```
"""
import html as html_lib
import re
from typing import List, Optional, Sequence

from bs4 import BeautifulSoup, Comment

from verixa.config.settings import FetchSettings
from verixa.core.interfaces.extractor import ExtractionStrategy, PageContent
from verixa.core.weather import PAGE_PATTERNS, SENTENCE_KEYWORD_RE

_WHITESPACE_RE = re.compile(r"\s+")
_DISALLOWED_RE = re.compile(r"[^\w\s.,!?;:()\[\]{}\"'%°/-]")
_SENTENCE_SPLIT_RE = re.compile(r"[.!?]+")

NON_CONTENT_TAGS = ["head", "script", "style", "noscript", "iframe", "nav", "header", "footer", "aside"]
BOILERPLATE_CLASS_RE = re.compile(
    r"DaybreakLargeScreen|Card--|cookie|consent|newsletter|social-share|advert", re.I
)


def collapse_whitespace(text: str) -> str:
    return _WHITESPACE_RE.sub(" ", text).strip()


def clean_text(text: str) -> str:
    """
    Decode entities, drop characters outside the allow-list, collapse spaces.

    Example:
        >>> clean_text("Hot &amp; humid &#8212; 32°C   today ★")
        'Hot humid 32°C today'
    """
    text = html_lib.unescape(text).replace("\xa0", " ")
    text = _DISALLOWED_RE.sub(" ", text)
    return collapse_whitespace(text)


def _drop(soup: BeautifulSoup, names) -> None:
    for tag in soup(names):
        if not tag.decomposed:
            tag.decompose()


def _visible_text(soup: BeautifulSoup) -> str:
    _drop(soup, ["script", "style", "noscript"])
    return soup.get_text(" ", strip=True)


class WeatherExtraction(ExtractionStrategy):
    """
    Collects weather fragments and weather sentences from the visible text.

    Runs on every page regardless of the query; up to 10 pattern matches and
    5 sentences are kept, capped at 1000 characters.
    """
    name = "weather"
    max_matches = 10
    max_sentences = 5
    max_chars = 1000

    def extract(self, soup: BeautifulSoup, query_hint: Optional[str] = None) -> str:
        text = _visible_text(soup)

        matches: List[str] = []
        for pattern in PAGE_PATTERNS:
            matches.extend(m.group(0) for m in pattern.finditer(text))

        sentences = []
        for sentence in _SENTENCE_SPLIT_RE.split(text):
            stripped = sentence.strip()
            if 15 < len(stripped) < 200 and SENTENCE_KEYWORD_RE.search(stripped):
                sentences.append(stripped)
                if len(sentences) == self.max_sentences:
                    break

        if not matches and not sentences:
            return ""
        combined = " ".join(matches[:self.max_matches] + sentences)
        return combined[:self.max_chars]


class StructuralExtraction(ExtractionStrategy):
    """
    Text of the page's main-content containers.

    Selector groups are tried in order; the first group with any match wins
    and the text of all its (outermost) matches is concatenated.
    """
    name = "structural"

    @staticmethod
    def _class_contains(word: str):
        return lambda cls: bool(cls) and word in cls.lower()

    def _selector_groups(self):
        return [
            lambda s: s.find_all("article"),
            lambda s: s.find_all("main"),
            lambda s: s.find_all("div", class_=self._class_contains("content")),
            lambda s: s.find_all("div", class_=self._class_contains("article")),
            lambda s: s.find_all("div", class_=self._class_contains("post")),
            lambda s: s.find_all("section", class_=self._class_contains("content")),
        ]

    def extract(self, soup: BeautifulSoup, query_hint: Optional[str] = None) -> str:
        _drop(soup, ["script", "style", "noscript"])
        for select in self._selector_groups():
            found = select(soup)
            if not found:
                continue
            ids = {id(el) for el in found}
            outermost = [el for el in found if not any(id(p) in ids for p in el.parents)]
            return " ".join(el.get_text(" ", strip=True) for el in outermost)
        return ""


class GeneralExtraction(ExtractionStrategy):
    """
    Whole-page text after removing scripts, navigation, chrome and comments.
    """
    name = "general"

    def extract(self, soup: BeautifulSoup, query_hint: Optional[str] = None) -> str:
        _drop(soup, NON_CONTENT_TAGS)
        for comment in soup.find_all(string=lambda s: isinstance(s, Comment)):
            comment.extract()
        for el in soup.find_all(class_=BOILERPLATE_CLASS_RE):
            if not el.decomposed:
                el.decompose()
        return collapse_whitespace(soup.get_text(" "))


DEFAULT_STRATEGIES = (WeatherExtraction, StructuralExtraction, GeneralExtraction)


class ContentExtractor:
    """
    Extracts title and main text from HTML using pluggable strategies.

    The extractor:
    1. Reads the first <title> element
    2. Runs each strategy on its own parse of the page; the first strategy
       reuses the parse the title was read from, later ones parse only if
       reached
    3. Cleans each candidate and keeps the first one of at least
       `min_content_chars` characters (else the last non-empty one)
    4. Caps the result at `max_content_chars`, marking the cut with "..."

    Attributes:
        strategies: Strategies in priority order
        min_chars: Shortest candidate accepted outright
        max_chars: Hard cap on returned content

    Example:
        >>> extractor = ContentExtractor()
        >>> page = extractor.extract("<html><head><title>A &amp; B</title></head></html>")
        >>> page.title
        'A & B'
    """

    def __init__(self, settings: Optional[FetchSettings] = None,
                 strategies: Optional[Sequence[ExtractionStrategy]] = None):
        settings = settings or FetchSettings()
        self.strategies = list(strategies) if strategies is not None else [cls() for cls in DEFAULT_STRATEGIES]
        self.min_chars = settings.min_content_chars
        self.max_chars = settings.max_content_chars

    @staticmethod
    def extract_title(soup: BeautifulSoup) -> str:
        title = soup.find("title")
        if title is None:
            return ""
        return collapse_whitespace(html_lib.unescape(title.get_text()))

    def extract(self, html: str, query_hint: Optional[str] = None) -> PageContent:
        """
        Extract (title, content) from an HTML document.

        Args:
            html: Raw HTML
            query_hint: The user's query, passed through to the strategies

        Returns:
            PageContent; either field may be empty
        """
        soup = BeautifulSoup(html, "lxml")
        title = self.extract_title(soup)

        content = ""
        for strategy in self.strategies:
            # Strategies remove tags, so each one needs an untouched parse.
            if soup is None:
                soup = BeautifulSoup(html, "lxml")
            candidate = clean_text(strategy.extract(soup, query_hint))
            soup = None
            if len(candidate) >= self.min_chars:
                content = candidate
                break
            if candidate:
                content = candidate

        if len(content) > self.max_chars:
            content = content[:self.max_chars] + "..."
        return PageContent(title=title, content=content)
