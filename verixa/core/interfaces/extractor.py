"""
Extraction interface for the Verixa pipeline.

This module defines the interface for turning a fetched HTML page into a
title and a block of readable text. Extraction is split into pluggable
strategies (weather, structural, general) that the extractor tries in a
fixed priority order, so each heuristic can be tested or replaced on its own.

Example:
    ```python
    class ParagraphStrategy(ExtractionStrategy):
        name = "paragraphs"

        def extract(self, soup: BeautifulSoup, query_hint: Optional[str] = None) -> str:
            return " ".join(p.get_text(" ", strip=True) for p in soup.find_all("p"))
    ```
"""
from typing import NamedTuple, Optional, Protocol

from bs4 import BeautifulSoup


class PageContent(NamedTuple):
    """
    Container for extracted page data.

    Attributes:
        title: The page title (empty when the page has no <title>)
        content: Cleaned, length-capped main text

    Example:
        >>> page = PageContent(title="Example", content="Main content...")
        >>> page.title
        'Example'
    """
    title: str
    content: str


class ExtractionStrategy(Protocol):
    """
    One content-extraction heuristic.

    Strategies receive a freshly parsed document and may modify it freely;
    they return raw text that the extractor cleans and length-checks.
    """
    name: str

    def extract(self, soup: BeautifulSoup, query_hint: Optional[str] = None) -> str:
        """
        Pull candidate text out of a parsed page.

        Args:
            soup: Parsed HTML document (private copy for this strategy)
            query_hint: The user's query, when known

        Returns:
            Candidate text, or "" when the heuristic does not apply
        """
        ...
