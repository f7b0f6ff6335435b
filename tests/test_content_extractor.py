"""Tests for HTML content extraction."""

from bs4 import BeautifulSoup

from verixa.config.settings import FetchSettings
from verixa.core.implementations import content_extractor
from verixa.core.implementations.content_extractor import (
    ContentExtractor,
    GeneralExtraction,
    StructuralExtraction,
    WeatherExtraction,
    clean_text,
)

ARTICLE_TEXT = (
    "Retrieval augmented generation combines a search step with a language model "
    "so that answers can cite the documents they are based on."
)


def page(body, title="Example Page"):
    head = f"<head><title>{title}</title></head>" if title is not None else "<head></head>"
    return f"<html>{head}<body>{body}</body></html>"


def test_clean_text_decodes_entities_and_drops_symbols():
    assert clean_text("Hot &amp; humid &#8212; 32°C   today ★") == "Hot humid 32°C today"


def test_title_is_read_and_unescaped():
    extractor = ContentExtractor()
    result = extractor.extract(page("<p>x</p>", title="A &amp; B"))
    assert result.title == "A & B"


def test_missing_title_is_empty():
    result = ContentExtractor().extract(page(f"<article>{ARTICLE_TEXT}</article>", title=None))
    assert result.title == ""


def test_weather_strategy_wins_on_weather_pages():
    body = (
        "<nav>Home News Sport</nav>"
        "<div>Delhi today: Temperature 32°C with sunny skies. Humidity 60% and wind 12 km/h. "
        "The weather will stay warm through the weekend with temperatures near 34°C.</div>"
    )
    result = ContentExtractor().extract(page(body))
    assert "32°C" in result.content
    assert "Humidity 60%" in result.content


def test_structural_strategy_uses_article_text():
    body = f"<nav>Home About Contact</nav><article><p>{ARTICLE_TEXT}</p></article><footer>Copyright</footer>"
    result = ContentExtractor().extract(page(body))
    assert result.content == ARTICLE_TEXT


def test_general_strategy_strips_navigation_and_footer():
    body = f"<nav>Home About Contact</nav><div><p>{ARTICLE_TEXT}</p></div><footer>Copyright</footer>"
    result = ContentExtractor().extract(page(body))
    assert result.content == ARTICLE_TEXT
    assert "Copyright" not in result.content


def test_strategies_are_tried_in_order():
    calls = []

    class Recording:
        def __init__(self, name, text):
            self.name = name
            self.text = text

        def extract(self, soup, query_hint=None):
            calls.append(self.name)
            return self.text

    strategies = [Recording("first", "short"), Recording("second", "x" * 150), Recording("third", "y" * 150)]
    result = ContentExtractor(strategies=strategies).extract(page(""))
    assert calls == ["first", "second"]
    assert result.content == "x" * 150


def test_short_candidates_fall_back_to_last_non_empty():
    class Fixed:
        name = "fixed"

        def __init__(self, text):
            self.text = text

        def extract(self, soup, query_hint=None):
            return self.text

    extractor = ContentExtractor(strategies=[Fixed("first"), Fixed("second"), Fixed("")])
    assert extractor.extract(page("")).content == "second"


def test_content_is_capped():
    extractor = ContentExtractor(FetchSettings(max_content_chars=200))
    long_text = " ".join(["lorem ipsum dolor"] * 50)
    result = extractor.extract(page(f"<article>{long_text}</article>"))
    assert len(result.content) == 203
    assert result.content.endswith("...")


def test_default_strategy_order():
    names = [s.name for s in ContentExtractor().strategies]
    assert names == [WeatherExtraction.name, StructuralExtraction.name, GeneralExtraction.name]


def test_empty_page_gives_empty_content():
    assert ContentExtractor().extract("<html><body></body></html>").content == ""


def count_parses(monkeypatch):
    calls = []

    def parse(markup, features):
        calls.append(features)
        return BeautifulSoup(markup, features)

    monkeypatch.setattr(content_extractor, "BeautifulSoup", parse)
    return calls


def test_weather_page_is_parsed_once(monkeypatch):
    calls = count_parses(monkeypatch)
    body = (
        "<div>Delhi today: Temperature 32°C with sunny skies. Humidity 60% and wind 12 km/h. "
        "The weather will stay warm through the weekend with temperatures near 34°C.</div>"
    )
    result = ContentExtractor().extract(page(body, title="Delhi Weather"))
    assert result.title == "Delhi Weather"
    assert "32°C" in result.content
    assert len(calls) == 1


def test_later_strategies_get_a_fresh_parse(monkeypatch):
    calls = count_parses(monkeypatch)
    result = ContentExtractor().extract(page(f"<article>{ARTICLE_TEXT}</article>"))
    assert result.content == ARTICLE_TEXT
    # title + weather share one parse; structural needs its own
    assert len(calls) == 2
