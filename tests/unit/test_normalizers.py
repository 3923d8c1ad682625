"""Tests for location and topic normalizers."""

import pytest
from conf_tracker.normalizers.location import (
    match_location,
    normalize_country,
    place_country,
    place_in_location,
)
from conf_tracker.normalizers.topics import (
    CATEGORY_FILTER_KEYWORDS,
    CATEGORY_NAMES,
    CATEGORY_TOPICS,
    category_label,
    category_terms,
    contains_term,
    match_category,
    normalize_keywords,
)
from conf_tracker.models import CATEGORY_CODES


class TestLocationNormalizer:
    """Tests for country and continent matching."""

    @pytest.mark.parametrize("raw,expected", [
        ("China", "China"),
        ("中国", "China"),
        ("Hong Kong", "China"),
        ("USA", "USA"),
        ("UK", "United Kingdom"),
        ("Atlantis", None),
    ])
    def test_normalize_country(self, raw: str, expected):
        assert normalize_country(raw) == expected

    @pytest.mark.parametrize("place,expected", [
        ("Vancouver, Canada", "Canada"),
        ("Seoul, South Korea", "South Korea"),
        ("Nashville, TN, USA", "USA"),
        ("Macau", "China"),
        ("Hong Kong, China", "China"),
        ("Virtual", None),
        ("", None),
    ])
    def test_place_country(self, place: str, expected):
        assert place_country(place) == expected

    @pytest.mark.parametrize("query,expected", [
        ("conference in china", "China"),
        ("在中国举办", "China"),
        ("somewhere in europe", "Europe"),
        ("south korea or japan", "South Korea"),
        ("北美的会议", "North America"),
        ("help us find one", None),
    ])
    def test_match_location(self, query: str, expected):
        assert match_location(query) == expected

    @pytest.mark.parametrize("place,location,expected", [
        ("Rome, Italy", "Europe", True),
        ("Rome, Italy", "Asia", False),
        ("Shanghai, China", "China", True),
        ("Taipei, Taiwan", "China", True),
        ("Seattle, USA", "China", False),
        ("", "China", False),
    ])
    def test_place_in_location(self, place: str, location: str, expected: bool):
        assert place_in_location(place, location) is expected


class TestTopicNormalizer:
    """Tests for term matching and category lookup."""

    @pytest.mark.parametrize("text,term,expected", [
        ("ai conference", "ai", True),
        ("email the chair", "ai", False),
        ("CV and NLP", "nlp", True),
        ("人工智能会议", "人工智能", True),
        ("Deep Learning Summit", "deep learning", True),
        ("anything", "", False),
    ])
    def test_contains_term(self, text: str, term: str, expected: bool):
        assert contains_term(text, term) is expected

    @pytest.mark.parametrize("query,expected", [
        ("ai conference", "AI"),
        ("软件工程", "SE"),
        ("data mining venue", "DB"),
        ("网络安全", "SC"),
        ("computer vision", "CG"),
        ("wireless network", "NW"),
        ("distributed storage", "DS"),
        ("hci venue", "HI"),
        ("theoretical cs", "CT"),
        ("hello", None),
    ])
    def test_match_category(self, query: str, expected):
        assert match_category(query) == expected

    def test_category_terms(self):
        assert "deep learning" in category_terms("ai")
        assert category_terms(None) == []
        assert category_terms("XX") == []

    @pytest.mark.parametrize("code,expected", [
        ("AI", "Artificial Intelligence"),
        ("ai", "Artificial Intelligence"),
        ("XX", "XX"),
        (None, "-"),
    ])
    def test_category_label(self, code, expected):
        assert category_label(code) == expected

    def test_normalize_keywords(self):
        """Empty tags are dropped and duplicates removed case-insensitively."""
        assert normalize_keywords([" ML ", "ml", "", "  ", "AI"]) == ["ML", "AI"]


class TestCategoryTables:
    """Verify category tables configuration."""

    def test_every_code_named(self):
        for code in CATEGORY_CODES:
            assert code in CATEGORY_NAMES, f"Missing name for: {code}"
            assert code in CATEGORY_TOPICS, f"Missing topics for: {code}"

    def test_filter_keywords_use_known_codes(self):
        assert set(CATEGORY_FILTER_KEYWORDS) <= set(CATEGORY_CODES)
