"""Keyword extraction and aggregation tests."""

import pytest

from Listing_Engine.processors.source_0_traffic_report.metrics.keywords import (
    analyze_keywords,
    extract_keywords,
    get_keyword_suggestions,
    get_keyword_trends,
)
from Listing_Engine.schemas import KeywordAggregate

from .factories import make_listing, make_scored


def _aggregate(keyword, avg, total=None):
    return KeywordAggregate(
        keyword=keyword,
        appearances=1,
        total_impressions=total if total is not None else int(avg),
        avg_impressions=avg,
        total_page_views=0,
        avg_ctr=0.0,
        total_sold=0,
        conversion_rate=None,
        avg_health_score=0.0,
    )


class TestExtractKeywords:
    """Title tokenization."""

    def test_delimiters_and_edge_punctuation(self):
        assert extract_keywords("2023 Prizm #252 (PSA 10)") == ["2023", "252", "psa", "10"]

    def test_stop_words_removed(self):
        assert extract_keywords("The Rookie Card of Topps") == []

    def test_symbol_only_tokens_dropped(self):
        assert extract_keywords("Mahomes / | - !!! Chiefs") == ["mahomes", "chiefs"]

    def test_empty(self):
        assert extract_keywords("") == []
        assert extract_keywords(None) == []


class TestAnalyzeKeywords:
    """Per-keyword aggregation."""

    def test_repeated_token_counts_once_per_listing(self):
        listings = [
            make_listing(title="PSA 10 PSA Mahomes", total_impressions=100),
            make_listing(title="PSA 9 Ohtani", total_impressions=50),
        ]
        by_kw = {kw.keyword: kw for kw in analyze_keywords(listings)}
        assert by_kw["psa"].appearances == 2
        assert by_kw["psa"].total_impressions == 150
        assert by_kw["psa"].avg_impressions == 75.0

    def test_sorted_by_total_impressions(self):
        listings = [
            make_listing(title="alpha", total_impressions=5),
            make_listing(title="beta", total_impressions=50),
        ]
        assert [kw.keyword for kw in analyze_keywords(listings)] == ["beta", "alpha"]

    def test_ctr_is_impression_weighted(self):
        listings = [
            make_listing(title="psa", total_impressions=100, ctr=1.0),
            make_listing(title="psa", total_impressions=300, ctr=3.0),
            make_listing(title="psa", total_impressions=1000, ctr=None),
        ]
        (psa,) = analyze_keywords(listings)
        assert psa.avg_ctr == pytest.approx(2.5)

    def test_conversion_rate_null_without_page_views(self):
        (kw,) = analyze_keywords([make_listing(title="zion", quantity_sold=1)])
        assert kw.conversion_rate is None

    def test_conversion_rate(self):
        (kw,) = analyze_keywords([make_listing(title="zion", quantity_sold=1, total_page_views=4)])
        assert kw.conversion_rate == 25.0

    def test_health_score_average(self):
        listings = [make_scored("1", 80, "green", title="zion"), make_scored("2", 20, "red", title="zion")]
        (kw,) = analyze_keywords(listings)
        assert kw.avg_health_score == 50.0

    def test_empty(self):
        assert analyze_keywords([]) == []
        assert analyze_keywords([make_listing(title="the of and")]) == []


class TestKeywordTrends:
    """Cross-sectional standing against the median keyword."""

    def test_directions(self):
        keywords = [_aggregate("high", 200.0), _aggregate("mid", 100.0), _aggregate("low", 10.0), _aggregate("near", 110.0)]
        # sorted desc: 200, 110, 100, 10 -> index 2 -> median 100
        trends = {t.keyword: t for t in get_keyword_trends(keywords)}
        assert trends["high"].trend_direction == "up"
        assert trends["high"].deviation_pct == 100.0
        assert trends["near"].trend_direction == "stable"
        assert trends["low"].trend_direction == "down"

    def test_sorted_by_deviation(self):
        keywords = [_aggregate("a", 10.0), _aggregate("b", 300.0), _aggregate("c", 100.0)]
        assert [t.keyword for t in get_keyword_trends(keywords)] == ["b", "c", "a"]

    def test_zero_median(self):
        trends = get_keyword_trends([_aggregate("a", 0.0), _aggregate("b", 0.0)])
        assert all(t.deviation_pct == 0.0 and t.trend_direction == "stable" for t in trends)

    def test_empty(self):
        assert get_keyword_trends([]) == []


class TestKeywordSuggestions:
    """Related keyword suggestions."""

    def test_excludes_self_and_limits(self):
        keywords = [_aggregate(str(i), 0.0, total=i) for i in range(10)]
        suggestions = get_keyword_suggestions("9", keywords, limit=3)
        assert [kw.keyword for kw in suggestions] == ["8", "7", "6"]

    def test_default_limit(self):
        keywords = [_aggregate(str(i), 0.0, total=i) for i in range(10)]
        assert len(get_keyword_suggestions("x", keywords)) == 5

    def test_empty(self):
        assert get_keyword_suggestions("", [_aggregate("a", 1.0)]) == []
        assert get_keyword_suggestions("a", []) == []
