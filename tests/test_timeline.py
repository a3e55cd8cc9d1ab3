"""Cross-report timeline, trend and comparison tests."""

from datetime import datetime, timezone

import pytest

from Listing_Engine.processors.source_1_history import (
    build_comparison,
    build_listing_timeline,
    compute_aggregate_trend,
    compute_kpi_comparison,
    compute_listing_change,
    get_declined_listings,
    get_top_listing_timelines,
    pct_change,
)
from Listing_Engine.schemas import Snapshot

from .factories import make_listing, make_scored, make_snapshot


class TestPctChange:
    """Null-safe percent change."""

    @pytest.mark.parametrize("a, b, expected", [
        (100, 50, -50.0),
        (50, 100, 100.0),
        (-10, -5, 50.0),
        (0, 0, 0),
        (0, 5, None),
        (None, 5, None),
        (5, None, None),
        (float("nan"), 5, None),
    ])
    def test_cases(self, a, b, expected):
        assert pct_change(a, b) == expected


class TestListingTimeline:
    """Join by item ID."""

    def test_points_are_chronological_regardless_of_input_order(self):
        later = make_snapshot("s2", [make_scored("A", 50, "yellow", total_impressions=20)], days=7)
        earlier = make_snapshot("s1", [make_scored("A", 70, "green", total_impressions=10)], days=0)

        timeline = build_listing_timeline([later, earlier])
        assert [p.snapshot_id for p in timeline["A"].points] == ["s1", "s2"]

    def test_absent_snapshot_adds_no_point(self):
        s1 = make_snapshot("s1", [make_scored("A", 70, "green"), make_scored("B", 70, "green")], days=0)
        s2 = make_snapshot("s2", [make_scored("A", 70, "green")], days=1)
        s3 = make_snapshot("s3", [make_scored("A", 70, "green"), make_scored("B", 10, "red")], days=2)

        timeline = build_listing_timeline([s1, s2, s3])
        assert len(timeline["A"].points) == 3
        assert [p.snapshot_id for p in timeline["B"].points] == ["s1", "s3"]

    def test_null_metrics_stay_null(self):
        snap = make_snapshot("s1", [make_scored("A", 10, "red", ctr=None, total_impressions=None)])
        point = build_listing_timeline([snap])["A"].points[0]
        assert point.ctr is None
        assert point.total_impressions is None

    def test_unscored_listing_defaults(self):
        snap = make_snapshot("s1", [make_listing(title="Mahomes Chiefs", item_id="A")])
        point = build_listing_timeline([snap])["A"].points[0]
        assert point.health_score is None
        assert point.health_badge == "red"
        assert point.sport == "Football"

    def test_listings_without_id_skipped(self):
        snap = make_snapshot("s1", [make_listing(title="No id"), make_scored("A", 10, "red")])
        assert list(build_listing_timeline([snap])) == ["A"]

    def test_title_is_most_recent(self):
        s1 = make_snapshot("s1", [make_scored("A", 10, "red", title="Old title")], days=0)
        s2 = make_snapshot("s2", [make_scored("A", 10, "red", title="New title")], days=1)
        assert build_listing_timeline([s2, s1])["A"].title == "New title"

    def test_empty(self):
        assert build_listing_timeline([]) == {}


class TestListingChange:
    """Change between the two latest points."""

    def _entry(self, *points):
        snaps = [make_snapshot(f"s{i}", [listing], days=i) for i, listing in enumerate(points)]
        return build_listing_timeline(snaps)["A"]

    def test_decline_without_new_issue(self):
        entry = self._entry(
            make_scored("A", 70, "green", total_impressions=100),
            make_scored("A", 45, "yellow", total_impressions=50),
        )
        change = compute_listing_change(entry)
        assert change.impressions_change == -50.0
        assert change.health_score_change == -25
        assert change.is_declined is True
        assert change.is_new_issue is False

    def test_new_issue(self):
        entry = self._entry(make_scored("A", 40, "yellow"), make_scored("A", 10, "red"))
        change = compute_listing_change(entry)
        assert change.is_new_issue is True
        assert change.is_declined is True

    def test_improvement(self):
        entry = self._entry(make_scored("A", 10, "red"), make_scored("A", 70, "green"))
        change = compute_listing_change(entry)
        assert change.is_new_issue is False
        assert change.is_declined is False

    def test_only_last_two_points(self):
        entry = self._entry(
            make_scored("A", 90, "green", total_impressions=1000),
            make_scored("A", 10, "red", total_impressions=10),
            make_scored("A", 15, "red", total_impressions=20),
        )
        change = compute_listing_change(entry)
        assert change.impressions_change == 100.0
        assert change.prev_health_badge == "red"
        assert change.is_new_issue is False

    def test_null_metrics_give_null_change(self):
        entry = self._entry(make_scored("A", 50, "yellow", ctr=None), make_scored("A", 50, "yellow", ctr=1.0))
        assert compute_listing_change(entry).ctr_change is None

    def test_single_point(self):
        entry = self._entry(make_scored("A", 50, "yellow"))
        assert compute_listing_change(entry) is None


class TestDeclinedAndTop:
    """Triage queue and top timelines."""

    def _timeline(self):
        s1 = make_snapshot("s1", [
            make_scored("A", 70, "green", total_impressions=100),
            make_scored("B", 40, "yellow", total_impressions=500),
            make_scored("C", 70, "green", total_impressions=900),
            make_scored("D", 10, "red", total_impressions=5),
        ], days=0)
        s2 = make_snapshot("s2", [
            make_scored("A", 45, "yellow", total_impressions=800),
            make_scored("B", 10, "red", total_impressions=50),
            make_scored("C", 80, "green", total_impressions=950),
            make_scored("E", 60, "green", total_impressions=2000),
        ], days=1)
        return build_listing_timeline([s1, s2])

    def test_declined_new_issues_first(self):
        declined = get_declined_listings(self._timeline())
        assert [d.entry.item_id for d in declined] == ["B", "A"]

    def test_top_timelines(self):
        top = get_top_listing_timelines(self._timeline(), n=3)
        assert [e.item_id for e in top] == ["E", "C", "A"]

    def test_top_timelines_default_limit(self):
        assert len(get_top_listing_timelines(self._timeline())) == 5


class TestAggregateTrend:
    """Per-snapshot rollups."""

    def test_rollup(self):
        snap = make_snapshot("s1", [
            make_scored("A", 70, "green", total_impressions=100, ctr=1.0, is_promoted=True, quantity_sold=2),
            make_scored("B", 40, "yellow", total_impressions=50, ctr=2.34),
            make_listing(title="unscored", item_id="C", total_impressions=None, ctr=None),
        ], filename="January Traffic Report Export.csv")

        (point,) = compute_aggregate_trend([snap])
        assert point.label == "January Traffic Repo"
        assert point.total_impressions == 150
        assert point.promoted_impressions == 100
        assert point.organic_impressions == 50
        assert point.avg_ctr == pytest.approx(1.67)
        assert point.total_sold == 2
        assert point.listing_count == 3
        assert point.health_zones == {"green": 1, "yellow": 1, "red": 1}

    def test_label_falls_back_to_date(self):
        snap = make_snapshot("s1", [], filename=".csv")
        (point,) = compute_aggregate_trend([snap])
        assert point.label == "2025-01-01"

    def test_chronological(self):
        series = compute_aggregate_trend([make_snapshot("late", [], days=3), make_snapshot("early", [], days=1)])
        assert [p.snapshot_id for p in series] == ["early", "late"]


class TestKpiComparison:
    """Latest-vs-previous rollup deltas."""

    def test_deltas(self):
        s1 = make_snapshot("s1", [make_scored("A", 70, "green", total_impressions=100, ctr=1.0)], days=0)
        s2 = make_snapshot("s2", [
            make_scored("A", 70, "green", total_impressions=150, ctr=2.0),
            make_scored("B", 70, "green", total_impressions=50, ctr=2.0),
        ], days=1)
        comparison = compute_kpi_comparison(compute_aggregate_trend([s1, s2]))

        assert comparison.total_impressions.change == 100
        assert comparison.total_impressions.pct_change == 100.0
        assert comparison.listing_count.change == 1
        assert comparison.total_sold.pct_change == 0

    def test_zero_baseline_is_null(self):
        s1 = make_snapshot("s1", [], days=0)
        s2 = make_snapshot("s2", [make_scored("A", 70, "green", total_impressions=10)], days=1)
        comparison = compute_kpi_comparison(compute_aggregate_trend([s1, s2]))
        assert comparison.total_impressions.pct_change is None

    def test_needs_two_points(self):
        assert compute_kpi_comparison(compute_aggregate_trend([make_snapshot("s1", [])])) is None


class TestComparison:
    """Two-report full outer join."""

    def _pair(self):
        a = make_snapshot("a", [
            make_scored("keep-small", 50, "yellow", total_impressions=100),
            make_scored("gone", 50, "yellow", total_impressions=10),
            make_scored("keep-big", 50, "yellow", total_impressions=100),
            make_scored("keep-null", 50, "yellow", total_impressions=None),
        ], days=0)
        b = make_snapshot("b", [
            make_scored("keep-small", 50, "yellow", total_impressions=110),
            make_scored("fresh", 50, "yellow", total_impressions=5),
            make_scored("keep-big", 50, "yellow", total_impressions=20),
            make_scored("keep-null", 50, "yellow", total_impressions=None),
        ], days=1)
        return a, b

    def test_statuses_are_disjoint_and_complete(self):
        a, b = self._pair()
        rows = build_comparison(a, b)
        ids = [r.item_id for r in rows]

        assert sorted(ids) == sorted({l.item_id for l in a.listings} | {l.item_id for l in b.listings})
        assert len(ids) == len(set(ids))
        status = {r.item_id: r.status for r in rows}
        assert status["fresh"] == "new"
        assert status["gone"] == "delisted"
        assert status["keep-big"] == "continuing"

    def test_ordering(self):
        rows = build_comparison(*self._pair())
        assert [r.item_id for r in rows] == ["keep-big", "keep-small", "keep-null", "fresh", "gone"]

    def test_sides(self):
        rows = {r.item_id: r for r in build_comparison(*self._pair())}
        assert rows["fresh"].before is None
        assert rows["fresh"].impressions_change is None
        assert rows["gone"].after is None
        assert rows["keep-big"].impressions_change == -80.0
        assert rows["keep-null"].impressions_change == 0
        assert rows["keep-null"].before.total_impressions is None

    def test_per_metric_changes(self):
        a = make_snapshot("a", [
            make_scored("keep", 50, "yellow", ctr=2.0, total_page_views=10, quantity_sold=0),
            make_scored("gone", 50, "yellow", ctr=1.0, total_page_views=4, quantity_sold=1),
        ], days=0)
        b = make_snapshot("b", [
            make_scored("keep", 50, "yellow", ctr=1.0, total_page_views=15, quantity_sold=2),
            make_scored("fresh", 50, "yellow", ctr=1.0, total_page_views=4, quantity_sold=1),
        ], days=1)
        rows = {r.item_id: r for r in build_comparison(a, b)}

        assert rows["keep"].ctr_change == -50.0
        assert rows["keep"].page_views_change == 50.0
        assert rows["keep"].sold_change is None
        for item_id in ("gone", "fresh"):
            assert rows[item_id].ctr_change is None
            assert rows[item_id].page_views_change is None
            assert rows[item_id].sold_change is None

    def test_null_metric_change_is_null(self):
        a = make_snapshot("a", [make_scored("keep", 50, "yellow", ctr=None, quantity_sold=0)], days=0)
        b = make_snapshot("b", [make_scored("keep", 50, "yellow", ctr=1.5, quantity_sold=0)], days=1)
        (row,) = build_comparison(a, b)
        assert row.ctr_change is None
        assert row.sold_change == 0


class TestMixedTimestamps:
    """Naive upload times are read as UTC."""

    def test_naive_upload_time_is_utc(self):
        snap = Snapshot(id="s", uploaded_at=datetime(2025, 3, 1))
        assert snap.uploaded_at == datetime(2025, 3, 1, tzinfo=timezone.utc)

    def test_timeline_orders_naive_and_aware_snapshots(self):
        aware = Snapshot(id="jan", uploaded_at=datetime(2025, 2, 1, tzinfo=timezone.utc),
                         listings=(make_scored("A", 70, "green"),))
        naive = Snapshot(id="feb", uploaded_at=datetime(2025, 3, 1),
                         listings=(make_scored("A", 40, "yellow"),))

        timeline = build_listing_timeline([naive, aware])
        assert [p.snapshot_id for p in timeline["A"].points] == ["jan", "feb"]
        assert [p.snapshot_id for p in compute_aggregate_trend([naive, aware])] == ["jan", "feb"]
