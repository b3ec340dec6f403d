"""Tests for price/time formatting, rounding and page slicing."""

from datetime import UTC, datetime, timedelta

from ordering.analytics.traffic import TrafficSnapshot
from ordering.utils.formatting import as_utc, format_price, round_half_up, time_ago
from ordering.utils.pagination import paginate

NOW = datetime(2024, 6, 15, 12, 0, tzinfo=UTC)


class TestFormatPrice:
    def test_whole_amount(self):
        assert format_price(1500) == "KSh 1,500"

    def test_fractional_amount(self):
        assert format_price(1500.5) == "KSh 1,500.50"

    def test_missing_amount(self):
        assert format_price(None) == "KSh 0"


class TestTimeAgo:
    def test_ranges(self):
        assert time_ago(NOW - timedelta(seconds=30), NOW) == "Just now"
        assert time_ago(NOW - timedelta(minutes=5), NOW) == "5 min ago"
        assert time_ago(NOW - timedelta(hours=1), NOW) == "1 hour ago"
        assert time_ago(NOW - timedelta(hours=5), NOW) == "5 hours ago"
        assert time_ago(NOW - timedelta(days=2), NOW) == "2 days ago"
        assert time_ago(NOW - timedelta(days=10), NOW) == "05 Jun 2024"

    def test_naive_datetimes_are_utc(self):
        naive = datetime(2024, 6, 15, 11, 0)
        assert as_utc(naive).tzinfo is UTC
        assert time_ago(naive, NOW) == "1 hour ago"


class TestRoundHalfUp:
    def test_halves_round_up(self):
        assert round_half_up(2.5) == 3
        assert round_half_up(-2.5) == -2
        assert round_half_up(2.49) == 2

    def test_view_change(self):
        assert TrafficSnapshot(total_views=0, previous_period_views=0).view_change == 0
        assert TrafficSnapshot(total_views=50, previous_period_views=0).view_change == 5000
        assert TrafficSnapshot(total_views=75, previous_period_views=100).view_change == -25


class TestPaginate:
    def test_slices_page(self):
        page = paginate(list(range(23)), page=2, per_page=10)

        assert page.items == list(range(10, 20))
        assert page.total_items == 23
        assert page.total_pages == 3
        assert page.has_next and page.has_previous

    def test_out_of_range_page_is_clamped(self):
        assert paginate(list(range(5)), page=9, per_page=2).page == 3
        assert paginate(list(range(5)), page=0, per_page=2).page == 1

    def test_empty_list_has_one_page(self):
        page = paginate([], page=1, per_page=10)
        assert page.items == []
        assert page.total_pages == 1
        assert not page.has_next
