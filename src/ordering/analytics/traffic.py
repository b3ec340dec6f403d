"""Traffic feed port: visitor metrics sourced outside the order stream.

Page views, devices and referrers are collected by the storefront's tracking
endpoint and merely merged into the dashboard; they are never derived here.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from ordering.utils.formatting import round_half_up


@dataclass(frozen=True)
class TrafficSnapshot:
    total_views: int = 0
    unique_sessions: int = 0
    previous_period_views: int = 0
    top_pages: list[dict] = field(default_factory=list)
    views_by_day: list[dict] = field(default_factory=list)
    devices: list[dict] = field(default_factory=list)
    browsers: list[dict] = field(default_factory=list)
    countries: list[dict] = field(default_factory=list)
    referrers: list[dict] = field(default_factory=list)

    @property
    def view_change(self) -> int:
        """Percentage change in page views against the previous period."""
        change = (self.total_views - self.previous_period_views) / max(self.previous_period_views, 1) * 100
        return round_half_up(change)


class TrafficFeed(ABC):
    """Abstract visitor-metrics source."""

    @abstractmethod
    def fetch(self, days: int) -> TrafficSnapshot:
        """Return visitor metrics for the last ``days`` days."""
        ...


class InMemoryTrafficFeed(TrafficFeed):
    """Serves a configured snapshot; empty until one is set."""

    def __init__(self, snapshot: TrafficSnapshot | None = None) -> None:
        self.snapshot = snapshot or TrafficSnapshot()
        self.requests: list[int] = []
        self.should_fail = False

    def configure(self, snapshot: TrafficSnapshot | None = None, should_fail: bool = False) -> None:
        if snapshot is not None:
            self.snapshot = snapshot
        self.should_fail = should_fail

    def fetch(self, days: int) -> TrafficSnapshot:
        self.requests.append(days)
        if self.should_fail:
            raise ConnectionError("Traffic feed unavailable")
        return self.snapshot


_current_feed: TrafficFeed | None = None


def get_traffic_feed() -> TrafficFeed:
    """Return the active traffic feed. Defaults to InMemoryTrafficFeed."""
    global _current_feed
    if _current_feed is None:
        _current_feed = InMemoryTrafficFeed()
    return _current_feed


def set_traffic_feed(feed: TrafficFeed) -> None:
    """Override the active traffic feed (useful for tests)."""
    global _current_feed
    _current_feed = feed


def reset_traffic_feed() -> None:
    """Reset to default feed."""
    global _current_feed
    _current_feed = None
