"""Display formatting shared by messages, e-mails and analytics."""

import math
from datetime import UTC, datetime

from ordering.settings import get_settings


def format_price(amount: float | int | None) -> str:
    """``KSh 1,500`` for whole amounts, ``KSh 1,500.50`` otherwise."""
    amount = float(amount or 0)
    label = get_settings().currency_label
    if amount == int(amount):
        return f"{label} {amount:,.0f}"
    return f"{label} {amount:,.2f}"


def as_utc(moment: datetime) -> datetime:
    """Treat naive datetimes as UTC so stored and live timestamps compare."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=UTC)
    return moment.astimezone(UTC)


def time_ago(moment: datetime, now: datetime | None = None) -> str:
    """Relative time such as ``5 min ago`` or ``2 days ago``."""
    now = as_utc(now or datetime.now(UTC))
    elapsed = (now - as_utc(moment)).total_seconds()

    minutes = int(elapsed // 60)
    if minutes < 1:
        return "Just now"
    if minutes < 60:
        return f"{minutes} min ago"

    hours = minutes // 60
    if hours < 24:
        return f"{hours} hour{'s' if hours > 1 else ''} ago"

    days = hours // 24
    if days < 7:
        return f"{days} day{'s' if days > 1 else ''} ago"

    return as_utc(moment).strftime("%d %b %Y")


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves going up (2.5 → 3)."""
    return math.floor(value + 0.5)
