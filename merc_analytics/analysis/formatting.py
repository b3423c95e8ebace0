"""Display helpers for payload fields (addresses, amounts, dates)."""

from datetime import datetime, timezone


def short_address(address: str) -> str:
    """Shorten a hex address or hash to ``0x1234...abcd``."""
    if not address:
        return ""
    return f"{address[:6]}...{address[-4:]}"


def format_compact(value: float) -> str:
    """Format token amounts with K/M suffixes."""
    if value < 0:
        return f"-{format_compact(-value)}"
    if value >= 1_000_000:
        return f"{value / 1_000_000:.2f}M"
    elif value >= 1_000:
        return f"{value / 1_000:.1f}K"
    return f"{value:.0f}"


def format_tokens(value: float) -> str:
    """Whole-token amount with thousands separators."""
    return f"{value:,.0f}"


def format_fixed(value: float, places: int = 2) -> str:
    return f"{value:.{places}f}"


def time_ago(timestamp: int, now: int, compact: bool = False) -> str:
    """Relative age of a unix timestamp, e.g. ``5 minutes ago`` or ``5m ago``."""
    seconds = max(0, now - timestamp)
    if seconds < 60:
        amount, unit = seconds, "seconds"
    elif seconds < 3600:
        amount, unit = seconds // 60, "minutes"
    elif seconds < 86400:
        amount, unit = seconds // 3600, "hours"
    else:
        amount, unit = seconds // 86400, "days"

    if compact:
        return f"{amount}{unit[0]} ago"
    return f"{amount} {unit} ago"


def _utc(timestamp: int) -> datetime:
    return datetime.fromtimestamp(timestamp, tz=timezone.utc)


def date_label(timestamp: int) -> str:
    """``Oct 20, 2025``"""
    dt = _utc(timestamp)
    return f"{dt:%b} {dt.day}, {dt.year}"


def short_date_label(timestamp: int) -> str:
    """``Oct 20, 25``"""
    dt = _utc(timestamp)
    return f"{dt:%b} {dt.day}, {dt:%y}"


def day_label(dt: datetime) -> str:
    """``Oct 20``"""
    return f"{dt:%b} {dt.day}"


def long_date_label(dt: datetime) -> str:
    """``October 20, 2025``"""
    return f"{dt:%B} {dt.day}, {dt.year}"


def month_label(dt: datetime) -> str:
    """``Oct 25``"""
    return f"{dt:%b %y}"


def iso_now(now: datetime) -> str:
    """ISO-8601 UTC timestamp with millisecond precision and a ``Z`` suffix."""
    return now.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")
