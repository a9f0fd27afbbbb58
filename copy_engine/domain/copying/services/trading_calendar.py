"""Local-time helpers for the market calendar."""

from datetime import datetime, timedelta, timezone, tzinfo


def next_cutoff(now: datetime, tz: tzinfo, hour: int, minute: int = 0) -> datetime:
    """Next daily cutoff strictly after ``now``.

    At or past today's cutoff the following day's cutoff is returned.

    Args:
        now: Aware current time.
        tz: Market time zone the cutoff is expressed in.
        hour: Cutoff hour in local time.
        minute: Cutoff minute in local time.

    Returns:
        Cutoff as an aware UTC datetime.

    Example:
        >>> ny = ZoneInfo("America/New_York")
        >>> next_cutoff(datetime(2026, 3, 2, 15, 0, tzinfo=ny), ny, 16)
        datetime.datetime(2026, 3, 2, 21, 0, tzinfo=datetime.timezone.utc)
    """
    local_now = now.astimezone(tz)
    cutoff = local_now.replace(hour=hour, minute=minute, second=0, microsecond=0)
    if local_now >= cutoff:
        tomorrow = (local_now + timedelta(days=1)).date()
        cutoff = datetime(tomorrow.year, tomorrow.month, tomorrow.day, hour, minute, tzinfo=tz)
    return cutoff.astimezone(timezone.utc)


def start_of_local_day(now: datetime, tz: tzinfo) -> datetime:
    """Local midnight of ``now``'s market day, as aware UTC."""
    local_now = now.astimezone(tz)
    midnight = datetime(local_now.year, local_now.month, local_now.day, tzinfo=tz)
    return midnight.astimezone(timezone.utc)
