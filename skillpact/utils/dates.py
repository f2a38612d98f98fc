"""Date helpers.

Timestamps are stored as naive UTC datetimes (``datetime.utcnow()``), so
anything coming in from a client is normalised to that form first.
"""

from datetime import datetime, timezone


def utc_isoformat(dt):
    """Convert datetime to ISO format with Z suffix to indicate UTC."""
    if dt is None:
        return None
    return dt.isoformat() + 'Z'


def parse_datetime(value):
    """Parse an ISO-8601 string into a naive UTC datetime.

    Accepts a trailing ``Z`` and explicit offsets. Returns None for empty
    input and raises ValueError for anything unparseable.
    """
    if value is None or value == '':
        return None
    if isinstance(value, datetime):
        dt = value
    else:
        text = str(value).strip()
        if text.endswith('Z'):
            text = text[:-1] + '+00:00'
        dt = datetime.fromisoformat(text)

    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt


def format_schedule_date(dt):
    """Human readable date used in notification text, e.g. 'March 5, 2026 at 2:30 PM'."""
    hour = dt.hour % 12 or 12
    meridiem = 'AM' if dt.hour < 12 else 'PM'
    return f'{dt.strftime("%B")} {dt.day}, {dt.year} at {hour}:{dt.minute:02d} {meridiem}'
