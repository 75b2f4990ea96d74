import re
from datetime import date, datetime

from portal.core.errors import InvalidArgument

_ISO_DATE_PREFIX = re.compile(r"^(\d{4}-\d{2}-\d{2})(?:$|[T ])")


def to_calendar_date(value: date | datetime | str) -> date:
    """Normalize a date-ish value to a calendar date.

    Strings keep only their YYYY-MM-DD prefix, so "2025-03-10T23:00:00Z" is the
    10th no matter which offset the client serialized with.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise InvalidArgument(f"Invalid date: {value!r}")
    match = _ISO_DATE_PREFIX.match(value.strip())
    if not match:
        raise InvalidArgument(f"Invalid date: {value!r} (expected YYYY-MM-DD)")
    try:
        return date.fromisoformat(match.group(1))
    except ValueError as e:
        raise InvalidArgument(f"Invalid date: {value!r}") from e


def format_fr(d: date) -> str:
    """dd/mm/yyyy, as shown to clients in notifications and e-mails."""
    return d.strftime("%d/%m/%Y")
