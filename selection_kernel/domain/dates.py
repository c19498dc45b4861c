"""
Date resolution for date-family selectors.

Responsibility:
    Turns request-supplied date values (ISO strings, formatted strings, Unix
    timestamps) into canonical naive ``datetime`` values and computes window
    bounds (day / week / month / year).

Architecture position:
    Kernel > Domain -- pure functions, zero I/O.

Invariants enforced:
    - Canonical dates are timezone-naive.  Aware inputs are converted to UTC
      first.
    - Window ends are always new values; the start value is never modified.
    - The ``timestamp`` format truncates input to its 10 leading digits, so
      millisecond timestamps sent by JavaScript clients resolve to the same
      second.  Values are never divided by 1000.

Failure modes:
    - DateParsingError for any value that cannot be interpreted, and for
      intervals whose end precedes their start (or equals it, unless allowed).
"""

import calendar
from datetime import UTC, date, datetime, time, timedelta

from selection_kernel.exceptions import DateParsingError

TIMESTAMP_FORMAT = "timestamp"

INTERVAL_UNITS = ("day", "week", "month", "year")

# Tried in order when no explicit format is given and ISO-8601 parsing fails.
_COMMON_FORMATS = (
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M",
    "%Y/%m/%d",
    "%Y/%m/%d %H:%M:%S",
    "%d/%m/%Y",
    "%d/%m/%Y %H:%M:%S",
    "%d-%m-%Y",
    "%d.%m.%Y",
    "%B %d, %Y",
    "%b %d, %Y",
    "%d %B %Y",
    "%d %b %Y",
)

_UNPARSEABLE = (
    "A date given can not be parsed and recognized. "
    "Try to use a valid timestamp or an YYYY-mm-dd format date"
)


def parse_date(value: object, fmt: str | None = None) -> datetime:
    """
    Parse a date-like value into a canonical naive datetime.

    Args:
        value: String, ``datetime``, ``date`` or integer timestamp.
        fmt: A ``strptime`` format, the ``"timestamp"`` token, or None to
            use the built-in heuristics.

    Raises:
        DateParsingError: If the value cannot be interpreted.
    """
    if fmt == TIMESTAMP_FORMAT:
        return _from_timestamp(value, truncate=True)

    if fmt:
        try:
            return _naive(datetime.strptime(str(value).strip(), fmt))
        except (TypeError, ValueError) as exc:
            raise DateParsingError(_UNPARSEABLE, value=value, fmt=fmt) from exc

    return _parse_loose(value)


def parse_interval(
    value1: object,
    value2: object,
    fmt1: str | None = None,
    fmt2: str | None = None,
    allow_equal: bool = False,
) -> tuple[datetime, datetime]:
    """
    Parse both ends of an interval and check their order.

    Raises:
        DateParsingError: If either value is unparseable, if the second date
            precedes the first, or if both are equal and ``allow_equal`` is
            False.
    """
    start = parse_date(value1, fmt1)
    end = parse_date(value2, fmt2)

    if start > end:
        raise DateParsingError(
            "An interval is incorrect, the second date must happen after the first one",
            value=(value1, value2),
        )
    if not allow_equal and start == end:
        raise DateParsingError(
            "An interval must contain two different dates",
            value=(value1, value2),
        )

    return start, end


def start_of_day(value: datetime) -> datetime:
    """Midnight of the same calendar day."""
    return datetime.combine(value.date(), time.min)


def add_interval(value: datetime, unit: str) -> datetime:
    """
    Return ``value`` moved forward by one ``unit``.

    Month and year steps clamp the day to the last day of the target month
    (January 31 + 1 month is the last day of February).
    """
    if unit == "day":
        return value + timedelta(days=1)
    if unit == "week":
        return value + timedelta(weeks=1)
    if unit == "month":
        return _add_months(value, 1)
    if unit == "year":
        return _add_months(value, 12)
    raise ValueError(f"Unknown interval unit: {unit}")


def _add_months(value: datetime, months: int) -> datetime:
    index = value.month - 1 + months
    year = value.year + index // 12
    month = index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def _naive(value: datetime) -> datetime:
    if value.tzinfo is not None:
        return value.astimezone(UTC).replace(tzinfo=None)
    return value


def _from_timestamp(value: object, truncate: bool) -> datetime:
    raw = str(value).strip()
    if not raw.isdigit():
        raise DateParsingError(_UNPARSEABLE, value=value, fmt=TIMESTAMP_FORMAT)
    if truncate:
        raw = raw[:10]
    try:
        return datetime.fromtimestamp(int(raw), tz=UTC).replace(tzinfo=None)
    except (OverflowError, OSError, ValueError) as exc:
        raise DateParsingError(_UNPARSEABLE, value=value, fmt=TIMESTAMP_FORMAT) from exc


def _parse_loose(value: object) -> datetime:
    if isinstance(value, datetime):
        return _naive(value)
    if isinstance(value, date):
        return datetime.combine(value, time.min)
    if not isinstance(value, str):
        raise DateParsingError(_UNPARSEABLE, value=value)

    text = value.strip()
    if not text:
        raise DateParsingError(_UNPARSEABLE, value=value)

    if text.startswith("@"):
        return _from_timestamp(text[1:], truncate=False)

    try:
        return _naive(datetime.fromisoformat(text))
    except ValueError:
        pass

    for candidate in _COMMON_FORMATS:
        try:
            return datetime.strptime(text, candidate)
        except ValueError:
            continue

    raise DateParsingError(_UNPARSEABLE, value=value)
