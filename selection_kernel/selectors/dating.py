"""
Date-family selectors: date, dates, interval, day, week, month, year.

Each restricts a begin column and an end column (``<selector>.columns.begin``
and ``<selector>.columns.end``, both defaulting to ``created_at``).  Windows
are half-open, ``[start, end)``, except ``interval`` which includes both of
its bounds.  ``get_day``, ``get_week``, ``get_month`` and ``get_year`` are the
terminal forms of their base selectors.  Date parsing errors never leave
this module as such: they are turned into SelectionError.
"""

from datetime import datetime

from selection_kernel.domain.dates import (
    TIMESTAMP_FORMAT,
    add_interval,
    parse_date,
    parse_interval,
    start_of_day,
)
from selection_kernel.exceptions import DateParsingError, SelectionError
from selection_kernel.query.builder import Condition, QueryBuilder
from selection_kernel.selectors.base import DISPATCH, SelectorContext

DEFAULT_DATE_COLUMN = "created_at"


def _columns(ctx: SelectorContext) -> tuple[str, str]:
    return (
        ctx.option("columns.begin", DEFAULT_DATE_COLUMN),
        ctx.option("columns.end", DEFAULT_DATE_COLUMN),
    )


def _parse(value: object, fmt: str | None) -> datetime:
    try:
        return parse_date(value, fmt or None)
    except DateParsingError as exc:
        raise SelectionError(str(exc)) from exc


def _window(ctx: SelectorContext, start: datetime, end: datetime) -> list[Condition]:
    begin_column, end_column = _columns(ctx)
    return [
        Condition(begin_column, ">=", start),
        Condition(end_column, "<", end),
    ]


def _restrict(query: QueryBuilder, conditions: list[Condition]) -> QueryBuilder:
    for condition in conditions:
        query = query.where(condition.column, condition.operator, condition.value)
    return query


def _day_window(ctx: SelectorContext, value: object, fmt: str | None) -> list[Condition]:
    start = start_of_day(_parse(value, fmt))
    return _window(ctx, start, add_interval(start, "day"))


def is_format_token(token: object) -> bool:
    """True for a trailing format argument of ``dates``."""
    return isinstance(token, str) and (token == TIMESTAMP_FORMAT or "%" in token)


@DISPATCH.register("date", date_family=True)
def on_date(
    ctx: SelectorContext, query: QueryBuilder, value: str, fmt: str | None = None
) -> QueryBuilder:
    """Records within the 24h starting at the given date's midnight."""
    return _restrict(query, _day_window(ctx, value, fmt))


@DISPATCH.register("dates", date_family=True)
def on_dates(ctx: SelectorContext, query: QueryBuilder, *values: str) -> QueryBuilder:
    """Records within ANY of the given dates' 24h windows."""
    values_list = list(values)
    fmt = values_list.pop() if values_list and is_format_token(values_list[-1]) else None
    if not values_list:
        raise SelectionError("At least one date is required")

    return query.where_any(*(_day_window(ctx, value, fmt) for value in values_list))


@DISPATCH.register("interval", date_family=True)
def between(
    ctx: SelectorContext,
    query: QueryBuilder,
    start: str,
    end: str,
    fmt: str | None = None,
) -> QueryBuilder:
    """Records within [start, end], both bounds included."""
    allow_equal = bool(ctx.option("allow_equal", False))
    try:
        lower, upper = parse_interval(start, end, fmt or None, fmt or None, allow_equal)
    except DateParsingError as exc:
        raise SelectionError(str(exc)) from exc

    begin_column, end_column = _columns(ctx)
    return query.where(begin_column, ">=", lower).where(end_column, "<=", upper)


def _within(
    ctx: SelectorContext, query: QueryBuilder, value: str, fmt: str | None, unit: str
) -> QueryBuilder:
    start = _parse(value, fmt)
    return _restrict(query, _window(ctx, start, add_interval(start, unit)))


@DISPATCH.register("day", date_family=True)
def within_day(
    ctx: SelectorContext, query: QueryBuilder, value: str, fmt: str | None = None
) -> QueryBuilder:
    return _within(ctx, query, value, fmt, "day")


@DISPATCH.register("week", date_family=True)
def within_week(
    ctx: SelectorContext, query: QueryBuilder, value: str, fmt: str | None = None
) -> QueryBuilder:
    return _within(ctx, query, value, fmt, "week")


@DISPATCH.register("month", date_family=True)
def within_month(
    ctx: SelectorContext, query: QueryBuilder, value: str, fmt: str | None = None
) -> QueryBuilder:
    return _within(ctx, query, value, fmt, "month")


@DISPATCH.register("year", date_family=True)
def within_year(
    ctx: SelectorContext, query: QueryBuilder, value: str, fmt: str | None = None
) -> QueryBuilder:
    return _within(ctx, query, value, fmt, "year")


DISPATCH.register_terminal("get_day", "day")
DISPATCH.register_terminal("get_week", "week")
DISPATCH.register_terminal("get_month", "month")
DISPATCH.register_terminal("get_year", "year")
