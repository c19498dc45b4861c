"""Pagination selectors. Both forms are terminal: they return a Page."""

from typing import Any

from selection_kernel.domain.request_input import is_blank
from selection_kernel.exceptions import SelectionError
from selection_kernel.query.builder import Page, QueryBuilder
from selection_kernel.selectors.base import DISPATCH, SelectorContext

DEFAULT_PAGE_NAME = "page"


def positive_int(value: Any, label: str) -> int:
    """Coerce request input to a positive int or fail with SelectionError."""
    if isinstance(value, bool):
        raise SelectionError(f"{label} must be a positive integer, got {value!r}")
    try:
        number = int(str(value).strip())
    except (TypeError, ValueError):
        raise SelectionError(f"{label} must be a positive integer, got {value!r}") from None
    if number < 1:
        raise SelectionError(f"{label} must be a positive integer, got {value!r}")
    return number


@DISPATCH.register("paginate")
def paginate(ctx: SelectorContext, query: QueryBuilder, size: Any) -> Page:
    """
    Paginate by ``size`` items, reading the page number from the request.

    Fails when the resource declares a paginate_limit smaller than ``size``.
    """
    per_page = positive_int(size, "Page size")

    limit = ctx.registry.paginate_limit
    if limit is not None and per_page > limit:
        raise SelectionError(f"Only {limit} items can be displayed at the same time")

    page_name = ctx.option("page_name", DEFAULT_PAGE_NAME)
    raw_page = ctx.request.input(page_name)
    page = 1 if is_blank(raw_page) else positive_int(raw_page, "Page")

    return query.paginate(per_page, page)


DISPATCH.register_terminal("get_paginate", "paginate")
