"""Ordering selector and its terminal form, ``get_order``."""

from selection_kernel.exceptions import SelectionError
from selection_kernel.query.builder import QueryBuilder
from selection_kernel.selectors.base import DISPATCH, SelectorContext

DEFAULT_DATE_COLUMN = "created_at"
DEFAULT_NAME_COLUMN = "name"

ORDERS = ("latest", "oldest", "random", "a-z", "z-a")


@DISPATCH.register("order")
def order(ctx: SelectorContext, query: QueryBuilder, value: str) -> QueryBuilder:
    """
    Order by date (``latest``, ``oldest``), by name (``a-z``, ``z-a``) or
    randomly.  Columns come from ``order.columns.date`` and
    ``order.columns.name``.
    """
    if value == "random":
        return query.in_random_order()

    if value in ("latest", "oldest"):
        column = ctx.option("columns.date", DEFAULT_DATE_COLUMN)
        return query.latest(column) if value == "latest" else query.oldest(column)

    if value in ("a-z", "z-a"):
        column = ctx.option("columns.name", DEFAULT_NAME_COLUMN)
        return query.order_by(column, "asc" if value == "a-z" else "desc")

    allowed = ", ".join(f"`{name}`" for name in ORDERS)
    raise SelectionError(f"The order {value} does not exist. Only {allowed} are allowed")


DISPATCH.register_terminal("get_order", "order")
