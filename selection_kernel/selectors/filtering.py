"""
Filter selector: pattern matching on one column.

``filter[column]=value,flag,flag`` builds a LIKE predicate.  By default the
value is wildcarded on both sides and matched case-sensitively.  Characters of
the value always match literally: ``%``, ``_`` and the backslash are escaped, so
``begin`` together with ``end`` is an exact match.

Flags:
    begin        no leading wildcard (value must start the column)
    end          no trailing wildcard (value must end the column)
    insensitive  case-insensitive match
    word         split value on spaces, OR the parts
    caracter     split value into characters, OR the parts
"""

from selection_kernel.exceptions import SelectionError
from selection_kernel.query.builder import Condition, QueryBuilder, escape_like
from selection_kernel.selectors.base import DISPATCH, SelectorContext

FILTER_FLAGS = ("begin", "end", "insensitive", "word", "caracter")


@DISPATCH.register("filter")
def filter_column(
    ctx: SelectorContext,
    query: QueryBuilder,
    column: str,
    value: str,
    *flags: str,
) -> QueryBuilder:
    allowed = ctx.option("columns")
    if allowed is not None and column not in allowed:
        raise SelectionError(
            f"The column {column} can not be filtered. "
            f"Only {', '.join(f'`{name}`' for name in allowed)} are allowed"
        )

    options = {flag.strip() for flag in flags}
    unknown = sorted(options.difference(FILTER_FLAGS))
    if unknown:
        raise SelectionError(
            f"Unknown filter options: {', '.join(unknown)}. "
            f"Only {', '.join(f'`{name}`' for name in FILTER_FLAGS)} are allowed"
        )

    operator = "ilike" if "insensitive" in options else "like"
    prefix = "" if "begin" in options else "%"
    suffix = "" if "end" in options else "%"

    text = str(value)
    if "word" in options:
        terms = [term for term in text.split(" ") if term]
    elif "caracter" in options:
        terms = [char for char in text if not char.isspace()]
    else:
        terms = [text] if text else []

    if not terms:
        raise SelectionError(f"A value is required to filter the column {column}")

    terms = [escape_like(term) for term in terms]
    if len(terms) == 1:
        return query.where(column, operator, f"{prefix}{terms[0]}{suffix}")

    return query.where_any(
        *([Condition(column, operator, f"{prefix}{term}{suffix}")] for term in terms)
    )
