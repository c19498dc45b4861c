"""
Module: selection_kernel.query.builder
Responsibility: The abstract query-transformation interface the selection
    kernel composes.  Selectors only ever talk to a QueryBuilder; they never
    see the record store's native query language.
Architecture position: Kernel > Query.  Zero dependencies on selectors/,
    services/ or any concrete store.

Invariants enforced:
    - Builders are persistent: every composing method returns a NEW builder
      and leaves the receiver untouched, so a handle can never be changed
      behind the back of a caller that still holds it.
    - Operators are limited to OPERATORS.
    - ``like`` and ``ilike`` patterns use LIKE_ESCAPE as their escape
      character; escape_like() makes a term match only itself.
"""

import math
from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

OPERATORS = ("=", "!=", "<", "<=", ">", ">=", "like", "ilike")

DIRECTIONS = ("asc", "desc")

LIKE_ESCAPE = "\\"


def escape_like(term: str) -> str:
    """Escape the LIKE wildcards (and the escape character) in ``term``."""
    return (
        term.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", f"{LIKE_ESCAPE}%")
        .replace("_", f"{LIKE_ESCAPE}_")
    )


@dataclass(frozen=True)
class Condition:
    """A single ``column <operator> value`` predicate."""

    column: str
    operator: str
    value: Any

    def __post_init__(self) -> None:
        if self.operator not in OPERATORS:
            raise ValueError(
                f"Unsupported operator {self.operator!r}. Allowed: {', '.join(OPERATORS)}"
            )


@dataclass(frozen=True)
class Page:
    """One page of a paginated result, with its metadata."""

    items: list
    total: int
    per_page: int
    current_page: int

    @property
    def last_page(self) -> int:
        return max(1, math.ceil(self.total / self.per_page))

    @property
    def has_more_pages(self) -> bool:
        return self.current_page < self.last_page

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self):
        return iter(self.items)


class QueryBuilder(ABC):
    """
    Abstract, immutable query handle.

    Contract:
        Composing methods (where, where_any, order_by, latest, oldest,
        in_random_order) return a new QueryBuilder.  Terminal methods
        (paginate, get, first) run the query.
    """

    @abstractmethod
    def where(self, column: str, operator: str, value: Any) -> "QueryBuilder":
        """AND a single predicate onto the query."""

    @abstractmethod
    def where_any(self, *clauses: Sequence[Condition]) -> "QueryBuilder":
        """
        AND a disjunction onto the query.

        Each clause is a group of conditions joined with AND; the groups are
        joined with OR:  ``(c1 AND c2) OR (c3) OR ...``.
        """

    @abstractmethod
    def order_by(self, column: str, direction: str = "asc") -> "QueryBuilder":
        """Append an ordering."""

    def latest(self, column: str = "created_at") -> "QueryBuilder":
        return self.order_by(column, "desc")

    def oldest(self, column: str = "created_at") -> "QueryBuilder":
        return self.order_by(column, "asc")

    @abstractmethod
    def in_random_order(self) -> "QueryBuilder":
        """Order rows randomly."""

    @abstractmethod
    def paginate(self, per_page: int, page: int = 1) -> Page:
        """Run the query and return one page of it."""

    @abstractmethod
    def get(self) -> list:
        """Run the query and return every row."""

    @abstractmethod
    def first(self) -> Any | None:
        """Run the query and return its first row, or None."""
