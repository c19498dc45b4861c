"""Query handles composed by selectors."""

from selection_kernel.query.builder import OPERATORS, Condition, Page, QueryBuilder
from selection_kernel.query.sqlalchemy_query import SqlAlchemyQuery

__all__ = [
    "OPERATORS",
    "Condition",
    "Page",
    "QueryBuilder",
    "SqlAlchemyQuery",
]
