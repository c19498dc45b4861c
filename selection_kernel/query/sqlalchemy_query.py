"""
Module: selection_kernel.query.sqlalchemy_query
Responsibility: QueryBuilder implementation over a SQLAlchemy 2.0 ``Select``.
Architecture position: Kernel > Query.  The only module of the kernel that
    composes SQLAlchemy expressions for selections.

Invariants enforced:
    - Read-only: the session is only used to execute SELECT statements.
      Nothing is added, flushed, committed or deleted.
    - Column names are resolved against the mapped entity; anything else is
      rejected with UnknownColumnError, so request input can never reach
      the statement as raw SQL.
    - Pattern operators compare the column as text; non-string columns
      are cast to String first.
"""

import operator
from collections.abc import Sequence
from typing import Any

from sqlalchemy import Select, String, and_, cast, func, inspect, or_, select
from sqlalchemy.orm import Session

from selection_kernel.exceptions import UnknownColumnError
from selection_kernel.query.builder import (
    DIRECTIONS,
    LIKE_ESCAPE,
    Condition,
    Page,
    QueryBuilder,
)

_COMPARATORS = {
    "=": operator.eq,
    "!=": operator.ne,
    "<": operator.lt,
    "<=": operator.le,
    ">": operator.gt,
    ">=": operator.ge,
    "like": lambda column, value: column.like(value, escape=LIKE_ESCAPE),
    "ilike": lambda column, value: column.ilike(value, escape=LIKE_ESCAPE),
}

_PATTERN_OPERATORS = ("like", "ilike")


class SqlAlchemyQuery(QueryBuilder):
    """
    Immutable query handle over one mapped entity.

    Contract:
        The caller owns the session and its transaction scope.
    """

    def __init__(self, session: Session, entity: type, statement: Select | None = None):
        self.session = session
        self.entity = entity
        self.statement = statement if statement is not None else select(entity)

    def _derive(self, statement: Select) -> "SqlAlchemyQuery":
        return SqlAlchemyQuery(self.session, self.entity, statement)

    def _column(self, name: str):
        columns = inspect(self.entity).columns
        if name not in columns:
            raise UnknownColumnError(name, self.entity.__name__)
        return columns[name]

    def _predicate(self, condition: Condition):
        column = self._column(condition.column)
        if condition.operator in _PATTERN_OPERATORS and not isinstance(column.type, String):
            column = cast(column, String)
        return _COMPARATORS[condition.operator](column, condition.value)

    def where(self, column: str, operator: str, value: Any) -> "SqlAlchemyQuery":
        return self._derive(
            self.statement.where(self._predicate(Condition(column, operator, value)))
        )

    def where_any(self, *clauses: Sequence[Condition]) -> "SqlAlchemyQuery":
        if not clauses or any(not clause for clause in clauses):
            raise ValueError("where_any() needs at least one non-empty clause")
        disjunction = or_(
            *(and_(*(self._predicate(c) for c in clause)) for clause in clauses)
        )
        return self._derive(self.statement.where(disjunction))

    def order_by(self, column: str, direction: str = "asc") -> "SqlAlchemyQuery":
        if direction not in DIRECTIONS:
            raise ValueError(f"Unsupported direction {direction!r}")
        target = self._column(column)
        clause = target.desc() if direction == "desc" else target.asc()
        return self._derive(self.statement.order_by(clause))

    def in_random_order(self) -> "SqlAlchemyQuery":
        return self._derive(self.statement.order_by(func.random()))

    def count(self) -> int:
        counted = select(func.count()).select_from(
            self.statement.order_by(None).subquery()
        )
        return self.session.execute(counted).scalar_one()

    def paginate(self, per_page: int, page: int = 1) -> Page:
        total = self.count()
        offset = (page - 1) * per_page
        items = list(
            self.session.scalars(self.statement.limit(per_page).offset(offset)).all()
        )
        return Page(items=items, total=total, per_page=per_page, current_page=page)

    def get(self) -> list:
        return list(self.session.scalars(self.statement).all())

    def first(self) -> Any | None:
        return self.session.scalars(self.statement.limit(1)).first()

    def __repr__(self) -> str:
        return f"SqlAlchemyQuery({self.entity.__name__})"
