"""
HasSelection -- model mixin exposing a selection on a mapped class.

A model opts in by mixing HasSelection in front of its declarative base and
declaring its selectors::

    class Article(HasSelection, TrackedBase):
        __tablename__ = "articles"

        selection = {
            "paginate": 10,
            "order": {"default": "latest", "columns": {"date": "published_at"}},
            "filter": {"columns": ["name"]},
            "day": None,
        }
        paginate_limit = 50

        id: Mapped[int] = mapped_column(primary_key=True)
        ...

The selector registry is built when the class is defined, so a typo in a
selector name fails at import time rather than on the first request.

Class attributes:
    selection               ordered selector configuration (None: no selectors)
    selection_can_be_empty  never fail on empty selections (default False)
    unique_date_selector    one date-family selector per request (default True)
    paginate_limit          maximum page size (default None: unlimited)
    selection_primary_key   column used by find_selection (default "id")
"""

from collections.abc import Mapping
from typing import Any, ClassVar

from sqlalchemy.orm import Session

from selection_kernel.domain.registry import SelectorRegistry
from selection_kernel.domain.request_input import RequestInput
from selection_kernel.query.builder import Page, QueryBuilder
from selection_kernel.query.sqlalchemy_query import SqlAlchemyQuery
from selection_kernel.selectors import DISPATCH
from selection_kernel.services.result_finalizer import ResultFinalizer
from selection_kernel.services.selection_resolver import SelectionResolver


class HasSelection:
    """Declarative selection surface for SQLAlchemy models."""

    selection: ClassVar[Mapping[str, Any] | None] = None
    selection_can_be_empty: ClassVar[bool] = False
    unique_date_selector: ClassVar[bool] = True
    paginate_limit: ClassVar[int | None] = None
    selection_primary_key: ClassVar[str] = "id"

    _selection_registry: ClassVar[SelectorRegistry | None] = None

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        cls._selection_registry = SelectorRegistry.from_mapping(
            cls.selection or {},
            known_selectors=DISPATCH,
            resource=getattr(cls, "__tablename__", None) or cls.__name__,
            selection_can_be_empty=cls.selection_can_be_empty,
            unique_date_selector=cls.unique_date_selector,
            paginate_limit=cls.paginate_limit,
            primary_key=cls.selection_primary_key,
        )

    @classmethod
    def selection_registry(cls) -> SelectorRegistry:
        return cls._selection_registry

    @classmethod
    def selection_query(cls, session: Session) -> SqlAlchemyQuery:
        """Unrestricted query over the model."""
        return SqlAlchemyQuery(session, cls)

    @classmethod
    def selection_finalizer(cls) -> ResultFinalizer:
        return ResultFinalizer(SelectionResolver(cls.selection_registry(), DISPATCH))

    @classmethod
    def select(
        cls,
        session: Session,
        request: RequestInput,
        query: QueryBuilder | None = None,
    ) -> QueryBuilder | list:
        """Apply the selection; see SelectionResolver.select()."""
        base = query if query is not None else cls.selection_query(session)
        return cls.selection_finalizer().resolver.select(base, request)

    @classmethod
    def select_page(
        cls,
        session: Session,
        request: RequestInput,
        query: QueryBuilder | None = None,
    ) -> Page | None:
        base = query if query is not None else cls.selection_query(session)
        return cls.selection_finalizer().resolver.select_page(base, request)

    @classmethod
    def get_selection(
        cls,
        session: Session,
        request: RequestInput,
        allow_empty: bool = False,
        query: QueryBuilder | None = None,
    ) -> list:
        base = query if query is not None else cls.selection_query(session)
        return cls.selection_finalizer().get_selection(base, request, allow_empty)

    @classmethod
    def first_selection(
        cls,
        session: Session,
        request: RequestInput,
        allow_empty: bool = True,
        query: QueryBuilder | None = None,
    ) -> Any | None:
        base = query if query is not None else cls.selection_query(session)
        return cls.selection_finalizer().first_selection(base, request, allow_empty)

    @classmethod
    def find_selection(
        cls,
        session: Session,
        request: RequestInput,
        id: Any,
        allow_empty: bool = True,
        query: QueryBuilder | None = None,
    ) -> Any | None:
        base = query if query is not None else cls.selection_query(session)
        return cls.selection_finalizer().find_selection(base, request, id, allow_empty)
