"""
Pytest fixtures for the selection kernel test suite.

Provides:
- An in-memory SQLite database shared by the whole session, seeded once
- An ``Article`` model exposing a selection through HasSelection
- A ``Draft`` model with no rows, for emptiness checks
- Resolver / finalizer factories over ad-hoc selector configurations
- Structured log capture

The kernel never writes, so seeded rows are committed once and every test
reads them through its own session.
"""

import json
import logging
from collections.abc import Callable, Generator
from datetime import datetime
from io import StringIO
from typing import Any

import pytest
from sqlalchemy.orm import Mapped, Session, mapped_column

from selection_kernel.db.base import TrackedBase
from selection_kernel.db.engine import (
    create_tables,
    drop_tables,
    init_engine_from_url,
    reset_engine,
    session_scope,
)
from selection_kernel.domain.registry import SelectorRegistry
from selection_kernel.domain.request_input import RequestInput
from selection_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from selection_kernel.models.has_selection import HasSelection
from selection_kernel.query.sqlalchemy_query import SqlAlchemyQuery
from selection_kernel.selectors import DISPATCH
from selection_kernel.services.result_finalizer import ResultFinalizer
from selection_kernel.services.selection_resolver import SelectionResolver


# =============================================================================
# Models
# =============================================================================


class Article(HasSelection, TrackedBase):
    __tablename__ = "articles"

    selection = {
        "filter": {"columns": ["name"]},
        "order": {"default": "oldest", "columns": {"date": "id"}},
        "day": None,
        "paginate": 3,
    }
    paginate_limit = 5

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(nullable=False)


class Draft(HasSelection, TrackedBase):
    __tablename__ = "drafts"

    selection = {"paginate": 5}

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(nullable=False)


ARTICLE_NAMES = (
    "Alpha",
    "beta",
    "Gamma ray",
    "delta",
    "Epsilon",
    "zeta",
    "Eta",
    "theta",
    "Iota",
    "kappa",
    "Lambda",
)


def article_created_at(article_id: int) -> datetime:
    """Creation time of the seeded article ``article_id``.

    Article 4 sits exactly on midnight to exercise window bounds; article 11
    lives in March, the others in January 2024 at 10:30.
    """
    if article_id == 4:
        return datetime(2024, 1, 4, 0, 0)
    if article_id == 11:
        return datetime(2024, 3, 1, 9, 0)
    return datetime(2024, 1, article_id, 10, 30)


ALL_IDS = list(range(1, len(ARTICLE_NAMES) + 1))


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture selection_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, resolver_for):
            resolver_for({...}).select(...)
            logs = captured_logs()
            assert any(r["message"] == "selection_resolved" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("selection_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Database
# =============================================================================


@pytest.fixture(scope="session")
def db_engine():
    """Single in-memory engine for the entire test session, seeded once."""
    eng = init_engine_from_url("sqlite:///:memory:")
    create_tables()
    with session_scope() as sess:
        for article_id, name in enumerate(ARTICLE_NAMES, start=1):
            created = article_created_at(article_id)
            sess.add(
                Article(id=article_id, name=name, created_at=created, updated_at=created)
            )
    yield eng
    drop_tables()
    reset_engine()


@pytest.fixture
def session(db_engine) -> Generator[Session, None, None]:
    """Per-test session.  Tests only read."""
    sess = Session(bind=db_engine, expire_on_commit=False)
    yield sess
    sess.close()


@pytest.fixture
def articles(session) -> SqlAlchemyQuery:
    """Unrestricted query over the seeded articles."""
    return SqlAlchemyQuery(session, Article)


@pytest.fixture
def article_model() -> type[Article]:
    return Article


@pytest.fixture
def draft_model() -> type[Draft]:
    return Draft


# =============================================================================
# Resolution helpers
# =============================================================================


@pytest.fixture
def registry_for() -> Callable[..., SelectorRegistry]:
    """Build a registry for the articles resource from a plain mapping."""

    def _build(selection: dict[str, Any], **settings: Any) -> SelectorRegistry:
        return SelectorRegistry.from_mapping(
            selection, known_selectors=DISPATCH, resource="articles", **settings
        )

    return _build


@pytest.fixture
def resolver_for(registry_for) -> Callable[..., SelectionResolver]:
    def _build(selection: dict[str, Any], **settings: Any) -> SelectionResolver:
        return SelectionResolver(registry_for(selection, **settings))

    return _build


@pytest.fixture
def finalizer_for(resolver_for) -> Callable[..., ResultFinalizer]:
    def _build(selection: dict[str, Any], **settings: Any) -> ResultFinalizer:
        return ResultFinalizer(resolver_for(selection, **settings))

    return _build


@pytest.fixture
def request_from() -> Callable[[str], RequestInput]:
    """Parse a raw query string into a RequestInput."""
    return RequestInput.from_query_string


def ids(records) -> list[int]:
    """Primary keys of a result, in result order."""
    return [record.id for record in records]


@pytest.fixture
def ids_of() -> Callable[[Any], list[int]]:
    return ids
