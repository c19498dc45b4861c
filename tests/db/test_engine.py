"""Tests for the engine helpers (selection_kernel/db/engine.py)."""

import pytest
from sqlalchemy import func, select, text

from selection_kernel.db.engine import (
    get_engine,
    get_session,
    get_session_factory,
    session_scope,
)


class TestEngine:

    def test_engine_is_shared(self, db_engine):
        assert get_engine() is db_engine
        assert db_engine.dialect.name == "sqlite"

    def test_sessions_see_seeded_rows(self, db_engine):
        sess = get_session()
        try:
            assert sess.execute(text("SELECT count(*) FROM articles")).scalar_one() == 11
        finally:
            sess.close()

    def test_session_factory_binds_to_engine(self, db_engine):
        sess = get_session_factory()()
        try:
            assert sess.get_bind() is db_engine
        finally:
            sess.close()

    def test_like_is_case_sensitive_on_every_connection(self, db_engine):
        with db_engine.connect() as conn:
            assert conn.execute(text("SELECT 'Eta' LIKE 'eta'")).scalar_one() == 0
            assert conn.execute(text("SELECT 'eta' LIKE 'eta'")).scalar_one() == 1


class TestSessionScope:

    def test_rollback_on_error(self, db_engine, draft_model):
        with pytest.raises(RuntimeError):
            with session_scope() as sess:
                sess.add(draft_model(id=1, name="never saved"))
                sess.flush()
                raise RuntimeError("abort")

        with session_scope() as sess:
            count = sess.execute(select(func.count()).select_from(draft_model)).scalar_one()
        assert count == 0
