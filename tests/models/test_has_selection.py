"""
Tests for the HasSelection model mixin (selection_kernel/models/has_selection.py).

Uses the ``Article`` and ``Draft`` models declared in conftest.
"""

import pytest

from selection_kernel.exceptions import EmptySelectionError, SelectionError, UnknownSelectorError
from selection_kernel.models.has_selection import HasSelection
from selection_kernel.query.builder import Page


class TestRegistryFromClassAttributes:

    def test_registry_built_at_class_definition(self, article_model):
        registry = article_model.selection_registry()
        assert registry.resource == "articles"
        assert registry.names == ("filter", "order", "day", "paginate")
        assert registry.paginate_limit == 5
        assert registry.resolve_option("filter.columns") == ("name",)

    def test_each_model_has_its_own_registry(self, article_model, draft_model):
        assert draft_model.selection_registry().names == ("paginate",)
        assert draft_model.selection_registry().paginate_limit is None

    def test_unknown_selector_fails_at_definition(self):
        with pytest.raises(UnknownSelectorError):

            class Broken(HasSelection):
                selection = {"search": "x"}


class TestSelectionSurface:

    def test_select(self, article_model, session, request_from):
        result = article_model.select(session, request_from(""))
        assert [a.id for a in result] == [1, 2, 3]

    def test_select_page(self, article_model, session, request_from):
        page = article_model.select_page(session, request_from("page=4"))
        assert isinstance(page, Page)
        assert [a.id for a in page] == [10, 11]
        assert not page.has_more_pages

    def test_get_selection(self, article_model, session, request_from):
        result = article_model.get_selection(
            session, request_from("filter[name]=a,end&paginate=5&order=latest")
        )
        assert [a.name for a in result] == ["Lambda", "kappa", "Iota", "theta", "Eta"]

    def test_paginate_limit(self, article_model, session, request_from):
        with pytest.raises(SelectionError, match="Only 5 items"):
            article_model.get_selection(session, request_from("paginate=10"))

    def test_day(self, article_model, session, request_from):
        result = article_model.get_selection(session, request_from("day=2024-03-01"))
        assert [a.id for a in result] == [11]

    def test_first_selection(self, article_model, session, request_from):
        assert article_model.first_selection(session, request_from("order=latest")).id == 11

    def test_find_selection(self, article_model, session, request_from):
        assert article_model.find_selection(session, request_from(""), 9).name == "Iota"
        assert article_model.find_selection(session, request_from(""), 99) is None

    def test_custom_base_query(self, article_model, session, request_from, articles):
        base = articles.where("id", ">", 8)
        result = article_model.get_selection(session, request_from(""), query=base)
        assert [a.id for a in result] == [9, 10, 11]

    def test_empty_model(self, draft_model, session, request_from):
        with pytest.raises(EmptySelectionError):
            draft_model.get_selection(session, request_from(""))
        assert draft_model.get_selection(session, request_from(""), allow_empty=True) == []
