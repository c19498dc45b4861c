"""
ResultFinalizer - materializes a selection and enforces the emptiness policy.

Three call shapes, all resolving the selection first:

    get_selection(query, request, allow_empty=False)       -> list
    first_selection(query, request, allow_empty=True)      -> record | None
    find_selection(query, request, id, allow_empty=True)   -> record | None

get_selection is strict by default while the single-record shapes are
permissive by default.  A resource with ``selection_can_be_empty`` never
fails on emptiness.
"""

from __future__ import annotations

from typing import Any

from selection_kernel.domain.request_input import RequestInput
from selection_kernel.exceptions import (
    EmptySelectionError,
    SelectionError,
    UnknownColumnError,
)
from selection_kernel.logging_config import LogContext, get_logger
from selection_kernel.query.builder import QueryBuilder
from selection_kernel.services.selection_resolver import SelectionResolver

logger = get_logger("services.result_finalizer")

EMPTY_SELECTION_MESSAGE = "The selection is maybe too constraining or the page is empty"


class ResultFinalizer:
    """Terminal fetch semantics on top of a SelectionResolver."""

    def __init__(self, resolver: SelectionResolver):
        self.resolver = resolver

    @property
    def registry(self):
        return self.resolver.registry

    def get_selection(
        self,
        query: QueryBuilder,
        request: RequestInput,
        allow_empty: bool = False,
    ) -> list:
        """
        Every record of the selection.

        Raises:
            EmptySelectionError: (status 416) if nothing matched and neither
                ``allow_empty`` nor the resource allows an empty selection.
        """
        result = self.resolver.select(query, request)
        items = result.get() if isinstance(result, QueryBuilder) else list(result or [])
        self._enforce(not items, allow_empty)
        return items

    def first_selection(
        self,
        query: QueryBuilder,
        request: RequestInput,
        allow_empty: bool = True,
    ) -> Any | None:
        """First record of the selection, or None."""
        result = self.resolver.select(query, request)
        if isinstance(result, QueryBuilder):
            item = result.first()
        else:
            item = next(iter(result or []), None)
        self._enforce(item is None, allow_empty)
        return item

    def find_selection(
        self,
        query: QueryBuilder,
        request: RequestInput,
        id: Any,
        allow_empty: bool = True,
    ) -> Any | None:
        """First record of the selection whose primary key equals ``id``."""
        primary_key = self.registry.primary_key
        try:
            constrained = query.where(primary_key, "=", id)
        except UnknownColumnError as exc:
            logger.error("primary_key_unknown", exc_info=True)
            raise SelectionError("The selection could not be applied") from exc
        return self.first_selection(constrained, request, allow_empty)

    def _enforce(self, empty: bool, allow_empty: bool) -> None:
        if not empty or allow_empty or self.registry.selection_can_be_empty:
            return
        with LogContext.bind(resource=self.registry.resource):
            logger.info("selection_empty")
        raise EmptySelectionError(EMPTY_SELECTION_MESSAGE)
