"""
SelectionResolver - the selector resolution engine.

Responsibility:
    Applies the selectors a resource declares to a base query, in
    declaration order, using the values of the current request (or the
    configured defaults), and defers pagination to the very end.

Architecture position:
    Kernel > Services.  Composes domain/ (registry, request input,
    outcomes) with selectors/ (dispatch table).  Never touches the record
    store directly; everything goes through the QueryBuilder it is given.

Algorithm:
    The resolution is a fold over the declared selectors.  Each step yields
    ContinueWith(query) or Terminal(result).  A Terminal short-circuits the
    fold, pagination included.  Errors stop the fold by raising.

        for each declared selector (paginate excluded):
            value = request value, else configured default
            blank value                        -> skipped
            date-family and unique dates:
                not filled by the request      -> skipped
                another date selector applied  -> SelectionError
            mapping value (filter[x]=...)      -> one invocation per key
            apply transformation(s)
        paginate (if declared and effective)   -> applied last

Invariants enforced:
    - A selector not declared by the resource is never applied, whatever
      the request contains.
    - At most one date-family selector per request unless the resource
      sets unique_date_selector to False.
    - Pagination runs after every filtering, ordering and date selector.
    - Only SelectionError leaves this module during a resolution.

Failure modes:
    - SelectionError("<selector>: <message>") when a transformation rejects
      its input; the status code is preserved.
    - SelectionError for wrong parameter counts and for unexpected faults;
      the latter are logged with their traceback, the caller only sees the
      selector name.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from selection_kernel.domain.outcome import (
    ContinueWith,
    StepOutcome,
    Terminal,
    as_outcome,
)
from selection_kernel.domain.registry import SelectorRegistry
from selection_kernel.domain.request_input import RequestInput, is_blank
from selection_kernel.exceptions import SelectionError
from selection_kernel.logging_config import LogContext, get_logger
from selection_kernel.query.builder import Page, QueryBuilder
from selection_kernel.selectors import DISPATCH, SelectorContext, SelectorDispatch
from selection_kernel.selectors.base import SelectorDefinition

logger = get_logger("services.selection_resolver")

PAGINATE = "paginate"
PARAMETER_DELIMITER = ","


class SelectionResolver:
    """
    Resolves the selection of one resource type.

    Contract:
        Stateless between calls: the registry and dispatch table are
        read-only, the request and query are passed in per call.
    """

    def __init__(
        self,
        registry: SelectorRegistry,
        dispatch: SelectorDispatch = DISPATCH,
    ):
        self.registry = registry
        self.dispatch = dispatch

    def select(self, query: QueryBuilder, request: RequestInput) -> QueryBuilder | list:
        """
        Apply the selection.

        Returns:
            The composed QueryBuilder when nothing materialized the result,
            otherwise the materialized items (page metadata is dropped).
        """
        outcome = self.resolve(query, request)
        if isinstance(outcome, ContinueWith):
            return outcome.query
        if isinstance(outcome.result, Page):
            return outcome.result.items
        return outcome.result

    def select_page(self, query: QueryBuilder, request: RequestInput) -> Page | None:
        """Like select(), but keeps the Page produced by pagination."""
        outcome = self.resolve(query, request)
        if isinstance(outcome, Terminal) and isinstance(outcome.result, Page):
            return outcome.result
        return None

    def resolve(self, query: QueryBuilder, request: RequestInput) -> StepOutcome:
        """Run the fold and return its final outcome."""
        with LogContext.bind(resource=self.registry.resource):
            outcome: StepOutcome = ContinueWith(query)
            applied: list[str] = []
            date_selector: str | None = None

            for name in self.registry.names:
                if name == PAGINATE:
                    continue

                value = self._effective_value(name, request)
                if is_blank(value):
                    logger.debug("selector_skipped", extra={"selector": name})
                    continue

                definition = self.dispatch.get(name)
                if definition.date_family and self.registry.unique_date_selector:
                    if not request.filled(name):
                        logger.debug("selector_skipped", extra={"selector": name})
                        continue
                    if date_selector is not None:
                        raise SelectionError(
                            f"Can't set the selector {name} after the selector {date_selector}"
                        )
                    date_selector = name

                for params in self._invocations(value):
                    outcome = self._apply(definition, outcome.query, params, request)
                    if isinstance(outcome, Terminal):
                        applied.append(name)
                        self._log_resolved(applied, terminal=True)
                        return outcome
                applied.append(name)

            if self.registry.declares(PAGINATE):
                value = self._effective_value(PAGINATE, request)
                if not is_blank(value):
                    definition = self.dispatch.get(PAGINATE)
                    outcome = self._apply(
                        definition, outcome.query, self._params(value), request
                    )
                    applied.append(PAGINATE)

            self._log_resolved(applied, terminal=isinstance(outcome, Terminal))
            return outcome

    def _effective_value(self, name: str, request: RequestInput) -> Any:
        value = request.input(name)
        if is_blank(value):
            return self.registry.default_for(name)
        return value

    def _invocations(self, value: Any) -> list[list[Any]]:
        """Parameter lists to dispatch; bracket-syntax mappings give one per key."""
        if isinstance(value, Mapping):
            return [[key, *self._params(item)] for key, item in value.items()]
        return [self._params(value)]

    @staticmethod
    def _params(value: Any) -> list[Any]:
        if isinstance(value, str):
            return value.split(PARAMETER_DELIMITER)
        if isinstance(value, (list, tuple)):
            return list(value)
        return [value]

    def _apply(
        self,
        definition: SelectorDefinition,
        query: QueryBuilder,
        params: list[Any],
        request: RequestInput,
    ) -> StepOutcome:
        name = definition.name
        if not definition.accepts(params):
            raise SelectionError(
                f"More parameters (separated by `{PARAMETER_DELIMITER}`) "
                f"are expected for the selector {name}"
            )

        ctx = SelectorContext(registry=self.registry, request=request, selector=name)
        with LogContext.bind(selector=name):
            try:
                result = definition.apply(ctx, query, *params)
            except SelectionError as exc:
                logger.info(
                    "selector_rejected",
                    extra={"reason": str(exc), "status_code": exc.status_code},
                )
                raise exc.prefixed(name) from exc
            except Exception as exc:
                logger.error("selector_failed", exc_info=True)
                raise SelectionError(f"The selector {name} could not be applied") from exc

            logger.debug("selector_applied", extra={"param_count": len(params)})

        return as_outcome(result)

    def _log_resolved(self, applied: list[str], terminal: bool) -> None:
        logger.info(
            "selection_resolved",
            extra={"applied_selectors": list(applied), "terminal": terminal},
        )
