"""
Module: selection_kernel.selectors.base
Responsibility: The selector dispatch table.  Maps each selector name to the
    transformation that implements it, replacing any "call the method named
    after the parameter" convention with an explicit, closed lookup table.
Architecture position: Kernel > Selectors.  May import from domain/ and
    query/.  MUST NOT import from services/ or outer layers.

Invariants enforced:
    - A selector name is registered at most once per dispatch table.
    - Only registered names can ever be dispatched; registries are checked
      against the table when they are built.
    - A terminal form (``get_<name>``) takes the parameters of its base
      selector, reads its own options and always returns materialized
      records.

Contract of a transformation:
    ``apply(ctx, query, *params)`` returns either a QueryBuilder (keep
    composing) or a materialized result (terminal).  It signals bad input
    with SelectionError and nothing else.
"""

import functools
import inspect
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import Any

from selection_kernel.domain.registry import SelectorRegistry
from selection_kernel.domain.request_input import RequestInput
from selection_kernel.exceptions import UnknownSelectorError
from selection_kernel.query.builder import QueryBuilder


@dataclass(frozen=True)
class SelectorContext:
    """What a transformation may know about the current resolution."""

    registry: SelectorRegistry
    request: RequestInput
    selector: str

    def option(self, path: str, fallback: Any = None) -> Any:
        """Option of the running selector, e.g. ``columns.date`` for ``order``."""
        return self.registry.resolve_option(f"{self.selector}.{path}", fallback)


@dataclass(frozen=True)
class SelectorDefinition:
    """A registered transformation and its dispatch metadata."""

    name: str
    apply: Callable[..., Any]
    date_family: bool = False

    def accepts(self, params: list) -> bool:
        """True when ``params`` fits the transformation's signature."""
        try:
            inspect.signature(self.apply).bind(None, None, *params)
        except TypeError:
            return False
        return True


class SelectorDispatch:
    """Lookup table of selector transformations."""

    def __init__(self) -> None:
        self._definitions: dict[str, SelectorDefinition] = {}

    def register(
        self, name: str, *, date_family: bool = False
    ) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        """Decorator registering a transformation under ``name``."""

        def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
            if name in self._definitions:
                existing = self._definitions[name]
                raise ValueError(
                    f"Selector already registered for {name}: {existing.apply.__name__}"
                )
            self._definitions[name] = SelectorDefinition(
                name=name, apply=func, date_family=date_family
            )
            return func

        return decorator

    def register_terminal(self, name: str, base: str) -> None:
        """
        Register ``name`` as the terminal form of the ``base`` selector.

        The terminal form applies the base transformation under its own
        name (options are looked up under ``name``), then runs the query.
        It keeps the base's date-family flag.
        """
        definition = self.get(base)

        @functools.wraps(definition.apply)
        def materialize(ctx: SelectorContext, query: QueryBuilder, *params: Any) -> Any:
            result = definition.apply(ctx, query, *params)
            return result.get() if isinstance(result, QueryBuilder) else result

        self.register(name, date_family=definition.date_family)(materialize)

    def get(self, name: str) -> SelectorDefinition:
        if name not in self._definitions:
            raise UnknownSelectorError(name, self.names())
        return self._definitions[name]

    def names(self) -> list[str]:
        return sorted(self._definitions)

    def date_family(self) -> list[str]:
        return sorted(n for n, d in self._definitions.items() if d.date_family)

    def __contains__(self, name: object) -> bool:
        return name in self._definitions

    def __iter__(self) -> Iterator[str]:
        return iter(self._definitions)

    def __len__(self) -> int:
        return len(self._definitions)


DISPATCH = SelectorDispatch()
