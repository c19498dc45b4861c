"""Step outcomes of the selection fold."""

from dataclasses import dataclass
from typing import Any, Union

from selection_kernel.query.builder import QueryBuilder


@dataclass(frozen=True)
class ContinueWith:
    """The step produced a query that later selectors keep composing."""

    query: QueryBuilder


@dataclass(frozen=True)
class Terminal:
    """The step materialized a result; remaining selectors are skipped."""

    result: Any


StepOutcome = Union[ContinueWith, Terminal]


def as_outcome(result: Any) -> StepOutcome:
    """Classify the return value of a selector transformation."""
    if isinstance(result, QueryBuilder):
        return ContinueWith(result)
    return Terminal(result)
