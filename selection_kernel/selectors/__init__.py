"""Selector transformations (leaf query steps) and their dispatch table."""

# Leaf modules register themselves on DISPATCH when imported.
from selection_kernel.selectors import dating, filtering, ordering, paging  # noqa: F401
from selection_kernel.selectors.base import (
    DISPATCH,
    SelectorContext,
    SelectorDefinition,
    SelectorDispatch,
)

DATE_FAMILY = tuple(DISPATCH.date_family())

__all__ = [
    "DATE_FAMILY",
    "DISPATCH",
    "SelectorContext",
    "SelectorDefinition",
    "SelectorDispatch",
]
