"""Pure domain types of the selection kernel: dates, registry, request input."""

from selection_kernel.domain.registry import OptionValue, SelectorRegistry
from selection_kernel.domain.request_input import RequestInput

__all__ = [
    "OptionValue",
    "RequestInput",
    "SelectorRegistry",
]
