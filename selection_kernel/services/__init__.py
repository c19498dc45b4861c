"""Services for the selection kernel."""

from selection_kernel.services.result_finalizer import ResultFinalizer
from selection_kernel.services.selection_resolver import SelectionResolver

__all__ = [
    "ResultFinalizer",
    "SelectionResolver",
]
