"""Model-side integration of selections."""

from selection_kernel.models.has_selection import HasSelection

__all__ = ["HasSelection"]
