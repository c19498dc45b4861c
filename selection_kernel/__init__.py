"""
Selection Kernel

A declarative query-selection layer for HTTP-facing resources:
- Per-resource selector configuration declared once
- Ordered, conflict-checked dispatch of request parameters to query transformations
- Pagination always applied last
- Non-empty result policy with a single caller-visible error type
"""

__version__ = "0.1.0"
