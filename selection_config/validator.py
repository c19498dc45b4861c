"""
Configuration Validator (``selection_config.validator``).

Responsibility
--------------
Validates a raw selection document before it is parsed, so that a broken
configuration is rejected at load time instead of on the first request.

Invariants enforced
-------------------
* ``version`` is an integer and ``resources`` is a mapping.
* Every selector name exists in the kernel dispatch table.
* Resource flags are booleans; ``paginate_limit`` is a positive integer.
* ``filter.columns`` (the filter allow-list) is a list of strings.

Warnings
--------
* A default page size larger than ``paginate_limit`` (every request relying
  on the default would fail).
* Date-family defaults on a resource with ``unique_date_selector``: they are
  never applied, only explicit request values are.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from selection_kernel.selectors import DATE_FAMILY, DISPATCH


@dataclass
class SelectionValidationResult:
    """
    Result of configuration validation.

    Contract
    --------
    * ``is_valid`` returns ``True`` only when ``errors`` is empty.
    * Warnings do not block loading but should be reviewed.
    """

    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return len(self.errors) == 0

    def add_error(self, msg: str) -> None:
        self.errors.append(msg)

    def add_warning(self, msg: str) -> None:
        self.warnings.append(msg)


def validate_selection_document(data: Any) -> SelectionValidationResult:
    """Validate a raw (YAML-loaded) selection document."""
    result = SelectionValidationResult()

    if not isinstance(data, Mapping):
        result.add_error("Selection config must be a dictionary")
        return result

    version = data.get("version")
    if version is None:
        result.add_error("Selection config must have 'version' field")
    elif isinstance(version, bool) or not isinstance(version, int):
        result.add_error(f"'version' must be an integer, got {version!r}")

    resources = data.get("resources")
    if not isinstance(resources, Mapping):
        result.add_error("Selection config must have a 'resources' mapping")
        return result

    for name, entry in resources.items():
        _validate_resource(str(name), entry, result)

    return result


def _validate_resource(name: str, entry: Any, result: SelectionValidationResult) -> None:
    if entry is None:
        entry = {}
    if not isinstance(entry, Mapping):
        result.add_error(f"Resource '{name}' must be a dictionary")
        return

    selection = entry.get("selection") or {}
    if not isinstance(selection, Mapping):
        result.add_error(f"Resource '{name}': 'selection' must be a dictionary")
        return

    for selector in selection:
        if selector not in DISPATCH:
            result.add_error(
                f"Resource '{name}': unknown selector '{selector}' "
                f"(available: {', '.join(DISPATCH.names())})"
            )

    for flag in ("selection_can_be_empty", "unique_date_selector"):
        if flag in entry and not isinstance(entry[flag], bool):
            result.add_error(f"Resource '{name}': '{flag}' must be a boolean")

    limit = entry.get("paginate_limit")
    if limit is not None and (isinstance(limit, bool) or not isinstance(limit, int) or limit < 1):
        result.add_error(f"Resource '{name}': 'paginate_limit' must be a positive integer")
        limit = None

    _validate_filter_columns(name, selection.get("filter"), result)
    _validate_paginate_default(name, selection.get("paginate"), limit, result)

    if entry.get("unique_date_selector", True):
        for selector in DATE_FAMILY:
            if _default_of(selection.get(selector)) is not None:
                result.add_warning(
                    f"Resource '{name}': default of '{selector}' is ignored "
                    "while unique_date_selector is enabled"
                )


def _validate_filter_columns(name: str, entry: Any, result: SelectionValidationResult) -> None:
    if not isinstance(entry, Mapping) or "columns" not in entry:
        return
    columns = entry["columns"]
    if not isinstance(columns, list) or not all(isinstance(c, str) for c in columns):
        result.add_error(f"Resource '{name}': 'filter.columns' must be a list of column names")


def _validate_paginate_default(
    name: str, entry: Any, limit: int | None, result: SelectionValidationResult
) -> None:
    default = _default_of(entry)
    if default is None:
        return
    if isinstance(default, bool) or not isinstance(default, int) or default < 1:
        result.add_error(f"Resource '{name}': default page size must be a positive integer")
        return
    if limit is not None and default > limit:
        result.add_warning(
            f"Resource '{name}': default page size {default} exceeds paginate_limit {limit}"
        )


def _default_of(entry: Any) -> Any:
    if isinstance(entry, Mapping):
        return entry.get("default")
    return entry
