"""
Selection configuration schema.

Defines the human-authored source artifact for resource selections.  YAML
documents are parsed into these types by the loader, checked by the
validator, and turned into kernel SelectorRegistry objects by
``selection_config.build_registries``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class ResourceSelectionDef:
    """Selection declared for one resource type."""

    resource: str
    selection: dict[str, Any] = field(default_factory=dict)
    selection_can_be_empty: bool = False
    unique_date_selector: bool = True
    paginate_limit: int | None = None
    primary_key: str = "id"


@dataclass(frozen=True)
class SelectionConfigurationSet:
    """A parsed selection document."""

    version: int
    resources: tuple[ResourceSelectionDef, ...]
    checksum: str = ""

    def get(self, resource: str) -> ResourceSelectionDef | None:
        for definition in self.resources:
            if definition.resource == resource:
                return definition
        return None
