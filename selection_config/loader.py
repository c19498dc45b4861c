"""
Configuration Loader (``selection_config.loader``).

Responsibility
--------------
Loads selection YAML documents and parses them into the typed
``selection_config.schema`` dataclasses.  Structural checks live in
``selection_config.validator``; the loader only converts.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing required keys  -> ``KeyError`` propagates.
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any

import yaml

from selection_config.schema import ResourceSelectionDef, SelectionConfigurationSet


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


def parse_resource(resource: str, data: dict[str, Any]) -> ResourceSelectionDef:
    """Parse one entry of the ``resources`` mapping."""
    return ResourceSelectionDef(
        resource=resource,
        selection=dict(data.get("selection") or {}),
        selection_can_be_empty=data.get("selection_can_be_empty", False),
        unique_date_selector=data.get("unique_date_selector", True),
        paginate_limit=data.get("paginate_limit"),
        primary_key=data.get("primary_key", "id"),
    )


def parse_document(data: dict[str, Any]) -> SelectionConfigurationSet:
    """
    Parse a whole selection document.

    Resource and selector order follow the document order.
    """
    resources = tuple(
        parse_resource(name, entry or {})
        for name, entry in (data.get("resources") or {}).items()
    )
    return SelectionConfigurationSet(
        version=data["version"],
        resources=resources,
        checksum=compute_checksum(data),
    )


def compute_checksum(data: dict[str, Any]) -> str:
    """Deterministic SHA-256 of a parsed document (selector order included)."""
    canonical = json.dumps(data, separators=(",", ":"), default=str)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()
