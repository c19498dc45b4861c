"""
selection_config -- YAML-driven selection configuration.

Responsibility:
    Loads selection documents, validates them, and turns each declared
    resource into a kernel ``SelectorRegistry``.  Model classes using the
    ``HasSelection`` mixin do not need this package; it serves resources
    whose selection is authored outside the code.

Architecture position:
    Configuration -- sits above ``selection_kernel``.  The kernel MUST NEVER
    import from ``selection_config``.

Invariants enforced:
    - A document is validated before any registry is built.
    - Same YAML always produces the same checksum.

Failure modes:
    - ``FileNotFoundError`` -- missing file.
    - ``ValueError`` -- validation failures, all listed in the message.
    - ``ConfigurationError`` -- registry construction failures.

Audit relevance:
    Every successful load emits a ``selection_config_loaded`` log entry
    with the version, resource count and checksum.
"""

from __future__ import annotations

import logging
from pathlib import Path

from selection_config.loader import load_yaml_file, parse_document
from selection_config.schema import ResourceSelectionDef, SelectionConfigurationSet
from selection_config.validator import validate_selection_document
from selection_kernel.domain.registry import SelectorRegistry
from selection_kernel.selectors import DISPATCH

_logger = logging.getLogger("selection_kernel.config")


def load_selection_file(path: Path | str) -> dict[str, SelectorRegistry]:
    """
    Load a selection document and build one registry per resource.

    Returns:
        Mapping resource name -> SelectorRegistry, in document order.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If validation fails.
    """
    data = load_yaml_file(Path(path))

    validation = validate_selection_document(data)
    if not validation.is_valid:
        raise ValueError(
            "Selection configuration validation failed:\n"
            + "\n".join(f"  - {e}" for e in validation.errors)
        )
    for warning in validation.warnings:
        _logger.warning("selection_config_warning", extra={"detail": warning})

    config_set = parse_document(data)
    registries = build_registries(config_set)

    _logger.info(
        "selection_config_loaded",
        extra={
            "path": str(path),
            "config_version": config_set.version,
            "resource_count": len(registries),
            "checksum": config_set.checksum,
        },
    )
    return registries


def build_registries(config_set: SelectionConfigurationSet) -> dict[str, SelectorRegistry]:
    """Translate parsed definitions into kernel registries."""
    return {
        definition.resource: SelectorRegistry.from_mapping(
            definition.selection,
            known_selectors=DISPATCH,
            resource=definition.resource,
            selection_can_be_empty=definition.selection_can_be_empty,
            unique_date_selector=definition.unique_date_selector,
            paginate_limit=definition.paginate_limit,
            primary_key=definition.primary_key,
        )
        for definition in config_set.resources
    }


__all__ = [
    "ResourceSelectionDef",
    "SelectionConfigurationSet",
    "build_registries",
    "load_selection_file",
    "validate_selection_document",
]
