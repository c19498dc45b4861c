"""
SelectorRegistry -- the static, per-resource selector configuration.

Responsibility:
    Holds the ordered map of selector name -> default value / nested options
    declared by a resource, together with the resource-level selection
    settings, and answers dotted option lookups such as
    ``order.columns.date``.

Architecture position:
    Kernel > Domain.  Pure data, zero I/O.  Knows nothing about query
    builders or transformations; the set of valid selector names is passed
    in by whoever builds the registry.

Invariants enforced:
    - Declaration order is preserved: it is the dispatch order.
    - The registry is frozen and its nested configuration is deep-frozen,
      so it can be shared by concurrent requests.
    - Every declared selector name is known at construction time.

Failure modes:
    - ConfigurationError for malformed settings.
    - UnknownSelectorError for selector names with no transformation.
"""

from collections.abc import Collection, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

from selection_kernel.exceptions import ConfigurationError, UnknownSelectorError

DEFAULT_KEY = "default"


@dataclass(frozen=True)
class OptionValue:
    """A configured option.  ``value`` may legitimately be None."""

    value: Any


@dataclass(frozen=True)
class SelectorRegistry:
    """
    Selector configuration of one resource type.

    Contract:
        ``selection`` holds ``(name, entry)`` pairs in declaration order.  An
        entry is either a scalar default or a mapping with an optional
        ``default`` key plus arbitrary nested options.

    Guarantees:
        - lookup() never raises for missing paths.
        - resolve_option() returns the fallback at the first missing segment.
    """

    resource: str
    selection: tuple[tuple[str, Any], ...]
    selection_can_be_empty: bool = False
    unique_date_selector: bool = True
    paginate_limit: int | None = None
    primary_key: str = "id"

    @classmethod
    def from_mapping(
        cls,
        selection: Mapping[str, Any],
        *,
        known_selectors: Collection[str],
        resource: str = "resource",
        selection_can_be_empty: bool = False,
        unique_date_selector: bool = True,
        paginate_limit: int | None = None,
        primary_key: str = "id",
    ) -> "SelectorRegistry":
        """
        Build a registry from a plain (ordered) mapping.

        Raises:
            ConfigurationError: If settings are malformed.
            UnknownSelectorError: If a selector name is not in known_selectors.
        """
        if not isinstance(selection, Mapping):
            raise ConfigurationError(
                f"Selection of {resource} must be a mapping, got {type(selection).__name__}"
            )

        for name in selection:
            if not isinstance(name, str):
                raise ConfigurationError(
                    f"Selector names of {resource} must be strings, got {name!r}"
                )
            if name not in known_selectors:
                raise UnknownSelectorError(name, sorted(known_selectors))

        if paginate_limit is not None and (
            isinstance(paginate_limit, bool)
            or not isinstance(paginate_limit, int)
            or paginate_limit < 1
        ):
            raise ConfigurationError(
                f"paginate_limit of {resource} must be a positive integer, got {paginate_limit!r}"
            )

        return cls(
            resource=resource,
            selection=tuple((name, _freeze(entry)) for name, entry in selection.items()),
            selection_can_be_empty=bool(selection_can_be_empty),
            unique_date_selector=bool(unique_date_selector),
            paginate_limit=paginate_limit,
            primary_key=primary_key,
        )

    @property
    def names(self) -> tuple[str, ...]:
        """Declared selector names, in dispatch order."""
        return tuple(name for name, _ in self.selection)

    def declares(self, name: str) -> bool:
        return any(declared == name for declared, _ in self.selection)

    def entry(self, name: str) -> OptionValue | None:
        for declared, entry in self.selection:
            if declared == name:
                return OptionValue(entry)
        return None

    def default_for(self, name: str) -> Any:
        """Configured default of a selector, or None when it has none."""
        found = self.entry(name)
        if found is None:
            return None
        if isinstance(found.value, Mapping):
            return found.value.get(DEFAULT_KEY)
        return found.value

    def lookup(self, path: str) -> OptionValue | None:
        """
        Walk a dotted path through the configuration.

        The first segment names a selector, the remaining segments descend
        into its nested options.
        """
        name, _, rest = path.partition(".")
        found = self.entry(name)
        if found is None or not rest:
            return found
        return _descend(found.value, rest.split("."))

    def resolve_option(self, path: str, fallback: Any = None) -> Any:
        found = self.lookup(path)
        return fallback if found is None else found.value


def _descend(node: Any, segments: list[str]) -> OptionValue | None:
    if not segments:
        return OptionValue(node)
    if not isinstance(node, Mapping) or segments[0] not in node:
        return None
    return _descend(node[segments[0]], segments[1:])


def _freeze(value: Any) -> Any:
    if isinstance(value, Mapping):
        return MappingProxyType({key: _freeze(item) for key, item in value.items()})
    if isinstance(value, list):
        return tuple(_freeze(item) for item in value)
    return value
