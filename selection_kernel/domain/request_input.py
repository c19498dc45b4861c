"""
RequestInput -- read-only snapshot of the parameters of one request.

The resolver never reads ambient request state: the HTTP layer builds a
RequestInput and passes it in.  Bracket syntax is folded into nested
mappings (``filter[name]=foo`` -> ``{"filter": {"name": "foo"}}``), empty
brackets into lists (``dates[]=a&dates[]=b``), and repeated plain keys into
lists.
"""

import re
from collections.abc import Iterable, Mapping
from types import MappingProxyType
from typing import Any
from urllib.parse import parse_qsl

_BRACKETS = re.compile(r"\[([^\[\]]*)\]")


def is_blank(value: Any) -> bool:
    """True for None, whitespace-only strings and empty containers."""
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    if isinstance(value, (list, tuple, Mapping)):
        return len(value) == 0
    return False


class RequestInput:
    """Parameter source for one request."""

    def __init__(self, data: Mapping[str, Any] | None = None):
        self._data = MappingProxyType(dict(data or {}))

    @classmethod
    def from_query_string(cls, query_string: str) -> "RequestInput":
        """Parse a raw query string, e.g. ``paginate=5&filter[name]=foo``."""
        return cls.from_pairs(parse_qsl(query_string, keep_blank_values=True))

    @classmethod
    def from_pairs(cls, pairs: Iterable[tuple[str, Any]]) -> "RequestInput":
        """Build from ``(key, value)`` pairs as produced by multi-dicts."""
        data: dict[str, Any] = {}
        for key, value in pairs:
            _assign(data, key, value)
        return cls(data)

    def input(self, name: str, default: Any = None) -> Any:
        """Value supplied for ``name``, or ``default`` when absent."""
        return self._data.get(name, default)

    def filled(self, name: str) -> bool:
        """True iff ``name`` was explicitly supplied with a non-blank value."""
        return name in self._data and not is_blank(self._data[name])

    def __contains__(self, name: object) -> bool:
        return name in self._data

    def to_dict(self) -> dict[str, Any]:
        return dict(self._data)

    def __repr__(self) -> str:
        return f"RequestInput({dict(self._data)!r})"


def _assign(data: dict[str, Any], key: str, value: Any) -> None:
    head, _, tail = key.partition("[")
    if not tail:
        _set_or_append(data, key, value)
        return

    segments = _BRACKETS.findall("[" + tail)
    node = data
    path = [head, *segments]
    for index, segment in enumerate(path[:-1]):
        upcoming = path[index + 1]
        if upcoming == "":
            container = node.get(segment)
            if not isinstance(container, list):
                container = [] if container is None else [container]
                node[segment] = container
            # Lists only hold leaves: "a[][b]" collapses onto the list.
            container.append(value)
            return
        child = node.get(segment)
        if not isinstance(child, dict):
            child = {}
            node[segment] = child
        node = child

    _set_or_append(node, path[-1], value)


def _set_or_append(node: dict[str, Any], key: str, value: Any) -> None:
    if key not in node:
        node[key] = value
    elif isinstance(node[key], list):
        node[key].append(value)
    else:
        node[key] = [node[key], value]
