"""
Dotted-path resolution for nested stored values.

A path such as ``settings.theme.colors[0]`` addresses a field nested under
one top-level key of a storage area. Writing through a path always builds a
fresh nested mapping, so the store's shallow top-level merge replaces the
whole value under the root key: sibling fields below the root are not kept.
"""

from __future__ import annotations

import re
from typing import Any

# Matches one of: a bare segment, a [digits] index, or a quoted ["key"] / ['key'].
_SEGMENT_RE = re.compile(
    r"""
    [^.[\]]+                      # bare name
    | \[ (?P<index>[^"'\]]*) \]   # [0] or [name]
    | \[ (?P<quote>["']) (?P<quoted>(?:\\.|(?!(?P=quote))[^\\])*?) (?P=quote) \]
    """,
    re.VERBOSE,
)

_ESCAPE_RE = re.compile(r"\\(.)")


class _NotFound:
    """Sentinel for a path that does not resolve."""

    _instance: _NotFound | None = None

    def __new__(cls) -> _NotFound:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "NOT_FOUND"

    def __bool__(self) -> bool:
        return False


NOT_FOUND: Any = _NotFound()


def to_segments(path: str) -> list[str]:
    """Split a dotted path into its segments.

    Supports dot notation and bracket indexes, including quoted keys that
    may themselves contain dots.

    Examples:
        >>> to_segments("a.b.c")
        ['a', 'b', 'c']
        >>> to_segments('a[0]["x.y"]')
        ['a', '0', 'x.y']

    Raises:
        TypeError: If ``path`` is not a string.
    """
    if not isinstance(path, str):
        raise TypeError(f"path must be a string, got {type(path).__name__}")

    segments: list[str] = []
    for match in _SEGMENT_RE.finditer(path):
        if match.group("quoted") is not None:
            segment = _ESCAPE_RE.sub(r"\1", match.group("quoted"))
        elif match.group("index") is not None:
            segment = match.group("index")
        else:
            segment = match.group(0)
        if segment:
            segments.append(segment)
    return segments


def build_nested(segments: list[str], terminal: Any) -> dict[str, Any]:
    """Build a nested mapping holding ``terminal`` at ``segments``.

    >>> build_nested(["a", "b"], 1)
    {'a': {'b': 1}}
    """
    if not segments:
        raise ValueError("Cannot build a nested value from an empty path")

    root: dict[str, Any] = {}
    node = root
    for segment in segments[:-1]:
        child: dict[str, Any] = {}
        node[segment] = child
        node = child
    node[segments[-1]] = terminal
    return root


def extract(root: Any, segments: list[str]) -> Any:
    """Return the value at ``segments`` inside ``root``, or ``NOT_FOUND``.

    The whole path is walked before anything is returned; a missing
    intermediate node stops the walk with ``NOT_FOUND``.
    """
    node = root
    for segment in segments:
        if isinstance(node, dict):
            if segment not in node:
                return NOT_FOUND
            node = node[segment]
        elif isinstance(node, list) and segment.lstrip("-").isdigit():
            index = int(segment)
            if not -len(node) <= index < len(node):
                return NOT_FOUND
            node = node[index]
        else:
            return NOT_FOUND
    return node


def set_in(root: dict[str, Any], segments: list[str], value: Any) -> None:
    """Assign ``value`` at ``segments`` inside ``root`` in place.

    A list node accepts an in-range index, or the index one past its end to
    append. Any other segment replaces the node, like a missing or scalar
    node, with an empty mapping. Used for nested mutation of a binding's value.
    """
    if not segments:
        raise ValueError("Cannot assign through an empty path")
    _assign(root, segments, value)


def _assign(node: Any, segments: list[str], value: Any) -> Any:
    segment, rest = segments[0], segments[1:]

    if isinstance(node, list) and segment.lstrip("-").isdigit():
        index = int(segment)
        if index == len(node):
            node.append(_assign(None, rest, value) if rest else value)
            return node
        if -len(node) <= index < len(node):
            node[index] = _assign(node[index], rest, value) if rest else value
            return node

    if not isinstance(node, dict):
        node = {}
    node[segment] = _assign(node.get(segment), rest, value) if rest else value
    return node
