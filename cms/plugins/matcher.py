"""
Path Matcher

Matches a declared route pattern against a request path. Patterns are
slash-delimited; a segment wrapped in brackets, e.g. "[id]", is dynamic and
binds its name to the request segment. All other segments are compared
literally (case-sensitive). Segment counts must be equal: there are no
wildcards or optional segments.

Candidates are tried in declared order and the first full match wins, so a
single-segment dynamic route declared before a static one shadows it (see
cms.plugins.validation.validate_route_ordering).
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Optional, Protocol, TypeVar

_DYNAMIC_SEGMENT = re.compile(r"^\[([^\[\]/]+)\]$")


class HasPath(Protocol):
    path: str


T = TypeVar("T", bound=HasPath)


@dataclass(frozen=True)
class RouteMatch:
    matched: bool
    params: dict[str, str] = field(default_factory=dict)


NO_MATCH = RouteMatch(matched=False)


def split_path(path: Optional[str]) -> list[str]:
    """Split a path on "/" and drop empty segments ("" and "/" give [])."""
    if not path:
        return []
    return [segment for segment in path.split("/") if segment]


def dynamic_segment_name(segment: str) -> Optional[str]:
    """Return the parameter name for "[name]" segments, None for literals."""
    m = _DYNAMIC_SEGMENT.match(segment)
    return m.group(1) if m else None


def is_dynamic_segment(segment: str) -> bool:
    return _DYNAMIC_SEGMENT.match(segment) is not None


def match_route(route_segments: Sequence[str], request_segments: Sequence[str]) -> RouteMatch:
    """Match one pattern against request segments, extracting named params."""
    if len(route_segments) != len(request_segments):
        return NO_MATCH

    params: dict[str, str] = {}
    for route_segment, request_segment in zip(route_segments, request_segments):
        name = dynamic_segment_name(route_segment)
        if name is not None:
            if not request_segment:
                return NO_MATCH
            params[name] = request_segment
        elif route_segment != request_segment:
            return NO_MATCH
    return RouteMatch(matched=True, params=params)


def find_route(entries: Iterable[T], request_segments: Sequence[str]) -> Optional[tuple[T, dict[str, str]]]:
    """Return the first entry whose pattern matches, with its params."""
    for entry in entries:
        result = match_route(split_path(entry.path), request_segments)
        if result.matched:
            return entry, result.params
    return None
