"""Routing — an ordered route table with first-match-wins lookup.

Routes are registered during setup and frozen into a read-only table
when the app starts serving.
"""

from waypoint.routing.pattern import CompiledPattern, compile_pattern
from waypoint.routing.prefix import MountPrefixes
from waypoint.routing.route import METHODS, PathSegment, Route, RouteMatch, RouteOptions
from waypoint.routing.table import RouteTable

__all__ = [
    "METHODS",
    "CompiledPattern",
    "MountPrefixes",
    "PathSegment",
    "Route",
    "RouteMatch",
    "RouteOptions",
    "RouteTable",
    "compile_pattern",
]
