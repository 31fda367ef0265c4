"""Repository to chat room routing."""

from __future__ import annotations

from .filters import CompiledPatternFilter, CompiledRouteFilters, compile_route_filters
from .loader import load_routing, parse_routing_json
from .models import PatternFilter, RepositoryRoute, RouteFilters, RoutingDocument
from .table import CompiledRoute, RoutingTable
from .validation import RoutingValidationError, to_room_id, validate_routing

__all__ = [
    "CompiledPatternFilter",
    "CompiledRoute",
    "CompiledRouteFilters",
    "PatternFilter",
    "RepositoryRoute",
    "RouteFilters",
    "RoutingDocument",
    "RoutingTable",
    "RoutingValidationError",
    "compile_route_filters",
    "load_routing",
    "parse_routing_json",
    "to_room_id",
    "validate_routing",
]
