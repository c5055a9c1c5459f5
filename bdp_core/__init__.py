"""
BDP Core - Big Detour Prevention checks for road-network editing

Decides whether a direct route exists between the two bracketing segments of
a detour, which tells the editor whether a BDP routing penalty on the detour
is justified:
- Street-name and road-type-group continuity predicates
- Live-map routing service queries with candidate filtering
- Local depth-first direct-route search as fallback
- Selection interpretation and eligibility validation

Version: 1.0.0
"""

from .config import BDPConfig, region_for_country
from .continuity import same_road_type_group, same_street_name
from .direct_route_search import DirectRouteSearch, find_direct_route
from .exceptions import (
    BDPError,
    BoundaryResolutionError,
    ConfigurationError,
    EligibilityError,
    RoadNetworkError,
    RoutingServiceError,
    SelectionError,
    SelectionValidationError,
    SnapshotParseError,
    UnknownNodeError,
    UnknownSegmentError,
)
from .live_map import LiveMapRouteClient
from .logging_config import LogTimer, get_logger, setup_logging
from .orchestrator import (
    DirectRouteOrchestrator,
    LiveMapStrategy,
    LocalSearchStrategy,
    RouteStrategy,
    SearchPlan,
    StrategyResult,
)
from .road_network import InMemoryRoadNetwork, RoadNetwork
from .road_types import is_bdp_eligible, road_type_group
from .selection import BoundarySelectionResolver, SelectionContext, build_selection
from .types import (
    BDPOutcome,
    BoundarySelection,
    CandidateRoute,
    Direction,
    Node,
    OutcomeKind,
    SearchFrame,
    Segment,
    SegmentSelection,
    Street,
)

__all__ = [
    # Types
    "Segment",
    "Node",
    "Street",
    "Direction",
    "CandidateRoute",
    "SearchFrame",
    "SegmentSelection",
    "BoundarySelection",
    "BDPOutcome",
    "OutcomeKind",
    # Road network
    "RoadNetwork",
    "InMemoryRoadNetwork",
    # Continuity
    "road_type_group",
    "is_bdp_eligible",
    "same_road_type_group",
    "same_street_name",
    # Route finding
    "LiveMapRouteClient",
    "DirectRouteSearch",
    "find_direct_route",
    # Selection
    "SelectionContext",
    "BoundarySelectionResolver",
    "build_selection",
    # Orchestration
    "DirectRouteOrchestrator",
    "SearchPlan",
    "StrategyResult",
    "RouteStrategy",
    "LiveMapStrategy",
    "LocalSearchStrategy",
    # Configuration & logging
    "BDPConfig",
    "region_for_country",
    "setup_logging",
    "get_logger",
    "LogTimer",
    # Exceptions
    "BDPError",
    "SelectionError",
    "SelectionValidationError",
    "BoundaryResolutionError",
    "EligibilityError",
    "RoadNetworkError",
    "UnknownSegmentError",
    "UnknownNodeError",
    "SnapshotParseError",
    "RoutingServiceError",
    "ConfigurationError",
]

__version__ = "1.0.0"
