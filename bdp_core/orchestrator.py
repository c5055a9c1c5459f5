"""
BDP check orchestration.

Validates the bracketing segments (and the detour, when one is selected),
derives the length budget, then runs the direct-route strategies in order:
1. Live-map routing service
2. Local depth-first search, once per admissible start node

The first strategy that finds a route wins. Every path through check() ends
in a BDPOutcome; nothing here is fatal to the caller.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from .config import BDPConfig
from .continuity import same_road_type_group, same_street_name
from .direct_route_search import find_direct_route
from .exceptions import EligibilityError, RoadNetworkError, SelectionError
from .live_map import LiveMapRouteClient
from .logging_config import LogTimer, get_logger
from .road_network import RoadNetwork
from .road_types import is_bdp_eligible, is_minor_highway
from .selection import BoundarySelectionResolver, SelectionContext
from .types import BDPOutcome, BoundarySelection, CandidateRoute, Distance, NodeID, Segment, SegmentSelection

logger = get_logger(__name__)

NOT_ROAD_TYPE_GROUP_MESSAGE = (
    "At least one of the bracketing selected segments is not in the correct road type group for BDP."
)
MIXED_ROAD_TYPE_GROUP_MESSAGE = (
    "One bracketing segment is a minor highway while the other is not. BDP only applies when "
    "bracketing segments are in the same road type group."
)
NO_SHARED_NAME_MESSAGE = (
    "The bracketing segments do not share a street name. BDP will not be applied to any route."
)
DETOUR_SHARES_NAME_MESSAGE = (
    "BDP will not be applied to this detour route because the last detour segment and the second "
    "bracketing segment share a common street name."
)
DETOUR_SHARES_GROUP_MESSAGE = (
    "BDP will not be applied to this detour route because the last detour segment and the second "
    "bracketing segment are in the same road type group."
)
NO_ROUTE_TWO_SEGMENTS_MESSAGE = (
    "No direct routes found between the two selected segments. A BDP penalty will not be applied "
    "to any routes. Note: This could also be caused by the distance between the two selected "
    "segments being longer than the allowed distance for detours."
)
NO_ROUTE_DETOUR_MESSAGE = (
    "No direct routes found between the possible detour bracketing segments. A BDP penalty will not "
    "be applied to the selected route. Note: This could also be because any possible direct routes "
    "are very long, which would take longer to travel than taking the selected route (even with penalty)."
)


@dataclass
class SearchPlan:
    """Everything the strategies need once the selection has been validated."""

    start_segment: Segment
    end_segment: Segment
    max_length: Distance
    start_node_ids: List[NodeID]
    end_node_ids: List[NodeID]
    is_detour: bool


@dataclass
class StrategyResult:
    found: bool
    routes: List[CandidateRoute] = field(default_factory=list)


class RouteStrategy:
    """A way of finding a direct route. Subclasses implement find()."""

    name = "strategy"

    def find(self, plan: SearchPlan) -> StrategyResult:
        raise NotImplementedError


class LiveMapStrategy(RouteStrategy):
    name = "live_map"

    def __init__(self, client: LiveMapRouteClient):
        self.client = client

    def find(self, plan: SearchPlan) -> StrategyResult:
        routes = self.client.find_routes(plan.start_segment, plan.end_segment, plan.max_length)
        return StrategyResult(bool(routes), routes)


class LocalSearchStrategy(RouteStrategy):
    name = "local_search"

    def __init__(self, network: RoadNetwork):
        self.network = network

    def find(self, plan: SearchPlan) -> StrategyResult:
        for start_node_id in plan.start_node_ids:
            routes = find_direct_route(
                self.network,
                plan.max_length,
                plan.start_segment,
                start_node_id,
                plan.end_segment,
                plan.end_node_ids,
            )
            if routes:
                return StrategyResult(True, routes)
        return StrategyResult(False)


class DirectRouteOrchestrator:
    """
    Runs a complete BDP check for one selection.

    Example:
        >>> orchestrator = DirectRouteOrchestrator(network)
        >>> outcome = orchestrator.check(SegmentSelection([seg_a, seg_b]))
        >>> outcome.found
        True
    """

    def __init__(
        self,
        network: RoadNetwork,
        config: Optional[BDPConfig] = None,
        context: Optional[SelectionContext] = None,
        strategies: Optional[Sequence[RouteStrategy]] = None,
    ):
        self.network = network
        self.config = config or BDPConfig()
        self.resolver = BoundarySelectionResolver(network, context)

        if strategies is None:
            strategies = []
            if self.config.use_live_map:
                strategies.append(LiveMapStrategy(LiveMapRouteClient(network, self.config)))
            strategies.append(LocalSearchStrategy(network))
        self.strategies: List[RouteStrategy] = list(strategies)

    @property
    def context(self) -> SelectionContext:
        return self.resolver.context

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def max_length_for(self, start: Segment, end: Segment) -> Distance:
        if is_minor_highway(start.road_type) or is_minor_highway(end.road_type):
            return self.config.minor_highway_max_length
        return self.config.default_max_length

    def _check_bracketing_segments(self, start: Segment, end: Segment) -> None:
        if not (is_bdp_eligible(start.road_type) and is_bdp_eligible(end.road_type)):
            raise EligibilityError(NOT_ROAD_TYPE_GROUP_MESSAGE)
        if not same_road_type_group([start, end]):
            raise EligibilityError(MIXED_ROAD_TYPE_GROUP_MESSAGE)

    def _plan_detour(self, boundary: BoundarySelection, max_length: Distance) -> SearchPlan:
        start, end = boundary.start_segment, boundary.end_segment
        detour = boundary.detour_segments
        if boundary.route_far_end_node_id is None:
            raise EligibilityError("The end of the selected detour route could not be determined.")

        # The detour joins the end segment at the node away from the route's far end
        end_node_id = end.other_node_id(boundary.route_far_end_node_id)
        end_node = self.network.get_node(end_node_id)

        last_detour_segment = next((s for s in detour if s.segment_id in end_node.segment_ids), None)
        if last_detour_segment is None:
            raise EligibilityError(
                f"The detour route does not connect to the second bracketing segment at node {end_node_id}."
            )

        if same_street_name([last_detour_segment, end], self.network):
            raise EligibilityError(DETOUR_SHARES_NAME_MESSAGE)
        if same_road_type_group([last_detour_segment, end]):
            raise EligibilityError(DETOUR_SHARES_GROUP_MESSAGE)
        if len(detour) < self.config.min_detour_segments:
            raise EligibilityError(
                "BDP will not be applied to this detour route because it is less than "
                f"{self.config.min_detour_segments} segments long."
            )

        detour_length = sum(s.length for s in detour)
        if is_minor_highway(end.road_type):
            max_detour_length = self.config.minor_highway_max_detour_length
        else:
            max_detour_length = self.config.default_max_detour_length
        if detour_length > max_detour_length:
            raise EligibilityError(
                "BDP will not be applied to this detour route because it is longer than "
                f"{_format_distance(max_detour_length)}."
            )

        return SearchPlan(
            start_segment=start,
            end_segment=end,
            max_length=max_length,
            start_node_ids=start.departure_node_ids,
            end_node_ids=[end_node_id],
            is_detour=True,
        )

    def _plan_direct(self, boundary: BoundarySelection, max_length: Distance) -> SearchPlan:
        start, end = boundary.start_segment, boundary.end_segment
        if not same_street_name([start, end], self.network):
            raise EligibilityError(NO_SHARED_NAME_MESSAGE)

        return SearchPlan(
            start_segment=start,
            end_segment=end,
            max_length=max_length,
            start_node_ids=start.departure_node_ids,
            end_node_ids=end.arrival_node_ids,
            is_detour=False,
        )

    def plan(self, boundary: BoundarySelection) -> SearchPlan:
        """Validate a resolved selection and derive the search parameters.

        Raises:
            EligibilityError: If BDP cannot apply to this selection
        """
        start, end = boundary.start_segment, boundary.end_segment
        self._check_bracketing_segments(start, end)
        max_length = self.max_length_for(start, end)

        if boundary.is_detour_selection:
            return self._plan_detour(boundary, max_length)
        return self._plan_direct(boundary, max_length)

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def run_strategies(self, plan: SearchPlan) -> BDPOutcome:
        for strategy in self.strategies:
            with LogTimer(logger, f"Direct route strategy '{strategy.name}'"):
                result = strategy.find(plan)
            if result.found:
                logger.info(f"Direct route found by {strategy.name}: {result.routes[0]}")
                return BDPOutcome.direct_route_found(result.routes, strategy.name)

        logger.info(
            f"No direct route between segments {plan.start_segment.segment_id} "
            f"and {plan.end_segment.segment_id}"
        )
        if plan.is_detour:
            return BDPOutcome.no_direct_route(NO_ROUTE_DETOUR_MESSAGE)
        return BDPOutcome.no_direct_route(NO_ROUTE_TWO_SEGMENTS_MESSAGE)

    def evaluate(self, boundary: BoundarySelection) -> BDPOutcome:
        """Run the check for an already resolved pair of bracketing segments."""
        try:
            plan = self.plan(boundary)
        except EligibilityError as e:
            logger.info(f"BDP check not applicable: {e.reason}")
            return BDPOutcome.ineligible(e.reason)
        except RoadNetworkError as e:
            logger.error(f"Road network lookup failed while validating the selection: {e}")
            return BDPOutcome.ineligible(str(e))

        try:
            return self.run_strategies(plan)
        except RoadNetworkError as e:
            logger.error(f"Road network lookup failed during direct route search: {e}")
            return BDPOutcome.no_direct_route(f"The direct route search could not complete: {e}")

    def check(self, selection: SegmentSelection) -> BDPOutcome:
        """Run a complete BDP check on the operator's selection."""
        try:
            boundary = self.resolver.resolve(selection)
        except SelectionError as e:
            logger.warning(f"Invalid selection: {e}")
            return BDPOutcome.ineligible(str(e))
        except RoadNetworkError as e:
            logger.error(f"Road network lookup failed while resolving the selection: {e}")
            return BDPOutcome.ineligible(str(e))

        logger.info(
            f"BDP check: start {boundary.start_segment.segment_id}, end {boundary.end_segment.segment_id}, "
            f"{'detour' if boundary.is_detour_selection else 'bracketing pair'} of {len(selection)} segments"
        )
        return self.evaluate(boundary)


def _format_distance(meters: Distance) -> str:
    if meters >= 1000:
        return f"{meters / 1000:g}km"
    return f"{meters:g}m"
