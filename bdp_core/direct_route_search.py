"""
Local direct-route search over the road graph.

Used when the live map returns nothing usable. Starting from a bracketing
segment, walks the graph depth-first along segments that carry the start
segment's street name, honouring turn restrictions and a length budget,
until it can turn onto the other bracketing segment.

This is a single-path DFS with memoised edge rejection, not an exhaustive
enumeration: it returns at most one route per invocation, and that route is
the first one found in incidence order, not the shortest.
"""

from typing import Iterable, List, Optional, Set

from .continuity import same_street_name
from .logging_config import get_logger
from .road_network import RoadNetwork
from .types import CandidateRoute, Distance, EdgePair, NodeID, SearchFrame, Segment

logger = get_logger(__name__)


class DirectRouteSearch:
    """
    One direct-route search invocation.

    State (owned exclusively by the instance):
        stack: DFS frames, bottom to top; the start segment is implicit below them
        rejected_edges: (from segment, to segment) transitions already explored
            or refused, shared by every outward branch
        cur_length: summed length of the frames beneath the top frame
    """

    def __init__(
        self,
        network: RoadNetwork,
        max_length: Distance,
        start_segment: Segment,
        start_node_id: NodeID,
        end_segment: Segment,
        end_node_ids: Iterable[NodeID],
    ):
        self.network = network
        self.max_length = max_length
        self.start_segment = start_segment
        self.start_node_id = start_node_id
        self.end_segment = end_segment
        self.end_node_ids: Set[NodeID] = set(end_node_ids)

        self.stack: List[SearchFrame] = []
        self.rejected_edges: Set[EdgePair] = set()
        self.cur_length: Distance = 0.0
        self.steps = 0

    # ------------------------------------------------------------------
    # Stack operations
    # ------------------------------------------------------------------

    def _push(self, segment: Segment, entry_node_id: NodeID) -> None:
        if self.stack:
            top = self.stack[-1]
            self.cur_length += top.segment.length
            self.rejected_edges.add((top.segment.segment_id, segment.segment_id))
        self.stack.append(SearchFrame(segment, entry_node_id))

    def _pop(self) -> None:
        self.stack.pop()
        if self.stack:
            # The exposed frame is the top again; its length is no longer beneath the top
            self.cur_length -= self.stack[-1].segment.length

    def _on_path(self, segment_id: int) -> bool:
        if segment_id in (self.start_segment.segment_id, self.end_segment.segment_id):
            return True
        return any(frame.segment.segment_id == segment_id for frame in self.stack)

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    def _continues_road(self, from_segment: Segment, candidate: Segment, node_id: NodeID) -> bool:
        return self.network.is_turn_allowed(from_segment, candidate, node_id) and same_street_name(
            [self.start_segment, candidate], self.network
        )

    def _next_segment(self, frame: SearchFrame) -> Optional[Segment]:
        """First extension of the top frame that is legal, on-road and not yet tried."""
        exit_node_id = frame.exit_node_id
        for segment_id in self.network.get_node(exit_node_id).segment_ids:
            if self._on_path(segment_id):
                continue
            if (frame.segment.segment_id, segment_id) in self.rejected_edges:
                continue
            candidate = self.network.get_segment(segment_id)
            if self._continues_road(frame.segment, candidate, exit_node_id):
                return candidate
        return None

    def _route(self) -> CandidateRoute:
        return (
            [self.start_segment.segment_id]
            + [frame.segment.segment_id for frame in self.stack]
            + [self.end_segment.segment_id]
        )

    def _explore(self, first_segment: Segment) -> Optional[CandidateRoute]:
        """Depth-first search from one outward branch of the start node."""
        self.stack = []
        self.cur_length = 0.0
        self._push(first_segment, self.start_node_id)

        while self.stack:
            self.steps += 1
            frame = self.stack[-1]
            exit_node_id = frame.exit_node_id

            if self.cur_length + frame.segment.length > self.max_length:
                logger.debug(
                    f"Pruning segment {frame.segment.segment_id}: "
                    f"{self.cur_length + frame.segment.length:.1f}m exceeds {self.max_length:.1f}m"
                )
                self._pop()
                continue

            if exit_node_id in self.end_node_ids and self.network.is_turn_allowed(
                frame.segment, self.end_segment, exit_node_id
            ):
                route = self._route()
                self._pop()
                return route

            next_segment = self._next_segment(frame)
            if next_segment is None:
                logger.debug(f"Backtracking from segment {frame.segment.segment_id}")
                self._pop()
            else:
                logger.debug(f"Extending {frame.segment.segment_id} -> {next_segment.segment_id} at node {exit_node_id}")
                self._push(next_segment, exit_node_id)

        return None

    def run(self) -> List[CandidateRoute]:
        """
        Search for a direct route.

        Returns:
            A list holding the first route found, or an empty list
        """
        start_node = self.network.get_node(self.start_node_id)

        for segment_id in start_node.segment_ids:
            # Neither bracketing segment can open a branch
            if self._on_path(segment_id):
                continue
            outward = self.network.get_segment(segment_id)

            if not self._continues_road(self.start_segment, outward, self.start_node_id):
                self.rejected_edges.add((self.start_segment.segment_id, segment_id))
                continue

            route = self._explore(outward)
            if route is not None:
                logger.debug(
                    f"Direct route found from node {self.start_node_id} after {self.steps} steps: {route}"
                )
                return [route]

        logger.debug(f"No direct route from node {self.start_node_id} after {self.steps} steps")
        return []


def find_direct_route(
    network: RoadNetwork,
    max_length: Distance,
    start_segment: Segment,
    start_node_id: NodeID,
    end_segment: Segment,
    end_node_ids: Iterable[NodeID],
) -> List[CandidateRoute]:
    """Convenience wrapper: run one DirectRouteSearch invocation.

    Example:
        >>> find_direct_route(network, 5000, seg_a, node_ab, seg_c, [far_node_c])
        [[1, 2, 3]]
    """
    search = DirectRouteSearch(
        network, max_length, start_segment, start_node_id, end_segment, end_node_ids
    )
    return search.run()
