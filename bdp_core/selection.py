"""
Interpretation of the operator's segment selection.

Turns a selection into the two bracketing segments of a BDP check. The
selection is either just the two bracketing segments, or a whole detour
with its bracketing segments at both ends.
"""

from typing import Dict, List, Optional, Sequence, Tuple

from .exceptions import BoundaryResolutionError, SelectionValidationError
from .logging_config import get_logger
from .road_network import RoadNetwork
from .types import BoundarySelection, NodeID, SegmentID, SegmentSelection

logger = get_logger(__name__)

TOO_FEW_SEGMENTS_MESSAGE = (
    "You must select either the two bracketing segments or an entire detour route "
    "with bracketing segments."
)
DISCONTINUOUS_SELECTION_MESSAGE = (
    "If you select more than 2 segments, the selection of segments must be continuous. "
    "Either select just the two bracketing segments or an entire detour route with "
    "bracketing segments."
)


class SelectionContext:
    """
    Per-session selection state.

    Remembers the last segment of a path the operator extended with a
    path-select gesture. Any other selection gesture invalidates it.
    """

    def __init__(self):
        self.path_end_segment_id: Optional[SegmentID] = None

    def record_path_end(self, segment_id: SegmentID) -> None:
        """Path-select event: segment_id is the new end of the selected path."""
        self.path_end_segment_id = segment_id

    def clear(self) -> None:
        """Feature click, click-out, deselect key or box selection."""
        self.path_end_segment_id = None

    def consume(self) -> Optional[SegmentID]:
        """Return the recorded path end and forget it."""
        segment_id, self.path_end_segment_id = self.path_end_segment_id, None
        return segment_id


def build_selection(network: RoadNetwork, segment_ids: Sequence[SegmentID]) -> SegmentSelection:
    """Build a selection from segment ids, flagging it when it is not one connected piece.

    Raises:
        UnknownSegmentError: If an id does not resolve
    """
    segments = network.get_segments(segment_ids)

    # Flood fill over shared endpoint nodes
    components = 0
    unvisited = {s.segment_id: s for s in segments}
    while unvisited:
        components += 1
        _, seed = unvisited.popitem()
        frontier = {seed.from_node_id, seed.to_node_id}
        while frontier:
            node_id = frontier.pop()
            touching = [
                s for s in unvisited.values() if node_id in (s.from_node_id, s.to_node_id)
            ]
            for segment in touching:
                del unvisited[segment.segment_id]
                frontier.update((segment.from_node_id, segment.to_node_id))

    return SegmentSelection(segments, multiple_connected_components=components > 1)


def _chain_extremities(selection: SegmentSelection) -> List[Tuple[NodeID, SegmentID]]:
    """Endpoint nodes that appear an odd number of times, in selection order.

    For a simple chain these are its two ends, each paired with the segment
    that touches it.
    """
    open_nodes: Dict[NodeID, SegmentID] = {}
    for segment in selection.segments:
        for node_id in (segment.from_node_id, segment.to_node_id):
            if node_id in open_nodes:
                del open_nodes[node_id]
            else:
                open_nodes[node_id] = segment.segment_id
    return list(open_nodes.items())


class BoundarySelectionResolver:
    """Resolves the bracketing segments of a selection."""

    def __init__(self, network: RoadNetwork, context: Optional[SelectionContext] = None):
        self.network = network
        self.context = context or SelectionContext()

    def resolve(self, selection: SegmentSelection) -> BoundarySelection:
        """
        Identify start and end bracketing segments.

        Raises:
            SelectionValidationError: If the selection has the wrong shape
            BoundaryResolutionError: If a chain's two ends cannot be identified
        """
        count = len(selection)
        if count < 2:
            raise SelectionValidationError(TOO_FEW_SEGMENTS_MESSAGE)
        if selection.multiple_connected_components and count > 2:
            raise SelectionValidationError(DISCONTINUOUS_SELECTION_MESSAGE)

        if count == 2:
            start, end = selection.segments
            return BoundarySelection(start, end, selection)

        path_end_segment_id = self.context.consume()
        if path_end_segment_id is not None:
            return self._resolve_path_extension(selection, path_end_segment_id)

        return self._resolve_chain(selection)

    def _resolve_path_extension(
        self, selection: SegmentSelection, path_end_segment_id: SegmentID
    ) -> BoundarySelection:
        start = self.network.get_segment(selection.segments[-1].segment_id)
        end = self.network.get_segment(path_end_segment_id)
        predecessor = selection.segments[-2]

        if end.to_node_id in (predecessor.to_node_id, predecessor.from_node_id):
            far_end_node_id = end.to_node_id
        else:
            far_end_node_id = end.from_node_id

        logger.debug(
            f"Path extension: start {start.segment_id}, end {end.segment_id}, far end node {far_end_node_id}"
        )
        return BoundarySelection(start, end, selection, route_far_end_node_id=far_end_node_id)

    def _resolve_chain(self, selection: SegmentSelection) -> BoundarySelection:
        extremities = _chain_extremities(selection)
        if len(extremities) != 2:
            raise BoundaryResolutionError(len(extremities))

        (_, start_id), (end_node_id, end_id) = extremities
        start = self.network.get_segment(start_id)
        end = self.network.get_segment(end_id)
        logger.debug(f"Chain ends: start {start_id}, end {end_id} (far end node {end_node_id})")
        return BoundarySelection(start, end, selection, route_far_end_node_id=end_node_id)
