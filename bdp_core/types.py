"""
Type definitions for the BDP checker.

This module provides type aliases and dataclasses for the road-network data
model, the selection handed over by the operator, and the outcomes returned
to the presentation layer.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, NamedTuple, Optional, Tuple

from .geo import ProjectedPoint, geometry_center

# Type Aliases for clarity
SegmentID = int
NodeID = int
StreetID = int
Distance = float  # Distance in meters
CandidateRoute = List[SegmentID]  # Ordered segment ids, boundary segments included
EdgePair = Tuple[SegmentID, SegmentID]  # (from segment, to segment)


class Direction(Enum):
    """Allowed travel direction on a segment, relative to its from/to nodes."""

    BIDIRECTIONAL = 0
    FORWARD = 1  # from-node -> to-node only
    BACKWARD = 2  # to-node -> from-node only

    @classmethod
    def from_flags(cls, fwd: bool, rev: bool) -> "Direction":
        """Map the editor's fwdDirection/revDirection flags to a Direction."""
        if fwd and not rev:
            return cls.FORWARD
        if rev and not fwd:
            return cls.BACKWARD
        return cls.BIDIRECTIONAL


@dataclass(frozen=True)
class Street:
    """A named street that segments can reference."""

    street_id: StreetID
    name: Optional[str] = None


@dataclass(frozen=True)
class Node:
    """A junction between segments.

    Attributes:
        node_id: Unique node identifier
        segment_ids: Incident segment ids, in the order the data source lists them
    """

    node_id: NodeID
    segment_ids: Tuple[SegmentID, ...] = ()


@dataclass(frozen=True)
class Segment:
    """A road segment between two nodes.

    Attributes:
        segment_id: Unique segment identifier
        road_type: Road-type code (see road_types)
        length: Segment length in meters
        from_node_id: Node at the geometry start (A)
        to_node_id: Node at the geometry end (B)
        direction: Allowed travel direction
        primary_street_id: Primary street reference, if any
        street_ids: Alternate street references
        geometry: Polyline vertices in Web Mercator meters
    """

    segment_id: SegmentID
    road_type: int
    length: Distance
    from_node_id: NodeID
    to_node_id: NodeID
    direction: Direction = Direction.BIDIRECTIONAL
    primary_street_id: Optional[StreetID] = None
    street_ids: Tuple[StreetID, ...] = ()
    geometry: Tuple[ProjectedPoint, ...] = ()

    def other_node_id(self, node_id: NodeID) -> NodeID:
        """Return the endpoint opposite to node_id.

        Raises:
            ValueError: If node_id is not an endpoint of this segment
        """
        if node_id == self.from_node_id:
            return self.to_node_id
        if node_id == self.to_node_id:
            return self.from_node_id
        raise ValueError(f"Node {node_id} is not an endpoint of segment {self.segment_id}")

    def center(self) -> ProjectedPoint:
        """Center of the segment geometry (Web Mercator meters)."""
        return geometry_center(self.geometry)

    @property
    def departure_node_ids(self) -> List[NodeID]:
        """Nodes through which traffic can leave this segment.

        Bidirectional segments list the to-node first.
        """
        if self.direction is Direction.FORWARD:
            return [self.to_node_id]
        if self.direction is Direction.BACKWARD:
            return [self.from_node_id]
        return [self.to_node_id, self.from_node_id]

    @property
    def arrival_node_ids(self) -> List[NodeID]:
        """Nodes through which traffic can enter this segment.

        Bidirectional segments list the from-node first.
        """
        if self.direction is Direction.FORWARD:
            return [self.from_node_id]
        if self.direction is Direction.BACKWARD:
            return [self.to_node_id]
        return [self.from_node_id, self.to_node_id]


class SearchFrame(NamedTuple):
    """One entry of the direct-route search stack.

    Attributes:
        segment: Segment occupying the frame
        entry_node_id: Node through which the search entered the segment
    """

    segment: Segment
    entry_node_id: NodeID

    @property
    def exit_node_id(self) -> NodeID:
        return self.segment.other_node_id(self.entry_node_id)


@dataclass
class SegmentSelection:
    """The operator's current segment selection.

    Attributes:
        segments: Selected segments, in selection (or path) order
        multiple_connected_components: True when the selection is not one chain
    """

    segments: List[Segment]
    multiple_connected_components: bool = False

    def __len__(self) -> int:
        return len(self.segments)


@dataclass
class BoundarySelection:
    """The bracketing segments resolved from a selection.

    Attributes:
        start_segment: First bracketing segment
        end_segment: Second bracketing segment
        selection: The selection this pair was resolved from
        route_far_end_node_id: Endpoint of end_segment away from the detour;
            the detour meets end_segment at the other endpoint
            (set for detour selections only)
    """

    start_segment: Segment
    end_segment: Segment
    selection: SegmentSelection
    route_far_end_node_id: Optional[NodeID] = None

    @property
    def is_detour_selection(self) -> bool:
        return len(self.selection) > 2

    @property
    def detour_segments(self) -> List[Segment]:
        """Selected segments other than the two bracketing segments, in selection order."""
        boundary_ids = {self.start_segment.segment_id, self.end_segment.segment_id}
        return [s for s in self.selection.segments if s.segment_id not in boundary_ids]


# ==============================================================================
# Outcomes
# ==============================================================================


class OutcomeKind(Enum):
    """What a BDP check concluded."""

    FOUND = "found"
    NOT_FOUND = "not_found"
    INELIGIBLE = "ineligible"


@dataclass
class BDPOutcome:
    """Result of a BDP check, handed to the presentation layer.

    Attributes:
        kind: Outcome category
        message: Human-readable text for the operator
        routes: Direct routes found (first one is the one offered)
        source: Name of the strategy that produced the routes
    """

    kind: OutcomeKind
    message: str
    routes: List[CandidateRoute] = field(default_factory=list)
    source: Optional[str] = None

    @property
    def found(self) -> bool:
        return self.kind is OutcomeKind.FOUND

    @property
    def route(self) -> Optional[CandidateRoute]:
        """The direct route offered to the operator, if any."""
        return self.routes[0] if self.routes else None

    @classmethod
    def direct_route_found(cls, routes: List[CandidateRoute], source: str) -> "BDPOutcome":
        return cls(
            kind=OutcomeKind.FOUND,
            message="A direct route was found! Would you like to select the direct route?",
            routes=routes,
            source=source,
        )

    @classmethod
    def no_direct_route(cls, message: str) -> "BDPOutcome":
        return cls(kind=OutcomeKind.NOT_FOUND, message=message)

    @classmethod
    def ineligible(cls, message: str) -> "BDPOutcome":
        return cls(kind=OutcomeKind.INELIGIBLE, message=message)
