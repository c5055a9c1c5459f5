"""
Road-network data source used by the BDP checker.

RoadNetwork describes what the checker needs from the map data: segment,
node and street lookups plus a turn-legality oracle. InMemoryRoadNetwork
implements it over plain dictionaries and can be loaded from a JSON snapshot
of the editor's data model:

    {
        "streets":  [{"id": 1, "name": "Main St"}],
        "segments": [{"id": 10, "roadType": 7, "length": 120.5,
                      "fromNodeID": 1, "toNodeID": 2,
                      "fwdDirection": true, "revDirection": true,
                      "primaryStreetID": 1, "streetIDs": [],
                      "geometry": [[x, y], [x, y]]}],
        "nodes":    [{"id": 1, "segIDs": [10, 11]}],
        "restrictedTurns": [{"from": 10, "to": 11, "node": 2}]
    }

"nodes" is optional; when absent, node incidence is derived from segment
endpoints in segment order.
"""

import json
from collections import defaultdict
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Set, Tuple, Union

from .exceptions import SnapshotParseError, UnknownNodeError, UnknownSegmentError
from .logging_config import get_logger
from .types import Direction, Node, NodeID, Segment, SegmentID, Street, StreetID

logger = get_logger(__name__)

TurnKey = Tuple[SegmentID, SegmentID, NodeID]


class RoadNetwork:
    """Interface requirements for road-network objects.

    Any data source passed to BDP functions must provide these methods. The
    checker never writes to it.
    """

    def get_segment(self, segment_id: SegmentID) -> Segment:
        """Resolve a segment id.

        Raises:
            UnknownSegmentError: If the id does not resolve
        """
        raise NotImplementedError("Road network must implement get_segment")

    def get_node(self, node_id: NodeID) -> Node:
        """Resolve a node id.

        Raises:
            UnknownNodeError: If the id does not resolve
        """
        raise NotImplementedError("Road network must implement get_node")

    def get_street(self, street_id: StreetID) -> Optional[Street]:
        """Resolve a street id, or None if unknown."""
        raise NotImplementedError("Road network must implement get_street")

    def is_turn_allowed(self, from_segment: Segment, to_segment: Segment, node_id: NodeID) -> bool:
        """Whether traffic on from_segment may continue onto to_segment at node_id."""
        raise NotImplementedError("Road network must implement is_turn_allowed")

    def get_segments(self, segment_ids: Iterable[SegmentID]) -> List[Segment]:
        """Resolve several segment ids, preserving order."""
        return [self.get_segment(segment_id) for segment_id in segment_ids]

    def street_names(self, segment: Segment) -> List[str]:
        """Non-empty names of the streets attached to a segment.

        The primary street comes first, then the alternate streets. Street ids
        that do not resolve are skipped.
        """
        street_ids: List[StreetID] = []
        if segment.primary_street_id is not None:
            street_ids.append(segment.primary_street_id)
        street_ids.extend(segment.street_ids)

        names = []
        for street_id in street_ids:
            street = self.get_street(street_id)
            if street is not None and street.name:
                names.append(street.name)
        return names


class InMemoryRoadNetwork(RoadNetwork):
    """Dictionary-backed road network.

    Turns are allowed by default. A turn is refused when it is listed in
    restricted_turns, when it is a U-turn onto the same segment, when the
    node is not shared by both segments, or when it would leave from_segment
    or enter to_segment against its allowed direction.
    """

    def __init__(
        self,
        segments: Iterable[Segment],
        streets: Iterable[Street] = (),
        nodes: Optional[Iterable[Node]] = None,
        restricted_turns: Iterable[TurnKey] = (),
    ):
        self.segments: Dict[SegmentID, Segment] = {s.segment_id: s for s in segments}
        self.streets: Dict[StreetID, Street] = {s.street_id: s for s in streets}
        self.restricted_turns: Set[TurnKey] = set(restricted_turns)

        if nodes is None:
            self.nodes = self._derive_nodes(self.segments.values())
        else:
            self.nodes = {n.node_id: n for n in nodes}

        logger.debug(
            f"Road network: {len(self.segments)} segments, {len(self.nodes)} nodes, "
            f"{len(self.streets)} streets, {len(self.restricted_turns)} restricted turns"
        )

    @staticmethod
    def _derive_nodes(segments: Iterable[Segment]) -> Dict[NodeID, Node]:
        incidence: Dict[NodeID, List[SegmentID]] = defaultdict(list)
        for segment in segments:
            incidence[segment.from_node_id].append(segment.segment_id)
            if segment.to_node_id != segment.from_node_id:
                incidence[segment.to_node_id].append(segment.segment_id)
        return {node_id: Node(node_id, tuple(seg_ids)) for node_id, seg_ids in incidence.items()}

    def get_segment(self, segment_id: SegmentID) -> Segment:
        try:
            return self.segments[segment_id]
        except KeyError:
            raise UnknownSegmentError(segment_id) from None

    def get_node(self, node_id: NodeID) -> Node:
        try:
            return self.nodes[node_id]
        except KeyError:
            raise UnknownNodeError(node_id) from None

    def get_street(self, street_id: StreetID) -> Optional[Street]:
        return self.streets.get(street_id)

    def is_turn_allowed(self, from_segment: Segment, to_segment: Segment, node_id: NodeID) -> bool:
        if from_segment.segment_id == to_segment.segment_id:
            return False
        if node_id not in from_segment.departure_node_ids:
            return False
        if node_id not in to_segment.arrival_node_ids:
            return False
        return (from_segment.segment_id, to_segment.segment_id, node_id) not in self.restricted_turns

    # ------------------------------------------------------------------
    # Snapshot loading
    # ------------------------------------------------------------------

    @classmethod
    def from_dict(cls, data: dict) -> "InMemoryRoadNetwork":
        """Build a network from a decoded JSON snapshot.

        Raises:
            KeyError, TypeError, ValueError: If required attributes are missing
                or malformed
        """
        streets = [Street(int(s["id"]), s.get("name")) for s in data.get("streets", [])]

        segments = []
        for s in data["segments"]:
            segments.append(
                Segment(
                    segment_id=int(s["id"]),
                    road_type=int(s["roadType"]),
                    length=float(s["length"]),
                    from_node_id=int(s["fromNodeID"]),
                    to_node_id=int(s["toNodeID"]),
                    direction=Direction.from_flags(
                        bool(s.get("fwdDirection", True)), bool(s.get("revDirection", True))
                    ),
                    primary_street_id=s.get("primaryStreetID"),
                    street_ids=tuple(s.get("streetIDs") or ()),
                    geometry=tuple((float(x), float(y)) for x, y in s.get("geometry", [])),
                )
            )

        nodes = None
        if "nodes" in data:
            nodes = [Node(int(n["id"]), tuple(int(i) for i in n.get("segIDs", []))) for n in data["nodes"]]

        restricted = [
            (int(t["from"]), int(t["to"]), int(t["node"])) for t in data.get("restrictedTurns", [])
        ]

        return cls(segments, streets=streets, nodes=nodes, restricted_turns=restricted)

    @classmethod
    def load_json(cls, filepath: Union[str, Path]) -> "InMemoryRoadNetwork":
        """Load a network from a JSON snapshot file.

        Raises:
            SnapshotParseError: If the file cannot be read or decoded
        """
        path = Path(filepath)
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
            network = cls.from_dict(data)
        except json.JSONDecodeError as e:
            raise SnapshotParseError(str(path), f"JSON syntax error: {e}") from e
        except (FileNotFoundError, PermissionError) as e:
            raise SnapshotParseError(str(path), str(e)) from e
        except (KeyError, TypeError, ValueError) as e:
            raise SnapshotParseError(str(path), f"Malformed snapshot: {type(e).__name__}: {e}") from e

        logger.info(f"Loaded road network from {path}: {len(network.segments)} segments")
        return network
