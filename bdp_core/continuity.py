"""
Continuity predicates: do these segments belong to the same logical road?

Both predicates compare every segment against the FIRST segment of the
sequence only; they are not transitive checks across neighbours.
"""

from typing import Sequence

from .road_network import RoadNetwork
from .road_types import road_type_group
from .types import Segment


def same_road_type_group(segments: Sequence[Segment]) -> bool:
    """True iff all segments share the first segment's road-type group.

    Fewer than two segments never establish continuity. Segments with
    unmapped road types have no group, and two unmapped segments compare
    equal to each other.

    Example:
        >>> same_road_type_group([freeway_seg, major_highway_seg])
        True
        >>> same_road_type_group([freeway_seg, minor_highway_seg])
        False
    """
    if len(segments) < 2:
        return False
    first_group = road_type_group(segments[0].road_type)
    return all(road_type_group(s.road_type) == first_group for s in segments[1:])


def same_street_name(segments: Sequence[Segment], network: RoadNetwork) -> bool:
    """True iff every segment after the first carries one of the first segment's names.

    Names come from the primary street and the alternate streets. The match
    is existential per segment: one shared name is enough. If the first
    segment has no non-empty name, continuity cannot be established.
    """
    if len(segments) < 2:
        return False

    names = set(network.street_names(segments[0]))
    if not names:
        return False

    return all(
        any(name in names for name in network.street_names(segment)) for segment in segments[1:]
    )
