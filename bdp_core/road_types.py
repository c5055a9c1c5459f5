"""
Road-type classification used by BDP continuity checks.

The map editor's road-type codes are grouped coarsely: freeways and major
highways form one group, minor highways another. Every other code is
unmapped and has no group.
"""

from typing import Dict, FrozenSet, Optional

# Road-type codes relevant to BDP
FREEWAY = 3
RAMP = 4
WALKING_TRAIL = 5
MAJOR_HIGHWAY = 6
MINOR_HIGHWAY = 7

# Road-type group tags
GROUP_MAJOR_HIGHWAY_FREEWAY = "MHFW"
GROUP_MINOR_HIGHWAY = "mH"

ROAD_TYPE_GROUPS: Dict[int, str] = {
    FREEWAY: GROUP_MAJOR_HIGHWAY_FREEWAY,
    MAJOR_HIGHWAY: GROUP_MAJOR_HIGHWAY_FREEWAY,
    MINOR_HIGHWAY: GROUP_MINOR_HIGHWAY,
}

BDP_ELIGIBLE_ROAD_TYPES: FrozenSet[int] = frozenset({FREEWAY, MAJOR_HIGHWAY, MINOR_HIGHWAY})


def road_type_group(road_type: int) -> Optional[str]:
    """Return the continuity group of a road-type code, or None if unmapped."""
    return ROAD_TYPE_GROUPS.get(road_type)


def is_bdp_eligible(road_type: int) -> bool:
    """Only freeways, major highways and minor highways can bracket a BDP detour.

    Ramps (4) and walking trails (5) sit inside the 3..7 range but are excluded.
    """
    return road_type in BDP_ELIGIBLE_ROAD_TYPES


def is_minor_highway(road_type: int) -> bool:
    return road_type == MINOR_HIGHWAY
