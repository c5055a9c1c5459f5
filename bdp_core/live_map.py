"""
Live-map routing service client.

Asks the editor's routing server for up to six alternative paths between the
centers of two bracketing segments, then keeps only the paths that qualify
as direct routes: same street name and same road-type group along the whole
path, and an interior length under the budget.

Failures never propagate: an unreachable server, an error payload or a
malformed response is logged and treated as "no candidates", so the caller
can fall back to the local search.
"""

import json
from typing import Any, Dict, List, Optional, Tuple

import requests

from .config import BDPConfig
from .continuity import same_road_type_group, same_street_name
from .exceptions import RoadNetworkError, RoutingServiceError
from .geo import format_routing_point, mercator_to_lonlat
from .logging_config import get_logger, log_exception
from .road_network import RoadNetwork
from .types import CandidateRoute, Distance, Segment, SegmentID

logger = get_logger(__name__)

# (segment id, step length) pairs of one returned path
RouteSteps = List[Tuple[SegmentID, Distance]]

ROUTING_OPTIONS = ",".join(
    [
        "AVOID_TOLL_ROADS:f",
        "AVOID_PRIMARIES:f",
        "AVOID_DANGEROUS_TURNS:f",
        "AVOID_FERRIES:f",
        "ALLOW_UTURNS:t",
    ]
)


def sanitize_response_text(text: str) -> str:
    """Replace bare NaN tokens (invalid JSON the server emits for distances) with 0."""
    return text.replace("NaN", "0")


def interior_length(steps: RouteSteps) -> Distance:
    """Summed length of a path's steps, excluding the first and the last step."""
    return sum(length for _, length in steps[1:-1])


class LiveMapRouteClient:
    """
    Client for the live-map routing server.

    Sole responsibility:
    - Build the routing request from two segments
    - Talk to the server via HTTP
    - Turn the returned paths into candidate direct routes
    """

    def __init__(
        self,
        network: RoadNetwork,
        config: Optional[BDPConfig] = None,
        session: Optional[requests.Session] = None,
    ):
        self.network = network
        self.config = config or BDPConfig()
        self.session = session or requests.Session()

    # ----------------
    # Request
    # ----------------

    def build_request_params(self, start_segment: Segment, end_segment: Segment) -> Dict[str, Any]:
        """Query parameters for a route between the centers of two segments."""
        start_lonlat = mercator_to_lonlat(*start_segment.center())
        end_lonlat = mercator_to_lonlat(*end_segment.center())
        return {
            "from": format_routing_point(start_lonlat),
            "to": format_routing_point(end_lonlat),
            "returnJSON": "true",
            "returnGeometries": "true",
            "returnInstructions": "false",
            "timeout": 60000,
            "type": "HISTORIC_TIME",
            "nPaths": self.config.n_paths,
            "clientVersion": "4.0.0",
            "vehType": "PRIVATE",
            "options": ROUTING_OPTIONS,
        }

    def fetch(self, params: Dict[str, Any]) -> Dict[str, Any]:
        """Call the routing server and decode its (sanitized) JSON answer.

        Raises:
            RoutingServiceError: On network failure, HTTP error, an empty or
                undecodable body, or an error payload
        """
        try:
            response = self.session.get(
                self.config.routing_url, params=params, timeout=self.config.request_timeout
            )
            response.raise_for_status()
        except requests.exceptions.Timeout as e:
            raise RoutingServiceError(f"request timed out after {self.config.request_timeout}s") from e
        except requests.exceptions.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            raise RoutingServiceError("route request failed", status_code=status) from e
        except requests.exceptions.RequestException as e:
            raise RoutingServiceError(f"route request failed: {e}") from e

        text = response.text
        if not text or not text.strip():
            raise RoutingServiceError("no data returned")

        try:
            data = json.loads(sanitize_response_text(text))
        except json.JSONDecodeError as e:
            raise RoutingServiceError(f"undecodable response: {e}") from e

        if not isinstance(data, dict):
            raise RoutingServiceError(f"unexpected response type {type(data).__name__}")

        if data.get("error") is not None:
            error = data["error"]
            if isinstance(error, str):
                error = error.replace("|", "\n")
            raise RoutingServiceError(str(error))

        return data

    # ----------------
    # Response
    # ----------------

    @staticmethod
    def parse_routes(data: Dict[str, Any]) -> List[RouteSteps]:
        """Extract (segment id, length) steps of the primary path and the alternatives.

        The primary path is only present when the payload carries 'coords'.
        A path that does not have the expected shape is skipped.

        Raises:
            RoutingServiceError: If 'alternatives' is not a list
        """
        alternatives = data.get("alternatives") or []
        if not isinstance(alternatives, list):
            raise RoutingServiceError(f"malformed alternatives: {type(alternatives).__name__}")

        routes = [data] if data.get("coords") is not None else []
        routes.extend(alternatives)

        parsed: List[RouteSteps] = []
        for index, route in enumerate(routes):
            try:
                results = route["response"]["results"]
                steps = [(int(r["path"]["segmentId"]), float(r["length"] or 0)) for r in results]
            except (KeyError, TypeError, ValueError) as e:
                logger.debug(f"Skipping malformed path #{index}: {type(e).__name__}: {e}")
                continue
            parsed.append(steps)
        return parsed

    def accept_route(self, steps: RouteSteps, max_length: Distance) -> bool:
        """Whether a returned path qualifies as a direct route."""
        try:
            segments = self.network.get_segments(segment_id for segment_id, _ in steps)
        except RoadNetworkError as e:
            logger.debug(f"Skipping live-map path with unresolved segment: {e}")
            return False

        if not same_street_name(segments, self.network):
            return False
        if not same_road_type_group(segments):
            return False
        return interior_length(steps) < max_length

    # ----------------
    # Public API
    # ----------------

    def find_routes(
        self, start_segment: Segment, end_segment: Segment, max_length: Distance
    ) -> List[CandidateRoute]:
        """
        Ask the live map for direct routes between two bracketing segments.

        Returns:
            Accepted routes as ordered segment-id lists (possibly empty)
        """
        try:
            params = self.build_request_params(start_segment, end_segment)
        except ValueError as e:
            logger.warning(f"Cannot query live map: {e}")
            return []

        try:
            data = self.fetch(params)
            candidates = self.parse_routes(data)
        except RoutingServiceError as e:
            log_exception(logger, "Live-map route request failed", e)
            return []

        accepted = [
            [segment_id for segment_id, _ in steps]
            for steps in candidates
            if self.accept_route(steps, max_length)
        ]
        logger.info(f"Live map returned {len(candidates)} path(s), {len(accepted)} direct")
        return accepted
