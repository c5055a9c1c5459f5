"""
Custom exceptions for the BDP checker.

Provides a clear exception hierarchy for better error handling and debugging.
All exceptions inherit from BDPError for easy catching of all library errors.
"""

from typing import Optional


class BDPError(Exception):
    """Base exception for all BDP-related errors."""

    pass


# ==============================================================================
# Selection Errors
# ==============================================================================


class SelectionError(BDPError):
    """Base class for errors raised while interpreting a segment selection."""

    pass


class SelectionValidationError(SelectionError):
    """Raised when the operator's selection has an invalid shape.

    The message is meant to be shown to the operator as-is.
    """

    pass


class BoundaryResolutionError(SelectionError):
    """Raised when the bracketing segments of a chain cannot be identified."""

    def __init__(self, num_extremities: int):
        self.num_extremities = num_extremities
        super().__init__(
            "Error finding which two segments were the bracketing segments "
            f"({num_extremities} chain extremities found, expected 2)"
        )


# ==============================================================================
# Eligibility Errors
# ==============================================================================


class EligibilityError(BDPError):
    """Raised when the bracketing segments or the detour fail a BDP precondition."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(reason)


# ==============================================================================
# Road Network Errors
# ==============================================================================


class RoadNetworkError(BDPError):
    """Base class for road-network lookup errors."""

    pass


class UnknownSegmentError(RoadNetworkError):
    """Raised when a segment id does not resolve in the road network."""

    def __init__(self, segment_id: int):
        self.segment_id = segment_id
        super().__init__(f"Unknown segment: {segment_id}")


class UnknownNodeError(RoadNetworkError):
    """Raised when a node id does not resolve in the road network."""

    def __init__(self, node_id: int):
        self.node_id = node_id
        super().__init__(f"Unknown node: {node_id}")


class SnapshotParseError(RoadNetworkError):
    """Raised when a road-network snapshot file cannot be loaded."""

    def __init__(self, filepath: str, reason: str):
        self.filepath = filepath
        self.reason = reason
        super().__init__(f"Failed to parse road-network snapshot '{filepath}': {reason}")


# ==============================================================================
# Routing Service Errors
# ==============================================================================


class RoutingServiceError(BDPError):
    """Raised when the live-map routing service fails or returns garbage."""

    def __init__(self, reason: str, status_code: Optional[int] = None):
        self.reason = reason
        self.status_code = status_code
        msg = f"Routing service error: {reason}"
        if status_code is not None:
            msg += f" (HTTP {status_code})"
        super().__init__(msg)


# ==============================================================================
# Configuration Errors
# ==============================================================================


class ConfigurationError(BDPError):
    """Raised when configuration is invalid."""

    pass
