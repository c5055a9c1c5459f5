"""
Configuration for the BDP checker.

Holds the routing-policy thresholds and the live-map connection settings.
Defaults match the editor's BDP rules; connection settings can be
overridden from the environment.
"""

import os
from dataclasses import dataclass, replace
from typing import Mapping, Optional

from .exceptions import ConfigurationError

# Live-map routing server paths per region
REGION_PATHS = {
    "na": "/RoutingManager/routingRequest",
    "il": "/il-RoutingManager/routingRequest",
    "row": "/row-RoutingManager/routingRequest",
}

# Editor country ids served by each regional routing server
NA_COUNTRY_IDS = frozenset({235, 40, 182})  # United States, Canada, Puerto Rico
IL_COUNTRY_IDS = frozenset({106})  # Israel

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def region_for_country(country_id: Optional[int]) -> str:
    """Pick the routing server region serving an editor country id."""
    if country_id in NA_COUNTRY_IDS:
        return "na"
    if country_id in IL_COUNTRY_IDS:
        return "il"
    return "row"


@dataclass(frozen=True)
class BDPConfig:
    """Routing-policy thresholds and live-map settings.

    Attributes:
        minor_highway_max_length: Direct-route length budget when a bracketing
            segment is a minor highway (meters)
        default_max_length: Direct-route length budget otherwise (meters)
        minor_highway_max_detour_length: Longest detour BDP applies to when
            the bracketing segments are minor highways (meters)
        default_max_detour_length: Longest detour BDP applies to otherwise
        min_detour_segments: Fewest interior segments a detour must have
        use_live_map: Whether to ask the live-map routing service first
        live_map_base_url: Scheme and host of the routing service
        region: Routing server region ('na', 'il' or 'row')
        request_timeout: HTTP timeout in seconds
        n_paths: Number of alternative paths requested
    """

    minor_highway_max_length: float = 5000.0
    default_max_length: float = 50000.0
    minor_highway_max_detour_length: float = 500.0
    default_max_detour_length: float = 5000.0
    min_detour_segments: int = 2
    use_live_map: bool = True
    live_map_base_url: str = "https://www.waze.com"
    region: str = "na"
    request_timeout: float = 60.0
    n_paths: int = 6

    def __post_init__(self):
        if self.region not in REGION_PATHS:
            raise ConfigurationError(
                f"Unknown routing region '{self.region}' (expected one of {sorted(REGION_PATHS)})"
            )
        if self.request_timeout <= 0:
            raise ConfigurationError(f"request_timeout must be positive, got {self.request_timeout}")
        if self.n_paths < 1:
            raise ConfigurationError(f"n_paths must be at least 1, got {self.n_paths}")
        if self.min_detour_segments < 1:
            raise ConfigurationError(
                f"min_detour_segments must be at least 1, got {self.min_detour_segments}"
            )

    @property
    def routing_url(self) -> str:
        return self.live_map_base_url.rstrip("/") + REGION_PATHS[self.region]

    def with_region(self, region: str) -> "BDPConfig":
        return replace(self, region=region)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "BDPConfig":
        """Build a config from BDP_* environment variables.

        Recognised variables: BDP_LIVE_MAP_URL, BDP_REGION,
        BDP_REQUEST_TIMEOUT, BDP_USE_LIVE_MAP.

        Raises:
            ConfigurationError: If a variable holds an invalid value
        """
        env = os.environ if environ is None else environ
        overrides = {}

        if env.get("BDP_LIVE_MAP_URL"):
            overrides["live_map_base_url"] = env["BDP_LIVE_MAP_URL"]
        if env.get("BDP_REGION"):
            overrides["region"] = env["BDP_REGION"].lower()
        if env.get("BDP_REQUEST_TIMEOUT"):
            try:
                overrides["request_timeout"] = float(env["BDP_REQUEST_TIMEOUT"])
            except ValueError:
                raise ConfigurationError(
                    f"BDP_REQUEST_TIMEOUT must be a number, got '{env['BDP_REQUEST_TIMEOUT']}'"
                ) from None
        if env.get("BDP_USE_LIVE_MAP"):
            value = env["BDP_USE_LIVE_MAP"].strip().lower()
            if value in _TRUE_VALUES:
                overrides["use_live_map"] = True
            elif value in _FALSE_VALUES:
                overrides["use_live_map"] = False
            else:
                raise ConfigurationError(f"BDP_USE_LIVE_MAP must be a boolean, got '{value}'")

        return cls(**overrides)
