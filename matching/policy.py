"""
Purpose: Central configuration for route matching.
What it does:

Stores all tunable thresholds/caps:

SEARCH_RADIUS_KM = 1.5

PROVIDER_TIMEOUT_S = 5

MATCHER_MAX_WORKERS = 4

Rule: No logic here. Just parameters so you can tune without rewriting code.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv


@dataclass(frozen=True)
class MatchingPolicy:
    """
    Central configuration for the availability check.
    """

    # --- Geofence ---
    # Radius of the circle drawn around the user's location.
    radius_km: float = 1.5

    # --- Provider deadline ---
    # Upper bound for each outbound geocode/directions call. A directions call
    # that runs out of time falls back to straight lines between stops.
    provider_timeout_s: float = 5.0

    # --- Fan-out ---
    # Buses are checked independently; this caps the worker threads.
    # 1 means strictly sequential.
    max_workers: int = 4

    # --- Reporting ---
    # Reverse geocode raw "lat,lng" input so the report can name the place.
    describe_coordinates: bool = True

    def validate(self) -> None:
        """
        Basic sanity checks.
        """
        if self.radius_km < 0:
            raise ValueError("radius_km must be >= 0")

        if self.provider_timeout_s <= 0:
            raise ValueError("provider_timeout_s must be > 0")

        if self.max_workers < 1:
            raise ValueError("max_workers must be >= 1")


def default_policy() -> MatchingPolicy:
    """
    Convenience factory for the default policy.
    """
    p = MatchingPolicy()
    p.validate()
    return p


def policy_from_env() -> MatchingPolicy:
    """
    Policy with overrides from the environment / .env:
    SEARCH_RADIUS_KM, PROVIDER_TIMEOUT_S, MATCHER_MAX_WORKERS
    """
    load_dotenv()
    defaults = MatchingPolicy()
    p = MatchingPolicy(
        radius_km=float(os.getenv("SEARCH_RADIUS_KM") or defaults.radius_km),
        provider_timeout_s=float(os.getenv("PROVIDER_TIMEOUT_S") or defaults.provider_timeout_s),
        max_workers=int(os.getenv("MATCHER_MAX_WORKERS") or defaults.max_workers),
    )
    p.validate()
    return p
