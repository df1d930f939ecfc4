"""
Matching package for the availability check.

Public API:
- RouteMatcher, MatchResult
- AvailabilityService, AvailabilityReport, service_from_env
- MatchingPolicy
"""

from .availability import (
    AvailabilityLogEntry,
    AvailabilityReport,
    AvailabilityService,
    AvailabilityStatus,
    service_from_env,
)
from .matcher import MatchResult, RouteMatcher
from .policy import MatchingPolicy, default_policy, policy_from_env

__all__ = [
    "AvailabilityLogEntry",
    "AvailabilityReport",
    "AvailabilityService",
    "AvailabilityStatus",
    "MatchResult",
    "MatchingPolicy",
    "RouteMatcher",
    "default_policy",
    "policy_from_env",
    "service_from_env",
]
