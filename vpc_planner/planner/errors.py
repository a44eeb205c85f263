# File: vpc_planner/planner/errors.py
"""
Planning errors.

Every failure here is detected from the inputs alone, before any resource
node is emitted. Planning is all-or-nothing.
"""


class PlanningError(Exception):
    """Base class for all planner failures."""


class ZoneResolutionError(PlanningError):
    """The region yields no usable availability zones."""


class CidrExhaustionError(PlanningError):
    """The address block cannot hold the requested subnets."""


class InvalidTopologyError(PlanningError):
    """The combination of feature flags and subnet counts is inconsistent."""


class OrderingViolationError(PlanningError):
    """A dependency edge is broken (cycle, or an apply order that skips ahead)."""
