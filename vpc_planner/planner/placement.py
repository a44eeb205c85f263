# File: vpc_planner/planner/placement.py
"""Round-robin zone placement."""

from typing import Sequence

from .errors import ZoneResolutionError
from .models import Zone


def place(index: int, zones: Sequence[Zone]) -> Zone:
    """zones[index mod len(zones)]; wraps when subnets outnumber zones."""
    if not zones:
        raise ZoneResolutionError("Cannot place a subnet: zone list is empty")
    if index < 0:
        raise ValueError(f"Subnet index must be non-negative, got {index}")
    return zones[index % len(zones)]
