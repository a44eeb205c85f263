# File: vpc_planner/planner/zones.py
"""
Zone Directory

Resolves the ordered availability zones of a region. The list is resolved once
per planning run; placement indexes into it, so it must not change mid-run.
"""

import logging
from typing import Dict, Iterable, List, Mapping, Optional, Tuple, Union

import yaml

from .errors import ZoneResolutionError
from .models import Zone

logger = logging.getLogger(__name__)

DEFAULT_REGION = "us-east-1"

DEFAULT_REGION_ZONES: Dict[str, List[str]] = {
    "us-east-1": ["us-east-1a", "us-east-1b", "us-east-1c", "us-east-1d", "us-east-1e", "us-east-1f"],
    "us-east-2": ["us-east-2a", "us-east-2b", "us-east-2c"],
    "us-west-1": ["us-west-1a", "us-west-1c"],
    "us-west-2": ["us-west-2a", "us-west-2b", "us-west-2c", "us-west-2d"],
    "eu-west-1": ["eu-west-1a", "eu-west-1b", "eu-west-1c"],
    "eu-west-2": ["eu-west-2a", "eu-west-2b", "eu-west-2c"],
    "eu-central-1": ["eu-central-1a", "eu-central-1b", "eu-central-1c"],
    "ap-southeast-1": ["ap-southeast-1a", "ap-southeast-1b", "ap-southeast-1c"],
    "ap-northeast-1": ["ap-northeast-1a", "ap-northeast-1c", "ap-northeast-1d"],
}

ZoneEntry = Union[str, Mapping[str, str]]


def _to_zone(entry: ZoneEntry) -> Zone:
    if isinstance(entry, str):
        return Zone(name=entry)
    return Zone(name=entry["name"], state=entry.get("state", "available"))


class ZoneDirectory:
    """Interface: resolve a region to its ordered zones."""

    default_region = DEFAULT_REGION

    def resolve_zones(self, region: Optional[str] = None) -> Tuple[Zone, ...]:
        raise NotImplementedError


class StaticZoneDirectory(ZoneDirectory):
    """
    Zone directory backed by an in-memory region table.

    Entries are either bare zone names or mappings with `name` and `state`;
    only zones in state "available" are handed to the planner.
    """

    def __init__(
        self,
        regions: Optional[Mapping[str, Iterable[ZoneEntry]]] = None,
        default_region: str = DEFAULT_REGION,
    ):
        source = DEFAULT_REGION_ZONES if regions is None else regions
        self._regions: Dict[str, Tuple[Zone, ...]] = {
            region: tuple(_to_zone(entry) for entry in entries)
            for region, entries in source.items()
        }
        self.default_region = default_region

    @classmethod
    def from_names(cls, region: str, names: Iterable[str]) -> "StaticZoneDirectory":
        return cls({region: list(names)}, default_region=region)

    @classmethod
    def from_yaml(cls, path: str) -> "StaticZoneDirectory":
        """
        Load a region table from YAML:

            default_region: eu-west-1
            regions:
              eu-west-1: [eu-west-1a, eu-west-1b]
              us-east-1:
                - name: us-east-1a
                - name: us-east-1b
                  state: impaired
        """
        with open(path, "r") as f:
            data = yaml.safe_load(f) or {}
        regions = data.get("regions")
        if not isinstance(regions, dict):
            raise ValueError(f"{path}: 'regions' must be a mapping of region to zone list")
        return cls(regions, default_region=data.get("default_region", DEFAULT_REGION))

    @property
    def regions(self) -> List[str]:
        return sorted(self._regions)

    def resolve_zones(self, region: Optional[str] = None) -> Tuple[Zone, ...]:
        region = region or self.default_region
        if region not in self._regions:
            raise ZoneResolutionError(f"Unknown region: {region}")

        zones = tuple(z for z in self._regions[region] if z.state == "available")
        if not zones:
            raise ZoneResolutionError(f"Region {region} has no available zones")

        logger.debug(f"Resolved {len(zones)} zones for {region}: {[z.name for z in zones]}")
        return zones


def resolve_zones(region: Optional[str] = None, directory: Optional[ZoneDirectory] = None) -> Tuple[Zone, ...]:
    """Resolve zones through `directory`, defaulting to the built-in table."""
    return (directory or StaticZoneDirectory()).resolve_zones(region)
