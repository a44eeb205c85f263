# File: vpc_planner/config.py
"""
Runtime configuration.

Service settings come from the environment; network specs and zone tables are
YAML files.

    REST_PORT                 port for the REST API (default 8000)
    PLANNER_LOG_LEVEL         root log level (default INFO)
    PLANNER_LOG_DIR           if set, also log to <dir>/planner.log
    PLANNER_ZONES_FILE        YAML region table for the zone directory
    PLANNER_DEFAULT_REGION    region used when a spec names none
"""

import os
from dataclasses import MISSING, fields
from typing import Any, Dict, Optional

import yaml

from vpc_planner.planner.models import NetworkSpec
from vpc_planner.planner.zones import DEFAULT_REGION, StaticZoneDirectory, ZoneDirectory

SPEC_FIELDS = {f.name for f in fields(NetworkSpec)}
REQUIRED_SPEC_FIELDS = {
    f.name for f in fields(NetworkSpec)
    if f.default is MISSING and f.default_factory is MISSING
}


def get_rest_port() -> int:
    return int(os.getenv("REST_PORT", 8000))


def get_default_region() -> str:
    return os.getenv("PLANNER_DEFAULT_REGION", DEFAULT_REGION)


def get_zone_directory() -> ZoneDirectory:
    """Zone directory from PLANNER_ZONES_FILE, else the built-in region table."""
    zones_file = os.getenv("PLANNER_ZONES_FILE")
    if zones_file:
        directory = StaticZoneDirectory.from_yaml(zones_file)
    else:
        directory = StaticZoneDirectory()
    if os.getenv("PLANNER_DEFAULT_REGION"):
        directory.default_region = get_default_region()
    return directory


def network_spec_from_dict(data: Dict[str, Any]) -> NetworkSpec:
    unknown = set(data) - SPEC_FIELDS
    if unknown:
        raise ValueError(f"Unknown network spec keys: {sorted(unknown)}")
    missing = REQUIRED_SPEC_FIELDS - set(data)
    if missing:
        raise ValueError(f"Missing network spec keys: {sorted(missing)}")
    values = dict(data)
    # YAML turns unquoted timestamps like 20240101 into ints
    if "timestamp" in values:
        values["timestamp"] = str(values["timestamp"])
    return NetworkSpec(**values)


def load_network_spec(path: str, overrides: Optional[Dict[str, Any]] = None) -> NetworkSpec:
    """
    Load a NetworkSpec from YAML:

        cidr_block: 10.0.0.0/16
        subnet_bits: 4
        private_count: 2
        public_count: 2
        create_private_gateway: true
        ecosystem: billing
        timestamp: "20240101"
        description: billing platform network
    """
    with open(path, "r") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a mapping at the top level")
    data.update(overrides or {})
    return network_spec_from_dict(data)
