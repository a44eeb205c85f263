import os
import sys

import pytest

# Keep log output on stdout only during tests
os.environ.pop("PLANNER_LOG_DIR", None)
os.environ.pop("PLANNER_ZONES_FILE", None)

# Add the repository root to sys.path so vpc_planner imports without install
base_dir = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
sys.path.insert(0, base_dir)

from vpc_planner.planner.models import NetworkSpec, Zone


@pytest.fixture
def zones():
    return (Zone("eu-west-1a"), Zone("eu-west-1b"), Zone("eu-west-1c"))


@pytest.fixture
def make_spec():
    def _make(**overrides):
        values = dict(
            cidr_block="10.0.0.0/16",
            subnet_bits=4,
            private_count=2,
            public_count=2,
            create_private_gateway=True,
            create_public_gateway=True,
            ecosystem="billing",
            timestamp="20240101",
            description="billing platform",
            region="eu-west-1",
        )
        values.update(overrides)
        return NetworkSpec(**values)

    return _make
