# File: vpc_planner/planner/plan.py
"""
Planning service.

inputs -> Zone Directory -> CIDR Allocator + Zone Placement -> Graph Builder
       -> Naming/Tagging -> TopologyGraph

Every check runs before the first node is built; a failed run returns nothing.
"""

import logging
import time
from typing import Optional, Sequence

from vpc_planner.metrics import METRICS

from .cidr import plan_subnets
from .errors import PlanningError
from .graph_builder import build_graph, validate_topology
from .models import NetworkSpec, TopologyGraph, Zone
from .naming import annotate_graph
from .zones import StaticZoneDirectory, ZoneDirectory

logger = logging.getLogger(__name__)


def build_topology(spec: NetworkSpec, zones: Sequence[Zone]) -> TopologyGraph:
    """Plan against an already-resolved zone list."""
    validate_topology(spec)
    subnet_plans = plan_subnets(spec, zones)
    graph = build_graph(spec, subnet_plans)
    return annotate_graph(graph, spec.ecosystem, spec.timestamp, spec.description, spec.extra_tags)


def plan_topology(spec: NetworkSpec, directory: Optional[ZoneDirectory] = None) -> TopologyGraph:
    """Resolve zones once, then build the fully tagged graph."""
    directory = directory or StaticZoneDirectory()
    start_time = time.time()

    try:
        zones = directory.resolve_zones(spec.region)
        graph = build_topology(spec, zones)
    except PlanningError as e:
        METRICS["plans_total"].labels(outcome=type(e).__name__).inc()
        logger.error(f"Planning failed for {spec.instance}: {e}")
        raise

    duration_ms = (time.time() - start_time) * 1000
    METRICS["plans_total"].labels(outcome="success").inc()
    METRICS["planning_latency"].observe(duration_ms)
    for node in graph.nodes:
        METRICS["nodes_emitted"].labels(kind=node.kind.value).inc()

    logger.info(
        f"Planned {spec.instance}: {len(graph)} nodes, {len(graph.edges)} edges "
        f"across {len(zones)} zones in {duration_ms:.2f}ms"
    )
    return graph
