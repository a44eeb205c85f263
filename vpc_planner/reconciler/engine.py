#!/usr/bin/env python3
"""
Dry-run Apply Engine

Reference implementation of the engine side of the hand-off: walks a
TopologyGraph in dependency order and "creates" each node through a provider.
No real cloud calls are made; the default provider only mints identifiers.

Implements:
- Dependency-ordered creation
- Idempotent create (same key -> same identifier)
- Retry of transient provider failures
- Halt on ordering violations
"""

import hashlib
import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Optional, Sequence

from vpc_planner.metrics import METRICS
from vpc_planner.planner.errors import OrderingViolationError
from vpc_planner.planner.models import ResourceKind, ResourceNode, TopologyGraph
from vpc_planner.planner.ordering import check_order, topological_order

logger = logging.getLogger(__name__)

ID_PREFIXES = {
    ResourceKind.VPC: "vpc",
    ResourceKind.SUBNET: "subnet",
    ResourceKind.INTERNET_GATEWAY: "igw",
    ResourceKind.NAT_GATEWAY: "nat",
    ResourceKind.ELASTIC_IP: "eipalloc",
    ResourceKind.ROUTE_TABLE: "rtb",
    ResourceKind.ROUTE: "r",
    ResourceKind.ROUTE_TABLE_ASSOCIATION: "rtbassoc",
}


class TransientProviderError(Exception):
    """A provider failure that is safe to retry."""


class ActionType(Enum):
    CREATE = "create"


@dataclass
class ApplyAction:
    """Represents a single create attempt for one node."""

    action_type: ActionType
    node_index: int
    resource_kind: ResourceKind
    key: str
    resource_id: Optional[str] = None
    retries: int = 0
    max_retries: int = 3

    def to_dict(self):
        return {
            "action_type": self.action_type.value,
            "node_index": self.node_index,
            "resource_kind": self.resource_kind.value,
            "key": self.key,
            "resource_id": self.resource_id,
            "retries": self.retries,
        }


@dataclass
class ApplyResult:
    """Result of one apply run."""

    success: bool
    actions_taken: List[ApplyAction] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    resource_ids: Dict[int, str] = field(default_factory=dict)
    duration_ms: float = 0

    def to_dict(self):
        return {
            "success": self.success,
            "actions_taken": [a.to_dict() for a in self.actions_taken],
            "errors": list(self.errors),
            "resource_ids": {str(k): v for k, v in self.resource_ids.items()},
            "duration_ms": self.duration_ms,
        }


class InMemoryProvider:
    """
    Provider that records resources in a dict.

    Creating the same key twice returns the identifier minted the first time,
    which makes retries and repeated applies idempotent.
    """

    def __init__(self):
        self.resources: Dict[str, Dict] = {}

    def __call__(self, node: ResourceNode, resolved_refs: Dict[str, str]) -> str:
        existing = self.resources.get(node.key)
        if existing:
            return existing["id"]

        digest = hashlib.sha1(node.key.encode("utf-8")).hexdigest()[:8]
        resource_id = f"{ID_PREFIXES[node.kind]}-{digest}"
        self.resources[node.key] = {
            "id": resource_id,
            "kind": node.kind.value,
            "refs": dict(resolved_refs),
            "tags": dict(node.tags),
        }
        return resource_id


Provider = Callable[[ResourceNode, Dict[str, str]], str]


class ApplyEngine:
    """
    Creates graph nodes strictly after their dependencies.

    An explicit `order` is checked against the graph's edges first; a violating
    order halts the run before anything is created.
    """

    def __init__(self, provider: Optional[Provider] = None, max_retries: int = 3):
        self.provider = provider or InMemoryProvider()
        self.max_retries = max_retries

    def apply(self, graph: TopologyGraph, order: Optional[Sequence[int]] = None) -> ApplyResult:
        start_time = time.time()
        result = ApplyResult(success=True)

        try:
            if order is None:
                order = topological_order(graph)
            else:
                order = list(order)
                check_order(graph, order)
        except OrderingViolationError as e:
            result.success = False
            result.errors.append(str(e))
            logger.error(f"Apply halted: {e}")
            return self._finish(result, start_time)

        for index in order:
            node = graph.node(index)
            action = ApplyAction(
                action_type=ActionType.CREATE,
                node_index=index,
                resource_kind=node.kind,
                key=node.key,
                max_retries=self.max_retries,
            )
            if not self._execute_action(action, node, result):
                result.success = False
                # Later nodes may depend on this one; stop rather than guess.
                break
            result.actions_taken.append(action)

        return self._finish(result, start_time)

    def _execute_action(self, action: ApplyAction, node: ResourceNode, result: ApplyResult) -> bool:
        resolved_refs = {role: result.resource_ids[target] for role, target in node.refs.items()}

        while True:
            try:
                action.resource_id = self.provider(node, resolved_refs)
                result.resource_ids[node.index] = action.resource_id
                logger.debug(f"Created {node.key} as {action.resource_id}")
                return True
            except TransientProviderError as e:
                action.retries += 1
                if action.retries >= action.max_retries:
                    result.errors.append(f"Action failed permanently on {node.key}: {e}")
                    logger.error(f"Giving up on {node.key} after {action.retries} attempts: {e}")
                    return False
                result.errors.append(f"Action failed on {node.key}, will retry: {e}")
                logger.warning(f"Retrying {node.key} ({action.retries}/{action.max_retries}): {e}")

    def _finish(self, result: ApplyResult, start_time: float) -> ApplyResult:
        result.duration_ms = (time.time() - start_time) * 1000
        METRICS["apply_latency"].observe(result.duration_ms)
        for action in result.actions_taken:
            label = f"{action.action_type.value}_{action.resource_kind.value}"
            METRICS["apply_actions"].labels(action_type=label).inc()
        return result
