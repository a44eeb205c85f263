# File: vpc_planner/planner/models.py
"""
Planner data model.

Inputs (NetworkSpec), resolved placement (Zone, SubnetPlan) and the emitted
resource graph (ResourceNode, TopologyGraph). Everything here is immutable once
constructed; nodes refer to each other by index only.
"""

import ipaddress
import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class SubnetKind(Enum):
    PRIVATE = "private"
    PUBLIC = "public"


class ResourceKind(Enum):
    VPC = "vpc"
    SUBNET = "subnet"
    INTERNET_GATEWAY = "internet_gateway"
    NAT_GATEWAY = "nat_gateway"
    ELASTIC_IP = "elastic_ip"
    ROUTE_TABLE = "route_table"
    ROUTE = "route"
    ROUTE_TABLE_ASSOCIATION = "route_table_association"


@dataclass(frozen=True)
class NetworkSpec:
    """Scalar inputs for one planning run."""

    cidr_block: str
    subnet_bits: int
    private_count: int
    public_count: int
    create_private_gateway: bool
    ecosystem: str
    timestamp: str
    description: str = ""
    create_public_gateway: bool = True
    region: Optional[str] = None
    enable_dns_support: bool = True
    enable_dns_hostnames: bool = True
    extra_tags: Dict[str, str] = field(default_factory=dict)

    def __post_init__(self):
        for name in ("subnet_bits", "private_count", "public_count"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"{name} must be an integer, got {value!r}")
            if value < 0:
                raise ValueError(f"{name} must be non-negative, got {value}")
        for name in ("create_private_gateway", "create_public_gateway",
                     "enable_dns_support", "enable_dns_hostnames"):
            value = getattr(self, name)
            if not isinstance(value, bool):
                raise ValueError(f"{name} must be a boolean, got {value!r}")
        # Raises ValueError for garbage or host bits set.
        ipaddress.ip_network(self.cidr_block)
        if not self.ecosystem:
            raise ValueError("ecosystem must not be empty")

    @property
    def subnet_count(self) -> int:
        return self.private_count + self.public_count

    @property
    def instance(self) -> str:
        return f"{self.ecosystem}-{self.timestamp}"


@dataclass(frozen=True)
class Zone:
    """An availability zone as returned by the zone directory."""

    name: str
    state: str = "available"

    @property
    def suffix(self) -> str:
        return zone_suffix(self.name)


def zone_suffix(name: str) -> str:
    """Trailing zone letter/number, e.g. 'eu-west-1a' -> 'a'."""
    return name[-1:] if name else ""


@dataclass(frozen=True)
class SubnetPlan:
    kind: SubnetKind
    ordinal: int
    global_ordinal: int
    cidr_block: str
    zone: Zone

    @property
    def map_public_ip_on_launch(self) -> bool:
        return self.kind is SubnetKind.PUBLIC


@dataclass(frozen=True)
class ResourceNode:
    """
    One resource in the topology graph.

    `refs` maps a role name (e.g. "vpc", "subnet", "nat_gateway") to the index
    of the node filling it; `depends_on` carries ordering-only edges.
    """

    index: int
    kind: ResourceKind
    key: str
    attributes: Dict[str, Any] = field(default_factory=dict)
    refs: Dict[str, int] = field(default_factory=dict)
    depends_on: Tuple[int, ...] = ()
    tags: Dict[str, str] = field(default_factory=dict)

    @property
    def dependencies(self) -> Tuple[int, ...]:
        """All indices that must exist before this node, sorted."""
        return tuple(sorted(set(self.refs.values()) | set(self.depends_on)))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "index": self.index,
            "kind": self.kind.value,
            "key": self.key,
            "attributes": dict(self.attributes),
            "refs": dict(self.refs),
            "depends_on": list(self.depends_on),
            "tags": dict(self.tags),
        }


@dataclass(frozen=True)
class TopologyGraph:
    """The hand-off artifact: ordered nodes plus must-exist-before edges."""

    nodes: Tuple[ResourceNode, ...]
    edges: Tuple[Tuple[int, int], ...] = ()

    @classmethod
    def from_nodes(cls, nodes: List[ResourceNode]) -> "TopologyGraph":
        for position, node in enumerate(nodes):
            if node.index != position:
                raise ValueError(f"node {node.key} has index {node.index}, expected {position}")
        edges = sorted({(before, node.index) for node in nodes for before in node.dependencies})
        return cls(nodes=tuple(nodes), edges=tuple(edges))

    def __len__(self) -> int:
        return len(self.nodes)

    def node(self, index: int) -> ResourceNode:
        return self.nodes[index]

    def find(self, key: str) -> ResourceNode:
        for node in self.nodes:
            if node.key == key:
                return node
        raise KeyError(key)

    def nodes_of_kind(self, kind: ResourceKind) -> List[ResourceNode]:
        return [n for n in self.nodes if n.kind is kind]

    def count(self, kind: ResourceKind) -> int:
        return len(self.nodes_of_kind(kind))

    def adjacency(self) -> Dict[int, List[int]]:
        """Successor lists keyed by node index (before -> [after, ...])."""
        adjacency = {node.index: [] for node in self.nodes}
        for before, after in self.edges:
            adjacency[before].append(after)
        return adjacency

    def to_dict(self) -> Dict[str, Any]:
        from .ordering import readiness_gates

        return {
            "nodes": [node.to_dict() for node in self.nodes],
            "edges": [list(edge) for edge in self.edges],
            "readiness": {
                str(index): list(gate) for index, gate in readiness_gates(self).items()
            },
        }

    def to_json(self, indent: Optional[int] = None) -> str:
        return json.dumps(self.to_dict(), sort_keys=True, indent=indent)
