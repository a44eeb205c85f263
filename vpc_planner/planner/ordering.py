# File: vpc_planner/planner/ordering.py
"""
Ordering helpers over a TopologyGraph.

An engine applying the graph must create nodes in an order that respects every
edge. Resources attached to a subnet (compute, endpoints, ...) must also wait
for that subnet's readiness gate: for a private subnet with NAT egress this is
the whole NAT chain of its ordinal, since instances booting before the default
route exists cannot reach the outside world.
"""

import heapq
from typing import Dict, Iterable, List, Set, Tuple

from .errors import OrderingViolationError
from .models import ResourceKind, TopologyGraph


def topological_order(graph: TopologyGraph) -> List[int]:
    """Kahn's algorithm; ties broken by lowest index so the order is deterministic."""
    indegree = {node.index: 0 for node in graph.nodes}
    for _, after in graph.edges:
        indegree[after] += 1

    adjacency = graph.adjacency()
    ready = [index for index, degree in indegree.items() if degree == 0]
    heapq.heapify(ready)

    order = []
    while ready:
        index = heapq.heappop(ready)
        order.append(index)
        for successor in adjacency[index]:
            indegree[successor] -= 1
            if indegree[successor] == 0:
                heapq.heappush(ready, successor)

    if len(order) != len(graph.nodes):
        stuck = sorted(i for i, degree in indegree.items() if degree > 0)
        raise OrderingViolationError(f"Dependency cycle among nodes {stuck}")
    return order


def check_order(graph: TopologyGraph, order: Iterable[int]) -> None:
    """
    Raise OrderingViolationError unless `order` lists every node exactly once
    and never schedules a node before one of its dependencies.
    """
    order = list(order)
    out_of_range = sorted({i for i in order if not 0 <= i < len(graph)})
    duplicated = sorted({i for i in order if order.count(i) > 1})
    missing = sorted(set(range(len(graph))) - set(order))
    problems = [
        f"{label} {indices}"
        for label, indices in (
            ("missing", missing), ("duplicated", duplicated), ("out of range", out_of_range)
        )
        if indices
    ]
    if problems:
        raise OrderingViolationError(
            f"Order must list each of the {len(graph)} nodes exactly once: {'; '.join(problems)}"
        )

    seen: Set[int] = set()
    for index in order:
        missing = [d for d in graph.node(index).dependencies if d not in seen]
        if missing:
            raise OrderingViolationError(
                f"{graph.node(index).key} scheduled before its dependencies "
                f"{[graph.node(d).key for d in missing]}"
            )
        seen.add(index)


def ancestors(graph: TopologyGraph, indices: Iterable[int]) -> Set[int]:
    """The given nodes plus everything they transitively depend on."""
    pending = list(indices)
    found: Set[int] = set()
    while pending:
        index = pending.pop()
        if index in found:
            continue
        found.add(index)
        pending.extend(graph.node(index).dependencies)
    return found


def nat_chain(graph: TopologyGraph, ordinal: int) -> Tuple[int, ...]:
    """EIP, NAT gateway, route table, route and association for one private ordinal."""
    keys = (
        f"elastic_ip[{ordinal}]",
        f"nat_gateway[{ordinal}]",
        f"route_table.private[{ordinal}]",
        f"route.private[{ordinal}]",
        f"route_table_association.private[{ordinal}]",
    )
    by_key = {node.key: node.index for node in graph.nodes}
    return tuple(by_key[key] for key in keys if key in by_key)


def readiness_gates(graph: TopologyGraph) -> Dict[int, Tuple[int, ...]]:
    """
    Map each subnet node to the nodes that must report success before anything
    attached to that subnet is created.
    """
    public_route = [
        n.index for n in graph.nodes_of_kind(ResourceKind.ROUTE)
        if n.attributes.get("route_scope") == "public"
    ]

    gates = {}
    for subnet in graph.nodes_of_kind(ResourceKind.SUBNET):
        terminals = [subnet.index]
        if subnet.attributes.get("subnet_kind") == "private":
            terminals.extend(nat_chain(graph, subnet.attributes["ordinal"]))
        else:
            terminals.extend(public_route)
        gates[subnet.index] = tuple(sorted(ancestors(graph, terminals)))
    return gates
