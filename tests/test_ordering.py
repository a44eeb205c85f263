"""Tests for dependency ordering and readiness gates"""

from dataclasses import replace

import pytest

from vpc_planner.planner.errors import OrderingViolationError
from vpc_planner.planner.models import TopologyGraph
from vpc_planner.planner.ordering import (
    check_order,
    nat_chain,
    readiness_gates,
    topological_order,
)
from vpc_planner.planner.plan import build_topology


@pytest.fixture
def graph(make_spec, zones):
    return build_topology(make_spec(), zones)


def test_topological_order_respects_every_edge(graph):
    order = topological_order(graph)
    position = {index: i for i, index in enumerate(order)}

    assert sorted(order) == list(range(len(graph)))
    for before, after in graph.edges:
        assert position[before] < position[after]


def test_topological_order_is_deterministic(graph):
    assert topological_order(graph) == topological_order(graph)


def test_check_order_accepts_topological_order(graph):
    check_order(graph, topological_order(graph))


def test_check_order_rejects_nat_before_eip(graph):
    order = topological_order(graph)
    eip = graph.find("elastic_ip[0]").index
    nat = graph.find("nat_gateway[0]").index
    order.remove(nat)
    order.insert(order.index(eip), nat)
    with pytest.raises(OrderingViolationError):
        check_order(graph, order)


@pytest.mark.parametrize("mutate, fragment", [
    (lambda order: order[:-1], "missing"),
    (lambda order: order + [order[-1]], "duplicated"),
    (lambda order: order[:-1] + [-1], "out of range"),
    (lambda order: order + [99], "out of range"),
])
def test_check_order_requires_every_node_once(graph, mutate, fragment):
    order = mutate(topological_order(graph))
    with pytest.raises(OrderingViolationError, match=fragment):
        check_order(graph, order)


def test_cycle_detected(graph):
    nodes = list(graph.nodes)
    nodes[0] = replace(nodes[0], depends_on=(len(nodes) - 1,))
    with pytest.raises(OrderingViolationError):
        topological_order(TopologyGraph.from_nodes(nodes))


def test_nat_chain(graph):
    chain = nat_chain(graph, 1)
    keys = [graph.node(i).key for i in chain]
    assert keys == [
        "elastic_ip[1]",
        "nat_gateway[1]",
        "route_table.private[1]",
        "route.private[1]",
        "route_table_association.private[1]",
    ]


def test_nat_chain_empty_without_private_gateway(make_spec, zones):
    graph = build_topology(make_spec(create_private_gateway=False), zones)
    assert nat_chain(graph, 0) == ()


def test_private_subnet_gate_covers_nat_chain(graph):
    gates = readiness_gates(graph)
    subnet = graph.find("subnet.private[0]").index
    gate = set(gates[subnet])

    assert subnet in gate
    assert set(nat_chain(graph, 0)) <= gate
    assert graph.find("internet_gateway").index in gate
    # the other ordinal's chain does not hold this subnet back
    assert not set(nat_chain(graph, 1)) & gate


def test_public_subnet_gate_covers_public_route(graph):
    gates = readiness_gates(graph)
    subnet = graph.find("subnet.public[1]").index
    gate = set(gates[subnet])
    assert graph.find("route.public").index in gate
    assert graph.find("internet_gateway").index in gate


def test_gates_without_gateways(make_spec, zones):
    graph = build_topology(make_spec(create_public_gateway=False, create_private_gateway=False), zones)
    vpc = graph.find("vpc").index
    for subnet, gate in readiness_gates(graph).items():
        assert gate == (vpc, subnet)


def test_readiness_serialized(graph):
    data = graph.to_dict()
    subnet = graph.find("subnet.private[0]").index
    assert data["readiness"][str(subnet)] == list(readiness_gates(graph)[subnet])
