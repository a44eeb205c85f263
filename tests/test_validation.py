"""Tests for graph validation"""

from dataclasses import replace

import pytest

from vpc_planner.planner.models import TopologyGraph
from vpc_planner.planner.plan import build_topology
from vpc_planner.validation import (
    GraphValidator,
    ValidationSeverity,
    format_report,
    validate_graph,
    validate_spec_file,
)


@pytest.fixture
def graph(make_spec, zones):
    return build_topology(make_spec(), zones)


def result(report, name):
    return next(r for r in report.results if r.name == name)


def with_node(graph, key, **changes):
    nodes = list(graph.nodes)
    node = graph.find(key)
    nodes[node.index] = replace(node, **changes)
    return TopologyGraph.from_nodes(nodes)


def test_planned_graph_passes(graph):
    report = validate_graph(graph)
    assert report.passed
    assert report.errors == 0
    assert report.warnings == 0
    assert len(report.results) == len(GraphValidator().validators)


def test_overlap_detected(graph):
    broken = with_node(
        graph,
        "subnet.public[0]",
        attributes=dict(graph.find("subnet.public[0]").attributes, cidr_block="10.0.0.0/20"),
    )
    report = validate_graph(broken)
    assert not report.passed
    assert not result(report, "cidr_overlap").passed


def test_subnet_outside_vpc_detected(graph):
    broken = with_node(
        graph,
        "subnet.public[1]",
        attributes=dict(graph.find("subnet.public[1]").attributes, cidr_block="192.168.0.0/24"),
    )
    assert not result(validate_graph(broken), "cidr_containment").passed


def test_wrong_reference_kind_detected(graph):
    broken = with_node(graph, "subnet.private[0]", refs={"vpc": graph.find("internet_gateway").index})
    assert not result(validate_graph(broken), "references").passed


def test_cross_zone_nat_is_a_warning(make_spec, zones):
    graph = build_topology(make_spec(private_count=3, public_count=2), zones)
    report = validate_graph(graph)
    pairing = result(report, "nat_zone_pairing")

    assert report.passed
    assert report.warnings == 1
    assert not pairing.passed
    assert pairing.severity == ValidationSeverity.WARNING


def test_gateway_counts_details(graph):
    details = result(validate_graph(graph), "gateway_counts").details
    assert details == {"internet_gateways": 1, "nat_gateways": 2, "elastic_ips": 2}


def test_format_report(graph):
    text = format_report(validate_graph(graph))
    assert "Status: PASSED" in text
    assert "cidr_overlap" in text


def test_validate_spec_file(tmp_path, monkeypatch):
    monkeypatch.delenv("PLANNER_ZONES_FILE", raising=False)
    path = tmp_path / "network.yaml"
    path.write_text(
        "cidr_block: 10.0.0.0/16\n"
        "subnet_bits: 4\n"
        "private_count: 2\n"
        "public_count: 2\n"
        "create_private_gateway: true\n"
        "ecosystem: billing\n"
        "timestamp: 20240101\n"
        "region: eu-west-1\n"
    )
    assert validate_spec_file(str(path)).passed
