"""Tests for resource naming and tagging"""

from vpc_planner.planner.models import ResourceKind, ResourceNode
from vpc_planner.planner.naming import annotate
from vpc_planner.planner.plan import build_topology


def subnet_node(kind="private", ordinal=3, zone="eu-west-1b"):
    return ResourceNode(
        index=1,
        kind=ResourceKind.SUBNET,
        key=f"subnet.{kind}[{ordinal}]",
        attributes={"subnet_kind": kind, "ordinal": ordinal, "availability_zone": zone},
    )


def test_subnet_tags():
    tags = annotate(subnet_node(), "billing", "20240101", "billing platform")
    assert tags == {
        "Name": "billing-20240101-private-03-b",
        "Class": "billing",
        "Instance": "billing-20240101",
        "Desc": "Private subnet 03 in eu-west-1b for billing platform",
    }


def test_public_subnet_name():
    tags = annotate(subnet_node(kind="public", ordinal=0, zone="us-east-1d"), "web", "t1")
    assert tags["Name"] == "web-t1-public-00-d"
    assert tags["Desc"] == "Public subnet 00 in us-east-1d"


def test_annotate_is_deterministic():
    node = subnet_node()
    assert annotate(node, "a", "b", "c") == annotate(node, "a", "b", "c")


def test_extra_tags_do_not_override_standard_keys():
    tags = annotate(subnet_node(), "billing", "1", extra_tags={"Name": "x", "Team": "net"})
    assert tags["Name"] == "billing-1-private-03-b"
    assert tags["Team"] == "net"


def test_every_node_in_graph_is_tagged(make_spec, zones):
    graph = build_topology(make_spec(extra_tags={"Owner": "platform"}), zones)
    names = [n.tags["Name"] for n in graph.nodes]

    assert len(set(names)) == len(names)
    for node in graph.nodes:
        assert set(node.tags) == {"Name", "Class", "Instance", "Desc", "Owner"}
        assert node.tags["Class"] == "billing"
        assert node.tags["Instance"] == "billing-20240101"
        assert node.tags["Desc"].endswith("for billing platform")


def test_graph_names(make_spec, zones):
    graph = build_topology(make_spec(), zones)
    name = {n.key: n.tags["Name"] for n in graph.nodes}

    assert name["vpc"] == "billing-20240101-vpc"
    assert name["internet_gateway"] == "billing-20240101-igw"
    assert name["route.public"] == "billing-20240101-public-route"
    assert name["subnet.private[1]"] == "billing-20240101-private-01-b"
    assert name["subnet.public[0]"] == "billing-20240101-public-00-a"
    assert name["elastic_ip[1]"] == "billing-20240101-nat-eip-01-b"
    assert name["nat_gateway[0]"] == "billing-20240101-nat-00-a"
    assert name["route_table.private[0]"] == "billing-20240101-private-rt-00-a"
    assert name["route.private[1]"] == "billing-20240101-private-route-01-b"
    assert name["route_table_association.private[0]"] == "billing-20240101-private-rta-00-a"
