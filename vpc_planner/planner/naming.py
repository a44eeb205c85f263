# File: vpc_planner/planner/naming.py
"""
Naming/Tagging Formatter

Every node carries four tags:
- Name:     deterministic resource name, with ordinal and zone suffix where
            the resource belongs to a zone
- Class:    the raw ecosystem identifier
- Instance: "{ecosystem}-{timestamp}"
- Desc:     human-readable sentence
"""

from dataclasses import replace
from typing import Dict, Optional

from .models import ResourceKind, ResourceNode, TopologyGraph, zone_suffix

_LABELS = {
    ResourceKind.ELASTIC_IP: ("nat-eip", "Elastic IP for NAT gateway"),
    ResourceKind.NAT_GATEWAY: ("nat", "NAT gateway"),
    ResourceKind.ROUTE_TABLE: ("private-rt", "Private route table"),
    ResourceKind.ROUTE_TABLE_ASSOCIATION: ("private-rta", "Private route table association"),
}


def _name_and_sentence(node: ResourceNode, instance: str):
    attrs = node.attributes
    kind = node.kind

    if kind is ResourceKind.VPC:
        return f"{instance}-vpc", f"VPC {attrs.get('cidr_block', '')}".rstrip()
    if kind is ResourceKind.INTERNET_GATEWAY:
        return f"{instance}-igw", "Internet gateway"
    if kind is ResourceKind.ROUTE and attrs.get("route_scope") == "public":
        return f"{instance}-public-route", "Default public route via the internet gateway"

    ordinal = attrs.get("ordinal", 0)
    zone = attrs.get("availability_zone", "")
    position = f"{ordinal:02d}-{zone_suffix(zone)}"

    if kind is ResourceKind.SUBNET:
        subnet_kind = attrs.get("subnet_kind", "private")
        return (
            f"{instance}-{subnet_kind}-{position}",
            f"{subnet_kind.capitalize()} subnet {ordinal:02d} in {zone}",
        )
    if kind is ResourceKind.ROUTE:
        return (
            f"{instance}-private-route-{position}",
            f"Default private route {ordinal:02d} via NAT gateway in {zone}",
        )

    slug, label = _LABELS[kind]
    return f"{instance}-{slug}-{position}", f"{label} {ordinal:02d} in {zone}"


def annotate(
    node: ResourceNode,
    ecosystem: str,
    timestamp: str,
    description: str = "",
    extra_tags: Optional[Dict[str, str]] = None,
) -> Dict[str, str]:
    """Return the tag set for `node`. Pure; same inputs, same tags."""
    instance = f"{ecosystem}-{timestamp}"
    name, sentence = _name_and_sentence(node, instance)
    if description:
        sentence = f"{sentence} for {description}"

    tags = dict(extra_tags or {})
    tags.update({
        "Name": name,
        "Class": ecosystem,
        "Instance": instance,
        "Desc": sentence,
    })
    return tags


def annotate_graph(
    graph: TopologyGraph,
    ecosystem: str,
    timestamp: str,
    description: str = "",
    extra_tags: Optional[Dict[str, str]] = None,
) -> TopologyGraph:
    nodes = tuple(
        replace(node, tags=annotate(node, ecosystem, timestamp, description, extra_tags))
        for node in graph.nodes
    )
    return TopologyGraph(nodes=nodes, edges=graph.edges)
