#!/usr/bin/env python3
"""
Terraform Renderer

Renders a TopologyGraph into Terraform HCL for the AWS provider, so the graph
can be handed to `terraform plan/apply` as the external engine. Index-based
references become resource addresses and ordering-only edges become
`depends_on` lists.
"""

import ipaddress
import json
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from jinja2 import Template

from vpc_planner.planner.models import ResourceKind, ResourceNode, TopologyGraph

RESOURCE_TYPES = {
    ResourceKind.VPC: "aws_vpc",
    ResourceKind.SUBNET: "aws_subnet",
    ResourceKind.INTERNET_GATEWAY: "aws_internet_gateway",
    ResourceKind.NAT_GATEWAY: "aws_nat_gateway",
    ResourceKind.ELASTIC_IP: "aws_eip",
    ResourceKind.ROUTE_TABLE: "aws_route_table",
    ResourceKind.ROUTE: "aws_route",
    ResourceKind.ROUTE_TABLE_ASSOCIATION: "aws_route_table_association",
}

# Plain attributes copied into each block, in this order
RENDERED_ATTRIBUTES = {
    ResourceKind.VPC: ["cidr_block", "enable_dns_support", "enable_dns_hostnames", "instance_tenancy"],
    ResourceKind.SUBNET: ["cidr_block", "availability_zone", "map_public_ip_on_launch"],
    ResourceKind.INTERNET_GATEWAY: [],
    ResourceKind.NAT_GATEWAY: ["connectivity_type"],
    ResourceKind.ELASTIC_IP: ["domain"],
    ResourceKind.ROUTE_TABLE: [],
    ResourceKind.ROUTE: ["destination_cidr_block"],
    ResourceKind.ROUTE_TABLE_ASSOCIATION: [],
}

# ref role -> argument name
REFERENCE_ARGUMENTS = {
    "vpc": "vpc_id",
    "subnet": "subnet_id",
    "internet_gateway": "gateway_id",
    "nat_gateway": "nat_gateway_id",
    "allocation": "allocation_id",
    "route_table": "route_table_id",
}

# IPv6 blocks go to the provider's ipv6_* arguments
IPV6_ARGUMENTS = {
    "cidr_block": "ipv6_cidr_block",
    "destination_cidr_block": "destination_ipv6_cidr_block",
}

UNTAGGED = {ResourceKind.ROUTE, ResourceKind.ROUTE_TABLE_ASSOCIATION}

TERRAFORM_TEMPLATE = """
{%- if region %}
provider "aws" {
  region = {{ region }}
}
{% endif %}
{%- for block in blocks %}
resource "{{ block.type }}" "{{ block.name }}" {
{%- for name, value in block.arguments %}
  {{ name }} = {{ value }}
{%- endfor %}
{%- if block.tags %}

  tags = {
{%- for name, value in block.tags %}
    {{ name }} = {{ value }}
{%- endfor %}
  }
{%- endif %}
{%- if block.depends_on %}

  depends_on = [{{ block.depends_on | join(", ") }}]
{%- endif %}
}
{% endfor %}
"""


@dataclass
class ResourceBlock:
    type: str
    name: str
    arguments: List[Tuple[str, str]]
    tags: List[Tuple[str, str]]
    depends_on: List[str]


def hcl_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    return json.dumps(str(value))


def argument_name(name: str, value: Any) -> str:
    if name in IPV6_ARGUMENTS and ipaddress.ip_network(value).version == 6:
        return IPV6_ARGUMENTS[name]
    return name


def resource_name(node: ResourceNode) -> str:
    """'route_table.private[0]' -> 'route_table_private_0'"""
    return re.sub(r"_+", "_", re.sub(r"[^A-Za-z0-9_]", "_", node.key)).strip("_")


class TerraformRenderer:
    """Generates HCL from a planned graph."""

    def __init__(self):
        self.template = Template(TERRAFORM_TEMPLATE)

    def address(self, node: ResourceNode) -> str:
        return f"{RESOURCE_TYPES[node.kind]}.{resource_name(node)}"

    def build_block(self, graph: TopologyGraph, node: ResourceNode) -> ResourceBlock:
        arguments = []
        for role, target in node.refs.items():
            target_node = graph.node(target)
            if (node.kind is ResourceKind.ROUTE and role == "vpc"
                    and node.attributes.get("route_table") == "main"):
                arguments.append(("route_table_id", f"{self.address(target_node)}.main_route_table_id"))
            else:
                arguments.append((REFERENCE_ARGUMENTS[role], f"{self.address(target_node)}.id"))
        for name in RENDERED_ATTRIBUTES[node.kind]:
            if name in node.attributes:
                value = node.attributes[name]
                arguments.append((argument_name(name, value), hcl_value(value)))

        tags = []
        if node.kind not in UNTAGGED:
            tags = [(name, hcl_value(value)) for name, value in sorted(node.tags.items())]

        referenced = set(node.refs.values())
        depends_on = [
            self.address(graph.node(index))
            for index in node.depends_on
            if index not in referenced
        ]

        return ResourceBlock(
            type=RESOURCE_TYPES[node.kind],
            name=resource_name(node),
            arguments=arguments,
            tags=tags,
            depends_on=depends_on,
        )

    def render(self, graph: TopologyGraph, region: Optional[str] = None) -> str:
        blocks = [self.build_block(graph, node) for node in graph.nodes]
        return self.template.render(
            region=hcl_value(region) if region else None,
            blocks=blocks,
        ).strip() + "\n"

    def render_blocks(self, graph: TopologyGraph) -> Dict[str, ResourceBlock]:
        """Blocks keyed by resource address."""
        return {self.address(node): self.build_block(graph, node) for node in graph.nodes}
