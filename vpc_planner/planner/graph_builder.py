# File: vpc_planner/planner/graph_builder.py
"""
Topology Graph Builder

Composes the VPC, subnets, gateways, elastic IPs, route tables, routes and
associations into one TopologyGraph. Feature flags switch whole subgraphs on or
off; ordering constraints become explicit edges.

Emission order:
1. VPC
2. Subnets (private, then public)
3. Internet gateway + public default route   (create_public_gateway)
4. Per private ordinal: EIP, NAT gateway, route table, default route,
   association                                (create_private_gateway)
"""

import ipaddress
import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .errors import InvalidTopologyError
from .models import (
    NetworkSpec,
    ResourceKind,
    ResourceNode,
    SubnetKind,
    SubnetPlan,
    TopologyGraph,
)

logger = logging.getLogger(__name__)

DEFAULT_ROUTE = "0.0.0.0/0"
DEFAULT_IPV6_ROUTE = "::/0"


def validate_topology(spec: NetworkSpec) -> None:
    """Reject flag/count combinations that cannot be provisioned."""
    if spec.create_private_gateway and not spec.create_public_gateway:
        raise InvalidTopologyError(
            "create_private_gateway requires create_public_gateway: "
            "NAT gateways need an internet gateway as their upstream path"
        )
    if spec.create_private_gateway and spec.private_count > 0 and spec.public_count == 0:
        raise InvalidTopologyError(
            f"{spec.private_count} private subnets need NAT gateways but there are "
            f"no public subnets to place them in"
        )


def default_route(cidr_block: str) -> str:
    """Default route of the VPC's address family."""
    if ipaddress.ip_network(cidr_block).version == 6:
        return DEFAULT_IPV6_ROUTE
    return DEFAULT_ROUTE


def paired_public_ordinal(private_ordinal: int, public_count: int) -> int:
    """Public subnet hosting the NAT gateway for a private ordinal."""
    return private_ordinal % public_count


class _GraphAccumulator:
    """Hands out indices in emission order."""

    def __init__(self):
        self.nodes: List[ResourceNode] = []

    def add(
        self,
        kind: ResourceKind,
        key: str,
        attributes: Optional[Dict[str, Any]] = None,
        refs: Optional[Dict[str, int]] = None,
        depends_on: Tuple[int, ...] = (),
    ) -> int:
        index = len(self.nodes)
        self.nodes.append(ResourceNode(
            index=index,
            kind=kind,
            key=key,
            attributes=attributes or {},
            refs=refs or {},
            depends_on=tuple(depends_on),
        ))
        return index


def build_graph(spec: NetworkSpec, subnet_plans: Sequence[SubnetPlan]) -> TopologyGraph:
    """Build the untagged resource graph for `spec` from its subnet plans."""
    validate_topology(spec)

    graph = _GraphAccumulator()

    vpc = graph.add(ResourceKind.VPC, "vpc", {
        "cidr_block": spec.cidr_block,
        "enable_dns_support": spec.enable_dns_support,
        "enable_dns_hostnames": spec.enable_dns_hostnames,
        "instance_tenancy": "default",
    })

    private_subnets: List[int] = []
    public_subnets: List[int] = []
    ordered_plans = sorted(subnet_plans, key=lambda p: p.global_ordinal)
    for plan in ordered_plans:
        index = graph.add(
            ResourceKind.SUBNET,
            f"subnet.{plan.kind.value}[{plan.ordinal}]",
            {
                "subnet_kind": plan.kind.value,
                "ordinal": plan.ordinal,
                "global_ordinal": plan.global_ordinal,
                "cidr_block": plan.cidr_block,
                "availability_zone": plan.zone.name,
                "map_public_ip_on_launch": plan.map_public_ip_on_launch,
            },
            refs={"vpc": vpc},
        )
        if plan.kind is SubnetKind.PRIVATE:
            private_subnets.append(index)
        else:
            public_subnets.append(index)

    igw = None
    if spec.create_public_gateway:
        igw = graph.add(ResourceKind.INTERNET_GATEWAY, "internet_gateway", refs={"vpc": vpc})
        graph.add(
            ResourceKind.ROUTE,
            "route.public",
            {
                "route_scope": "public",
                "route_table": "main",
                "destination_cidr_block": default_route(spec.cidr_block),
            },
            refs={"vpc": vpc, "internet_gateway": igw},
        )

    if spec.create_private_gateway:
        for ordinal, private_subnet in enumerate(private_subnets):
            public_ordinal = paired_public_ordinal(ordinal, len(public_subnets))
            public_subnet = public_subnets[public_ordinal]
            zone = graph.nodes[public_subnet].attributes["availability_zone"]
            private_zone = graph.nodes[private_subnet].attributes["availability_zone"]
            if zone != private_zone:
                logger.warning(
                    f"NAT gateway {ordinal} sits in {zone} (public subnet {public_ordinal}) "
                    f"but private subnet {ordinal} is in {private_zone}"
                )
            _add_nat_chain(
                graph, vpc, igw, ordinal, private_subnet, public_subnet, zone,
                default_route(spec.cidr_block),
            )

    logger.debug(f"Built graph with {len(graph.nodes)} nodes for {spec.cidr_block}")
    return TopologyGraph.from_nodes(graph.nodes)


def _add_nat_chain(
    graph: _GraphAccumulator,
    vpc: int,
    igw: int,
    ordinal: int,
    private_subnet: int,
    public_subnet: int,
    zone: str,
    destination: str,
) -> None:
    """EIP -> NAT -> route table -> route -> association, all gated on the IGW."""
    common = {"ordinal": ordinal, "availability_zone": zone}

    eip = graph.add(
        ResourceKind.ELASTIC_IP,
        f"elastic_ip[{ordinal}]",
        dict(common, domain="vpc"),
        depends_on=(igw,),
    )
    nat = graph.add(
        ResourceKind.NAT_GATEWAY,
        f"nat_gateway[{ordinal}]",
        dict(common, connectivity_type="public"),
        refs={"allocation": eip, "subnet": public_subnet},
        depends_on=(igw, eip),
    )
    route_table = graph.add(
        ResourceKind.ROUTE_TABLE,
        f"route_table.private[{ordinal}]",
        dict(common, route_scope="private"),
        refs={"vpc": vpc},
        depends_on=(igw,),
    )
    graph.add(
        ResourceKind.ROUTE,
        f"route.private[{ordinal}]",
        dict(common, route_scope="private", destination_cidr_block=destination),
        refs={"route_table": route_table, "nat_gateway": nat},
        depends_on=(igw,),
    )
    graph.add(
        ResourceKind.ROUTE_TABLE_ASSOCIATION,
        f"route_table_association.private[{ordinal}]",
        dict(common),
        refs={"subnet": private_subnet, "route_table": route_table},
        depends_on=(igw,),
    )
