# File: vpc_planner/planner/cidr.py
"""
CIDR Allocator

Fixed binary subdivision of the VPC block: the block is split into
2**bit_width equal blocks and block i goes to the i-th subnet in allocation
order. Private subnets take indices 0..P-1, public subnets P..P+Q-1.
"""

import ipaddress
from typing import List, Sequence

from .errors import CidrExhaustionError
from .models import NetworkSpec, SubnetKind, SubnetPlan, Zone
from .placement import place


def subdivide(base_cidr: str, bit_width: int, index: int) -> str:
    """Return block `index` of `base_cidr` split by `bit_width` extra prefix bits."""
    network = ipaddress.ip_network(base_cidr)
    new_prefix = network.prefixlen + bit_width
    if new_prefix > network.max_prefixlen:
        raise CidrExhaustionError(
            f"Cannot extend /{network.prefixlen} by {bit_width} bits "
            f"(max prefix /{network.max_prefixlen})"
        )
    if not 0 <= index < 2 ** bit_width:
        raise CidrExhaustionError(f"Block {index} is outside {base_cidr} split into {2 ** bit_width}")

    block_size = 2 ** (network.max_prefixlen - new_prefix)
    address = network.network_address + index * block_size
    return str(ipaddress.ip_network(f"{address}/{new_prefix}"))


def allocate(base_cidr: str, bit_width: int, private_count: int, public_count: int) -> List[str]:
    """
    Allocate one block per subnet, private subnets first.

    Raises CidrExhaustionError when the subdivision cannot hold
    private_count + public_count blocks.
    """
    if bit_width < 0 or private_count < 0 or public_count < 0:
        raise ValueError("bit_width and subnet counts must be non-negative")

    network = ipaddress.ip_network(base_cidr)
    if network.prefixlen + bit_width > network.max_prefixlen:
        raise CidrExhaustionError(
            f"{base_cidr} cannot be subdivided by {bit_width} bits "
            f"(max prefix /{network.max_prefixlen})"
        )

    total = private_count + public_count
    capacity = 2 ** bit_width
    if total > capacity:
        raise CidrExhaustionError(
            f"{total} subnets requested but {base_cidr} split by {bit_width} bits "
            f"only holds {capacity}"
        )

    return [subdivide(base_cidr, bit_width, i) for i in range(total)]


def plan_subnets(spec: NetworkSpec, zones: Sequence[Zone]) -> List[SubnetPlan]:
    """Join allocation and placement by index; private plans come first."""
    blocks = allocate(spec.cidr_block, spec.subnet_bits, spec.private_count, spec.public_count)

    plans = []
    for ordinal in range(spec.private_count):
        plans.append(SubnetPlan(
            kind=SubnetKind.PRIVATE,
            ordinal=ordinal,
            global_ordinal=ordinal,
            cidr_block=blocks[ordinal],
            zone=place(ordinal, zones),
        ))
    for ordinal in range(spec.public_count):
        global_ordinal = spec.private_count + ordinal
        plans.append(SubnetPlan(
            kind=SubnetKind.PUBLIC,
            ordinal=ordinal,
            global_ordinal=global_ordinal,
            cidr_block=blocks[global_ordinal],
            zone=place(ordinal, zones),
        ))
    return plans
