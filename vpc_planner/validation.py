# File: vpc_planner/validation.py
"""
Graph Validation

Static analysis of an emitted TopologyGraph before it is handed to an engine:
- CIDR overlap and containment
- Gateway / elastic IP counts
- NAT zone pairing
- Reference integrity
- Dependency cycles
"""

import ipaddress
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List

from vpc_planner.planner.errors import OrderingViolationError
from vpc_planner.planner.models import ResourceKind, TopologyGraph
from vpc_planner.planner.ordering import topological_order

# role name -> kinds allowed to fill it
ROLE_KINDS = {
    "vpc": {ResourceKind.VPC},
    "subnet": {ResourceKind.SUBNET},
    "internet_gateway": {ResourceKind.INTERNET_GATEWAY},
    "nat_gateway": {ResourceKind.NAT_GATEWAY},
    "allocation": {ResourceKind.ELASTIC_IP},
    "route_table": {ResourceKind.ROUTE_TABLE},
}


class ValidationSeverity(Enum):
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


@dataclass
class ValidationResult:
    """Result of a single validation check."""
    name: str
    passed: bool
    severity: ValidationSeverity
    message: str
    details: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "passed": self.passed,
            "severity": self.severity.value,
            "message": self.message,
            "details": self.details,
        }


@dataclass
class ValidationReport:
    """Full validation report."""
    passed: bool
    errors: int
    warnings: int
    results: List[ValidationResult]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "passed": self.passed,
            "errors": self.errors,
            "warnings": self.warnings,
            "results": [r.to_dict() for r in self.results],
        }


class GraphValidator:
    """Runs every check against a graph and collects the results."""

    def __init__(self):
        self.validators = [
            self._validate_references,
            self._validate_acyclic,
            self._validate_cidr_overlap,
            self._validate_cidr_containment,
            self._validate_gateway_counts,
            self._validate_nat_zone_pairing,
        ]

    def validate_all(self, graph: TopologyGraph) -> ValidationReport:
        results = []

        for validator in self.validators:
            try:
                results.append(validator(graph))
            except (KeyError, IndexError, ValueError) as e:
                results.append(ValidationResult(
                    name=validator.__name__.lstrip("_"),
                    passed=False,
                    severity=ValidationSeverity.ERROR,
                    message=f"Validator exception: {e}",
                ))

        errors = sum(1 for r in results if not r.passed and r.severity == ValidationSeverity.ERROR)
        warnings = sum(1 for r in results if not r.passed and r.severity == ValidationSeverity.WARNING)

        return ValidationReport(
            passed=errors == 0,
            errors=errors,
            warnings=warnings,
            results=results,
        )

    def _validate_references(self, graph: TopologyGraph) -> ValidationResult:
        """Every ref/depends_on points at an existing node of the right kind."""
        issues = []
        for node in graph.nodes:
            for role, target in node.refs.items():
                if not 0 <= target < len(graph):
                    issues.append(f"{node.key}.{role} -> missing node {target}")
                elif role in ROLE_KINDS and graph.node(target).kind not in ROLE_KINDS[role]:
                    issues.append(f"{node.key}.{role} -> {graph.node(target).kind.value}")
            for target in node.depends_on:
                if not 0 <= target < len(graph):
                    issues.append(f"{node.key} depends on missing node {target}")

        return ValidationResult(
            name="references",
            passed=not issues,
            severity=ValidationSeverity.ERROR if issues else ValidationSeverity.INFO,
            message="All references resolve" if not issues else f"Broken references: {issues}",
        )

    def _validate_acyclic(self, graph: TopologyGraph) -> ValidationResult:
        try:
            order = topological_order(graph)
        except OrderingViolationError as e:
            return ValidationResult(
                name="dependency_cycles",
                passed=False,
                severity=ValidationSeverity.ERROR,
                message=str(e),
            )
        return ValidationResult(
            name="dependency_cycles",
            passed=True,
            severity=ValidationSeverity.INFO,
            message="Dependency graph is acyclic",
            details={"order_length": len(order)},
        )

    def _validate_cidr_overlap(self, graph: TopologyGraph) -> ValidationResult:
        """Check for overlapping subnet blocks."""
        subnets = [
            (n.key, ipaddress.ip_network(n.attributes["cidr_block"]))
            for n in graph.nodes_of_kind(ResourceKind.SUBNET)
        ]
        overlaps = []
        for i, (key_a, net_a) in enumerate(subnets):
            for key_b, net_b in subnets[i + 1:]:
                if net_a.version == net_b.version and net_a.overlaps(net_b):
                    overlaps.append(f"{key_a} ({net_a}) / {key_b} ({net_b})")

        return ValidationResult(
            name="cidr_overlap",
            passed=not overlaps,
            severity=ValidationSeverity.ERROR if overlaps else ValidationSeverity.INFO,
            message="No CIDR overlaps detected" if not overlaps else f"Overlaps: {overlaps}",
            details={"subnet_count": len(subnets)},
        )

    def _validate_cidr_containment(self, graph: TopologyGraph) -> ValidationResult:
        """Every subnet lies inside the VPC block."""
        outside = []
        for vpc in graph.nodes_of_kind(ResourceKind.VPC):
            vpc_net = ipaddress.ip_network(vpc.attributes["cidr_block"])
            for subnet in graph.nodes_of_kind(ResourceKind.SUBNET):
                if subnet.refs.get("vpc") != vpc.index:
                    continue
                net = ipaddress.ip_network(subnet.attributes["cidr_block"])
                if net.version != vpc_net.version or not net.subnet_of(vpc_net):
                    outside.append(f"{subnet.key} ({net}) not in {vpc_net}")

        return ValidationResult(
            name="cidr_containment",
            passed=not outside,
            severity=ValidationSeverity.ERROR if outside else ValidationSeverity.INFO,
            message="All subnets inside the VPC block" if not outside else f"Outside: {outside}",
        )

    def _validate_gateway_counts(self, graph: TopologyGraph) -> ValidationResult:
        igws = graph.count(ResourceKind.INTERNET_GATEWAY)
        nats = graph.count(ResourceKind.NAT_GATEWAY)
        eips = graph.count(ResourceKind.ELASTIC_IP)
        private = sum(
            1 for n in graph.nodes_of_kind(ResourceKind.SUBNET)
            if n.attributes.get("subnet_kind") == "private"
        )

        issues = []
        if igws > 1:
            issues.append(f"{igws} internet gateways (max 1)")
        if nats != eips:
            issues.append(f"{nats} NAT gateways but {eips} elastic IPs")
        if nats > private:
            issues.append(f"{nats} NAT gateways for {private} private subnets")
        if nats and not igws:
            issues.append("NAT gateways without an internet gateway")

        return ValidationResult(
            name="gateway_counts",
            passed=not issues,
            severity=ValidationSeverity.ERROR if issues else ValidationSeverity.INFO,
            message="Gateway counts consistent" if not issues else f"Issues: {issues}",
            details={"internet_gateways": igws, "nat_gateways": nats, "elastic_ips": eips},
        )

    def _validate_nat_zone_pairing(self, graph: TopologyGraph) -> ValidationResult:
        """NAT gateways should share the zone of the private subnet they serve."""
        cross_zone = []
        for assoc in graph.nodes_of_kind(ResourceKind.ROUTE_TABLE_ASSOCIATION):
            private_subnet = graph.node(assoc.refs["subnet"])
            route = next(
                (n for n in graph.nodes_of_kind(ResourceKind.ROUTE)
                 if n.refs.get("route_table") == assoc.refs["route_table"]),
                None,
            )
            if route is None or "nat_gateway" not in route.refs:
                continue
            nat = graph.node(route.refs["nat_gateway"])
            nat_zone = graph.node(nat.refs["subnet"]).attributes["availability_zone"]
            if nat_zone != private_subnet.attributes["availability_zone"]:
                cross_zone.append(
                    f"{private_subnet.key} in {private_subnet.attributes['availability_zone']} "
                    f"routes via {nat.key} in {nat_zone}"
                )

        return ValidationResult(
            name="nat_zone_pairing",
            passed=not cross_zone,
            severity=ValidationSeverity.WARNING if cross_zone else ValidationSeverity.INFO,
            message="NAT gateways are zone-local" if not cross_zone else f"Cross-zone NAT: {cross_zone}",
        )


def validate_graph(graph: TopologyGraph) -> ValidationReport:
    return GraphValidator().validate_all(graph)


def format_report(report: ValidationReport) -> str:
    lines = [
        "=" * 60,
        "Validation Report",
        "=" * 60,
        f"Status: {'PASSED' if report.passed else 'FAILED'}",
        f"Errors: {report.errors}",
        f"Warnings: {report.warnings}",
        "",
        "Details:",
    ]
    for result in report.results:
        status = "✓" if result.passed else "✗"
        lines.append(f"  {status} {result.name}: {result.message}")
    return "\n".join(lines)


def validate_spec_file(spec_path: str) -> ValidationReport:
    """Plan a YAML network spec and validate the resulting graph."""
    from vpc_planner import config
    from vpc_planner.planner.plan import plan_topology

    spec = config.load_network_spec(spec_path)
    graph = plan_topology(spec, config.get_zone_directory())
    return validate_graph(graph)


if __name__ == "__main__":
    import sys

    if len(sys.argv) < 2:
        print("Usage: python -m vpc_planner.validation <network.yaml>")
        sys.exit(1)

    report = validate_spec_file(sys.argv[1])
    print(format_report(report))
    sys.exit(0 if report.passed else 1)
