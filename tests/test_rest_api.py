from fastapi.testclient import TestClient
import pytest

from vpc_planner.api import rest_api_server
from vpc_planner.api.rest_api_server import app, get_diagnostics
from vpc_planner.diagnostic_logger import DiagnosticLogger

client = TestClient(app)


@pytest.fixture
def plan_request():
    return {
        "cidr_block": "10.0.0.0/16",
        "subnet_bits": 4,
        "private_count": 2,
        "public_count": 2,
        "create_private_gateway": True,
        "ecosystem": "billing",
        "timestamp": "20240101",
        "description": "billing platform",
        "region": "eu-west-1",
    }


def test_health():
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_metrics_exposed(plan_request):
    client.post("/plans", json=plan_request)
    response = client.get("/metrics")
    assert response.status_code == 200
    assert "planner_plans_total" in response.text
    assert "planner_api_requests_total" in response.text


def test_list_zones():
    response = client.get("/regions/eu-west-1/zones")
    assert response.status_code == 200
    assert [z["name"] for z in response.json()] == ["eu-west-1a", "eu-west-1b", "eu-west-1c"]
    assert response.json()[1]["suffix"] == "b"


def test_list_zones_unknown_region():
    response = client.get("/regions/mars-north-1/zones")
    assert response.status_code == 404


def test_create_plan(plan_request):
    response = client.post("/plans", json=plan_request)
    assert response.status_code == 200
    data = response.json()

    nodes = data["graph"]["nodes"]
    assert len(nodes) == 17
    assert sorted(data["order"]) == list(range(17))
    assert data["validation"]["passed"]

    position = {index: i for i, index in enumerate(data["order"])}
    for before, after in data["graph"]["edges"]:
        assert position[before] < position[after]

    subnets = [n for n in nodes if n["kind"] == "subnet"]
    assert [s["attributes"]["cidr_block"] for s in subnets] == [
        "10.0.0.0/20", "10.0.16.0/20", "10.0.32.0/20", "10.0.48.0/20",
    ]


def test_create_plan_with_explicit_zones(plan_request):
    plan_request.update(region="xx-test-1", zones=["xx-test-1a", "xx-test-1b"])
    response = client.post("/plans", json=plan_request)
    assert response.status_code == 200
    zones = [
        n["attributes"]["availability_zone"]
        for n in response.json()["graph"]["nodes"] if n["kind"] == "subnet"
    ]
    assert zones == ["xx-test-1a", "xx-test-1b", "xx-test-1a", "xx-test-1b"]


def test_create_plan_invalid_topology(plan_request):
    plan_request.update(create_public_gateway=False)
    response = client.post("/plans", json=plan_request)
    assert response.status_code == 422
    assert response.json()["detail"]["error"] == "InvalidTopologyError"


def test_create_plan_cidr_exhausted(plan_request):
    plan_request.update(cidr_block="10.0.0.0/24", subnet_bits=1, private_count=2, public_count=1)
    response = client.post("/plans", json=plan_request)
    assert response.status_code == 422
    assert response.json()["detail"]["error"] == "CidrExhaustionError"


def test_create_plan_unknown_region(plan_request):
    plan_request.update(region="mars-north-1")
    response = client.post("/plans", json=plan_request)
    assert response.status_code == 422
    assert response.json()["detail"]["error"] == "ZoneResolutionError"


def test_create_plan_rejects_negative_counts(plan_request):
    plan_request.update(private_count=-1)
    response = client.post("/plans", json=plan_request)
    assert response.status_code == 422


def test_render_terraform(plan_request):
    response = client.post("/plans/terraform", json=plan_request)
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/plain")
    assert 'region = "eu-west-1"' in response.text
    assert 'resource "aws_nat_gateway" "nat_gateway_0"' in response.text


def test_dry_run(plan_request):
    response = client.post("/plans/dry-run", json=plan_request)
    assert response.status_code == 200
    data = response.json()
    assert data["success"]
    assert len(data["actions_taken"]) == 17
    assert data["resource_ids"]["0"].startswith("vpc-")


def test_create_plan_requires_private_gateway_flag(plan_request):
    del plan_request["create_private_gateway"]
    response = client.post("/plans", json=plan_request)
    assert response.status_code == 422


def test_diagnostics_are_scoped_to_one_request(plan_request):
    created = []

    def recording_diagnostics():
        diagnostics = DiagnosticLogger(scope="test")
        created.append(diagnostics)
        yield diagnostics

    plan_request.update(cidr_block="10.0.0.0/24", subnet_bits=1, private_count=2, public_count=1)
    app.dependency_overrides[get_diagnostics] = recording_diagnostics
    try:
        for _ in range(3):
            assert client.post("/plans", json=plan_request).status_code == 422
    finally:
        app.dependency_overrides.pop(get_diagnostics, None)

    assert len(created) == 3
    assert [len(d.errors) for d in created] == [1, 1, 1]
    assert created[0].scope == "billing-20240101"
    assert not hasattr(rest_api_server, "diagnostic_logger")
