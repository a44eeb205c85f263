# File: vpc_planner/api/rest_api_server.py
#!/usr/bin/env python3
"""
VPC Topology Planner REST API Server

FastAPI-based REST API in front of the planner:
- Zone lookup
- Planning (graph + apply order + validation report)
- Terraform rendering
- Dry-run apply
"""

import logging
import time
from typing import Dict, List, Optional

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.responses import PlainTextResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from pydantic import BaseModel, Field

from vpc_planner import config
from vpc_planner.diagnostic_logger import DiagnosticLogger
from vpc_planner.metrics import METRICS
from vpc_planner.planner.errors import PlanningError, ZoneResolutionError
from vpc_planner.planner.models import NetworkSpec, TopologyGraph
from vpc_planner.planner.ordering import topological_order
from vpc_planner.planner.plan import plan_topology
from vpc_planner.planner.zones import StaticZoneDirectory, ZoneDirectory
from vpc_planner.reconciler.engine import ApplyEngine
from vpc_planner.render.terraform import TerraformRenderer
from vpc_planner.validation import validate_graph

logger = logging.getLogger(__name__)

app = FastAPI(
    title="VPC Topology Planner API",
    description="Computes VPC resource graphs: CIDR allocation, zone placement and ordering",
    version="1.0.0",
)


def get_zone_directory() -> ZoneDirectory:
    return config.get_zone_directory()


def get_diagnostics():
    diagnostics = DiagnosticLogger(scope="api")
    try:
        yield diagnostics
    finally:
        diagnostics.generate_report()


class PlanCreate(BaseModel):
    cidr_block: str = Field(..., examples=["10.0.0.0/16"])
    subnet_bits: int = Field(..., ge=0, le=128)
    private_count: int = Field(..., ge=0)
    public_count: int = Field(..., ge=0)
    create_private_gateway: bool = Field(...)
    create_public_gateway: bool = True
    ecosystem: str = Field(..., min_length=1, max_length=64)
    timestamp: str = Field(..., min_length=1)
    description: str = ""
    region: Optional[str] = None
    zones: Optional[List[str]] = Field(
        default=None, description="Explicit zone list; bypasses the zone directory"
    )
    enable_dns_support: bool = True
    enable_dns_hostnames: bool = True
    extra_tags: Dict[str, str] = Field(default_factory=dict)


class Zone(BaseModel):
    name: str
    suffix: str
    state: str


class PlanResponse(BaseModel):
    graph: dict
    order: List[int]
    validation: dict


def _plan(request: PlanCreate, diagnostics: DiagnosticLogger) -> TopologyGraph:
    """Run the planner for a request, mapping failures to HTTP errors."""
    fields = request.model_dump(exclude={"zones"})
    diagnostics.scope = f"{request.ecosystem}-{request.timestamp}"
    try:
        if request.zones is not None:
            fields["region"] = request.region or config.get_default_region()
            directory = StaticZoneDirectory.from_names(fields["region"], request.zones)
        else:
            directory = get_zone_directory()
        spec = NetworkSpec(**fields)
        return plan_topology(spec, directory)
    except PlanningError as e:
        diagnostics.log_error(str(e), context={"request": fields, "error": type(e).__name__})
        raise HTTPException(status_code=422, detail={"error": type(e).__name__, "message": str(e)})
    except ValueError as e:
        diagnostics.log_error(str(e), context={"request": fields})
        raise HTTPException(status_code=422, detail={"error": "ValueError", "message": str(e)})


@app.get("/health")
def health():
    return {"status": "healthy"}


@app.get("/metrics")
def metrics():
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


@app.middleware("http")
async def prometheus_middleware(request: Request, call_next):
    METRICS["api_requests"].labels(method=request.method, endpoint=request.url.path).inc()
    start = time.time()
    response = await call_next(request)
    logger.debug(f"{request.method} {request.url.path} took {(time.time() - start) * 1000:.1f}ms")
    return response


@app.get("/regions/{region}/zones", response_model=List[Zone])
def list_zones(region: str):
    try:
        zones = get_zone_directory().resolve_zones(region)
    except ZoneResolutionError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return [{"name": z.name, "suffix": z.suffix, "state": z.state} for z in zones]


@app.post("/plans", response_model=PlanResponse)
def create_plan(request: PlanCreate, diagnostics: DiagnosticLogger = Depends(get_diagnostics)):
    graph = _plan(request, diagnostics)
    report = validate_graph(graph)
    for result in report.results:
        if not result.passed:
            diagnostics.log_warning(result.message, context={"check": result.name})
    return {
        "graph": graph.to_dict(),
        "order": topological_order(graph),
        "validation": report.to_dict(),
    }


@app.post("/plans/terraform", response_class=PlainTextResponse)
def render_plan(request: PlanCreate, diagnostics: DiagnosticLogger = Depends(get_diagnostics)):
    graph = _plan(request, diagnostics)
    return TerraformRenderer().render(graph, region=request.region)


@app.post("/plans/dry-run")
def dry_run_plan(request: PlanCreate, diagnostics: DiagnosticLogger = Depends(get_diagnostics)):
    graph = _plan(request, diagnostics)
    result = ApplyEngine().apply(graph)
    if result.success:
        diagnostics.log_success(f"Dry run created {len(result.resource_ids)} resources")
    else:
        diagnostics.log_error("Dry run failed", context={"errors": result.errors})
    return result.to_dict()
