# File: vpc_planner/metrics.py

from prometheus_client import Counter, Histogram

METRICS = {
    "plans_total": Counter(
        "planner_plans_total",
        "Planning runs by outcome",
        ["outcome"],
    ),
    "planning_latency": Histogram(
        "planner_planning_duration_ms",
        "Time taken to compute a topology graph in milliseconds",
        buckets=(0.5, 1, 2.5, 5, 10, 25, 50, 100, 250),
    ),
    "nodes_emitted": Counter(
        "planner_nodes_emitted_total",
        "Resource nodes emitted by kind",
        ["kind"],
    ),
    "api_requests": Counter(
        "planner_api_requests_total",
        "Total REST API requests",
        ["method", "endpoint"],
    ),
    "apply_actions": Counter(
        "planner_apply_actions_total",
        "Count of dry-run apply actions",
        ["action_type"],
    ),
    "apply_latency": Histogram(
        "planner_apply_duration_ms",
        "Time taken for a dry-run apply in milliseconds",
        buckets=(1, 5, 10, 50, 100, 500, 1000),
    ),
}
