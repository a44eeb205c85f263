#!/usr/bin/env python3
"""
VPC Topology Planner - Main Entry Point

Serves the planner over REST:
- Zone lookup per region
- Topology planning with validation report
- Terraform rendering and dry-run apply
"""

import logging

import uvicorn

from vpc_planner import config
from vpc_planner.diagnostic_logger import configure_logging

logger = logging.getLogger(__name__)


def start_rest_api():
    """Start the FastAPI REST API server."""
    from vpc_planner.api.rest_api_server import app

    port = config.get_rest_port()
    logger.info(f"Starting REST API on port {port}...")
    uvicorn.run(app, host="0.0.0.0", port=port, log_level="info")


def main():
    configure_logging()
    logger.info("=" * 60)
    logger.info("  VPC Topology Planner")
    logger.info("=" * 60)

    directory = config.get_zone_directory()
    logger.info(f"Zone directory default region: {directory.default_region}")

    start_rest_api()


if __name__ == "__main__":
    main()
