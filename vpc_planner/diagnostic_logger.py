#!/usr/bin/env python3
"""
Diagnostic Logger for the VPC Topology Planner

Central logging setup plus a per-operation collector. A DiagnosticLogger is
created for one planning request (or one CLI run), gathers the errors and
warnings raised while serving it, and is dropped with it; nothing accumulates
across requests.
"""

import json
import logging
import os
import sys
import time
from datetime import datetime
from typing import Any, Dict, List, Optional

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

logger = logging.getLogger("diagnostic")


def configure_logging(level: Optional[str] = None, log_dir: Optional[str] = None):
    """Configure root logging: stdout always, a file under `log_dir` if given."""
    level = level or os.getenv("PLANNER_LOG_LEVEL", "INFO")
    log_dir = log_dir or os.getenv("PLANNER_LOG_DIR")

    handlers = [logging.StreamHandler(sys.stdout)]
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        handlers.append(logging.FileHandler(os.path.join(log_dir, "planner.log")))

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        handlers=handlers,
        force=True,
    )


class DiagnosticLogger:
    """Collects the errors and warnings of a single operation, tagged with its scope."""

    def __init__(self, scope: str = "planner"):
        self.scope = scope
        self.start_time = datetime.now()
        self._started = time.monotonic()
        self.errors: List[Dict[str, Any]] = []
        self.warnings: List[Dict[str, Any]] = []

    def _record(self, level: int, message: str, context: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        entry = {'message': message, 'context': context or {}}
        if context:
            logger.log(level, f"[{self.scope}] {message} {json.dumps(context, sort_keys=True, default=str)}")
        else:
            logger.log(level, f"[{self.scope}] {message}")
        return entry

    def log_error(self, error_msg: str, context: Optional[Dict[str, Any]] = None):
        self.errors.append(self._record(logging.ERROR, error_msg, context))

    def log_warning(self, warning_msg: str, context: Optional[Dict[str, Any]] = None):
        self.warnings.append(self._record(logging.WARNING, warning_msg, context))

    def log_success(self, success_msg: str):
        logger.info(f"[{self.scope}] SUCCESS: {success_msg}")

    def generate_report(self, report_path: Optional[str] = None) -> Dict[str, Any]:
        """Summarize this operation; also written to `report_path` when given."""
        report = {
            'scope': self.scope,
            'start_time': self.start_time.isoformat(),
            'duration_ms': round((time.monotonic() - self._started) * 1000, 3),
            'errors': self.errors,
            'warnings': self.warnings,
            'total_errors': len(self.errors),
            'total_warnings': len(self.warnings),
        }

        if report_path:
            with open(report_path, 'w') as f:
                json.dump(report, f, indent=2, default=str)
            logger.info(f"Report saved to: {report_path}")

        logger.debug(
            f"[{self.scope}] {report['total_errors']} errors, "
            f"{report['total_warnings']} warnings in {report['duration_ms']}ms"
        )
        return report
