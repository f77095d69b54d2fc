"""Workflow orchestration package for retitle.

This package contains the components that drive a reconciliation session:
- ReconciliationController: State machine over the records of a batch.
- SessionLogger: Structured session log written to a timestamped file.
- RetitleOrchestrator: Central coordinator for the match and review workflows.
"""

from retitle.orchestration.reconciliation_controller import ReconciliationController
from retitle.orchestration.session_logger import SessionLogger
from retitle.orchestration.retitle_orchestrator import RetitleOrchestrator

__all__ = ["ReconciliationController", "SessionLogger", "RetitleOrchestrator"]
