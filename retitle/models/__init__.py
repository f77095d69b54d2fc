"""
Models package for the PDF title reconciliation tool.

This package provides convenient imports for all data models:
- SessionState: Enum for the reconciliation session lifecycle
- IntakeFile: File collected at intake
- InputDocument: Input PDF metadata
- MatchCandidate: Fuzzy match proposal
- ReconciliationRecord: Operator decisions for one document
- ReportRow / BatchReport: Audit report view
- FinalizedBatch: Packaged output
- BatchSummary: Session summary
"""

from .session_state import SessionState
from .data_models import (
    BatchReport,
    BatchSummary,
    FinalizedBatch,
    InputDocument,
    IntakeFile,
    MatchCandidate,
    ReconciliationRecord,
    ReportRow,
)

__all__ = [
    "SessionState",
    "IntakeFile",
    "InputDocument",
    "MatchCandidate",
    "ReconciliationRecord",
    "ReportRow",
    "BatchReport",
    "FinalizedBatch",
    "BatchSummary",
]
