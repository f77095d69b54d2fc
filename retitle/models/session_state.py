"""
SessionState enum for the batch reconciliation workflow.

A session walks through these states in order:
1. Initializing - Matches are being computed for every document in the batch
2. Reviewing - The operator is examining and editing one record at a time
3. Finalizing - Every record is decided, output artifacts are being packaged
4. Done - The archive and the report have been produced
"""

from enum import Enum


class SessionState(Enum):
    """Encodes the lifecycle states of a reconciliation session."""
    INITIALIZING = "initializing"      # Waiting for a batch / computing matches
    REVIEWING = "reviewing"            # Operator reviews the current record
    FINALIZING = "finalizing"          # All records decided, packaging output
    DONE = "done"                      # Archive and report produced
