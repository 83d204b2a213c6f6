"""
app/domain package marker.
"""

from app.domain.inventory import (
    DecisionLogEntry,
    InventoryStats,
    LearningNoteRecord,
    RunLogEntry,
    SelfReviewSummary,
    SyncRunSummary,
    VerificationRunSummary,
)

__all__ = [
    "DecisionLogEntry",
    "InventoryStats",
    "LearningNoteRecord",
    "RunLogEntry",
    "SelfReviewSummary",
    "SyncRunSummary",
    "VerificationRunSummary",
]
