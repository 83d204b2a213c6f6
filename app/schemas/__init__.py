"""
app/schemas package marker.
"""

from app.schemas.inventory import (
    DecisionResponse,
    InventoryOverviewResponse,
    LearningNoteResponse,
    SelfReviewResponse,
    SyncRunResponse,
    VerificationRunResponse,
)

__all__ = [
    "DecisionResponse",
    "InventoryOverviewResponse",
    "LearningNoteResponse",
    "SelfReviewResponse",
    "SyncRunResponse",
    "VerificationRunResponse",
]
