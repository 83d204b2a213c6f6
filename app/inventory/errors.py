"""
Inventory pipeline exceptions.
"""

from __future__ import annotations


class InventoryPipelineError(Exception):
    """Base exception for inventory pipeline failures."""


class InventoryListUnavailableError(InventoryPipelineError):
    """Raised when the list of items to process cannot be loaded. Fatal to a run."""


class InventoryStoreError(InventoryPipelineError):
    """Raised when a store operation fails. Contained per item or per chunk."""


class DecisionNotFoundError(InventoryPipelineError):
    """Raised when an override targets a decision log entry that does not exist."""
