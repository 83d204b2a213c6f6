"""
app/repositories package marker.
"""

from app.repositories.inventory_repository import InventoryRepository

__all__ = ["InventoryRepository"]
