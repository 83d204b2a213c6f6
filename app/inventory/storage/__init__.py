"""
Storage layer exports.
"""

from app.inventory.storage.base import InventoryStore
from app.inventory.storage.sqlalchemy_storage import SQLAlchemyInventoryStore

__all__ = ["InventoryStore", "SQLAlchemyInventoryStore"]
