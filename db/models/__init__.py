"""
Model package exports.

Import all SQLAlchemy models here so metadata registration and Alembic
autogeneration work without extra imports.
"""

from db.models.catalog import Product, Supplier
from db.models.inventory_logs import AIDecisionLog, InventoryRunLog, LearningNote
from db.models.listing import Listing

__all__ = [
    "AIDecisionLog",
    "InventoryRunLog",
    "LearningNote",
    "Listing",
    "Product",
    "Supplier",
]
