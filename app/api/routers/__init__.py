"""
app/api/routers package marker.
"""

from app.api.routers.inventory_admin import router as inventory_admin_router
from app.api.routers.inventory_jobs import router as inventory_jobs_router

__all__ = [
    "inventory_admin_router",
    "inventory_jobs_router",
]
