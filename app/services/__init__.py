"""
app/services package marker.
"""

from app.services.inventory_jobs_service import InventoryJobsService, get_inventory_jobs_service
from app.services.job_forwarder import JobForwarder, get_job_forwarder

__all__ = [
    "InventoryJobsService",
    "JobForwarder",
    "get_inventory_jobs_service",
    "get_job_forwarder",
]
