"""
Config helpers for the inventory pipeline.
"""

from app.inventory.config.loader import (
    get_inventory_settings,
    get_vendor_profiles,
    load_vendor_profiles,
)
from app.inventory.config.models import InventorySettings, VendorProfile, VendorProfiles

__all__ = [
    "InventorySettings",
    "VendorProfile",
    "VendorProfiles",
    "get_inventory_settings",
    "get_vendor_profiles",
    "load_vendor_profiles",
]
