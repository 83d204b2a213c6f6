"""
Inventory pipeline configuration models.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from app.inventory.types import VendorFamily


@dataclass(frozen=True)
class VendorProfile:
    """
    Integration profile for one vendor.
    """

    slug: str
    family: str
    name: str | None = None
    domain: str | None = None
    notes: str | None = None

    @property
    def is_access_restricted(self) -> bool:
        return self.family == VendorFamily.ACCESS_RESTRICTED


@dataclass(frozen=True)
class VendorProfiles:
    """
    Lookup of vendor slug to profile. Unknown vendors fall back to the
    default family.
    """

    profiles: dict[str, VendorProfile] = field(default_factory=dict)
    default_family: str = VendorFamily.STRUCTURED_STOREFRONT

    def family_for(self, vendor_slug: str) -> str:
        profile = self.profiles.get(vendor_slug.strip().lower())
        return profile.family if profile is not None else self.default_family

    def is_access_restricted(self, vendor_slug: str) -> bool:
        return self.family_for(vendor_slug) == VendorFamily.ACCESS_RESTRICTED

    def __iter__(self):
        return iter(self.profiles.values())


@dataclass(frozen=True)
class InventorySettings:
    """
    Runtime settings for both verification tiers and the learning loop.
    """

    vendor_config_path: str
    user_agent: str
    fetch_timeout_seconds: float = 12.0
    min_domain_interval_seconds: float = 0.8
    sync_concurrency: int = 4
    ai_concurrency: int = 2
    ai_max_items_per_run: int = 50
    update_chunk_size: int = 50
    excerpt_max_chars: int = 3000
    logged_excerpt_max_chars: int = 2000
    price_tolerance: float = 0.10
    min_action_confidence: float = 0.6
    dead_confidence_threshold: float = 0.9
    review_min_decisions: int = 10
    review_decision_window: int = 100
    review_min_note_chars: int = 10
    scheduler_enabled: bool = True
