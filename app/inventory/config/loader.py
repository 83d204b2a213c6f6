"""
Environment + JSON config loader for the inventory pipeline.
"""

from __future__ import annotations

import json
import logging
import os
from functools import lru_cache
from pathlib import Path
from urllib.parse import urlparse

from db.config import load_env_files

from app.inventory.config.models import InventorySettings, VendorProfile, VendorProfiles
from app.inventory.types import VendorFamily

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "Mozilla/5.0 (compatible; InventoryVerifierBot/2.0; +https://example.com/bot)"


def _get_bool_env(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _get_int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _get_float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _get_str_env(name: str, default: str) -> str:
    raw = os.getenv(name)
    if raw is None:
        return default
    stripped = raw.strip()
    return stripped if stripped else default


def _project_root() -> Path:
    return Path(__file__).resolve().parents[3]


def _resolve_config_path(raw_path: str) -> Path:
    candidate = Path(raw_path)
    if candidate.is_absolute():
        return candidate
    return (_project_root() / candidate).resolve()


def _clamp_ratio(value: float) -> float:
    return min(1.0, max(0.0, value))


@lru_cache(maxsize=1)
def get_inventory_settings() -> InventorySettings:
    """
    Return cached inventory pipeline settings from environment variables.
    """

    load_env_files()
    config_path = _get_str_env(
        "INVENTORY_VENDOR_CONFIG_PATH",
        "app/inventory/config/vendors.json",
    )
    return InventorySettings(
        vendor_config_path=str(_resolve_config_path(config_path)),
        user_agent=_get_str_env("INVENTORY_USER_AGENT", DEFAULT_USER_AGENT),
        fetch_timeout_seconds=max(1.0, _get_float_env("INVENTORY_FETCH_TIMEOUT_SECONDS", 12.0)),
        min_domain_interval_seconds=max(
            0.0,
            _get_float_env("INVENTORY_MIN_DOMAIN_INTERVAL_SECONDS", 0.8),
        ),
        sync_concurrency=max(1, _get_int_env("INVENTORY_SYNC_CONCURRENCY", 4)),
        ai_concurrency=max(1, _get_int_env("INVENTORY_AI_CONCURRENCY", 2)),
        ai_max_items_per_run=max(1, _get_int_env("INVENTORY_AI_MAX_ITEMS_PER_RUN", 50)),
        update_chunk_size=max(1, _get_int_env("INVENTORY_UPDATE_CHUNK_SIZE", 50)),
        excerpt_max_chars=max(500, _get_int_env("INVENTORY_EXCERPT_MAX_CHARS", 3000)),
        logged_excerpt_max_chars=max(0, _get_int_env("INVENTORY_LOGGED_EXCERPT_MAX_CHARS", 2000)),
        price_tolerance=_clamp_ratio(_get_float_env("INVENTORY_PRICE_TOLERANCE", 0.10)),
        min_action_confidence=_clamp_ratio(_get_float_env("INVENTORY_MIN_ACTION_CONFIDENCE", 0.6)),
        dead_confidence_threshold=_clamp_ratio(
            _get_float_env("INVENTORY_DEAD_CONFIDENCE_THRESHOLD", 0.9)
        ),
        review_min_decisions=max(1, _get_int_env("INVENTORY_REVIEW_MIN_DECISIONS", 10)),
        review_decision_window=max(1, _get_int_env("INVENTORY_REVIEW_DECISION_WINDOW", 100)),
        review_min_note_chars=max(0, _get_int_env("INVENTORY_REVIEW_MIN_NOTE_CHARS", 10)),
        scheduler_enabled=_get_bool_env("INVENTORY_SCHEDULER_ENABLED", True),
    )


def load_vendor_profiles(*, config_path: str) -> VendorProfiles:
    """
    Load vendor integration profiles from a JSON file.
    """

    path = _resolve_config_path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Vendor config file not found: {path}")

    raw_data = json.loads(path.read_text(encoding="utf-8"))
    vendors = raw_data.get("vendors", [])
    if not isinstance(vendors, list):
        raise ValueError("Invalid vendor config: 'vendors' must be a list.")

    default_family = _normalize_family(raw_data.get("default_family"))
    if default_family is None:
        default_family = VendorFamily.STRUCTURED_STOREFRONT

    profiles: dict[str, VendorProfile] = {}
    for entry in vendors:
        if not isinstance(entry, dict):
            continue

        slug = str(entry.get("slug", "")).strip().lower()
        family = _normalize_family(entry.get("family"))
        if not slug:
            continue
        if family is None:
            logger.warning("Vendor config: skipping %r with unknown family %r", slug, entry.get("family"))
            continue

        profiles[slug] = VendorProfile(
            slug=slug,
            family=family,
            name=_optional_str(entry.get("name")),
            domain=_optional_domain(entry.get("domain")),
            notes=_optional_str(entry.get("notes")),
        )

    return VendorProfiles(profiles=profiles, default_family=default_family)


@lru_cache(maxsize=4)
def get_vendor_profiles(config_path: str) -> VendorProfiles:
    return load_vendor_profiles(config_path=config_path)


def _normalize_family(value: object) -> str | None:
    if not isinstance(value, str):
        return None
    normalized = value.strip().lower().replace("_", "-")
    return normalized if normalized in VendorFamily.ALL else None


def _optional_str(value: object) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        return None
    stripped = value.strip()
    return stripped or None


def _optional_domain(value: object) -> str | None:
    raw = _optional_str(value)
    if raw is None:
        return None
    if "://" in raw:
        return urlparse(raw).netloc.lower() or None
    return raw.lower()
