"""
tests/conftest.py

Shared fixtures for the inventory pipeline tests.

Nothing here touches a database, a real network or an LLM: the store is an
in-memory fake, pages are served by ``httpx.MockTransport`` and the
classifier returns scripted verdicts.
"""

from __future__ import annotations

import uuid
from collections.abc import Callable, Mapping, Sequence
from dataclasses import fields, replace
from datetime import datetime, timedelta, timezone
from typing import Any

import httpx
import pytest

from app.domain.inventory import DecisionLogEntry, InventoryStats, LearningNoteRecord, RunLogEntry
from app.inventory.actions import stock_status_changes
from app.inventory.config.models import InventorySettings, VendorProfile, VendorProfiles
from app.inventory.errors import InventoryStoreError
from app.inventory.fetcher import PageFetcher
from app.inventory.rate_limiter import DomainRateLimiter
from app.inventory.storage import InventoryStore
from app.inventory.types import StockSource, StockStatusUpdate, TrackableItem, VendorFamily
from llm_verification.classifier import VerdictClassifier
from llm_verification.schema import AIVerdict, SelfReviewOutput, VerificationContext

BASE_TIME = datetime(2026, 10, 1, 12, 0, tzinfo=timezone.utc)

_ITEM_FIELDS = {f.name for f in fields(TrackableItem)}


# ---------------------------------------------------------------------------
# In-memory store
# ---------------------------------------------------------------------------


class FakeInventoryStore(InventoryStore):
    """
    Dict-backed store. Set a ``fail_*`` flag to make that operation raise
    ``InventoryStoreError``; ``fail_update_calls`` holds the 0-based indexes
    of ``update_price_stock_status`` calls that fail.
    """

    def __init__(self, items: Sequence[TrackableItem] = ()) -> None:
        self.items: dict[uuid.UUID, TrackableItem] = {item.id: item for item in items}
        self.ai_columns: dict[uuid.UUID, dict[str, Any]] = {}
        self.decisions: list[DecisionLogEntry] = []
        self.runs: list[RunLogEntry] = []
        self.notes: list[LearningNoteRecord] = []
        self.update_calls: list[list[StockStatusUpdate]] = []

        self.fail_list = False
        self.fail_update_calls: set[int] = set()
        self.fail_apply = False
        self.fail_log_decision = False
        self.fail_log_run = False
        self.fail_notes = False
        self.fail_note_writes: set[int] = set()
        self._note_writes = 0

    def item(self, listing_id: uuid.UUID) -> TrackableItem:
        return self.items[listing_id]

    def _apply(self, listing_id: uuid.UUID, changes: Mapping[str, Any]) -> bool:
        current = self.items.get(listing_id)
        if current is None:
            return False
        self.items[listing_id] = replace(
            current,
            **{key: value for key, value in changes.items() if key in _ITEM_FIELDS},
        )
        extra = {key: value for key, value in changes.items() if key not in _ITEM_FIELDS}
        if extra:
            self.ai_columns.setdefault(listing_id, {}).update(extra)
        return True

    async def list_trackable_items(self) -> list[TrackableItem]:
        if self.fail_list:
            raise InventoryStoreError("connection refused")
        return [item for item in self.items.values() if item.product_url]

    async def update_price_stock_status(self, updates: Sequence[StockStatusUpdate]) -> int:
        call_index = len(self.update_calls)
        self.update_calls.append(list(updates))
        if call_index in self.fail_update_calls:
            raise InventoryStoreError(f"chunk {call_index} rejected")
        return sum(1 for update in updates if self._apply(update.listing_id, stock_status_changes(update)))

    async def apply_ai_action(self, listing_id: uuid.UUID, changes: Mapping[str, Any]) -> bool:
        if self.fail_apply:
            raise InventoryStoreError("write failed")
        return self._apply(listing_id, changes)

    async def log_ai_decision(self, entry: DecisionLogEntry) -> uuid.UUID:
        if self.fail_log_decision:
            raise InventoryStoreError("decision log unavailable")
        decision_id = uuid.uuid4()
        created_at = BASE_TIME + timedelta(seconds=len(self.decisions))
        self.decisions.append(replace(entry, id=decision_id, created_at=created_at))
        return decision_id

    async def log_inventory_run(self, entry: RunLogEntry) -> None:
        if self.fail_log_run:
            raise InventoryStoreError("run log unavailable")
        self.runs.append(replace(entry, id=len(self.runs) + 1))

    async def add_learning_note(self, note: str, source: str) -> LearningNoteRecord:
        write_index = self._note_writes
        self._note_writes += 1
        if self.fail_notes or write_index in self.fail_note_writes:
            raise InventoryStoreError("notes unavailable")
        record = LearningNoteRecord(
            note=note,
            source=source,
            id=len(self.notes) + 1,
            created_at=BASE_TIME + timedelta(minutes=len(self.notes)),
        )
        self.notes.append(record)
        return record

    async def list_learning_notes(self) -> list[LearningNoteRecord]:
        if self.fail_notes:
            raise InventoryStoreError("notes unavailable")
        return list(self.notes)

    async def count_decisions(self) -> int:
        return len(self.decisions)

    async def recent_decisions(self, limit: int) -> list[DecisionLogEntry]:
        return list(reversed(self.decisions))[:limit]

    async def set_decision_overridden(self, decision_id: uuid.UUID, overridden: bool = True) -> bool:
        for index, decision in enumerate(self.decisions):
            if decision.id == decision_id:
                self.decisions[index] = replace(decision, was_overridden=overridden)
                return True
        return False

    async def recent_runs(self, limit: int) -> list[RunLogEntry]:
        return list(reversed(self.runs))[:limit]

    async def inventory_stats(self) -> InventoryStats:
        tracked = [item for item in self.items.values() if item.product_url]
        return InventoryStats(
            total=len(tracked),
            in_stock=sum(1 for item in tracked if item.in_stock),
            out_of_stock=sum(1 for item in tracked if not item.in_stock),
            with_errors=sum(1 for item in tracked if item.check_error),
            never_checked=sum(1 for item in tracked if item.last_checked_at is None),
            never_ai_verified=sum(1 for item in tracked if item.ai_verified_at is None),
            dead=sum(1 for item in tracked if item.stock_source == StockSource.DEAD),
        )


# ---------------------------------------------------------------------------
# Scripted classifier
# ---------------------------------------------------------------------------


class ScriptedClassifier(VerdictClassifier):
    """
    Returns the verdict registered for a product name, or ``default``.
    A registered exception is raised instead of returned.
    """

    def __init__(
        self,
        verdicts: Mapping[str, AIVerdict | Exception] | None = None,
        *,
        default: AIVerdict | None = None,
        review_output: SelfReviewOutput | None = None,
    ) -> None:
        self.verdicts = dict(verdicts or {})
        self.default = default
        self.review_output = review_output or SelfReviewOutput(
            notes=["Vandl Labs shows Coming Soon badges on unreleased products."],
            summary="One vendor pattern found.",
        )
        self.classify_calls: list[tuple[str, VerificationContext, str]] = []
        self.review_prompts: list[str] = []

    async def classify(self, excerpt: str, context: VerificationContext, *, system_prompt: str) -> AIVerdict:
        self.classify_calls.append((excerpt, context, system_prompt))
        outcome = self.verdicts.get(context.product_name, self.default)
        if outcome is None:
            raise LookupError(f"no verdict scripted for {context.product_name}")
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    async def review(self, prompt: str) -> SelfReviewOutput:
        self.review_prompts.append(prompt)
        return self.review_output


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------


def build_item(**overrides: Any) -> TrackableItem:
    values: dict[str, Any] = {
        "id": uuid.uuid4(),
        "product_url": "https://peptidetech.co/product/bpc-157",
        "product_name": "BPC-157 5mg",
        "product_slug": "bpc-157",
        "supplier_name": "PeptideTech",
        "supplier_slug": "peptide-tech",
        "price": 45.0,
        "in_stock": True,
    }
    values.update(overrides)
    return TrackableItem(**values)


def build_verdict(**overrides: Any) -> AIVerdict:
    values: dict[str, Any] = {
        "listing_active": True,
        "correct_product": True,
        "in_stock": True,
        "detected_price": 45.0,
        "detected_product_name": "BPC-157 5mg",
        "page_title": "BPC-157 5mg | PeptideTech",
        "action": "KEEP",
        "confidence": 0.92,
        "reasoning": "Add to cart button is enabled and the price matches.",
    }
    values.update(overrides)
    return AIVerdict(**values)


def mock_fetcher(
    handler: Callable[[httpx.Request], httpx.Response],
    *,
    timeout_seconds: float = 5.0,
    rate_limiter: DomainRateLimiter | None = None,
) -> PageFetcher:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return PageFetcher(
        timeout_seconds=timeout_seconds,
        user_agent="test-agent",
        rate_limiter=rate_limiter,
        client=client,
    )


@pytest.fixture()
def make_item() -> Callable[..., TrackableItem]:
    return build_item


@pytest.fixture()
def make_verdict() -> Callable[..., AIVerdict]:
    return build_verdict


@pytest.fixture()
def make_fetcher() -> Callable[..., PageFetcher]:
    return mock_fetcher


@pytest.fixture()
def fake_store_factory() -> Callable[..., FakeInventoryStore]:
    return FakeInventoryStore


@pytest.fixture()
def classifier_factory() -> Callable[..., ScriptedClassifier]:
    return ScriptedClassifier


@pytest.fixture()
def settings() -> InventorySettings:
    return InventorySettings(
        vendor_config_path="app/inventory/config/vendors.json",
        user_agent="test-agent",
        fetch_timeout_seconds=5.0,
        min_domain_interval_seconds=0.0,
        sync_concurrency=3,
        ai_concurrency=2,
        ai_max_items_per_run=10,
        update_chunk_size=2,
    )


@pytest.fixture()
def vendor_profiles() -> VendorProfiles:
    return VendorProfiles(
        profiles={
            "peptide-tech": VendorProfile(
                slug="peptide-tech",
                family=VendorFamily.STRUCTURED_STOREFRONT,
                name="PeptideTech",
                domain="peptidetech.co",
                notes="WooCommerce store.",
            ),
            "modified-aminos": VendorProfile(
                slug="modified-aminos",
                family=VendorFamily.JSON_API,
                name="Modified Aminos",
                domain="modifiedaminos.shop",
            ),
            "felix-chem": VendorProfile(
                slug="felix-chem",
                family=VendorFamily.ACCESS_RESTRICTED,
                name="FelixChem",
            ),
        }
    )
