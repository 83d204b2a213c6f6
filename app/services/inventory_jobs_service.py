"""
app/services/inventory_jobs_service.py

Service orchestration for the three inventory jobs and the admin read surface.
"""

from __future__ import annotations

import uuid
from functools import lru_cache

import httpx

from app.config import LLMSettings, get_llm_settings
from app.domain.inventory import (
    DecisionLogEntry,
    InventoryStats,
    LearningNoteRecord,
    RunLogEntry,
    SelfReviewSummary,
    SyncRunSummary,
    VerificationRunSummary,
)
from app.inventory.config import get_inventory_settings, get_vendor_profiles
from app.inventory.config.models import InventorySettings, VendorProfiles
from app.inventory.errors import DecisionNotFoundError
from app.inventory.fetcher import PageFetcher
from app.inventory.rate_limiter import DomainRateLimiter
from app.inventory.self_review import SelfReviewer
from app.inventory.stock_check import StockChecker
from app.inventory.storage import InventoryStore, SQLAlchemyInventoryStore
from app.inventory.sync_engine import InventorySyncEngine
from app.inventory.verification_engine import AIVerificationEngine
from db.session import get_session_factory
from llm_verification import (
    BaseLLMAdapter,
    LLMVerdictClassifier,
    MockLLMAdapter,
    OpenAILLMAdapter,
    VerdictClassifier,
)

RECENT_RUNS_LIMIT = 10


def _build_adapter(settings: LLMSettings) -> BaseLLMAdapter:
    if settings.adapter == "mock":
        return MockLLMAdapter()
    return OpenAILLMAdapter(
        model=settings.model,
        api_key=settings.api_key,
        base_url=settings.base_url,
        timeout_seconds=settings.timeout_seconds,
    )


class InventoryJobsService:
    """
    Wires settings, store, fetcher and classifier into the job engines.

    Collaborators are built lazily so the service can be constructed without
    a database or an API key; tests inject fakes instead.
    """

    def __init__(
        self,
        *,
        settings: InventorySettings | None = None,
        store: InventoryStore | None = None,
        classifier: VerdictClassifier | None = None,
        vendor_profiles: VendorProfiles | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._settings = settings or get_inventory_settings()
        self._store = store
        self._classifier = classifier
        self._vendor_profiles = vendor_profiles
        self._http_client = http_client
        self._rate_limiter = DomainRateLimiter(min_interval_seconds=self._settings.min_domain_interval_seconds)

    @property
    def store(self) -> InventoryStore:
        if self._store is None:
            self._store = SQLAlchemyInventoryStore(session_factory=get_session_factory())
        return self._store

    @property
    def classifier(self) -> VerdictClassifier:
        if self._classifier is None:
            llm_settings = get_llm_settings()
            self._classifier = LLMVerdictClassifier(
                _build_adapter(llm_settings),
                max_retries=llm_settings.max_retries,
            )
        return self._classifier

    @property
    def vendor_profiles(self) -> VendorProfiles:
        if self._vendor_profiles is None:
            self._vendor_profiles = get_vendor_profiles(self._settings.vendor_config_path)
        return self._vendor_profiles

    def _fetcher(self) -> PageFetcher:
        return PageFetcher(
            timeout_seconds=self._settings.fetch_timeout_seconds,
            user_agent=self._settings.user_agent,
            rate_limiter=self._rate_limiter,
            client=self._http_client,
        )

    async def run_sync(self, *, triggered_by: str = "cron") -> SyncRunSummary:
        async with self._fetcher() as fetcher:
            engine = InventorySyncEngine(
                settings=self._settings,
                store=self.store,
                stock_checker=StockChecker(vendor_profiles=self.vendor_profiles, fetcher=fetcher),
            )
            return await engine.run(triggered_by=triggered_by)

    async def run_ai_verification(self, *, triggered_by: str = "cron") -> VerificationRunSummary:
        async with self._fetcher() as fetcher:
            engine = AIVerificationEngine(
                settings=self._settings,
                store=self.store,
                fetcher=fetcher,
                classifier=self.classifier,
                vendor_profiles=self.vendor_profiles,
            )
            return await engine.run(triggered_by=triggered_by)

    async def run_self_review(self, *, triggered_by: str = "cron") -> SelfReviewSummary:
        reviewer = SelfReviewer(settings=self._settings, store=self.store, classifier=self.classifier)
        return await reviewer.run(triggered_by=triggered_by)

    async def overview(self) -> tuple[InventoryStats, list[RunLogEntry]]:
        stats = await self.store.inventory_stats()
        runs = await self.store.recent_runs(RECENT_RUNS_LIMIT)
        return stats, runs

    async def recent_decisions(self, *, limit: int) -> list[DecisionLogEntry]:
        return await self.store.recent_decisions(limit)

    async def override_decision(self, decision_id: uuid.UUID, *, overridden: bool = True) -> None:
        found = await self.store.set_decision_overridden(decision_id, overridden)
        if not found:
            raise DecisionNotFoundError(f"Decision {decision_id} not found.")

    async def learning_notes(self) -> list[LearningNoteRecord]:
        return await self.store.list_learning_notes()


@lru_cache(maxsize=1)
def get_inventory_jobs_service() -> InventoryJobsService:
    """
    Build and cache the inventory jobs service.
    """

    return InventoryJobsService()
