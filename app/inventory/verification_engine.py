"""
Tier-2 AI verification: fetch, extract, classify, reconcile, apply, log.
"""

from __future__ import annotations

import logging
import time
from collections import Counter
from dataclasses import dataclass
from typing import Any

from app.domain.inventory import DecisionLogEntry, RunLogEntry, VerificationRunSummary
from app.inventory import actions
from app.inventory.checkers.base import utc_now
from app.inventory.concurrency import run_with_concurrency
from app.inventory.config.models import InventorySettings, VendorProfiles
from app.inventory.errors import InventoryListUnavailableError, InventoryStoreError
from app.inventory.fetcher import PageFetcher
from app.inventory.logging_utils import log_event
from app.inventory.parsing import extract_page_excerpt
from app.inventory.priority import build_verification_queue
from app.inventory.storage import InventoryStore
from app.inventory.types import TrackableItem
from llm_verification.classifier import VerdictClassifier
from llm_verification.prompt_builder import VerificationPromptBuilder
from llm_verification.schema import VerificationContext

logger = logging.getLogger(__name__)

APPLIED = "applied"
SKIPPED = "skipped"
FAILED = "error"


@dataclass(frozen=True)
class ItemOutcome:
    item: TrackableItem
    status: str
    action: str | None = None
    proposed_action: str | None = None
    confidence: float | None = None
    error: str | None = None

    def as_dict(self) -> dict[str, Any]:
        return {
            "listing_id": str(self.item.id),
            "listing": self.item.label,
            "status": self.status,
            "action": self.action,
            "proposed_action": self.proposed_action,
            "confidence": self.confidence,
            "error": self.error,
        }


class AIVerificationEngine:
    """
    Runs the classifier over a capped, priority-ordered subset of listings.

    Fetch failures are skipped without touching the listing or the decision
    log. Classifier and store failures are contained per item.
    """

    def __init__(
        self,
        *,
        settings: InventorySettings,
        store: InventoryStore,
        fetcher: PageFetcher,
        classifier: VerdictClassifier,
        vendor_profiles: VendorProfiles,
        prompt_builder: VerificationPromptBuilder | None = None,
    ) -> None:
        self._settings = settings
        self._store = store
        self._fetcher = fetcher
        self._classifier = classifier
        self._vendor_profiles = vendor_profiles
        self._prompt_builder = prompt_builder or VerificationPromptBuilder()

    async def run(self, *, triggered_by: str = "cron") -> VerificationRunSummary:
        started = time.monotonic()

        try:
            items = await self._store.list_trackable_items()
        except InventoryStoreError as exc:
            log_event(logger, logging.ERROR, "ai_verification_list_failed", error=str(exc))
            raise InventoryListUnavailableError(f"Failed to fetch trackable listings: {exc}") from exc

        queue = build_verification_queue(
            items,
            cap=self._settings.ai_max_items_per_run,
            vendor_profiles=self._vendor_profiles,
        )
        notes = await self._load_learning_notes()
        system_prompt = self._prompt_builder.build_system_prompt(self._vendor_profiles, notes)
        log_event(
            logger,
            logging.INFO,
            "ai_verification_started",
            queued=len(queue),
            eligible_pool=len(items),
            learning_notes=len(notes),
            triggered_by=triggered_by,
        )

        async def worker(item: TrackableItem) -> ItemOutcome:
            return await self._verify_item(item, system_prompt=system_prompt)

        outcomes = await run_with_concurrency(queue, worker, max_concurrent=self._settings.ai_concurrency)

        applied = Counter(outcome.action for outcome in outcomes if outcome.status == APPLIED)
        skipped = sum(1 for outcome in outcomes if outcome.status == SKIPPED)
        errors = sum(1 for outcome in outcomes if outcome.status == FAILED)
        reconciled = sum(
            1 for outcome in outcomes if outcome.status == APPLIED and outcome.action != outcome.proposed_action
        )
        duration_ms = int((time.monotonic() - started) * 1000)

        await self._log_run(
            RunLogEntry(
                total=len(queue),
                in_stock=applied[actions.KEEP] + applied[actions.MARK_INSTOCK] + applied[actions.UPDATE_PRICE],
                out_of_stock=applied[actions.MARK_OOS],
                errors=errors + skipped,
                flagged=applied[actions.FLAG_WRONG] + applied[actions.REMOVE_DEAD],
                duration_ms=duration_ms,
                triggered_by=f"ai_{triggered_by}",
            )
        )

        summary = VerificationRunSummary(
            processed=len(queue),
            keep=applied[actions.KEEP],
            marked_oos=applied[actions.MARK_OOS],
            marked_instock=applied[actions.MARK_INSTOCK],
            price_updated=applied[actions.UPDATE_PRICE],
            flagged_wrong=applied[actions.FLAG_WRONG],
            removed_dead=applied[actions.REMOVE_DEAD],
            skipped=skipped,
            errors=errors,
            duration_ms=duration_ms,
            triggered_by=triggered_by,
            reconciled=reconciled,
            learning_notes_used=len(notes),
            results=[outcome.as_dict() for outcome in outcomes],
        )
        log_event(
            logger,
            logging.INFO,
            "ai_verification_completed",
            processed=summary.processed,
            actions=dict(applied),
            skipped=summary.skipped,
            errors=summary.errors,
            reconciled=summary.reconciled,
            duration_ms=summary.duration_ms,
        )
        return summary

    async def _load_learning_notes(self) -> list[str]:
        try:
            records = await self._store.list_learning_notes()
        except InventoryStoreError as exc:
            log_event(logger, logging.WARNING, "learning_notes_unavailable", error=str(exc))
            return []
        return [record.note for record in records]

    async def _verify_item(self, item: TrackableItem, *, system_prompt: str) -> ItemOutcome:
        fetched = await self._fetcher.fetch(item.product_url or "")
        if not fetched.responded or not (fetched.text or "").strip():
            log_event(
                logger,
                logging.INFO,
                "ai_verification_skipped",
                listing=item.label,
                http_status=fetched.status_code,
                error=fetched.error or "no HTML",
            )
            return ItemOutcome(item=item, status=SKIPPED, error=fetched.error or "no HTML")

        context = VerificationContext(
            product_name=item.product_name,
            vendor_name=item.supplier_name,
            expected_price=item.price,
            currently_in_stock=item.in_stock,
            http_status=fetched.status_code,
        )
        try:
            excerpt = extract_page_excerpt(fetched.text or "", max_chars=self._settings.excerpt_max_chars)
            verdict = await self._classifier.classify(excerpt, context, system_prompt=system_prompt)
        except Exception as exc:
            log_event(
                logger,
                logging.ERROR,
                "ai_classification_failed",
                listing=item.label,
                error_type=type(exc).__name__,
                error=str(exc),
            )
            return ItemOutcome(item=item, status=FAILED, error=str(exc) or type(exc).__name__)

        decision = actions.reconcile_action(
            verdict,
            item,
            price_tolerance=self._settings.price_tolerance,
            min_action_confidence=self._settings.min_action_confidence,
        )
        if decision.reconciled:
            log_event(
                logger,
                logging.WARNING,
                "ai_action_reconciled",
                listing=item.label,
                proposed=decision.proposed_action,
                applied=decision.action,
                reason=decision.note,
            )

        changes = actions.listing_changes_for_action(
            decision.action,
            verdict,
            item,
            verified_at=utc_now(),
            dead_confidence_threshold=self._settings.dead_confidence_threshold,
        )
        try:
            await self._store.apply_ai_action(item.id, changes)
        except InventoryStoreError as exc:
            log_event(logger, logging.ERROR, "ai_action_apply_failed", listing=item.label, error=str(exc))
            return ItemOutcome(
                item=item,
                status=FAILED,
                action=decision.action,
                proposed_action=decision.proposed_action,
                confidence=verdict.confidence,
                error=str(exc),
            )

        entry = DecisionLogEntry(
            listing_id=item.id,
            product_name=item.product_name,
            supplier_slug=item.supplier_slug,
            product_url=item.product_url,
            action=decision.action,
            proposed_action=decision.proposed_action,
            confidence=verdict.confidence,
            reasoning=verdict.reasoning,
            page_title=verdict.page_title,
            detected_price=verdict.detected_price,
            detected_stock=verdict.in_stock,
            detected_product_name=verdict.detected_product_name,
            html_excerpt=excerpt[: self._settings.logged_excerpt_max_chars],
        )
        try:
            await self._store.log_ai_decision(entry)
        except InventoryStoreError as exc:
            log_event(logger, logging.ERROR, "ai_decision_log_failed", listing=item.label, error=str(exc))

        log_event(
            logger,
            logging.INFO,
            "ai_action_applied",
            listing=item.label,
            action=decision.action,
            confidence=round(verdict.confidence, 2),
            reasoning=verdict.reasoning,
        )
        return ItemOutcome(
            item=item,
            status=APPLIED,
            action=decision.action,
            proposed_action=decision.proposed_action,
            confidence=verdict.confidence,
        )

    async def _log_run(self, entry: RunLogEntry) -> None:
        try:
            await self._store.log_inventory_run(entry)
        except InventoryStoreError as exc:
            log_event(logger, logging.ERROR, "inventory_run_log_failed", triggered_by=entry.triggered_by, error=str(exc))
