"""
Learning loop: review recent Tier-2 decisions and append new heuristics.
"""

from __future__ import annotations

import logging
import time

from app.domain.inventory import RunLogEntry, SelfReviewSummary
from app.inventory.config.models import InventorySettings
from app.inventory.errors import InventoryStoreError
from app.inventory.logging_utils import log_event
from app.inventory.storage import InventoryStore
from llm_verification.classifier import VerdictClassifier
from llm_verification.prompt_builder import VerificationPromptBuilder

logger = logging.getLogger(__name__)

NOTE_SOURCE = "ai_self_review"
NOT_ENOUGH_DECISIONS = "Not enough decisions to review yet (need at least {minimum})."
NO_NEW_INSIGHTS = "No new insights to add at this time."


def accept_candidate_notes(candidates: list[str], existing_text: str, *, min_chars: int) -> list[str]:
    """
    Keep candidates longer than ``min_chars`` that are not already contained
    in the existing notes. Accepted notes extend the existing text so a single
    batch cannot repeat itself.
    """
    accepted: list[str] = []
    known = existing_text
    for candidate in candidates:
        trimmed = candidate.strip()
        if len(trimmed) <= min_chars or trimmed in known:
            continue
        accepted.append(trimmed)
        known = f"{known}\n{trimmed}" if known else trimmed
    return accepted


class SelfReviewer:
    """
    Runs one pass of the learning loop. Notes are only ever appended.
    """

    def __init__(
        self,
        *,
        settings: InventorySettings,
        store: InventoryStore,
        classifier: VerdictClassifier,
        prompt_builder: VerificationPromptBuilder | None = None,
    ) -> None:
        self._settings = settings
        self._store = store
        self._classifier = classifier
        self._prompt_builder = prompt_builder or VerificationPromptBuilder()

    async def run(self, *, triggered_by: str = "cron") -> SelfReviewSummary:
        started = time.monotonic()
        minimum = self._settings.review_min_decisions

        total_decisions = await self._store.count_decisions()
        if total_decisions < minimum:
            log_event(logger, logging.INFO, "self_review_skipped", decisions=total_decisions, required=minimum)
            return SelfReviewSummary(
                notes=[NOT_ENOUGH_DECISIONS.format(minimum=minimum)],
                persisted=0,
                decisions_reviewed=total_decisions,
                summary=None,
                duration_ms=int((time.monotonic() - started) * 1000),
                triggered_by=triggered_by,
            )

        decisions = await self._store.recent_decisions(self._settings.review_decision_window)
        existing = [record.note for record in await self._store.list_learning_notes()]
        prompt = self._prompt_builder.build_review_prompt(decisions, existing)
        review = await self._classifier.review(prompt)

        accepted = accept_candidate_notes(
            list(review.notes),
            "\n".join(existing),
            min_chars=self._settings.review_min_note_chars,
        )
        persisted: list[str] = []
        for note in accepted:
            try:
                await self._store.add_learning_note(note, NOTE_SOURCE)
            except InventoryStoreError as exc:
                log_event(logger, logging.ERROR, "learning_note_write_failed", note=note, error=str(exc))
                continue
            persisted.append(note)

        duration_ms = int((time.monotonic() - started) * 1000)
        try:
            await self._store.log_inventory_run(
                RunLogEntry(
                    total=len(decisions),
                    in_stock=0,
                    out_of_stock=0,
                    errors=len(accepted) - len(persisted),
                    duration_ms=duration_ms,
                    triggered_by=f"review_{triggered_by}",
                )
            )
        except InventoryStoreError as exc:
            log_event(logger, logging.ERROR, "inventory_run_log_failed", triggered_by=triggered_by, error=str(exc))

        log_event(
            logger,
            logging.INFO,
            "self_review_completed",
            decisions=len(decisions),
            candidates=len(review.notes),
            accepted=len(accepted),
            persisted=len(persisted),
            summary=review.summary,
        )
        return SelfReviewSummary(
            notes=persisted or [NO_NEW_INSIGHTS],
            persisted=len(persisted),
            decisions_reviewed=len(decisions),
            summary=review.summary,
            duration_ms=duration_ms,
            triggered_by=triggered_by,
        )
