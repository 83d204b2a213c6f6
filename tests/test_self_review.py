"""
tests/test_self_review.py

Learning loop over the decision log.

Coverage
--------
- Fewer decisions than the minimum: no classifier call, nothing persisted
- New notes are appended with the self-review source
- Notes already contained in existing notes are dropped
- Duplicates within one batch are persisted once
- Short candidates are dropped
- Nothing new yields the fixed "no new insights" message
- Prompt carries existing notes and override status
- Run log entry uses the review_ marker
- A failed note write is logged and the remaining notes are still written
- The minimum is checked against the whole decision log, not the review window
"""

from __future__ import annotations

import dataclasses
import uuid

import pytest

from app.domain.inventory import DecisionLogEntry
from app.inventory.self_review import (
    NO_NEW_INSIGHTS,
    NOT_ENOUGH_DECISIONS,
    NOTE_SOURCE,
    SelfReviewer,
    accept_candidate_notes,
)
from llm_verification.schema import SelfReviewOutput


def _entry(index: int) -> DecisionLogEntry:
    return DecisionLogEntry(
        listing_id=uuid.uuid4(),
        product_name=f"Product {index}",
        supplier_slug="vandl-labs",
        product_url=f"https://vandl-labs.com/p/{index}",
        action="KEEP",
        proposed_action="KEEP",
        confidence=0.9,
        reasoning="Add to cart enabled.",
    )


async def _seed(store, count: int) -> None:
    for index in range(count):
        await store.log_ai_decision(_entry(index))


@pytest.fixture()
def reviewer_factory(settings):
    def build(store, classifier):
        return SelfReviewer(settings=settings, store=store, classifier=classifier)

    return build


class TestAcceptCandidateNotes:
    def test_filters(self) -> None:
        accepted = accept_candidate_notes(
            [
                "  Vandl Labs marks unreleased items Coming Soon.  ",
                "too short",
                "Known vendor pattern.",
                "Vandl Labs marks unreleased items Coming Soon.",
            ],
            "Known vendor pattern.\nAnother.",
            min_chars=10,
        )
        assert accepted == ["Vandl Labs marks unreleased items Coming Soon."]

    def test_empty_existing(self) -> None:
        assert accept_candidate_notes(["A sufficiently long note."], "", min_chars=10) == ["A sufficiently long note."]


class TestSelfReviewer:
    @pytest.mark.asyncio
    async def test_not_enough_decisions(self, reviewer_factory, fake_store_factory, classifier_factory) -> None:
        store = fake_store_factory()
        await _seed(store, 9)
        classifier = classifier_factory()

        summary = await reviewer_factory(store, classifier).run()

        assert summary.notes == [NOT_ENOUGH_DECISIONS.format(minimum=10)]
        assert summary.persisted == 0
        assert summary.decisions_reviewed == 9
        assert classifier.review_prompts == []
        assert store.notes == []
        assert store.runs == []

    @pytest.mark.asyncio
    async def test_new_note_is_appended(self, reviewer_factory, fake_store_factory, classifier_factory) -> None:
        store = fake_store_factory()
        await _seed(store, 12)
        await store.add_learning_note("Existing note about JSON-LD prices.", "manual")
        classifier = classifier_factory(
            review_output=SelfReviewOutput(
                notes=["Vandl Labs shows Coming Soon on items that are not purchasable."],
                summary="One pattern.",
            )
        )

        summary = await reviewer_factory(store, classifier).run(triggered_by="manual")

        assert summary.persisted == 1
        assert summary.decisions_reviewed == 12
        assert summary.summary == "One pattern."
        assert [note.note for note in store.notes] == [
            "Existing note about JSON-LD prices.",
            "Vandl Labs shows Coming Soon on items that are not purchasable.",
        ]
        assert store.notes[-1].source == NOTE_SOURCE
        assert store.runs[0].triggered_by == "review_manual"
        assert store.runs[0].total == 12

    @pytest.mark.asyncio
    async def test_exact_duplicate_not_persisted(self, reviewer_factory, fake_store_factory, classifier_factory) -> None:
        store = fake_store_factory()
        await _seed(store, 10)
        await store.add_learning_note("PeptideTech uses standard stock classes.", NOTE_SOURCE)
        classifier = classifier_factory(
            review_output=SelfReviewOutput(notes=["PeptideTech uses standard stock classes."], summary="Nothing new.")
        )

        summary = await reviewer_factory(store, classifier).run()

        assert summary.persisted == 0
        assert summary.notes == [NO_NEW_INSIGHTS]
        assert len(store.notes) == 1

    @pytest.mark.asyncio
    async def test_batch_duplicate_persisted_once(self, reviewer_factory, fake_store_factory, classifier_factory) -> None:
        store = fake_store_factory()
        await _seed(store, 10)
        note = "Modified Aminos reports stock per variant."
        classifier = classifier_factory(review_output=SelfReviewOutput(notes=[note, note], summary="Dup."))

        summary = await reviewer_factory(store, classifier).run()

        assert summary.persisted == 1
        assert [record.note for record in store.notes] == [note]

    @pytest.mark.asyncio
    async def test_prompt_contents(self, reviewer_factory, fake_store_factory, classifier_factory) -> None:
        store = fake_store_factory()
        await _seed(store, 10)
        await store.set_decision_overridden(store.decisions[0].id)
        await store.add_learning_note("Known pattern about badges.", NOTE_SOURCE)
        classifier = classifier_factory()

        await reviewer_factory(store, classifier).run()

        prompt = classifier.review_prompts[0]
        assert "Known pattern about badges." in prompt
        assert "- Total decisions: 10" in prompt
        assert "- Overridden by admin: 1" in prompt
        # Newest first, so the overridden (oldest) decision is listed last.
        assert "[10] vandl-labs | Product 0 | KEEP (conf: 0.90) | OVERRIDDEN BY ADMIN" in prompt

    @pytest.mark.asyncio
    async def test_run_log_failure_is_not_fatal(self, reviewer_factory, fake_store_factory, classifier_factory) -> None:
        store = fake_store_factory()
        await _seed(store, 10)
        store.fail_log_run = True

        summary = await reviewer_factory(store, classifier_factory()).run()

        assert summary.persisted == 1

    @pytest.mark.asyncio
    async def test_failed_note_write_does_not_stop_the_batch(
        self, reviewer_factory, fake_store_factory, classifier_factory
    ) -> None:
        store = fake_store_factory()
        await _seed(store, 10)
        store.fail_note_writes = {0}
        first = "Modified Aminos hides sold-out variants from the JSON."
        second = "PeptideTech greys out the add to cart button when sold out."
        classifier = classifier_factory(review_output=SelfReviewOutput(notes=[first, second], summary="Two patterns."))

        summary = await reviewer_factory(store, classifier).run()

        assert summary.persisted == 1
        assert summary.notes == [second]
        assert [record.note for record in store.notes] == [second]
        assert store.runs[0].errors == 1

    @pytest.mark.asyncio
    async def test_minimum_counts_the_whole_log(self, settings, fake_store_factory, classifier_factory) -> None:
        store = fake_store_factory()
        await _seed(store, 12)
        classifier = classifier_factory()
        reviewer = SelfReviewer(
            settings=dataclasses.replace(settings, review_decision_window=5),
            store=store,
            classifier=classifier,
        )

        summary = await reviewer.run()

        assert summary.decisions_reviewed == 5
        assert len(classifier.review_prompts) == 1
        assert "- Total decisions: 5" in classifier.review_prompts[0]
