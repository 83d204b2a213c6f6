"""
tests/test_llm_verification.py

Contract, validation, retry and prompt tests for the listing classifier.

No network calls: every test uses MockLLMAdapter or a scripted adapter.

Coverage
--------
- AIVerdict contract: extra fields, action enum, confidence range
- Strict JSON schema shape sent to the structured-output endpoint
- Validator: fences, invalid JSON, non-object JSON
- Retry: success after a bad attempt, exhaustion, adapter errors propagate
- LLMVerdictClassifier: parameters passed to the adapter per call type
- Prompt builder: vendor context, learning notes, user prompt, review prompt
"""

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

import pytest
from pydantic import ValidationError

from app.domain.inventory import DecisionLogEntry
from app.inventory.config.models import VendorProfile
from llm_verification import (
    AIVerdict,
    BaseLLMAdapter,
    LLMOutputValidationError,
    LLMRetryExhaustedError,
    LLMVerdictClassifier,
    MockLLMAdapter,
    SelfReviewOutput,
    VerificationContext,
    VerificationPromptBuilder,
    generate_with_retry,
    strict_json_schema,
    validate_llm_output,
)

VALID_VERDICT: Dict[str, Any] = {
    "listing_active": True,
    "correct_product": True,
    "in_stock": False,
    "detected_price": 45.0,
    "detected_product_name": "BPC-157 5mg",
    "page_title": "BPC-157 5mg | PeptideTech",
    "action": "MARK_OOS",
    "confidence": 0.93,
    "reasoning": "Stock element reads Out of stock.",
}

CONTEXT = VerificationContext(
    product_name="BPC-157 5mg",
    vendor_name="PeptideTech",
    expected_price=45.0,
    currently_in_stock=True,
    http_status=200,
)


class SequenceAdapter(BaseLLMAdapter):
    """Returns queued raw responses in order; an Exception entry is raised."""

    def __init__(self, responses: List[Any]) -> None:
        self._responses = list(responses)
        self.calls = 0

    async def generate(
        self,
        *,
        system: Optional[str],
        prompt: str,
        schema_name: str,
        response_schema: Dict[str, Any],
        temperature: float,
        max_tokens: int,
    ) -> str:
        self.calls += 1
        response = self._responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


async def _retry(adapter: BaseLLMAdapter, max_retries: int = 2) -> AIVerdict:
    return await generate_with_retry(
        adapter,
        output_model=AIVerdict,
        system="system",
        prompt="prompt",
        schema_name="listing_verdict",
        response_schema=strict_json_schema(AIVerdict),
        temperature=0.1,
        max_tokens=500,
        max_retries=max_retries,
    )


# ---------------------------------------------------------------------------
# Contract
# ---------------------------------------------------------------------------


class TestAIVerdictContract:
    def test_valid_payload(self) -> None:
        verdict = AIVerdict(**VALID_VERDICT)
        assert verdict.action == "MARK_OOS"
        assert verdict.detected_price == 45.0

    def test_extra_field_rejected(self) -> None:
        with pytest.raises(ValidationError):
            AIVerdict(**{**VALID_VERDICT, "recommendation": "buy"})

    def test_unknown_action_rejected(self) -> None:
        with pytest.raises(ValidationError):
            AIVerdict(**{**VALID_VERDICT, "action": "DELETE"})

    @pytest.mark.parametrize("confidence", [-0.1, 1.01])
    def test_confidence_out_of_range_rejected(self, confidence: float) -> None:
        with pytest.raises(ValidationError):
            AIVerdict(**{**VALID_VERDICT, "confidence": confidence})

    def test_is_frozen(self) -> None:
        verdict = AIVerdict(**VALID_VERDICT)
        with pytest.raises(ValidationError):
            verdict.action = "KEEP"  # type: ignore[misc]

    def test_strict_schema_requires_every_field(self) -> None:
        schema = strict_json_schema(AIVerdict)
        assert schema["additionalProperties"] is False
        assert set(schema["required"]) == set(VALID_VERDICT)

    def test_review_output_note_bounds(self) -> None:
        with pytest.raises(ValidationError):
            SelfReviewOutput(notes=[], summary="nothing")
        with pytest.raises(ValidationError):
            SelfReviewOutput(notes=["a", "b", "c", "d"], summary="too many")


# ---------------------------------------------------------------------------
# Validator
# ---------------------------------------------------------------------------


class TestValidateLLMOutput:
    def test_plain_json(self) -> None:
        assert validate_llm_output(json.dumps(VALID_VERDICT), AIVerdict).confidence == 0.93

    def test_markdown_fences_stripped(self) -> None:
        raw = "```json\n" + json.dumps(VALID_VERDICT) + "\n```"
        assert validate_llm_output(raw, AIVerdict).action == "MARK_OOS"

    def test_invalid_json_stage(self) -> None:
        with pytest.raises(LLMOutputValidationError) as exc_info:
            validate_llm_output("{not json", AIVerdict)
        assert exc_info.value.stage == "json_parse"
        assert exc_info.value.raw_response == "{not json"

    def test_non_object_is_schema_error(self) -> None:
        with pytest.raises(LLMOutputValidationError) as exc_info:
            validate_llm_output("[1, 2]", AIVerdict)
        assert exc_info.value.stage == "schema"

    def test_missing_field_reports_location(self) -> None:
        payload = {key: value for key, value in VALID_VERDICT.items() if key != "reasoning"}
        with pytest.raises(LLMOutputValidationError) as exc_info:
            validate_llm_output(json.dumps(payload), AIVerdict)
        assert any(error.startswith("reasoning") for error in exc_info.value.errors)


# ---------------------------------------------------------------------------
# Retry
# ---------------------------------------------------------------------------


class TestGenerateWithRetry:
    @pytest.mark.asyncio
    async def test_succeeds_after_bad_attempt(self) -> None:
        adapter = SequenceAdapter(["not json", json.dumps(VALID_VERDICT)])
        verdict = await _retry(adapter)
        assert verdict.action == "MARK_OOS"
        assert adapter.calls == 2

    @pytest.mark.asyncio
    async def test_exhaustion(self) -> None:
        adapter = SequenceAdapter(["nope", "{}", "still nope"])
        with pytest.raises(LLMRetryExhaustedError) as exc_info:
            await _retry(adapter, max_retries=2)
        assert exc_info.value.attempts == 3
        assert [error.stage for error in exc_info.value.history] == ["json_parse", "schema", "json_parse"]
        assert adapter.calls == 3

    @pytest.mark.asyncio
    async def test_adapter_error_is_not_retried(self) -> None:
        adapter = SequenceAdapter([RuntimeError("upstream 503"), json.dumps(VALID_VERDICT)])
        with pytest.raises(RuntimeError, match="upstream 503"):
            await _retry(adapter)
        assert adapter.calls == 1


# ---------------------------------------------------------------------------
# Classifier
# ---------------------------------------------------------------------------


class TestLLMVerdictClassifier:
    @pytest.mark.asyncio
    async def test_classify_uses_verdict_schema(self) -> None:
        adapter = MockLLMAdapter(responses={"listing_verdict": VALID_VERDICT})
        classifier = LLMVerdictClassifier(adapter)

        verdict = await classifier.classify("PAGE TITLE: x", CONTEXT, system_prompt="SYSTEM")

        assert verdict.action == "MARK_OOS"
        call = adapter.calls[0]
        assert call["schema_name"] == "listing_verdict"
        assert call["system"] == "SYSTEM"
        assert call["temperature"] == 0.1
        assert call["max_tokens"] == 500
        assert "PAGE TITLE: x" in call["prompt"]

    @pytest.mark.asyncio
    async def test_review_uses_review_schema(self) -> None:
        adapter = MockLLMAdapter()
        output = await LLMVerdictClassifier(adapter).review("REVIEW PROMPT")

        assert output.notes == ["Mock learning note produced for local testing only."]
        call = adapter.calls[0]
        assert call["schema_name"] == "self_review"
        assert call["system"] is None
        assert call["temperature"] == 0.3
        assert call["max_tokens"] == 400


# ---------------------------------------------------------------------------
# Prompt builder
# ---------------------------------------------------------------------------


def _decision(action: str, confidence: float, overridden: bool = False) -> DecisionLogEntry:
    return DecisionLogEntry(
        listing_id=None,
        product_name="BPC-157 5mg",
        supplier_slug="peptide-tech",
        product_url="https://peptidetech.co/product/bpc-157",
        action=action,
        proposed_action=action,
        confidence=confidence,
        reasoning="Stock class present.",
        was_overridden=overridden,
    )


class TestVerificationPromptBuilder:
    def test_system_prompt_includes_vendors_and_notes_in_order(self) -> None:
        vendors = [
            VendorProfile(slug="peptide-tech", family="structured-storefront", name="PeptideTech",
                          domain="peptidetech.co", notes="WooCommerce store."),
            VendorProfile(slug="bare", family="structured-storefront"),
        ]
        prompt = VerificationPromptBuilder().build_system_prompt(
            vendors,
            ["First note about stock badges.", "  ", "Second note about prices."],
        )

        assert "- PeptideTech (peptidetech.co): WooCommerce store." in prompt
        assert "- bare" in prompt
        assert "Be conservative" in prompt
        notes_section = prompt.split("ACCUMULATED LEARNING NOTES (from past experience):\n", 1)[1]
        assert notes_section == "- First note about stock badges.\n- Second note about prices."

    def test_system_prompt_without_notes_has_no_notes_section(self) -> None:
        prompt = VerificationPromptBuilder().build_system_prompt([], [])
        assert "ACCUMULATED LEARNING NOTES" not in prompt
        assert "VENDOR CONTEXT" not in prompt

    def test_user_prompt(self) -> None:
        prompt = VerificationPromptBuilder().build_user_prompt("EXCERPT BODY", CONTEXT)
        assert "- Product: BPC-157 5mg" in prompt
        assert "- Expected price: $45.00" in prompt
        assert "- Currently marked as: IN STOCK" in prompt
        assert "- HTTP status of page fetch: 200" in prompt
        assert "---\nEXCERPT BODY\n---" in prompt

    def test_review_prompt_statistics(self) -> None:
        decisions = [
            _decision("KEEP", 0.95),
            _decision("MARK_OOS", 0.65, overridden=True),
            _decision("KEEP", 0.5),
        ]
        prompt = VerificationPromptBuilder().build_review_prompt(decisions, [])

        assert "(none yet)" in prompt
        assert "[2] peptide-tech | BPC-157 5mg | MARK_OOS (conf: 0.65) | OVERRIDDEN BY ADMIN" in prompt
        assert "- Total decisions: 3" in prompt
        assert "- Overridden by admin: 1" in prompt
        assert "- Low confidence (<0.7): 2" in prompt
        assert '- Actions: {"KEEP":2,"MARK_OOS":1}' in prompt

    def test_review_prompt_lists_existing_notes(self) -> None:
        prompt = VerificationPromptBuilder().build_review_prompt([_decision("KEEP", 0.9)], ["Known pattern."])
        assert "Known pattern." in prompt
        assert "(none yet)" not in prompt
