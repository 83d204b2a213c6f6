"""Structured prompt builder for listing verification and self-review."""

import json
from collections import Counter
from typing import Any, Iterable, List, Sequence

from llm_verification.schema import VerificationContext

LOW_CONFIDENCE_THRESHOLD = 0.7

_BASE_SYSTEM_PROMPT = """\
You are an AI inventory verification agent for a product research catalog.

Your job: Analyze HTML excerpts from vendor product pages and determine:
1. Is the listing active (not a 404, not redirected to homepage, not a category page)?
2. Does the product match the expected product name?
3. Is the product in stock?
4. What is the current listed price?
"""

_DECISION_RULES = """\
DECISION RULES:
- KEEP: Page is active, correct product, in stock, price matches (within 10%).
- MARK_OOS: Product is correct but out of stock ("Out of stock", "Sold Out", disabled cart button, etc).
- MARK_INSTOCK: Product was previously out of stock but is now available.
- UPDATE_PRICE: Product is correct and in stock, but price differs by >10% from expected.
- FLAG_WRONG: The page exists but shows a different product than expected.
- REMOVE_DEAD: Page is a 404, redirects to homepage, shows "page not found", or is not a product page at all.

CONFIDENCE GUIDELINES:
- 0.95+: Clear signals (JSON-LD data, explicit stock classes, exact product name match)
- 0.80-0.94: Strong signals but some ambiguity
- 0.60-0.79: Moderate confidence, some signals missing
- Below 0.60: Low confidence, recommend manual review

Be conservative: if unsure, prefer KEEP over destructive actions."""

_USER_TEMPLATE = """\
Analyze this product page excerpt and determine its status.

EXPECTED:
- Product: {product_name}
- Vendor: {vendor_name}
- Expected price: ${expected_price:.2f}
- Currently marked as: {stock_label}
{status_line}
PAGE EXCERPT:
---
{excerpt}
---

Analyze the above and return your structured assessment."""

_REVIEW_TEMPLATE = """\
You are the self-improvement module of an AI inventory verification agent.

Review these recent {count} verification decisions and identify patterns, issues, or improvements.

EXISTING LEARNING NOTES (do not duplicate these):
{existing_notes}

RECENT DECISIONS:
{decision_lines}

STATISTICS:
- Total decisions: {count}
- Overridden by admin: {overridden}
- Low confidence (<{low_threshold}): {low_confidence}
- Actions: {histogram}

Generate 1-3 concise, actionable learning notes that will improve future verification accuracy. Each note should be a single sentence. Focus on:
1. Vendor-specific patterns (how each vendor indicates stock status, pricing, etc.)
2. Common mistakes or low-confidence patterns
3. Any admin overrides that suggest the agent made wrong decisions

Only generate genuinely NEW insights not already in the existing notes."""


class VerificationPromptBuilder:
    """Builds the classifier's operating context and per-item prompts.

    The system prompt is the fixed base instructions, one line of context
    per configured vendor, the decision rules, and every accumulated
    learning note in creation order.
    """

    def build_system_prompt(
        self,
        vendors: Iterable[Any],
        learning_notes: Sequence[str] = (),
    ) -> str:
        """Build the system prompt for a Tier-2 run.

        Args:
            vendors: Vendor profiles exposing ``name``, ``slug``,
                ``domain`` and ``notes`` attributes.
            learning_notes: Accumulated notes, oldest first.

        Returns:
            The full system prompt.
        """
        sections = [_BASE_SYSTEM_PROMPT, self._format_vendor_context(vendors), _DECISION_RULES]
        prompt = "\n".join(section for section in sections if section)

        notes = [note.strip() for note in learning_notes if note and note.strip()]
        if notes:
            prompt += "\n\nACCUMULATED LEARNING NOTES (from past experience):\n"
            prompt += "\n".join(f"- {note}" for note in notes)
        return prompt

    def build_user_prompt(self, excerpt: str, context: VerificationContext) -> str:
        status_line = ""
        if context.http_status is not None:
            status_line = f"- HTTP status of page fetch: {context.http_status}\n"
        return _USER_TEMPLATE.format(
            product_name=context.product_name,
            vendor_name=context.vendor_name,
            expected_price=context.expected_price,
            stock_label="IN STOCK" if context.currently_in_stock else "OUT OF STOCK",
            status_line=status_line,
            excerpt=excerpt,
        )

    def build_review_prompt(self, decisions: Sequence[Any], existing_notes: Sequence[str]) -> str:
        """Build the self-review prompt.

        Args:
            decisions: Recent decision log entries, newest first, exposing
                ``supplier_slug``, ``product_name``, ``action``,
                ``confidence``, ``was_overridden`` and ``reasoning``.
            existing_notes: All persisted learning notes.

        Returns:
            A fully formatted prompt string.
        """
        existing_text = "\n".join(existing_notes)
        histogram = Counter(decision.action for decision in decisions)
        return _REVIEW_TEMPLATE.format(
            count=len(decisions),
            existing_notes=existing_text or "(none yet)",
            decision_lines="\n".join(self._format_decision_lines(decisions)),
            overridden=sum(1 for decision in decisions if decision.was_overridden),
            low_threshold=LOW_CONFIDENCE_THRESHOLD,
            low_confidence=sum(
                1
                for decision in decisions
                if decision.confidence is not None and decision.confidence < LOW_CONFIDENCE_THRESHOLD
            ),
            histogram=json.dumps(dict(histogram), separators=(",", ":")),
        )

    def _format_vendor_context(self, vendors: Iterable[Any]) -> str:
        lines: List[str] = []
        for vendor in vendors:
            label = vendor.name or vendor.slug
            if vendor.domain:
                label = f"{label} ({vendor.domain})"
            lines.append(f"- {label}: {vendor.notes}" if vendor.notes else f"- {label}")
        if not lines:
            return ""
        return "VENDOR CONTEXT:\n" + "\n".join(lines) + "\n"

    def _format_decision_lines(self, decisions: Sequence[Any]) -> List[str]:
        lines = []
        for index, decision in enumerate(decisions, start=1):
            confidence = f"{decision.confidence:.2f}" if decision.confidence is not None else "n/a"
            status = "OVERRIDDEN BY ADMIN" if decision.was_overridden else "accepted"
            lines.append(
                f"[{index}] {decision.supplier_slug} | {decision.product_name} | "
                f"{decision.action} (conf: {confidence}) | {status} | {decision.reasoning}"
            )
        return lines
