"""
Tier-2 action state machine: verdict reconciliation and the column changes
each final action writes to a listing.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from app.inventory.types import StockSource, StockStatusUpdate, TrackableItem
from llm_verification.schema import AIVerdict

KEEP = "KEEP"
MARK_OOS = "MARK_OOS"
MARK_INSTOCK = "MARK_INSTOCK"
UPDATE_PRICE = "UPDATE_PRICE"
FLAG_WRONG = "FLAG_WRONG"
REMOVE_DEAD = "REMOVE_DEAD"

DESTRUCTIVE_ACTIONS = frozenset({MARK_OOS, FLAG_WRONG, REMOVE_DEAD})
DEAD_LISTING_ERROR = "AI: Listing appears dead (page gone or no longer sold)"


@dataclass(frozen=True)
class ActionDecision:
    """
    Final action for one verdict, with the action the model proposed.
    """

    action: str
    proposed_action: str
    note: str | None = None

    @property
    def reconciled(self) -> bool:
        return self.action != self.proposed_action


def price_differs(expected: float, detected: float | None, *, tolerance: float) -> bool:
    if detected is None or detected <= 0 or expected <= 0:
        return False
    return abs(detected - expected) / expected > tolerance


def consistent_actions(verdict: AIVerdict, item: TrackableItem, *, price_tolerance: float) -> frozenset[str]:
    if not verdict.listing_active:
        return frozenset({REMOVE_DEAD})
    if not verdict.correct_product:
        return frozenset({FLAG_WRONG})
    if not verdict.in_stock:
        return frozenset({MARK_OOS})

    allowed: set[str] = set()
    if not item.in_stock:
        allowed.add(MARK_INSTOCK)
    if price_differs(item.price, verdict.detected_price, tolerance=price_tolerance):
        allowed.add(UPDATE_PRICE)
    return frozenset(allowed or {KEEP})


def reconcile_action(
    verdict: AIVerdict,
    item: TrackableItem,
    *,
    price_tolerance: float,
    min_action_confidence: float,
) -> ActionDecision:
    proposed = verdict.action
    if proposed == KEEP:
        return ActionDecision(action=KEEP, proposed_action=proposed)

    allowed = consistent_actions(verdict, item, price_tolerance=price_tolerance)
    if proposed not in allowed:
        return ActionDecision(
            action=KEEP,
            proposed_action=proposed,
            note=f"{proposed} inconsistent with verdict fields (allowed: {', '.join(sorted(allowed))})",
        )
    if proposed in DESTRUCTIVE_ACTIONS and verdict.confidence < min_action_confidence:
        return ActionDecision(
            action=KEEP,
            proposed_action=proposed,
            note=f"{proposed} confidence {verdict.confidence:.2f} below {min_action_confidence:.2f}",
        )
    return ActionDecision(action=proposed, proposed_action=proposed)


def listing_changes_for_action(
    action: str,
    verdict: AIVerdict,
    item: TrackableItem,
    *,
    verified_at: datetime,
    dead_confidence_threshold: float,
) -> dict[str, Any]:
    """
    Column values written for a final action. Applying the same map twice
    leaves the row unchanged.
    """
    changes: dict[str, Any] = {
        "ai_verified_at": verified_at,
        "ai_action": action,
        "ai_confidence": verdict.confidence,
    }

    if action == MARK_OOS:
        changes["in_stock"] = False
    elif action == MARK_INSTOCK:
        changes["in_stock"] = True
    elif action == UPDATE_PRICE:
        if verdict.detected_price is not None and verdict.detected_price > 0:
            changes["price"] = round(verdict.detected_price, 2)
        changes["in_stock"] = True
    elif action == FLAG_WRONG:
        detected = verdict.detected_product_name or verdict.page_title or "unknown"
        changes["check_error"] = f'AI: Expected "{item.product_name}", found "{detected}"'
    elif action == REMOVE_DEAD:
        changes["in_stock"] = False
        changes["check_error"] = DEAD_LISTING_ERROR
        if verdict.confidence >= dead_confidence_threshold:
            changes["stock_source"] = StockSource.DEAD
    return changes


def stock_status_changes(update: StockStatusUpdate) -> dict[str, Any]:
    """
    Column values written for one Tier-1 verdict. Transport failures record
    the failure but leave the stock flag alone.
    """
    changes: dict[str, Any] = {
        "stock_source": update.source,
        "last_checked_at": update.checked_at,
        "check_error": update.error,
    }
    if update.source not in StockSource.TRANSPORT_FAILURES:
        changes["in_stock"] = update.in_stock
    return changes
