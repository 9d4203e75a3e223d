"""Merge freshly inferred fragments into stored ledgers."""

import json
import logging

from pydantic import ValidationError

from intake_tracker.domain.errors import CorruptedLedger
from intake_tracker.domain.intake import LEDGER_ADAPTER, DailyRecord, FoodItem, Ledger
from intake_tracker.services.aggregation import summarize_foods

_logger = logging.getLogger(__name__)


def decode_ledger(user_name: str, raw: str) -> Ledger:
    """Decode a stored ledger blob, raising ``CorruptedLedger`` on failure."""
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise CorruptedLedger(user_name, str(exc)) from exc
    try:
        return LEDGER_ADAPTER.validate_python(payload)
    except ValidationError as exc:
        raise CorruptedLedger(user_name, str(exc)) from exc


def load_existing(user_name: str, raw: str | None) -> Ledger | None:
    """Decode a stored ledger for merging, treating corruption as absent."""
    if raw is None:
        return None
    try:
        return decode_ledger(user_name, raw)
    except CorruptedLedger as exc:
        _logger.warning("Discarding corrupted ledger: %s", exc)
        return None


def merge_foods(existing: list[FoodItem], incoming: list[FoodItem]) -> list[FoodItem]:
    """Append incoming foods that do not duplicate an existing one."""
    seen = {food.identity() for food in existing}
    merged = list(existing)
    for food in incoming:
        if food.identity() in seen:
            continue
        merged.append(food)
    return merged


def merge_ledger(existing: Ledger | None, fragment: Ledger) -> Ledger:
    """Merge a fragment into a ledger without replacing stored foods.

    Summaries of merged keys are left stale; callers run
    ``refresh_summaries`` before persisting.
    """
    if existing is None:
        return dict(fragment)

    merged = dict(existing)
    for date_key, record in fragment.items():
        current = merged.get(date_key)
        if current is None:
            merged[date_key] = record
            continue
        merged[date_key] = DailyRecord(
            foods=merge_foods(current.foods, record.foods),
            summary=current.summary,
        )
    return merged


def refresh_summaries(ledger: Ledger, date_keys: list[str]) -> Ledger:
    """Recompute the summary of each listed date-key from its foods."""
    refreshed = dict(ledger)
    for date_key in date_keys:
        record = refreshed[date_key]
        refreshed[date_key] = DailyRecord(
            foods=record.foods, summary=summarize_foods(record.foods)
        )
    return refreshed
