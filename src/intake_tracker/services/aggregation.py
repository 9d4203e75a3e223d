"""Nutrient aggregation over daily records."""

import logging
import math
import re
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import UTC, date, datetime, time, timedelta, timezone
from decimal import ROUND_HALF_UP, Context, Decimal

from intake_tracker.domain.errors import NotFound
from intake_tracker.domain.intake import (
    DailyIntake,
    FoodItem,
    Ledger,
    MonthlySummary,
    OverallSummary,
    Summary,
)

_logger = logging.getLogger(__name__)

_FIELDS = ("calories", "protein", "carbs", "fat")
_LEADING_NUMBER = re.compile(r"^\s*[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")
_CENTS = Decimal("0.01")
_WIDE = Context(prec=400)

BREAKFAST_START = 5
LUNCH_START = 11
SNACK_START = 14
DINNER_START = 17
LATE_NIGHT_START = 21


@dataclass(frozen=True)
class _Totals:
    calories: float = 0.0
    protein: float = 0.0
    carbs: float = 0.0
    fat: float = 0.0

    def add(self, food: FoodItem) -> "_Totals":
        return _Totals(
            calories=self.calories + parse_decimal(food.calories),
            protein=self.protein + parse_decimal(food.protein),
            carbs=self.carbs + parse_decimal(food.carbs),
            fat=self.fat + parse_decimal(food.fat),
        )

    def plus(self, other: "_Totals") -> "_Totals":
        return _Totals(
            calories=self.calories + other.calories,
            protein=self.protein + other.protein,
            carbs=self.carbs + other.carbs,
            fat=self.fat + other.fat,
        )


def parse_decimal(value: str) -> float:
    """Parse the leading decimal number of a string, defaulting to zero."""
    match = _LEADING_NUMBER.match(value)
    if match is None:
        _logger.warning("Unparsable nutrient value %r counted as 0", value)
        return 0.0
    return float(match.group(0))


def format_number(value: float) -> str:
    """Render a float the way a plain number-to-string conversion does."""
    if math.isfinite(value) and value.is_integer():
        return str(int(value))
    return repr(value)


def summarize_foods(foods: Iterable[FoodItem]) -> Summary:
    """Sum each macro field across foods without rounding."""
    totals = _sum_foods(foods)
    return Summary(
        calories=format_number(totals.calories),
        protein=format_number(totals.protein),
        carbs=format_number(totals.carbs),
        fat=format_number(totals.fat),
    )


def parse_date_key(key: str) -> datetime | None:
    """Parse an ISO-8601 date-key; naive values are taken as UTC."""
    try:
        parsed = datetime.fromisoformat(key)
    except ValueError:
        _logger.warning("Skipping unparsable date key %r", key)
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def monthly_summary(ledger: Ledger, year: int, month: int) -> MonthlySummary:
    """Aggregate the records that fall in a UTC year and month."""
    selected: list[tuple[datetime, str]] = []
    for key in ledger:
        stamp = parse_date_key(key)
        if stamp is None:
            continue
        utc_stamp = stamp.astimezone(UTC)
        if (utc_stamp.year, utc_stamp.month) == (year, month):
            selected.append((stamp, key))
    selected.sort(key=lambda pair: pair[0], reverse=True)

    grand_total = _Totals()
    daily_intakes = []
    for _, key in selected:
        record = ledger[key]
        day_totals = _sum_foods(record.foods)
        grand_total = grand_total.plus(day_totals)
        daily_intakes.append(
            DailyIntake(
                date=key,
                foods=record.foods,
                summary=_fixed_summary(day_totals),
            )
        )

    days = len(selected)
    if days:
        average = _fixed_summary(
            _Totals(
                calories=grand_total.calories / days,
                protein=grand_total.protein / days,
                carbs=grand_total.carbs / days,
                fat=grand_total.fat / days,
            )
        )
    else:
        average = Summary(calories="0", protein="0", carbs="0", fat="0")

    return MonthlySummary(
        month=f"{year:04d}-{month:02d}",
        daily_intakes=daily_intakes,
        overall_summary=OverallSummary(
            total=_fixed_summary(grand_total), average=average
        ),
    )


def weekday_view(ledger: Ledger, today: date, offset_hours: int) -> list[DailyIntake]:
    """Return records on today's weekday, newest first, with meal types.

    Raises ``NotFound`` when no record shares today's weekday.
    """
    target = _sunday_based_weekday(today)
    selected: list[tuple[datetime, str]] = []
    for key in ledger:
        stamp = parse_date_key(key)
        if stamp is None:
            continue
        if _sunday_based_weekday(stamp.date()) == target:
            selected.append((stamp, key))
    if not selected:
        raise NotFound(f"No records found for weekday {target}")
    selected.sort(key=lambda pair: pair[0], reverse=True)

    intakes = []
    for stamp, key in selected:
        record = ledger[key]
        label = meal_type(stamp, offset_hours)
        intakes.append(
            DailyIntake(
                date=key,
                foods=[
                    food.model_copy(update={"meal_type": label})
                    for food in record.foods
                ],
                summary=record.summary,
            )
        )
    return intakes


def meal_type(stamp: datetime, offset_hours: int) -> str:
    """Classify a timestamp into a meal label.

    A stamp written at 00:00:00 with a zero UTC offset marks a date
    without a time of day and yields the weekday name instead.
    """
    if stamp.utcoffset() == timedelta(0) and stamp.time() == time.min:
        return f"On {stamp.strftime('%A')}"

    hour = stamp.astimezone(timezone(timedelta(hours=offset_hours))).hour
    if BREAKFAST_START <= hour < LUNCH_START:
        return "Breakfast"
    if LUNCH_START <= hour < SNACK_START:
        return "Lunch"
    if SNACK_START <= hour < DINNER_START:
        return "Snack"
    if DINNER_START <= hour < LATE_NIGHT_START:
        return "Dinner"
    return "Late Night Snack"


def _sum_foods(foods: Iterable[FoodItem]) -> _Totals:
    totals = _Totals()
    for food in foods:
        totals = totals.add(food)
    return totals


def _fixed_summary(totals: _Totals) -> Summary:
    return Summary(
        **{field: _two_decimals(getattr(totals, field)) for field in _FIELDS}
    )


def _two_decimals(value: float) -> str:
    """Round the exact binary value half away from zero to two places."""
    if not math.isfinite(value):
        return format_number(value)
    rounded = Decimal(value).quantize(_CENTS, rounding=ROUND_HALF_UP, context=_WIDE)
    return str(rounded)


def _sunday_based_weekday(day: date) -> int:
    return (day.weekday() + 1) % 7
