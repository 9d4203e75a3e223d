"""Models for daily intake records."""

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


class FoodItem(BaseModel):
    """Single food entry with macros kept as decimal strings."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    name: str
    calories: str
    protein: str
    carbs: str
    fat: str
    amount: str
    meal_type: str | None = Field(default=None, alias="mealType")

    def identity(self) -> tuple[str, str, str, str, str, str]:
        """Return the tuple used to detect duplicate entries."""
        return (
            self.name,
            self.amount,
            self.calories,
            self.protein,
            self.carbs,
            self.fat,
        )


class Summary(BaseModel):
    """Per-field macro totals as decimal strings."""

    model_config = ConfigDict(extra="ignore")

    calories: str
    protein: str
    carbs: str
    fat: str


class DailyRecord(BaseModel):
    """Foods eaten at one date-key and their summary."""

    model_config = ConfigDict(extra="ignore")

    foods: list[FoodItem]
    summary: Summary


Ledger = dict[str, DailyRecord]

LEDGER_ADAPTER: TypeAdapter[Ledger] = TypeAdapter(Ledger)


class DailyIntake(BaseModel):
    """A daily record flattened with its date-key."""

    model_config = ConfigDict(populate_by_name=True)

    date: str
    foods: list[FoodItem]
    summary: Summary


class OverallSummary(BaseModel):
    """Grand total and per-day average across a period."""

    total: Summary
    average: Summary


class MonthlySummary(BaseModel):
    """Monthly aggregate returned to callers."""

    model_config = ConfigDict(populate_by_name=True)

    month: str
    daily_intakes: list[DailyIntake] = Field(alias="dailyIntakes")
    overall_summary: OverallSummary = Field(alias="overallSummary")


def dump_ledger(ledger: Ledger) -> dict[str, object]:
    """Return the wire representation of a ledger."""
    return LEDGER_ADAPTER.dump_python(ledger, by_alias=True, exclude_none=True)


def serialize_ledger(ledger: Ledger) -> str:
    """Serialize a ledger to the JSON text kept in the store."""
    return LEDGER_ADAPTER.dump_json(ledger, by_alias=True, exclude_none=True).decode(
        "utf-8"
    )
