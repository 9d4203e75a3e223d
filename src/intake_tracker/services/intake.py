"""Intake ingestion and ledger queries."""

import asyncio
import logging
from collections import Counter
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import UTC, date, datetime, timedelta, timezone

from intake_tracker.domain.errors import (
    InferenceUnavailable,
    IntakeError,
    NotFound,
    ReservedUserName,
    StoreUnavailable,
)
from intake_tracker.domain.intake import (
    DailyIntake,
    Ledger,
    MonthlySummary,
    serialize_ledger,
)
from intake_tracker.services import aggregation
from intake_tracker.services.extraction import parse_completion
from intake_tracker.services.inference import (
    InferenceClient,
    build_system_prompt,
    read_completion,
)
from intake_tracker.services.ledger import (
    decode_ledger,
    load_existing,
    merge_ledger,
    refresh_summaries,
)
from intake_tracker.services.store import KeyValueStore

RESERVED_PREFIXES = ("ws:", "leaderboard:")

_logger = logging.getLogger(__name__)


@dataclass
class IntakeService:
    """Service that turns free-text meals into stored daily records.

    Reads and writes of one user's ledger are not atomic: two concurrent
    intakes for the same user can race and the last ``put`` wins. With
    ``serialize_user_writes`` enabled, mutations for one user are queued
    behind a per-user lock, which only covers this process. A lock is
    dropped once nothing holds or waits on it.

    Names starting with a reserved prefix raise ``ReservedUserName``.
    """

    client: InferenceClient
    store: KeyValueStore
    inference_timeout_seconds: float = 60.0
    meal_timezone_offset_hours: int = 8
    serialize_user_writes: bool = False
    guidelines: str | None = None
    _locks: dict[str, asyncio.Lock] = field(default_factory=dict, repr=False)
    _lock_users: Counter[str] = field(default_factory=Counter, repr=False)

    async def ingest(self, user_name: str, prompt: str) -> Ledger:
        """Infer foods from a prompt and merge them into the user's ledger."""
        _check_user_name(user_name)
        raw_text = await self._complete(prompt)
        try:
            fragment = parse_completion(raw_text)
        except IntakeError:
            _logger.exception("Error parsing AI response for %s", user_name)
            _logger.error("Problematic response text: %s", raw_text)
            raise

        async with self._user_lock(user_name):
            existing = load_existing(user_name, await self._get(user_name))
            merged = merge_ledger(existing, fragment)
            touched = list(fragment)
            merged = refresh_summaries(merged, touched)
            await self._put(user_name, serialize_ledger(merged))

        _logger.info(
            "Stored intake for %s at %s (%s existing)",
            user_name,
            ", ".join(touched),
            "merged" if existing else "new",
        )
        return {key: merged[key] for key in touched}

    async def get_ledger(self, user_name: str) -> Ledger:
        """Return the stored ledger for a user."""
        _check_user_name(user_name)
        raw = await self._get(user_name)
        if raw is None:
            raise NotFound(f"No intake data for {user_name}")
        return decode_ledger(user_name, raw)

    async def monthly_summary(
        self, user_name: str, month: tuple[int, int] | None = None
    ) -> MonthlySummary:
        """Return the aggregate for a UTC month, defaulting to the current one."""
        ledger = await self.get_ledger(user_name)
        if month is None:
            now = datetime.now(tz=UTC)
            month = (now.year, now.month)
        year, month_number = month
        return aggregation.monthly_summary(ledger, year, month_number)

    async def weekday_view(
        self, user_name: str, today: date | None = None
    ) -> list[DailyIntake]:
        """Return records that share today's weekday."""
        ledger = await self.get_ledger(user_name)
        if today is None:
            tz = timezone(timedelta(hours=self.meal_timezone_offset_hours))
            today = datetime.now(tz=tz).date()
        return aggregation.weekday_view(
            ledger, today, self.meal_timezone_offset_hours
        )

    async def delete_date(self, user_name: str, date_key: str) -> None:
        """Remove one date-key, dropping the ledger when it was the last."""
        _check_user_name(user_name)
        async with self._user_lock(user_name):
            ledger = await self.get_ledger(user_name)
            if date_key not in ledger:
                raise NotFound(f"No record for {user_name} at {date_key}")
            del ledger[date_key]
            if ledger:
                await self._put(user_name, serialize_ledger(ledger))
            else:
                await self._delete(user_name)
        _logger.info("Deleted %s for %s", date_key, user_name)

    async def reset_user(self, user_name: str) -> None:
        """Delete the whole ledger of a user."""
        _check_user_name(user_name)
        async with self._user_lock(user_name):
            if await self._get(user_name) is None:
                raise NotFound(f"No intake data for {user_name}")
            await self._delete(user_name)
        _logger.info("Reset ledger for %s", user_name)

    async def list_users(self) -> list[str]:
        """Return the names of users with a stored ledger."""
        keys = await self._list()
        return [key for key in keys if not key.startswith(RESERVED_PREFIXES)]

    async def reset_all(self) -> int:
        """Delete every key in the store and return how many were removed."""
        keys = await self._list()
        for key in keys:
            await self._delete(key)
        _logger.warning("Reset store, removed %s keys", len(keys))
        return len(keys)

    async def _complete(self, prompt: str) -> str:
        system_prompt = build_system_prompt(datetime.now(tz=UTC), self.guidelines)

        async def run() -> str:
            result = await self.client.run(system_prompt, prompt)
            return await read_completion(result)

        try:
            return await asyncio.wait_for(run(), timeout=self.inference_timeout_seconds)
        except TimeoutError as exc:
            raise InferenceUnavailable(
                f"Inference timed out after {self.inference_timeout_seconds}s"
            ) from exc
        except IntakeError:
            raise
        except Exception as exc:
            _logger.exception("Inference request failed")
            raise InferenceUnavailable(f"{type(exc).__name__}: {exc}") from exc

    @asynccontextmanager
    async def _user_lock(self, user_name: str) -> AsyncIterator[None]:
        if not self.serialize_user_writes:
            yield
            return
        lock = self._locks.setdefault(user_name, asyncio.Lock())
        self._lock_users[user_name] += 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[user_name] -= 1
            if not self._lock_users[user_name]:
                del self._lock_users[user_name]
                del self._locks[user_name]

    async def _get(self, key: str) -> str | None:
        try:
            return await self.store.get(key)
        except IntakeError:
            raise
        except Exception as exc:
            raise StoreUnavailable(f"get {key!r} failed: {exc}") from exc

    async def _put(self, key: str, value: str) -> None:
        try:
            await self.store.put(key, value)
        except IntakeError:
            raise
        except Exception as exc:
            raise StoreUnavailable(f"put {key!r} failed: {exc}") from exc

    async def _delete(self, key: str) -> None:
        try:
            await self.store.delete(key)
        except IntakeError:
            raise
        except Exception as exc:
            raise StoreUnavailable(f"delete {key!r} failed: {exc}") from exc

    async def _list(self, prefix: str | None = None) -> list[str]:
        try:
            return await self.store.list(prefix)
        except IntakeError:
            raise
        except Exception as exc:
            raise StoreUnavailable(f"list failed: {exc}") from exc


def _check_user_name(user_name: str) -> None:
    if user_name.startswith(RESERVED_PREFIXES):
        raise ReservedUserName(user_name)
