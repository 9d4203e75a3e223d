"""Intake and summary endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, HTTPException, Request, status

from intake_tracker.api.admin import require_api_key
from intake_tracker.api.request_models import IntakePrompt  # noqa: TC001
from intake_tracker.config import parse_month
from intake_tracker.domain.intake import dump_ledger

if TYPE_CHECKING:
    from intake_tracker.containers import AppContainer

router = APIRouter(
    prefix="/intake", tags=["intake"], dependencies=[Depends(require_api_key)]
)


@router.post("")
async def create_intake(payload: IntakePrompt, request: Request) -> dict[str, object]:
    """Analyze a meal description and merge it into the user's ledger."""
    container: AppContainer = request.app.state.container
    fragment = await container.intake_service.ingest(
        payload.user_name, payload.prompt
    )
    return dump_ledger(fragment)


@router.get("/users")
async def list_users(request: Request) -> dict[str, object]:
    """Return users with stored intake data."""
    container: AppContainer = request.app.state.container
    return {"users": await container.intake_service.list_users()}


@router.get("/{user_name}")
async def get_ledger(user_name: str, request: Request) -> dict[str, object]:
    """Return every daily record of a user."""
    container: AppContainer = request.app.state.container
    ledger = await container.intake_service.get_ledger(user_name)
    return dump_ledger(ledger)


@router.get("/{user_name}/summary")
async def monthly_summary(
    user_name: str, request: Request, month: str | None = None
) -> dict[str, object]:
    """Return totals and averages for a month (YYYY-MM, UTC)."""
    container: AppContainer = request.app.state.container
    try:
        target = parse_month(month)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)
        ) from exc
    summary = await container.intake_service.monthly_summary(user_name, target)
    return summary.model_dump(by_alias=True, exclude_none=True)


@router.get("/{user_name}/daily")
async def weekday_view(user_name: str, request: Request) -> dict[str, object]:
    """Return the records that fall on today's weekday."""
    container: AppContainer = request.app.state.container
    intakes = await container.intake_service.weekday_view(user_name)
    return {
        "dailyIntakes": [
            intake.model_dump(by_alias=True, exclude_none=True) for intake in intakes
        ]
    }


@router.delete("/{user_name}/{date_key}")
async def delete_date(
    user_name: str, date_key: str, request: Request
) -> dict[str, object]:
    """Delete one daily record."""
    container: AppContainer = request.app.state.container
    await container.intake_service.delete_date(user_name, date_key)
    return {"success": True, "message": f"Deleted {date_key} for {user_name}"}


@router.delete("/{user_name}")
async def reset_user(user_name: str, request: Request) -> dict[str, object]:
    """Delete all intake data of a user."""
    container: AppContainer = request.app.state.container
    await container.intake_service.reset_user(user_name)
    return {"success": True, "message": f"All data reset for {user_name}"}
