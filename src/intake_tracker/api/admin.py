"""Admin API endpoints with simple token auth."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status

if TYPE_CHECKING:
    from intake_tracker.containers import AppContainer

router = APIRouter(prefix="/admin", tags=["admin"])


def _get_admin_token(request: Request) -> str:
    container: AppContainer = request.app.state.container
    return container.settings.admin_token


def _get_api_secret(request: Request) -> str:
    container: AppContainer = request.app.state.container
    return container.settings.api_secret


async def require_admin(
    x_admin_token: str | None = Header(default=None),
    admin_token: str = Depends(_get_admin_token),
) -> None:
    """Ensure requests include a valid admin token."""
    if not x_admin_token or x_admin_token != admin_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)


async def require_api_key(
    x_api_key: str | None = Header(default=None),
    api_secret: str = Depends(_get_api_secret),
) -> None:
    """Ensure requests carry the shared API secret."""
    if not x_api_key or x_api_key != api_secret:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)


@router.get("/keys", dependencies=[Depends(require_admin)])
async def list_keys(request: Request, prefix: str | None = None) -> dict[str, object]:
    """Return every key in the store."""
    container: AppContainer = request.app.state.container
    return {"keys": await container.store.list(prefix)}


@router.post("/reset", dependencies=[Depends(require_admin)])
async def reset_store(request: Request) -> dict[str, object]:
    """Delete all stored data."""
    container: AppContainer = request.app.state.container
    removed = await container.intake_service.reset_all()
    return {"success": True, "message": "All data reset", "removed": removed}
