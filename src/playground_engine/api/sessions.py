"""User-facing endpoints for sessions, templates and pools."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status

from playground_engine.api.models import (
    SessionRequest,
    SessionUpdateRequest,
    serialize_pool,
    serialize_session,
)
from playground_engine.domain.users import User  # noqa: TC001
from playground_engine.services.sessions import (
    check_customization,
    check_update_customization,
)

if TYPE_CHECKING:
    from playground_engine.containers import AppContainer

router = APIRouter(tags=["sessions"])


@dataclass(frozen=True)
class LoggedUser:
    """Registered user issuing the current request."""

    id: str
    user: User


async def require_user(
    request: Request, x_user_id: str | None = Header(default=None)
) -> LoggedUser:
    """Resolve the calling user from the registry."""
    if not x_user_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)
    container: AppContainer = request.app.state.container
    user = await container.user_service.get_user(x_user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)
    return LoggedUser(id=x_user_id, user=user)


def _ensure_owner(logged_user: LoggedUser, session_id: str) -> None:
    """Non-admin users may only address the session named after them."""
    if not logged_user.user.admin and logged_user.id != session_id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN)


@router.get("/sessions/{session_id}")
async def get_session(
    session_id: str,
    request: Request,
    logged_user: LoggedUser = Depends(require_user),
) -> dict[str, object]:
    """Return a session."""
    _ensure_owner(logged_user, session_id)
    container: AppContainer = request.app.state.container
    session = await container.session_orchestrator.get_session(session_id)
    if session is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    return serialize_session(session)


@router.put("/sessions/{session_id}")
async def create_session(
    session_id: str,
    payload: SessionRequest,
    request: Request,
    logged_user: LoggedUser = Depends(require_user),
) -> dict[str, str]:
    """Create a session."""
    _ensure_owner(logged_user, session_id)
    configuration = payload.to_configuration()
    check_customization(logged_user.user, configuration)
    container: AppContainer = request.app.state.container
    await container.session_orchestrator.create_session(
        logged_user.user, session_id, configuration
    )
    return {"status": "ok"}


@router.patch("/sessions/{session_id}")
async def update_session(
    session_id: str,
    payload: SessionUpdateRequest,
    request: Request,
    logged_user: LoggedUser = Depends(require_user),
) -> dict[str, str]:
    """Update a session duration."""
    _ensure_owner(logged_user, session_id)
    configuration = payload.to_configuration()
    check_update_customization(logged_user.user, configuration)
    container: AppContainer = request.app.state.container
    await container.session_orchestrator.update_session(session_id, configuration)
    return {"status": "ok"}


@router.delete("/sessions/{session_id}")
async def delete_session(
    session_id: str,
    request: Request,
    logged_user: LoggedUser = Depends(require_user),
) -> dict[str, str]:
    """Delete a session."""
    _ensure_owner(logged_user, session_id)
    container: AppContainer = request.app.state.container
    await container.session_orchestrator.delete_session(session_id)
    return {"status": "ok"}


@router.get("/templates", dependencies=[Depends(require_user)])
async def list_templates(request: Request) -> dict[str, object]:
    """Return available templates."""
    container: AppContainer = request.app.state.container
    templates = await container.template_service.list_templates()
    return {
        "templates": {
            key: template.model_dump(mode="json", exclude_none=True)
            for key, template in templates.items()
        }
    }


@router.get("/pools", dependencies=[Depends(require_user)])
async def list_pools(request: Request) -> dict[str, object]:
    """Return node pools."""
    container: AppContainer = request.app.state.container
    pools = await container.pool_service.list_pools()
    return {"pools": [serialize_pool(pool) for pool in pools.values()]}


@router.get("/pools/{pool_id}", dependencies=[Depends(require_user)])
async def get_pool(pool_id: str, request: Request) -> dict[str, object]:
    """Return a single pool."""
    container: AppContainer = request.app.state.container
    pool = await container.pool_service.get_pool(pool_id)
    if pool is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    return serialize_pool(pool)
