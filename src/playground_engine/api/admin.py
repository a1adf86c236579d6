"""Admin API endpoints with simple token auth."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status

from playground_engine.api.models import serialize_session
from playground_engine.domain.users import User  # noqa: TC001

if TYPE_CHECKING:
    from playground_engine.containers import AppContainer

router = APIRouter(prefix="/admin", tags=["admin"])


def _get_admin_token(request: Request) -> str:
    container: AppContainer = request.app.state.container
    return container.settings.admin_token


async def require_admin(
    x_admin_token: str | None = Header(default=None),
    admin_token: str = Depends(_get_admin_token),
) -> None:
    """Ensure requests include a valid admin token."""
    if not x_admin_token or x_admin_token != admin_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)


@router.get("/sessions", dependencies=[Depends(require_admin)])
async def list_sessions(request: Request) -> dict[str, object]:
    """Return every running session."""
    container: AppContainer = request.app.state.container
    sessions = await container.session_orchestrator.list_sessions()
    return {"sessions": [serialize_session(session) for session in sessions]}


@router.get("/users", dependencies=[Depends(require_admin)])
async def list_users(request: Request) -> dict[str, object]:
    """Return registered users."""
    container: AppContainer = request.app.state.container
    users = await container.user_service.list_users()
    return {"users": {key: user.model_dump() for key, user in users.items()}}


@router.get("/users/{user_id}", dependencies=[Depends(require_admin)])
async def get_user(user_id: str, request: Request) -> dict[str, object]:
    container: AppContainer = request.app.state.container
    user = await container.user_service.get_user(user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    return user.model_dump()


@router.put("/users/{user_id}", dependencies=[Depends(require_admin)])
async def create_user(user_id: str, user: User, request: Request) -> dict[str, str]:
    container: AppContainer = request.app.state.container
    await container.user_service.create_user(user_id, user)
    return {"status": "ok"}


@router.patch("/users/{user_id}", dependencies=[Depends(require_admin)])
async def update_user(user_id: str, user: User, request: Request) -> dict[str, str]:
    container: AppContainer = request.app.state.container
    await container.user_service.update_user(user_id, user)
    return {"status": "ok"}


@router.delete("/users/{user_id}", dependencies=[Depends(require_admin)])
async def delete_user(user_id: str, request: Request) -> dict[str, str]:
    container: AppContainer = request.app.state.container
    await container.user_service.delete_user(user_id)
    return {"status": "ok"}
