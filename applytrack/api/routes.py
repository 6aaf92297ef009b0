"""HTTP routes for authentication, applications, reminders and analytics."""

from typing import Any

from fastapi import APIRouter, Depends, Request, Response

from applytrack.accounts.models import (
    LoginRequest,
    PasswordChange,
    ProfileUpdate,
    RegisterRequest,
    User,
)
from applytrack.api.ratelimit import client_key
from applytrack.tracker.errors import RateLimitedError, UnauthenticatedError
from applytrack.tracker.schemas import ApplicationCreate, ApplicationUpdate

router = APIRouter()


def bearer_token(request: Request) -> str | None:
    header = request.headers.get("authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


async def current_user(request: Request) -> User:
    token = bearer_token(request)
    if token is None:
        raise UnauthenticatedError()
    return await request.app.state.auth.authenticate(token)


async def auth_rate_limit(request: Request) -> None:
    if not request.app.state.auth_limiter.hit(client_key(request)):
        raise RateLimitedError("Too many authentication attempts, please try again later.")


# Auth


@router.post("/auth/register", status_code=201, dependencies=[Depends(auth_rate_limit)])
async def register(payload: RegisterRequest, request: Request) -> dict[str, Any]:
    result = await request.app.state.auth.register(payload)
    return result.to_dict()


@router.post("/auth/login", dependencies=[Depends(auth_rate_limit)])
async def login(payload: LoginRequest, request: Request) -> dict[str, Any]:
    result = await request.app.state.auth.login(payload)
    return result.to_dict()


@router.post("/auth/logout", status_code=204)
async def logout(request: Request, user: User = Depends(current_user)) -> Response:
    await request.app.state.auth.logout(bearer_token(request))
    return Response(status_code=204)


@router.get("/auth/me")
async def me(user: User = Depends(current_user)) -> dict[str, Any]:
    return {"user": user.to_dict()}


@router.put("/auth/profile")
async def update_profile(
    payload: ProfileUpdate, request: Request, user: User = Depends(current_user)
) -> dict[str, Any]:
    updated = await request.app.state.auth.update_profile(user.id, payload)
    return {"user": updated.to_dict()}


@router.put("/auth/password")
async def change_password(
    payload: PasswordChange, request: Request, user: User = Depends(current_user)
) -> dict[str, str]:
    await request.app.state.auth.change_password(
        user.id, payload, current_token=bearer_token(request)
    )
    return {"message": "Password updated successfully"}


# Applications


@router.get("/applications")
async def list_applications(
    request: Request, user: User = Depends(current_user)
) -> list[dict[str, Any]]:
    records = await request.app.state.applications.list_all(user.id)
    return [record.to_dict() for record in records]


@router.get("/applications/{application_id}")
async def get_application(
    application_id: str, request: Request, user: User = Depends(current_user)
) -> dict[str, Any]:
    record = await request.app.state.applications.get_by_id(user.id, application_id)
    return record.to_dict()


@router.post("/applications", status_code=201)
async def create_application(
    payload: ApplicationCreate, request: Request, user: User = Depends(current_user)
) -> dict[str, Any]:
    record = await request.app.state.applications.create(user.id, payload)
    return record.to_dict()


@router.put("/applications/{application_id}")
async def update_application(
    application_id: str,
    payload: ApplicationUpdate,
    request: Request,
    user: User = Depends(current_user),
) -> dict[str, Any]:
    record = await request.app.state.applications.update(user.id, application_id, payload)
    return record.to_dict()


@router.delete("/applications/{application_id}", status_code=204)
async def delete_application(
    application_id: str, request: Request, user: User = Depends(current_user)
) -> Response:
    await request.app.state.applications.delete(user.id, application_id)
    return Response(status_code=204)


# Reminders


@router.get("/reminders")
async def due_reminders(
    request: Request, user: User = Depends(current_user)
) -> list[dict[str, Any]]:
    reminders = await request.app.state.reminders.due(user.id)
    return [reminder.to_dict() for reminder in reminders]


@router.post("/reminders/{application_id}/acknowledge")
async def acknowledge_reminder(
    application_id: str, request: Request, user: User = Depends(current_user)
) -> dict[str, bool]:
    await request.app.state.reminders.acknowledge(user.id, application_id)
    return {"success": True}


# Analytics


@router.get("/analytics")
async def analytics(request: Request, user: User = Depends(current_user)) -> dict[str, Any]:
    stats = await request.app.state.analytics.stats(user.id)
    return stats.to_dict()
