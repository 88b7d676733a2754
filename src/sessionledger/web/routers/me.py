from typing import Any

import structlog
from fastapi import APIRouter, Response
from pydantic import BaseModel, Field

from sessionledger.config import Config
from sessionledger.core.modules.lifecycle.models import MeView
from sessionledger.core.modules.session.models import SessionSettings
from sessionledger.web.deps import CREDENTIAL_COOKIE, TRACKER_COOKIE, AppDep, CredentialDep, SessionDep, TrackerDep
from sessionledger.web.openapi import ErrorResponse

router = APIRouter(tags=["me"])


class RestoreRequest(BaseModel):
    """Client-reported evidence and transport hint."""

    evidence: dict[str, Any] = Field(default_factory=dict, description="Client attributes: device, locale, ...")
    secure: bool = Field(default=False, description="Issue the tracker cookie as secure-only")


def set_session_cookies(response: Response, me: MeView, config: Config) -> None:
    """Issue the tracker, and the credential when one was just created."""
    if me.credential is not None:
        response.set_cookie(
            key=CREDENTIAL_COOKIE,
            value=me.credential,
            httponly=True,
            samesite="lax",
            secure=me.settings.secure_tracker_only,
            max_age=config.credential_cookie_max_age,
        )
    response.set_cookie(
        key=TRACKER_COOKIE,
        value=me.tracker,
        httponly=True,
        samesite="lax",
        secure=me.settings.secure_tracker_only,
        max_age=config.tracker_cookie_max_age,
    )


@router.post(
    "/me/restore",
    summary="Restore or create session",
    description=(
        "Accepts a missing or invalid credential and returns a new or existing valid session. "
        "Changed evidence rotates the tracker."
    ),
    operation_id="restoreSession",
    responses={
        200: {"description": "Existing session restored"},
        201: {"description": "New session created"},
        400: {"model": ErrorResponse, "description": "Invalid evidence"},
    },
)
async def restore(
    request: RestoreRequest, app: AppDep, credential: CredentialDep, tracker: TrackerDep, response: Response
) -> MeView:
    result = await app.restore(credential, tracker, request.evidence, request.secure)
    structlog.contextvars.bind_contextvars(log_id=result.session.name)
    if result.me.flags.is_new_session:
        response.status_code = 201
    set_session_cookies(response, result.me, app.config)
    return result.me


@router.get(
    "/me",
    summary="Get current session",
    description="Describe the current session and its associated user without rotating the tracker.",
    operation_id="getMe",
    responses={
        200: {"description": "Current session"},
        401: {"model": ErrorResponse, "description": "No valid session"},
    },
)
async def get_me(app: AppDep, session: SessionDep) -> MeView:
    return await app.get_me(session)


@router.post(
    "/me/settings",
    summary="Save session settings",
    description="Replace the client settings kept with the current session.",
    operation_id="saveSettings",
    status_code=204,
    responses={
        204: {"description": "Settings saved"},
        401: {"model": ErrorResponse, "description": "No valid session"},
    },
)
async def save_settings(settings: SessionSettings, app: AppDep, session: SessionDep) -> None:
    await app.save_settings(session, settings)
