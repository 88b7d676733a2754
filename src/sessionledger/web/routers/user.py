from uuid import UUID

from fastapi import APIRouter
from pydantic import BaseModel, Field

from sessionledger.core.modules.association.models import AuthMethods
from sessionledger.core.modules.lifecycle.models import MeView
from sessionledger.web.deps import AppDep, SessionDep
from sessionledger.web.openapi import ErrorResponse

router = APIRouter(prefix="/me/user", tags=["user"])


class StrategiesRequest(BaseModel):
    """Lookup of auth methods; defaults to the associated user."""

    user: UUID | None = Field(default=None, description="User ID to look up")


class PasswordLoginRequest(BaseModel):
    """Password authentication request."""

    token: str = Field(..., min_length=1, description="Login token returned by the strategies lookup")
    password: str = Field(..., min_length=1, description="Clear text password")


class CreateUserRequest(BaseModel):
    """Request to create a user associated with the current session."""

    name: str = Field(..., min_length=1, description="Public user name")
    password: str = Field(..., min_length=1, description="Password for the new user")


@router.post(
    "/logout",
    summary="Disassociate user",
    description="Remove the current session's association with its user. Intended for shared devices.",
    operation_id="logout",
    status_code=204,
    responses={
        204: {"description": "Disassociated, or nothing was associated"},
        401: {"model": ErrorResponse, "description": "No valid session"},
    },
)
async def logout(app: AppDep, session: SessionDep) -> None:
    await app.logout(session)


@router.post(
    "/strategies",
    summary="Get enabled auth methods",
    description="Auth methods enabled for a user. User IDs are public; unknown IDs return 404.",
    operation_id="getAuthMethods",
    responses={
        200: {"description": "Enabled auth methods, possibly none"},
        401: {"model": ErrorResponse, "description": "No valid session"},
        404: {"model": ErrorResponse, "description": "User not found"},
    },
)
async def strategies(request: StrategiesRequest, app: AppDep, session: SessionDep) -> AuthMethods:
    return await app.get_auth_methods(session, request.user)


@router.post(
    "/password",
    summary="Authenticate with password",
    description="Associate the token's user with the current session when the password is correct.",
    operation_id="loginPassword",
    status_code=204,
    responses={
        204: {"description": "User associated"},
        401: {"model": ErrorResponse, "description": "No valid session or invalid credentials"},
    },
)
async def password(request: PasswordLoginRequest, app: AppDep, session: SessionDep) -> None:
    await app.login_password(session, request.token, request.password)


@router.post(
    "/create",
    summary="Create user",
    description="Create a user with a password and associate it with the current session.",
    operation_id="createUser",
    status_code=201,
    responses={
        201: {"description": "User created and associated"},
        400: {"model": ErrorResponse, "description": "Invalid name or password, or name taken"},
        401: {"model": ErrorResponse, "description": "No valid session"},
    },
)
async def create_user(request: CreateUserRequest, app: AppDep, session: SessionDep) -> MeView:
    return await app.register(session, request.name, request.password)
