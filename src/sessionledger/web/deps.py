from typing import Annotated, cast

import structlog
from fastapi import Depends, Request
from fastapi.security import APIKeyCookie, HTTPAuthorizationCredentials, HTTPBearer

from sessionledger.app import App
from sessionledger.core.modules.session.models import Credential, Session, Tracker
from sessionledger.errors import AuthenticationError

CREDENTIAL_COOKIE = "sid"
TRACKER_COOKIE = "eid"

# Security schemes
bearer_scheme = HTTPBearer(auto_error=False)
credential_cookie_scheme = APIKeyCookie(name=CREDENTIAL_COOKIE, auto_error=False)
tracker_cookie_scheme = APIKeyCookie(name=TRACKER_COOKIE, auto_error=False)


async def get_app(request: Request) -> App:
    return cast(App, request.app.state.app)


async def get_credential(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)] = None,
    credential_cookie: Annotated[str | None, Depends(credential_cookie_scheme)] = None,
) -> Credential | None:
    """Presented session credential from Authorization Bearer header or cookie."""

    # Check Bearer token first (preferred)
    if credentials and credentials.scheme == "Bearer":
        return Credential(credentials.credentials)
    if credential_cookie:
        return Credential(credential_cookie)
    return None


async def get_tracker(tracker_cookie: Annotated[str | None, Depends(tracker_cookie_scheme)] = None) -> Tracker | None:
    return Tracker(tracker_cookie) if tracker_cookie else None


async def get_session(
    app: Annotated[App, Depends(get_app)],
    credential: Annotated[Credential | None, Depends(get_credential)],
) -> Session:
    """Resolve the presented credential or reject the request."""
    session = await app.resolve_session(credential)
    if session is None:
        raise AuthenticationError("Invalid or expired session")
    structlog.contextvars.bind_contextvars(log_id=session.name)
    return session


# Type aliases for dependencies
AppDep = Annotated[App, Depends(get_app)]
CredentialDep = Annotated[Credential | None, Depends(get_credential)]
TrackerDep = Annotated[Tracker | None, Depends(get_tracker)]
SessionDep = Annotated[Session, Depends(get_session)]
