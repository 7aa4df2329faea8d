from fastapi import APIRouter, Response
from pydantic import BaseModel, Field

from sessiongate.core.modules.user.models import Credentials, PrincipalView
from sessiongate.web.cookies import clear_session_cookie, set_session_cookie
from sessiongate.web.deps import ClockDep, ConfigDep, CurrentSessionDep, GatewayDep, SessionTokenDep
from sessiongate.web.openapi import ErrorResponse

router = APIRouter(tags=["auth"])


class LoginRequest(BaseModel):
    """Authentication request."""

    username: str = Field(..., min_length=1, description="Username for authentication")
    password: str = Field(..., description="Password for authentication")


@router.post(
    "/login",
    summary="Authenticate user",
    description="Authenticate with username and password; the session is returned as an HttpOnly cookie.",
    operation_id="login",
    status_code=204,
    responses={
        204: {"description": "Successfully authenticated, session cookie set"},
        401: {"model": ErrorResponse, "description": "Invalid credentials"},
        503: {"model": ErrorResponse, "description": "Session store unavailable"},
    },
)
async def login(login_data: LoginRequest, gateway: GatewayDep, config: ConfigDep, response: Response) -> None:
    token = await gateway.login(Credentials(username=login_data.username, password=login_data.password))
    set_session_cookie(response, config, token, max_age=config.session_ttl_seconds)


@router.delete(
    "/logout",
    summary="End session",
    description="Revoke the current session and clear the cookie. Succeeds without a valid session.",
    operation_id="logout",
    status_code=204,
    responses={
        204: {"description": "Successfully logged out"},
        503: {"model": ErrorResponse, "description": "Session store unavailable"},
    },
)
async def logout(gateway: GatewayDep, config: ConfigDep, token: SessionTokenDep, response: Response) -> None:
    await gateway.logout(token)
    clear_session_cookie(response, config)


@router.get(
    "/me",
    summary="Get current principal",
    description="Get the principal bound to the current session.",
    operation_id="getCurrentPrincipal",
    responses={
        200: {"description": "Current principal"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        503: {"model": ErrorResponse, "description": "Session store unavailable"},
    },
)
async def me(
    session: CurrentSessionDep,
    gateway: GatewayDep,
    config: ConfigDep,
    clock: ClockDep,
    token: SessionTokenDep,
    response: Response,
) -> PrincipalView:
    principal = await gateway.load_principal(session.subject_id)
    if config.sliding_expiration and token:
        # Keep the cookie alive as long as the session it points at
        remaining = int((session.expires_at - clock()).total_seconds())
        set_session_cookie(response, config, token, max_age=remaining)
    return PrincipalView.from_domain(principal)
