from typing import Annotated, cast

from fastapi import Depends, Request

from sessiongate.config import Config
from sessiongate.core.core import Core
from sessiongate.core.modules.session.models import Session
from sessiongate.core.modules.session.store import Clock
from sessiongate.gateway import AuthGateway


async def get_core(request: Request) -> Core:
    return cast(Core, request.app.state.core)


async def get_gateway(core: Annotated[Core, Depends(get_core)]) -> AuthGateway:
    return core.gateway


async def get_config(core: Annotated[Core, Depends(get_core)]) -> Config:
    return core.config


async def get_clock(core: Annotated[Core, Depends(get_core)]) -> Clock:
    return core.clock


async def get_session_token(request: Request, config: Annotated[Config, Depends(get_config)]) -> str | None:
    """Read the raw session cookie; validation is left to the gateway."""
    return request.cookies.get(config.cookie_name)


async def get_current_session(
    gateway: Annotated[AuthGateway, Depends(get_gateway)],
    token: Annotated[str | None, Depends(get_session_token)],
) -> Session:
    return await gateway.resolve(token)


# Type aliases for dependencies
GatewayDep = Annotated[AuthGateway, Depends(get_gateway)]
ConfigDep = Annotated[Config, Depends(get_config)]
ClockDep = Annotated[Clock, Depends(get_clock)]
SessionTokenDep = Annotated[str | None, Depends(get_session_token)]
CurrentSessionDep = Annotated[Session, Depends(get_current_session)]
