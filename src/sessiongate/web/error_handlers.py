import logging

from fastapi import Request
from fastapi.responses import JSONResponse, Response

from sessiongate.errors import CapacityError

logger = logging.getLogger(__name__)


def create_json_error_response(
    status_code: int, message: str, error_type: str | None = None, headers: dict[str, str] | None = None
) -> JSONResponse:
    """Create JSON error response with optional type for machine parsing."""
    content = {"message": message}
    if error_type:
        content["type"] = error_type
    return JSONResponse(status_code=status_code, content=content, headers=headers)


async def user_error_handler(_: Request, exc: Exception) -> Response:
    """Handle UserError subclasses; every one of them is an authentication failure (401)."""
    return create_json_error_response(status_code=401, message=str(exc), error_type="authentication_error")


async def capacity_error_handler(_: Request, exc: Exception) -> Response:
    """Handle session store outages (503, retryable)."""
    retry_after = exc.retry_after if isinstance(exc, CapacityError) else 1
    return create_json_error_response(
        status_code=503,
        message="Service temporarily unavailable, retry later.",
        error_type="service_unavailable",
        headers={"Retry-After": str(retry_after)},
    )


async def general_exception_handler(_: Request, exc: Exception) -> Response:
    """Handle unexpected errors (500)."""
    logger.exception("Unexpected error: %s", exc)
    return create_json_error_response(
        status_code=500, message="An unexpected error occurred.", error_type="internal_server_error"
    )
