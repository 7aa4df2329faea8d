from fastapi import Response

from sessiongate.config import Config


def set_session_cookie(response: Response, config: Config, token: str, max_age: int) -> None:
    response.set_cookie(
        key=config.cookie_name,
        value=token,
        max_age=max(max_age, 0),
        path="/",
        httponly=True,
        secure=config.cookie_secure,
        samesite=config.cookie_samesite,
    )


def clear_session_cookie(response: Response, config: Config) -> None:
    response.delete_cookie(
        key=config.cookie_name,
        path="/",
        httponly=True,
        secure=config.cookie_secure,
        samesite=config.cookie_samesite,
    )
