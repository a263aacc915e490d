from functools import wraps
from typing import Any, Callable, TypeVar

from flask import g, request

from controle_impressao.core.exceptions import UnauthorizedError
from controle_impressao.entities.user import User
from controle_impressao.infrastructure.security.jwt_provider import JwtProvider

F = TypeVar("F", bound=Callable[..., Any])


def _get_bearer_token() -> str:
    auth = request.headers.get("Authorization", "")
    parts = auth.split()
    if len(parts) == 2 and parts[0].lower() == "bearer":
        return parts[1]
    raise UnauthorizedError("Token ausente.")


def current_user() -> User:
    user = getattr(g, "user", None)
    if user is None:
        raise UnauthorizedError("Token ausente.")
    return user


def require_auth(fn: F) -> F:
    @wraps(fn)
    def wrapper(*args, **kwargs):
        token = _get_bearer_token()
        user = JwtProvider().decode_user(token)

        if not user.registration_number:
            raise UnauthorizedError("Token inválido.")

        g.user = user
        return fn(*args, **kwargs)

    return wrapper  # type: ignore[return-value]
