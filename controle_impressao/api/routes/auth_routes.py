from flask import Blueprint, jsonify, request

from controle_impressao.api.middlewares.auth_middleware import current_user, require_auth
from controle_impressao.api.schemas.auth_schema import LoginRequest, TokenResponse
from controle_impressao.api.schemas.solicitation_schema import UserResponse
from controle_impressao.config.settings import settings
from controle_impressao.infrastructure.identity.suap_identity_provider import SuapIdentityProvider
from controle_impressao.infrastructure.security.jwt_provider import JwtProvider
from controle_impressao.services.auth_service import AuthService

bp_auth = Blueprint("auth", __name__)


def _build_service() -> AuthService:
    return AuthService(
        identity_provider=SuapIdentityProvider(),
        jwt_provider=JwtProvider(),
        admin_registrations=settings.admin_registrations,
        manager_registrations=settings.manager_registrations,
    )


@bp_auth.post("/login")
def login():
    payload = LoginRequest.model_validate(request.get_json(force=True))

    access, user = _build_service().login(
        username=payload.username,
        password=payload.password,
        suap_token=payload.suap_token,
    )

    return jsonify(TokenResponse(access_token=access, user=UserResponse.from_user(user)).model_dump()), 200


@bp_auth.get("/me")
@require_auth
def me():
    return jsonify(UserResponse.from_user(current_user()).model_dump()), 200
