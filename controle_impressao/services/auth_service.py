# controle_impressao/services/auth_service.py

from loguru import logger

from controle_impressao.core.enums import Role
from controle_impressao.core.exceptions import BadRequestError
from controle_impressao.core.interfaces.identity_provider import IdentityProvider, UserProfile
from controle_impressao.entities.user import User
from controle_impressao.infrastructure.security.jwt_provider import JwtProvider


class AuthService:
    def __init__(
        self,
        *,
        identity_provider: IdentityProvider,
        jwt_provider: JwtProvider,
        admin_registrations: set[str],
        manager_registrations: set[str],
    ) -> None:
        self._identity = identity_provider
        self._jwt = jwt_provider
        self._admins = set(admin_registrations)
        self._managers = set(manager_registrations)

    def resolve_role(self, registration_number: str | None) -> Role:
        if registration_number is None:
            return Role.USER
        if registration_number in self._admins:
            return Role.ADMIN
        if registration_number in self._managers:
            return Role.MANAGER
        return Role.USER

    def user_from_profile(self, profile: UserProfile) -> User:
        return User(
            common_name=profile.common_name,
            registration_number=profile.registration_number,
            email=profile.email,
            role=self.resolve_role(profile.registration_number),
            phone_numbers=profile.phone_numbers,
            sector=profile.sector,
            photo_url=profile.photo_url,
        )

    def login(
        self,
        *,
        username: str | None = None,
        password: str | None = None,
        suap_token: str | None = None,
    ) -> tuple[str, User]:
        """Autentica no SUAP (credenciais ou token) e emite o token de acesso da API."""
        if not suap_token:
            if not username or not password:
                raise BadRequestError("Informe usuário e senha ou um token do SUAP.")
            suap_token = self._identity.obtain_token(username=username, password=password)

        user = self.user_from_profile(self._identity.get_user_data(suap_token))
        logger.info("Login de {} ({})", user.registration_number, user.role.value)

        return self._jwt.issue_access_token(user=user), user
