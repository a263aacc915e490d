# controle_impressao/infrastructure/identity/suap_identity_provider.py
from __future__ import annotations

from typing import Any

import requests
from loguru import logger

from controle_impressao.config.settings import settings
from controle_impressao.core.exceptions import UnauthorizedError
from controle_impressao.core.interfaces.identity_provider import IdentityProvider, UserProfile

TOKEN_PATH = "/api/v2/autenticacao/token/"
USER_DATA_PATH = "/api/rh/meus-dados/"


def profile_from_suap(data: dict[str, Any]) -> UserProfile:
    """Converte o JSON de `meus-dados` do SUAP em `UserProfile`."""
    registration = data.get("matricula")
    if not registration:
        raise UnauthorizedError("Dados do usuário incompletos no SUAP.")

    vinculo = data.get("vinculo") or {}
    phones = vinculo.get("telefones_institucionais") or []
    if isinstance(phones, list):
        phones = ", ".join(str(p) for p in phones if p) or None

    return UserProfile(
        common_name=data.get("nome_usual") or vinculo.get("nome") or str(registration),
        registration_number=str(registration),
        email=data.get("email") or data.get("email_secundario"),
        phone_numbers=phones,
        sector=vinculo.get("setor_suap"),
        photo_url=data.get("url_foto_150x200"),
    )


class SuapIdentityProvider(IdentityProvider):
    def __init__(self, *, base_url: str | None = None, timeout: int | None = None) -> None:
        self._base_url = (base_url or settings.suap_base_url).rstrip("/")
        self._timeout = timeout or settings.suap_timeout_seconds

    def obtain_token(self, *, username: str, password: str) -> str:
        try:
            r = requests.post(
                f"{self._base_url}{TOKEN_PATH}",
                json={"username": username, "password": password},
                timeout=self._timeout,
            )
        except requests.RequestException as e:
            logger.error("Erro ao autenticar no SUAP: {}", e)
            raise UnauthorizedError("Não foi possível autenticar no SUAP.") from e

        if r.status_code != 200:
            raise UnauthorizedError("Usuário ou senha inválidos.")

        token = (r.json() or {}).get("access")
        if not token:
            raise UnauthorizedError("SUAP não retornou token de acesso.")
        return str(token)

    def get_user_data(self, token: str) -> UserProfile:
        try:
            r = requests.get(
                f"{self._base_url}{USER_DATA_PATH}",
                headers={"Authorization": f"Bearer {token}"},
                timeout=self._timeout,
            )
        except requests.RequestException as e:
            logger.error("Erro ao obter dados do usuário do SUAP: {}", e)
            raise UnauthorizedError("Não foi possível obter os dados do usuário.") from e

        if r.status_code != 200:
            raise UnauthorizedError("Token do SUAP inválido.")

        return profile_from_suap(r.json() or {})
