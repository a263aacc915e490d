# controle_impressao/core/interfaces/identity_provider.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class UserProfile:
    """Dados do usuário como vêm do provedor de identidade (sem papel)."""

    common_name: str
    registration_number: str
    email: str | None
    phone_numbers: str | None = None
    sector: str | None = None
    photo_url: str | None = None


class IdentityProvider(Protocol):
    def obtain_token(self, *, username: str, password: str) -> str:
        ...

    def get_user_data(self, token: str) -> UserProfile:
        """Levanta UnauthorizedError se o token não identificar um usuário."""
        ...
