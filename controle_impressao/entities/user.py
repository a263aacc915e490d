# controle_impressao/entities/user.py
from dataclasses import dataclass
from typing import Any, Optional

from controle_impressao.core.enums import Role


@dataclass(frozen=True)
class User:
    common_name: Optional[str]
    registration_number: Optional[str]
    email: Optional[str]
    role: Role = Role.USER
    phone_numbers: Optional[str] = None
    sector: Optional[str] = None
    photo_url: Optional[str] = None

    def is_admin_or_manager(self) -> bool:
        return self.role in (Role.ADMIN, Role.MANAGER)

    def is_system(self) -> bool:
        return self.role == Role.SYSTEM

    def to_claims(self) -> dict[str, Any]:
        return {
            "name": self.common_name,
            "registration": self.registration_number,
            "email": self.email,
            "role": self.role.value,
            "phones": self.phone_numbers,
            "sector": self.sector,
            "photo": self.photo_url,
        }

    @classmethod
    def from_claims(cls, claims: dict[str, Any]) -> "User":
        return cls(
            common_name=claims.get("name"),
            registration_number=claims.get("registration"),
            email=claims.get("email"),
            role=Role(claims.get("role") or Role.USER.value),
            phone_numbers=claims.get("phones"),
            sector=claims.get("sector"),
            photo_url=claims.get("photo"),
        )


# ator sintético das tarefas agendadas, sem identidade humana
SYSTEM_USER = User(common_name="Sistema", registration_number=None, email=None, role=Role.SYSTEM)
