# controle_impressao/infrastructure/database/models/event_model.py

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import BigInteger, DateTime, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from controle_impressao.core.enums import EventType, Role
from controle_impressao.entities.user import User
from controle_impressao.infrastructure.database.base_model import BaseModel, BigIntPK

if TYPE_CHECKING:
    from controle_impressao.infrastructure.database.models.solicitation_model import SolicitationModel


class EventModel(BaseModel):
    __tablename__ = "tbEvents"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)

    solicitation_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("tbSolicitations.id", ondelete="CASCADE"), nullable=False, index=True
    )

    # autor (embutido); SYSTEM não tem matrícula nem email
    user_common_name: Mapped[str] = mapped_column(String(150), nullable=True)
    user_registration_number: Mapped[str] = mapped_column(String(50), nullable=True)
    user_email: Mapped[str] = mapped_column(String(150), nullable=True)
    user_role: Mapped[str] = mapped_column(String(20), nullable=False)

    type: Mapped[str] = mapped_column(String(30), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=True)

    creation_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    solicitation: Mapped["SolicitationModel"] = relationship(back_populates="timeline")

    @classmethod
    def build(
        cls,
        *,
        user: User,
        event_type: EventType,
        creation_date: datetime,
        content: str | None = None,
    ) -> "EventModel":
        return cls(
            user_common_name=user.common_name,
            user_registration_number=user.registration_number,
            user_email=user.email,
            user_role=user.role.value,
            type=event_type.value,
            content=content,
            creation_date=creation_date,
        )

    @property
    def user(self) -> User:
        return User(
            common_name=self.user_common_name,
            registration_number=self.user_registration_number,
            email=self.user_email,
            role=Role(self.user_role),
        )

    @property
    def event_type(self) -> EventType:
        return EventType(self.type)
