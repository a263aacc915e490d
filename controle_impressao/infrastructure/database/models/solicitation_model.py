# controle_impressao/infrastructure/database/models/solicitation_model.py

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from controle_impressao.core.enums import Role
from controle_impressao.entities.user import User
from controle_impressao.infrastructure.database.base_model import BaseModel, BigIntPK
from controle_impressao.infrastructure.database.models.copy_model import CopyModel
from controle_impressao.infrastructure.database.models.event_model import EventModel


class SolicitationModel(BaseModel):
    __tablename__ = "tbSolicitations"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)

    # prazo em horas (1..48)
    deadline: Mapped[int] = mapped_column(Integer, nullable=False)

    creation_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    # NULL = aberta; preenchida = fechada
    conclusion_date: Mapped[datetime] = mapped_column(DateTime, nullable=True)

    archived: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    total_page_count: Mapped[int] = mapped_column(Integer, nullable=False)

    # dono (embutido)
    owner_common_name: Mapped[str] = mapped_column(String(150), nullable=True)
    owner_registration_number: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    owner_email: Mapped[str] = mapped_column(String(150), nullable=True)
    owner_role: Mapped[str] = mapped_column(String(20), nullable=False, default=Role.USER.value)
    owner_phone_numbers: Mapped[str] = mapped_column(String(150), nullable=True)
    owner_sector: Mapped[str] = mapped_column(String(150), nullable=True)
    owner_photo_url: Mapped[str] = mapped_column(String(500), nullable=True)

    copies: Mapped[list[CopyModel]] = relationship(
        back_populates="solicitation",
        cascade="all, delete-orphan",
        order_by=CopyModel.id,
    )

    # mais recente primeiro
    timeline: Mapped[list[EventModel]] = relationship(
        back_populates="solicitation",
        cascade="all, delete-orphan",
        order_by=(EventModel.creation_date.desc(), EventModel.id.desc()),
    )

    @property
    def owner(self) -> User:
        return User(
            common_name=self.owner_common_name,
            registration_number=self.owner_registration_number,
            email=self.owner_email,
            role=Role(self.owner_role or Role.USER.value),
            phone_numbers=self.owner_phone_numbers,
            sector=self.owner_sector,
            photo_url=self.owner_photo_url,
        )

    @owner.setter
    def owner(self, user: User) -> None:
        self.owner_common_name = user.common_name
        self.owner_registration_number = user.registration_number
        self.owner_email = user.email
        self.owner_role = user.role.value
        self.owner_phone_numbers = user.phone_numbers
        self.owner_sector = user.sector
        self.owner_photo_url = user.photo_url

    @property
    def is_concluded(self) -> bool:
        return self.conclusion_date is not None
