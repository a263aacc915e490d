# controle_impressao/infrastructure/database/models/copy_model.py

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import JSON, BigInteger, Boolean, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from controle_impressao.infrastructure.database.base_model import BaseModel, BigIntPK

if TYPE_CHECKING:
    from controle_impressao.infrastructure.database.models.solicitation_model import SolicitationModel


class CopyModel(BaseModel):
    __tablename__ = "tbCopies"
    __table_args__ = (
        UniqueConstraint("solicitation_id", "file_name", name="uq_copies_solicitation_file_name"),
    )

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)

    solicitation_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("tbSolicitations.id", ondelete="CASCADE"), nullable=False, index=True
    )

    file_name: Mapped[str] = mapped_column(String(255), nullable=False)
    file_type: Mapped[str] = mapped_column(String(100), nullable=True)
    page_count: Mapped[int] = mapped_column(Integer, nullable=False)

    # copy_count, pages, page_intervals, pages_per_sheet, layout, front_and_back, sheets_total
    print_config: Mapped[dict] = mapped_column(JSON, nullable=False)

    # arquivo digital presente em disco
    file_in_disk: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    # nenhum arquivo digital foi anexado (original físico)
    is_physical_file: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    notes: Mapped[str] = mapped_column(Text, nullable=True)

    solicitation: Mapped["SolicitationModel"] = relationship(back_populates="copies")
