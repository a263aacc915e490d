# controle_impressao/api/schemas/solicitation_schema.py

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_serializer, field_validator, model_validator

from controle_impressao.api.schemas._datetime_serializer import serialize_dt
from controle_impressao.entities.user import User
from controle_impressao.infrastructure.database.models.copy_model import CopyModel

PAGE_INTERVALS_PATTERN = r"^(\d+(-\d+)?)(,\s*\d+(-\d+)?)*$"


# -------- Entrada --------
class PrintConfigSchema(BaseModel):
    copy_count: int = Field(gt=0)
    pages: Literal["Todas", "Personalizado"]
    # ex.: "1-11, 18"
    page_intervals: Optional[str] = Field(default=None, pattern=PAGE_INTERVALS_PATTERN)
    pages_per_sheet: int = Field(ge=1, le=4)
    layout: Literal["Retrato", "Paisagem"]
    front_and_back: bool
    sheets_total: Optional[int] = Field(default=None, ge=0)

    @model_validator(mode="after")
    def intervals_required_when_custom(self):
        if self.pages == "Personalizado" and not self.page_intervals:
            raise ValueError("Informe o intervalo de páginas para a seleção 'Personalizado'.")
        return self


class CopyInput(BaseModel):
    file_name: str = Field(min_length=1, max_length=255)
    file_type: Optional[str] = Field(default=None, max_length=100)
    page_count: int = Field(gt=0)
    print_config: PrintConfigSchema
    notes: Optional[str] = Field(default=None, max_length=1000)

    @field_validator("file_name")
    @classmethod
    def plain_file_name(cls, v: str) -> str:
        v = v.strip()
        if not v or v in (".", "..") or "/" in v or "\\" in v:
            raise ValueError("Nome de arquivo inválido.")
        return v


class SolicitationInput(BaseModel):
    deadline: int = Field(ge=1, le=48)
    total_page_count: int = Field(gt=0)
    copies: List[CopyInput] = Field(min_length=1)

    @field_validator("copies")
    @classmethod
    def unique_file_names(cls, v: List[CopyInput]) -> List[CopyInput]:
        names = [c.file_name for c in v]
        if len(names) != len(set(names)):
            raise ValueError("Os nomes dos arquivos devem ser únicos na solicitação.")
        return v


class CommentInput(BaseModel):
    message: str = Field(min_length=1, max_length=2000)

    @field_validator("message")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("O comentário não pode ser vazio.")
        return v


# -------- Saída --------
class UserResponse(BaseModel):
    common_name: Optional[str] = None
    registration_number: Optional[str] = None
    email: Optional[str] = None
    role: str
    phone_numbers: Optional[str] = None
    sector: Optional[str] = None
    photo_url: Optional[str] = None

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        return cls(
            common_name=user.common_name,
            registration_number=user.registration_number,
            email=user.email,
            role=user.role.value,
            phone_numbers=user.phone_numbers,
            sector=user.sector,
            photo_url=user.photo_url,
        )


class CopyResponse(BaseModel):
    id: int
    solicitation_id: int
    file_name: str
    file_type: Optional[str] = None
    page_count: int
    print_config: dict
    file_in_disk: bool
    is_physical_file: bool
    notes: Optional[str] = None

    @classmethod
    def from_model(cls, c: CopyModel) -> "CopyResponse":
        return cls(
            id=c.id,
            solicitation_id=c.solicitation_id,
            file_name=c.file_name,
            file_type=c.file_type,
            page_count=c.page_count,
            print_config=c.print_config or {},
            file_in_disk=c.file_in_disk,
            is_physical_file=c.is_physical_file,
            notes=c.notes,
        )


class EventResponse(BaseModel):
    id: int
    solicitation_id: int
    user: UserResponse
    type: str
    content: Optional[str] = None
    creation_date: datetime

    @field_serializer("creation_date")
    def serialize_dates(self, value: datetime | None):
        return serialize_dt(value)


class SolicitationResponse(BaseModel):
    id: int
    deadline: int
    creation_date: datetime
    conclusion_date: Optional[datetime] = None
    archived: bool
    total_page_count: int
    owner: UserResponse
    copies: List[CopyResponse]
    timeline: List[EventResponse]

    @field_serializer("creation_date", "conclusion_date")
    def serialize_dates(self, value: datetime | None):
        return serialize_dt(value)


class SolicitationPageResponse(BaseModel):
    items: List[SolicitationResponse]
    total: int
    page_no: int
    page_size: int
    total_pages: int
    is_last: bool
