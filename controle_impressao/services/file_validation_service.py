# controle_impressao/services/file_validation_service.py

from __future__ import annotations

from io import BytesIO

from loguru import logger
from pypdf import PdfReader
from pypdf.errors import PyPdfError

from controle_impressao.core.exceptions import BadRequestError
from controle_impressao.infrastructure.storage.file_storage import UploadedFile

PDF_MIME_TYPE = "application/pdf"


class FileValidationService:
    def __init__(self, *, max_file_size_mb: int, allowed_mime_types: set[str]) -> None:
        self._max_bytes = max(1, int(max_file_size_mb)) * 1024 * 1024
        self._max_file_size_mb = max_file_size_mb
        self._allowed = set(allowed_mime_types)

    def rejection_reason(self, uploaded: UploadedFile) -> str | None:
        # arquivo vazio = cópia física, não há conteúdo para validar
        if uploaded.size == 0:
            return None

        if uploaded.size > self._max_bytes:
            return f"excede o limite de {self._max_file_size_mb}MB"

        if self._allowed and uploaded.content_type not in self._allowed:
            return f"tipo '{uploaded.content_type}' não permitido"

        if uploaded.content_type == PDF_MIME_TYPE:
            return self._pdf_rejection_reason(uploaded)

        return None

    @staticmethod
    def _pdf_rejection_reason(uploaded: UploadedFile) -> str | None:
        try:
            reader = PdfReader(BytesIO(uploaded.data))
            if reader.is_encrypted:
                return "PDF protegido por senha"
            if len(reader.pages) == 0:
                return "PDF sem páginas"
        except (PyPdfError, ValueError, KeyError, OSError) as e:
            logger.info("PDF inválido '{}': {}", uploaded.filename, e)
            return "PDF inválido ou corrompido"
        return None

    def validate(self, uploaded: UploadedFile) -> bool:
        return self.rejection_reason(uploaded) is None

    def validate_all(self, files: list[UploadedFile]) -> None:
        for uploaded in files:
            reason = self.rejection_reason(uploaded)
            if reason is not None:
                raise BadRequestError(f"Arquivo '{uploaded.filename}' rejeitado: {reason}.")
