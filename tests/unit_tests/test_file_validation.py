from io import BytesIO

import pytest
from pypdf import PdfWriter

from controle_impressao.core.exceptions import BadRequestError
from controle_impressao.services.file_validation_service import FileValidationService


@pytest.fixture
def validator():
    return FileValidationService(max_file_size_mb=1, allowed_mime_types={"application/pdf", "image/png"})


@pytest.fixture
def encrypted_pdf_bytes():
    writer = PdfWriter()
    writer.add_blank_page(width=72, height=72)
    writer.encrypt(user_password="segredo", owner_password="segredo")
    buffer = BytesIO()
    writer.write(buffer)
    return buffer.getvalue()


class TestRejectionReason:
    """Upload checks before anything touches the disk."""

    def test_valid_pdf(self, validator, upload):
        assert validator.rejection_reason(upload("a.pdf")) is None
        assert validator.validate(upload("a.pdf")) is True

    def test_zero_byte_is_a_physical_copy(self, validator, upload):
        assert validator.rejection_reason(upload("fisico.pdf", b"")) is None

    def test_too_large(self, validator, upload):
        big = b"0" * (1024 * 1024 + 1)

        assert validator.rejection_reason(upload("grande.pdf", big)) == "excede o limite de 1MB"

    def test_mime_type_not_allowed(self, validator, upload):
        reason = validator.rejection_reason(upload("planilha.xlsx", b"PK", content_type="application/vnd.ms-excel"))

        assert reason == "tipo 'application/vnd.ms-excel' não permitido"

    def test_other_allowed_types_are_not_parsed(self, validator, upload):
        assert validator.rejection_reason(upload("foto.png", b"\x89PNG", content_type="image/png")) is None

    def test_corrupted_pdf(self, validator, upload):
        assert validator.rejection_reason(upload("quebrado.pdf", b"isto nao e um pdf")) == "PDF inválido ou corrompido"

    def test_password_protected_pdf(self, validator, upload, encrypted_pdf_bytes):
        assert validator.rejection_reason(upload("senha.pdf", encrypted_pdf_bytes)) == "PDF protegido por senha"


class TestValidateAll:
    """The first rejected file aborts the request."""

    def test_names_the_rejected_file(self, validator, upload):
        files = [upload("ok.pdf"), upload("quebrado.pdf", b"xx")]

        with pytest.raises(BadRequestError) as exc:
            validator.validate_all(files)

        assert str(exc.value) == "Arquivo 'quebrado.pdf' rejeitado: PDF inválido ou corrompido."

    def test_all_valid(self, validator, upload):
        validator.validate_all([upload("a.pdf"), upload("b.pdf", b"")])
