# controle_impressao/core/exceptions.py

class AppError(Exception):
    def __init__(self, message: str, *, status_code: int = 400) -> None:
        super().__init__(message)
        self.status_code = status_code


class BadRequestError(AppError):
    def __init__(self, message: str = "Requisição inválida.") -> None:
        super().__init__(message, status_code=400)


class NotFoundError(AppError):
    def __init__(self, message: str = "Resource not found") -> None:
        super().__init__(message, status_code=404)


class ConflictError(AppError):
    def __init__(self, message: str = "Conflict") -> None:
        super().__init__(message, status_code=409)


class UnauthorizedError(AppError):
    def __init__(self, message: str = "Unauthorized") -> None:
        super().__init__(message, status_code=401)


class ForbiddenError(AppError):
    def __init__(self, message: str = "Forbidden") -> None:
        super().__init__(message, status_code=403)


class GoneError(AppError):
    def __init__(self, message: str = "Gone") -> None:
        super().__init__(message, status_code=410)


class InternalError(AppError):
    def __init__(self, message: str = "Internal server error") -> None:
        super().__init__(message, status_code=500)


# -------- Arquivos de cópias --------

class FileGoneError(GoneError):
    """O arquivo existiu, mas foi removido do disco (ex.: solicitação arquivada)."""


class PhysicalFileError(AppError):
    """A cópia nunca teve arquivo digital: o original é entregue fisicamente."""

    def __init__(self, message: str = "Arquivo físico.") -> None:
        super().__init__(message, status_code=404)


class FileNotOnDiskError(NotFoundError):
    """As flags da cópia indicam arquivo em disco, mas ele não está lá."""


class NotificationError(Exception):
    """Falha ao entregar notificação; tratada como não fatal por quem chama."""
