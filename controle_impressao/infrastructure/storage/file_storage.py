# controle_impressao/infrastructure/storage/file_storage.py
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Protocol


@dataclass(frozen=True)
class UploadedFile:
    """Arquivo recebido no multipart, já lido em memória."""

    filename: str
    content_type: str | None
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


class FileStorage(Protocol):
    def solicitation_dir(self, *, registration_number: str, solicitation_id: int) -> Path:
        """Pasta `{base}/{matrícula}/{id}` da solicitação (não cria)."""
        raise NotImplementedError

    def file_path(self, directory: Path, file_name: str) -> Path:
        raise NotImplementedError

    def ensure_dir(self, directory: Path) -> None:
        raise NotImplementedError

    def write(self, path: Path, data: bytes) -> int:
        """Grava o conteúdo e retorna o número de bytes escritos."""
        raise NotImplementedError

    def exists(self, path: Path) -> bool:
        raise NotImplementedError

    def delete(self, path: Path) -> bool:
        """Remove o arquivo. Retorna True se removeu, False se não existia."""
        raise NotImplementedError

    def remove_tree(self, directory: Path) -> bool:
        """Remove a pasta recursivamente. False se não existia; propaga OSError."""
        raise NotImplementedError

    def read_bytes(self, path: Path) -> bytes:
        raise NotImplementedError
