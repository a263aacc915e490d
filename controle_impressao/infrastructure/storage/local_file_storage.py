# controle_impressao/infrastructure/storage/local_file_storage.py
from __future__ import annotations

import os
import shutil
from dataclasses import dataclass
from pathlib import Path

from controle_impressao.core.exceptions import BadRequestError, ConflictError
from controle_impressao.infrastructure.storage.file_storage import FileStorage


@dataclass(frozen=True)
class LocalFileStorageConfig:
    base_path: str


class LocalFileStorage(FileStorage):
    def __init__(self, *, config: LocalFileStorageConfig) -> None:
        # resolve e prepara base
        raw = (config.base_path or "").strip()
        if not raw:
            raise ConflictError("Storage de arquivos não configurado (FILES_BASE_PATH vazio).")

        self._base = Path(raw).expanduser().resolve()

        try:
            self._base.mkdir(parents=True, exist_ok=True)
        except PermissionError:
            raise ConflictError(
                f"Sem permissão para criar/acessar a pasta de uploads: '{self._base}'. "
                "Verifique permissões do usuário do serviço e/ou ajuste FILES_BASE_PATH."
            )
        except OSError as e:
            raise ConflictError(
                f"Falha ao inicializar storage local em '{self._base}': {e}"
            )

        if not self._base.is_dir():
            raise ConflictError(f"Pasta de uploads inválida: '{self._base}' não é um diretório.")

    @property
    def base_path(self) -> Path:
        return self._base

    def _inside_base(self, path: Path) -> Path:
        abs_path = path.resolve()

        # anti path traversal
        base_str = str(self._base)
        abs_str = str(abs_path)
        if not (abs_str == base_str or abs_str.startswith(base_str + os.sep)):
            raise BadRequestError(f"Caminho inválido: '{path.name}'.")

        return abs_path

    def solicitation_dir(self, *, registration_number: str, solicitation_id: int) -> Path:
        return self._inside_base(self._base / str(registration_number) / str(solicitation_id))

    def file_path(self, directory: Path, file_name: str) -> Path:
        name = (file_name or "").strip()
        if not name or name in (".", "..") or "/" in name or "\\" in name:
            raise BadRequestError(f"Nome de arquivo inválido: '{file_name}'.")
        return self._inside_base(directory / name)

    def ensure_dir(self, directory: Path) -> None:
        self._inside_base(directory).mkdir(parents=True, exist_ok=True)

    def write(self, path: Path, data: bytes) -> int:
        abs_path = self._inside_base(path)
        try:
            with open(abs_path, "wb") as out:
                out.write(data)
        except OSError:
            # remove arquivo parcial
            abs_path.unlink(missing_ok=True)
            raise
        return len(data)

    def exists(self, path: Path) -> bool:
        abs_path = self._inside_base(path)
        return abs_path.exists() and abs_path.is_file()

    def delete(self, path: Path) -> bool:
        abs_path = self._inside_base(path)
        if not abs_path.is_file():
            return False
        abs_path.unlink()
        return True

    def remove_tree(self, directory: Path) -> bool:
        abs_path = self._inside_base(directory)
        if abs_path == self._base:
            raise BadRequestError("Não é permitido remover a pasta base de uploads.")
        if not abs_path.exists():
            return False
        shutil.rmtree(abs_path)
        return True

    def read_bytes(self, path: Path) -> bytes:
        return self._inside_base(path).read_bytes()
