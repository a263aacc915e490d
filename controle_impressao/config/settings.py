# controle_impressao/config/settings.py
import os
from urllib.parse import quote_plus
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator


def _split_csv(raw: str | None) -> list[str]:
    if not raw:
        return []
    return [p.strip() for p in raw.split(",") if p.strip()]


class Settings(BaseSettings):
    # 🔵 Banco principal (PostgreSQL)
    db_host: str = "localhost"
    db_port: int = 5432
    db_name: str = "controle_impressao"
    db_user: str = "postgres"
    db_password: str = ""
    db_ssl: bool = False

    # URL completa (ex.: sqlite para testes); tem prioridade sobre db_*
    db_url: str | None = None
    db_auto_create: bool = True

    environment: str = "development"
    debug: bool = True
    log_level: str = "INFO"

    jwt_secret: str = os.getenv("JWT_SECRET", "dev-secret-change-me")
    jwt_access_minutes: int = int(os.getenv("JWT_ACCESS_MINUTES", "480"))

    jwt_issuer: str = os.getenv("JWT_ISSUER", "controle-impressao-api")
    jwt_audience: str = os.getenv("JWT_AUDIENCE", "controle-impressao-front")

    files_base_path: str = os.getenv("FILES_BASE_PATH", "./_uploads")
    max_file_size_mb: int = int(os.getenv("MAX_FILE_SIZE_MB", "10"))

    # ✅ Whitelist de tipos permitidos (ex: "application/pdf,image/png")
    allowed_mime_types_raw: str = os.getenv("ALLOWED_MIME_TYPES", "application/pdf")

    # 🧹 Limpeza de arquivos de solicitações fechadas
    cleanup_enabled: bool = True
    cleanup_retention_hours: int = 72
    cleanup_interval_hours: int | None = None

    # 🔐 Papéis por matrícula
    admin_registrations_raw: str = ""
    manager_registrations_raw: str = ""

    # 🟢 SUAP (provedor de identidade)
    suap_base_url: str = "https://suap.ifrn.edu.br"
    suap_timeout_seconds: int = 10

    # ✉️ Notificações
    smtp_host: str | None = None
    smtp_port: int = 587
    smtp_user: str | None = None
    smtp_password: str | None = None
    smtp_use_tls: bool = True
    mail_from: str | None = None
    mail_subject: str = "[Impressão] Notificação sobre solicitação"
    frontend_url: str = "http://localhost:5173"

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("db_host", "db_name", "db_user", "db_password", mode="before")
    @classmethod
    def strip_strings(cls, v):
        if isinstance(v, str):
            return v.strip().strip('"').strip("'")
        return v

    @property
    def database_url(self) -> str:
        if self.db_url:
            return self.db_url

        user = quote_plus(self.db_user)
        password = quote_plus(self.db_password)
        host = self.db_host
        port = self.db_port
        db = self.db_name

        url = f"postgresql+psycopg2://{user}:{password}@{host}:{port}/{db}"
        if self.db_ssl:
            url += "?sslmode=require"
        return url

    @property
    def allowed_mime_types(self) -> set[str]:
        return set(_split_csv(self.allowed_mime_types_raw))

    @property
    def admin_registrations(self) -> set[str]:
        return set(_split_csv(self.admin_registrations_raw))

    @property
    def manager_registrations(self) -> set[str]:
        return set(_split_csv(self.manager_registrations_raw))

    @property
    def cleanup_interval(self) -> int:
        # sem intervalo próprio, a varredura roda na mesma cadência da retenção
        return self.cleanup_interval_hours or self.cleanup_retention_hours


settings = Settings()
