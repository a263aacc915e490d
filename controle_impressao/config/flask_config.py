from flask import Flask

from controle_impressao.config.settings import settings


def configure_app(app: Flask) -> None:
    app.config["ENV"] = settings.environment
    app.config["DEBUG"] = settings.debug
    # folga para o JSON da solicitação junto dos anexos
    app.config["MAX_CONTENT_LENGTH"] = max(1, settings.max_file_size_mb) * 1024 * 1024 * 20
