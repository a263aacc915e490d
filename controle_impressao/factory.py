# controle_impressao/factory.py
from __future__ import annotations

import os

from flask import Flask
from flask_cors import CORS
from loguru import logger

from controle_impressao.api.middlewares.error_handler import register_error_handlers
from controle_impressao.api.routes import register_routes
from controle_impressao.config.flask_config import configure_app
from controle_impressao.config.logging_config import configure_logger
from controle_impressao.config.settings import settings
from controle_impressao.infrastructure.database.session import init_db
from controle_impressao.infrastructure.realtime.socketio_server import socketio
from controle_impressao.jobs.stale_sweep import start_stale_sweep

# -------------------------
# Prefixos (subpath)
# -------------------------
APP_PREFIX = os.getenv("APP_PREFIX", "/apps/controle-impressao").rstrip("/")
API_PREFIX = f"{APP_PREFIX}/api"
SOCKET_PREFIX = f"{APP_PREFIX}/socket.io"


def create_app(*, start_jobs: bool = True) -> Flask:
    configure_logger(settings.log_level)

    app = Flask(__name__)

    # ✅ CORS aplicado cedo (antes das rotas lidarem com OPTIONS)
    CORS(
        app,
        resources={
            rf"{API_PREFIX}/*": {
                "origins": [
                    "http://localhost:5173",
                    "http://127.0.0.1:5173",
                    settings.frontend_url,
                ]
            }
        },
        allow_headers=["Content-Type", "Authorization"],
        methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    )

    configure_app(app)

    if settings.db_auto_create:
        init_db()

    register_routes(app, api_prefix=API_PREFIX, app_prefix=APP_PREFIX)
    register_error_handlers(app)

    # ✅ Socket.IO no subpath (runtime da varredura agendada)
    socketio.init_app(app, path=SOCKET_PREFIX)

    if start_jobs:
        start_stale_sweep(socketio)

    logger.info("Aplicação iniciada em '{}' ({})", APP_PREFIX, settings.environment)
    return app
