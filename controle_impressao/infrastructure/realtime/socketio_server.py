# controle_impressao/infrastructure/realtime/socketio_server.py
from __future__ import annotations

from flask_socketio import SocketIO

from controle_impressao.config.settings import settings

# usado como runtime do servidor e das tarefas em segundo plano (varredura)
socketio = SocketIO(
    cors_allowed_origins=[
        # DEV local
        "http://localhost:5173",
        "http://127.0.0.1:5173",
        settings.frontend_url,
    ],
    async_mode="eventlet",
)
