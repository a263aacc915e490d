"""Fixtures for the HTTP layer: a Flask app with the API blueprints, no Socket.IO."""

import shutil
from pathlib import Path

import pytest
from flask import Flask

import controle_impressao.infrastructure.database.models  # noqa: F401
from controle_impressao.api.middlewares.error_handler import register_error_handlers
from controle_impressao.api.routes import register_routes
from controle_impressao.config.flask_config import configure_app
from controle_impressao.config.settings import settings
from controle_impressao.infrastructure.database import session as db
from controle_impressao.infrastructure.database.base_model import BaseModel
from controle_impressao.infrastructure.security.jwt_provider import JwtProvider

API_PREFIX = "/api"


@pytest.fixture
def app():
    # banco e pasta de uploads limpos a cada teste
    BaseModel.metadata.drop_all(db._engine)
    BaseModel.metadata.create_all(db._engine)
    shutil.rmtree(settings.files_base_path, ignore_errors=True)

    app = Flask("controle_impressao_test")
    configure_app(app)
    app.config["TESTING"] = True

    register_routes(app, api_prefix=API_PREFIX, app_prefix="")
    register_error_handlers(app)

    yield app

    BaseModel.metadata.drop_all(db._engine)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth_headers():
    def _headers(user) -> dict:
        token = JwtProvider().issue_access_token(user=user)
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture
def uploads_dir():
    return Path(settings.files_base_path).expanduser().resolve()
