# controle_impressao/api/routes/__init__.py

from flask import Flask

from controle_impressao.api.routes.auth_routes import bp_auth
from controle_impressao.api.routes.copy_routes import bp_copies
from controle_impressao.api.routes.health_routes import bp_health
from controle_impressao.api.routes.solicitation_routes import bp_solicitations


def register_routes(app: Flask, *, api_prefix: str, app_prefix: str) -> None:
    # health fora de /api (mas dentro do app)
    app.register_blueprint(bp_health, url_prefix=f"{app_prefix}/health")

    # tudo de API padronizado
    app.register_blueprint(bp_auth, url_prefix=f"{api_prefix}/auth")
    app.register_blueprint(bp_solicitations, url_prefix=f"{api_prefix}/solicitacoes")
    app.register_blueprint(bp_copies, url_prefix=f"{api_prefix}/copias")
