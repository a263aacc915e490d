# controle_impressao/api/routes/copy_routes.py

from flask import Blueprint, jsonify, request

from controle_impressao.api.middlewares.auth_middleware import current_user, require_auth
from controle_impressao.api.schemas.solicitation_schema import CopyResponse
from controle_impressao.infrastructure.database.session import db_session
from controle_impressao.services.builders import build_solicitation_service

bp_copies = Blueprint("copies", __name__)


@bp_copies.get("/<int:solicitation_id>")
@require_auth
def list_copies(solicitation_id: int):
    user = current_user()
    # filtro opcional por nome de arquivo
    query = (request.args.get("query") or "").strip() or None

    with db_session() as session:
        svc = build_solicitation_service(session)
        copies = svc.find_copies(solicitation_id, user, query)
        out = [CopyResponse.from_model(c).model_dump() for c in copies]

    return jsonify(out), 200
