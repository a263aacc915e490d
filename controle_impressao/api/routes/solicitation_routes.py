# controle_impressao/api/routes/solicitation_routes.py

from __future__ import annotations

from datetime import date, datetime

from flask import Blueprint, jsonify, request, send_file

from controle_impressao.api.middlewares.auth_middleware import current_user, require_auth
from controle_impressao.api.schemas.solicitation_schema import (
    CommentInput,
    CopyResponse,
    EventResponse,
    SolicitationInput,
    SolicitationPageResponse,
    SolicitationResponse,
    UserResponse,
)
from controle_impressao.core.enums import EventType
from controle_impressao.core.exceptions import BadRequestError
from controle_impressao.entities.user import User
from controle_impressao.infrastructure.database.models.solicitation_model import SolicitationModel
from controle_impressao.infrastructure.database.session import db_session
from controle_impressao.infrastructure.storage.file_storage import UploadedFile
from controle_impressao.services.builders import build_file_validation_service, build_solicitation_service
from controle_impressao.services.solicitation_service import SolicitationService

bp_solicitations = Blueprint("solicitations", __name__)


# -------------------------
# Helpers
# -------------------------

def _build_service(session) -> SolicitationService:
    return build_solicitation_service(session)


def _persist_files_gone(copy_ids: list[int]) -> None:
    if not copy_ids:
        return
    with db_session() as session:
        _build_service(session).mark_files_gone(copy_ids)


def _pack_solicitation(s: SolicitationModel) -> SolicitationResponse:
    return SolicitationResponse(
        id=s.id,
        deadline=s.deadline,
        creation_date=s.creation_date,
        conclusion_date=s.conclusion_date,
        archived=s.archived,
        total_page_count=s.total_page_count,
        owner=UserResponse.from_user(s.owner),
        copies=[CopyResponse.from_model(c) for c in s.copies],
        timeline=[
            EventResponse(
                id=e.id,
                solicitation_id=e.solicitation_id,
                user=UserResponse.from_user(e.user),
                type=e.type,
                content=e.content,
                creation_date=e.creation_date,
            )
            for e in s.timeline
        ],
    )


def _parse_date_yyyy_mm_dd(s: str | None, name: str) -> datetime | None:
    if not s:
        return None
    try:
        d = date.fromisoformat(s)
    except ValueError:
        raise BadRequestError(f"Data inválida em '{name}': use AAAA-MM-DD.")
    return datetime(d.year, d.month, d.day)


def _parse_bool(s: str | None) -> bool | None:
    if s is None or s == "":
        return None
    v = s.strip().lower()
    if v in ("true", "1", "sim"):
        return True
    if v in ("false", "0", "nao", "não"):
        return False
    raise BadRequestError(f"Valor booleano inválido: '{s}'.")


def _parse_int(s: str | None, name: str, default: int) -> int:
    if s is None or s == "":
        return default
    try:
        return int(s)
    except ValueError:
        raise BadRequestError(f"Valor inteiro inválido em '{name}'.")


def _notify_flag() -> bool:
    return bool(_parse_bool(request.args.get("notify")))


def _list_filters(user: User) -> dict:
    # usuário comum só vê as próprias; admin/gestor vê todas, exceto com 'filtering'
    filtering = bool(_parse_bool(request.args.get("filtering")))
    owner_registration = None
    if not user.is_admin_or_manager() or filtering:
        owner_registration = user.registration_number

    return {
        "start_date": _parse_date_yyyy_mm_dd(request.args.get("startDate"), "startDate"),
        "end_date": _parse_date_yyyy_mm_dd(request.args.get("endDate"), "endDate"),
        "text_query": (request.args.get("query") or "").strip() or None,
        "is_concluded": _parse_bool(request.args.get("concluded")),
        "owner_registration": owner_registration,
    }


def _read_payload() -> SolicitationInput:
    raw = request.form.get("solicitacao")
    if raw is None:
        raise BadRequestError("Parte 'solicitacao' ausente. Use multipart/form-data.")
    return SolicitationInput.model_validate_json(raw)


def _read_uploads() -> list[UploadedFile]:
    out: list[UploadedFile] = []
    for f in request.files.getlist("arquivos"):
        if f is None:
            continue
        out.append(UploadedFile(filename=f.filename or "", content_type=f.mimetype, data=f.read()))
    return out


# -------------------------
# Consultas
# -------------------------

@bp_solicitations.get("")
@require_auth
def list_solicitations():
    user = current_user()
    filters = _list_filters(user)

    with db_session() as session:
        svc = _build_service(session)
        rows = svc.find_all(**filters)
        out = [_pack_solicitation(s).model_dump() for s in rows]

    return jsonify(out), 200


@bp_solicitations.get("/page")
@require_auth
def page_solicitations():
    user = current_user()
    filters = _list_filters(user)

    page_no = _parse_int(request.args.get("pageNo"), "pageNo", 0)
    page_size = _parse_int(request.args.get("pageSize"), "pageSize", 10)
    if page_no < 0 or page_size < 1 or page_size > 200:
        raise BadRequestError("Paginação inválida (pageNo >= 0, 1 <= pageSize <= 200).")

    with db_session() as session:
        svc = _build_service(session)
        page = svc.find_page(
            **filters,
            page_no=page_no,
            page_size=page_size,
            sort_column=request.args.get("sortColumn") or None,
            sort_direction=request.args.get("sortDirection") or None,
        )
        out = SolicitationPageResponse(
            items=[_pack_solicitation(s) for s in page.items],
            total=page.total,
            page_no=page.page_no,
            page_size=page.page_size,
            total_pages=page.total_pages,
            is_last=page.is_last,
        ).model_dump()

    return jsonify(out), 200


@bp_solicitations.get("/<int:solicitation_id>")
@require_auth
def get_solicitation(solicitation_id: int):
    user = current_user()

    with db_session() as session:
        svc = _build_service(session)
        solicitation = svc.can_interact(solicitation_id, user, EventType.REQUEST_VIEWING)
        out = _pack_solicitation(solicitation).model_dump()

    return jsonify(out), 200


@bp_solicitations.get("/<int:solicitation_id>/<string:file_name>")
@require_auth
def download_file(solicitation_id: int, file_name: str):
    user = current_user()

    with db_session() as session:
        svc = _build_service(session)
        download = svc.get_file_response(user, solicitation_id, file_name)

    return send_file(
        download.stream,
        as_attachment=True,
        download_name=download.file_name,
        mimetype=download.content_type,
    )


# -------------------------
# Mutações
# -------------------------

@bp_solicitations.post("")
@require_auth
def create_solicitation():
    user = current_user()
    payload = _read_payload()
    files = _read_uploads()

    # rejeição acontece antes de qualquer efeito colateral
    build_file_validation_service().validate_all(files)

    with db_session() as session:
        svc = _build_service(session)

        solicitation = svc.create(
            deadline=payload.deadline,
            total_page_count=payload.total_page_count,
            copies=[c.model_dump() for c in payload.copies],
            owner=user,
        )

        try:
            svc.save_files(solicitation, files, True)
        except Exception:
            # remove a solicitação recém-criada e sua pasta
            svc.remove_request(solicitation.id, False, user)
            raise

        pending = svc.prepare_notification(solicitation, user) if _notify_flag() else None
        out = _pack_solicitation(solicitation).model_dump()

    # e-mail só depois do commit
    svc.send_notification(pending)
    return jsonify(out), 201


@bp_solicitations.patch("/<int:solicitation_id>")
@require_auth
def patch_solicitation(solicitation_id: int):
    user = current_user()
    payload = _read_payload()
    files = _read_uploads()

    build_file_validation_service().validate_all(files)

    svc = None
    try:
        with db_session() as session:
            svc = _build_service(session)
            svc.can_interact(solicitation_id, user, EventType.REQUEST_EDITING)

            draft = svc.build_transient_solicitation(
                solicitation_id,
                deadline=payload.deadline,
                total_page_count=payload.total_page_count,
                copies=[c.model_dump() for c in payload.copies],
            )
            svc.save_files(draft, files, False)
            solicitation = svc.patch(solicitation_id, draft, user)

            pending = svc.prepare_notification(solicitation, user) if _notify_flag() else None
            out = _pack_solicitation(solicitation).model_dump()
    except Exception:
        # arquivos removidos do disco não voltam com o rollback
        if svc is not None:
            _persist_files_gone(svc.files_taken_off_disk())
        raise

    svc.send_notification(pending)
    return jsonify(out), 200


@bp_solicitations.patch("/<int:solicitation_id>/status")
@require_auth
def toggle_status(solicitation_id: int):
    user = current_user()

    with db_session() as session:
        svc = _build_service(session)
        solicitation = svc.can_interact(solicitation_id, user, EventType.REQUEST_TOGGLE)
        pending = svc.toggle_conclusion_date(solicitation, user, notify=_notify_flag())
        out = _pack_solicitation(solicitation).model_dump()

    svc.send_notification(pending)
    return jsonify(out), 200


@bp_solicitations.patch("/<int:solicitation_id>/comentario")
@require_auth
def add_comment(solicitation_id: int):
    user = current_user()
    payload = CommentInput.model_validate(request.get_json(force=True))

    with db_session() as session:
        svc = _build_service(session)
        solicitation = svc.can_interact(solicitation_id, user, EventType.REQUEST_EDITING)
        svc.add_new_comment(payload.message, solicitation, user)
        out = _pack_solicitation(solicitation).model_dump()

    return jsonify(out), 200


@bp_solicitations.delete("/<int:solicitation_id>")
@require_auth
def delete_solicitation(solicitation_id: int):
    user = current_user()

    svc = None
    try:
        with db_session() as session:
            svc = _build_service(session)
            svc.can_interact(solicitation_id, user, EventType.REQUEST_DELETING)
            removal = svc.remove_request(solicitation_id, _notify_flag(), user)
    except Exception:
        if svc is not None:
            _persist_files_gone(svc.files_taken_off_disk())
        raise

    svc.send_notification(removal.notification)
    if removal.warning:
        return jsonify({"warning": removal.warning}), 200
    return ("", 204)
