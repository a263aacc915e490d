# controle_impressao/jobs/stale_sweep.py

from __future__ import annotations

from typing import Callable

from flask_socketio import SocketIO
from loguru import logger
from sqlalchemy.orm import Session

from controle_impressao.config.settings import settings
from controle_impressao.infrastructure.database.session import db_session
from controle_impressao.services.builders import build_solicitation_service
from controle_impressao.services.solicitation_service import SolicitationService

ServiceBuilder = Callable[[Session], SolicitationService]


def run_stale_sweep(build_service: ServiceBuilder = build_solicitation_service) -> int:
    """Arquiva as solicitações fechadas há mais que a retenção e remove seus arquivos.

    Cada solicitação é tratada em sua própria transação: uma falha é registrada
    e a varredura segue para a próxima. Retorna o total de arquivos removidos.
    """
    with db_session() as session:
        svc = build_service(session)
        closed_before = svc.stale_cutoff()
        stale_ids = svc.find_stale_ids(closed_before)

    logger.info("Varredura: {} solicitação(ões) a arquivar (fechadas antes de {})", len(stale_ids), closed_before)

    total = 0
    for solicitation_id in stale_ids:
        try:
            with db_session() as session:
                deleted = build_service(session).archive_stale(solicitation_id, closed_before=closed_before)
        except Exception:
            logger.exception("Falha ao arquivar a solicitação {}", solicitation_id)
            continue
        total += deleted or 0

    logger.info("Varredura concluída: {} arquivo(s) removidos", total)
    return total


def _sweep_loop(socketio: SocketIO, interval_seconds: float) -> None:
    while True:
        socketio.sleep(interval_seconds)
        try:
            run_stale_sweep()
        except Exception:
            logger.exception("Falha na varredura de arquivos")


def start_stale_sweep(socketio: SocketIO) -> bool:
    if not settings.cleanup_enabled:
        logger.info("Varredura de arquivos desativada (CLEANUP_ENABLED=false)")
        return False

    interval_seconds = settings.cleanup_interval * 3600
    socketio.start_background_task(_sweep_loop, socketio, interval_seconds)
    logger.info("Varredura de arquivos agendada a cada {}h", settings.cleanup_interval)
    return True
