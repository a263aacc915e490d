# controle_impressao/infrastructure/database/session.py

from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from controle_impressao.config.settings import settings
from controle_impressao.infrastructure.database.base_model import BaseModel

_engine = create_engine(
    settings.database_url,
    echo=settings.debug and settings.environment != "test",
    pool_pre_ping=True,
)

_SessionLocal = sessionmaker(
    bind=_engine,
    autoflush=False,
    autocommit=False,
    expire_on_commit=False,
)


def init_db() -> None:
    import controle_impressao.infrastructure.database.models  # noqa: F401

    BaseModel.metadata.create_all(_engine)


@contextmanager
def db_session() -> Iterator[Session]:
    session: Session = _SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
