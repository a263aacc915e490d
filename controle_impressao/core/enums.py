# controle_impressao/core/enums.py
from enum import Enum


class Role(str, Enum):
    USER = "USER"
    MANAGER = "MANAGER"
    ADMIN = "ADMIN"
    SYSTEM = "SYSTEM"  # ações automáticas (ex.: arquivamento)


class EventType(str, Enum):
    COMMENT = "COMMENT"
    REQUEST_OPENING = "REQUEST_OPENING"
    REQUEST_CLOSING = "REQUEST_CLOSING"
    REQUEST_TOGGLE = "REQUEST_TOGGLE"
    REQUEST_ARCHIVING = "REQUEST_ARCHIVING"
    REQUEST_EDITING = "REQUEST_EDITING"
    REQUEST_DELETING = "REQUEST_DELETING"
    REQUEST_VIEWING = "REQUEST_VIEWING"


# tipos que modificam a solicitação e são bloqueados quando arquivada
MUTATING_EVENT_TYPES = frozenset({EventType.REQUEST_EDITING, EventType.REQUEST_DELETING})
