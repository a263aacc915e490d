# registra todos os models no metadata
from controle_impressao.infrastructure.database.models.copy_model import CopyModel  # noqa: F401
from controle_impressao.infrastructure.database.models.event_model import EventModel  # noqa: F401
from controle_impressao.infrastructure.database.models.solicitation_model import SolicitationModel  # noqa: F401
