"""Re-export all models so Base.metadata sees them."""

from app.db.models.check_in import CheckIn
from app.db.models.key_result import KeyResult
from app.db.models.objective import Objective
from app.db.models.okr_session import OkrSession
from app.db.models.organization import Organization
from app.db.models.profile import Profile

__all__ = [
    "CheckIn",
    "KeyResult",
    "Objective",
    "OkrSession",
    "Organization",
    "Profile",
]
