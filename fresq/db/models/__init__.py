from fresq.db.models.base import Base
from fresq.db.models.codes import Code
from fresq.db.models.grid_config import GridConfig
from fresq.db.models.tickets import Ticket
from fresq.db.models.tiers import Tier
from fresq.db.models.users import User

__all__ = [
    "Base",
    "Code",
    "GridConfig",
    "Ticket",
    "Tier",
    "User",
]
