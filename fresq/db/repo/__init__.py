from fresq.db.repo.codes_repo import CodesRepo
from fresq.db.repo.grid_config_repo import GridConfigRepo
from fresq.db.repo.tickets_repo import TicketsRepo
from fresq.db.repo.tiers_repo import TiersRepo
from fresq.db.repo.users_repo import UsersRepo

__all__ = [
    "CodesRepo",
    "GridConfigRepo",
    "TicketsRepo",
    "TiersRepo",
    "UsersRepo",
]
