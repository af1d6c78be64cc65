from .team_service import TeamService
from .user_service import UserService

__all__ = ["TeamService", "UserService"]
