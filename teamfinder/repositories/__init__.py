"""
Repositories module
Storage backends selected by the STORE_BACKEND setting
"""

from .base import TeamRepository
from .memory import InMemoryTeamRepository
from .mongo import MongoTeamRepository
from .users import InMemoryUserRepository, MongoUserRepository, UserRepository

__all__ = [
    "TeamRepository",
    "InMemoryTeamRepository",
    "MongoTeamRepository",
    "UserRepository",
    "InMemoryUserRepository",
    "MongoUserRepository",
]
