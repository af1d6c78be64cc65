from .team import REPLICA_USER_FIELDS, ReplicaUser, Team, TeamMember, TeamRole, utc_now
from .user import USER_PROFILE_FIELDS, User

__all__ = [
    "REPLICA_USER_FIELDS",
    "ReplicaUser",
    "Team",
    "TeamMember",
    "TeamRole",
    "utc_now",
    "USER_PROFILE_FIELDS",
    "User",
]
