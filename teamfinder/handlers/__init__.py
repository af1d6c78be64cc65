"""
Event handlers
Each handler class exposes `registry()`, mapping routing keys to handlers
"""

from .notification import NotificationHandlers
from .team_replica import TeamReplicaHandlers

__all__ = ["NotificationHandlers", "TeamReplicaHandlers"]
