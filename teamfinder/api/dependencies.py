"""
Dependency injection for the API routers
Components come from the ServiceContainer stored on the application state
"""

from fastapi import Request, WebSocket

from teamfinder.container import ServiceContainer
from teamfinder.core.errors import ErrorResponse
from teamfinder.notifications import ConnectionManager, NotificationService
from teamfinder.services import TeamService, UserService


def get_container(request: Request) -> ServiceContainer:
    return request.app.state.container


def _require(component, name: str):
    if component is None:
        raise ErrorResponse(f"{name} is not available in this service", status_code=404)
    return component


def get_team_service(request: Request) -> TeamService:
    return _require(get_container(request).team_service, "Team service")


def get_user_service(request: Request) -> UserService:
    return _require(get_container(request).user_service, "User service")


def get_notification_service(request: Request) -> NotificationService:
    return _require(get_container(request).notification_service, "Notification service")


def get_connection_manager(websocket: WebSocket) -> ConnectionManager:
    return websocket.app.state.container.connections
