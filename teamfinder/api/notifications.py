"""
Notification API endpoints and the real-time notification hub
"""

import json

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect

from teamfinder.api.dependencies import get_connection_manager, get_notification_service
from teamfinder.core.logger import logger
from teamfinder.notifications import ConnectionManager, Notification, NotificationService, team_group, user_group
from teamfinder.schemas.notification import (
    BatchEmailNotificationRequest,
    EmailNotificationRequest,
    NotificationRequest,
    NotificationSentResponse,
)

router = APIRouter()
hub_router = APIRouter()

# Client frame targets mapped to (join?, group name builder)
HUB_METHODS = {
    "JoinUserGroup": (True, user_group),
    "LeaveUserGroup": (False, user_group),
    "JoinTeamGroup": (True, team_group),
    "LeaveTeamGroup": (False, team_group),
}


def _notification(request: NotificationRequest) -> Notification:
    return Notification(type=request.type, message=request.message, data=request.data)


@router.post("/broadcast", response_model=NotificationSentResponse)
async def broadcast(
    request: NotificationRequest,
    service: NotificationService = Depends(get_notification_service),
):
    await service.send_to_all(_notification(request))
    return NotificationSentResponse(message="Notification broadcast to all connected clients")


@router.post("/user/{user_id}", response_model=NotificationSentResponse)
async def send_to_user(
    user_id: str,
    request: NotificationRequest,
    service: NotificationService = Depends(get_notification_service),
):
    await service.send_to_user(user_id, _notification(request))
    return NotificationSentResponse(message=f"Notification sent to user {user_id}")


@router.post("/team/{team_id}", response_model=NotificationSentResponse)
async def send_to_team(
    team_id: str,
    request: NotificationRequest,
    service: NotificationService = Depends(get_notification_service),
):
    await service.send_to_team(team_id, _notification(request))
    return NotificationSentResponse(message=f"Notification sent to team {team_id}")


@router.post("/email", response_model=NotificationSentResponse)
async def send_email(
    request: EmailNotificationRequest,
    service: NotificationService = Depends(get_notification_service),
):
    await service.send_email_to_user(request.email, _notification(request))
    return NotificationSentResponse(message=f"Email sent to {request.email}")


@router.post("/email/batch", response_model=NotificationSentResponse)
async def send_batch_email(
    request: BatchEmailNotificationRequest,
    service: NotificationService = Depends(get_notification_service),
):
    await service.send_email_to_users(request.emails, _notification(request))
    return NotificationSentResponse(message=f"Emails sent to {len(request.emails)} recipients")


@hub_router.websocket("/notificationHub")
async def notification_hub(
    websocket: WebSocket,
    connections: ConnectionManager = Depends(get_connection_manager),
):
    """
    Real-time channel.

    Clients send `{"target": "JoinUserGroup", "arguments": ["<user id>"]}` (or
    LeaveUserGroup, JoinTeamGroup, LeaveTeamGroup) and receive
    `{"target": "ReceiveNotification", "arguments": [<notification>]}`.
    """
    if connections is None:
        await websocket.close(code=1008)
        return

    connection_id = await connections.connect(websocket)
    try:
        while True:
            raw = await websocket.receive_text()
            await _handle_frame(connections, connection_id, raw)
    except WebSocketDisconnect:
        pass
    finally:
        await connections.disconnect(connection_id)


async def _handle_frame(connections: ConnectionManager, connection_id: str, raw: str) -> None:
    try:
        frame = json.loads(raw)
        join, group_for = HUB_METHODS[frame["target"]]
        (target_id,) = frame["arguments"]
        if not isinstance(target_id, str) or not target_id:
            raise ValueError("group id must be a non-empty string")
    except (ValueError, KeyError, TypeError) as e:
        logger.warning(
            "Ignoring malformed hub frame",
            metadata={"connectionId": connection_id, "frame": raw[:200]},
            error=e,
        )
        return

    if join:
        await connections.join_group(connection_id, group_for(target_id))
    else:
        await connections.leave_group(connection_id, group_for(target_id))
