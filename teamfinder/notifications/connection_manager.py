"""
WebSocket Connection Manager
Tracks live client connections and the groups each one has joined. Group
membership lives only as long as the connection.
"""

import asyncio
import uuid
from typing import Any, Dict, List, Set

from fastapi import WebSocket

from teamfinder.core.logger import logger


class ConnectionManager:
    """
    Registry of live WebSocket connections and their group memberships.

    Sends to different connections run concurrently and each is bounded by
    `send_timeout`; a connection that fails or stalls is dropped.
    """

    def __init__(self, send_timeout: float = 5.0):
        self.send_timeout = send_timeout
        self.connections: Dict[str, WebSocket] = {}
        self.groups: Dict[str, Set[str]] = {}
        self._lock = asyncio.Lock()

    async def connect(self, websocket: WebSocket) -> str:
        """Accept the socket and return its connection id"""
        await websocket.accept()
        connection_id = str(uuid.uuid4())
        async with self._lock:
            self.connections[connection_id] = websocket
        logger.info("Client connected", metadata={"connectionId": connection_id})
        return connection_id

    async def disconnect(self, connection_id: str) -> None:
        """Forget a connection together with every group it joined"""
        async with self._lock:
            self.connections.pop(connection_id, None)
            for group in list(self.groups):
                members = self.groups[group]
                members.discard(connection_id)
                if not members:
                    del self.groups[group]
        logger.info("Client disconnected", metadata={"connectionId": connection_id})

    async def join_group(self, connection_id: str, group: str) -> None:
        async with self._lock:
            if connection_id not in self.connections:
                return
            self.groups.setdefault(group, set()).add(connection_id)
        logger.debug(f"Connection joined group {group}", metadata={"connectionId": connection_id})

    async def leave_group(self, connection_id: str, group: str) -> None:
        async with self._lock:
            members = self.groups.get(group)
            if members is None:
                return
            members.discard(connection_id)
            if not members:
                del self.groups[group]
        logger.debug(f"Connection left group {group}", metadata={"connectionId": connection_id})

    def group_members(self, group: str) -> List[str]:
        return sorted(self.groups.get(group, ()))

    async def send_to_group(self, group: str, target: str, *arguments: Any) -> int:
        """Send a frame to every connection in the group; returns the number delivered"""
        return await self._send_many(self.group_members(group), target, arguments)

    async def broadcast(self, target: str, *arguments: Any) -> int:
        return await self._send_many(list(self.connections), target, arguments)

    async def _send_many(self, connection_ids: List[str], target: str, arguments) -> int:
        frame = {"target": target, "arguments": list(arguments)}
        results = await asyncio.gather(*(self._send(connection_id, frame) for connection_id in connection_ids))
        return sum(1 for delivered in results if delivered)

    async def _send(self, connection_id: str, frame: Dict[str, Any]) -> bool:
        websocket = self.connections.get(connection_id)
        if websocket is None:
            return False
        try:
            await asyncio.wait_for(websocket.send_json(frame), timeout=self.send_timeout)
            return True
        except asyncio.TimeoutError:
            logger.warning(
                f"Send to connection timed out after {self.send_timeout}s, dropping it",
                metadata={"connectionId": connection_id},
            )
            await self.disconnect(connection_id)
            return False
        except Exception as e:
            logger.warning(
                "Failed to send to connection, dropping it",
                metadata={"connectionId": connection_id},
                error=e,
            )
            await self.disconnect(connection_id)
            return False

    def get_stats(self) -> Dict[str, int]:
        return {"connections": len(self.connections), "groups": len(self.groups)}
