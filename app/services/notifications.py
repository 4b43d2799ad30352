"""
Notification Dispatcher
Delivers push events to the live connections of a user

Connections register on connect, get bound to a user id when the client
sends its join frame, and are removed on disconnect. Delivery is best-effort:
events for users with no live connection are dropped, nothing is persisted
or retried.
"""
import asyncio
import threading
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Optional, Set

from fastapi import WebSocket, WebSocketDisconnect

from app.core.logging import get_logger

logger = get_logger(__name__)

# Event types pushed to clients
NEW_JOB = "new_job"
NEW_APPLICATION = "new_application"
APPLICATION_REJECTED = "application_rejected"
INTERVIEW_SCHEDULED = "interview_scheduled"


class ConnectionClosed(Exception):
    """Raised by a connection handle that can no longer deliver"""


class Connection(ABC):
    """A live push connection"""

    @abstractmethod
    def send(self, message: Dict[str, Any]) -> None:
        """Hand a message to the connection without blocking."""


class WebSocketConnection(Connection):
    """
    WebSocket-backed handle
    send() may be called from any thread; frames are queued on the socket's
    event loop and written by pump()
    """

    def __init__(self, websocket: WebSocket, loop: asyncio.AbstractEventLoop):
        self.websocket = websocket
        self.loop = loop
        self.queue: asyncio.Queue = asyncio.Queue()
        self.closed = False

    def send(self, message: Dict[str, Any]) -> None:
        if self.closed:
            raise ConnectionClosed("connection closed")
        try:
            self.loop.call_soon_threadsafe(self.queue.put_nowait, message)
        except RuntimeError as e:
            # Event loop already shut down
            self.closed = True
            raise ConnectionClosed(str(e)) from e

    def close(self) -> None:
        if not self.closed:
            self.closed = True
            self.loop.call_soon_threadsafe(self.queue.put_nowait, None)

    async def pump(self) -> None:
        """Write queued frames until closed"""
        while True:
            message = await self.queue.get()
            if message is None:
                return
            try:
                await self.websocket.send_json(message)
            except (WebSocketDisconnect, RuntimeError):
                self.closed = True
                return


class ConnectionRegistry:
    """Thread-safe map of user id to that user's live connections"""

    def __init__(self):
        self._lock = threading.RLock()
        self._connections: Set[Connection] = set()
        self._by_user: Dict[int, Set[Connection]] = {}
        self._user_of: Dict[Connection, int] = {}

    def add(self, connection: Connection) -> None:
        with self._lock:
            self._connections.add(connection)

    def bind(self, connection: Connection, user_id: int) -> None:
        """Associate a connection with a user, replacing any earlier binding"""
        with self._lock:
            self._connections.add(connection)
            self._unbind(connection)
            self._by_user.setdefault(user_id, set()).add(connection)
            self._user_of[connection] = user_id

    def remove(self, connection: Connection) -> None:
        with self._lock:
            self._connections.discard(connection)
            self._unbind(connection)

    def _unbind(self, connection: Connection) -> None:
        user_id = self._user_of.pop(connection, None)
        if user_id is None:
            return
        handles = self._by_user.get(user_id)
        if handles is not None:
            handles.discard(connection)
            if not handles:
                del self._by_user[user_id]

    def user_of(self, connection: Connection) -> Optional[int]:
        with self._lock:
            return self._user_of.get(connection)

    def connections_for(self, user_id: int) -> List[Connection]:
        """Snapshot of the user's connections, safe to iterate unlocked"""
        with self._lock:
            return list(self._by_user.get(user_id, ()))

    def all_connections(self) -> List[Connection]:
        with self._lock:
            return list(self._connections)

    def __len__(self) -> int:
        with self._lock:
            return len(self._connections)


class NotificationDispatcher:
    """Fans events out to registered connections"""

    def __init__(self, registry: Optional[ConnectionRegistry] = None):
        self.registry = registry if registry is not None else ConnectionRegistry()

    def notify_user(self, user_id: int, event_type: str, payload: Dict[str, Any]) -> int:
        """
        Deliver an event to every connection of one user
        Returns how many connections accepted it; 0 means it was dropped.
        Never raises.
        """
        try:
            connections = self.registry.connections_for(user_id)
            if not connections:
                logger.debug("Notification dropped, user not connected",
                             user_id=user_id, event_type=event_type)
                return 0
            delivered = self._deliver(connections, event_type, payload)
            logger.info("Notification dispatched", user_id=user_id,
                        event_type=event_type, connections=delivered)
            return delivered
        except Exception:
            logger.exception("Notification failed", user_id=user_id, event_type=event_type)
            return 0

    def notify_users(self, user_ids: Iterable[int], event_type: str, payload: Dict[str, Any]) -> int:
        """Per-recipient fan-out of one event"""
        return sum(self.notify_user(user_id, event_type, payload) for user_id in user_ids)

    def broadcast(self, event_type: str, payload: Dict[str, Any]) -> int:
        """Deliver an event to every live connection, joined or not"""
        try:
            delivered = self._deliver(self.registry.all_connections(), event_type, payload)
            logger.info("Notification broadcast", event_type=event_type, connections=delivered)
            return delivered
        except Exception:
            logger.exception("Broadcast failed", event_type=event_type)
            return 0

    def _deliver(self, connections: List[Connection], event_type: str, payload: Dict[str, Any]) -> int:
        message = {"event": event_type, "data": payload}
        delivered = 0
        for connection in connections:
            try:
                connection.send(message)
            except ConnectionClosed:
                logger.warning("Dropping closed connection", event_type=event_type)
                self.registry.remove(connection)
                continue
            except Exception:
                # Broken handle; the other recipients are still served
                logger.exception("Dropping failing connection", event_type=event_type)
                self.registry.remove(connection)
                continue
            delivered += 1
        return delivered
