"""Outbound delivery over Flask-SocketIO rooms.

Socket.IO rooms are named after the game room code, so a broadcast to a code
reaches exactly the connections subscribed to it.
"""

from trivia import protocol
from trivia.models import Room


class SocketIOTransport:
    def __init__(self, socketio, namespace: str = '/'):
        self._socketio = socketio
        self.namespace = namespace

    def broadcast(self, room_code: str, event: str, payload=None) -> None:
        self._socketio.emit(event, payload if payload is not None else {}, to=room_code, namespace=self.namespace)

    def unicast(self, connection_id: str, event: str, payload=None) -> None:
        self._socketio.emit(event, payload if payload is not None else {}, to=connection_id, namespace=self.namespace)

    def subscribe(self, connection_id: str, room_code: str) -> None:
        self._socketio.server.enter_room(connection_id, room_code, namespace=self.namespace)

    def unsubscribe(self, connection_id: str, room_code: str) -> None:
        self._socketio.server.leave_room(connection_id, room_code, namespace=self.namespace)


class RoomEvents:
    """Room-level notifications shared by the scheduler and the coordinator."""

    def __init__(self, transport):
        self.transport = transport

    def broadcast(self, room: Room, event: str, payload=None) -> None:
        self.transport.broadcast(room.code, event, payload)

    def unicast(self, connection_id: str, event: str, payload=None) -> None:
        self.transport.unicast(connection_id, event, payload)

    def scoreboard(self, room: Room) -> None:
        self.transport.broadcast(room.code, protocol.SCOREBOARD, protocol.scoreboard_payload(room))

    def players_state(self, room: Room) -> None:
        # Same snapshot for everyone except the per-recipient isCreator flag
        for player_id in list(room.players):
            self.transport.unicast(
                player_id,
                protocol.PLAYERS_STATE,
                protocol.players_state_payload(room, is_creator=player_id == room.creator_id),
            )

    def room_state(self, room: Room) -> None:
        self.scoreboard(room)
        self.players_state(room)
