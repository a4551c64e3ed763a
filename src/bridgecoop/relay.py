"""Routes client events to their room and broadcasts the canonical grid back."""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional

from pydantic import BaseModel, StrictInt, ValidationError

from .grid import Cell, apply_placement_and_prune
from .rooms import ROOM_CAPACITY, WAITING_ROOM, Room, RoomManager

logger = logging.getLogger(__name__)

Sender = Callable[[Dict[str, Any]], Awaitable[None]]


class ClientMessage(BaseModel):
    """Envelope of every frame a client sends."""

    type: str
    data: Any = None


class PlacedCell(BaseModel):
    x: StrictInt
    y: StrictInt


class PlaceRequest(BaseModel):
    placed: List[Any] = []


def parse_placed(data: Any) -> List[Cell]:
    """Extract ``(x, y)`` pairs from a ``place`` payload, dropping anything malformed."""

    try:
        request = PlaceRequest.model_validate(data)
    except ValidationError:
        return []
    cells: List[Cell] = []
    for item in request.placed:
        try:
            cell = PlacedCell.model_validate(item)
        except ValidationError:
            continue
        cells.append((cell.x, cell.y))
    return cells


def envelope(event: str, data: Any = None) -> Dict[str, Any]:
    return {"type": event, "data": data}


class SessionRelay:
    """Applies placements to room grids and keeps both players in sync.

    Membership changes never await, so they are atomic on the event loop.
    Grid updates and broadcasts hold the room's own lock: events in one room
    are applied and delivered in order, and a slow socket only holds up its
    own room.
    """

    def __init__(self, manager: RoomManager, verify_win: bool = False) -> None:
        self.manager = manager
        self.verify_win = verify_win
        self._senders: Dict[str, Sender] = {}

    # ---- inbound events ----

    async def on_connect(self, connection_id: str, send: Sender) -> Optional[Room]:
        self._senders[connection_id] = send
        room = self.manager.connect(connection_id)
        if room is None:
            await self._send(
                connection_id, envelope("joined", {"room": WAITING_ROOM, "count": 1})
            )
            return None
        async with room.lock:
            await self._broadcast(
                room,
                envelope(
                    "joined",
                    {
                        "room": room.room_id,
                        "count": room.count,
                        "state": {"grid": room.grid.to_wire()},
                    },
                ),
            )
            await self._broadcast(room, envelope("players", room.count))
        return room

    async def on_placement(self, connection_id: str, data: Any) -> None:
        room = self.manager.room_for(connection_id)
        if room is None:
            logger.debug("placement from unpaired %s ignored", connection_id)
            return
        placed = parse_placed(data)
        async with room.lock:
            room.grid = apply_placement_and_prune(room.grid, placed)
            await self._broadcast(room, envelope("state", {"grid": room.grid.to_wire()}))

    async def on_win(self, connection_id: str) -> None:
        room = self.manager.room_for(connection_id)
        if room is None:
            logger.debug("win from unpaired %s ignored", connection_id)
            return
        async with room.lock:
            if self.verify_win and not room.grid.is_bridge_complete():
                logger.info("%s claimed a win on an unfinished bridge", connection_id)
                return
            await self._broadcast(
                room,
                envelope(
                    "state",
                    {"grid": room.grid.to_wire(), "players": list(room.players)},
                ),
            )
            await self._broadcast(room, envelope("message", "win"))
            logger.info("%s won", room.room_id)

    async def on_disconnect(self, connection_id: str) -> None:
        self._senders.pop(connection_id, None)
        room = self.manager.disconnect(connection_id)
        logger.info("disconnect %s", connection_id)
        if room is None or not room.players:
            return
        async with room.lock:
            await self._broadcast(room, envelope("players", room.count))

    async def dispatch(self, connection_id: str, message: ClientMessage) -> None:
        if message.type == "place":
            await self.on_placement(connection_id, message.data)
        elif message.type == "win":
            await self.on_win(connection_id)
        else:
            logger.debug("unknown event %r from %s", message.type, connection_id)

    # ---- outbound ----

    async def _broadcast(self, room: Room, payload: Dict[str, Any]) -> None:
        for player in list(room.players[:ROOM_CAPACITY]):
            await self._send(player, payload)

    async def _send(self, connection_id: str, payload: Dict[str, Any]) -> None:
        send = self._senders.get(connection_id)
        if send is None:
            return
        try:
            await send(payload)
        except RuntimeError as exc:
            logger.warning("could not reach %s: %s", connection_id, exc)
