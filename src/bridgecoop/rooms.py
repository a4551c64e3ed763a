"""Pairing of connections into two-player rooms, each owning a grid."""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .grid import DEFAULT_LAYOUT, BridgeGrid, GridLayout

logger = logging.getLogger(__name__)

ROOM_CAPACITY = 2
WAITING_ROOM = "waiting"


@dataclass
class Room:
    """A paired session and the grid both players build on."""

    room_id: str
    grid: BridgeGrid
    players: List[str] = field(default_factory=list)
    created_at: float = field(default_factory=lambda: time.time())
    lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False, compare=False)

    @property
    def count(self) -> int:
        return len(self.players)


class RoomManager:
    """Owns the waiting slot, the live rooms and the connection -> room map."""

    def __init__(self, layout: GridLayout = DEFAULT_LAYOUT) -> None:
        self.layout = layout
        self.waiting: Optional[str] = None
        self.rooms: Dict[str, Room] = {}
        self._room_counter = 1
        self._membership: Dict[str, str] = {}

    def __len__(self) -> int:
        return len(self.rooms)

    def get(self, room_id: str) -> Optional[Room]:
        return self.rooms.get(room_id)

    def room_for(self, connection_id: str) -> Optional[Room]:
        room_id = self._membership.get(connection_id)
        if room_id is None:
            return None
        return self.rooms.get(room_id)

    def connect(self, connection_id: str) -> Optional[Room]:
        """Take the waiting slot, or pair with whoever holds it.

        Returns the new room when a pair was formed, ``None`` while waiting.
        """
        if connection_id == self.waiting:
            return None
        existing = self.room_for(connection_id)
        if existing is not None:
            return existing

        if self.waiting is None:
            self.waiting = connection_id
            logger.info("%s waiting for a partner", connection_id)
            return None

        room_id = f"room-{self._room_counter}"
        self._room_counter += 1
        room = Room(
            room_id=room_id,
            grid=BridgeGrid(layout=self.layout),
            players=[self.waiting, connection_id],
        )
        self.waiting = None
        self.rooms[room_id] = room
        for player in room.players:
            self._membership[player] = room_id
        logger.info("paired %s -> %s", " + ".join(room.players), room_id)
        return room

    def disconnect(self, connection_id: str) -> Optional[Room]:
        """Forget a connection; returns the room it left, if any.

        A room is destroyed once its last player is gone.
        """
        if self.waiting == connection_id:
            self.waiting = None
            logger.info("%s left the waiting slot", connection_id)
            return None

        room_id = self._membership.pop(connection_id, None)
        if room_id is None:
            return None
        room = self.rooms.get(room_id)
        if room is None:
            return None

        room.players = [p for p in room.players if p != connection_id]
        if not room.players:
            self.rooms.pop(room_id, None)
            logger.info("%s closed", room_id)
        return room
