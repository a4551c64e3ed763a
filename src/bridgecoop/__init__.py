"""Bridge co-op package exposing the grid rules, room pairing, and the web application."""

from .grid import BridgeGrid, GridLayout, apply_placement_and_prune
from .relay import SessionRelay
from .rooms import Room, RoomManager
from .web import create_app

__all__ = [
    "BridgeGrid",
    "GridLayout",
    "Room",
    "RoomManager",
    "SessionRelay",
    "apply_placement_and_prune",
    "create_app",
]
