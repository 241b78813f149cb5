"""
Persistent room/form store.
"""

from .room_store import RoomStore

__all__ = ["RoomStore"]
