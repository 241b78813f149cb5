"""
Service layer helpers that orchestrate the store, credentials and domain logic.
"""

from .room_service import CredentialServiceProtocol, RoomService
from .sessions import SessionManager

__all__ = ["CredentialServiceProtocol", "RoomService", "SessionManager"]
