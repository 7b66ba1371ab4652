"""
API Module - Network interface of the room host.

Clients:
1. Start a game in a room
2. Fetch their own view
3. Submit actions and receive the resulting view
4. Subscribe to a WebSocket feed of view updates

Nothing sent to a client is wider than derive_view for that client.
"""

from .schemas import (
    # Requests
    ActionRequest,
    CreateRoomRequest,
    SeatRequest,
    # Responses
    ActionResponse,
    ErrorCode,
    ErrorResponse,
    HealthResponse,
    LegalActionsResponse,
    PlayerViewResponse,
    RoomResponse,
)
from .app import create_app

__all__ = [
    # Requests
    "ActionRequest",
    "CreateRoomRequest",
    "SeatRequest",
    # Responses
    "ActionResponse",
    "ErrorCode",
    "ErrorResponse",
    "HealthResponse",
    "LegalActionsResponse",
    "PlayerViewResponse",
    "RoomResponse",
    "create_app",
]
