"""
FastAPI Application - HTTP and WebSocket surface of the room host.

Endpoints:
    POST   /api/v1/rooms                           Start a game
    GET    /api/v1/rooms/{id}                      Viewer-neutral room summary
    GET    /api/v1/rooms/{id}/view?player_id=      Player's view
    POST   /api/v1/rooms/{id}/actions              Submit an action
    POST   /api/v1/rooms/{id}/rounds               Deal the next round
    GET    /api/v1/rooms/{id}/legal-actions?player_id=
    WS     /api/v1/rooms/{id}/ws?player_id=        Per-viewer view feed

Every commit pushes each connected viewer their own derive_view
projection; no message carries the full state.
"""

from typing import Optional
import json
import logging

from fastapi import FastAPI, Query, Request, WebSocket, WebSocketDisconnect
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .. import __version__
from ..config import Settings
from ..engine_core.state import GameState
from ..engine_core.view import derive_view
from ..errors import (
    CommitRetriesExhausted,
    RoomExistsError,
    RoomNotFoundError,
    RoundNotOverError,
)
from ..session import RoomManager
from .schemas import (
    ActionRequest,
    ActionResponse,
    CreateRoomRequest,
    ErrorCode,
    ErrorResponse,
    HealthResponse,
    LegalActionsResponse,
    PlayerViewResponse,
    RoomResponse,
)

logger = logging.getLogger(__name__)


def create_app(manager: Optional[RoomManager] = None, settings: Optional[Settings] = None) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        manager: Optional RoomManager (creates new if not provided)
        settings: Optional Settings (read from the environment if not provided)

    Returns:
        FastAPI application instance
    """
    settings = settings or Settings.from_env()
    room_manager = manager or RoomManager(settings=settings)

    app = FastAPI(
        title="Sen Engine API",
        description="""
Authoritative host for Sen, a real-time hidden-information card game.

## Error Codes

| Code | Description |
|------|-------------|
| `ROOM_NOT_FOUND` | Room has no game |
| `ROOM_EXISTS` | Room already has a game |
| `ACTION_REJECTED` | The action is not legal now; `details.reason` says why |
| `VERSION_CONFLICT` | Too many concurrent writers |
| `ROUND_NOT_OVER` | The current round is still running |
| `INVALID_REQUEST` | Malformed request |
        """,
        version=__version__,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # WebSocket connections per room, with the viewer each one belongs to
    ws_connections: dict[str, list[tuple[str, WebSocket]]] = {}

    # =========================================================================
    # Error helpers
    # =========================================================================

    def make_error_response(
        error_code: ErrorCode,
        message: str,
        status_code: int = 400,
        details: Optional[dict] = None,
    ) -> JSONResponse:
        """Create a standardized error response."""
        return JSONResponse(
            status_code=status_code,
            content=ErrorResponse(
                error=message,
                error_code=error_code,
                details=details,
            ).model_dump(mode="json"),
        )

    def room_not_found(e: RoomNotFoundError) -> JSONResponse:
        return make_error_response(
            ErrorCode.ROOM_NOT_FOUND, str(e), status_code=404, details={"room_id": e.room_id}
        )

    def version_conflict(e: CommitRetriesExhausted) -> JSONResponse:
        return make_error_response(
            ErrorCode.VERSION_CONFLICT, str(e), status_code=409, details={"attempts": e.attempts}
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return make_error_response(
            ErrorCode.INVALID_REQUEST,
            "Request body failed validation",
            details={"errors": json.loads(json.dumps(exc.errors(), default=str))},
        )

    def room_summary(state: GameState) -> RoomResponse:
        return RoomResponse(
            room_id=state.room_id,
            version=state.version,
            phase=state.phase,
            round_number=state.round_number,
            player_ids=[p.player_id for p in state.players],
            target_score=state.target_score,
        )

    def view_payload(state: GameState, viewer_id: str) -> PlayerViewResponse:
        return PlayerViewResponse.model_validate(derive_view(state, viewer_id), from_attributes=True)

    async def broadcast_views(room_id: str, state: GameState):
        """Send every connected viewer of a room its own view."""
        dead_connections = []
        for viewer_id, ws in list(ws_connections.get(room_id, [])):
            message = {
                "type": "state_update",
                "payload": view_payload(state, viewer_id).model_dump(mode="json"),
            }
            try:
                await ws.send_json(message)
            except (WebSocketDisconnect, RuntimeError):
                dead_connections.append((viewer_id, ws))
        for entry in dead_connections:
            if entry in ws_connections.get(room_id, []):
                ws_connections[room_id].remove(entry)

    # =========================================================================
    # Room Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/rooms",
        response_model=RoomResponse,
        status_code=201,
        responses={400: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
        tags=["Rooms"],
        summary="Start a game in a room",
    )
    async def create_room(request: CreateRoomRequest):
        """
        Deal round one. Players are seated in the order given.

        Pass a seed to make deals and reshuffles reproducible. Seeds are
        only accepted in development and test environments.
        """
        if request.seed is not None and not settings.accepts_seeds:
            return make_error_response(
                ErrorCode.INVALID_REQUEST,
                f"seed is not accepted in the {settings.env} environment",
                details={"field": "seed"},
            )

        try:
            state = room_manager.start_game(
                request.room_id,
                [(seat.player_id, seat.display_name) for seat in request.players],
                target_score=request.target_score,
                seed=request.seed,
            )
        except RoomExistsError as e:
            return make_error_response(ErrorCode.ROOM_EXISTS, str(e), status_code=409)
        except ValueError as e:
            return make_error_response(ErrorCode.INVALID_REQUEST, str(e))

        return room_summary(state)

    @app.get(
        "/api/v1/rooms/{room_id}",
        response_model=RoomResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Rooms"],
        summary="Get a room summary",
    )
    async def get_room(room_id: str):
        try:
            return room_summary(room_manager.load(room_id))
        except RoomNotFoundError as e:
            return room_not_found(e)

    @app.get(
        "/api/v1/rooms/{room_id}/view",
        response_model=PlayerViewResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Game"],
        summary="Get the game as one player sees it",
    )
    async def get_view(room_id: str, player_id: str = Query(..., description="Viewer")):
        try:
            state = room_manager.load(room_id)
        except RoomNotFoundError as e:
            return room_not_found(e)
        return view_payload(state, player_id)

    @app.post(
        "/api/v1/rooms/{room_id}/actions",
        response_model=ActionResponse,
        responses={
            400: {"model": ErrorResponse},
            404: {"model": ErrorResponse},
            409: {"model": ErrorResponse},
        },
        tags=["Game"],
        summary="Submit a player action",
    )
    async def submit_action(room_id: str, request: ActionRequest):
        """
        Validate and apply one action.

        A rejected action changes nothing and answers 409 ACTION_REJECTED
        with the reason and the current version.
        """
        try:
            action = request.action.to_action()
        except ValueError as e:
            return make_error_response(ErrorCode.INVALID_REQUEST, str(e))

        try:
            outcome = room_manager.submit_action(room_id, request.player_id, action)
        except RoomNotFoundError as e:
            return room_not_found(e)
        except CommitRetriesExhausted as e:
            return version_conflict(e)

        if not outcome.accepted:
            return make_error_response(
                ErrorCode.ACTION_REJECTED,
                f"{action.action_type.value} rejected",
                status_code=409,
                details={"reason": outcome.reason.value, "version": outcome.state.version},
            )

        await broadcast_views(room_id, outcome.state)
        return ActionResponse(
            accepted=True,
            version=outcome.state.version,
            changes=outcome.changes,
            view=view_payload(outcome.state, request.player_id),
        )

    @app.post(
        "/api/v1/rooms/{room_id}/rounds",
        response_model=RoomResponse,
        responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
        tags=["Game"],
        summary="Deal the next round",
    )
    async def new_round(room_id: str):
        try:
            state = room_manager.new_round(room_id)
        except RoomNotFoundError as e:
            return room_not_found(e)
        except RoundNotOverError as e:
            return make_error_response(
                ErrorCode.ROUND_NOT_OVER, str(e), status_code=409, details={"phase": e.phase}
            )
        except CommitRetriesExhausted as e:
            return version_conflict(e)

        await broadcast_views(room_id, state)
        return room_summary(state)

    @app.get(
        "/api/v1/rooms/{room_id}/legal-actions",
        response_model=LegalActionsResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Game"],
        summary="List the actions a player may take now",
    )
    async def get_legal_actions(room_id: str, player_id: str = Query(...)):
        try:
            state = room_manager.load(room_id)
        except RoomNotFoundError as e:
            return room_not_found(e)
        return LegalActionsResponse.from_actions(
            room_id, player_id, state.version, room_manager.legal_actions(room_id, player_id)
        )

    # =========================================================================
    # WebSocket Endpoint
    # =========================================================================

    @app.websocket("/api/v1/rooms/{room_id}/ws")
    async def websocket_endpoint(websocket: WebSocket, room_id: str, player_id: str):
        """
        WebSocket for real-time updates.

        Messages from server:
        - state_update: The viewer's view after a commit
        - error: Error occurred

        Messages from client:
        - ping: Keep-alive
        """
        await websocket.accept()

        try:
            state = room_manager.load(room_id)
        except RoomNotFoundError as e:
            await websocket.send_json({"type": "error", "payload": {"message": str(e)}})
            await websocket.close(code=4404)
            return

        entry = (player_id, websocket)
        ws_connections.setdefault(room_id, []).append(entry)

        try:
            connected = room_manager.set_connected(room_id, player_id, True)
            if connected is not state:
                await broadcast_views(room_id, connected)
            else:
                await websocket.send_json({
                    "type": "state_update",
                    "payload": view_payload(state, player_id).model_dump(mode="json"),
                })

            while True:
                data = await websocket.receive_text()
                try:
                    message = json.loads(data)
                except json.JSONDecodeError:
                    await websocket.send_json({
                        "type": "error",
                        "payload": {"message": "Invalid JSON"},
                    })
                    continue
                if not isinstance(message, dict):
                    await websocket.send_json({
                        "type": "error",
                        "payload": {"message": "Expected a JSON object"},
                    })
                    continue
                if message.get("type") == "ping":
                    await websocket.send_json({"type": "pong"})

        except WebSocketDisconnect:
            logger.debug("Viewer %s left room %s", player_id, room_id)
        finally:
            if entry in ws_connections.get(room_id, []):
                ws_connections[room_id].remove(entry)
            await mark_disconnected(room_id, player_id)

    async def mark_disconnected(room_id: str, player_id: str):
        """Flag a viewer disconnected once their last socket has closed."""
        if any(viewer == player_id for viewer, _ in ws_connections.get(room_id, [])):
            return
        before = room_manager.load(room_id)
        after = room_manager.set_connected(room_id, player_id, False)
        if after is not before:
            await broadcast_views(room_id, after)

    # =========================================================================
    # Health Check
    # =========================================================================

    @app.get(
        "/health",
        response_model=HealthResponse,
        tags=["System"],
        summary="Health check",
    )
    async def health_check() -> HealthResponse:
        """Health check endpoint for load balancers."""
        return HealthResponse(
            status="healthy",
            service="sen-engine",
            version=__version__,
        )

    @app.get("/", tags=["System"])
    async def root():
        """Root endpoint with API info."""
        return {
            "name": "Sen Engine API",
            "version": __version__,
            "docs": "/api/docs",
            "health": "/health",
        }

    return app
