"""
FastAPI Application - REST API for battle clients.

Endpoints:
    POST   /api/v1/battles                        Start a battle
    GET    /api/v1/battles                        List active battles
    GET    /api/v1/battles/{id}                   Get battle state
    DELETE /api/v1/battles/{id}                   End a battle
    POST   /api/v1/battles/{id}/actions           Submit a player action
    GET    /api/v1/battles/{id}/legal-actions     Actions the player can submit
    POST   /api/v1/stats/preview                  Derived stat preview

Opponent Turn Flow:
    1. The player submits END_TURN
    2. The planner's whole turn is computed before the response returns
    3. The response lists opponent_actions and opponent_log in order,
       so clients can replay them with whatever pacing they like

All responses are JSON with explicit Pydantic schemas.
"""

from typing import Annotated, Optional, Union
import logging
import os

from fastapi import FastAPI, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .. import __version__
from ..engine_core.errors import SessionNotFound
from ..logging_config import configure_logging
from .service import APIService
from .schemas import (
    # Request models
    StartBattleRequest,
    ActionRequest,
    StatPreviewRequest,
    # Response models
    BattleStateResponse,
    ActionResponse,
    LegalActionsResponse,
    StatPreviewResponse,
    ErrorResponse,
    SessionListResponse,
    EndSessionResponse,
    HealthResponse,
    # Enums
    ErrorCode,
)

logger = logging.getLogger(__name__)

# Environment configuration
BATTLECORE_ENV = os.getenv("BATTLECORE_ENV", "development")
ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "*").split(",")


def create_app(service: Optional[APIService] = None) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        service: Optional APIService instance (creates new if not provided)

    Returns:
        FastAPI application instance
    """
    configure_logging()

    app = FastAPI(
        title="Battlecore API",
        description="""
Creature battle simulation with a tiered computer opponent.

## Opponent Turn Flow

Submitting `end_turn` runs the opponent's whole turn before the
response returns. The response carries `opponent_actions` and
`opponent_log` in the order they were resolved.

## Rejected Actions

A rejected action returns **200** with `success=false`, an
`error_code` and the unchanged state (plus the rejection log line).

## Error Codes

| Code | Description |
|------|-------------|
| `SESSION_NOT_FOUND` | Battle session does not exist |
| `VALIDATION_ERROR` | Request body is inconsistent |
| `INTERNAL_ERROR` | Unexpected server error |
        """,
        version=__version__,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    api_service = service or APIService()

    # =========================================================================
    # Error helpers
    # =========================================================================

    def make_error_response(
        error_code: ErrorCode,
        message: str,
        status_code: int = 400,
        details: Optional[dict] = None,
    ) -> JSONResponse:
        """Wrap an ErrorResponse in a JSONResponse."""
        return JSONResponse(
            status_code=status_code,
            content=ErrorResponse(
                error=message,
                error_code=error_code,
                details=details,
            ).model_dump(mode="json"),
        )

    def session_not_found(e: SessionNotFound) -> JSONResponse:
        return make_error_response(
            ErrorCode.SESSION_NOT_FOUND,
            str(e),
            status_code=404,
            details={"session_id": e.session_id},
        )

    # =========================================================================
    # Battle Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/battles",
        response_model=BattleStateResponse,
        responses={400: {"model": ErrorResponse, "description": "Inconsistent request"}},
        tags=["Battles"],
        summary="Start a battle",
    )
    async def start_battle(body: StartBattleRequest) -> Union[BattleStateResponse, JSONResponse]:
        """
        Start a battle against a generated opponent for the chosen tier.

        Omit `player_deck` and `player_hand` to play with a starter collection.
        """
        try:
            return api_service.start_battle(body)
        except ValueError as e:
            return make_error_response(ErrorCode.VALIDATION_ERROR, str(e))

    @app.get(
        "/api/v1/battles",
        response_model=SessionListResponse,
        tags=["Battles"],
        summary="List active battles",
    )
    async def list_battles() -> SessionListResponse:
        """IDs of battles still being played."""
        sessions = api_service.list_sessions()
        return SessionListResponse(sessions=sessions, count=len(sessions))

    @app.get(
        "/api/v1/battles/{session_id}",
        response_model=BattleStateResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Battles"],
        summary="Get battle state",
    )
    async def get_battle(session_id: str) -> Union[BattleStateResponse, JSONResponse]:
        """Get the complete current battle state."""
        try:
            return api_service.get_state(session_id)
        except SessionNotFound as e:
            return session_not_found(e)

    @app.delete(
        "/api/v1/battles/{session_id}",
        response_model=EndSessionResponse,
        tags=["Battles"],
        summary="End a battle",
    )
    async def end_battle(
        session_id: str,
        reason: Annotated[str, Query(description="Reason for ending")] = "user_ended",
    ) -> EndSessionResponse:
        """End a battle session and release it."""
        success = api_service.end_session(session_id, reason)
        return EndSessionResponse(success=success, session_id=session_id)

    # =========================================================================
    # Action Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/battles/{session_id}/actions",
        response_model=ActionResponse,
        responses={404: {"model": ErrorResponse, "description": "Session not found"}},
        tags=["Battle Loop"],
        summary="Submit a player action",
    )
    async def submit_action(
        session_id: str,
        body: ActionRequest,
    ) -> Union[ActionResponse, JSONResponse]:
        """
        Submit a player action.

        **Request Body:**
        ```json
        {"action_type": "attack", "creature_id": "p-1", "target_id": "opp-2"}
        ```

        `end_turn` also resolves the opponent's turn.
        """
        try:
            return api_service.submit_action(session_id, body)
        except SessionNotFound as e:
            return session_not_found(e)

    @app.get(
        "/api/v1/battles/{session_id}/legal-actions",
        response_model=LegalActionsResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Battle Loop"],
        summary="List actions the player can submit",
    )
    async def get_legal_actions(session_id: str) -> Union[LegalActionsResponse, JSONResponse]:
        """Every action the player could submit right now."""
        try:
            return api_service.legal_actions(session_id)
        except SessionNotFound as e:
            return session_not_found(e)

    # =========================================================================
    # Stats Endpoint
    # =========================================================================

    @app.post(
        "/api/v1/stats/preview",
        response_model=StatPreviewResponse,
        tags=["Stats"],
        summary="Preview derived stats and matchup odds",
    )
    async def preview_stats(body: StatPreviewRequest) -> StatPreviewResponse:
        """Derived stats, power rating and (with an opponent) battle odds."""
        return api_service.preview_stats(body)

    # =========================================================================
    # System Endpoints
    # =========================================================================

    @app.get(
        "/health",
        response_model=HealthResponse,
        tags=["System"],
        summary="Health check",
    )
    async def health_check() -> HealthResponse:
        """Liveness probe; does not touch sessions."""
        return HealthResponse(
            status="healthy",
            service="battlecore",
            version=__version__,
        )

    @app.get("/", tags=["System"])
    async def root():
        """Service banner with links to the docs and health check."""
        return {
            "service": "battlecore",
            "environment": BATTLECORE_ENV,
            "docs": "/api/docs",
            "health": "/health",
        }

    logger.info("Battlecore API created (%s)", BATTLECORE_ENV)
    return app


# For running directly: uvicorn battlecore.api.app:app
app = create_app()
