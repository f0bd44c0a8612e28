"""
API Module - Battle client interface.

Exposes the engine via REST API. A client:
1. Starts a battle (choosing a difficulty tier)
2. Reads the battle state and legal actions
3. Submits player actions; END_TURN resolves the opponent's turn
4. Ends the battle session

All state is session-scoped and in memory.
"""

from .schemas import (
    # Requests
    StartBattleRequest,
    ActionRequest,
    StatPreviewRequest,
    CreatureSpec,
    ItemSpec,
    # Responses
    BattleStateResponse,
    ActionResponse,
    LegalActionsResponse,
    StatPreviewResponse,
    ErrorResponse,
    # Enums
    ErrorCode,
)
from .service import APIService
from .app import create_app

__all__ = [
    # Requests
    "StartBattleRequest",
    "ActionRequest",
    "StatPreviewRequest",
    "CreatureSpec",
    "ItemSpec",
    # Responses
    "BattleStateResponse",
    "ActionResponse",
    "LegalActionsResponse",
    "StatPreviewResponse",
    "ErrorResponse",
    # Enums
    "ErrorCode",
    # Service
    "APIService",
    "create_app",
]
