"""
➡️ But : Taxonomie d'erreurs métier + format de réponse d'erreur unique.

Chaque erreur porte :

un code stable (ErrorCode) que le front peut tester,

un statut HTTP,

un message lisible (jamais de stacktrace ni de détail SQL).

Les services lèvent ces exceptions ; app.main enregistre les handlers qui les
transforment en JSON : {"error": "...", "code": "...", "details": {...}}
"""

from enum import Enum
from typing import Any, Dict, Optional

from fastapi import status


class ErrorCode(str, Enum):
    # Validation (400)
    INVALID_INPUT = "INVALID_INPUT"
    INVALID_DICE_VALUES = "INVALID_DICE_VALUES"
    INVALID_PLAYER_NAME = "INVALID_PLAYER_NAME"

    # Métier
    GAME_NOT_FOUND = "GAME_NOT_FOUND"
    GAME_ALREADY_COMPLETED = "GAME_ALREADY_COMPLETED"
    MAX_ROLLS_REACHED = "MAX_ROLLS_REACHED"
    GAME_INCOMPLETE = "GAME_INCOMPLETE"
    CONCURRENT_UPDATE = "CONCURRENT_UPDATE"

    # Rate limiting (429)
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"

    # Serveur (500)
    INTERNAL_ERROR = "INTERNAL_ERROR"
    DATABASE_ERROR = "DATABASE_ERROR"


class DiceGameError(Exception):
    """Erreur de base : code + statut HTTP + message public."""

    code: ErrorCode = ErrorCode.INTERNAL_ERROR
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None, *, details: Optional[Dict[str, Any]] = None):
        self.message = message or self.message
        self.details = details
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"error": self.message, "code": self.code.value}
        if self.details:
            body["details"] = self.details
        return body


class GameNotFoundError(DiceGameError):
    code = ErrorCode.GAME_NOT_FOUND
    status_code = status.HTTP_404_NOT_FOUND
    message = "Game not found"


class GameAlreadyCompletedError(DiceGameError):
    code = ErrorCode.GAME_ALREADY_COMPLETED
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Game already completed"


class MaxRollsReachedError(DiceGameError):
    code = ErrorCode.MAX_ROLLS_REACHED
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Maximum rolls (10) already reached"


class GameIncompleteError(DiceGameError):
    code = ErrorCode.GAME_INCOMPLETE
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Game needs exactly 10 rolls before it can be finished"


class InvalidDiceError(DiceGameError):
    code = ErrorCode.INVALID_DICE_VALUES
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Dice values must be integers between 1 and 6"


class InvalidNameError(DiceGameError):
    code = ErrorCode.INVALID_PLAYER_NAME
    status_code = status.HTTP_400_BAD_REQUEST
    message = (
        "Invalid player name. Must contain only letters, spaces, hyphens, "
        "apostrophes, and periods (1-50 characters)."
    )


class InvalidInputError(DiceGameError):
    code = ErrorCode.INVALID_INPUT
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Invalid input"


class ConcurrentUpdateError(DiceGameError):
    code = ErrorCode.CONCURRENT_UPDATE
    status_code = status.HTTP_409_CONFLICT
    message = "Game was updated concurrently, re-fetch the game and try again"


class RateLimitedError(DiceGameError):
    code = ErrorCode.RATE_LIMIT_EXCEEDED
    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    message = "Rate limit exceeded. Please try again later."

    def __init__(self, *, retry_after: int, limit: int, reset_at: str, headers: Optional[Dict[str, str]] = None):
        super().__init__(details={"retryAfter": retry_after, "limit": limit, "resetTime": reset_at})
        self.retry_after = retry_after
        self.limit = limit
        self.reset_at = reset_at
        self.headers = headers or {"Retry-After": str(retry_after)}


class DatabaseError(DiceGameError):
    code = ErrorCode.DATABASE_ERROR
    message = "Database operation failed"
