from __future__ import annotations

from typing import Optional


class NotationError(ValueError):
    """Base class for board decoding and move notation failures.

    Each subclass carries a stable machine-readable ``code`` used by the HTTP
    error envelope.
    """

    code = "notation_error"

    def __init__(self, message: str, *, token: Optional[str] = None) -> None:
        super().__init__(message)
        self.token = token


class InvalidFENFormat(NotationError):
    code = "invalid_fen_format"


class InvalidMoveFormat(NotationError):
    code = "invalid_move_format"


class InvalidDestination(NotationError):
    code = "invalid_destination"


class AmbiguousMove(NotationError):
    code = "ambiguous_move"


class NoLegalCandidate(NotationError):
    code = "no_legal_candidate"


class PieceNotFoundAtOrigin(NotationError):
    code = "piece_not_found_at_origin"
