"""Failure taxonomy for game actions.

Engine internals raise these; the public engine operations turn them into an
:class:`ActionResult` so the transport never sees a traceback for a bad move.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


class GameError(Exception):
    kind = 'game_error'
    http_status = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(GameError):
    """Missing or malformed input, e.g. a join without a name."""
    kind = 'validation'
    http_status = 400


class PreconditionError(GameError):
    """Wrong phase or role for the requested action."""
    kind = 'precondition'
    http_status = 409


class OwnershipError(GameError):
    """Card id is not held by the player claiming it."""
    kind = 'ownership'
    http_status = 403


class ResourceExhausted(GameError):
    kind = 'exhausted'
    http_status = 409


class DeckExhausted(ResourceExhausted):
    def __init__(self, deck_kind: str, wanted: int = 1, remaining: int = 0):
        super().__init__(f'{deck_kind} deck has {remaining} cards left, {wanted} needed')
        self.deck_kind = deck_kind
        self.wanted = wanted
        self.remaining = remaining


class NotFoundError(GameError):
    kind = 'not_found'
    http_status = 404


class ConflictError(GameError):
    """A join reused a session key that already belongs to a player."""
    kind = 'conflict'
    http_status = 409


@dataclass
class ActionResult:
    success: bool
    message: str
    error: Optional[str] = None
    http_status: int = 200
    data: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def ok(cls, message: str, **data) -> 'ActionResult':
        return cls(success=True, message=message, data=data)

    @classmethod
    def fail(cls, exc: GameError) -> 'ActionResult':
        return cls(success=False, message=exc.message, error=exc.kind, http_status=exc.http_status)

    def to_dict(self):
        payload = {'success': self.success, 'message': self.message}
        if self.error:
            payload['error'] = self.error
        payload.update(self.data)
        return payload
