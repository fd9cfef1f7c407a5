import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RoundEvent:
    party_code: str
    round_num: int
    phase: str
    active: bool
    success: bool
    message: str

    def to_dict(self):
        return {
            'party_code': self.party_code,
            'round_num': self.round_num,
            'phase': self.phase,
            'active': self.active,
            'success': self.success,
            'message': self.message,
        }


class EventChannel:
    """Per-engine observer list for round events."""

    def __init__(self):
        self._subscribers: List[Callable[[RoundEvent], None]] = []

    def subscribe(self, callback: Callable[[RoundEvent], None]) -> Callable[[], None]:
        self._subscribers.append(callback)

        def unsubscribe():
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def publish(self, event: RoundEvent) -> None:
        for callback in list(self._subscribers):
            try:
                callback(event)
            except Exception:
                # One broken listener must not stall the game
                logger.exception(f"[event-error] party={event.party_code} round={event.round_num} phase={event.phase}")


def notifier_adapter(notify: Optional[Callable[[bool, str], None]]):
    """Wrap a plain ``(success, message)`` callback as an event subscriber."""
    if notify is None:
        return None

    def _callback(event: RoundEvent):
        notify(event.success, event.message)

    return _callback
