import logging
import threading
from typing import Callable, Dict, Optional

from app.models import generate_party_code
from .cards import CardSet, load_card_set
from .engine import GameEngine
from .events import RoundEvent

logger = logging.getLogger(__name__)


def party_room(party_code: str) -> str:
    return f"party:{party_code.upper()}"


class PartyManager:
    """Live parties of this process, keyed by party code.

    Each party gets its own engine; nothing is shared between them except the
    card set they are seeded from.
    """

    def __init__(self):
        self._parties: Dict[str, GameEngine] = {}
        self._lock = threading.Lock()
        self.config = {}
        self.card_set: Optional[CardSet] = None
        self.start_background_task: Optional[Callable] = None
        self.sleep: Optional[Callable] = None
        self.broadcast: Optional[Callable[[RoundEvent], None]] = None

    def init_app(self, app, start_background_task=None, sleep=None, broadcast=None):
        self.config = app.config
        self.card_set = load_card_set(app.config.get('CARD_DECK_PATH'))
        self.start_background_task = start_background_task
        self.sleep = sleep
        self.broadcast = broadcast
        self.clear()
        app.extensions['parties'] = self
        app.logger.info(
            f"[cards] prompts={len(self.card_set.prompts)} responses={len(self.card_set.responses)}"
        )

    def _timers_enabled(self) -> bool:
        if self.config.get('TESTING') and not self.config.get('ENABLE_SCHEDULER_IN_TESTS'):
            return False
        return True

    def create(self, party_code: Optional[str] = None) -> GameEngine:
        if self.card_set is None:
            raise RuntimeError('PartyManager.init_app() must be called before creating parties')
        cfg = self.config
        with self._lock:
            code = (party_code or '').upper() or generate_party_code(
                int(cfg.get('PARTY_CODE_LENGTH', 5)), taken=self._parties
            )
            if code in self._parties:
                return self._parties[code]
            engine_kwargs = {}
            if self.sleep is not None:
                engine_kwargs['sleep'] = self.sleep
            engine = GameEngine(
                code,
                self.card_set,
                round_length=int(cfg.get('ROUND_LENGTH_SEC', 60)),
                hand_size=int(cfg.get('HAND_SIZE', 10)),
                min_players=int(cfg.get('MIN_PLAYERS', 3)),
                start_background_task=self.start_background_task,
                heartbeat_sec=int(cfg.get('TIMER_HEARTBEAT_SEC', 0)),
                timers_enabled=self._timers_enabled(),
                **engine_kwargs,
            )
            if self.broadcast is not None:
                engine.events.subscribe(self.broadcast)
            self._parties[code] = engine
        logger.info(f"[party-create] party={code}")
        return engine

    def get(self, party_code: Optional[str]) -> Optional[GameEngine]:
        if not party_code:
            return None
        return self._parties.get(party_code.upper())

    def remove(self, party_code: str) -> bool:
        with self._lock:
            engine = self._parties.pop(party_code.upper(), None)
        if engine is None:
            return False
        current = engine.latest_round
        if current is not None:
            engine.timer.cancel(current.round_num)
        logger.info(f"[party-remove] party={party_code.upper()}")
        return True

    def clear(self) -> None:
        with self._lock:
            codes = list(self._parties)
        for code in codes:
            self.remove(code)

    def __contains__(self, party_code):
        return bool(party_code) and party_code.upper() in self._parties

    def __len__(self):
        return len(self._parties)
