import logging
from typing import Dict, List, Optional

from app.models import CardKind, Player
from .decks import DeckManager
from .errors import ConflictError, DeckExhausted, ValidationError

logger = logging.getLogger(__name__)


class PlayerRegistry:
    """Players of one party, keyed by session key and ordered by join sequence."""

    def __init__(self, decks: DeckManager, hand_size: int = 10, party_code: str = ''):
        self.decks = decks
        self.hand_size = hand_size
        self.party_code = party_code
        self._by_session: Dict[str, Player] = {}
        self._by_seq: List[Player] = []

    def __len__(self):
        return len(self._by_seq)

    def join(self, name: Optional[str], session_key: Optional[str]) -> Player:
        name = (name or '').strip()
        session_key = (session_key or '').strip()
        if not name or not session_key:
            raise ValidationError('Player name and session id are required')
        if session_key in self._by_session:
            raise ConflictError(f'Session is already joined as {self._by_session[session_key].name}')
        remaining = self.decks.remaining(CardKind.RESPONSE)
        if remaining < self.hand_size:
            raise DeckExhausted(CardKind.RESPONSE.value, wanted=self.hand_size, remaining=remaining)

        player = Player(
            session_key=session_key,
            name=name,
            seq=len(self._by_seq),
            hand=self.decks.draw(CardKind.RESPONSE, self.hand_size),
        )
        self._by_session[session_key] = player
        self._by_seq.append(player)
        logger.info(f"[join] party={self.party_code} player={name} seq={player.seq} hand={len(player.hand)}")
        return player

    def lookup(self, session_key: Optional[str]) -> Optional[Player]:
        if not session_key:
            return None
        return self._by_session.get(session_key)

    def by_seq(self, seq: int) -> Player:
        return self._by_seq[seq]

    def players(self) -> List[Player]:
        return list(self._by_seq)
