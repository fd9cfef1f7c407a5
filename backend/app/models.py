from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional
import string
import random


class CardKind(str, Enum):
    PROMPT = 'prompt'
    RESPONSE = 'response'


class RoundPhase(str, Enum):
    PLAYERS_SELECTING = 'players-selecting'
    JUDGE_SELECTING = 'judge-selecting'
    VIEWING_WINNER = 'viewing-winner'


@dataclass(frozen=True)
class Card:
    id: str
    text: str
    kind: CardKind

    def to_dict(self):
        return {
            'id': self.id,
            'text': self.text,
            'kind': self.kind.value,
        }


@dataclass(frozen=True)
class SubmittedCard:
    """A response card on the table, tagged with who played it."""
    card: Card
    owner_name: str
    owner_seq: int

    @property
    def id(self) -> str:
        return self.card.id

    def to_dict(self, include_owner: bool = True):
        data = self.card.to_dict()
        if include_owner:
            data['owner'] = {'name': self.owner_name, 'seq': self.owner_seq}
        return data


@dataclass(frozen=True)
class WonRound:
    round_num: int
    response: Card
    prompt: Card

    def to_dict(self):
        return {
            'round_num': self.round_num,
            'response': self.response.to_dict(),
            'prompt': self.prompt.to_dict(),
        }


@dataclass
class Player:
    session_key: str
    name: str
    seq: int
    hand: List[Card] = field(default_factory=list)
    rounds_won: List[WonRound] = field(default_factory=list)

    @property
    def score(self) -> int:
        return len(self.rounds_won)

    def card_in_hand(self, card_id: str) -> Optional[Card]:
        return next((c for c in self.hand if c.id == card_id), None)

    def to_dict(self):
        # session_key stays private to the transport
        return {
            'name': self.name,
            'seq': self.seq,
            'score': self.score,
            'hand_size': len(self.hand),
            'rounds_won': [w.to_dict() for w in self.rounds_won],
        }


@dataclass
class Round:
    round_num: int
    judge_seq: int
    judge_name: str
    prompt: Card
    started_at: float
    phase: RoundPhase = RoundPhase.PLAYERS_SELECTING
    active: bool = True
    ended_at: Optional[float] = None
    submissions: List[SubmittedCard] = field(default_factory=list)
    winning_card: Optional[SubmittedCard] = None
    winner: Optional[str] = None

    def submission_by(self, seq: int) -> Optional[SubmittedCard]:
        return next((s for s in self.submissions if s.owner_seq == seq), None)

    def submission(self, card_id: str) -> Optional[SubmittedCard]:
        return next((s for s in self.submissions if s.id == card_id), None)

    def to_dict(self):
        resolved = self.phase == RoundPhase.VIEWING_WINNER
        return {
            'round_num': self.round_num,
            'phase': self.phase.value,
            'active': self.active,
            'judge': self.judge_name,
            'prompt': self.prompt.to_dict(),
            'started_at': self.started_at,
            'ended_at': self.ended_at,
            'submission_count': len(self.submissions),
            'winning_card': self.winning_card.to_dict() if self.winning_card else None,
            'winner': self.winner if resolved else None,
        }


def generate_party_code(length=5, taken=()):
    """Generate a unique, short party code."""
    while True:
        code = ''.join(random.choices(string.ascii_uppercase + string.digits, k=length))
        if code not in taken:
            return code
