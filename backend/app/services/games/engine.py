"""In-memory engine for one party.

The transport (HTTP routes, socket handlers) calls the public operations and
gets an :class:`ActionResult` back. Phase changes are also pushed to
``engine.events`` subscribers, including the ones caused by the round timer.
"""

import functools
import logging
import math
import random
import threading
import time
from typing import Callable, List, Optional

from app.models import CardKind, Player, Round, RoundPhase, SubmittedCard, WonRound
from .cards import CardSet
from .decks import DeckManager
from .errors import (
    ActionResult, DeckExhausted, GameError, NotFoundError, OwnershipError,
    PreconditionError, ValidationError,
)
from .events import EventChannel, RoundEvent, notifier_adapter
from .players import PlayerRegistry
from .scheduler import RoundTimer
from .scoring import scoreboard

logger = logging.getLogger(__name__)


def reports_result(action):
    """Run an engine action under the game lock and report failures as results."""

    @functools.wraps(action)
    def wrapper(self, *args, **kwargs):
        with self._lock:
            try:
                return action(self, *args, **kwargs)
            except GameError as exc:
                logger.info(f"[rejected] party={self.party_code} action={action.__name__} kind={exc.kind} reason={exc.message}")
                return ActionResult.fail(exc)

    return wrapper


class GameEngine:
    def __init__(
        self,
        party_code: str,
        card_set: CardSet,
        round_length: float = 60,
        hand_size: int = 10,
        min_players: int = 3,
        start_background_task: Optional[Callable] = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.time,
        rng: Optional[random.Random] = None,
        heartbeat_sec: int = 0,
        timers_enabled: bool = True,
        notify: Optional[Callable[[bool, str], None]] = None,
    ):
        self.party_code = party_code
        self.round_length = round_length
        self.min_players = min_players
        self.clock = clock
        self.created_at = clock()
        self.decks = DeckManager(card_set.prompts, card_set.responses, rng=rng)
        self.players = PlayerRegistry(self.decks, hand_size=hand_size, party_code=party_code)
        self.rounds: List[Round] = []
        self.events = EventChannel()
        self.timer = RoundTimer(
            round_length,
            self._on_round_timeout,
            start_background_task=start_background_task,
            sleep=sleep,
            heartbeat_sec=heartbeat_sec,
            enabled=timers_enabled,
            party_code=party_code,
        )
        self._lock = threading.RLock()
        if notify is not None:
            self.events.subscribe(notifier_adapter(notify))

    # ---- queries ----

    @property
    def latest_round(self) -> Optional[Round]:
        return self.rounds[-1] if self.rounds else None

    def lookup(self, session_key: Optional[str]) -> Optional[Player]:
        return self.players.lookup(session_key)

    def scores(self) -> List[dict]:
        return scoreboard(self.players.players())

    def summary(self):
        latest = self.latest_round
        return {
            'party_code': self.party_code,
            'created_at': self.created_at,
            'players': [p.to_dict() for p in self.players.players()],
            'round': latest.to_dict() if latest else None,
            'rounds_played': sum(1 for r in self.rounds if not r.active),
            'decks': {
                'prompts': self.decks.remaining(CardKind.PROMPT),
                'responses': self.decks.remaining(CardKind.RESPONSE),
            },
            'round_length': self.round_length,
        }

    # ---- round lifecycle ----

    def get_or_create_active_round(self) -> Optional[Round]:
        with self._lock:
            latest = self.latest_round
            if latest is not None and latest.active:
                return latest
            player_count = len(self.players)
            if player_count < self.min_players:
                logger.info(f"[round-wait] party={self.party_code} players={player_count} need={self.min_players}")
                return None
            if self.decks.remaining(CardKind.PROMPT) == 0:
                logger.warning(f"[round-wait] party={self.party_code} prompt deck is empty")
                return None

            self.decks.reshuffle(CardKind.PROMPT)
            self.decks.reshuffle(CardKind.RESPONSE)
            round_num = len(self.rounds) + 1
            judge = self.players.by_seq((round_num - 1) % player_count)
            new_round = Round(
                round_num=round_num,
                judge_seq=judge.seq,
                judge_name=judge.name,
                prompt=self.decks.draw_one(CardKind.PROMPT),
                started_at=self.clock(),
            )
            self.rounds.append(new_round)
            logger.info(f"[round-start] party={self.party_code} round={round_num} judge={judge.name} players={player_count}")
            self.timer.schedule(round_num)
            return new_round

    def _on_round_timeout(self, round_num: int) -> None:
        with self._lock:
            latest = self.latest_round
            if (
                latest is None
                or latest.round_num != round_num
                or not latest.active
                or latest.phase != RoundPhase.PLAYERS_SELECTING
            ):
                logger.info(f"[timer-stale] party={self.party_code} round={round_num} nothing to do")
                return
            self._enter_judge_selecting(latest, 'Judge-selection time!')

    def _enter_judge_selecting(self, current: Round, message: str) -> None:
        current.phase = RoundPhase.JUDGE_SELECTING
        self.timer.cancel(current.round_num)
        logger.info(f"[phase] party={self.party_code} round={current.round_num} phase={current.phase.value}")
        self._publish(current, message)

    def _publish(self, current: Round, message: str, success: bool = True) -> None:
        self.events.publish(RoundEvent(
            party_code=self.party_code,
            round_num=current.round_num,
            phase=current.phase.value,
            active=current.active,
            success=success,
            message=message,
        ))

    def _require_player(self, session_key) -> Player:
        player = self.players.lookup(session_key)
        if player is None:
            raise NotFoundError(f'{session_key} is not a player in party {self.party_code}')
        return player

    def _require_active_round(self) -> Round:
        # Actions never open a round; only get_or_create_active_round (or a view) does
        current = self.latest_round
        if current is None or not current.active:
            if len(self.players) < self.min_players:
                raise PreconditionError(f'At least {self.min_players} players are needed before a round can start')
            raise PreconditionError('No round is in progress')
        return current

    # ---- actions ----

    @reports_result
    def join(self, name, session_key) -> ActionResult:
        player = self.players.join(name, session_key)
        return ActionResult.ok(f'{player.name} joined party {self.party_code}', player=player.to_dict())

    @reports_result
    def submit_card(self, session_key, card_id) -> ActionResult:
        player = self._require_player(session_key)
        current = self._require_active_round()
        if current.phase != RoundPhase.PLAYERS_SELECTING:
            raise PreconditionError(f'Cannot play a card while the round is {current.phase.value}')
        if player.seq == current.judge_seq:
            raise PreconditionError(f'{player.name} cannot play a card this round since they are the judge')
        card = player.card_in_hand(card_id)
        if card is None:
            raise OwnershipError(f'{player.name} attempted to play card {card_id} they do not hold')
        if current.submission_by(player.seq) is not None:
            raise PreconditionError(f'{player.name} already played a card this round')

        player.hand = [c for c in player.hand if c.id != card_id]
        current.submissions.append(SubmittedCard(card=card, owner_name=player.name, owner_seq=player.seq))
        dealt = True
        try:
            player.hand = player.hand + [self.decks.draw_one(CardKind.RESPONSE)]
        except DeckExhausted:
            dealt = False
            logger.warning(f"[deal-short] party={self.party_code} player={player.name} hand={len(player.hand)}")

        message = f'{player.name} played their card!'
        if not dealt:
            message += ' No replacement card left to deal.'
        if len(current.submissions) >= len(self.players) - 1:
            self._enter_judge_selecting(current, 'all players have played their cards, going to judge-selecting!')
            message = f'{player.name} was last player to play cards, going to judge-selecting!'
        return ActionResult.ok(message, card=card.to_dict(), replacement_dealt=dealt)

    @reports_result
    def judge_pick(self, session_key, card_id) -> ActionResult:
        player = self._require_player(session_key)
        current = self._require_active_round()
        if player.seq != current.judge_seq:
            raise PreconditionError('You are not the round judge! You cannot choose the winner!')
        if current.phase != RoundPhase.JUDGE_SELECTING:
            raise PreconditionError(f'Cannot choose a winner while the round is {current.phase.value}')
        winning = current.submission(card_id)
        if winning is None:
            raise NotFoundError(f'Attempted to pick winning card {card_id} that was not played!')

        current.phase = RoundPhase.VIEWING_WINNER
        current.winning_card = winning
        current.winner = winning.owner_name
        current.ended_at = self.clock()
        self.players.by_seq(winning.owner_seq).rounds_won.append(
            WonRound(round_num=current.round_num, response=winning.card, prompt=current.prompt)
        )
        message = f'{current.winner} won with card {winning.card.text}'
        logger.info(f"[winner] party={self.party_code} round={current.round_num} winner={current.winner} card={card_id}")
        self._publish(current, message)
        return ActionResult.ok(message, winner=current.winner, winning_card=winning.to_dict())

    @reports_result
    def end_round(self) -> ActionResult:
        current = self.latest_round
        if current is None:
            raise NotFoundError('Cannot end round, since no rounds exist for this game!')
        if not current.active:
            raise PreconditionError(f'Round {current.round_num} has already ended')

        current.active = False
        self.timer.cancel(current.round_num)
        if current.ended_at is None:
            current.ended_at = self.clock()
        # Only bare cards go back; the tagged submissions stay on the round for history
        self.decks.return_cards(CardKind.RESPONSE, [s.card for s in current.submissions])
        self.decks.return_cards(CardKind.PROMPT, [current.prompt])
        message = f'Round {current.round_num} successfully finished'
        logger.info(
            f"[round-end] party={self.party_code} round={current.round_num} returned={len(current.submissions)} "
            f"responses_left={self.decks.remaining(CardKind.RESPONSE)}"
        )
        self._publish(current, message)
        return ActionResult.ok(message, round_num=current.round_num)

    @reports_result
    def reorder_hand(self, session_key, from_index, to_index) -> ActionResult:
        player = self._require_player(session_key)
        size = len(player.hand)
        for index in (from_index, to_index):
            if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index < size:
                raise ValidationError(f'Card index {index!r} is out of range for a hand of {size}')
        new_order = list(player.hand)
        moved = new_order.pop(from_index)
        new_order.insert(to_index, moved)
        player.hand = new_order
        return ActionResult.ok(f'shuffled {from_index} <=> {to_index} for {player.name}')

    # ---- per-player projection ----

    def compute_view_for_player(self, session_key) -> Optional[dict]:
        """Round state as seen by one player.

        Creates the next round when none is active, so reading the view can
        advance the game.
        """
        with self._lock:
            player = self.players.lookup(session_key)
            if player is None:
                return None
            view = {
                'party_code': self.party_code,
                'name': player.name,
                'seq': player.seq,
                'cards': [c.to_dict() for c in player.hand],
                'players': [p.to_dict() for p in self.players.players()],
                'scores': self.scores(),
            }
            current = self.get_or_create_active_round()
            if current is None:
                view.update({
                    'round_state': 'lobby',
                    'phase': None,
                    'round_role': None,
                    'round_judge': None,
                    'round_num': None,
                    'prompt': None,
                    'player_choice': None,
                    'submissions': [],
                    'submission_count': 0,
                    'winning_card': None,
                    'winner': None,
                    'time_left': 0,
                })
                return view

            role = 'judge' if player.seq == current.judge_seq else 'player'
            choice = current.submission_by(player.seq)
            time_left = max(0, math.floor(self.round_length - (self.clock() - current.started_at)))
            if current.phase in (RoundPhase.JUDGE_SELECTING, RoundPhase.VIEWING_WINNER):
                time_left = 0
                round_state = current.phase.value
            elif role == 'judge':
                round_state = 'judge-waiting'
            elif choice is not None:
                round_state = 'player-waiting'
            else:
                round_state = 'player-selecting'

            # Submissions stay face down until everyone has played; owners show once resolved
            resolved = current.phase == RoundPhase.VIEWING_WINNER
            if current.phase == RoundPhase.PLAYERS_SELECTING:
                submissions = []
            else:
                submissions = [s.to_dict(include_owner=resolved) for s in current.submissions]

            view.update({
                'round_state': round_state,
                'phase': current.phase.value,
                'round_role': role,
                'round_judge': current.judge_name,
                'round_num': current.round_num,
                'prompt': current.prompt.to_dict(),
                'player_choice': choice.card.to_dict() if choice else None,
                'submissions': submissions,
                'submission_count': len(current.submissions),
                'winning_card': current.winning_card.to_dict() if current.winning_card else None,
                'winner': current.winner,
                'time_left': time_left,
            })
            return view
