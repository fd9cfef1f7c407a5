"""Prompt and response card pools for one game."""

import random
from typing import Dict, Iterable, List, Optional

from app.models import Card, CardKind
from .errors import DeckExhausted, ValidationError


class Deck:
    """Ordered pool of undrawn cards of a single kind."""

    def __init__(self, kind: CardKind, cards: Iterable[Card] = ()):
        self.kind = kind
        self._cards: List[Card] = []
        self.return_cards(cards)

    def __len__(self):
        return len(self._cards)

    def card_ids(self) -> List[str]:
        return [c.id for c in self._cards]

    def shuffle(self, rng: random.Random) -> None:
        rng.shuffle(self._cards)

    def draw(self, count: int = 1) -> List[Card]:
        # All or nothing, so a short deck never leaves a half-dealt hand
        if count > len(self._cards):
            raise DeckExhausted(self.kind.value, wanted=count, remaining=len(self._cards))
        drawn, self._cards = self._cards[:count], self._cards[count:]
        return drawn

    def return_cards(self, cards: Iterable[Card]) -> None:
        cards = list(cards)
        for card in cards:
            if card.kind != self.kind:
                raise ValidationError(f'Card {card.id} is a {card.kind.value} card, not {self.kind.value}')
        self._cards.extend(cards)


class DeckManager:
    def __init__(self, prompts: Iterable[Card], responses: Iterable[Card], rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()
        self._decks: Dict[CardKind, Deck] = {
            CardKind.PROMPT: Deck(CardKind.PROMPT, prompts),
            CardKind.RESPONSE: Deck(CardKind.RESPONSE, responses),
        }
        self.reshuffle(CardKind.PROMPT)
        self.reshuffle(CardKind.RESPONSE)

    def remaining(self, kind: CardKind) -> int:
        return len(self._decks[kind])

    def card_ids(self, kind: CardKind) -> List[str]:
        return self._decks[kind].card_ids()

    def draw_one(self, kind: CardKind) -> Card:
        return self._decks[kind].draw(1)[0]

    def draw(self, kind: CardKind, count: int) -> List[Card]:
        return self._decks[kind].draw(count)

    def return_cards(self, kind: CardKind, cards: Iterable[Card]) -> None:
        self._decks[kind].return_cards(cards)

    def reshuffle(self, kind: CardKind) -> None:
        self._decks[kind].shuffle(self.rng)
