"""Card content provider.

Reads the fixed prompt and response sets used to seed every new game. The
bundled deck lives in ``app/data/cards.json``; ``CARD_DECK_PATH`` can point at
another file with the same shape.
"""

import json
import os
from dataclasses import dataclass
from typing import Optional, Tuple

from app.models import Card, CardKind
from .errors import ValidationError

DEFAULT_CARD_DECK_PATH = os.path.join(os.path.dirname(__file__), '..', '..', 'data', 'cards.json')


@dataclass(frozen=True)
class CardSet:
    prompts: Tuple[Card, ...]
    responses: Tuple[Card, ...]


def _parse(entries, kind: CardKind):
    cards = []
    for entry in entries or []:
        card_id = str(entry.get('id') or '').strip()
        text = str(entry.get('text') or '').strip()
        if not card_id or not text:
            raise ValidationError(f'{kind.value} card entry needs both id and text: {entry!r}')
        cards.append(Card(id=card_id, text=text, kind=kind))
    return tuple(cards)


def card_set_from_dict(data) -> CardSet:
    prompts = _parse(data.get('prompts'), CardKind.PROMPT)
    responses = _parse(data.get('responses'), CardKind.RESPONSE)
    ids = [c.id for c in prompts + responses]
    if len(ids) != len(set(ids)):
        raise ValidationError('Card ids must be unique across prompts and responses')
    return CardSet(prompts=prompts, responses=responses)


def load_card_set(path: Optional[str] = None) -> CardSet:
    with open(path or DEFAULT_CARD_DECK_PATH, encoding='utf-8') as fh:
        return card_set_from_dict(json.load(fh))
