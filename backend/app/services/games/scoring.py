from typing import Iterable, List

from app.models import Player


def scoreboard(players: Iterable[Player]) -> List[dict]:
    """Rank players by rounds won.

    One point per won round; ties keep join order.
    """
    ranked = sorted(players, key=lambda p: (-p.score, p.seq))
    return [
        {'name': p.name, 'seq': p.seq, 'score': p.score}
        for p in ranked
    ]
