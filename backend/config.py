import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    # Seconds players get to submit before the judge is forced to pick
    ROUND_LENGTH_SEC = int(os.environ.get('ROUND_LENGTH_SEC', '60'))
    # Response cards dealt to each player on join
    HAND_SIZE = int(os.environ.get('HAND_SIZE', '10'))
    # A round needs a judge plus at least two submitters
    MIN_PLAYERS = int(os.environ.get('MIN_PLAYERS', '3'))
    PARTY_CODE_LENGTH = int(os.environ.get('PARTY_CODE_LENGTH', '5'))
    # Optional: heartbeat interval for round timer logs (sec). 0 disables.
    TIMER_HEARTBEAT_SEC = int(os.environ.get('TIMER_HEARTBEAT_SEC', '0'))
    # Optional: JSON card deck to use instead of the bundled one
    CARD_DECK_PATH = os.environ.get('CARD_DECK_PATH') or None
    CORS_ORIGINS = [
        o.strip() for o in os.environ.get(
            'CORS_ORIGINS', 'http://localhost:5173,http://127.0.0.1:5173'
        ).split(',') if o.strip()
    ]
