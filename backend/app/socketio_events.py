from flask import request
from flask_socketio import join_room, leave_room, emit
from app import parties
from app.services.games.parties import party_room
from typing import Dict, Any


# socket id -> {'party_code', 'session_id'}
_sid_to_ctx: Dict[str, Dict[str, Any]] = {}


def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _context(data):
    """Resolve the engine and session identity for an incoming event."""
    data = data or {}
    ctx = _sid_to_ctx.get(_get_sid(), {})
    party_code = (data.get('party_code') or ctx.get('party_code') or '').upper()
    session_id = data.get('session_id') or ctx.get('session_id') or _get_sid()
    return parties.get(party_code), party_code, session_id


def _reply(engine, result):
    """Send the result back as the ack and tell the room about successful moves."""
    payload = result.to_dict()
    emit('action_result', payload)
    if result.success:
        # Phase changes go out as 'state_update' from the engine's own events
        emit('party_activity', {'party_code': engine.party_code, 'message': result.message},
             to=party_room(engine.party_code))
    return payload


def _missing_party(party_code):
    message = f'Party {party_code} not found' if party_code else 'party_code is required'
    emit('error', {'message': message})
    return {'success': False, 'message': message, 'error': 'not_found'}


def _seat(party_code, session_id):
    join_room(party_room(party_code))
    _sid_to_ctx[_get_sid()] = {'party_code': party_code, 'session_id': session_id}


def handle_connect():
    emit('connected', {'message': 'Connected to /ws'})


def handle_disconnect(*args):
    # Players keep their seat; a reconnect with the same session_id resumes it
    _sid_to_ctx.pop(_get_sid(), None)


def handle_join_party(data):
    engine, party_code, session_id = _context(data)
    if engine is None:
        return _missing_party(party_code)
    player = engine.lookup(session_id)
    if player is not None and player.name == (data or {}).get('name'):
        # Same seat reconnecting, not a second join
        _seat(party_code, session_id)
        payload = {'success': True, 'message': f'{player.name} rejoined party {party_code}',
                   'player': player.to_dict()}
        emit('action_result', payload)
        return payload
    result = engine.join((data or {}).get('name'), session_id)
    if result.success:
        _seat(party_code, session_id)
    return _reply(engine, result)


def handle_leave_party(data):
    _, party_code, _ = _context(data)
    if not party_code:
        emit('error', {'message': 'party_code is required'})
        return
    room = party_room(party_code)
    leave_room(room)
    _sid_to_ctx.pop(_get_sid(), None)
    emit('left', {'room': room})


def handle_play_card(data):
    engine, party_code, session_id = _context(data)
    if engine is None:
        return _missing_party(party_code)
    return _reply(engine, engine.submit_card(session_id, (data or {}).get('card_id')))


def handle_judge_select_card(data):
    engine, party_code, session_id = _context(data)
    if engine is None:
        return _missing_party(party_code)
    return _reply(engine, engine.judge_pick(session_id, (data or {}).get('card_id')))


def handle_end_round(data):
    engine, party_code, _ = _context(data)
    if engine is None:
        return _missing_party(party_code)
    return _reply(engine, engine.end_round())


def handle_shuffle_card(data):
    engine, party_code, session_id = _context(data)
    if engine is None:
        return _missing_party(party_code)
    data = data or {}
    return _reply(engine, engine.reorder_hand(session_id, data.get('from_index'), data.get('to_index')))


def handle_round_state(data):
    engine, party_code, session_id = _context(data)
    if engine is None:
        return _missing_party(party_code)
    view = engine.compute_view_for_player(session_id)
    if view is None:
        emit('error', {'message': 'You are not a player in this party'})
        return {'success': False, 'message': 'You are not a player in this party', 'error': 'not_found'}
    emit('round_state', view)
    return view


def handle_ping(data):
    emit('pong', data or {})


def register_socketio_handlers(testing: bool = False) -> None:
    """Register Socket.IO event handlers.

    Always register on namespace '/ws'. When testing is True, also mirror
    handlers on the default namespace '/' to accommodate the test harness.
    """
    from app import socketio

    handlers = {
        'connect': handle_connect,
        'disconnect': handle_disconnect,
        'join_party': handle_join_party,
        'leave_party': handle_leave_party,
        'play_card': handle_play_card,
        'judge_select_card': handle_judge_select_card,
        'end_round': handle_end_round,
        'shuffle_card': handle_shuffle_card,
        'round_state': handle_round_state,
        'ping': handle_ping,
    }
    namespaces = ['/ws', '/'] if testing else ['/ws']
    for namespace in namespaces:
        for event, handler in handlers.items():
            socketio.on_event(event, handler, namespace=namespace)
