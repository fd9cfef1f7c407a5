from flask import Blueprint, jsonify, request, current_app, abort
from app import parties


games = Blueprint('games', __name__)


def _party_or_404(party_code):
    engine = parties.get(party_code)
    if engine is None:
        abort(404, description=f'Party {party_code.upper()} not found')
    return engine


def _respond(result, success_status=200):
    if result.success:
        return jsonify(result.to_dict()), success_status
    payload = result.to_dict()
    payload['error'] = result.message
    payload['kind'] = result.error
    return jsonify(payload), result.http_status


def _session_id(data):
    return data.get('session_id') or request.args.get('session_id')


@games.errorhandler(404)
def not_found(exc):
    return jsonify({'error': getattr(exc, 'description', 'Not found')}), 404


@games.route('', methods=['POST'])
@games.route('/', methods=['POST'])
def create_party():
    data = request.get_json(silent=True) or {}
    requested = (data.get('party_code') or '').strip()
    if requested and requested in parties:
        return jsonify({'error': f'Party {requested.upper()} already exists'}), 409
    engine = parties.create(requested or None)
    current_app.logger.info(f"[api-create] party={engine.party_code}")
    return jsonify({
        'message': 'New party created!',
        'party_code': engine.party_code,
    }), 201


@games.route('/<string:party_code>/join', methods=['POST'])
def join_party(party_code):
    engine = _party_or_404(party_code)
    data = request.get_json(silent=True) or {}
    result = engine.join(data.get('name'), _session_id(data))
    return _respond(result, success_status=201)


@games.route('/<string:party_code>/state', methods=['GET'])
def get_party_state(party_code):
    engine = _party_or_404(party_code)
    session_id = request.args.get('session_id')
    if not session_id:
        return jsonify(engine.summary())
    view = engine.compute_view_for_player(session_id)
    if view is None:
        return jsonify({'error': 'You are not a player in this party'}), 404
    return jsonify(view)


@games.route('/<string:party_code>/play', methods=['POST'])
def play_card(party_code):
    engine = _party_or_404(party_code)
    data = request.get_json(silent=True) or {}
    if not data.get('card_id'):
        return jsonify({'error': 'card_id is required'}), 400
    return _respond(engine.submit_card(_session_id(data), data.get('card_id')))


@games.route('/<string:party_code>/judge', methods=['POST'])
def judge_select_card(party_code):
    engine = _party_or_404(party_code)
    data = request.get_json(silent=True) or {}
    if not data.get('card_id'):
        return jsonify({'error': 'card_id is required'}), 400
    return _respond(engine.judge_pick(_session_id(data), data.get('card_id')))


@games.route('/<string:party_code>/end-round', methods=['POST'])
def end_round(party_code):
    engine = _party_or_404(party_code)
    return _respond(engine.end_round())


@games.route('/<string:party_code>/reorder', methods=['POST'])
def reorder_hand(party_code):
    engine = _party_or_404(party_code)
    data = request.get_json(silent=True) or {}
    try:
        src = int(data.get('from_index'))
        dest = int(data.get('to_index'))
    except (TypeError, ValueError):
        return jsonify({'error': 'from_index and to_index must be integers'}), 400
    return _respond(engine.reorder_hand(_session_id(data), src, dest))


@games.route('/<string:party_code>/scores', methods=['GET'])
def get_scores(party_code):
    engine = _party_or_404(party_code)
    return jsonify({'party_code': engine.party_code, 'scores': engine.scores()})
