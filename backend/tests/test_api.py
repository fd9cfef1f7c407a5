from app import parties


def _create(client, **body):
    res = client.post('/api/parties', json=body)
    assert res.status_code == 201
    return res.get_json()['party_code']


def _join_three(client, code):
    for session, name in [('s0', 'Yusuf'), ('s1', 'Salman'), ('s2', 'Reza')]:
        res = client.post(f'/api/parties/{code}/join', json={'name': name, 'session_id': session})
        assert res.status_code == 201


def _state(client, code, session):
    res = client.get(f'/api/parties/{code}/state', query_string={'session_id': session})
    assert res.status_code == 200
    return res.get_json()


def test_index_and_health(client):
    assert client.get('/').status_code == 200
    assert client.get('/health').get_json()['status'] == 'ok'


def test_create_party(client):
    code = _create(client)
    assert len(code) == 5
    assert code == code.upper()
    assert code in parties


def test_create_party_with_requested_code(client):
    assert _create(client, party_code='abcde') == 'ABCDE'
    res = client.post('/api/parties', json={'party_code': 'ABCDE'})
    assert res.status_code == 409


def test_unknown_party_is_404(client):
    res = client.post('/api/parties/ZZZZZ/join', json={'name': 'A', 'session_id': 'a'})
    assert res.status_code == 404
    assert 'not found' in res.get_json()['error']


def test_join_and_state(client):
    code = _create(client)
    res = client.post(f'/api/parties/{code}/join', json={'name': 'Alice', 'session_id': 'alice'})
    assert res.status_code == 201
    assert res.get_json()['player']['seq'] == 0

    summary = client.get(f'/api/parties/{code}/state').get_json()
    assert summary['party_code'] == code
    assert any(p['name'] == 'Alice' for p in summary['players'])
    assert summary['round'] is None

    view = _state(client, code, 'alice')
    assert view['round_state'] == 'lobby'
    assert len(view['cards']) == 10

    missing = client.get(f'/api/parties/{code}/state', query_string={'session_id': 'bob'})
    assert missing.status_code == 404


def test_join_errors(client):
    code = _create(client)
    res = client.post(f'/api/parties/{code}/join', json={'session_id': 'x'})
    assert res.status_code == 400
    client.post(f'/api/parties/{code}/join', json={'name': 'Alice', 'session_id': 'alice'})
    dup = client.post(f'/api/parties/{code}/join', json={'name': 'Eve', 'session_id': 'alice'})
    assert dup.status_code == 409
    assert dup.get_json()['kind'] == 'conflict'


def test_round_flow_over_http(client):
    code = _create(client)
    _join_three(client, code)

    judge = _state(client, code, 's0')
    assert judge['round_num'] == 1
    assert judge['round_role'] == 'judge'

    # judge may not play
    res = client.post(f'/api/parties/{code}/play', json={'session_id': 's0', 'card_id': judge['cards'][0]['id']})
    assert res.status_code == 409

    # playing someone else's card
    other = _state(client, code, 's2')['cards'][0]['id']
    res = client.post(f'/api/parties/{code}/play', json={'session_id': 's1', 'card_id': other})
    assert res.status_code == 403

    salman_card = _state(client, code, 's1')['cards'][0]['id']
    res = client.post(f'/api/parties/{code}/play', json={'session_id': 's1', 'card_id': salman_card})
    assert res.status_code == 200
    assert res.get_json()['success'] is True
    res = client.post(f'/api/parties/{code}/play', json={'session_id': 's2', 'card_id': other})
    assert res.status_code == 200

    judging = _state(client, code, 's0')
    assert judging['round_state'] == 'judge-selecting'
    assert {s['id'] for s in judging['submissions']} == {salman_card, other}

    res = client.post(f'/api/parties/{code}/judge', json={'session_id': 's0', 'card_id': 'nope'})
    assert res.status_code == 404
    res = client.post(f'/api/parties/{code}/judge', json={'session_id': 's0', 'card_id': salman_card})
    assert res.status_code == 200
    assert res.get_json()['winner'] == 'Salman'

    scores = client.get(f'/api/parties/{code}/scores').get_json()['scores']
    assert scores[0] == {'name': 'Salman', 'seq': 1, 'score': 1}

    assert client.post(f'/api/parties/{code}/end-round').status_code == 200
    assert client.post(f'/api/parties/{code}/end-round').status_code == 409

    nxt = _state(client, code, 's1')
    assert nxt['round_num'] == 2
    assert nxt['round_role'] == 'judge'


def test_play_requires_card_id(client):
    code = _create(client)
    _join_three(client, code)
    res = client.post(f'/api/parties/{code}/play', json={'session_id': 's1'})
    assert res.status_code == 400


def test_end_round_before_any_round(client):
    code = _create(client)
    res = client.post(f'/api/parties/{code}/end-round')
    assert res.status_code == 404


def test_reorder_over_http(client):
    code = _create(client)
    client.post(f'/api/parties/{code}/join', json={'name': 'Alice', 'session_id': 'alice'})
    before = [c['id'] for c in _state(client, code, 'alice')['cards']]
    res = client.post(f'/api/parties/{code}/reorder', json={'session_id': 'alice', 'from_index': 9, 'to_index': 0})
    assert res.status_code == 200
    after = [c['id'] for c in _state(client, code, 'alice')['cards']]
    assert after == [before[9]] + before[:9]

    res = client.post(f'/api/parties/{code}/reorder', json={'session_id': 'alice', 'from_index': 'x', 'to_index': 0})
    assert res.status_code == 400
    res = client.post(f'/api/parties/{code}/reorder', json={'session_id': 'alice', 'from_index': 0, 'to_index': 42})
    assert res.status_code == 400
