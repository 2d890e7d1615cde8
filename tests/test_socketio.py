def _names(events):
    return [e['name'] for e in events]


def _payload(events, name):
    for e in events:
        if e['name'] == name:
            return e['args'][0]
    return None


def test_socket_connect(sio_client, flask_app):
    # Ensure we are connected to /ws
    if not sio_client.is_connected('/ws'):
        sio_client.connect(namespace='/ws')
    assert sio_client.is_connected('/ws')
    received = sio_client.get_received('/ws')
    assert 'connected' in _names(received)
    assert len(flask_app.extensions['socket_sessions']) == 1


def test_create_game_confirms_and_broadcasts(sio_client, make_sio_client):
    other = make_sio_client()
    sio_client.get_received('/ws')
    other.get_received('/ws')

    sio_client.emit('createGame', {'name': 'Pictionary Night', 'options': {}}, namespace='/ws')

    mine = sio_client.get_received('/ws')
    theirs = other.get_received('/ws')
    created = _payload(mine, 'gameCreated')
    assert created['success'] is True
    assert created['game']['name'] == 'Pictionary Night'
    assert 'gameUpdated' not in _names(mine)
    assert _payload(theirs, 'gameUpdated')['game']['name'] == 'Pictionary Night'


def test_errors_go_to_originator_only(sio_client, make_sio_client):
    other = make_sio_client()
    sio_client.emit('createGame', {'name': 'First Game'}, namespace='/ws')
    sio_client.get_received('/ws')
    other.get_received('/ws')

    other.emit('createGame', {'name': 'Second Game'}, namespace='/ws')
    theirs = other.get_received('/ws')
    assert 'already in progress' in _payload(theirs, 'gameError')['error']
    assert sio_client.get_received('/ws') == []


def test_join_game(sio_client, make_sio_client):
    other = make_sio_client()
    sio_client.emit('joinGame', {'playerId': 'p1', 'playerName': 'Alice'}, namespace='/ws')
    assert _payload(sio_client.get_received('/ws'), 'gameError') == {'error': 'No active game'}

    sio_client.emit('createGame', {'name': 'Join Test'}, namespace='/ws')
    sio_client.emit('createTeam', {'teamId': 'red', 'name': 'Red Team'}, namespace='/ws')
    sio_client.get_received('/ws')
    other.get_received('/ws')

    other.emit('joinGame', {'playerId': 'p1', 'playerName': 'Alice', 'teamId': 'red'}, namespace='/ws')
    theirs = other.get_received('/ws')
    joined = _payload(theirs, 'playerJoined')
    assert joined['success'] is True
    assert joined['player']['teamId'] == 'red'
    assert 'gameUpdated' not in _names(theirs)

    update = _payload(sio_client.get_received('/ws'), 'gameUpdated')
    assert [p['id'] for p in update['game']['players']] == ['p1']


def test_drawing_data_is_relayed_to_others(sio_client, make_sio_client):
    drawer = make_sio_client()
    watcher = make_sio_client()
    sio_client.emit('createGame', {'name': 'Draw Test'}, namespace='/ws')
    drawer.emit('joinGame', {'playerId': 'p1', 'playerName': 'Alice'}, namespace='/ws')
    for c in (sio_client, drawer, watcher):
        c.get_received('/ws')

    stroke = {'x': 10, 'y': 20, 'color': '#000000', 'brushSize': 4, 'action': 'draw'}
    drawer.emit('drawingData', stroke, namespace='/ws')

    assert drawer.get_received('/ws') == []
    for c in (sio_client, watcher):
        update = _payload(c.get_received('/ws'), 'drawingUpdate')
        assert update == {'playerId': 'p1', 'drawingData': stroke}


def test_drawing_before_join_is_dropped(sio_client, make_sio_client):
    other = make_sio_client()
    sio_client.emit('createGame', {'name': 'Draw Test'}, namespace='/ws')
    other.get_received('/ws')
    sio_client.get_received('/ws')

    sio_client.emit('drawingData', {'x': 1, 'y': 1}, namespace='/ws')
    assert other.get_received('/ws') == []


def test_game_controls_broadcast_to_everyone(sio_client, make_sio_client):
    alice = make_sio_client()
    cara = make_sio_client()
    sio_client.emit('createGame', {'name': 'Control Test', 'options': {'maxRounds': 2}}, namespace='/ws')
    sio_client.emit('createTeam', {'teamId': 'red', 'name': 'Red Team'}, namespace='/ws')
    sio_client.emit('createTeam', {'teamId': 'blue', 'name': 'Blue Team'}, namespace='/ws')
    alice.emit('joinGame', {'playerId': 'a', 'playerName': 'Alice', 'teamId': 'red'}, namespace='/ws')
    cara.emit('joinGame', {'playerId': 'c', 'playerName': 'Cara', 'teamId': 'blue'}, namespace='/ws')

    sio_client.emit('startGame', namespace='/ws')
    assert 'ready' in _payload(sio_client.get_received('/ws'), 'gameError')['error']

    alice.emit('playerReady', {'ready': True}, namespace='/ws')
    cara.emit('playerReady', {'ready': True}, namespace='/ws')
    for c in (sio_client, alice, cara):
        c.get_received('/ws')

    sio_client.emit('startGame', namespace='/ws')
    for c in (sio_client, alice, cara):
        update = _payload(c.get_received('/ws'), 'gameUpdated')
        assert update['game']['gameState'] == 'playing'
        assert update['game']['currentRound'] == 1

    alice.emit('pauseGame', namespace='/ws')
    assert _payload(cara.get_received('/ws'), 'gameUpdated')['game']['gameState'] == 'paused'
    alice.emit('resumeGame', namespace='/ws')
    alice.emit('nextRound', namespace='/ws')
    events = cara.get_received('/ws')
    updates = [e['args'][0]['game'] for e in events if e['name'] == 'gameUpdated']
    assert updates[-1]['currentRound'] == 2

    cara.emit('endGame', namespace='/ws')
    for c in (sio_client, alice, cara):
        ended = _payload(c.get_received('/ws'), 'gameEnded')
        assert ended['game']['gameState'] == 'finished'


def test_start_without_game_reports_error(sio_client):
    sio_client.get_received('/ws')
    sio_client.emit('startGame', namespace='/ws')
    assert _payload(sio_client.get_received('/ws'), 'gameError') == {'error': 'No active game'}


def test_end_game_without_game(sio_client):
    sio_client.get_received('/ws')
    sio_client.emit('endGame', namespace='/ws')
    assert _payload(sio_client.get_received('/ws'), 'gameEnded') == {'game': None}


def test_disconnect_keeps_player_in_game(flask_app, sio_client, make_sio_client, directory):
    player_client = make_sio_client()
    sio_client.emit('createGame', {'name': 'Disconnect Test'}, namespace='/ws')
    player_client.emit('joinGame', {'playerId': 'p1', 'playerName': 'Alice'}, namespace='/ws')
    assert len(flask_app.extensions['socket_sessions']) == 2

    player_client.disconnect(namespace='/ws')

    assert len(flask_app.extensions['socket_sessions']) == 1
    assert directory.get_current_game().get_player('p1') is not None


def test_malformed_payloads_get_game_error(sio_client, make_sio_client):
    other = make_sio_client()
    sio_client.get_received('/ws')
    other.get_received('/ws')

    for event in ('createGame', 'joinGame', 'createTeam', 'playerReady'):
        sio_client.emit(event, 'Pictionary Night', namespace='/ws')
        assert _payload(sio_client.get_received('/ws'), 'gameError') == {'error': 'Invalid payload'}
    assert other.get_received('/ws') == []
