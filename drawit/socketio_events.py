from flask_socketio import emit
from flask import current_app, request
from drawit import socketio, get_directory
from drawit.errors import GameError, ValidationError
from drawit.models import to_iso, utc_now
from typing import Dict, Any, Optional

NAMESPACE = '/ws'


# ---- broadcast helpers (also used by the HTTP routes) ----

def broadcast_game_updated(game, skip_sid: Optional[str] = None) -> None:
    """Push the serialized game to every connection, optionally skipping one sid."""
    if game is None:
        return
    socketio.emit('gameUpdated', {'game': game.to_dict()}, namespace=NAMESPACE, skip_sid=skip_sid)


def broadcast_game_ended(payload: Optional[Dict[str, Any]]) -> None:
    socketio.emit('gameEnded', {'game': payload}, namespace=NAMESPACE)


# ---- per-connection sessions ----

def _sessions() -> Dict[str, Dict[str, Any]]:
    return current_app.extensions.setdefault('socket_sessions', {})

def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore

def _current_session() -> Dict[str, Any]:
    return _sessions().get(_get_sid()) or {}

def _emit_error(exc: GameError) -> None:
    current_app.logger.info(f"[game-error] sid={_get_sid()} {type(exc).__name__}: {exc}")
    emit('gameError', {'error': str(exc)})


def _payload(data) -> Dict[str, Any]:
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError('Invalid payload')
    return data


# ---- handlers ----

def handle_connect(auth=None):
    sid = _get_sid()
    _sessions()[sid] = {
        'sid': sid,
        'gameId': None,
        'playerId': None,
        'connectedAt': to_iso(utc_now()),
    }
    current_app.logger.info(f"[connect] sid={sid}")
    emit('connected', {'sid': sid})


def handle_disconnect(reason=None):
    # Players stay in the game until explicitly removed
    session = _sessions().pop(_get_sid(), None)
    current_app.logger.info(
        f"[disconnect] sid={_get_sid()} player={(session or {}).get('playerId')} reason={reason}"
    )


def handle_create_game(data=None):
    try:
        data = _payload(data)
        game = get_directory().create_game(data.get('name'), data.get('options') or {})
    except GameError as exc:
        _emit_error(exc)
        return
    current_app.logger.info(f"[create] game={game.id} name={game.name!r} sid={_get_sid()}")
    emit('gameCreated', {'success': True, 'game': game.to_dict()})
    broadcast_game_updated(game, skip_sid=_get_sid())


def handle_join_game(data=None):
    directory = get_directory()
    try:
        data = _payload(data)
        game = directory.require_current_game()
        player = directory.add_player(
            data.get('playerName'),
            player_id=data.get('playerId'),
            team_id=data.get('teamId'),
        )
    except GameError as exc:
        _emit_error(exc)
        return
    session = _sessions().get(_get_sid())
    if session is not None:
        session['gameId'] = game.id
        session['playerId'] = player.id
    current_app.logger.info(f"[join] game={game.id} player={player.id} team={player.team_id}")
    emit('playerJoined', {'success': True, 'player': player.to_dict()})
    broadcast_game_updated(game, skip_sid=_get_sid())


def handle_create_team(data=None):
    directory = get_directory()
    try:
        data = _payload(data)
        directory.add_team(data.get('name'), team_id=data.get('teamId'), color=data.get('color'))
    except GameError as exc:
        _emit_error(exc)
        return
    broadcast_game_updated(directory.get_current_game())


def handle_player_ready(data=None):
    directory = get_directory()
    try:
        data = _payload(data)
        player_id = data.get('playerId') or _current_session().get('playerId')
        if not player_id:
            raise ValidationError('Join the game before marking ready')
        with directory.lock:
            game = directory.require_current_game()
            game.set_player_ready(player_id, bool(data.get('ready', True)))
    except GameError as exc:
        _emit_error(exc)
        return
    broadcast_game_updated(game)


def handle_drawing_data(data=None):
    # Stroke payloads are relayed untouched
    session = _current_session()
    if not session.get('gameId'):
        return
    socketio.emit(
        'drawingUpdate',
        {'playerId': session.get('playerId'), 'drawingData': data},
        namespace=NAMESPACE,
        skip_sid=_get_sid(),
    )


def _game_control(action: str):
    def handler(data=None):
        directory = get_directory()
        try:
            with directory.lock:
                game = directory.require_current_game()
                getattr(game, action)()
        except GameError as exc:
            _emit_error(exc)
            return
        current_app.logger.info(
            f"[{action}] game={game.id} state={game.state.value} round={game.current_round}"
        )
        broadcast_game_updated(game)
    handler.__name__ = f'handle_{action}'
    return handler


handle_start_game = _game_control('start_game')
handle_pause_game = _game_control('pause_game')
handle_resume_game = _game_control('resume_game')
handle_next_round = _game_control('next_round')


def handle_end_game(data=None):
    try:
        ended = get_directory().end_current_game()
    except GameError as exc:
        _emit_error(exc)
        return
    broadcast_game_ended(ended.to_dict() if ended else None)


def register_socketio_handlers() -> None:
    """Register Socket.IO event handlers on the '/ws' namespace."""
    socketio.on_event('connect', handle_connect, namespace=NAMESPACE)
    socketio.on_event('disconnect', handle_disconnect, namespace=NAMESPACE)
    socketio.on_event('createGame', handle_create_game, namespace=NAMESPACE)
    socketio.on_event('joinGame', handle_join_game, namespace=NAMESPACE)
    socketio.on_event('createTeam', handle_create_team, namespace=NAMESPACE)
    socketio.on_event('playerReady', handle_player_ready, namespace=NAMESPACE)
    socketio.on_event('drawingData', handle_drawing_data, namespace=NAMESPACE)
    socketio.on_event('startGame', handle_start_game, namespace=NAMESPACE)
    socketio.on_event('pauseGame', handle_pause_game, namespace=NAMESPACE)
    socketio.on_event('resumeGame', handle_resume_game, namespace=NAMESPACE)
    socketio.on_event('nextRound', handle_next_round, namespace=NAMESPACE)
    socketio.on_event('endGame', handle_end_game, namespace=NAMESPACE)
