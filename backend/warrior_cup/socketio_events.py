from typing import Dict

from flask import current_app, request
from flask_socketio import emit

from warrior_cup import socketio
from warrior_cup.models import PLAYER
from warrior_cup.services.tournament.store import (
    authorize, clean_scores, load_tournament, save_match_scores, view_for_role,
)
from warrior_cup.services.tournament.sync import SyncSession

NAMESPACE = '/ws'

# One live view per connected socket
_sessions: Dict[str, SyncSession] = {}
_roles: Dict[str, str] = {}


def _get_sid() -> str:
    # request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _session_for(sid: str, namespace: str) -> SyncSession:
    session = _sessions.get(sid)
    if session is None:
        def push_tournament(value):
            payload = view_for_role(value, _roles.get(sid, PLAYER))
            socketio.emit('tournament_update', payload, to=sid, namespace=namespace)

        def push_scores(match_id, value):
            socketio.emit('scores_update', {'match_id': match_id, 'scores': value}, to=sid, namespace=namespace)

        session = SyncSession(push_tournament, push_scores)
        _sessions[sid] = session
    return session


def handle_connect():
    emit('connected', {'message': 'Connected to /ws'})


def handle_disconnect(*args):
    sid = _get_sid()
    session = _sessions.pop(sid, None)
    _roles.pop(sid, None)
    if session:
        session.close()


def handle_open_tournament(data):
    tournament_id = str((data or {}).get('tournament_id') or '').upper().strip()
    passcode = (data or {}).get('passcode')
    if not tournament_id or not passcode:
        emit('error', {'message': 'tournament_id and passcode are required'})
        return
    tournament = load_tournament(tournament_id)
    if not tournament:
        emit('error', {'message': 'Tournament not found.'})
        return
    role = authorize(tournament, passcode)
    if role is None:
        emit('error', {'message': 'Wrong passcode.'})
        return
    sid = _get_sid()
    _roles[sid] = role
    emit('opened', {'tournament_id': tournament_id, 'role': role})
    _session_for(sid, request.namespace).open_tournament(tournament_id)
    current_app.logger.info(f"[sync-open] sid={sid} id={tournament_id} role={role}")


def handle_open_match(data):
    match_id = (data or {}).get('match_id')
    session = _sessions.get(_get_sid())
    if not match_id:
        emit('error', {'message': 'match_id is required'})
        return
    if session is None or session.tournament_id is None:
        emit('error', {'message': 'Open a tournament first'})
        return
    session.open_match(match_id)
    emit('match_opened', {'match_id': match_id})


def handle_close_match(data=None):
    session = _sessions.get(_get_sid())
    if session:
        session.close_match()
    emit('match_closed', {})


def handle_close_tournament(data=None):
    sid = _get_sid()
    session = _sessions.pop(sid, None)
    _roles.pop(sid, None)
    if session:
        session.close()
    emit('closed', {})


def handle_save_scores(data):
    session = _sessions.get(_get_sid())
    if session is None or session.tournament_id is None:
        emit('error', {'message': 'Open a tournament first'})
        return
    match_id = (data or {}).get('match_id') or session.match_id
    tournament = load_tournament(session.tournament_id)
    match = next((m for m in (tournament or {}).get('matches', []) if m['id'] == match_id), None)
    if not match:
        emit('error', {'message': 'Match not found'})
        return
    try:
        scores = clean_scores((data or {}).get('scores'), match['holes'])
    except ValueError as exc:
        emit('error', {'message': str(exc)})
        return
    if not save_match_scores(session.tournament_id, match_id, scores):
        emit('error', {'message': 'Scores could not be saved'})


def handle_ping(data):
    emit('pong', data or {})


def register_socketio_handlers(testing: bool = False) -> None:
    """Register Socket.IO event handlers.

    Always register on namespace '/ws'. When testing is True, also mirror
    handlers on the default namespace '/' to accommodate the test harness.
    """
    namespaces = [NAMESPACE, '/'] if testing else [NAMESPACE]
    for namespace in namespaces:
        socketio.on_event('connect', handle_connect, namespace=namespace)
        socketio.on_event('disconnect', handle_disconnect, namespace=namespace)
        socketio.on_event('open_tournament', handle_open_tournament, namespace=namespace)
        socketio.on_event('open_match', handle_open_match, namespace=namespace)
        socketio.on_event('close_match', handle_close_match, namespace=namespace)
        socketio.on_event('close_tournament', handle_close_tournament, namespace=namespace)
        socketio.on_event('save_scores', handle_save_scores, namespace=namespace)
        socketio.on_event('ping', handle_ping, namespace=namespace)
