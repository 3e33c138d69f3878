"""Tournament records kept in the key-value store.

A tournament is one JSON document at ``tournaments/{id}``; scores for each
match live beside it at ``scores/{id}/{match_id}``. Writes replace the
whole document, so concurrent writers simply overwrite each other.
"""
import copy
import random
import string
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional

from flask import current_app

from warrior_cup.models import ADMIN, PLAYER
from warrior_cup.services.kvstore import StoreError, kv_store, scores_path, tournament_path

from .courses import DEFAULT_COURSE_ID, DEFAULT_TEE_NAME, preset_courses
from .formats import TEAM1, TEAM2, empty_pairings

TOURNAMENT_ID_LENGTH = 6
PASSCODE_LENGTH = 4
IMMUTABLE_FIELDS = ('id', 'passcode', 'adminPasscode', 'createdAt')

Scores = Dict[str, List[Optional[int]]]


def generate_code(length: int = TOURNAMENT_ID_LENGTH) -> str:
    """Short uppercase alphanumeric code; not cryptographically secure."""
    return ''.join(random.choices(string.ascii_uppercase + string.digits, k=length))


def generate_tournament_id() -> str:
    while True:
        code = generate_code(TOURNAMENT_ID_LENGTH)
        if kv_store.get(tournament_path(code)) is None:
            return code


def empty_stats() -> dict:
    return {'matchesPlayed': 0, 'matchesWon': 0, 'holesWon': 0, 'skinsWon': 0}


def create_tournament() -> dict:
    """Create and persist a new tournament; the creator holds the admin passcode."""
    tournament_id = generate_tournament_id()
    passcode = generate_code(PASSCODE_LENGTH)
    admin_passcode = generate_code(PASSCODE_LENGTH)
    while admin_passcode == passcode:
        admin_passcode = generate_code(PASSCODE_LENGTH)
    data = {
        'id': tournament_id,
        'name': f"Golf Trip {datetime.now().year}",
        'passcode': passcode,
        'adminPasscode': admin_passcode,
        'courses': preset_courses(),
        'activeCourseId': DEFAULT_COURSE_ID,
        'activeTeeId': DEFAULT_TEE_NAME,
        'teamNames': {TEAM1: 'Team 1', TEAM2: 'Team 2'},
        'players': [],
        'teams': {TEAM1: [], TEAM2: []},
        'matches': [],
        'matchResults': [],
        'createdAt': datetime.now(timezone.utc).isoformat(),
    }
    kv_store.set(tournament_path(tournament_id), data)
    current_app.logger.info(f"[tournament-create] id={tournament_id}")
    return data


def _normalize_match(match: dict) -> dict:
    empty_p, empty_h = empty_pairings(match.get('format'))
    pairings = match.get('pairings')
    hcps = match.get('pairingHcps')
    return {
        **match,
        'pairings': {k: v or [] for k, v in pairings.items()} if pairings else empty_p,
        'pairingHcps': {k: v or 0 for k, v in hcps.items()} if hcps else empty_h,
        'completed': bool(match.get('completed')),
    }


def normalize_tournament(data: dict) -> dict:
    """Fill in collections the store drops when they are empty."""
    teams = data.get('teams') or {}
    names = data.get('teamNames') or {}
    players = []
    for p in data.get('players') or []:
        players.append({**p, 'stats': {**empty_stats(), **(p.get('stats') or {})}})
    return {
        **data,
        'players': players,
        'matches': [_normalize_match(m) for m in data.get('matches') or []],
        'matchResults': data.get('matchResults') or [],
        'courses': data['courses'] if data.get('courses') is not None else preset_courses(),
        'teams': {TEAM1: teams.get(TEAM1) or [], TEAM2: teams.get(TEAM2) or []},
        'teamNames': {TEAM1: names.get(TEAM1) or 'Team 1', TEAM2: names.get(TEAM2) or 'Team 2'},
    }


def load_tournament(tournament_id: str) -> Optional[dict]:
    """One-shot read; None when no such tournament exists."""
    data = kv_store.get(tournament_path((tournament_id or '').upper().strip()))
    if not data:
        return None
    return normalize_tournament(data)


def save_tournament(data: dict, tournament_id: str) -> bool:
    """Overwrite the whole record. A rejected write is logged, not raised."""
    try:
        kv_store.set(tournament_path(tournament_id), data)
    except StoreError as exc:
        current_app.logger.error(f"[tournament-save] id={tournament_id} failed: {exc}")
        return False
    current_app.logger.debug(f"[tournament-save] id={tournament_id}")
    return True


def preserve_immutable(current: dict, incoming: dict) -> dict:
    """Copy of ``incoming`` with id, passcodes and creation time taken from ``current``."""
    merged = dict(incoming)
    for field in IMMUTABLE_FIELDS:
        if field in current:
            merged[field] = current[field]
    return merged


def update_tournament(tournament_id: str, updater: Callable[[dict], dict]) -> Optional[dict]:
    """Load, apply ``updater`` to a private copy, and save the result."""
    current = load_tournament(tournament_id)
    if current is None:
        return None
    updated = preserve_immutable(current, updater(copy.deepcopy(current)))
    save_tournament(updated, current['id'])
    return updated


def load_match_scores(tournament_id: str, match_id: str) -> Scores:
    return kv_store.get(scores_path(tournament_id, match_id)) or {}


def save_match_scores(tournament_id: str, match_id: str, scores: Scores) -> bool:
    try:
        kv_store.set(scores_path(tournament_id, match_id), scores)
    except StoreError as exc:
        current_app.logger.error(f"[scores-save] id={tournament_id} match={match_id} failed: {exc}")
        return False
    return True


def clean_scores(raw, holes: int) -> Scores:
    """Validate a submitted scores map: player id -> list of strokes or null.

    Raises ValueError for anything that is not a map of lists of whole numbers.
    """
    if not isinstance(raw, dict):
        raise ValueError('scores must be an object keyed by player id')
    cleaned: Scores = {}
    for player_id, strokes in raw.items():
        if not isinstance(strokes, list):
            raise ValueError(f"scores for {player_id} must be a list")
        row: List[Optional[int]] = []
        for value in strokes[:holes]:
            if value is None:
                row.append(None)
            elif isinstance(value, int) and not isinstance(value, bool) and value > 0:
                row.append(value)
            else:
                raise ValueError(f"invalid stroke count {value!r} for {player_id}")
        row.extend([None] * (holes - len(row)))
        cleaned[str(player_id)] = row
    return cleaned


def authorize(tournament: Optional[dict], passcode) -> Optional[str]:
    """Role granted by ``passcode`` for this tournament, or None."""
    if not tournament or not passcode:
        return None
    passcode = str(passcode).strip().upper()
    if passcode == tournament.get('adminPasscode'):
        return ADMIN
    if passcode == tournament.get('passcode'):
        return PLAYER
    return None


def view_for_role(tournament: Optional[dict], role: str) -> Optional[dict]:
    """What a participant with ``role`` may see; players never see the admin passcode."""
    if tournament is None or role == ADMIN:
        return tournament
    return {k: v for k, v in tournament.items() if k != 'adminPasscode'}
