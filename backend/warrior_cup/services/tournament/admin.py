"""Admin edits to a tournament record.

Each function mutates and returns the tournament dict it is given; callers
pass a private copy (see ``store.update_tournament``). Invalid edits raise
``TournamentError`` before anything is changed.
"""
import uuid
from typing import Dict, List, Mapping, Optional

from .courses import find_course, find_tee, normalize_course
from .formats import TEAM1, TEAM2, TEAMS, FormatId, empty_pairings, get_format
from .handicap import _number, pairing_playing_handicap
from .store import empty_stats


class TournamentError(ValueError):
    """An edit that cannot be applied to the tournament."""


def _new_id(prefix: str) -> str:
    return f"{prefix}{uuid.uuid4().hex[:10]}"


def _parse_handicap(value) -> float:
    # NaN and infinity would leak into the JSON record
    return _number(value)


def _player(tournament: dict, player_id: str) -> dict:
    for player in tournament['players']:
        if player['id'] == player_id:
            return player
    raise TournamentError(f"Unknown player {player_id}")


def _match(tournament: dict, match_id: str) -> dict:
    for match in tournament['matches']:
        if match['id'] == match_id:
            return match
    raise TournamentError(f"Unknown match {match_id}")


def match_tee(tournament: dict, match: Optional[dict]) -> Optional[dict]:
    """Tee a match is played from, falling back to the tournament default."""
    course_id = (match or {}).get('courseId') or tournament.get('activeCourseId')
    tee_name = (match or {}).get('teeId') or tournament.get('activeTeeId')
    return find_tee(tournament.get('courses'), course_id, tee_name)


def _recompute_pairing_hcps(tournament: dict, match: dict) -> None:
    tee = match_tee(tournament, match)
    match['pairingHcps'] = {
        slot: pairing_playing_handicap(ids, match['format'], tee, tournament['players']) if ids and tee else 0
        for slot, ids in match['pairings'].items()
    }


def check_record(data) -> dict:
    """Reject a submitted whole tournament record that later edits could not load."""
    if not isinstance(data, Mapping):
        raise TournamentError('Tournament body is required')
    for key in ('players', 'matches', 'matchResults', 'courses'):
        items = data.get(key)
        if items is None:
            continue
        if not isinstance(items, list) or not all(isinstance(item, Mapping) for item in items):
            raise TournamentError(f"{key} must be a list of objects")
    for key in ('teams', 'teamNames'):
        if data.get(key) is not None and not isinstance(data[key], Mapping):
            raise TournamentError(f"{key} must be an object keyed by team")
    for match in data.get('matches') or []:
        fmt = get_format(match.get('format'))
        if fmt is None:
            raise TournamentError(f"Unknown format {match.get('format')}")
        if match.get('holes') not in fmt.holes_opts:
            raise TournamentError(f"{fmt.name} is played over {' or '.join(map(str, fmt.holes_opts))} holes")
        pairings = match.get('pairings')
        if pairings is not None and not isinstance(pairings, Mapping):
            raise TournamentError('pairings must be an object keyed by slot')
    return data


def rename(tournament: dict, name) -> dict:
    name = str(name or '').strip()
    if not name:
        raise TournamentError('Tournament name is required')
    tournament['name'] = name
    return tournament


def add_player(tournament: dict, name='New Player', handicap_index=0) -> dict:
    tournament['players'].append({
        'id': _new_id('p'),
        'name': str(name or 'New Player').strip() or 'New Player',
        'handicapIndex': _parse_handicap(handicap_index),
        'stats': empty_stats(),
    })
    return tournament


def update_player(tournament: dict, player_id: str, name=None, handicap_index=None) -> dict:
    player = _player(tournament, player_id)
    if name is not None:
        player['name'] = str(name).strip() or player['name']
    if handicap_index is not None:
        player['handicapIndex'] = _parse_handicap(handicap_index)
        for match in tournament['matches']:
            if any(player_id in ids for ids in match['pairings'].values()):
                _recompute_pairing_hcps(tournament, match)
    return tournament


def remove_player(tournament: dict, player_id: str) -> dict:
    _player(tournament, player_id)
    tournament['players'] = [p for p in tournament['players'] if p['id'] != player_id]
    for team in TEAMS:
        tournament['teams'][team] = [pid for pid in tournament['teams'][team] if pid != player_id]
    for match in tournament['matches']:
        if any(player_id in ids for ids in match['pairings'].values()):
            match['pairings'] = {
                slot: [pid for pid in ids if pid != player_id] for slot, ids in match['pairings'].items()
            }
            _recompute_pairing_hcps(tournament, match)
    return tournament


def set_teams(tournament: dict, teams: Optional[Dict[str, List[str]]] = None,
              team_names: Optional[Dict[str, str]] = None) -> dict:
    """Replace team membership and/or names. A player may be on one team only."""
    if teams is not None and not isinstance(teams, Mapping):
        raise TournamentError('teams must be an object keyed by team')
    if team_names is not None and not isinstance(team_names, Mapping):
        raise TournamentError('teamNames must be an object keyed by team')
    if teams is not None:
        if not all(isinstance(teams.get(team) or [], list) for team in TEAMS):
            raise TournamentError('Each team must be a list of player ids')
        known = {p['id'] for p in tournament['players']}
        team1 = [pid for pid in teams.get(TEAM1) or [] if pid in known]
        team2 = [pid for pid in teams.get(TEAM2) or [] if pid in known and pid not in team1]
        tournament['teams'] = {TEAM1: team1, TEAM2: team2}
    if team_names is not None:
        for team in TEAMS:
            if team_names.get(team):
                tournament['teamNames'][team] = str(team_names[team]).strip()
    return tournament


def add_course(tournament: dict, course: dict) -> dict:
    """Add or replace (by id) a course."""
    try:
        course = normalize_course(course)
    except ValueError as exc:
        raise TournamentError(str(exc)) from exc
    tournament['courses'] = [c for c in tournament['courses'] if c.get('id') != course['id']] + [course]
    return tournament


def remove_course(tournament: dict, course_id: str) -> dict:
    if not find_course(tournament['courses'], course_id):
        raise TournamentError(f"Unknown course {course_id}")
    tournament['courses'] = [c for c in tournament['courses'] if c.get('id') != course_id]
    return tournament


def set_active_tee(tournament: dict, course_id: str, tee_name: str) -> dict:
    if not find_tee(tournament['courses'], course_id, tee_name):
        raise TournamentError(f"Unknown tee {tee_name} for course {course_id}")
    tournament['activeCourseId'] = course_id
    tournament['activeTeeId'] = tee_name
    return tournament


def add_match(tournament: dict, format_id=FormatId.BEST_BALL.value, holes=9, start_hole=1,
              course_id=None, tee_name=None) -> dict:
    fmt = get_format(format_id)
    if fmt is None:
        raise TournamentError(f"Unknown format {format_id}")
    try:
        holes = int(holes)
        start_hole = int(start_hole)
    except (TypeError, ValueError) as exc:
        raise TournamentError('holes and startHole must be numbers') from exc
    if holes not in fmt.holes_opts:
        raise TournamentError(f"{fmt.name} is played over {' or '.join(map(str, fmt.holes_opts))} holes")
    if not 1 <= start_hole <= 18:
        raise TournamentError('startHole must be between 1 and 18')
    course_id = course_id or tournament.get('activeCourseId')
    tee_name = tee_name or tournament.get('activeTeeId')
    if not find_tee(tournament['courses'], course_id, tee_name):
        raise TournamentError(f"Unknown tee {tee_name} for course {course_id}")
    pairings, pairing_hcps = empty_pairings(fmt.id)
    tournament['matches'].append({
        'id': _new_id('m'),
        'format': fmt.id.value,
        'startHole': start_hole,
        'holes': holes,
        'pairings': pairings,
        'pairingHcps': pairing_hcps,
        'completed': False,
        'courseId': course_id,
        'teeId': tee_name,
    })
    return tournament


def remove_match(tournament: dict, match_id: str) -> dict:
    _match(tournament, match_id)
    tournament['matches'] = [m for m in tournament['matches'] if m['id'] != match_id]
    tournament['matchResults'] = [r for r in tournament['matchResults'] if r.get('matchId') != match_id]
    return tournament


def set_match_tee(tournament: dict, match_id: str, course_id: str, tee_name: str) -> dict:
    match = _match(tournament, match_id)
    if not find_tee(tournament['courses'], course_id, tee_name):
        raise TournamentError(f"Unknown tee {tee_name} for course {course_id}")
    match['courseId'] = course_id
    match['teeId'] = tee_name
    _recompute_pairing_hcps(tournament, match)
    return tournament


def set_pairing(tournament: dict, match_id: str, slot: str, player_ids: List[str]) -> dict:
    """Seat players in one pairing slot and refresh every slot's playing handicap."""
    match = _match(tournament, match_id)
    if slot not in match['pairings']:
        raise TournamentError(f"Unknown pairing slot {slot}")
    if player_ids is not None and not isinstance(player_ids, list):
        raise TournamentError('playerIds must be a list')
    fmt = get_format(match['format'])
    player_ids = [pid for pid in player_ids or [] if pid]
    if len(player_ids) > fmt.players_per_pairing:
        raise TournamentError(f"{fmt.name} pairings hold {fmt.players_per_pairing} player(s)")
    known = {p['id'] for p in tournament['players']}
    for pid in player_ids:
        if pid not in known:
            raise TournamentError(f"Unknown player {pid}")
        seated = [k for k, ids in match['pairings'].items() if k != slot and pid in ids]
        if seated:
            raise TournamentError(f"Player {pid} already plays in {seated[0]}")
    match['pairings'][slot] = player_ids
    _recompute_pairing_hcps(tournament, match)
    return tournament

