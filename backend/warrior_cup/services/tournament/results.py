"""Match results: per-hole winners, match status, finishing and standings."""
from datetime import datetime, timezone
from typing import Dict, List, Mapping, Optional

from .courses import course_hole, find_hole
from .formats import (TEAM1, TEAM2, FormatId, get_format, match_points, matchup_pairs,
                      matchup_value, team_slots)
from .handicap import matchplay_strokes, skins_strokes

TIE = 'tie'
# Best partner score counts; in the other formats the pairing plays one ball
BEST_SCORE_FORMATS = (FormatId.BEST_BALL, FormatId.SINGLES)


def pairing_raw_score(match: Mapping, slot: str, hole: int, scores: Mapping) -> Optional[int]:
    ids = match['pairings'].get(slot) or []
    raw = []
    for pid in ids:
        row = scores.get(pid) or []
        if hole - 1 < len(row) and row[hole - 1] is not None:
            raw.append(row[hole - 1])
    if not raw:
        return None
    if match['format'] in BEST_SCORE_FORMATS:
        return min(raw)
    return raw[0]


def _winner(net_a, net_b) -> str:
    if net_a < net_b:
        return TEAM1
    if net_b < net_a:
        return TEAM2
    return TIE


def _skin_winner(match: Mapping, slots: List[str], nets: Dict[str, int], required: int) -> Optional[dict]:
    if len(nets) < required:
        return None
    best = min(nets.values())
    winners = [slot for slot in slots if nets.get(slot) == best]
    if len(winners) != 1:
        return None
    slot = winners[0]
    return {'slot': slot, 'ids': list(match['pairings'].get(slot) or []), 'net': best}


def hole_results(match: Mapping, hole: int, scores: Mapping, tee: Optional[Mapping]) -> Optional[dict]:
    """Result of the ``hole``-th hole of a match (1-based, relative to startHole)."""
    if not match or not tee:
        return None
    number = course_hole(match.get('startHole'), hole)
    hole_data = find_hole(tee, number)
    rank = (hole_data or {}).get('rank') or hole
    skin_st = skins_strokes(match.get('pairingHcps') or {}, rank)
    slots = list(match['pairings'])

    nets = {}
    for slot in slots:
        raw = pairing_raw_score(match, slot, hole, scores)
        if raw is not None:
            nets[slot] = raw - skin_st.get(slot, 0)

    if match['format'] == FormatId.MODIFIED_SCRAMBLE:
        t1 = [nets[s] for s in team_slots(match['format'], TEAM1) if s in nets]
        t2 = [nets[s] for s in team_slots(match['format'], TEAM2) if s in nets]
        if not t1 or not t2:
            matchup = {'a': TEAM1, 'b': TEAM2, 'winner': None, 'netA': None, 'netB': None, 'team': True}
            return {'hole': hole, 'courseHole': number, 'rank': rank, 'matchups': [matchup], 'skinWinner': None}
        best1, best2 = min(t1), min(t2)
        matchup = {'a': TEAM1, 'b': TEAM2, 'winner': _winner(best1, best2), 'netA': best1, 'netB': best2, 'team': True}
        return {
            'hole': hole, 'courseHole': number, 'rank': rank, 'matchups': [matchup],
            'skinWinner': _skin_winner(match, slots, nets, len(slots)),
        }

    hcps = match.get('pairingHcps') or {}
    matchups = []
    for a, b in matchup_pairs(match['format']):
        raw_a = pairing_raw_score(match, a, hole, scores)
        raw_b = pairing_raw_score(match, b, hole, scores)
        if raw_a is None or raw_b is None:
            matchups.append({'a': a, 'b': b, 'winner': None, 'netA': None, 'netB': None})
            continue
        st_a, st_b = matchplay_strokes(hcps.get(a, 0), hcps.get(b, 0), rank)
        net_a, net_b = raw_a - st_a, raw_b - st_b
        matchups.append({'a': a, 'b': b, 'winner': _winner(net_a, net_b), 'netA': net_a, 'netB': net_b})
    return {
        'hole': hole, 'courseHole': number, 'rank': rank, 'matchups': matchups,
        'skinWinner': _skin_winner(match, slots, nets, 4),
    }


def status_label(lead: int, remaining: int) -> str:
    if lead == 0:
        return 'AS'
    if 0 < remaining < lead:
        return f"{lead}&{remaining}"
    return f"{lead}UP"


def match_status(match: Mapping, scores: Mapping, tee: Optional[Mapping]) -> dict:
    """Holes won per team, label (AS / 2UP / 3&2), leader and skins per player."""
    player_skins = {pid: 0 for ids in (match or {}).get('pairings', {}).values() for pid in ids}
    if not match or not tee:
        return {'team1Holes': 0, 'team2Holes': 0, 'thru': 0, 'label': 'AS', 'leader': None,
                'playerSkins': player_skins}
    t1 = t2 = thru = 0
    holes = int(match.get('holes') or 0)
    for hole in range(1, holes + 1):
        res = hole_results(match, hole, scores, tee)
        if not res:
            continue
        if any(m['winner'] is not None for m in res['matchups']):
            thru = hole
        for m in res['matchups']:
            if m['winner'] == TEAM1:
                t1 += 1
            elif m['winner'] == TEAM2:
                t2 += 1
        skin = res['skinWinner']
        if skin and skin['ids']:
            share = 1 / len(skin['ids'])
            for pid in skin['ids']:
                player_skins[pid] = player_skins.get(pid, 0) + share
    leader = TEAM1 if t1 > t2 else TEAM2 if t2 > t1 else None
    return {
        'team1Holes': t1, 'team2Holes': t2, 'thru': thru,
        'label': status_label(abs(t1 - t2), holes - thru),
        'leader': leader, 'playerSkins': player_skins,
    }


def match_team_points(match: Mapping, scores: Mapping, tee: Optional[Mapping]) -> Dict[str, float]:
    fmt = get_format(match['format'])
    points = {TEAM1: 0.0, TEAM2: 0.0}
    if fmt is None:
        return points
    holes = int(match.get('holes') or 0)
    results = [hole_results(match, h, scores, tee) for h in range(1, holes + 1)]
    if fmt.per_hole:
        for res in results:
            winner = res['matchups'][0]['winner'] if res else None
            if winner in (TEAM1, TEAM2):
                points[winner] += 1
            elif winner == TIE:
                points[TEAM1] += 0.5
                points[TEAM2] += 0.5
        return points

    value = matchup_value(match)
    for a, b in matchup_pairs(match['format']):
        won = {TEAM1: 0, TEAM2: 0}
        for res in results:
            for m in (res or {}).get('matchups', []):
                if m['a'] == a and m['b'] == b and m['winner'] in won:
                    won[m['winner']] += 1
        if won[TEAM1] > won[TEAM2]:
            points[TEAM1] += value
        elif won[TEAM2] > won[TEAM1]:
            points[TEAM2] += value
        else:
            points[TEAM1] += value / 2
            points[TEAM2] += value / 2
    return points


def _team_player_ids(match: Mapping, team: str) -> List[str]:
    prefix = 't1p' if team == TEAM1 else 't2p'
    return [pid for slot, ids in match['pairings'].items() if slot.startswith(prefix) for pid in ids if pid]


def finish_match(tournament: dict, match_id: str, scores: Mapping, tee: Optional[Mapping]) -> dict:
    """Record the result of a match and credit player stats.

    Mutates and returns ``tournament``. Refinishing a match replaces its
    previous result but stats accumulate again.
    """
    match = next((m for m in tournament['matches'] if m['id'] == match_id), None)
    if match is None:
        raise KeyError(match_id)
    points = match_team_points(match, scores, tee)
    status = match_status(match, scores, tee)
    result = {
        'matchId': match['id'],
        'format': match['format'],
        'holes': match['holes'],
        'startHole': match['startHole'],
        'teamPoints': points,
        'totalPoints': match_points(match),
        'team1HolesWon': status['team1Holes'],
        'team2HolesWon': status['team2Holes'],
        'leader': status['leader'],
        'playerSkins': status['playerSkins'],
        'completedAt': datetime.now(timezone.utc).isoformat(),
    }

    t1_ids = _team_player_ids(match, TEAM1)
    t2_ids = _team_player_ids(match, TEAM2)
    winner = TEAM1 if points[TEAM1] > points[TEAM2] else TEAM2 if points[TEAM2] > points[TEAM1] else None
    for player in tournament['players']:
        if player['id'] in t1_ids:
            team, holes_won = TEAM1, status['team1Holes']
        elif player['id'] in t2_ids:
            team, holes_won = TEAM2, status['team2Holes']
        else:
            continue
        stats = player.setdefault('stats', {})
        stats['matchesPlayed'] = stats.get('matchesPlayed', 0) + 1
        stats['matchesWon'] = stats.get('matchesWon', 0) + (1 if winner == team else 0)
        stats['holesWon'] = stats.get('holesWon', 0) + holes_won
        stats['skinsWon'] = stats.get('skinsWon', 0) + status['playerSkins'].get(player['id'], 0)

    match['completed'] = True
    tournament['matchResults'] = [r for r in tournament['matchResults'] if r.get('matchId') != match_id] + [result]
    return tournament


def team_points(tournament: Mapping, team: str) -> float:
    return sum((r.get('teamPoints') or {}).get(team, 0) for r in tournament.get('matchResults') or [])


def standings(tournament: Mapping) -> dict:
    total = sum(match_points(m) for m in tournament.get('matches') or [])
    to_win = total / 2 + 0.5
    points = {TEAM1: team_points(tournament, TEAM1), TEAM2: team_points(tournament, TEAM2)}
    mvp = sorted(
        ({
            'id': p['id'],
            'name': p.get('name'),
            'stats': p.get('stats') or {},
            'score': (p.get('stats') or {}).get('matchesWon', 0) * 10 + (p.get('stats') or {}).get('holesWon', 0),
        } for p in tournament.get('players') or []),
        key=lambda row: row['score'], reverse=True,
    )
    return {
        'teamNames': tournament.get('teamNames'),
        'teamPoints': points,
        'totalPoints': total,
        'pointsToWin': to_win,
        'needed': {team: max(0, to_win - pts) for team, pts in points.items()} if total else {},
        'matchesPlayed': len(tournament.get('matchResults') or []),
        'mvp': mvp,
    }
