import copy

from warrior_cup.services.tournament.courses import course_hole
from warrior_cup.services.tournament.formats import (
    FORMATS, FormatId, empty_pairings, get_format, match_points, matchup_pairs,
)
from warrior_cup.services.tournament.results import (
    finish_match, hole_results, match_status, match_team_points, standings, status_label,
)

# Rank equals hole number, so hole 1 is the hardest
TEE = {
    'name': 'White', 'slope': 113, 'rating': 72.0, 'par': 72,
    'holes': [{'h': n, 'par': 4, 'yards': 400, 'rank': n} for n in range(1, 19)],
}


def _match(format_id, holes=9, start_hole=1, pairings=None, hcps=None):
    empty_p, empty_h = empty_pairings(format_id)
    return {
        'id': 'm1', 'format': format_id, 'startHole': start_hole, 'holes': holes,
        'pairings': {**empty_p, **(pairings or {})},
        'pairingHcps': {**empty_h, **(hcps or {})},
        'completed': False,
    }


def _row(*strokes, holes=9):
    row = list(strokes) + [None] * (holes - len(strokes))
    return row[:holes]


def test_format_catalog_is_read_only_and_complete():
    assert set(FORMATS) == set(FormatId)
    assert get_format('singles').num_matchups == 4
    assert get_format('modifiedscramble').per_hole
    assert get_format('nope') is None
    try:
        FORMATS[FormatId.SINGLES] = None
        assert False, 'catalog should not accept writes'
    except TypeError:
        pass


def test_matchup_pairs_per_format():
    assert matchup_pairs('bestball') == [('t1p1', 't2p1'), ('t1p2', 't2p2')]
    assert len(matchup_pairs('singles')) == 4


def test_match_points():
    assert match_points({'format': 'modifiedscramble', 'holes': 9}) == 9
    assert match_points({'format': 'bestball', 'holes': 9}) == 2
    assert match_points({'format': 'bestball', 'holes': 18}) == 4
    assert match_points({'format': 'singles', 'holes': 9}) == 4
    assert match_points({'format': 'unknown', 'holes': 9}) == 0


def test_course_hole_wraps_for_back_nine_starts():
    assert course_hole(1, 1) == 1
    assert course_hole(10, 1) == 10
    assert course_hole(10, 9) == 18
    assert course_hole(10, 10) == 1


def test_status_label():
    assert status_label(0, 5) == 'AS'
    assert status_label(2, 5) == '2UP'
    assert status_label(3, 2) == '3&2'
    assert status_label(1, 0) == '1UP'


def test_best_ball_uses_best_partner_and_matchplay_strokes():
    m = _match('bestball', pairings={
        't1p1': ['a1', 'a2'], 't2p1': ['b1', 'b2'], 't1p2': ['a3', 'a4'], 't2p2': ['b3', 'b4'],
    }, hcps={'t1p1': 3, 't2p1': 0})
    scores = {
        'a1': _row(5), 'a2': _row(6),
        'b1': _row(4), 'b2': _row(7),
        'a3': _row(4), 'b3': _row(5),
    }
    res = hole_results(m, 1, scores, TEE)
    first, second = res['matchups']
    # t1p1 gets one stroke on the hardest hole: 5 - 1 = 4 vs 4
    assert first['netA'] == 4 and first['netB'] == 4
    assert first['winner'] == 'tie'
    assert second['winner'] == 'team1'
    assert res['rank'] == 1


def test_missing_scores_leave_matchup_undecided():
    m = _match('singles', pairings={'t1p1': ['a'], 't2p1': ['b']})
    res = hole_results(m, 1, {'a': _row(4)}, TEE)
    assert all(r['winner'] is None for r in res['matchups'])
    assert res['skinWinner'] is None
    assert hole_results(m, 1, {}, None) is None


def test_modified_scramble_compares_best_team_net_and_awards_skin():
    m = _match('modifiedscramble', pairings={
        't1p1': ['a'], 't1p2': ['b'], 't2p1': ['c'], 't2p2': ['d'],
    })
    scores = {'a': _row(4), 'b': _row(6), 'c': _row(5), 'd': _row(5)}
    res = hole_results(m, 1, scores, TEE)
    assert len(res['matchups']) == 1
    assert res['matchups'][0]['winner'] == 'team1'
    assert res['skinWinner']['slot'] == 't1p1'
    assert res['skinWinner']['ids'] == ['a']


def test_scramble_uses_the_team_ball():
    m = _match('scramble', pairings={'t1p1': ['a', 'b'], 't2p1': ['c', 'd']})
    # Only the first recorded score of the pairing counts
    scores = {'a': _row(5), 'b': _row(3), 'c': _row(4)}
    res = hole_results(m, 1, scores, TEE)
    assert res['matchups'][0]['netA'] == 5
    assert res['matchups'][0]['winner'] == 'team2'


def test_match_status_counts_holes_and_closes_out():
    m = _match('singles', pairings={'t1p1': ['a'], 't2p1': ['b']})
    scores = {'a': _row(3, 3, 3, 3, 3, 3, 3), 'b': _row(4, 4, 4, 4, 4, 4, 4)}
    status = match_status(m, scores, TEE)
    assert status['team1Holes'] == 7
    assert status['thru'] == 7
    assert status['label'] == '7&2'
    assert status['leader'] == 'team1'


def test_match_status_all_square_without_tee():
    m = _match('singles', pairings={'t1p1': ['a'], 't2p1': ['b']})
    status = match_status(m, {}, None)
    assert status['label'] == 'AS'
    assert status['playerSkins'] == {'a': 0, 'b': 0}


def test_per_hole_points_split_halves():
    m = _match('modifiedscramble', pairings={
        't1p1': ['a'], 't1p2': ['b'], 't2p1': ['c'], 't2p2': ['d'],
    })
    scores = {
        'a': _row(4, 4, 5, 4, 4, 4, 4, 4, 4), 'b': _row(5, 5, 5, 5, 5, 5, 5, 5, 5),
        'c': _row(5, 4, 4, 4, 4, 4, 4, 4, 4), 'd': _row(6, 6, 6, 6, 6, 6, 6, 6, 6),
    }
    points = match_team_points(m, scores, TEE)
    # hole 1 team1, hole 3 team2, rest halved
    assert points == {'team1': 4.5, 'team2': 4.5}


def test_matchup_points_double_over_eighteen():
    m = _match('singles', holes=18, pairings={'t1p1': ['a'], 't2p1': ['b']})
    scores = {'a': [3] * 18, 'b': [4] * 18}
    points = match_team_points(m, scores, TEE)
    # one matchup won (2 pts), three unplayed matchups halved (1 pt each side)
    assert points == {'team1': 5.0, 'team2': 3.0}
    assert points['team1'] + points['team2'] == match_points(m)


def _tournament(match):
    return {
        'id': 'ABC123',
        'players': [
            {'id': pid, 'name': pid.upper(), 'handicapIndex': 0, 'stats': {
                'matchesPlayed': 0, 'matchesWon': 0, 'holesWon': 0, 'skinsWon': 0}}
            for pid in ('a', 'b', 'c')
        ],
        'teamNames': {'team1': 'Eagles', 'team2': 'Hawks'},
        'matches': [match],
        'matchResults': [],
    }


def test_finish_match_records_result_and_stats():
    m = _match('singles', pairings={'t1p1': ['a'], 't2p1': ['b']})
    tournament = _tournament(m)
    scores = {'a': _row(3, 4, 4), 'b': _row(4, 4, 5)}
    finish_match(tournament, 'm1', scores, TEE)

    result = tournament['matchResults'][0]
    assert result['matchId'] == 'm1'
    assert result['teamPoints'] == {'team1': 2.5, 'team2': 1.5}
    assert result['totalPoints'] == 4
    assert result['team1HolesWon'] == 2
    assert result['leader'] == 'team1'
    assert tournament['matches'][0]['completed'] is True

    players = {p['id']: p['stats'] for p in tournament['players']}
    assert players['a'] == {'matchesPlayed': 1, 'matchesWon': 1, 'holesWon': 2, 'skinsWon': 0}
    assert players['b']['matchesWon'] == 0
    assert players['c']['matchesPlayed'] == 0


def test_refinish_replaces_result():
    m = _match('singles', pairings={'t1p1': ['a'], 't2p1': ['b']})
    tournament = _tournament(m)
    finish_match(tournament, 'm1', {'a': _row(3), 'b': _row(4)}, TEE)
    finish_match(tournament, 'm1', {'a': _row(5), 'b': _row(4)}, TEE)
    assert len(tournament['matchResults']) == 1
    assert tournament['matchResults'][0]['leader'] == 'team2'


def test_standings_and_mvp():
    m = _match('singles', pairings={'t1p1': ['a'], 't2p1': ['b']})
    tournament = _tournament(m)
    finish_match(tournament, 'm1', {'a': _row(3), 'b': _row(4)}, TEE)
    table = standings(copy.deepcopy(tournament))
    assert table['totalPoints'] == 4
    assert table['pointsToWin'] == 2.5
    assert table['teamPoints'] == {'team1': 2.5, 'team2': 1.5}
    assert table['needed'] == {'team1': 0, 'team2': 1.0}
    assert table['mvp'][0]['id'] == 'a'
    assert table['mvp'][0]['score'] == 11


def test_unknown_format_scores_no_points():
    m = _match('singles', pairings={'t1p1': ['a'], 't2p1': ['b']})
    m['format'] = 'bogus'
    assert match_team_points(m, {'a': _row(3), 'b': _row(4)}, TEE) == {'team1': 0.0, 'team2': 0.0}
