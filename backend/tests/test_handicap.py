import math

import pytest

from warrior_cup.services.tournament.courses import PRESET_COURSES
from warrior_cup.services.tournament.handicap import (
    course_handicap, matchplay_strokes, pairing_playing_handicap, skins_strokes, strokes_on_hole,
)


def test_course_handicap_matches_formula_across_slopes():
    for index in (0, 0.4, 5.2, 12.5, 18.0, 27.3, 36.0, 54.0):
        for slope in range(55, 156, 10):
            expected = math.floor(index * slope / 113 + 0.5)
            got = course_handicap(index, slope)
            assert got == expected
            assert got >= 0


def test_course_handicap_rounds_half_up():
    assert course_handicap(0.5, 113) == 1
    assert course_handicap(2.5, 113) == 3
    assert course_handicap(10, 133) == 12


@pytest.mark.parametrize('index, slope', [
    (None, 120), (10, None), ('abc', 120), (10, 'steep'), (float('nan'), 120), (float('inf'), 113), ({}, 113),
])
def test_course_handicap_bad_input_is_zero(index, slope):
    assert course_handicap(index, slope) == 0


def test_course_handicap_accepts_numeric_strings_and_clamps_plus_handicaps():
    assert course_handicap('11.3', '113') == 11
    assert course_handicap(-2.0, 130) == 0


def test_eighteen_strokes_gives_one_on_every_hole():
    assert [strokes_on_hole(18, rank) for rank in range(1, 19)] == [1] * 18


def test_thirty_six_strokes_gives_two_on_every_hole():
    assert [strokes_on_hole(36, rank) for rank in range(1, 19)] == [2] * 18


def test_nine_strokes_land_on_the_nine_hardest_holes():
    tee = PRESET_COURSES[0].tees[0]
    stroked = [h.number for h in tee.holes if strokes_on_hole(9, h.handicap_rank) == 1]
    assert len(stroked) == 9
    assert sorted(h.handicap_rank for h in tee.holes if h.number in stroked) == list(range(1, 10))
    assert all(strokes_on_hole(9, h.handicap_rank) == 0 for h in tee.holes if h.number not in stroked)


def test_twenty_strokes_double_up_on_two_hardest():
    assert strokes_on_hole(20, 1) == 2
    assert strokes_on_hole(20, 2) == 2
    assert strokes_on_hole(20, 3) == 1
    assert strokes_on_hole(20, 18) == 1


def test_zero_or_bad_handicap_gets_no_strokes():
    assert strokes_on_hole(0, 1) == 0
    assert strokes_on_hole(-3, 1) == 0
    assert strokes_on_hole('x', 1) == 0
    assert strokes_on_hole(10, None) == 0


PLAYERS = [
    {'id': 'a', 'name': 'Al', 'handicapIndex': 10.0},
    {'id': 'b', 'name': 'Bo', 'handicapIndex': 20.0},
    {'id': 'c', 'name': 'Cy', 'handicapIndex': 'n/a'},
]
NEUTRAL_TEE = {'name': 'White', 'slope': 113}


def test_pairing_handicap_full_uses_first_partner():
    assert pairing_playing_handicap(['a', 'b'], 'bestball', NEUTRAL_TEE, PLAYERS) == 10
    assert pairing_playing_handicap(['b'], 'singles', NEUTRAL_TEE, PLAYERS) == 20


def test_pairing_handicap_average_and_reduced_average():
    assert pairing_playing_handicap(['a', 'b'], 'alternateshot', NEUTRAL_TEE, PLAYERS) == 15
    # 75% of 15 = 11.25
    assert pairing_playing_handicap(['a', 'b'], 'scramble', NEUTRAL_TEE, PLAYERS) == 11
    assert pairing_playing_handicap(['a', 'b'], 'modifiedscramble', NEUTRAL_TEE, PLAYERS) == 11


def test_pairing_handicap_degrades_to_zero():
    assert pairing_playing_handicap([], 'bestball', NEUTRAL_TEE, PLAYERS) == 0
    assert pairing_playing_handicap(['a'], 'bestball', None, PLAYERS) == 0
    assert pairing_playing_handicap(['a'], 'nosuchformat', NEUTRAL_TEE, PLAYERS) == 0
    assert pairing_playing_handicap(['c'], 'singles', NEUTRAL_TEE, PLAYERS) == 0
    assert pairing_playing_handicap(['zz'], 'singles', NEUTRAL_TEE, PLAYERS) == 0


def test_matchplay_strokes_go_to_higher_handicap_only():
    assert matchplay_strokes(12, 8, 3) == (1, 0)
    assert matchplay_strokes(12, 8, 5) == (0, 0)
    assert matchplay_strokes(4, 26, 2) == (0, 2)
    assert matchplay_strokes(10, 10, 1) == (0, 0)


def test_skins_strokes_are_off_the_low_man():
    got = skins_strokes({'t1p1': 4, 't1p2': 10, 't2p1': 6, 't2p2': 4}, 5)
    assert got == {'t1p1': 0, 't1p2': 1, 't2p1': 0, 't2p2': 0}
    assert skins_strokes({}, 1) == {}
