"""Handicap arithmetic: course handicap, pairing handicap and stroke allocation.

Malformed numbers never raise here; they count as zero so a bad slope or
handicap entry simply gives nobody strokes.
"""
import math
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from .formats import HCP_AVG, HCP_AVG75, HCP_FULL, get_format

NEUTRAL_SLOPE = 113


def _number(value) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return number if math.isfinite(number) else 0.0


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def course_handicap(handicap_index, slope) -> int:
    """round(handicap_index * slope / 113), never negative, 0 for bad input."""
    product = _number(handicap_index) * _number(slope)
    if not math.isfinite(product):
        return 0
    return max(0, round_half_up(product / NEUTRAL_SLOPE))


def strokes_on_hole(handicap, handicap_rank) -> int:
    """Strokes received on a hole of the given rank (1 = hardest).

    One stroke when rank <= H, a second when rank <= H - 18.
    """
    strokes = int(_number(handicap))
    rank = int(_number(handicap_rank))
    if strokes <= 0 or rank <= 0:
        return 0
    received = 0
    if rank <= strokes:
        received += 1
    if strokes > 18 and rank <= strokes - 18:
        received += 1
    return received


def _player_handicap_index(players: Iterable[Mapping], player_id) -> float:
    for player in players or []:
        if player.get('id') == player_id:
            return _number(player.get('handicapIndex'))
    return 0.0


def pairing_playing_handicap(player_ids: List[str], format_id: str, tee: Optional[Mapping],
                             players: Iterable[Mapping]) -> int:
    if not tee or not player_ids:
        return 0
    fmt = get_format(format_id)
    if fmt is None:
        return 0
    players = list(players or [])
    hcps = [course_handicap(_player_handicap_index(players, pid), tee.get('slope')) for pid in player_ids]
    if fmt.hcp_type == HCP_FULL:
        return hcps[0]
    average = sum(hcps) / len(hcps)
    if fmt.hcp_type == HCP_AVG:
        return round_half_up(average)
    if fmt.hcp_type == HCP_AVG75:
        return round_half_up(average * 0.75)
    return 0


def matchplay_strokes(hcp_a, hcp_b, handicap_rank) -> Tuple[int, int]:
    """Strokes for each side of a matchup; only the higher handicap receives."""
    a, b = int(_number(hcp_a)), int(_number(hcp_b))
    gets = strokes_on_hole(abs(a - b), handicap_rank)
    if a > b:
        return gets, 0
    if b > a:
        return 0, gets
    return 0, 0


def skins_strokes(pairing_hcps: Mapping[str, int], handicap_rank) -> Dict[str, int]:
    """Strokes per slot off the lowest handicap in the group."""
    if not pairing_hcps:
        return {}
    hcps = {slot: int(_number(h)) for slot, h in pairing_hcps.items()}
    low = min(hcps.values())
    return {slot: strokes_on_hole(h - low, handicap_rank) for slot, h in hcps.items()}
