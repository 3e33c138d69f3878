from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Tuple

HCP_FULL = 'full'
HCP_AVG = 'avg'
HCP_AVG75 = 'avg75'

TEAM1 = 'team1'
TEAM2 = 'team2'
TEAMS = (TEAM1, TEAM2)


class FormatId(str, Enum):
    MODIFIED_SCRAMBLE = 'modifiedscramble'
    BEST_BALL = 'bestball'
    SCRAMBLE = 'scramble'
    ALTERNATE_SHOT = 'alternateshot'
    SINGLES = 'singles'


@dataclass(frozen=True)
class Format:
    id: FormatId
    name: str
    players_per_pairing: int
    hcp_type: str
    holes_opts: Tuple[int, ...]
    description: str
    points_per_matchup: float
    num_matchups: int
    # Both teams score every hole and the best team net takes the hole
    per_hole: bool = False

    def to_dict(self):
        return {
            'id': self.id.value,
            'name': self.name,
            'ppp': self.players_per_pairing,
            'hcpType': self.hcp_type,
            'holesOpts': list(self.holes_opts),
            'desc': self.description,
            'pointsPerMatchup': self.points_per_matchup,
            'numMatchups': self.num_matchups,
            'perHole': self.per_hole,
        }


FORMATS: Mapping[FormatId, Format] = MappingProxyType({
    FormatId.MODIFIED_SCRAMBLE: Format(
        FormatId.MODIFIED_SCRAMBLE, 'Modified Scramble', 2, HCP_AVG75, (9, 18),
        'Best team net wins hole, 1pt/hole max', 1, 1, per_hole=True),
    FormatId.BEST_BALL: Format(
        FormatId.BEST_BALL, 'Best Ball', 2, HCP_FULL, (9, 18),
        'Best individual net score wins', 1, 2),
    FormatId.SCRAMBLE: Format(
        FormatId.SCRAMBLE, '2-Man Scramble', 2, HCP_AVG75, (9, 18),
        'Team picks best shot each time', 1, 2),
    FormatId.ALTERNATE_SHOT: Format(
        FormatId.ALTERNATE_SHOT, 'Alternate Shot', 2, HCP_AVG, (9, 18),
        'Partners alternate shots', 1, 2),
    FormatId.SINGLES: Format(
        FormatId.SINGLES, 'Singles', 1, HCP_FULL, (9, 18),
        '4 individual 1v1 matches, 4 pts', 1, 4),
})


def get_format(format_id) -> Optional[Format]:
    try:
        return FORMATS[FormatId(format_id)]
    except ValueError:
        return None


def slot_count(format_id) -> int:
    """Pairing slots per team."""
    return 4 if format_id == FormatId.SINGLES else 2


def team_slots(format_id, team: str) -> List[str]:
    prefix = 't1p' if team == TEAM1 else 't2p'
    return [f"{prefix}{i}" for i in range(1, slot_count(format_id) + 1)]


def matchup_pairs(format_id) -> List[Tuple[str, str]]:
    return list(zip(team_slots(format_id, TEAM1), team_slots(format_id, TEAM2)))


def empty_pairings(format_id) -> Tuple[Dict[str, list], Dict[str, int]]:
    slots = team_slots(format_id, TEAM1) + team_slots(format_id, TEAM2)
    return {k: [] for k in slots}, {k: 0 for k in slots}


def match_points(match: Mapping) -> float:
    """Points on offer for a match.

    Per-hole formats put one point on every hole; the rest offer
    points_per_matchup for each matchup, doubled over 18 holes.
    """
    fmt = get_format(match.get('format'))
    if fmt is None:
        return 0
    holes = int(match.get('holes') or 0)
    if fmt.per_hole:
        return holes
    return fmt.points_per_matchup * fmt.num_matchups * (2 if holes == 18 else 1)


def matchup_value(match: Mapping) -> float:
    """Points awarded to the winner of one matchup in a non per-hole match."""
    fmt = get_format(match.get('format'))
    if fmt is None:
        return 0
    holes = int(match.get('holes') or 0)
    return fmt.points_per_matchup * (2 if holes == 18 else 1)
