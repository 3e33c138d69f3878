"""Course catalog: preset scorecards plus helpers for entered courses.

Hole dicts on the wire use the short keys ``h`` and ``rank`` (handicap rank,
1 = hardest) because that is also the shape the course search asks for.
"""
import math
import re
from dataclasses import dataclass
from typing import Iterable, List, Mapping, Optional, Tuple

HOLES_PER_ROUND = 18


@dataclass(frozen=True)
class Hole:
    number: int
    par: int
    yards: int
    handicap_rank: int

    def to_dict(self):
        return {'h': self.number, 'par': self.par, 'yards': self.yards, 'rank': self.handicap_rank}


@dataclass(frozen=True)
class Tee:
    name: str
    slope: int
    rating: float
    par: int
    holes: Tuple[Hole, ...]

    def to_dict(self):
        return {
            'name': self.name,
            'slope': self.slope,
            'rating': self.rating,
            'par': self.par,
            'holes': [h.to_dict() for h in self.holes],
        }


@dataclass(frozen=True)
class Course:
    id: str
    name: str
    location: str
    tees: Tuple[Tee, ...]

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'location': self.location,
            'tees': [t.to_dict() for t in self.tees],
        }


def _tee(name, slope, rating, par, holes):
    return Tee(name, slope, rating, par, tuple(Hole(i + 1, *h) for i, h in enumerate(holes)))


def _course(course_id, name, location, tees):
    return Course(course_id, name, location, tuple(tees))


PRESET_COURSES: Tuple[Course, ...] = (
    _course(
        'hawks_landing', 'Hawks Landing Golf Course', 'Lake Buena Vista, FL',
        (
            _tee('Black', 133, 70.2, 71, [
                (4, 425, 10), (3, 147, 18), (4, 385, 4),
                (5, 535, 2), (4, 332, 16), (5, 475, 14),
                (3, 230, 8), (4, 353, 12), (4, 404, 6),
                (5, 541, 7), (4, 385, 9), (4, 425, 5),
                (3, 160, 15), (4, 422, 3), (3, 142, 17),
                (4, 390, 11), (4, 275, 13), (3, 204, 1),
            ]),
            _tee('Green', 126, 67.8, 71, [
                (4, 391, 10), (3, 132, 18), (4, 356, 4),
                (5, 501, 2), (4, 307, 16), (5, 443, 14),
                (3, 199, 8), (4, 328, 12), (4, 374, 6),
                (5, 506, 7), (4, 360, 9), (4, 395, 5),
                (3, 140, 15), (4, 393, 3), (3, 122, 17),
                (4, 362, 11), (4, 249, 13), (3, 178, 1),
            ]),
            _tee('Gold', 119, 65.8, 71, [
                (4, 359, 10), (3, 113, 18), (4, 318, 4),
                (5, 460, 2), (4, 279, 16), (5, 400, 14),
                (3, 173, 8), (4, 296, 12), (4, 330, 6),
                (5, 461, 7), (4, 328, 9), (4, 349, 5),
                (3, 118, 15), (4, 353, 3), (3, 102, 17),
                (4, 318, 11), (4, 220, 13), (3, 152, 1),
            ]),
        ),
    ),
    _course(
        'disney_magnolia', "Disney's Magnolia Golf Course", 'Lake Buena Vista, FL',
        (
            _tee('Green', 137, 74.0, 71, [
                (4, 424, 3), (4, 351, 15), (3, 161, 17),
                (5, 535, 11), (4, 446, 1), (3, 202, 13),
                (4, 410, 7), (5, 605, 9), (4, 426, 5),
                (5, 522, 8), (4, 382, 14), (3, 163, 16),
                (4, 374, 18), (4, 480, 4), (5, 565, 10),
                (3, 94, 12), (3, 85, 2), (4, 360, 6),
            ]),
            _tee('Blue', 131, 72.1, 71, [
                (4, 418, 3), (4, 417, 15), (3, 170, 17),
                (5, 542, 11), (4, 488, 1), (3, 202, 13),
                (4, 406, 7), (5, 610, 9), (4, 500, 5),
                (5, 526, 8), (4, 384, 14), (3, 169, 16),
                (4, 384, 18), (4, 455, 4), (5, 565, 10),
                (3, 114, 12), (3, 347, 2), (4, 360, 6),
            ]),
            _tee('White', 124, 69.6, 71, [
                (4, 313, 3), (4, 323, 15), (3, 147, 17),
                (5, 495, 11), (4, 432, 1), (3, 175, 13),
                (4, 396, 7), (5, 550, 9), (4, 435, 5),
                (5, 500, 8), (4, 328, 14), (3, 143, 16),
                (4, 372, 18), (4, 400, 4), (5, 515, 10),
                (3, 91, 12), (3, 85, 2), (4, 342, 6),
            ]),
            _tee('Gold', 117, 67.3, 71, [
                (4, 288, 3), (4, 296, 15), (3, 132, 17),
                (5, 460, 11), (4, 398, 1), (3, 155, 13),
                (4, 347, 7), (5, 500, 9), (4, 390, 5),
                (5, 452, 8), (4, 300, 14), (3, 118, 16),
                (4, 319, 18), (4, 350, 4), (5, 455, 10),
                (3, 78, 12), (3, 75, 2), (4, 297, 6),
            ]),
            _tee('Red', 117, 70.1, 72, [
                (4, 285, 3), (4, 271, 15), (3, 109, 17),
                (5, 430, 11), (5, 378, 1), (3, 131, 13),
                (4, 327, 7), (5, 468, 9), (4, 355, 5),
                (5, 434, 8), (4, 271, 14), (3, 100, 16),
                (4, 293, 18), (4, 320, 4), (5, 422, 10),
                (3, 69, 12), (3, 63, 2), (4, 267, 6),
            ]),
        ),
    ),
    _course(
        'disney_lbv', "Disney's Lake Buena Vista Golf Course", 'Lake Buena Vista, FL',
        (
            _tee('Blue', 133, 72.3, 72, [
                (5, 514, 3), (3, 176, 15), (4, 409, 7),
                (4, 382, 9), (4, 390, 11), (4, 354, 13),
                (3, 157, 17), (5, 524, 1), (4, 381, 5),
                (4, 375, 18), (4, 449, 2), (3, 208, 14),
                (4, 407, 16), (5, 521, 12), (4, 384, 8),
                (3, 200, 10), (5, 533, 6), (4, 438, 4),
            ]),
            _tee('White', 130, 70.1, 72, [
                (5, 489, 3), (3, 152, 15), (4, 373, 7),
                (4, 367, 9), (4, 369, 11), (4, 332, 13),
                (3, 117, 17), (5, 502, 1), (4, 360, 5),
                (4, 360, 18), (4, 425, 2), (3, 176, 14),
                (4, 329, 16), (5, 483, 12), (4, 359, 8),
                (3, 165, 10), (5, 511, 6), (4, 395, 4),
            ]),
            _tee('Gold', 125, 68.5, 72, [
                (5, 467, 3), (3, 139, 15), (4, 353, 7),
                (4, 351, 9), (4, 348, 11), (4, 317, 13),
                (3, 94, 17), (5, 480, 1), (4, 344, 5),
                (4, 345, 18), (4, 410, 2), (3, 158, 14),
                (4, 313, 16), (5, 457, 12), (4, 326, 8),
                (3, 156, 10), (5, 491, 6), (4, 370, 4),
            ]),
            _tee('Red', 119, 69.7, 73, [
                (5, 421, 7), (3, 126, 15), (4, 288, 9),
                (4, 277, 11), (4, 296, 5), (4, 258, 13),
                (3, 77, 17), (5, 442, 1), (4, 304, 3),
                (4, 325, 4), (5, 398, 14), (3, 115, 18),
                (4, 286, 10), (5, 423, 12), (4, 284, 8),
                (3, 137, 16), (5, 433, 6), (4, 314, 2),
            ]),
        ),
    ),
)

DEFAULT_COURSE_ID = 'hawks_landing'
DEFAULT_TEE_NAME = 'Black'


def preset_courses() -> List[dict]:
    return [c.to_dict() for c in PRESET_COURSES]


def find_course(courses: Iterable[Mapping], course_id) -> Optional[Mapping]:
    for course in courses or []:
        if course.get('id') == course_id:
            return course
    return None


def find_tee(courses: Iterable[Mapping], course_id, tee_name) -> Optional[Mapping]:
    course = find_course(courses, course_id)
    if not course:
        return None
    for tee in course.get('tees') or []:
        if tee.get('name') == tee_name:
            return tee
    return None


def course_hole(start_hole, hole) -> int:
    """Course hole played as the ``hole``-th hole of a round, wrapping past 18."""
    return (int(start_hole or 1) + int(hole) - 2) % HOLES_PER_ROUND + 1


def find_hole(tee: Optional[Mapping], number) -> Optional[Mapping]:
    for hole in (tee or {}).get('holes') or []:
        if hole.get('h') == number:
            return hole
    return None


def blank_tee() -> dict:
    return {
        'name': '',
        'slope': 113,
        'rating': 72,
        'par': 72,
        'holes': [{'h': i + 1, 'par': 4, 'yards': 0, 'rank': i + 1} for i in range(HOLES_PER_ROUND)],
    }


def slugify(name: str) -> str:
    return re.sub(r'[^a-z0-9]+', '_', (name or '').lower()).strip('_')


def _float(value, default=0.0) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    return number if math.isfinite(number) else default


def _int(value, default=0) -> int:
    number = _float(value, None)
    return default if number is None else int(round(number))


def _normalize_holes(holes) -> List[dict]:
    by_number = {}
    for i, raw in enumerate(holes or []):
        if not isinstance(raw, Mapping):
            continue
        number = _int(raw.get('h', raw.get('number')), i + 1)
        if not 1 <= number <= HOLES_PER_ROUND:
            continue
        by_number[number] = {
            'h': number,
            'par': _int(raw.get('par'), 4),
            'yards': _int(raw.get('yards')),
            'rank': _int(raw.get('rank', raw.get('handicapRank'))),
        }
    blank = blank_tee()['holes']
    return [by_number.get(n, blank[n - 1]) for n in range(1, HOLES_PER_ROUND + 1)]


def normalize_course(data: Mapping) -> dict:
    """Coerce an entered or searched course into the stored course shape.

    Raises ValueError when the course has no name or no tees.
    """
    if not isinstance(data, Mapping):
        raise ValueError('Course must be an object')
    name = str(data.get('name') or '').strip()
    if not name:
        raise ValueError('Course name is required')
    raw_tees = [t for t in data.get('tees') or [] if isinstance(t, Mapping)]
    if not raw_tees:
        raise ValueError('Course needs at least one tee')
    tees = []
    for i, raw in enumerate(raw_tees):
        holes = _normalize_holes(raw.get('holes'))
        tees.append({
            'name': str(raw.get('name') or f"Tee {i + 1}").strip(),
            'slope': _int(raw.get('slope'), 113),
            'rating': _float(raw.get('rating'), 72.0),
            'par': _int(raw.get('par'), sum(h['par'] for h in holes)),
            'holes': holes,
        })
    return {
        'id': str(data.get('id') or slugify(name)),
        'name': name,
        'location': str(data.get('location') or ''),
        'tees': tees,
    }
