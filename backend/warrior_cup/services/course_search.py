"""Course scorecard lookup through the Anthropic Messages API.

One request per search: no caching, no retries. The model is asked for a
bare JSON array of courses; its reply is parsed leniently.
"""
import json
import re
from typing import Any, List, Optional

import requests
from flask import current_app

ANTHROPIC_VERSION = '2023-06-01'

EXAMPLE_COURSE = [{
    'name': 'Course Name', 'location': 'City, ST',
    'tees': [{
        'name': 'Blue', 'slope': 133, 'rating': 72.3, 'par': 72,
        'holes': [
            {'h': 1, 'par': 4, 'yards': 400, 'rank': 5}, {'h': 2, 'par': 3, 'yards': 180, 'rank': 15},
            {'h': 3, 'par': 4, 'yards': 360, 'rank': 9}, {'h': 4, 'par': 5, 'yards': 520, 'rank': 1},
            {'h': 5, 'par': 4, 'yards': 380, 'rank': 11}, {'h': 6, 'par': 4, 'yards': 350, 'rank': 13},
            {'h': 7, 'par': 3, 'yards': 160, 'rank': 17}, {'h': 8, 'par': 5, 'yards': 510, 'rank': 3},
            {'h': 9, 'par': 4, 'yards': 390, 'rank': 7}, {'h': 10, 'par': 4, 'yards': 370, 'rank': 18},
            {'h': 11, 'par': 4, 'yards': 430, 'rank': 2}, {'h': 12, 'par': 3, 'yards': 200, 'rank': 14},
            {'h': 13, 'par': 4, 'yards': 390, 'rank': 16}, {'h': 14, 'par': 5, 'yards': 500, 'rank': 12},
            {'h': 15, 'par': 4, 'yards': 370, 'rank': 8}, {'h': 16, 'par': 3, 'yards': 190, 'rank': 10},
            {'h': 17, 'par': 5, 'yards': 520, 'rank': 6}, {'h': 18, 'par': 4, 'yards': 420, 'rank': 4},
        ],
    }],
}]

_FENCE = re.compile(r'```json|```')


class CourseSearchError(Exception):
    def __init__(self, message: str, status_code: int = 500):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def build_prompt(query: str) -> str:
    return (
        f'Golf course scorecard data for: "{query}". Return ONLY a JSON array, no other text:\n'
        f"{json.dumps(EXAMPLE_COURSE, separators=(',', ':'))}\n"
        'Include all tee boxes. rank=handicap difficulty 1=hardest. Use 0 if unknown. JSON array only.'
    )


def parse_courses(text: str) -> Optional[Any]:
    """Parse the reply as JSON, falling back to the outermost ``[...]`` slice."""
    clean = _FENCE.sub('', text or '').strip()
    try:
        return json.loads(clean)
    except ValueError:
        pass
    start, end = clean.find('['), clean.rfind(']')
    if start == -1 or end <= start:
        return None
    try:
        return json.loads(clean[start:end + 1])
    except ValueError:
        return None


def reply_text(payload: dict) -> str:
    blocks = payload.get('content') or []
    return '\n'.join(b.get('text', '') for b in blocks if isinstance(b, dict) and b.get('type') == 'text')


def search_courses(query) -> List[dict]:
    """Ask the model for courses matching ``query``.

    Raises CourseSearchError carrying the HTTP status to answer with.
    """
    query = (query or '').strip() if isinstance(query, str) else ''
    if not query:
        raise CourseSearchError('No query provided', 400)

    cfg = current_app.config
    api_key = cfg.get('ANTHROPIC_API_KEY')
    if not api_key:
        raise CourseSearchError('API key not configured', 500)

    current_app.logger.info(f"[course-search] query={query!r}")
    try:
        resp = requests.post(
            cfg.get('ANTHROPIC_API_URL', 'https://api.anthropic.com/v1/messages'),
            headers={
                'Content-Type': 'application/json',
                'x-api-key': api_key,
                'anthropic-version': ANTHROPIC_VERSION,
            },
            json={
                'model': cfg.get('ANTHROPIC_MODEL'),
                'max_tokens': int(cfg.get('ANTHROPIC_MAX_TOKENS', 4000)),
                'messages': [{'role': 'user', 'content': build_prompt(query)}],
            },
            timeout=cfg.get('COURSE_SEARCH_TIMEOUT_SEC', 60),
        )
    except requests.exceptions.RequestException as exc:
        current_app.logger.error(f"[course-search] transport error: {exc}")
        raise CourseSearchError('Claude API error', 500) from exc

    try:
        data = resp.json()
    except ValueError:
        data = {}
    if not isinstance(data, dict):
        data = {}
    if not resp.ok:
        error = data.get('error')
        message = error.get('message') if isinstance(error, dict) else None
        current_app.logger.warning(f"[course-search] upstream status={resp.status_code} message={message}")
        raise CourseSearchError(message or 'Claude API error', 500)

    courses = parse_courses(reply_text(data))
    if not isinstance(courses, list) or not courses:
        raise CourseSearchError('No course data found', 404)
    current_app.logger.info(f"[course-search] query={query!r} courses={len(courses)}")
    return courses
