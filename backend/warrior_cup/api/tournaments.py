from functools import wraps

from flask import Blueprint, current_app, jsonify, request
from flask_login import current_user, login_required, login_user, logout_user

from warrior_cup.models import ADMIN, Participant
from warrior_cup.services.kvstore import StoreError
from warrior_cup.services.tournament import admin
from warrior_cup.services.tournament.formats import FORMATS
from warrior_cup.services.tournament.results import finish_match, hole_results, match_status, standings
from warrior_cup.services.tournament.store import (
    authorize, clean_scores, create_tournament, load_match_scores, load_tournament,
    normalize_tournament, preserve_immutable, save_match_scores, save_tournament,
    update_tournament, view_for_role,
)

tournaments = Blueprint('tournaments', __name__)


def participant_required(admin_only=False):
    """Require a session for this tournament; admin_only also requires the admin role."""
    def decorator(view):
        @wraps(view)
        @login_required
        def wrapped(tournament_id, *args, **kwargs):
            if not current_user.can_access(tournament_id):
                return jsonify({'error': 'Not joined to this tournament'}), 403
            if admin_only and not current_user.is_admin:
                return jsonify({'error': 'Admin passcode required'}), 403
            return view(tournament_id.upper(), *args, **kwargs)
        return wrapped
    return decorator


def _apply(tournament_id, edit):
    """Run an admin edit against the stored record and answer with the result."""
    try:
        updated = update_tournament(tournament_id, edit)
    except admin.TournamentError as exc:
        return jsonify({'error': str(exc)}), 400
    if updated is None:
        return jsonify({'error': 'Tournament not found'}), 404
    return jsonify(view_for_role(updated, current_user.role))


def _find_match(tournament, match_id):
    return next((m for m in tournament['matches'] if m['id'] == match_id), None)


@tournaments.route('/formats', methods=['GET'])
def list_formats():
    return jsonify([fmt.to_dict() for fmt in FORMATS.values()])


@tournaments.route('', methods=['POST'])
def create():
    try:
        tournament = create_tournament()
    except StoreError as exc:
        current_app.logger.error(f"[tournament-create] failed: {exc}")
        return jsonify({'error': 'Could not create tournament'}), 500
    login_user(Participant(tournament['id'], ADMIN))
    return jsonify({'role': ADMIN, 'tournament': tournament}), 201


@tournaments.route('/join', methods=['POST'])
def join():
    data = request.get_json(silent=True) or {}
    tournament_id = str(data.get('tournament_id') or '').upper().strip()
    passcode = data.get('passcode')
    if not all([tournament_id, passcode]):
        return jsonify({'error': 'Tournament ID and passcode are required'}), 400

    tournament = load_tournament(tournament_id)
    if not tournament:
        return jsonify({'error': 'Tournament not found.'}), 404
    role = authorize(tournament, passcode)
    if role is None:
        return jsonify({'error': 'Wrong passcode.'}), 403

    login_user(Participant(tournament_id, role))
    current_app.logger.info(f"[tournament-join] id={tournament_id} role={role}")
    return jsonify({'role': role, 'tournament': view_for_role(tournament, role)})


@tournaments.route('/logout', methods=['POST'])
@login_required
def logout():
    logout_user()
    return jsonify({'success': True})


@tournaments.route('/<string:tournament_id>', methods=['GET'])
@participant_required()
def get_tournament(tournament_id):
    tournament = load_tournament(tournament_id)
    if not tournament:
        return jsonify({'error': 'Tournament not found'}), 404
    return jsonify(view_for_role(tournament, current_user.role))


@tournaments.route('/<string:tournament_id>', methods=['PUT'])
@participant_required(admin_only=True)
def replace_tournament(tournament_id):
    data = request.get_json(silent=True)
    try:
        admin.check_record(data)
    except admin.TournamentError as exc:
        return jsonify({'error': str(exc)}), 400
    current = load_tournament(tournament_id)
    if not current:
        return jsonify({'error': 'Tournament not found'}), 404
    updated = preserve_immutable(current, normalize_tournament(data))
    save_tournament(updated, tournament_id)
    return jsonify(updated)


@tournaments.route('/<string:tournament_id>', methods=['PATCH'])
@participant_required(admin_only=True)
def rename_tournament(tournament_id):
    data = request.get_json(silent=True) or {}
    return _apply(tournament_id, lambda t: admin.rename(t, data.get('name')))


@tournaments.route('/<string:tournament_id>/players', methods=['POST'])
@participant_required(admin_only=True)
def add_player(tournament_id):
    data = request.get_json(silent=True) or {}
    return _apply(tournament_id, lambda t: admin.add_player(
        t, data.get('name') or 'New Player', data.get('handicapIndex', 0)))


@tournaments.route('/<string:tournament_id>/players/<string:player_id>', methods=['PUT'])
@participant_required(admin_only=True)
def update_player(tournament_id, player_id):
    data = request.get_json(silent=True) or {}
    return _apply(tournament_id, lambda t: admin.update_player(
        t, player_id, data.get('name'), data.get('handicapIndex')))


@tournaments.route('/<string:tournament_id>/players/<string:player_id>', methods=['DELETE'])
@participant_required(admin_only=True)
def remove_player(tournament_id, player_id):
    return _apply(tournament_id, lambda t: admin.remove_player(t, player_id))


@tournaments.route('/<string:tournament_id>/teams', methods=['PUT'])
@participant_required(admin_only=True)
def set_teams(tournament_id):
    data = request.get_json(silent=True) or {}
    return _apply(tournament_id, lambda t: admin.set_teams(t, data.get('teams'), data.get('teamNames')))


@tournaments.route('/<string:tournament_id>/courses', methods=['POST'])
@participant_required(admin_only=True)
def add_course(tournament_id):
    data = request.get_json(silent=True) or {}
    return _apply(tournament_id, lambda t: admin.add_course(t, data.get('course')))


@tournaments.route('/<string:tournament_id>/courses/<string:course_id>', methods=['DELETE'])
@participant_required(admin_only=True)
def remove_course(tournament_id, course_id):
    return _apply(tournament_id, lambda t: admin.remove_course(t, course_id))


@tournaments.route('/<string:tournament_id>/active-tee', methods=['PUT'])
@participant_required(admin_only=True)
def set_active_tee(tournament_id):
    data = request.get_json(silent=True) or {}
    return _apply(tournament_id, lambda t: admin.set_active_tee(t, data.get('courseId'), data.get('teeId')))


@tournaments.route('/<string:tournament_id>/matches', methods=['POST'])
@participant_required(admin_only=True)
def add_match(tournament_id):
    data = request.get_json(silent=True) or {}
    return _apply(tournament_id, lambda t: admin.add_match(
        t,
        format_id=data.get('format') or 'bestball',
        holes=data.get('holes', 9),
        start_hole=data.get('startHole', 1),
        course_id=data.get('courseId'),
        tee_name=data.get('teeId'),
    ))


@tournaments.route('/<string:tournament_id>/matches/<string:match_id>', methods=['DELETE'])
@participant_required(admin_only=True)
def remove_match(tournament_id, match_id):
    return _apply(tournament_id, lambda t: admin.remove_match(t, match_id))


@tournaments.route('/<string:tournament_id>/matches/<string:match_id>/tee', methods=['PUT'])
@participant_required(admin_only=True)
def set_match_tee(tournament_id, match_id):
    data = request.get_json(silent=True) or {}
    return _apply(tournament_id, lambda t: admin.set_match_tee(
        t, match_id, data.get('courseId'), data.get('teeId')))


@tournaments.route('/<string:tournament_id>/matches/<string:match_id>/pairings', methods=['PUT'])
@participant_required(admin_only=True)
def set_pairing(tournament_id, match_id):
    data = request.get_json(silent=True) or {}
    return _apply(tournament_id, lambda t: admin.set_pairing(
        t, match_id, data.get('slot'), data.get('playerIds') or []))


@tournaments.route('/<string:tournament_id>/scores/<string:match_id>', methods=['GET'])
@participant_required()
def get_scores(tournament_id, match_id):
    return jsonify(load_match_scores(tournament_id, match_id))


@tournaments.route('/<string:tournament_id>/scores/<string:match_id>', methods=['PUT'])
@participant_required()
def put_scores(tournament_id, match_id):
    tournament = load_tournament(tournament_id)
    match = _find_match(tournament, match_id) if tournament else None
    if not match:
        return jsonify({'error': 'Match not found'}), 404
    data = request.get_json(silent=True) or {}
    try:
        scores = clean_scores(data.get('scores'), match['holes'])
    except ValueError as exc:
        return jsonify({'error': str(exc)}), 400
    if not save_match_scores(tournament_id, match_id, scores):
        return jsonify({'error': 'Scores could not be saved'}), 500
    return jsonify(scores)


@tournaments.route('/<string:tournament_id>/matches/<string:match_id>/status', methods=['GET'])
@participant_required()
def get_match_status(tournament_id, match_id):
    tournament = load_tournament(tournament_id)
    match = _find_match(tournament, match_id) if tournament else None
    if not match:
        return jsonify({'error': 'Match not found'}), 404
    tee = admin.match_tee(tournament, match)
    scores = load_match_scores(tournament_id, match_id)
    payload = match_status(match, scores, tee)
    payload['holes'] = [hole_results(match, h, scores, tee) for h in range(1, match['holes'] + 1)]
    return jsonify(payload)


@tournaments.route('/<string:tournament_id>/matches/<string:match_id>/finish', methods=['POST'])
@participant_required()
def finish(tournament_id, match_id):
    tournament = load_tournament(tournament_id)
    match = _find_match(tournament, match_id) if tournament else None
    if not match:
        return jsonify({'error': 'Match not found'}), 404
    data = request.get_json(silent=True) or {}
    if data.get('scores') is not None:
        try:
            scores = clean_scores(data['scores'], match['holes'])
        except ValueError as exc:
            return jsonify({'error': str(exc)}), 400
        save_match_scores(tournament_id, match_id, scores)
    else:
        scores = load_match_scores(tournament_id, match_id)

    tee = admin.match_tee(tournament, match)
    updated = update_tournament(tournament_id, lambda t: finish_match(t, match_id, scores, tee))
    if updated is None:
        return jsonify({'error': 'Tournament not found'}), 404
    result = next(r for r in updated['matchResults'] if r['matchId'] == match_id)
    current_app.logger.info(
        f"[match-finish] id={tournament_id} match={match_id} points={result['teamPoints']}"
    )
    return jsonify({'result': result, 'tournament': view_for_role(updated, current_user.role)})


@tournaments.route('/<string:tournament_id>/standings', methods=['GET'])
@participant_required()
def get_standings(tournament_id):
    tournament = load_tournament(tournament_id)
    if not tournament:
        return jsonify({'error': 'Tournament not found'}), 404
    return jsonify(standings(tournament))
