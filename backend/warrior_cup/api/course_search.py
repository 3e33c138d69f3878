from flask import Blueprint, jsonify, request

from warrior_cup.services.course_search import CourseSearchError, search_courses

course_search = Blueprint('course_search', __name__)


@course_search.route('/course-search', methods=['POST'])
def search():
    data = request.get_json(silent=True) or {}
    try:
        courses = search_courses(data.get('query'))
    except CourseSearchError as exc:
        return jsonify({'error': exc.message}), exc.status_code
    return jsonify({'courses': courses})
