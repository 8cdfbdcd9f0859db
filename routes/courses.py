"""
Course routes for TutorBridge
Public catalogue browsing and tutor course management
"""

from flask import Blueprint, current_app, g, jsonify, request, session

from models.user import UserRole
from routes.auth import login_required
from services.auth_service import SessionManager
from services.course_service import CourseService
from utils.request_helpers import error_response, get_json_data, parse_id, success_response

courses_bp = Blueprint('courses', __name__)


def _load_managed_course(course_id):
    """Course the current user may modify, or an error response"""
    course = CourseService.get_course(course_id)
    if course is None:
        return None, error_response('Course not found', 404)
    if not CourseService.can_manage(g.current_user, course):
        return None, error_response('You can only modify your own courses', 403)
    return course, None


@courses_bp.route('/api/courses')
def list_courses():
    """Published courses with optional subject/search/tutor filters"""
    courses = CourseService.list_courses(
        subject=request.args.get('subject'),
        search=request.args.get('search') or request.args.get('q'),
        tutor_id=request.args.get('tutor_id', type=int),
    )
    return jsonify([course.to_dict() for course in courses])


@courses_bp.route('/api/courses/<course_id>')
def get_course(course_id):
    parsed_id = parse_id(course_id)
    if parsed_id is None:
        return error_response('Invalid course id', 400)

    course = CourseService.get_course(parsed_id)
    viewer = SessionManager.get_current_user(session)
    if course is not None and not course.published \
            and (viewer is None or not CourseService.can_manage(viewer, course)):
        course = None
    if course is None:
        return error_response('Course not found', 404)
    return jsonify(CourseService.get_course_detail(course))


@courses_bp.route('/api/courses/subject/<subject>')
def courses_by_subject(subject):
    courses = CourseService.list_courses(subject=subject)
    return jsonify([course.to_dict() for course in courses])


@courses_bp.route('/api/subjects')
def list_subjects():
    return jsonify(CourseService.get_subjects(current_app.config.get('DEFAULT_SUBJECTS')))


@courses_bp.route('/api/courses', methods=['POST'])
@login_required(UserRole.TUTOR)
def create_course():
    """Create a course owned by the calling tutor"""
    tutor = g.current_user
    if current_app.config.get('REQUIRE_TUTOR_APPROVAL') and not tutor.is_approved:
        return error_response('Your tutor account is awaiting approval', 403)

    data = get_json_data()
    data.pop('tutor_id', None)

    success, result, message = CourseService.create_course(tutor, data)
    if not success:
        return error_response(message, 400, result if isinstance(result, dict) else None)
    return success_response(message, 201, course=result.to_dict())


@courses_bp.route('/api/courses/<int:course_id>', methods=['PUT', 'PATCH'])
@login_required(UserRole.TUTOR, UserRole.ADMIN)
def update_course(course_id):
    course, error = _load_managed_course(course_id)
    if error:
        return error

    data = get_json_data()
    data.pop('tutor_id', None)

    success, result, message = CourseService.update_course(course, data, partial=request.method == 'PATCH')
    if not success:
        return error_response(message, 400, result if isinstance(result, dict) else None)
    return success_response(message, course=result.to_dict())


@courses_bp.route('/api/courses/<int:course_id>', methods=['DELETE'])
@login_required(UserRole.TUTOR, UserRole.ADMIN)
def delete_course(course_id):
    course, error = _load_managed_course(course_id)
    if error:
        return error

    success, message = CourseService.delete_course(course)
    if not success:
        return error_response(message, 500)
    return '', 204
