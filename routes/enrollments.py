"""
Enrollment routes for TutorBridge
"""

from flask import Blueprint, g, jsonify

from models.user import UserRole
from routes.auth import login_required
from services.course_service import CourseService
from services.enrollment_service import EnrollmentService
from utils.request_helpers import error_response, get_json_data, parse_id, success_response

enrollments_bp = Blueprint('enrollments', __name__)


@enrollments_bp.route('/api/enrollments')
@login_required()
def list_enrollments():
    user = g.current_user
    enrollments = EnrollmentService.get_enrollments_for_user(user)
    return jsonify([enrollment.to_dict(include_course=user.is_student) for enrollment in enrollments])


@enrollments_bp.route('/api/enrollments', methods=['POST'])
@login_required(UserRole.STUDENT)
def create_enrollment():
    data = get_json_data()
    course_id = parse_id(data.get('course_id'))
    course = CourseService.get_course(course_id) if course_id else None
    if course is None or not course.published:
        return error_response('Course not found', 404)

    success, enrollment, message = EnrollmentService.enroll(g.current_user, course)
    if not success:
        return error_response(message, 400)
    return success_response(message, 201, enrollment=enrollment.to_dict(include_course=True))


@enrollments_bp.route('/api/enrollments/<int:enrollment_id>', methods=['PATCH'])
@login_required()
def update_enrollment(enrollment_id):
    enrollment = EnrollmentService.get_enrollment(enrollment_id)
    if enrollment is None:
        return error_response('Enrollment not found', 404)
    if not EnrollmentService.can_modify(g.current_user, enrollment):
        return error_response('Access denied', 403)

    success, result, message = EnrollmentService.update_enrollment(enrollment, get_json_data())
    if not success:
        return error_response(message, 400, result if isinstance(result, dict) else None)
    return success_response(message, enrollment=result.to_dict())


@enrollments_bp.route('/api/enrollments/<int:enrollment_id>', methods=['DELETE'])
@login_required()
def delete_enrollment(enrollment_id):
    enrollment = EnrollmentService.get_enrollment(enrollment_id)
    if enrollment is None:
        return error_response('Enrollment not found', 404)
    if not EnrollmentService.can_delete(g.current_user, enrollment):
        return error_response('Access denied', 403)

    success, message = EnrollmentService.delete_enrollment(enrollment)
    if not success:
        return error_response(message, 500)
    return '', 204
