"""
Tutor directory routes for TutorBridge
"""

from flask import Blueprint, g, jsonify, session

from models.user import UserRole
from routes.auth import login_required
from services.auth_service import SessionManager
from services.tutor_service import TutorService
from utils.request_helpers import error_response, get_json_data, get_limit, parse_id, success_response

tutors_bp = Blueprint('tutors', __name__)


@tutors_bp.route('/api/tutors')
@tutors_bp.route('/api/instructors')
def list_tutors():
    return jsonify([TutorService.tutor_summary(tutor) for tutor in TutorService.list_tutors()])


@tutors_bp.route('/api/tutors/popular')
def popular_tutors():
    tutors = TutorService.get_popular_tutors(limit=get_limit(default=5))
    return jsonify([TutorService.tutor_summary(tutor) for tutor in tutors])


@tutors_bp.route('/api/tutors/<int:tutor_id>')
def get_tutor(tutor_id):
    tutor = TutorService.get_tutor(tutor_id)
    if tutor is None:
        return error_response('Tutor not found', 404)
    return jsonify(TutorService.tutor_detail(tutor))


@tutors_bp.route('/api/instructors/<instructor_id>')
def get_instructor(instructor_id):
    parsed_id = parse_id(instructor_id)
    if parsed_id is None:
        return error_response('Invalid instructor id', 400)

    tutor = TutorService.get_tutor(parsed_id)
    if tutor is None:
        return error_response('Instructor not found', 404)
    return jsonify(TutorService.tutor_detail(tutor))


@tutors_bp.route('/api/instructors', methods=['POST'])
@login_required(UserRole.ADMIN)
def create_instructor():
    """Admin creates a tutor account; specialization seeds the profile subjects"""
    success, result, message = TutorService.create_tutor(get_json_data())
    if not success:
        if isinstance(result, dict):
            return error_response(message, 400, result)
        return error_response(message, 409)
    return success_response(message, 201, instructor=TutorService.tutor_detail(result))


@tutors_bp.route('/api/tutors/<int:tutor_id>/courses')
def tutor_courses(tutor_id):
    tutor = TutorService.get_tutor(tutor_id)
    if tutor is None:
        return error_response('Tutor not found', 404)
    viewer = SessionManager.get_current_user(session)
    # Drafts only for the tutor and admins
    published_only = viewer is None or not (viewer.is_admin or viewer.id == tutor.id)
    courses = TutorService.get_tutor_courses(tutor.id, published_only=published_only)
    return jsonify([course.to_dict() for course in courses])


@tutors_bp.route('/api/tutor-profiles')
def list_tutor_profiles():
    return jsonify([profile.to_dict() for profile in TutorService.list_profiles()])


@tutors_bp.route('/api/tutors/profile', methods=['PUT'])
@login_required(UserRole.TUTOR)
def save_tutor_profile():
    """Create or update the calling tutor's profile"""
    success, result, message = TutorService.save_profile(g.current_user, get_json_data())
    if not success:
        return error_response(message, 400, result if isinstance(result, dict) else None)
    return success_response(message, profile=result.to_dict())
