"""
Booking and session routes for TutorBridge
"""

from flask import Blueprint, current_app, g, jsonify

from models.booking import BookingStatus
from models.user import UserRole
from routes.auth import login_required
from services.booking_service import BookingService
from services.course_service import CourseService
from utils.request_helpers import error_response, get_json_data, parse_id, success_response

bookings_bp = Blueprint('bookings', __name__)


def _load_visible_booking(booking_id):
    booking = BookingService.get_booking(booking_id)
    if booking is None:
        return None, error_response('Booking not found', 404)
    if not BookingService.can_view(g.current_user, booking):
        return None, error_response('Access denied', 403)
    return booking, None


@bookings_bp.route('/api/bookings')
@login_required()
def list_bookings():
    """Bookings scoped to the caller's role"""
    bookings = BookingService.get_bookings_for_user(g.current_user)
    return jsonify([booking.to_dict(include_related=True) for booking in bookings])


@bookings_bp.route('/api/bookings/<int:booking_id>')
@login_required()
def get_booking(booking_id):
    booking, error = _load_visible_booking(booking_id)
    if error:
        return error
    return jsonify(booking.to_dict(include_related=True))


@bookings_bp.route('/api/bookings', methods=['POST'])
@login_required(UserRole.STUDENT)
def create_booking():
    """Book a session on a published course"""
    data = get_json_data()
    course_id = parse_id(data.get('course_id'))
    course = CourseService.get_course(course_id) if course_id else None
    if course is None or not course.published:
        return error_response('Course not found', 404)

    success, result, message = BookingService.create_booking(g.current_user, course, data)
    if not success:
        return error_response(message, 400, result if isinstance(result, dict) else None)
    return success_response(message, 201, booking=result.to_dict(include_related=True))


@bookings_bp.route('/api/bookings/<int:booking_id>/status', methods=['PATCH'])
@bookings_bp.route('/api/bookings/<int:booking_id>', methods=['PUT'])
@login_required()
def update_booking_status(booking_id):
    """Move a booking to a new status within the caller's permissions"""
    booking, error = _load_visible_booking(booking_id)
    if error:
        return error

    data = get_json_data()
    status = BookingStatus.normalize(data.get('status'))
    if status is None:
        return error_response(f"Status must be one of: {', '.join(BookingStatus.ALL)}", 400)

    if status not in BookingService.allowed_statuses(g.current_user, booking):
        return error_response(f"You are not allowed to mark this booking {status.lower()}", 403)

    success, result, message = BookingService.update_status(
        booking, status, session_date=data.get('session_date'), actor=g.current_user)
    if not success:
        return error_response(message, 400)
    return success_response(message, booking=result.to_dict(include_related=True))


@bookings_bp.route('/api/bookings/<int:booking_id>', methods=['DELETE'])
@login_required()
def delete_booking(booking_id):
    booking, error = _load_visible_booking(booking_id)
    if error:
        return error

    if not BookingService.can_delete(g.current_user, booking):
        return error_response('Only pending bookings can be deleted by the student', 403)

    success, message = BookingService.delete_booking(booking)
    if not success:
        return error_response(message, 500)
    return '', 204


@bookings_bp.route('/api/sessions/upcoming')
@login_required()
def upcoming_sessions():
    minutes = current_app.config.get('DEFAULT_SESSION_MINUTES', 60)
    bookings = BookingService.get_upcoming_sessions(g.current_user)
    return jsonify([booking.to_session_dict(minutes) for booking in bookings])


@bookings_bp.route('/api/sessions/past')
@login_required()
def past_sessions():
    minutes = current_app.config.get('DEFAULT_SESSION_MINUTES', 60)
    bookings = BookingService.get_past_sessions(g.current_user)
    return jsonify([booking.to_session_dict(minutes) for booking in bookings])


@bookings_bp.route('/api/user/stats')
@login_required()
def user_stats():
    minutes = current_app.config.get('DEFAULT_SESSION_MINUTES', 60)
    return jsonify(BookingService.get_user_stats(g.current_user, default_minutes=minutes))
