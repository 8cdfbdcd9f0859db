"""
Dashboard and activity routes for TutorBridge
"""

from flask import Blueprint, g, jsonify

from models.user import UserRole
from routes.auth import login_required
from services.dashboard_service import DashboardService
from services.notification_service import ActivityService
from utils.request_helpers import error_response, get_json_data, get_limit, success_response

dashboard_bp = Blueprint('dashboard', __name__)


@dashboard_bp.route('/api/student/dashboard')
@login_required(UserRole.STUDENT)
def student_dashboard():
    return jsonify(DashboardService.get_student_dashboard(g.current_user))


@dashboard_bp.route('/api/student/courses')
@login_required(UserRole.STUDENT)
def student_courses():
    return jsonify(DashboardService.get_student_courses(g.current_user))


@dashboard_bp.route('/api/tutor/dashboard')
@login_required(UserRole.TUTOR)
def tutor_dashboard():
    return jsonify(DashboardService.get_tutor_dashboard(g.current_user))


@dashboard_bp.route('/api/dashboard/stats')
@login_required(UserRole.ADMIN)
def dashboard_stats():
    return jsonify(DashboardService.get_admin_stats())


@dashboard_bp.route('/api/dashboard/enrollments')
@login_required(UserRole.ADMIN)
def enrollment_trend():
    return jsonify(DashboardService.get_enrollment_trend())


@dashboard_bp.route('/api/dashboard/popular-courses')
@login_required(UserRole.ADMIN)
def popular_courses():
    return jsonify(DashboardService.get_popular_courses(limit=get_limit(default=5)))


@dashboard_bp.route('/api/activities')
@login_required()
def list_activities():
    activities = ActivityService.get_for_user(g.current_user)
    return jsonify([activity.to_dict() for activity in activities])


@dashboard_bp.route('/api/activities/recent')
@login_required(UserRole.ADMIN)
def recent_activities():
    activities = ActivityService.get_recent(limit=get_limit(default=10))
    return jsonify([activity.to_dict() for activity in activities])


@dashboard_bp.route('/api/activities', methods=['POST'])
@login_required()
def create_activity():
    success, result, message = ActivityService.record(g.current_user, get_json_data())
    if not success:
        return error_response(message, 400 if isinstance(result, dict) else 500,
                              result if isinstance(result, dict) else None)
    return success_response(message, 201, activity=result.to_dict())


@dashboard_bp.route('/api/analytics/students')
@login_required(UserRole.ADMIN)
def student_analytics():
    return jsonify(DashboardService.get_student_analytics())


@dashboard_bp.route('/api/analytics/courses')
@login_required(UserRole.ADMIN)
def course_analytics():
    return jsonify(DashboardService.get_course_analytics())
