"""
Admin portal routes for TutorBridge
User supervision, platform listings, exports and reports
"""

import logging
from datetime import datetime

from flask import Blueprint, g, jsonify, make_response, request

from models.user import UserRole
from models.booking import BookingStatus
from routes.auth import login_required
from services.admin_service import AdminService
from services.auth_service import AuthService
from services.dashboard_service import DashboardService
from services.excel_export_service import ExcelExportService, XLSX_MIMETYPE
from services.reporting_service import ReportingService
from utils.db_helpers import get_page_args, paginate_query
from utils.request_helpers import error_response, get_json_data, success_response

logger = logging.getLogger(__name__)

admin_bp = Blueprint('admin', __name__, url_prefix='/api/admin')


def _download(payload, mimetype, filename):
    response = make_response(payload)
    response.headers['Content-Type'] = mimetype
    response.headers['Content-Disposition'] = f'attachment; filename={filename}'
    return response


def _load_user(user_id):
    user = AuthService.get_user(user_id)
    if user is None:
        return None, error_response('User not found', 404)
    return user, None


@admin_bp.route('/statistics')
@login_required(UserRole.ADMIN)
def statistics():
    return jsonify(DashboardService.get_platform_statistics())


@admin_bp.route('/users')
@login_required(UserRole.ADMIN)
def list_users():
    """Paginated users with optional role and search filters"""
    role = request.args.get('role')
    canonical_role = None
    if role:
        canonical_role = UserRole.normalize(role)
        if canonical_role is None:
            return error_response(f"Role must be one of: {', '.join(UserRole.ALL)}", 400)

    query = AdminService.users_query(role=canonical_role, search=request.args.get('search'))
    page, per_page = get_page_args()
    return jsonify(paginate_query(query, page, per_page))


@admin_bp.route('/users/<role>')
@login_required(UserRole.ADMIN)
def users_by_role(role):
    canonical_role = UserRole.normalize(role)
    if canonical_role is None:
        return error_response(f"Role must be one of: {', '.join(UserRole.ALL)}", 400)
    return jsonify([user.to_dict() for user in AdminService.get_users_by_role(canonical_role)])


@admin_bp.route('/users/<int:user_id>', methods=['PUT'])
@login_required(UserRole.ADMIN)
def update_user(user_id):
    user, error = _load_user(user_id)
    if error:
        return error

    data = get_json_data()
    if user.id == g.current_user.id and data.get('is_active') is False:
        return error_response('You cannot deactivate your own account', 400)

    success, result, message = AdminService.update_user(user, data)
    if not success:
        if isinstance(result, dict):
            return error_response(message, 400, result)
        return error_response(message, 409)
    return success_response(message, user=result.to_dict())


@admin_bp.route('/users/<int:user_id>/approve', methods=['PATCH'])
@login_required(UserRole.ADMIN)
def approve_user(user_id):
    user, error = _load_user(user_id)
    if error:
        return error
    if not user.is_tutor:
        return error_response('Only tutor accounts require approval', 400)

    data = get_json_data()
    is_approved = data.get('is_approved', True)
    if not isinstance(is_approved, bool):
        return error_response('is_approved must be true or false', 400)

    success, result, message = AdminService.set_approval(g.current_user, user, is_approved)
    if not success:
        return error_response(message, 500)
    return success_response(message, user=result.to_dict())


@admin_bp.route('/users/<int:user_id>/toggle-status', methods=['POST'])
@login_required(UserRole.ADMIN)
def toggle_user_status(user_id):
    user, error = _load_user(user_id)
    if error:
        return error
    if user.id == g.current_user.id:
        return error_response('You cannot deactivate your own account', 400)

    success, message = AuthService.set_active(user, not user.is_active)
    if not success:
        return error_response(message, 500)
    return success_response(message, user=user.to_dict())


@admin_bp.route('/users/<int:user_id>/reset-password', methods=['POST'])
@login_required(UserRole.ADMIN)
def reset_user_password(user_id):
    user, error = _load_user(user_id)
    if error:
        return error

    success, new_password, message = AuthService.reset_password(user)
    if not success:
        return error_response(message, 500)
    return success_response(message, new_password=new_password)


@admin_bp.route('/courses')
@login_required(UserRole.ADMIN)
def list_courses():
    page, per_page = get_page_args()
    return jsonify(paginate_query(AdminService.courses_query(), page, per_page))


@admin_bp.route('/bookings')
@login_required(UserRole.ADMIN)
def list_bookings():
    status = request.args.get('status')
    canonical_status = BookingStatus.normalize(status) if status else None
    if status and canonical_status is None:
        return error_response(f"Status must be one of: {', '.join(BookingStatus.ALL)}", 400)

    page, per_page = get_page_args()
    return jsonify(paginate_query(AdminService.bookings_query(canonical_status), page, per_page,
                                  serializer=lambda booking: booking.to_dict(include_related=True)))


@admin_bp.route('/export/users')
@login_required(UserRole.ADMIN)
def export_users():
    try:
        users = AdminService.users_query().all()
        excel_bytes = ExcelExportService.export_users(users)
    except Exception as e:
        logger.error("User export failed", exc_info=True)
        return error_response(f'Error generating export: {str(e)}', 500)

    filename = f"users_{datetime.utcnow():%Y%m%d}.xlsx"
    return _download(excel_bytes, XLSX_MIMETYPE, filename)


@admin_bp.route('/export/bookings')
@login_required(UserRole.ADMIN)
def export_bookings():
    try:
        bookings = AdminService.bookings_query().all()
        excel_bytes = ExcelExportService.export_bookings(bookings)
    except Exception as e:
        logger.error("Booking export failed", exc_info=True)
        return error_response(f'Error generating export: {str(e)}', 500)

    filename = f"bookings_{datetime.utcnow():%Y%m%d}.xlsx"
    return _download(excel_bytes, XLSX_MIMETYPE, filename)


@admin_bp.route('/report')
@login_required(UserRole.ADMIN)
def platform_report():
    try:
        report = ReportingService.get_platform_report()
        pdf_bytes = ReportingService.generate_platform_report_pdf(report)
    except Exception as e:
        logger.error("Platform report failed", exc_info=True)
        return error_response(f'Error generating report: {str(e)}', 500)

    filename = f"platform_report_{datetime.utcnow():%Y%m%d}.pdf"
    return _download(pdf_bytes, 'application/pdf', filename)
