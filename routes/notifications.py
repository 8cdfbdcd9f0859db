"""
Notification routes for TutorBridge
"""

from flask import Blueprint, g, jsonify, request

from routes.auth import login_required
from services.notification_service import NotificationService
from utils.request_helpers import error_response, success_response

notifications_bp = Blueprint('notifications', __name__)


@notifications_bp.route('/api/notifications')
@login_required()
def list_notifications():
    unread_only = request.args.get('unread_only', '').lower() in ('1', 'true', 'yes')
    notifications = NotificationService.get_for_user(g.current_user.id, unread_only=unread_only)
    return jsonify([notification.to_dict() for notification in notifications])


@notifications_bp.route('/api/notifications/<int:notification_id>/read', methods=['PATCH'])
@login_required()
def mark_notification_read(notification_id):
    success, notification, message = NotificationService.mark_read(notification_id, g.current_user.id)
    if not success:
        return error_response(message, 404 if message == 'Notification not found' else 500)
    return success_response(message, notification=notification.to_dict())


@notifications_bp.route('/api/notifications/read-all', methods=['POST'])
@login_required()
def mark_all_notifications_read():
    success, count, message = NotificationService.mark_all_read(g.current_user.id)
    if not success:
        return error_response(message, 500)
    return success_response(message, count=count)
