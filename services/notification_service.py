"""
Notification and activity service for TutorBridge
In-app notifications and the recent-activity timeline
"""

import logging

from database import db
from models.notification import Notification, Activity
from models.user import User, UserRole
from utils.validators import strip_text

logger = logging.getLogger(__name__)


class NotificationService:
    """Notification service class"""

    @staticmethod
    def notify(user_id, message, notification_type, related_id=None, commit=True):
        """Queue a notification for one user"""
        notification = Notification(
            user_id=user_id,
            message=message,
            type=notification_type,
            related_id=related_id,
        )
        db.session.add(notification)
        if commit:
            db.session.commit()
        return notification

    @staticmethod
    def notify_admins(message, notification_type, related_id=None, commit=True):
        """Notify every active admin"""
        admins = User.query.filter_by(role=UserRole.ADMIN, is_active=True).all()
        for admin in admins:
            NotificationService.notify(admin.id, message, notification_type, related_id, commit=False)
        if commit:
            db.session.commit()
        return len(admins)

    @staticmethod
    def get_for_user(user_id, unread_only=False):
        """Own notifications, newest first"""
        query = Notification.query.filter_by(user_id=user_id)
        if unread_only:
            query = query.filter_by(is_read=False)
        return query.order_by(Notification.created_at.desc(), Notification.id.desc()).all()

    @staticmethod
    def get_unread_count(user_id):
        return Notification.query.filter_by(user_id=user_id, is_read=False).count()

    @staticmethod
    def mark_read(notification_id, user_id):
        """Mark one of the user's notifications as read"""
        notification = Notification.query.filter_by(id=notification_id, user_id=user_id).first()
        if not notification:
            return False, None, "Notification not found"

        try:
            notification.mark_read()
            db.session.commit()
            return True, notification, "Notification marked as read"
        except Exception as e:
            db.session.rollback()
            logger.error("Error marking notification %s read", notification_id, exc_info=True)
            return False, None, f"Error updating notification: {str(e)}"

    @staticmethod
    def mark_all_read(user_id):
        """Mark all of the user's notifications as read, returning the count"""
        try:
            count = (
                Notification.query
                .filter_by(user_id=user_id, is_read=False)
                .update({'is_read': True}, synchronize_session=False)
            )
            db.session.commit()
            return True, count, f"{count} notifications marked as read"
        except Exception as e:
            db.session.rollback()
            logger.error("Error marking notifications read for user %s", user_id, exc_info=True)
            return False, 0, f"Error updating notifications: {str(e)}"


class ActivityService:
    """Recent activity timeline"""

    @staticmethod
    def log(user_id, activity_type, action, target, commit=True):
        activity = Activity(user_id=user_id, type=activity_type, action=action, target=target[:200])
        db.session.add(activity)
        if commit:
            db.session.commit()
        return activity

    @staticmethod
    def get_for_user(user, limit=50):
        """Own activities; admins see everyone's"""
        query = Activity.query
        if not user.is_admin:
            query = query.filter_by(user_id=user.id)
        return query.order_by(Activity.created_at.desc(), Activity.id.desc()).limit(limit).all()

    @staticmethod
    def get_recent(limit=10):
        return (
            Activity.query
            .order_by(Activity.created_at.desc(), Activity.id.desc())
            .limit(limit)
            .all()
        )

    @staticmethod
    def record(user, data):
        """Record an activity submitted by the user"""
        errors = {}
        fields = {}
        for field in ('type', 'action', 'target'):
            value = strip_text(data.get(field))
            if not value:
                errors[field] = f"{field.capitalize()} is required"
            elif not isinstance(value, str):
                errors[field] = f"{field.capitalize()} must be text"
            else:
                fields[field] = value
        if errors:
            return False, errors, "Validation failed"

        try:
            activity = ActivityService.log(user.id, fields['type'][:50], fields['action'][:100], fields['target'])
            return True, activity, "Activity recorded"
        except Exception as e:
            db.session.rollback()
            logger.error("Error recording activity", exc_info=True)
            return False, None, f"Error recording activity: {str(e)}"
