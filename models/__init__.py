"""
Database models package for TutorBridge
"""

from .user import User, UserRole, TutorProfile
from .academic import Course, Enrollment
from .booking import Booking, BookingStatus
from .review import Review
from .notification import Notification, Activity
from .assignments import Assignment, Content, Video

__all__ = [
    'User', 'UserRole', 'TutorProfile', 'Course', 'Enrollment',
    'Booking', 'BookingStatus', 'Review', 'Notification', 'Activity',
    'Assignment', 'Content', 'Video'
]
