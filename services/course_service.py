"""
Course service for TutorBridge
Course catalogue browsing and tutor course management
"""

import logging

from sqlalchemy import func, or_

from database import db
from models.academic import Course
from services.notification_service import NotificationService, ActivityService
from services.review_service import ReviewService
from utils.db_helpers import (
    like_pattern, safe_add_and_commit, safe_delete_and_commit, safe_update_and_commit,
)
from utils.validators import validate_course_data

logger = logging.getLogger(__name__)


class CourseService:
    """Course service class"""

    @staticmethod
    def get_course(course_id):
        return db.session.get(Course, course_id)

    @staticmethod
    def list_courses(subject=None, search=None, tutor_id=None, published_only=True):
        """List courses, newest first, with optional filters"""
        query = Course.query
        if published_only:
            query = query.filter_by(published=True)
        if subject:
            query = query.filter(func.lower(Course.subject) == subject.strip().lower())
        if tutor_id:
            query = query.filter_by(tutor_id=tutor_id)
        if search:
            pattern = like_pattern(search.strip())
            query = query.filter(or_(
                Course.title.ilike(pattern, escape='\\'),
                Course.description.ilike(pattern, escape='\\'),
                Course.subject.ilike(pattern, escape='\\'),
            ))
        return query.order_by(Course.created_at.desc(), Course.id.desc()).all()

    @staticmethod
    def get_subjects(defaults=None):
        """Distinct subjects of published courses, or the defaults when there are none"""
        rows = (
            db.session.query(Course.subject)
            .filter(Course.published.is_(True))
            .distinct()
            .order_by(Course.subject)
            .all()
        )
        subjects = [row[0] for row in rows if row[0]]
        return subjects or list(defaults or [])

    @staticmethod
    def get_course_detail(course):
        """Course with its tutor and reviews"""
        data = course.to_dict()
        data['tutor'] = course.tutor.to_public_dict() if course.tutor else None
        data['reviews'] = [review.to_dict() for review in course.reviews]
        data['enrolled_students'] = course.get_active_enrollment_count()
        return data

    @staticmethod
    def create_course(tutor, data):
        """Create a course owned by the tutor"""
        cleaned, errors = validate_course_data(data)
        if errors:
            return False, errors, "Validation failed"

        course = Course(tutor_id=tutor.id, **cleaned)
        success, message = safe_add_and_commit(course)
        if not success:
            return False, None, message

        try:
            NotificationService.notify_admins(
                f"New course created: {course.title} by {tutor.name}",
                'course', related_id=course.id, commit=False)
            ActivityService.log(tutor.id, 'course', 'created course', course.title, commit=False)
            db.session.commit()
        except Exception:
            db.session.rollback()
            logger.error("Error recording course creation events", exc_info=True)

        logger.info("Course %s created by tutor %s", course.id, tutor.id)
        return True, course, "Course created successfully"

    @staticmethod
    def update_course(course, data, partial=False):
        """Update a course; partial=True validates only supplied fields"""
        cleaned, errors = validate_course_data(data, partial=partial)
        if errors:
            return False, errors, "Validation failed"

        for field, value in cleaned.items():
            setattr(course, field, value)

        success, message = safe_update_and_commit()
        if not success:
            return False, None, message

        logger.info("Course %s updated", course.id)
        return True, course, "Course updated successfully"

    @staticmethod
    def delete_course(course):
        """Delete a course along with its bookings, enrollments, reviews and material"""
        course_id = course.id
        tutor = course.tutor
        success, message = safe_delete_and_commit(course)
        if not success:
            return False, message

        if tutor and tutor.tutor_profile:
            # Reviews on the deleted course no longer count towards the tutor rating
            ReviewService.refresh_tutor_rating(tutor.id)
            db.session.commit()

        logger.info("Course %s deleted", course_id)
        return True, "Course deleted successfully"

    @staticmethod
    def can_manage(user, course):
        """Owners and admins may modify a course"""
        return user.is_admin or (user.is_tutor and course.tutor_id == user.id)
