"""
Enrollment service for TutorBridge
"""

import logging

from database import db
from models.academic import Course, Enrollment
from services.notification_service import NotificationService, ActivityService
from utils.db_helpers import safe_delete_and_commit
from utils.validators import validate_progress

logger = logging.getLogger(__name__)


class EnrollmentService:
    """Enrollment service class"""

    @staticmethod
    def get_enrollment(enrollment_id):
        return db.session.get(Enrollment, enrollment_id)

    @staticmethod
    def get_enrollments_for_user(user):
        """Own enrollments for students, enrollments on own courses for tutors, all for admins"""
        query = Enrollment.query
        if user.is_student:
            query = query.filter(Enrollment.student_id == user.id)
        elif user.is_tutor:
            query = query.join(Course, Enrollment.course_id == Course.id).filter(Course.tutor_id == user.id)
        return query.order_by(Enrollment.enrollment_date.desc(), Enrollment.id.desc()).all()

    @staticmethod
    def enroll(student, course):
        """Enroll a student in a course"""
        existing = Enrollment.query.filter_by(student_id=student.id, course_id=course.id).first()
        if existing and existing.status != 'dropped':
            return False, None, "Already enrolled in this course"

        if course.is_full():
            return False, None, "Course is full"

        try:
            if existing:
                # Re-enrolling after a drop reuses the row (unique per course/student)
                enrollment = existing
                enrollment.status = 'active'
                enrollment.progress = 0
            else:
                enrollment = Enrollment(student_id=student.id, course_id=course.id)
                db.session.add(enrollment)
            db.session.flush()

            NotificationService.notify(
                course.tutor_id,
                f"{student.name} enrolled in {course.title}",
                'enrollment', related_id=enrollment.id, commit=False)
            ActivityService.log(student.id, 'enrollment', 'enrolled in', course.title, commit=False)
            db.session.commit()

            logger.info("Student %s enrolled in course %s", student.id, course.id)
            return True, enrollment, "Enrolled successfully"

        except Exception as e:
            db.session.rollback()
            logger.error("Error creating enrollment", exc_info=True)
            return False, None, f"Error creating enrollment: {str(e)}"

    @staticmethod
    def can_modify(user, enrollment):
        if user.is_admin or user.id == enrollment.student_id:
            return True
        return user.is_tutor and enrollment.course is not None and enrollment.course.tutor_id == user.id

    @staticmethod
    def update_enrollment(enrollment, data):
        """Update progress and/or status"""
        errors = {}

        if 'progress' in data:
            is_valid, message = validate_progress(data['progress'])
            if is_valid:
                enrollment.progress = int(float(data['progress']))
            else:
                errors['progress'] = message

        if 'status' in data:
            status = str(data['status'] or '').strip().lower()
            if status == 'active' and enrollment.status != 'active' and enrollment.course.is_full():
                db.session.rollback()
                return False, None, "Course is full"
            if status in Enrollment.STATUSES:
                enrollment.status = status
            else:
                errors['status'] = f"Status must be one of: {', '.join(Enrollment.STATUSES)}"

        if errors:
            db.session.rollback()
            return False, errors, "Validation failed"

        # Finishing the material completes the enrollment
        if enrollment.progress == 100 and enrollment.status == 'active':
            enrollment.status = 'completed'

        try:
            db.session.commit()
            return True, enrollment, "Enrollment updated successfully"
        except Exception as e:
            db.session.rollback()
            logger.error("Error updating enrollment %s", enrollment.id, exc_info=True)
            return False, None, f"Error updating enrollment: {str(e)}"

    @staticmethod
    def can_delete(user, enrollment):
        return user.is_admin or user.id == enrollment.student_id

    @staticmethod
    def delete_enrollment(enrollment):
        enrollment_id = enrollment.id
        success, message = safe_delete_and_commit(enrollment)
        if success:
            logger.info("Enrollment %s deleted", enrollment_id)
            return True, "Enrollment removed successfully"
        return False, message
