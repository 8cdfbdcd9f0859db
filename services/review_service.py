"""
Review service for TutorBridge
Course reviews and rating aggregation
"""

import logging

from sqlalchemy import func

from database import db
from models.academic import Course, Enrollment
from models.booking import Booking, BookingStatus
from models.review import Review
from models.user import TutorProfile
from services.notification_service import NotificationService, ActivityService
from utils.validators import strip_text, validate_rating

logger = logging.getLogger(__name__)

REVIEWABLE_BOOKING_STATUSES = (BookingStatus.CONFIRMED, BookingStatus.COMPLETED)
REVIEWABLE_ENROLLMENT_STATUSES = ('active', 'completed')


class ReviewService:
    """Review service class"""

    @staticmethod
    def get_review(review_id):
        return db.session.get(Review, review_id)

    @staticmethod
    def get_course_reviews(course_id):
        return (
            Review.query
            .filter_by(course_id=course_id)
            .order_by(Review.created_at.desc(), Review.id.desc())
            .all()
        )

    @staticmethod
    def is_eligible(student_id, course_id):
        """A student may review a course they attended or are enrolled in"""
        has_booking = Booking.query.filter(
            Booking.student_id == student_id,
            Booking.course_id == course_id,
            Booking.status.in_(REVIEWABLE_BOOKING_STATUSES),
        ).first() is not None
        if has_booking:
            return True

        return Enrollment.query.filter(
            Enrollment.student_id == student_id,
            Enrollment.course_id == course_id,
            Enrollment.status.in_(REVIEWABLE_ENROLLMENT_STATUSES),
        ).first() is not None

    @staticmethod
    def has_reviewed(student_id, course_id):
        return Review.query.filter_by(student_id=student_id, course_id=course_id).first() is not None

    @staticmethod
    def refresh_course_rating(course):
        """Recompute the course average from its reviews (no commit)"""
        average = (
            db.session.query(func.avg(Review.rating))
            .filter(Review.course_id == course.id)
            .scalar()
        )
        course.average_rating = round(float(average), 1) if average is not None else 0
        return course.average_rating

    @staticmethod
    def refresh_tutor_rating(tutor_id):
        """Recompute the tutor profile rating across all their reviews (no commit)"""
        profile = TutorProfile.query.filter_by(user_id=tutor_id).first()
        if not profile:
            return None

        average, count = (
            db.session.query(func.avg(Review.rating), func.count(Review.id))
            .filter(Review.tutor_id == tutor_id)
            .one()
        )
        profile.rating = round(float(average), 1) if average is not None else 0
        profile.review_count = count or 0
        return profile.rating

    @staticmethod
    def create_review(student, course, rating, comment=None):
        """Create a review; eligibility is checked by the caller"""
        is_valid, message = validate_rating(rating)
        if not is_valid:
            return False, {'rating': message}, message

        if ReviewService.has_reviewed(student.id, course.id):
            return False, None, "You have already reviewed this course"

        try:
            review = Review(
                course_id=course.id,
                tutor_id=course.tutor_id,
                student_id=student.id,
                rating=int(float(rating)),
                comment=str(strip_text(comment)) or None,
            )
            db.session.add(review)
            db.session.flush()

            ReviewService.refresh_course_rating(course)
            ReviewService.refresh_tutor_rating(course.tutor_id)

            NotificationService.notify(
                course.tutor_id,
                f"{student.name} left a {review.rating}-star review on {course.title}",
                'review', related_id=review.id, commit=False)
            ActivityService.log(student.id, 'review', 'reviewed course', course.title, commit=False)
            db.session.commit()

            logger.info("Review %s created for course %s", review.id, course.id)
            return True, review, "Review submitted successfully"

        except Exception as e:
            db.session.rollback()
            logger.error("Error creating review", exc_info=True)
            return False, None, f"Error creating review: {str(e)}"

    @staticmethod
    def delete_review(review):
        """Delete a review and recompute the affected ratings"""
        course = db.session.get(Course, review.course_id)
        tutor_id = review.tutor_id

        try:
            db.session.delete(review)
            db.session.flush()
            if course:
                # Drop the stale collection so the recount sees the deletion
                db.session.expire(course, ['reviews'])
                ReviewService.refresh_course_rating(course)
            ReviewService.refresh_tutor_rating(tutor_id)
            db.session.commit()
            return True, "Review deleted successfully"

        except Exception as e:
            db.session.rollback()
            logger.error("Error deleting review %s", review.id, exc_info=True)
            return False, f"Error deleting review: {str(e)}"
