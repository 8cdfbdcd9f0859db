"""
Booking service for TutorBridge
Session bookings between students and tutors, and the session views built on them
"""

import logging
from datetime import datetime

from database import db
from models.academic import Course
from models.booking import Booking, BookingStatus
from services.notification_service import NotificationService, ActivityService
from utils.db_helpers import safe_delete_and_commit
from utils.validators import parse_datetime, strip_text

logger = logging.getLogger(__name__)


class BookingService:
    """Booking service class"""

    # Statuses each side of a booking may set
    STUDENT_STATUSES = (BookingStatus.CANCELLED,)
    TUTOR_STATUSES = BookingStatus.ALL

    @staticmethod
    def get_booking(booking_id):
        return db.session.get(Booking, booking_id)

    @staticmethod
    def get_bookings_for_user(user):
        """Role-scoped bookings: own for students, received for tutors, all for admins"""
        query = Booking.query
        if user.is_student:
            query = query.filter_by(student_id=user.id)
        elif user.is_tutor:
            query = query.filter_by(tutor_id=user.id)
        return query.order_by(Booking.booking_time.desc(), Booking.id.desc()).all()

    @staticmethod
    def can_view(user, booking):
        return user.is_admin or booking.involves(user.id)

    @staticmethod
    def has_open_booking(student_id, course_id, exclude_id=None):
        """Whether the student already holds a pending or confirmed booking"""
        query = Booking.query.filter(
            Booking.student_id == student_id,
            Booking.course_id == course_id,
            Booking.status.in_(BookingStatus.OPEN),
        )
        if exclude_id is not None:
            query = query.filter(Booking.id != exclude_id)
        return query.first() is not None

    @staticmethod
    def create_booking(student, course, data):
        """Book a course session for a student; the caller checks the course exists"""
        if BookingService.has_open_booking(student.id, course.id):
            return False, None, "You have already booked this course"

        try:
            session_date = parse_datetime(data.get('session_date'))
        except (ValueError, TypeError):
            return False, {'session_date': "Session date must be an ISO-8601 date"}, "Invalid session date"

        try:
            booking = Booking(
                course_id=course.id,
                student_id=student.id,
                tutor_id=course.tutor_id,
                status=BookingStatus.PENDING,
                session_date=session_date,
                notes=str(strip_text(data.get('notes'))) or None,
            )
            db.session.add(booking)
            db.session.flush()

            NotificationService.notify(
                course.tutor_id,
                f"New booking request from {student.name} for {course.title}",
                'booking', related_id=booking.id, commit=False)
            NotificationService.notify(
                student.id,
                f"Your booking for {course.title} has been submitted",
                'booking', related_id=booking.id, commit=False)
            ActivityService.log(student.id, 'booking', 'booked course', course.title, commit=False)
            db.session.commit()

            logger.info("Booking %s created: student %s course %s", booking.id, student.id, course.id)
            return True, booking, "Booking created successfully"

        except Exception as e:
            db.session.rollback()
            logger.error("Error creating booking", exc_info=True)
            return False, None, f"Error creating booking: {str(e)}"

    @staticmethod
    def allowed_statuses(user, booking):
        """Statuses the user may move this booking to"""
        if user.is_admin:
            return BookingStatus.ALL
        if user.id == booking.tutor_id:
            return BookingService.TUTOR_STATUSES
        if user.id == booking.student_id:
            return BookingService.STUDENT_STATUSES
        return ()

    @staticmethod
    def update_status(booking, status, session_date=None, actor=None):
        """Move a booking to a new (already authorised) status"""
        canonical = BookingStatus.normalize(status)
        if canonical is None:
            return False, None, f"Status must be one of: {', '.join(BookingStatus.ALL)}"

        previous = booking.status
        if canonical in BookingStatus.OPEN and previous not in BookingStatus.OPEN \
                and BookingService.has_open_booking(booking.student_id, booking.course_id,
                                                    exclude_id=booking.id):
            return False, None, "The student already has an open booking for this course"

        # Only the tutor or an admin may schedule, and only when confirming
        may_schedule = canonical == BookingStatus.CONFIRMED and actor is not None \
            and (actor.is_admin or actor.id == booking.tutor_id)
        if may_schedule and session_date not in (None, ''):
            try:
                booking.session_date = parse_datetime(session_date)
            except (ValueError, TypeError):
                return False, None, "Session date must be an ISO-8601 date"

        booking.status = canonical

        try:
            course_title = booking.course.title if booking.course else 'your course'
            if canonical != previous:
                if canonical == BookingStatus.CONFIRMED:
                    NotificationService.notify(
                        booking.student_id,
                        f"Your booking for {course_title} has been confirmed",
                        'confirmation', related_id=booking.id, commit=False)
                elif canonical == BookingStatus.REJECTED:
                    NotificationService.notify(
                        booking.student_id,
                        f"Your booking for {course_title} was rejected",
                        'booking', related_id=booking.id, commit=False)
                elif canonical == BookingStatus.CANCELLED and actor is not None \
                        and actor.id == booking.student_id:
                    NotificationService.notify(
                        booking.tutor_id,
                        f"{actor.name} cancelled their booking for {course_title}",
                        'booking', related_id=booking.id, commit=False)

            if actor is not None:
                ActivityService.log(actor.id, 'booking', f"marked booking {canonical.lower()}",
                                    course_title, commit=False)
            db.session.commit()

            logger.info("Booking %s status %s -> %s", booking.id, previous, canonical)
            return True, booking, f"Booking {canonical.lower()} successfully"

        except Exception as e:
            db.session.rollback()
            logger.error("Error updating booking %s", booking.id, exc_info=True)
            return False, None, f"Error updating booking: {str(e)}"

    @staticmethod
    def can_delete(user, booking):
        """Admins, or the student while the booking is still pending"""
        if user.is_admin:
            return True
        return user.id == booking.student_id and booking.status == BookingStatus.PENDING

    @staticmethod
    def delete_booking(booking):
        booking_id = booking.id
        success, message = safe_delete_and_commit(booking)
        if success:
            logger.info("Booking %s deleted", booking_id)
            return True, "Booking deleted successfully"
        return False, message

    @staticmethod
    def _participant_query(user):
        query = Booking.query.join(Course, Booking.course_id == Course.id)
        if user.is_tutor:
            return query.filter(Booking.tutor_id == user.id)
        if user.is_admin:
            return query
        return query.filter(Booking.student_id == user.id)

    @staticmethod
    def get_upcoming_sessions(user, now=None):
        """Confirmed bookings with a session date still ahead, soonest first"""
        now = now or datetime.utcnow()
        return (
            BookingService._participant_query(user)
            .filter(Booking.status == BookingStatus.CONFIRMED,
                    Booking.session_date.isnot(None),
                    Booking.session_date >= now)
            .order_by(Booking.session_date.asc())
            .all()
        )

    @staticmethod
    def get_past_sessions(user, now=None):
        """Completed bookings and confirmed ones whose date has passed, latest first"""
        now = now or datetime.utcnow()
        bookings = (
            BookingService._participant_query(user)
            .filter(Booking.status.in_((BookingStatus.COMPLETED, BookingStatus.CONFIRMED)))
            .all()
        )
        past = [
            booking for booking in bookings
            if booking.status == BookingStatus.COMPLETED
            or (booking.session_date is not None and booking.session_date < now)
        ]
        return sorted(past, key=lambda b: b.session_date or b.booking_time, reverse=True)

    @staticmethod
    def get_user_stats(user, default_minutes=60, now=None):
        """Tutoring hours and session counts for the caller"""
        past = BookingService.get_past_sessions(user, now=now)
        upcoming = BookingService.get_upcoming_sessions(user, now=now)

        total_minutes = 0
        for booking in past:
            duration = booking.course.duration if booking.course and booking.course.duration \
                else default_minutes
            total_minutes += duration

        return {
            'total_hours': round(total_minutes / 60, 1),
            'completed_sessions': len(past),
            'upcoming_sessions': len(upcoming),
        }
