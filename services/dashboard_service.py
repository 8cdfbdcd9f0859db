"""
Dashboard service for TutorBridge
Aggregates for the student, tutor and admin dashboards
"""

import logging
from collections import Counter
from datetime import datetime

from sqlalchemy import func

from database import db
from models.academic import Course, Enrollment
from models.booking import Booking, BookingStatus
from models.review import Review
from models.user import User, UserRole
from services.booking_service import BookingService
from services.notification_service import NotificationService

logger = logging.getLogger(__name__)

PAID_STATUSES = (BookingStatus.CONFIRMED, BookingStatus.COMPLETED)


def month_start(moment, months_back=0):
    """First instant of the month months_back months before moment's month"""
    index = moment.year * 12 + (moment.month - 1) - months_back
    return datetime(index // 12, index % 12 + 1, 1)


def percent_change(current, previous):
    """Relative change in percent, rounded to one decimal"""
    if not previous:
        return 100.0 if current else 0.0
    return round((current - previous) / previous * 100, 1)


class DashboardService:
    """Dashboard service class"""

    @staticmethod
    def get_student_dashboard(student):
        bookings = BookingService.get_bookings_for_user(student)
        return {
            'bookings': [booking.to_dict(include_related=True) for booking in bookings],
            'notifications': [n.to_dict() for n in NotificationService.get_for_user(student.id)],
            'unread_notifications': NotificationService.get_unread_count(student.id),
        }

    @staticmethod
    def get_student_courses(student):
        """Courses the student holds a confirmed booking for"""
        bookings = (
            Booking.query
            .filter_by(student_id=student.id, status=BookingStatus.CONFIRMED)
            .order_by(Booking.booking_time.desc())
            .all()
        )

        courses = []
        seen = set()
        for booking in bookings:
            course = booking.course
            if course is None or course.id in seen:
                continue
            seen.add(course.id)

            review = Review.query.filter_by(course_id=course.id, student_id=student.id).first()
            data = course.to_dict()
            data['booking'] = {
                'id': booking.id,
                'status': booking.status,
                'booking_time': booking.booking_time.isoformat() if booking.booking_time else None,
                'session_date': booking.session_date.isoformat() if booking.session_date else None,
            }
            data['tutor'] = course.tutor.to_summary() if course.tutor else None
            data['review'] = review.to_dict() if review else None
            courses.append(data)
        return courses

    @staticmethod
    def get_tutor_dashboard(tutor):
        courses = Course.query.filter_by(tutor_id=tutor.id).order_by(Course.created_at.desc()).all()

        course_data = []
        total_bookings = pending = confirmed = total_reviews = 0
        rating_sum = 0
        for course in courses:
            data = course.to_dict()
            data['bookings'] = [booking.to_dict(include_related=True) for booking in course.bookings]
            course_data.append(data)

            total_bookings += len(course.bookings)
            pending += sum(1 for b in course.bookings if b.status == BookingStatus.PENDING)
            confirmed += sum(1 for b in course.bookings if b.status == BookingStatus.CONFIRMED)
            total_reviews += len(course.reviews)
            rating_sum += sum(review.rating for review in course.reviews)

        return {
            'courses': course_data,
            'stats': {
                'total_courses': len(courses),
                'total_bookings': total_bookings,
                'pending_bookings': pending,
                'confirmed_bookings': confirmed,
                'total_reviews': total_reviews,
                'average_rating': round(rating_sum / total_reviews, 1) if total_reviews else 0,
            },
            'notifications': [n.to_dict() for n in NotificationService.get_for_user(tutor.id)],
            'unread_notifications': NotificationService.get_unread_count(tutor.id),
        }

    @staticmethod
    def _completion_rate(before=None):
        query = Enrollment.query
        if before is not None:
            query = query.filter(Enrollment.enrollment_date < before)
        total = query.count()
        if not total:
            return 0.0
        completed = query.filter(Enrollment.status == 'completed').count()
        return round(completed / total * 100, 1)

    @staticmethod
    def _revenue(before=None):
        query = (
            db.session.query(func.coalesce(func.sum(Course.price), 0))
            .select_from(Booking)
            .join(Course, Booking.course_id == Course.id)
            .filter(Booking.status.in_(PAID_STATUSES))
        )
        if before is not None:
            query = query.filter(Booking.booking_time < before)
        return round(float(query.scalar() or 0), 2)

    @staticmethod
    def get_admin_stats(now=None):
        """Headline figures, each compared with where it stood at the start of this month"""
        now = now or datetime.utcnow()
        cutoff = month_start(now)

        students = User.query.filter_by(role=UserRole.STUDENT)
        student_count = students.count()
        prev_student_count = students.filter(User.created_at < cutoff).count()

        published = Course.query.filter_by(published=True)
        course_count = published.count()
        prev_course_count = published.filter(Course.created_at < cutoff).count()

        revenue = DashboardService._revenue()
        prev_revenue = DashboardService._revenue(before=cutoff)

        completion = DashboardService._completion_rate()
        prev_completion = DashboardService._completion_rate(before=cutoff)

        return {
            'total_students': {
                'current': student_count,
                'change_percent': percent_change(student_count, prev_student_count),
            },
            'active_courses': {
                'current': course_count,
                'change_percent': percent_change(course_count, prev_course_count),
            },
            'revenue': {
                'current': revenue,
                'change_percent': percent_change(revenue, prev_revenue),
            },
            'completion_rate': {
                'current': completion,
                'change_percent': percent_change(completion, prev_completion),
            },
        }

    @staticmethod
    def get_enrollment_trend(now=None, months=12):
        """Monthly enrollment and booking counts, oldest month first"""
        now = now or datetime.utcnow()
        trend = []
        for offset in range(months - 1, -1, -1):
            start = month_start(now, offset)
            end = month_start(now, offset - 1)
            enrollments = Enrollment.query.filter(
                Enrollment.enrollment_date >= start, Enrollment.enrollment_date < end).count()
            bookings = Booking.query.filter(
                Booking.booking_time >= start, Booking.booking_time < end).count()
            trend.append({
                'month': start.strftime('%b'),
                'year': start.year,
                'enrollments': enrollments,
                'bookings': bookings,
            })

        peak = max((item['enrollments'] + item['bookings'] for item in trend), default=0)
        for item in trend:
            total = item['enrollments'] + item['bookings']
            item['height'] = f"{round(total / peak * 100)}%" if peak else '0%'
        return trend

    @staticmethod
    def get_popular_courses(limit=5):
        """Courses with the most distinct students (enrolled or booked)"""
        courses = Course.query.all()
        counts = []
        for course in courses:
            students = {e.student_id for e in course.enrollments if e.status != 'dropped'}
            students.update(b.student_id for b in course.bookings if b.status in BookingStatus.OPEN
                            or b.status == BookingStatus.COMPLETED)
            if students:
                counts.append((course, len(students)))

        counts.sort(key=lambda item: (item[1], item[0].average_rating or 0), reverse=True)
        top = counts[:limit]
        total = sum(count for _, count in top)
        return [
            {
                'id': course.id,
                'title': course.title,
                'subject': course.subject,
                'student_count': count,
                'percentage': round(count / total * 100) if total else 0,
            }
            for course, count in top
        ]

    @staticmethod
    def get_platform_statistics():
        """Totals shown on the admin dashboard and in the PDF report"""
        return {
            'total_students': User.query.filter_by(role=UserRole.STUDENT).count(),
            'total_tutors': User.query.filter_by(role=UserRole.TUTOR).count(),
            'total_courses': Course.query.count(),
            'total_bookings': Booking.query.count(),
            'confirmed_bookings': Booking.query.filter_by(status=BookingStatus.CONFIRMED).count(),
            'pending_bookings': Booking.query.filter_by(status=BookingStatus.PENDING).count(),
            'total_enrollments': Enrollment.query.count(),
            'total_reviews': Review.query.count(),
        }

    @staticmethod
    def _share(names):
        """Percentage share of each name, largest first"""
        counts = Counter(names)
        total = sum(counts.values())
        return [
            {'name': name, 'value': round(count / total * 100, 1)}
            for name, count in counts.most_common()
        ]

    @staticmethod
    def get_student_analytics(now=None, months=12):
        """Student totals, enrollment status mix and monthly average progress"""
        now = now or datetime.utcnow()
        students = User.query.filter_by(role=UserRole.STUDENT)
        active_ids = (
            db.session.query(Enrollment.student_id)
            .filter(Enrollment.status == 'active')
        )

        performance = []
        for offset in range(months - 1, -1, -1):
            start = month_start(now, offset)
            end = month_start(now, offset - 1)
            average = (
                db.session.query(func.avg(Enrollment.progress))
                .filter(Enrollment.enrollment_date >= start, Enrollment.enrollment_date < end)
                .scalar()
            )
            performance.append({
                'month': start.strftime('%b'),
                'year': start.year,
                'average': round(float(average), 1) if average is not None else 0,
            })

        statuses = db.session.query(Enrollment.status).all()
        return {
            'total_students': students.count(),
            'active_students': students.filter(User.id.in_(active_ids)).count(),
            'new_students': students.filter(User.created_at >= month_start(now)).count(),
            'completion_rate': DashboardService._completion_rate(),
            'by_status': DashboardService._share(status for (status,) in statuses),
            'performance': performance,
        }

    @staticmethod
    def get_course_analytics(now=None):
        """Course totals, category and level mix, popular courses and enrollment trend"""
        courses = Course.query.all()
        enrollments = Enrollment.query.filter(Enrollment.status != 'dropped').all()
        completed_course_ids = {e.course_id for e in enrollments if e.status == 'completed'}

        average_completion = (
            round(sum(e.progress for e in enrollments) / len(enrollments), 1) if enrollments else 0
        )
        return {
            'total_courses': len(courses),
            'active_courses': sum(1 for course in courses if course.published),
            'completed_courses': len(completed_course_ids),
            'average_completion': average_completion,
            'by_category': DashboardService._share(course.category or 'Other' for course in courses),
            'by_level': DashboardService._share(course.level or 'Unspecified' for course in courses),
            'popular_courses': [
                {'name': item['title'], 'students': item['student_count']}
                for item in DashboardService.get_popular_courses(limit=5)
            ],
            'enrollment_trend': [
                {'month': item['month'], 'year': item['year'], 'value': item['enrollments']}
                for item in DashboardService.get_enrollment_trend(now=now)
            ],
        }
