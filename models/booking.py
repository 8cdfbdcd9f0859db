"""
Booking models for TutorBridge
A booking is a scheduled session between a student and the tutor of a course
"""

from database import db
from datetime import datetime, timedelta


class BookingStatus:
    """Allowed booking status values"""
    PENDING = 'Pending'
    CONFIRMED = 'Confirmed'
    REJECTED = 'Rejected'
    COMPLETED = 'Completed'
    CANCELLED = 'Cancelled'

    ALL = (PENDING, CONFIRMED, REJECTED, COMPLETED, CANCELLED)
    OPEN = (PENDING, CONFIRMED)

    ALIASES = {
        'pending': PENDING,
        'confirmed': CONFIRMED,
        'accepted': CONFIRMED,
        'rejected': REJECTED,
        'completed': COMPLETED,
        'cancelled': CANCELLED,
        'canceled': CANCELLED,
    }

    @classmethod
    def normalize(cls, value):
        if value is None:
            return None
        return cls.ALIASES.get(str(value).strip().lower())


class Booking(db.Model):
    """Booking of a course session by a student"""
    __tablename__ = 'bookings'

    id = db.Column(db.Integer, primary_key=True)
    course_id = db.Column(db.Integer, db.ForeignKey('courses.id', ondelete='CASCADE'), nullable=False, index=True)
    student_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    tutor_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    status = db.Column(db.String(20), nullable=False, default=BookingStatus.PENDING)
    booking_time = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    session_date = db.Column(db.DateTime, nullable=True)
    notes = db.Column(db.Text, nullable=True)

    student = db.relationship('User', foreign_keys=[student_id],
                              backref=db.backref('bookings_made', lazy='dynamic'))
    tutor = db.relationship('User', foreign_keys=[tutor_id],
                            backref=db.backref('bookings_received', lazy='dynamic'))

    def is_open(self):
        """Pending or confirmed bookings block a duplicate booking"""
        return self.status in BookingStatus.OPEN

    def get_end_time(self, default_minutes=60):
        """Session end derived from the course duration"""
        if not self.session_date:
            return None
        minutes = self.course.duration if self.course and self.course.duration else default_minutes
        return self.session_date + timedelta(minutes=minutes)

    def involves(self, user_id):
        return user_id in (self.student_id, self.tutor_id)

    def to_dict(self, include_related=False):
        """Convert booking to dictionary"""
        data = {
            'id': self.id,
            'course_id': self.course_id,
            'student_id': self.student_id,
            'tutor_id': self.tutor_id,
            'status': self.status,
            'booking_time': self.booking_time.isoformat() if self.booking_time else None,
            'session_date': self.session_date.isoformat() if self.session_date else None,
            'notes': self.notes,
        }
        if include_related:
            data['course'] = {
                'id': self.course.id,
                'title': self.course.title,
                'subject': self.course.subject,
                'price': self.course.price,
                'duration': self.course.duration,
            } if self.course else None
            data['student'] = self.student.to_summary() if self.student else None
            data['tutor'] = self.tutor.to_summary() if self.tutor else None
        return data

    def to_session_dict(self, default_minutes=60):
        """Render a booking as a tutoring session for the dashboards"""
        end_time = self.get_end_time(default_minutes)
        return {
            'id': self.id,
            'booking_id': self.id,
            'tutor_id': self.tutor_id,
            'tutor_name': self.tutor.name if self.tutor else None,
            'tutor_avatar_url': self.tutor.profile_image if self.tutor else None,
            'student_id': self.student_id,
            'student_name': self.student.name if self.student else None,
            'subject': self.course.subject if self.course else None,
            'topic': self.course.title if self.course else None,
            'start_time': self.session_date.isoformat() if self.session_date else None,
            'end_time': end_time.isoformat() if end_time else None,
            'status': self.status,
        }

    def __repr__(self):
        return f'<Booking {self.id} course={self.course_id} {self.status}>'
