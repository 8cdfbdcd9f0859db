"""
Course catalogue models for TutorBridge
Course and Enrollment models
"""

from database import db
from datetime import datetime


class Course(db.Model):
    """Course offered by a tutor"""
    __tablename__ = 'courses'

    id = db.Column(db.Integer, primary_key=True)
    tutor_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=False)
    subject = db.Column(db.String(100), nullable=False, index=True)
    category = db.Column(db.String(100), nullable=True)
    level = db.Column(db.String(50), nullable=True)
    price = db.Column(db.Float, nullable=False, default=0)
    duration = db.Column(db.Integer, nullable=False, default=60)  # minutes
    max_students = db.Column(db.Integer, nullable=True)
    average_rating = db.Column(db.Float, default=0)
    published = db.Column(db.Boolean, default=True, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    # Relationships
    bookings = db.relationship('Booking', backref='course', cascade='all, delete-orphan',
                               passive_deletes=True)
    enrollments = db.relationship('Enrollment', backref='course', cascade='all, delete-orphan',
                                  passive_deletes=True)
    reviews = db.relationship('Review', backref='course', cascade='all, delete-orphan',
                              passive_deletes=True, order_by='Review.created_at.desc()')
    assignments = db.relationship('Assignment', backref='course', cascade='all, delete-orphan',
                                  passive_deletes=True)
    contents = db.relationship('Content', backref='course', cascade='all, delete-orphan',
                               passive_deletes=True)
    videos = db.relationship('Video', backref='course', cascade='all, delete-orphan',
                             passive_deletes=True)

    def get_active_enrollment_count(self):
        """Count of enrollments still occupying a seat"""
        return sum(1 for enrollment in self.enrollments if enrollment.status == 'active')

    def is_full(self):
        """Whether the course has reached max_students"""
        if not self.max_students:
            return False
        return self.get_active_enrollment_count() >= self.max_students

    def get_review_count(self):
        return len(self.reviews)

    def calculate_average_rating(self):
        """Average of all review ratings, rounded to one decimal"""
        if not self.reviews:
            return 0
        return round(sum(review.rating for review in self.reviews) / len(self.reviews), 1)

    def to_dict(self):
        """Convert course to dictionary"""
        return {
            'id': self.id,
            'tutor_id': self.tutor_id,
            'tutor_name': self.tutor.name if self.tutor else 'Unknown Tutor',
            'title': self.title,
            'description': self.description,
            'subject': self.subject,
            'category': self.category,
            'level': self.level,
            'price': self.price,
            'duration': self.duration,
            'max_students': self.max_students,
            'average_rating': round(self.average_rating or 0, 1),
            'review_count': self.get_review_count(),
            'published': self.published,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f'<Course {self.id}: {self.title}>'


class Enrollment(db.Model):
    """Student enrollment in a course"""
    __tablename__ = 'enrollments'

    STATUSES = ('active', 'completed', 'dropped')

    id = db.Column(db.Integer, primary_key=True)
    course_id = db.Column(db.Integer, db.ForeignKey('courses.id', ondelete='CASCADE'), nullable=False)
    student_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    enrollment_date = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    status = db.Column(db.String(20), default='active', nullable=False)
    progress = db.Column(db.Integer, default=0, nullable=False)

    student = db.relationship('User', backref=db.backref('enrollments', lazy='dynamic'))

    # One enrollment per student per course
    __table_args__ = (db.UniqueConstraint('course_id', 'student_id', name='unique_course_student_enrollment'),)

    def to_dict(self, include_course=False):
        """Convert enrollment to dictionary"""
        data = {
            'id': self.id,
            'course_id': self.course_id,
            'student_id': self.student_id,
            'student_name': self.student.name if self.student else None,
            'enrollment_date': self.enrollment_date.isoformat() if self.enrollment_date else None,
            'status': self.status,
            'progress': self.progress,
        }
        if include_course:
            data['course'] = self.course.to_dict() if self.course else None
        return data

    def __repr__(self):
        return f'<Enrollment student={self.student_id} course={self.course_id}>'
