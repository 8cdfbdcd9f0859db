"""
Review model for TutorBridge
"""

from database import db
from datetime import datetime


class Review(db.Model):
    """Student review of a course and its tutor"""
    __tablename__ = 'reviews'

    id = db.Column(db.Integer, primary_key=True)
    course_id = db.Column(db.Integer, db.ForeignKey('courses.id', ondelete='CASCADE'), nullable=False, index=True)
    tutor_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    student_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    rating = db.Column(db.Integer, nullable=False)
    comment = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    student = db.relationship('User', foreign_keys=[student_id])
    tutor = db.relationship('User', foreign_keys=[tutor_id])

    # A student reviews a course at most once
    __table_args__ = (db.UniqueConstraint('course_id', 'student_id', name='unique_course_student_review'),)

    def to_dict(self):
        """Convert review to dictionary"""
        return {
            'id': self.id,
            'course_id': self.course_id,
            'tutor_id': self.tutor_id,
            'student_id': self.student_id,
            'student_name': self.student.name if self.student else 'Unknown Student',
            'rating': self.rating,
            'comment': self.comment,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f'<Review {self.rating}/5 course={self.course_id}>'
