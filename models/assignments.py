"""
Learning material models for TutorBridge
Assignment, Content (library files) and Video lesson models
"""

from database import db
from datetime import datetime


class Assignment(db.Model):
    """Assignment attached to a course"""
    __tablename__ = 'assignments'

    id = db.Column(db.Integer, primary_key=True)
    course_id = db.Column(db.Integer, db.ForeignKey('courses.id', ondelete='CASCADE'), nullable=False, index=True)
    title = db.Column(db.String(200), nullable=False)
    due_date = db.Column(db.DateTime, nullable=False)
    points = db.Column(db.Integer, nullable=False, default=100)
    status = db.Column(db.String(20), nullable=False, default='active')
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def is_overdue(self, now=None):
        now = now or datetime.utcnow()
        return self.status == 'active' and self.due_date < now

    def to_dict(self):
        """Convert assignment to dictionary"""
        return {
            'id': self.id,
            'course_id': self.course_id,
            'course_title': self.course.title if self.course else None,
            'title': self.title,
            'due_date': self.due_date.isoformat() if self.due_date else None,
            'points': self.points,
            'status': self.status,
            'is_overdue': self.is_overdue(),
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f'<Assignment {self.title}>'


class Content(db.Model):
    """Item in a course's content library"""
    __tablename__ = 'contents'

    id = db.Column(db.Integer, primary_key=True)
    course_id = db.Column(db.Integer, db.ForeignKey('courses.id', ondelete='CASCADE'), nullable=False, index=True)
    uploaded_by = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    title = db.Column(db.String(200), nullable=False)
    type = db.Column(db.String(50), nullable=False)
    size = db.Column(db.String(50), nullable=False)
    upload_date = db.Column(db.DateTime, default=datetime.utcnow)

    uploader = db.relationship('User', foreign_keys=[uploaded_by])

    def to_dict(self):
        return {
            'id': self.id,
            'course_id': self.course_id,
            'uploaded_by': self.uploaded_by,
            'uploader_name': self.uploader.name if self.uploader else None,
            'title': self.title,
            'type': self.type,
            'size': self.size,
            'upload_date': self.upload_date.isoformat() if self.upload_date else None,
        }

    def __repr__(self):
        return f'<Content {self.title}>'


class Video(db.Model):
    """Recorded video lesson"""
    __tablename__ = 'videos'

    id = db.Column(db.Integer, primary_key=True)
    course_id = db.Column(db.Integer, db.ForeignKey('courses.id', ondelete='CASCADE'), nullable=False, index=True)
    instructor_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    title = db.Column(db.String(200), nullable=False)
    duration = db.Column(db.String(20), nullable=False)
    views = db.Column(db.Integer, nullable=False, default=0)
    thumbnail_url = db.Column(db.String(500), nullable=False)
    upload_date = db.Column(db.DateTime, default=datetime.utcnow)

    instructor = db.relationship('User', foreign_keys=[instructor_id])

    def to_dict(self):
        return {
            'id': self.id,
            'course_id': self.course_id,
            'course_title': self.course.title if self.course else None,
            'instructor_id': self.instructor_id,
            'instructor_name': self.instructor.name if self.instructor else None,
            'title': self.title,
            'duration': self.duration,
            'views': self.views,
            'thumbnail_url': self.thumbnail_url,
            'upload_date': self.upload_date.isoformat() if self.upload_date else None,
        }

    def __repr__(self):
        return f'<Video {self.title}>'
