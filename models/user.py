"""
User models for TutorBridge
User accounts (students, tutors, admins) and tutor profiles
"""

from database import db
from datetime import datetime
from werkzeug.security import generate_password_hash, check_password_hash
import random
import string


class UserRole:
    """Canonical role names stored on the user record"""
    STUDENT = 'Student'
    TUTOR = 'Tutor'
    ADMIN = 'Admin'

    ALL = (STUDENT, TUTOR, ADMIN)
    SELF_REGISTERABLE = (STUDENT, TUTOR)

    # Lower-case spellings and synonyms used by the different front ends
    ALIASES = {
        'student': STUDENT,
        'tutor': TUTOR,
        'instructor': TUTOR,
        'admin': ADMIN,
        'administrator': ADMIN,
    }

    @classmethod
    def normalize(cls, value):
        """Return the canonical role for value, or None if unknown"""
        if value is None:
            return None
        return cls.ALIASES.get(str(value).strip().lower())


class User(db.Model):
    """Marketplace user account"""
    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(80), unique=True, nullable=False, index=True)
    email = db.Column(db.String(120), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(256), nullable=False)
    name = db.Column(db.String(100), nullable=False)
    role = db.Column(db.String(20), nullable=False, default=UserRole.STUDENT, index=True)
    bio = db.Column(db.Text, nullable=True)
    profile_image = db.Column(db.String(500), nullable=True)
    is_approved = db.Column(db.Boolean, default=False, nullable=False)
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    last_login = db.Column(db.DateTime)

    # Relationships
    tutor_profile = db.relationship('TutorProfile', backref='user', uselist=False,
                                    cascade='all, delete-orphan')
    courses = db.relationship('Course', backref='tutor', lazy='dynamic')
    notifications = db.relationship('Notification', backref='user', lazy='dynamic',
                                    cascade='all, delete-orphan')
    activities = db.relationship('Activity', backref='user', lazy='dynamic',
                                 cascade='all, delete-orphan')

    def set_password(self, password):
        """Set password hash"""
        self.password_hash = generate_password_hash(password)

    def check_password(self, password):
        """Check password against hash"""
        if not password or not self.password_hash:
            return False
        return check_password_hash(self.password_hash, password)

    def update_last_login(self):
        """Update last login timestamp"""
        self.last_login = datetime.utcnow()
        db.session.commit()

    @property
    def is_student(self):
        return self.role == UserRole.STUDENT

    @property
    def is_tutor(self):
        return self.role == UserRole.TUTOR

    @property
    def is_admin(self):
        return self.role == UserRole.ADMIN

    @staticmethod
    def generate_password(length=10):
        """Generate a random password for admin resets"""
        chars = string.ascii_letters + string.digits
        return ''.join(random.SystemRandom().choice(chars) for _ in range(length))

    def to_summary(self):
        """Minimal representation embedded in bookings and reviews"""
        return {
            'id': self.id,
            'name': self.name,
            'email': self.email,
            'role': self.role,
        }

    def to_public_dict(self):
        """Representation safe to show to any visitor"""
        return {
            'id': self.id,
            'username': self.username,
            'name': self.name,
            'role': self.role,
            'bio': self.bio,
            'profile_image': self.profile_image,
        }

    def to_dict(self):
        """Convert user to dictionary for JSON serialization (never the password)"""
        return {
            'id': self.id,
            'username': self.username,
            'email': self.email,
            'name': self.name,
            'role': self.role,
            'bio': self.bio,
            'profile_image': self.profile_image,
            'is_approved': self.is_approved,
            'is_active': self.is_active,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'last_login': self.last_login.isoformat() if self.last_login else None,
        }

    def __repr__(self):
        return f'<User {self.username} ({self.role})>'


class TutorProfile(db.Model):
    """Extended profile for users with the Tutor role"""
    __tablename__ = 'tutor_profiles'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='CASCADE'),
                        unique=True, nullable=False)
    subjects = db.Column(db.JSON, default=list)
    education = db.Column(db.Text, nullable=True)
    experience = db.Column(db.Text, nullable=True)
    hourly_rate = db.Column(db.Float, nullable=True)
    availability = db.Column(db.JSON, nullable=True)
    rating = db.Column(db.Float, default=0)
    review_count = db.Column(db.Integer, default=0)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_dict(self):
        """Convert profile to dictionary"""
        return {
            'id': self.id,
            'user_id': self.user_id,
            'subjects': list(self.subjects or []),
            'education': self.education,
            'experience': self.experience,
            'hourly_rate': self.hourly_rate,
            'availability': self.availability,
            'rating': round(self.rating or 0, 1),
            'review_count': self.review_count or 0,
        }

    def __repr__(self):
        return f'<TutorProfile user={self.user_id}>'
