"""
Shared fixtures for the TutorBridge test suite
"""

import unittest

from app import create_app
from config import TestingConfig
from database import db
from models.academic import Course
from models.user import User, UserRole, TutorProfile


class ApiTestCase(unittest.TestCase):
    """Fresh in-memory app per test with helpers for users, courses and logins"""

    config_class = TestingConfig

    def setUp(self):
        """Set up test fixtures"""
        self.app = create_app(self.config_class)
        self.client = self.app.test_client()
        self.app_context = self.app.app_context()
        self.app_context.push()

    def tearDown(self):
        """Clean up after tests"""
        db.session.remove()
        db.drop_all()
        self.app_context.pop()

    def create_user(self, username, role=UserRole.STUDENT, password='password123', name=None,
                    is_approved=True, is_active=True):
        user = User(
            username=username,
            email=f'{username}@example.com',
            name=name or username.replace('_', ' ').title(),
            role=role,
            is_approved=is_approved,
            is_active=is_active,
        )
        user.set_password(password)
        if role == UserRole.TUTOR:
            user.tutor_profile = TutorProfile(subjects=[])
        db.session.add(user)
        db.session.commit()
        return user

    def create_course(self, tutor, title='Algebra Basics', subject='Mathematics', price=30.0,
                      published=True, max_students=None, duration=60):
        course = Course(
            tutor_id=tutor.id,
            title=title,
            description=f'{title} for beginners',
            subject=subject,
            price=price,
            published=published,
            max_students=max_students,
            duration=duration,
        )
        db.session.add(course)
        db.session.commit()
        return course

    def login(self, username, password='password123'):
        return self.client.post('/api/login', json={'username': username, 'password': password})

    def logout(self):
        return self.client.post('/api/logout')
