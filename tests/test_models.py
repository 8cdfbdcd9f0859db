"""
Unit tests for database models
"""

import unittest
from datetime import datetime, timedelta

from sqlalchemy.exc import IntegrityError

from api_testcase import ApiTestCase
from database import db
from models.academic import Course, Enrollment
from models.assignments import Assignment
from models.booking import Booking, BookingStatus
from models.review import Review
from models.user import User, UserRole


class TestModels(ApiTestCase):

    def test_user_password_hashing(self):
        """Passwords are hashed and never serialised"""
        user = self.create_user('alice', password='secret123')

        self.assertNotEqual(user.password_hash, 'secret123')
        self.assertTrue(user.check_password('secret123'))
        self.assertFalse(user.check_password('wrong'))
        self.assertFalse(user.check_password(''))
        self.assertNotIn('password_hash', user.to_dict())
        self.assertNotIn('password', user.to_dict())

    def test_user_role_properties(self):
        student = self.create_user('stu')
        tutor = self.create_user('tut', role=UserRole.TUTOR)
        admin = self.create_user('adm', role=UserRole.ADMIN)

        self.assertTrue(student.is_student)
        self.assertTrue(tutor.is_tutor)
        self.assertTrue(admin.is_admin)
        self.assertFalse(student.is_admin)

    def test_role_normalization(self):
        self.assertEqual(UserRole.normalize('student'), UserRole.STUDENT)
        self.assertEqual(UserRole.normalize('TUTOR'), UserRole.TUTOR)
        self.assertEqual(UserRole.normalize('instructor'), UserRole.TUTOR)
        self.assertEqual(UserRole.normalize(' Admin '), UserRole.ADMIN)
        self.assertIsNone(UserRole.normalize('guest'))
        self.assertIsNone(UserRole.normalize(None))

    def test_unique_email(self):
        self.create_user('first')
        duplicate = User(username='second', email='first@example.com', name='Second')
        duplicate.set_password('password123')
        db.session.add(duplicate)

        with self.assertRaises(IntegrityError):
            db.session.commit()
        db.session.rollback()

    def test_generated_password(self):
        password = User.generate_password()
        self.assertEqual(len(password), 10)
        self.assertTrue(password.isalnum())

    def test_course_capacity_and_rating(self):
        tutor = self.create_user('tutor1', role=UserRole.TUTOR)
        course = self.create_course(tutor, max_students=1)
        student = self.create_user('student1')
        other = self.create_user('student2')

        self.assertFalse(course.is_full())
        db.session.add(Enrollment(course_id=course.id, student_id=student.id))
        db.session.commit()
        self.assertTrue(course.is_full())

        db.session.add_all([
            Review(course_id=course.id, tutor_id=tutor.id, student_id=student.id, rating=5),
            Review(course_id=course.id, tutor_id=tutor.id, student_id=other.id, rating=4),
        ])
        db.session.commit()
        self.assertEqual(course.calculate_average_rating(), 4.5)
        self.assertEqual(course.to_dict()['review_count'], 2)
        self.assertEqual(course.to_dict()['tutor_name'], tutor.name)

    def test_unique_enrollment(self):
        tutor = self.create_user('tutor1', role=UserRole.TUTOR)
        course = self.create_course(tutor)
        student = self.create_user('student1')

        db.session.add(Enrollment(course_id=course.id, student_id=student.id))
        db.session.commit()
        db.session.add(Enrollment(course_id=course.id, student_id=student.id))
        with self.assertRaises(IntegrityError):
            db.session.commit()
        db.session.rollback()

    def test_booking_defaults_and_session_view(self):
        tutor = self.create_user('tutor1', role=UserRole.TUTOR, name='Tina Tutor')
        course = self.create_course(tutor, duration=90)
        student = self.create_user('student1')
        start = datetime(2030, 1, 1, 10, 0)

        booking = Booking(course_id=course.id, student_id=student.id, tutor_id=tutor.id, session_date=start)
        db.session.add(booking)
        db.session.commit()

        self.assertEqual(booking.status, BookingStatus.PENDING)
        self.assertTrue(booking.is_open())
        self.assertEqual(booking.get_end_time(), start + timedelta(minutes=90))

        session_view = booking.to_session_dict()
        self.assertEqual(session_view['tutor_name'], 'Tina Tutor')
        self.assertEqual(session_view['topic'], course.title)
        self.assertEqual(session_view['end_time'], '2030-01-01T11:30:00')

        related = booking.to_dict(include_related=True)
        self.assertEqual(related['course']['title'], course.title)
        self.assertEqual(related['student']['id'], student.id)

    def test_booking_status_aliases(self):
        self.assertEqual(BookingStatus.normalize('accepted'), BookingStatus.CONFIRMED)
        self.assertEqual(BookingStatus.normalize('CANCELED'), BookingStatus.CANCELLED)
        self.assertIsNone(BookingStatus.normalize('unknown'))

    def test_course_delete_cascades(self):
        tutor = self.create_user('tutor1', role=UserRole.TUTOR)
        course = self.create_course(tutor)
        student = self.create_user('student1')
        db.session.add_all([
            Booking(course_id=course.id, student_id=student.id, tutor_id=tutor.id),
            Enrollment(course_id=course.id, student_id=student.id),
            Review(course_id=course.id, tutor_id=tutor.id, student_id=student.id, rating=3),
            Assignment(course_id=course.id, title='Homework 1', due_date=datetime(2030, 1, 1)),
        ])
        db.session.commit()

        db.session.delete(course)
        db.session.commit()

        self.assertEqual(Course.query.count(), 0)
        self.assertEqual(Booking.query.count(), 0)
        self.assertEqual(Enrollment.query.count(), 0)
        self.assertEqual(Review.query.count(), 0)
        self.assertEqual(Assignment.query.count(), 0)

    def test_assignment_overdue(self):
        tutor = self.create_user('tutor1', role=UserRole.TUTOR)
        course = self.create_course(tutor)
        assignment = Assignment(course_id=course.id, title='Essay', due_date=datetime(2000, 1, 1))
        db.session.add(assignment)
        db.session.commit()

        self.assertTrue(assignment.is_overdue())
        self.assertEqual(assignment.to_dict()['course_title'], course.title)


if __name__ == '__main__':
    unittest.main()
