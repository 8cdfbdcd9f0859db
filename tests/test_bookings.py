"""
Integration tests for bookings, enrollments, reviews and notifications
"""

import unittest
from datetime import datetime, timedelta

from api_testcase import ApiTestCase
from database import db
from models.booking import Booking, BookingStatus
from models.review import Review
from models.user import UserRole


class BookingFixtures(ApiTestCase):

    def setUp(self):
        super().setUp()
        self.tutor = self.create_user('tutor1', role=UserRole.TUTOR, name='Tina Tutor')
        self.other_tutor = self.create_user('tutor2', role=UserRole.TUTOR)
        self.student = self.create_user('student1', name='Sam Student')
        self.other_student = self.create_user('student2')
        self.admin = self.create_user('admin1', role=UserRole.ADMIN)
        self.course = self.create_course(self.tutor, duration=120)

    def book(self, course_id=None, **extra):
        payload = {'courseId': course_id or self.course.id}
        payload.update(extra)
        return self.client.post('/api/bookings', json=payload)

    def switch_to(self, username):
        self.logout()
        self.login(username)


class TestBookingRoutes(BookingFixtures):

    def test_student_books_course(self):
        self.login('student1')
        response = self.book(session_date='2030-03-01T15:00:00', notes='Need help with limits')
        self.assertEqual(response.status_code, 201)
        booking = response.get_json()['booking']
        self.assertEqual(booking['status'], BookingStatus.PENDING)
        self.assertEqual(booking['tutor_id'], self.tutor.id)
        self.assertEqual(booking['course']['title'], self.course.title)

        response = self.book()
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.get_json()['message'], 'You have already booked this course')

    def test_booking_requires_student_and_existing_course(self):
        self.login('tutor1')
        self.assertEqual(self.book().status_code, 403)

        self.switch_to('student1')
        self.assertEqual(self.book(course_id=999).status_code, 404)
        self.assertEqual(self.client.post('/api/bookings', json={}).status_code, 404)

        hidden = self.create_course(self.tutor, title='Draft', published=False)
        self.assertEqual(self.book(course_id=hidden.id).status_code, 404)

        response = self.book(session_date='someday')
        self.assertEqual(response.status_code, 400)
        self.assertIn('session_date', response.get_json()['errors'])

    def test_booking_notifies_tutor(self):
        self.login('student1')
        self.book()

        self.switch_to('tutor1')
        notifications = self.client.get('/api/notifications').get_json()
        self.assertEqual(len(notifications), 1)
        self.assertIn('Sam Student', notifications[0]['message'])

    def test_bookings_are_scoped_by_role(self):
        self.login('student1')
        self.book()
        self.switch_to('student2')
        self.book()

        self.assertEqual(len(self.client.get('/api/bookings').get_json()), 1)
        self.switch_to('tutor1')
        self.assertEqual(len(self.client.get('/api/bookings').get_json()), 2)
        self.switch_to('tutor2')
        self.assertEqual(self.client.get('/api/bookings').get_json(), [])
        self.switch_to('admin1')
        self.assertEqual(len(self.client.get('/api/bookings').get_json()), 2)

    def test_booking_visibility(self):
        self.login('student1')
        booking_id = self.book().get_json()['booking']['id']
        self.assertEqual(self.client.get(f'/api/bookings/{booking_id}').status_code, 200)

        self.switch_to('student2')
        self.assertEqual(self.client.get(f'/api/bookings/{booking_id}').status_code, 403)
        self.assertEqual(self.client.get('/api/bookings/999').status_code, 404)

    def test_tutor_confirms_booking(self):
        self.login('student1')
        booking_id = self.book().get_json()['booking']['id']

        self.switch_to('tutor1')
        response = self.client.patch(f'/api/bookings/{booking_id}/status', json={
            'status': 'accepted', 'sessionDate': '2030-03-01T15:00:00'})
        self.assertEqual(response.status_code, 200)
        booking = response.get_json()['booking']
        self.assertEqual(booking['status'], BookingStatus.CONFIRMED)
        self.assertEqual(booking['session_date'], '2030-03-01T15:00:00')

        self.switch_to('student1')
        types = [n['type'] for n in self.client.get('/api/notifications').get_json()]
        self.assertIn('confirmation', types)

    def test_student_status_limits(self):
        self.login('student1')
        booking_id = self.book().get_json()['booking']['id']

        response = self.client.patch(f'/api/bookings/{booking_id}/status', json={'status': 'Confirmed'})
        self.assertEqual(response.status_code, 403)

        response = self.client.patch(f'/api/bookings/{booking_id}/status', json={'status': 'bogus'})
        self.assertEqual(response.status_code, 400)

        response = self.client.put(f'/api/bookings/{booking_id}', json={'status': 'canceled'})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.get_json()['booking']['status'], BookingStatus.CANCELLED)

        # A cancelled booking no longer blocks a new one
        self.assertEqual(self.book().status_code, 201)

    def test_cancelling_keeps_session_date(self):
        self.login('student1')
        booking_id = self.book(session_date='2030-01-01T10:00:00').get_json()['booking']['id']

        response = self.client.patch(f'/api/bookings/{booking_id}/status', json={
            'status': 'Cancelled', 'session_date': '1999-01-01T00:00:00'})
        self.assertEqual(response.status_code, 200)
        booking = response.get_json()['booking']
        self.assertEqual(booking['status'], BookingStatus.CANCELLED)
        self.assertEqual(booking['session_date'], '2030-01-01T10:00:00')

    def test_reopening_blocked_by_newer_booking(self):
        self.login('student1')
        first_id = self.book().get_json()['booking']['id']
        self.client.patch(f'/api/bookings/{first_id}/status', json={'status': 'Cancelled'})
        self.assertEqual(self.book().status_code, 201)

        self.switch_to('tutor1')
        response = self.client.patch(f'/api/bookings/{first_id}/status', json={'status': 'Pending'})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(db.session.get(Booking, first_id).status, BookingStatus.CANCELLED)

        open_count = Booking.query.filter(
            Booking.student_id == self.student.id,
            Booking.status.in_(BookingStatus.OPEN)).count()
        self.assertEqual(open_count, 1)

    def test_other_tutor_cannot_change_booking(self):
        self.login('student1')
        booking_id = self.book().get_json()['booking']['id']

        self.switch_to('tutor2')
        response = self.client.patch(f'/api/bookings/{booking_id}/status', json={'status': 'Rejected'})
        self.assertEqual(response.status_code, 403)

    def test_delete_booking(self):
        self.login('student1')
        booking_id = self.book().get_json()['booking']['id']

        self.switch_to('tutor1')
        self.client.patch(f'/api/bookings/{booking_id}/status', json={'status': 'Confirmed'})

        self.switch_to('student1')
        self.assertEqual(self.client.delete(f'/api/bookings/{booking_id}').status_code, 403)

        self.switch_to('admin1')
        self.assertEqual(self.client.delete(f'/api/bookings/{booking_id}').status_code, 204)
        self.assertIsNone(db.session.get(Booking, booking_id))

    def test_sessions_and_stats(self):
        now = datetime.utcnow()
        db.session.add_all([
            Booking(course_id=self.course.id, student_id=self.student.id, tutor_id=self.tutor.id,
                    status=BookingStatus.CONFIRMED, session_date=now + timedelta(days=3)),
            Booking(course_id=self.course.id, student_id=self.student.id, tutor_id=self.tutor.id,
                    status=BookingStatus.COMPLETED, session_date=now - timedelta(days=3)),
        ])
        db.session.commit()

        self.login('student1')
        upcoming = self.client.get('/api/sessions/upcoming').get_json()
        self.assertEqual(len(upcoming), 1)
        self.assertEqual(upcoming[0]['tutor_name'], 'Tina Tutor')

        past = self.client.get('/api/sessions/past').get_json()
        self.assertEqual(len(past), 1)

        stats = self.client.get('/api/user/stats').get_json()
        self.assertEqual(stats, {'total_hours': 2.0, 'completed_sessions': 1, 'upcoming_sessions': 1})

    def test_sessions_require_login(self):
        self.assertEqual(self.client.get('/api/sessions/upcoming').status_code, 401)


class TestEnrollmentRoutes(BookingFixtures):

    def enroll(self, course_id=None):
        return self.client.post('/api/enrollments', json={'course_id': course_id or self.course.id})

    def test_enroll_and_list(self):
        self.login('student1')
        response = self.enroll()
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.get_json()['enrollment']['status'], 'active')

        self.assertEqual(self.enroll().status_code, 400)
        self.assertEqual(self.enroll(course_id=999).status_code, 404)
        self.assertEqual(len(self.client.get('/api/enrollments').get_json()), 1)

        self.switch_to('tutor1')
        self.assertEqual(len(self.client.get('/api/enrollments').get_json()), 1)
        self.switch_to('tutor2')
        self.assertEqual(self.client.get('/api/enrollments').get_json(), [])

    def test_full_course(self):
        small = self.create_course(self.tutor, title='Tiny class', max_students=1)
        self.login('student1')
        self.assertEqual(self.enroll(small.id).status_code, 201)

        self.switch_to('student2')
        response = self.enroll(small.id)
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.get_json()['message'], 'Course is full')

    def test_reactivating_dropped_enrollment_respects_capacity(self):
        small = self.create_course(self.tutor, title='Tiny class', max_students=1)
        self.login('student1')
        enrollment_id = self.enroll(small.id).get_json()['enrollment']['id']
        response = self.client.patch(f'/api/enrollments/{enrollment_id}', json={'status': 'dropped'})
        self.assertEqual(response.status_code, 200)

        self.switch_to('student2')
        self.assertEqual(self.enroll(small.id).status_code, 201)

        self.switch_to('student1')
        response = self.client.patch(f'/api/enrollments/{enrollment_id}', json={'status': 'active'})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.get_json()['message'], 'Course is full')
        self.assertEqual(small.get_active_enrollment_count(), 1)

    def test_update_progress(self):
        self.login('student1')
        enrollment_id = self.enroll().get_json()['enrollment']['id']

        response = self.client.patch(f'/api/enrollments/{enrollment_id}', json={'progress': 40})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.get_json()['enrollment']['progress'], 40)

        response = self.client.patch(f'/api/enrollments/{enrollment_id}', json={'progress': 101})
        self.assertEqual(response.status_code, 400)

        self.switch_to('student2')
        response = self.client.patch(f'/api/enrollments/{enrollment_id}', json={'progress': 90})
        self.assertEqual(response.status_code, 403)

        self.switch_to('tutor1')
        response = self.client.patch(f'/api/enrollments/{enrollment_id}', json={'progress': 100})
        self.assertEqual(response.get_json()['enrollment']['status'], 'completed')

    def test_drop_and_reenroll(self):
        self.login('student1')
        enrollment_id = self.enroll().get_json()['enrollment']['id']

        self.client.patch(f'/api/enrollments/{enrollment_id}', json={'status': 'dropped'})
        response = self.enroll()
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.get_json()['enrollment']['id'], enrollment_id)

    def test_delete_enrollment(self):
        self.login('student1')
        enrollment_id = self.enroll().get_json()['enrollment']['id']

        self.switch_to('student2')
        self.assertEqual(self.client.delete(f'/api/enrollments/{enrollment_id}').status_code, 403)
        self.switch_to('student1')
        self.assertEqual(self.client.delete(f'/api/enrollments/{enrollment_id}').status_code, 204)
        self.assertEqual(self.client.delete(f'/api/enrollments/{enrollment_id}').status_code, 404)


class TestReviewRoutes(BookingFixtures):

    def review(self, rating=5, comment='Very clear explanations'):
        return self.client.post('/api/reviews', json={
            'courseId': self.course.id, 'rating': rating, 'comment': comment})

    def confirm_booking_for(self, student):
        db.session.add(Booking(course_id=self.course.id, student_id=student.id, tutor_id=self.tutor.id,
                               status=BookingStatus.CONFIRMED))
        db.session.commit()

    def test_review_requires_booking_or_enrollment(self):
        self.login('student1')
        response = self.review()
        self.assertEqual(response.status_code, 403)

        self.book()
        self.assertEqual(self.review().status_code, 403)

    def test_review_updates_ratings(self):
        self.confirm_booking_for(self.student)
        self.confirm_booking_for(self.other_student)

        self.login('student1')
        response = self.review(rating=5)
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.get_json()['average_rating'], 5.0)

        self.switch_to('student2')
        response = self.review(rating=4)
        self.assertEqual(response.get_json()['average_rating'], 4.5)

        course = self.client.get(f'/api/courses/{self.course.id}').get_json()
        self.assertEqual(course['average_rating'], 4.5)
        self.assertEqual(course['review_count'], 2)

        tutor = self.client.get(f'/api/tutors/{self.tutor.id}').get_json()
        self.assertEqual(tutor['profile']['rating'], 4.5)
        self.assertEqual(tutor['profile']['review_count'], 2)

        reviews = self.client.get(f'/api/reviews/course/{self.course.id}').get_json()
        self.assertEqual(len(reviews), 2)

    def test_review_validation(self):
        self.confirm_booking_for(self.student)
        self.login('student1')

        response = self.review(rating=9)
        self.assertEqual(response.status_code, 400)
        self.assertIn('rating', response.get_json()['errors'])

        self.assertEqual(self.review().status_code, 201)
        response = self.review()
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.get_json()['message'], 'You have already reviewed this course')

        self.assertEqual(self.client.get('/api/reviews/course/999').status_code, 404)

    def test_delete_review(self):
        self.confirm_booking_for(self.student)
        self.login('student1')
        review_id = self.review(rating=2).get_json()['review']['id']

        self.switch_to('student2')
        self.assertEqual(self.client.delete(f'/api/reviews/{review_id}').status_code, 403)

        self.switch_to('admin1')
        self.assertEqual(self.client.delete(f'/api/reviews/{review_id}').status_code, 204)
        self.assertEqual(Review.query.count(), 0)

        course = self.client.get(f'/api/courses/{self.course.id}').get_json()
        self.assertEqual(course['average_rating'], 0)


class TestNotificationRoutes(BookingFixtures):

    def test_mark_read(self):
        self.login('student1')
        self.book()

        self.switch_to('tutor1')
        notification = self.client.get('/api/notifications').get_json()[0]
        self.assertFalse(notification['is_read'])

        response = self.client.patch(f"/api/notifications/{notification['id']}/read")
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.get_json()['notification']['is_read'])
        self.assertEqual(self.client.get('/api/notifications?unread_only=true').get_json(), [])

    def test_cannot_mark_someone_elses_notification(self):
        self.login('student1')
        self.book()

        self.switch_to('tutor1')
        notification_id = self.client.get('/api/notifications').get_json()[0]['id']

        self.switch_to('student2')
        response = self.client.patch(f'/api/notifications/{notification_id}/read')
        self.assertEqual(response.status_code, 404)

    def test_mark_all_read(self):
        self.login('student1')
        self.book()
        self.client.post('/api/enrollments', json={'course_id': self.course.id})

        self.switch_to('tutor1')
        response = self.client.post('/api/notifications/read-all')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.get_json()['count'], 2)
        self.assertEqual(self.client.get('/api/notifications?unread_only=1').get_json(), [])


if __name__ == '__main__':
    unittest.main()
