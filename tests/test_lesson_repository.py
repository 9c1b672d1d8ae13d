import tempfile
import unittest
from datetime import datetime
from pathlib import Path
from unittest.mock import patch

from sqlalchemy import create_engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import sessionmaker

from studio.db import Base
from studio.domain.reminder_types import RepositoryError
from studio.models import Lesson, Student
from studio.services.lesson_repository import SqlLessonRepository


class SqlLessonRepositoryTests(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        cls._tmpdir = tempfile.TemporaryDirectory()
        db_path = Path(cls._tmpdir.name) / 'test_lesson_repository.db'
        cls._engine = create_engine(f"sqlite:///{db_path}", connect_args={'check_same_thread': False})
        cls._session_factory = sessionmaker(autocommit=False, autoflush=False, bind=cls._engine)
        Base.metadata.create_all(bind=cls._engine)

    @classmethod
    def tearDownClass(cls):
        cls._engine.dispose()
        cls._tmpdir.cleanup()

    def setUp(self):
        db = self._session_factory()
        try:
            db.query(Lesson).delete()
            db.query(Student).delete()
            db.add_all(
                [
                    Student(id='s-1', full_name='Anna', contact_whatsapp='+79000000001', created_at=datetime(2026, 1, 1)),
                    Student(id='s-2', full_name='Boris', contact_whatsapp=None, created_at=datetime(2026, 1, 2)),
                ]
            )
            db.add_all(
                [
                    Lesson(id='l-1', student_ids=['s-1', 's-2'], date='2026-03-02', time='14:30', subject='Piano'),
                    Lesson(id='l-2', student_ids=['s-2'], date='2026-03-05', time='10:00', timezone='Europe/Berlin'),
                    Lesson(id='l-3', student_ids=['s-1'], date='2026-03-01', time='09:00', status='completed', whatsapp_sent=True),
                ]
            )
            db.commit()
        finally:
            db.close()

    def test_get_lessons_maps_rows(self):
        db = self._session_factory()
        try:
            lessons = SqlLessonRepository(db).get_lessons()
        finally:
            db.close()

        self.assertEqual([lesson.id for lesson in lessons], ['l-2', 'l-1', 'l-3'])
        piano = lessons[1]
        self.assertEqual(piano.student_ids, ('s-1', 's-2'))
        self.assertEqual(piano.status, 'upcoming')
        self.assertEqual(piano.subject, 'Piano')
        self.assertFalse(piano.reminder_sent)
        self.assertEqual(lessons[0].timezone, 'Europe/Berlin')
        self.assertTrue(lessons[2].reminder_sent)

    def test_get_students_maps_whatsapp_contact(self):
        db = self._session_factory()
        try:
            students = SqlLessonRepository(db).get_students()
        finally:
            db.close()

        by_id = {student.id: student for student in students}
        self.assertEqual(by_id['s-1'].full_name, 'Anna')
        self.assertEqual(by_id['s-1'].messaging_address, '+79000000001')
        self.assertIsNone(by_id['s-2'].messaging_address)

    def test_mark_reminder_sent_sets_flag_once(self):
        db = self._session_factory()
        try:
            repository = SqlLessonRepository(db)
            self.assertTrue(repository.mark_reminder_sent('l-1'))
            self.assertFalse(repository.mark_reminder_sent('l-1'))
        finally:
            db.close()

        db = self._session_factory()
        try:
            row = db.query(Lesson).filter(Lesson.id == 'l-1').first()
            self.assertTrue(row.whatsapp_sent)
            untouched = db.query(Lesson).filter(Lesson.id == 'l-2').first()
            self.assertFalse(untouched.whatsapp_sent)
        finally:
            db.close()

    def test_mark_unknown_lesson_returns_false(self):
        db = self._session_factory()
        try:
            self.assertFalse(SqlLessonRepository(db).mark_reminder_sent('missing'))
        finally:
            db.close()

    def test_query_failure_raises_repository_error(self):
        db = self._session_factory()
        try:
            repository = SqlLessonRepository(db)
            with patch.object(db, 'query', side_effect=OperationalError('SELECT', {}, Exception('db down'))):
                with self.assertRaises(RepositoryError):
                    repository.get_lessons()
                with self.assertRaises(RepositoryError):
                    repository.get_students()
        finally:
            db.close()

    def test_update_failure_raises_repository_error(self):
        db = self._session_factory()
        try:
            repository = SqlLessonRepository(db)
            with patch.object(db, 'execute', side_effect=OperationalError('UPDATE', {}, Exception('locked'))):
                with self.assertRaises(RepositoryError):
                    repository.mark_reminder_sent('l-1')
        finally:
            db.close()


if __name__ == '__main__':
    unittest.main()
