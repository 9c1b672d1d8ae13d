from datetime import timedelta
from pathlib import Path
import sys


# Ensure imports work when running this file directly: `python scripts/init_db.py`.
ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from studio.core.time_provider import default_time_provider
from studio.db import Base, SessionLocal, engine
from studio.models import Lesson, Student


Base.metadata.create_all(bind=engine)

db = SessionLocal()
try:
    if not db.query(Student).first():
        students = [
            Student(full_name='Anna', contact_whatsapp='+7 900 000-00-01'),
            Student(full_name='Boris', contact_whatsapp='+7 900 000-00-02'),
            Student(full_name='Vera', contact_whatsapp=None),
        ]
        db.add_all(students)
        db.commit()

        soon = default_time_provider.now() + timedelta(minutes=40)
        later = soon + timedelta(hours=3)
        db.add_all(
            [
                Lesson(
                    student_ids=[students[0].id, students[2].id],
                    date=soon.strftime('%Y-%m-%d'),
                    time=soon.strftime('%H:%M'),
                    subject='Piano',
                ),
                Lesson(
                    student_ids=[students[1].id],
                    date=later.strftime('%Y-%m-%d'),
                    time=later.strftime('%H:%M'),
                ),
            ]
        )
        db.commit()
finally:
    db.close()

print('DB initialized with sample students and lessons.')
