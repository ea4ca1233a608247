#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
"""Reference data for a freshly installed application."""

import datetime
import logging
import random

from sessiongrid.records.sessions import (
    Session,
    SessionProgress,
    SessionStatus,
    create_session,
    list_sessions,
)
from sessiongrid.records.students import Student, create_student, list_students
from sessiongrid.records.trainers import Trainer, create_trainer, list_trainers
from sessiongrid.seeding.utils import (
    fake_email_address,
    fake_phone_number,
    random_dates,
)

logger = logging.getLogger(__name__)

TRAINERS = [
    Trainer(
        name="Sarah Johnson",
        email="sarah.johnson@brainrx.com",
        can_do_gt_assessments=True,
    ),
    Trainer(
        name="Michael Chen",
        email="michael.chen@brainrx.com",
        can_do_gt_assessments=False,
    ),
    Trainer(
        name="Lisa Rodriguez",
        email="lisa.rodriguez@brainrx.com",
        can_do_gt_assessments=True,
    ),
]

STUDENTS = [
    Student(
        name="Emma Wilson",
        date_of_birth=datetime.date(2012, 3, 15),
        guardian_name="Jennifer Wilson",
        guardian_phone="(555) 123-4567",
        medical_notes="Mild attention difficulties",
    ),
    Student(
        name="Alex Thompson",
        date_of_birth=datetime.date(2010, 7, 22),
        guardian_name="David Thompson",
        guardian_phone="(555) 234-5678",
    ),
    Student(
        name="Maya Patel",
        date_of_birth=datetime.date(2014, 11, 8),
        guardian_name="Priya Patel",
        guardian_phone="(555) 345-6789",
        medical_notes="Processing speed challenges",
    ),
    Student(
        name="Jordan Davis",
        date_of_birth=datetime.date(2013, 1, 30),
        guardian_name="Angela Davis",
        guardian_phone="(555) 456-7890",
    ),
    Student(
        name="Sophie Martinez",
        date_of_birth=datetime.date(2011, 9, 12),
        guardian_name="Carlos Martinez",
        guardian_phone="(555) 567-8901",
        medical_notes="Working memory support needed",
    ),
]


def _seed_sessions(
    today: datetime.date, student_ids: list[str], trainer_ids: list[str]
) -> None:
    one_day = datetime.timedelta(days=1)
    sessions = [
        Session(
            session_type="training-tabletop",
            student_id=student_ids[0],
            trainer_id=trainer_ids[0],
            date=today,
            start_time="10:00",
            end_time="11:00",
            assigned_seat=1,
            notes="Initial assessment session",
        ),
        Session(
            session_type="gt",
            student_id=student_ids[1],
            trainer_id=trainer_ids[0],
            date=today,
            start_time="14:00",
            end_time="15:00",
            assigned_seat=1,
            notes="Follow-up session",
        ),
        Session(
            session_type="training-tabletop",
            student_id=student_ids[2],
            trainer_id=trainer_ids[2],
            date=today,
            start_time="16:00",
            end_time="17:00",
            assigned_seat=2,
        ),
        Session(
            session_type="training-tabletop",
            student_id=student_ids[3],
            trainer_id=trainer_ids[0],
            date=today + one_day,
            start_time="10:00",
            end_time="11:00",
            assigned_seat=1,
            notes="Progress evaluation",
        ),
        Session(
            session_type="training-tabletop",
            student_id=student_ids[4],
            trainer_id=trainer_ids[1],
            date=today - one_day,
            start_time="11:00",
            end_time="12:00",
            status=SessionStatus.Completed,
            assigned_seat=1,
            notes="Excellent progress shown",
            progress=SessionProgress(
                completed=True,
                score=85,
                observations="Student showed significant improvement in working memory tasks",
                recommendations="Continue with current plan, consider advancing difficulty",
            ),
        ),
    ]
    for session in sessions:
        create_session(session)


def seed_if_empty(today: datetime.date | None = None) -> bool:
    """Populate trainers, students and a handful of sessions around `today`.

    Nothing is written unless all three collections are empty.

    Returns
    -------
    Whether the store was seeded.
    """
    if list_students() or list_trainers() or list_sessions():
        return False
    logger.info("Seeding initial data...")
    today = today or datetime.date.today()
    trainer_ids = [create_trainer(t).trainer_id for t in TRAINERS]
    student_ids = [create_student(s).student_id for s in STUDENTS]
    _seed_sessions(today, student_ids, trainer_ids)
    logger.info("Seed data created successfully")
    return True


def simulate_students(
    names: list[str],
    rng: random.Random | None = None,
    born_after: datetime.date = datetime.date(2008, 1, 1),
    born_before: datetime.date = datetime.date(2016, 12, 31),
) -> list[Student]:
    """Add students with generated contact details to the store, so that
    demo schedules do not keep reusing the same handful of people."""
    rng = rng or random.Random()
    birth_dates = random_dates(born_after, born_before, len(names), rng=rng)
    students = []
    for name, date_of_birth in zip(names, birth_dates):
        guardian = f"{rng.choice(['Alice', 'Ben', 'Chloe', 'Dan'])} {name.split()[-1]}"
        students.append(
            create_student(
                Student(
                    name=name,
                    date_of_birth=date_of_birth,
                    guardian_name=guardian,
                    guardian_email=fake_email_address(guardian),
                    guardian_phone=fake_phone_number(rng),
                )
            )
        )
    return students
