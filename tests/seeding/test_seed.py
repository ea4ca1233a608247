#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
import datetime
import random
import re

from sessiongrid.records.sessions import SessionStatus, list_sessions
from sessiongrid.records.students import list_students
from sessiongrid.records.trainers import Trainer, create_trainer, list_trainers
from sessiongrid.seeding.seed import seed_if_empty, simulate_students
from sessiongrid.seeding.utils import (
    fake_email_address,
    fake_phone_number,
    random_dates,
)

TODAY = datetime.date(2025, 8, 9)


def test_seed_populates_an_empty_store():
    assert seed_if_empty(today=TODAY)
    trainers = list_trainers()
    assert [t.name for t in trainers] == ["Sarah Johnson", "Michael Chen", "Lisa Rodriguez"]
    assert [t.can_do_gt_assessments for t in trainers] == [True, False, True]
    assert len(list_students()) == 5

    sessions = list_sessions()
    assert len(sessions) == 5
    assert len(list_sessions(date=TODAY)) == 3
    (completed,) = list_sessions(status=SessionStatus.Completed)
    assert completed.date == TODAY - datetime.timedelta(days=1)
    assert completed.progress.score == 85
    # gt sessions are run by a certified trainer
    gt_trainers = {s.trainer_id for s in sessions if s.session_type == "gt"}
    assert gt_trainers <= {t.trainer_id for t in trainers if t.can_do_gt_assessments}


def test_seed_is_skipped_if_any_data_exists():
    create_trainer(Trainer(name="Existing Trainer"))
    assert not seed_if_empty(today=TODAY)
    assert len(list_trainers()) == 1
    assert list_students() == []


def test_seed_runs_once():
    assert seed_if_empty(today=TODAY)
    assert not seed_if_empty(today=TODAY)
    assert len(list_sessions()) == 5


def test_simulate_students():
    rng = random.Random(7)
    students = simulate_students(["Liam Carter", "Olivia Brooks"], rng=rng)
    assert [s.name for s in list_students()] == ["Liam Carter", "Olivia Brooks"]
    for student in students:
        assert student.guardian_name.endswith(student.name.split()[-1])
        assert student.guardian_email.endswith("@brainrx.com")
        assert datetime.date(2008, 1, 1) <= student.date_of_birth <= datetime.date(2016, 12, 31)


def test_fake_contact_details():
    assert re.fullmatch(r"\(555\) \d{3}-\d{4}", fake_phone_number(random.Random(0)))
    assert fake_email_address("Jennifer Wilson") == "jennifer.wilson@brainrx.com"
    dates = random_dates(
        datetime.date(2025, 1, 1), datetime.date(2025, 1, 3), 10, rng=random.Random(0)
    )
    assert len(dates) == 10
    assert set(dates) <= {datetime.date(2025, 1, d) for d in (1, 2, 3)}
