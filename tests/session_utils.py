#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
import datetime

from sessiongrid.records.sessions import Session

FIXED_NOW = datetime.datetime(2025, 8, 8, 9, 0)


def make_session(
    start_time: str,
    end_time: str,
    date: datetime.date = datetime.date(2025, 8, 9),
    **kwargs,
) -> Session:
    fields = {
        "session_type": "training-tabletop",
        "student_id": "student-1",
        "trainer_id": "trainer-1",
        "assigned_seat": 1,
    }
    fields.update(kwargs)
    return Session(date=date, start_time=start_time, end_time=end_time, **fields)
