#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
from enum import StrEnum, auto

import polars as pl


class DatabaseNamespace(StrEnum):
    """Namespace for each database"""

    SESSIONS = auto()
    TRAINERS = auto()
    STUDENTS = auto()
    BLOCKED_DAYS = auto()


PROGRESS_SCHEMA = pl.Struct(
    {
        "completed": pl.Boolean,
        "score": pl.Int32,
        "observations": pl.String,
        "recommendations": pl.String,
    }
)

DATABASE_SCHEMAS = {
    DatabaseNamespace.SESSIONS: {
        "session_id": pl.String,
        "session_type": pl.String,
        "student_id": pl.String,
        "trainer_id": pl.String,
        "date": pl.Date,
        "start_time": pl.String,
        "end_time": pl.String,
        "status": pl.String,
        "assigned_seat": pl.Int32,
        "notes": pl.String,
        "progress": PROGRESS_SCHEMA,
        "created_at": pl.Datetime,
        "updated_at": pl.Datetime,
    },
    DatabaseNamespace.TRAINERS: {
        "trainer_id": pl.String,
        "name": pl.String,
        "nickname": pl.String,
        "email": pl.String,
        "can_do_gt_assessments": pl.Boolean,
        "certifications": pl.List(pl.String),
        "created_at": pl.Datetime,
        "updated_at": pl.Datetime,
    },
    DatabaseNamespace.STUDENTS: {
        "student_id": pl.String,
        "name": pl.String,
        "date_of_birth": pl.Date,
        "guardian_name": pl.String,
        "guardian_email": pl.String,
        "guardian_phone": pl.String,
        "medical_notes": pl.String,
        "created_at": pl.Datetime,
        "updated_at": pl.Datetime,
    },
    DatabaseNamespace.BLOCKED_DAYS: {
        "rule_id": pl.String,
        "start_date": pl.Date,
        "end_date": pl.Date,
        "start_time": pl.String,
        "end_time": pl.String,
        "reason": pl.String,
        "recurrence": pl.Struct(
            {
                "nth": pl.Int32,
                "weekday": pl.Int32,
                "exclude_months": pl.List(pl.Int32),
            }
        ),
        "created_at": pl.Datetime,
        "updated_at": pl.Datetime,
    },
}
