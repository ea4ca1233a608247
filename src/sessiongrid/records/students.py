#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
import datetime
from typing import Any

import polars as pl
from polars.exceptions import NoDataError
from pydantic import BaseModel

from sessiongrid.scheduling.exceptions import NotFoundError
from sessiongrid.storage.context import get_current_context
from sessiongrid.storage.database_schemas import DatabaseNamespace
from sessiongrid.storage.utils import exact_match_filter_dataframe, filter_dataframe

StudentId = str


class Student(BaseModel):
    name: str
    date_of_birth: datetime.date | None = None
    guardian_name: str | None = None
    guardian_email: str | None = None
    guardian_phone: str | None = None
    medical_notes: str | None = None
    student_id: StudentId | None = None
    created_at: datetime.datetime | None = None
    updated_at: datetime.datetime | None = None


def _students_db() -> pl.DataFrame:
    return get_current_context().get_database(namespace=DatabaseNamespace.STUDENTS)


def list_students() -> list[Student]:
    return [Student(**record) for record in _students_db().to_dicts()]


def get_student(student_id: StudentId) -> Student:
    records = filter_dataframe(
        _students_db(),
        filter_criteria=[("student_id", student_id, exact_match_filter_dataframe)],
    ).to_dicts()
    if not records:
        raise NotFoundError(f"No student with id {student_id} was found.")
    return Student(**records[0])


def create_student(data: Student | dict[str, Any]) -> Student:
    context = get_current_context()
    if isinstance(data, dict):
        data = Student(**data)
    now = context.now()
    student = data.model_copy(
        update={"student_id": context.new_id(), "created_at": now, "updated_at": now}
    )
    context.add_to_database(
        namespace=DatabaseNamespace.STUDENTS, rows=[student.model_dump()]
    )
    return student


def delete_student(student_id: StudentId) -> None:
    try:
        get_current_context().remove_from_database(
            namespace=DatabaseNamespace.STUDENTS,
            predicate=pl.col("student_id") == student_id,
        )
    except NoDataError:
        raise NotFoundError(f"No student with id {student_id} was found.")
