#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
import itertools
from typing import Iterator

import pytest

from sessiongrid.records.students import Student
from sessiongrid.records.trainers import Trainer
from sessiongrid.storage.context import StorageContext, new_context
from tests.session_utils import FIXED_NOW


@pytest.fixture(scope="function", autouse=True)
def storage_context() -> Iterator[StorageContext]:
    """Autouse fixture which will setup and teardown a storage
    context with sequential ids and a frozen clock around each test."""
    counter = itertools.count(1)
    test_context = StorageContext(
        id_factory=lambda: f"id-{next(counter)}",
        clock=lambda: FIXED_NOW,
    )
    with new_context(test_context):
        yield test_context


@pytest.fixture
def trainers() -> list[Trainer]:
    return [
        Trainer(name="Sarah Johnson", trainer_id="t-sarah", can_do_gt_assessments=True),
        Trainer(name="Michael Chen", trainer_id="t-michael"),
        Trainer(
            name="Lisa Rodriguez",
            trainer_id="t-lisa",
            certifications=["accelerate-rx"],
        ),
    ]


@pytest.fixture
def students() -> list[Student]:
    return [
        Student(name="Emma Wilson", student_id="s-emma"),
        Student(name="Alex Thompson", student_id="s-alex"),
        Student(name="Maya Patel", student_id="s-maya"),
    ]
