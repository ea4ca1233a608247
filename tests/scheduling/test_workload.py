#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
import datetime

from sessiongrid.records.sessions import SessionStatus
from sessiongrid.records.trainers import Trainer
from sessiongrid.scheduling.workload import (
    WorkloadConfig,
    WorkloadStatus,
    calculate_trainer_workloads,
    workload_status,
    workload_summary,
)
from tests.session_utils import make_session

NOW = datetime.datetime(2025, 8, 9, 12, 0)


def test_workload_status_thresholds():
    config = WorkloadConfig()
    assert workload_status(0, config) == WorkloadStatus.ideal
    assert workload_status(3, config) == WorkloadStatus.ideal
    assert workload_status(4, config) == WorkloadStatus.approaching
    assert workload_status(5, config) == WorkloadStatus.overloaded


def test_calculate_trainer_workloads(trainers: list[Trainer]):
    sessions = [
        # sarah: five distinct students in the window, one repeated
        *[
            make_session("10:00", "11:00", trainer_id="t-sarah", student_id=f"s{i}")
            for i in range(5)
        ],
        make_session("14:00", "15:00", trainer_id="t-sarah", student_id="s0"),
        # michael: one in the window, one too far ahead, one cancelled
        make_session("10:00", "11:00", trainer_id="t-michael", student_id="s0"),
        make_session(
            "10:00",
            "11:00",
            date=datetime.date(2025, 8, 30),
            trainer_id="t-michael",
            student_id="s1",
        ),
        make_session(
            "10:00",
            "11:00",
            trainer_id="t-michael",
            student_id="s2",
            status=SessionStatus.Cancelled,
        ),
    ]
    workloads = calculate_trainer_workloads(trainers, sessions, now=NOW)
    assert [(w.trainer_id, w.student_count, w.status) for w in workloads] == [
        ("t-sarah", 5, WorkloadStatus.overloaded),
        ("t-michael", 1, WorkloadStatus.ideal),
        ("t-lisa", 0, WorkloadStatus.ideal),
    ]
    summary = workload_summary(workloads)
    assert summary["total"] == 3
    assert summary["overloaded"] == 1
    assert summary["ideal"] == 2
    assert summary["average_load"] == 2.0


def test_workload_summary_without_trainers():
    assert workload_summary([])["average_load"] == 0.0
