#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
import datetime
from enum import StrEnum, auto
from typing import NamedTuple

import polars as pl
from pydantic import BaseModel

from sessiongrid.records.sessions import Session, SessionStatus
from sessiongrid.records.trainers import Trainer

WORKLOAD_WINDOW = datetime.timedelta(days=7)


class WorkloadStatus(StrEnum):
    ideal = auto()
    approaching = auto()
    overloaded = auto()


class WorkloadConfig(NamedTuple):
    """Thresholds for classifying trainer workloads.

    Parameters
    ----------
    ideal_student_count
        Trainers with at most this many students are `ideal`.
    approaching_threshold
        Trainers with at most `ideal_student_count * approaching_threshold`
        students are `approaching`, the rest are `overloaded`.
    """

    ideal_student_count: int = 3
    approaching_threshold: float = 1.5


class TrainerWorkload(BaseModel):
    trainer_id: str
    trainer_name: str
    student_count: int
    status: WorkloadStatus


def workload_status(student_count: int, config: WorkloadConfig) -> WorkloadStatus:
    if student_count <= config.ideal_student_count:
        return WorkloadStatus.ideal
    if student_count <= config.ideal_student_count * config.approaching_threshold:
        return WorkloadStatus.approaching
    return WorkloadStatus.overloaded


def calculate_trainer_workloads(
    trainers: list[Trainer],
    sessions: list[Session],
    now: datetime.datetime,
    config: WorkloadConfig = WorkloadConfig(),
) -> list[TrainerWorkload]:
    """Count the distinct students each trainer has scheduled sessions with
    in the week either side of `now`.

    Returns
    -------
    One workload per trainer, busiest first.
    """
    window_start = (now - WORKLOAD_WINDOW).date()
    window_end = (now + WORKLOAD_WINDOW).date()
    sessions_df = pl.DataFrame(
        [
            {"trainer_id": s.trainer_id, "student_id": s.student_id, "date": s.date}
            for s in sessions
            if s.status == SessionStatus.Scheduled
        ],
        schema={"trainer_id": pl.String, "student_id": pl.String, "date": pl.Date},
    )
    student_counts = dict(
        sessions_df.filter(
            pl.col("date").is_between(window_start, window_end)
            & pl.col("student_id").is_not_null()
        )
        .group_by("trainer_id")
        .agg(pl.col("student_id").n_unique().alias("student_count"))
        .iter_rows()
    )
    workloads = []
    for trainer in trainers:
        count = student_counts.get(trainer.trainer_id, 0)
        workloads.append(
            TrainerWorkload(
                trainer_id=trainer.trainer_id,
                trainer_name=trainer.name,
                student_count=count,
                status=workload_status(count, config),
            )
        )
    workloads.sort(key=lambda w: w.student_count, reverse=True)
    return workloads


def workload_summary(workloads: list[TrainerWorkload]) -> dict[str, float]:
    total = len(workloads)
    average = 0.0
    if total:
        average = round(sum(w.student_count for w in workloads) / total, 1)
    return {
        "total": total,
        "overloaded": sum(w.status == WorkloadStatus.overloaded for w in workloads),
        "approaching": sum(w.status == WorkloadStatus.approaching for w in workloads),
        "ideal": sum(w.status == WorkloadStatus.ideal for w in workloads),
        "average_load": average,
    }
