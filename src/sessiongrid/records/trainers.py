#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
import datetime
import logging
from typing import Any

import polars as pl
from polars.exceptions import NoDataError
from pydantic import BaseModel, Field

from sessiongrid.scheduling.exceptions import NotFoundError
from sessiongrid.storage.context import get_current_context
from sessiongrid.storage.database_schemas import DatabaseNamespace
from sessiongrid.storage.utils import (
    exact_match_filter_dataframe,
    filter_dataframe,
    fuzzy_match_filter_dataframe,
)

TrainerId = str

logger = logging.getLogger(__name__)


class Trainer(BaseModel):
    """A member of staff who runs sessions.

    Parameters
    ----------
    nickname
        Short name displayed on the daily grid. Defaults to the first name.
    can_do_gt_assessments
        Whether the trainer is certified to run GT assessments.
    certifications
        Any further qualifications, usable as eligibility flags.
    """

    name: str
    nickname: str | None = None
    email: str | None = None
    can_do_gt_assessments: bool = False
    certifications: list[str] = Field(default_factory=list)
    trainer_id: TrainerId | None = None
    created_at: datetime.datetime | None = None
    updated_at: datetime.datetime | None = None

    def model_post_init(self, __context: Any) -> None:
        if not self.nickname:
            self.nickname = self.name.strip().split(" ")[0] or "Trainer"

    def has_flag(self, flag: str) -> bool:
        """Whether the trainer carries an eligibility flag: either a boolean
        attribute (eg `can_do_gt_assessments`) or one of their certifications."""
        if flag in type(self).model_fields:
            return getattr(self, flag) is True
        return flag in self.certifications


def _trainers_db() -> pl.DataFrame:
    return get_current_context().get_database(namespace=DatabaseNamespace.TRAINERS)


def list_trainers() -> list[Trainer]:
    return [Trainer(**record) for record in _trainers_db().to_dicts()]


def get_trainer(trainer_id: TrainerId) -> Trainer:
    records = filter_dataframe(
        _trainers_db(),
        filter_criteria=[("trainer_id", trainer_id, exact_match_filter_dataframe)],
    ).to_dicts()
    if not records:
        raise NotFoundError(f"No trainer with id {trainer_id} was found.")
    return Trainer(**records[0])


def find_trainers(name: str) -> list[Trainer]:
    """Find trainers whose name is close to `name`."""
    records = filter_dataframe(
        _trainers_db(),
        filter_criteria=[("name", name, fuzzy_match_filter_dataframe)],
    ).to_dicts()
    return [Trainer(**record) for record in records]


def create_trainer(data: Trainer | dict[str, Any]) -> Trainer:
    context = get_current_context()
    if isinstance(data, dict):
        data = Trainer(**data)
    now = context.now()
    trainer = data.model_copy(
        update={"trainer_id": context.new_id(), "created_at": now, "updated_at": now}
    )
    context.add_to_database(
        namespace=DatabaseNamespace.TRAINERS, rows=[trainer.model_dump()]
    )
    logger.debug(f"Created trainer {trainer.trainer_id} ({trainer.name})")
    return trainer


def delete_trainer(trainer_id: TrainerId) -> None:
    try:
        get_current_context().remove_from_database(
            namespace=DatabaseNamespace.TRAINERS,
            predicate=pl.col("trainer_id") == trainer_id,
        )
    except NoDataError:
        raise NotFoundError(f"No trainer with id {trainer_id} was found.")
