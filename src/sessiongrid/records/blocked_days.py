#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
"""Blackout periods declared by the business, and their effect on bookings."""

import datetime
import logging
from copy import deepcopy
from typing import Any

import polars as pl
from dateutil.relativedelta import relativedelta
from polars.exceptions import NoDataError

from sessiongrid.records.sessions import list_sessions
from sessiongrid.scheduling.availability import (
    BlockedDayRule,
    EffectiveBlock,
    expand_rule,
)
from sessiongrid.scheduling.conflicts import cancel_overlapping
from sessiongrid.scheduling.exceptions import NotFoundError
from sessiongrid.storage.context import get_current_context
from sessiongrid.storage.database_schemas import DatabaseNamespace

RuleId = str

logger = logging.getLogger(__name__)


def _rule_from_record(record: dict[str, Any]) -> BlockedDayRule:
    record = deepcopy(record)
    recurrence = record.get("recurrence")
    if recurrence is not None and all(val is None for val in recurrence.values()):
        record["recurrence"] = None
    record.pop("created_at", None)
    record.pop("updated_at", None)
    return BlockedDayRule(**record)


def list_blocked_days() -> list[BlockedDayRule]:
    """Return all stored block rules."""
    blocked_db = get_current_context().get_database(
        namespace=DatabaseNamespace.BLOCKED_DAYS
    )
    return [_rule_from_record(record) for record in blocked_db.to_dicts()]


def add_blocked_day(rule: BlockedDayRule) -> BlockedDayRule:
    """Store a block rule and cancel the scheduled sessions it overlaps.

    Rules without an end date are applied for one year from their start date.
    Nothing is stored if the rule cannot be expanded.
    """
    context = get_current_context()
    now = context.now()
    # revalidate, model_copy skips validation
    created = BlockedDayRule(**{**rule.model_dump(), "rule_id": context.new_id()})
    date_from = created.start_date
    date_to = created.end_date or date_from + relativedelta(years=1)
    blocks = expand_rule(created, date_from, date_to)
    context.add_to_database(
        namespace=DatabaseNamespace.BLOCKED_DAYS,
        rows=[{**created.model_dump(), "created_at": now, "updated_at": now}],
    )
    if blocks:
        sessions = list_sessions(date_from=date_from, date_to=date_to)
        for block in blocks:
            cancel_overlapping(block, sessions)
    logger.info(f"Added blocked day rule {created.rule_id} covering {len(blocks)} day(s)")
    return created


def remove_blocked_day(rule_id: RuleId) -> None:
    """Remove a block rule. Sessions it cancelled stay cancelled."""
    try:
        get_current_context().remove_from_database(
            namespace=DatabaseNamespace.BLOCKED_DAYS,
            predicate=pl.col("rule_id") == rule_id,
        )
    except NoDataError:
        raise NotFoundError(f"No blocked day rule with id {rule_id} was found.")


def list_effective_blocks(
    date_from: datetime.date, date_to: datetime.date
) -> list[EffectiveBlock]:
    """The concrete blocks of every stored rule between `date_from` and
    `date_to` (inclusive), ordered by start."""
    blocks = [
        block
        for rule in list_blocked_days()
        for block in expand_rule(rule, date_from, date_to)
    ]
    return sorted(blocks, key=lambda b: b.start)
