#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
"""Dense schedule generation for populating demo and test calendars.

Each session kind owns a fixed number of lanes (seats). The business day is
scanned in fixed increments and, whenever a lane is free, a session is placed
in it with a given probability. Lanes are never shared between kinds, so two
kinds may run at the same time; within a lane placements never overlap.
Placement is greedy: nothing is moved once it has been placed.
"""

import datetime
import logging
import random
from typing import Any, Callable, Mapping, Protocol, Self, Sequence, TypeVar

from omegaconf import DictConfig, OmegaConf
from pydantic import BaseModel, ConfigDict, Field, model_validator

from sessiongrid.records.sessions import Session, SessionStatus
from sessiongrid.records.students import Student
from sessiongrid.records.trainers import Trainer
from sessiongrid.scheduling.availability import validate_time_range
from sessiongrid.scheduling.exceptions import ExhaustedInputError
from sessiongrid.scheduling.time_utils import (
    ClockTime,
    from_minutes,
    overlaps,
    to_minutes,
)

T = TypeVar("T")

EligibilityPredicate = Callable[[Trainer], bool]

logger = logging.getLogger(__name__)


class RandomSource(Protocol):
    """The randomness the generator consumes. `random.Random` satisfies it,
    so seeding one makes generation reproducible."""

    def random(self) -> float: ...

    def choice(self, seq: Sequence[T]) -> T: ...


def bernoulli(rng: RandomSource, probability: float) -> bool:
    """Draw `True` with the given probability."""
    return rng.random() < probability


def draw(rng: RandomSource, distribution: Sequence[T]) -> T:
    """Draw uniformly from a multiset, so repeated values are proportionally
    more likely (eg `[60, 60, 45]` yields 60 two times out of three)."""
    if not distribution:
        raise ExhaustedInputError("Cannot draw from an empty distribution")
    return rng.choice(distribution)


def weighted_choice(rng: RandomSource, options: Mapping[T, float]) -> T:
    """Draw one of the keys of `options` with probability proportional to its weight."""
    total = sum(options.values())
    if total <= 0:
        raise ExhaustedInputError("At least one option should have a positive weight")
    threshold = rng.random() * total
    cumulative = 0.0
    for option, weight in options.items():
        cumulative += weight
        if threshold < cumulative:
            return option
    # only reachable through floating point rounding
    return option


class TimeWindow(BaseModel, frozen=True):
    start: ClockTime
    end: ClockTime

    @model_validator(mode="after")
    def _check_window(self) -> Self:
        validate_time_range(self.start, self.end)
        return self

    @property
    def start_minutes(self) -> int:
        return to_minutes(self.start)

    @property
    def end_minutes(self) -> int:
        return to_minutes(self.end)


class GenerationWindow(TimeWindow, frozen=True):
    """A part of the day in which sessions of a kind are placed.

    Parameters
    ----------
    probability
        Chance that a free lane receives a session at each scan step. Values
        below 1 leave organic gaps instead of fully packed lanes.
    """

    probability: float = Field(default=1.0, ge=0.0, le=1.0)


class GenerationConfig(BaseModel):
    """Generation rules for one session kind.

    Parameters
    ----------
    kind
        The session type of the generated sessions.
    lane_count
        Number of sessions of this kind that may run at the same time.
    windows
        Processed in declaration order.
    durations
        Allowed session lengths in minutes, as a multiset.
    gaps
        Idle minutes left in a lane after a session, as a multiset.
    required_flag
        Trainer flag (see `Trainer.has_flag`) that makes a trainer eligible.
    eligibility
        Custom trainer predicate, applied in addition to `required_flag`.
    cap
        Maximum number of sessions of this kind on the day, counting the ones
        that already exist. Unlimited if not set.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    kind: str
    lane_count: int = Field(ge=1)
    windows: list[GenerationWindow] = Field(min_length=1)
    durations: list[int] = Field(min_length=1)
    gaps: list[int] = Field(default_factory=lambda: [0], min_length=1)
    required_flag: str | None = None
    eligibility: EligibilityPredicate | None = None
    cap: int | None = Field(default=None, ge=0)
    notes: str | None = None

    @model_validator(mode="after")
    def _check_distributions(self) -> Self:
        if any(d <= 0 for d in self.durations):
            raise ValueError(f"Session durations must be positive for {self.kind}")
        if any(g < 0 for g in self.gaps):
            raise ValueError(f"Gaps cannot be negative for {self.kind}")
        return self

    def is_eligible(self, trainer: Trainer) -> bool:
        if self.required_flag is not None and not trainer.has_flag(self.required_flag):
            return False
        if self.eligibility is not None and not self.eligibility(trainer):
            return False
        return True

    @property
    def has_eligibility_rule(self) -> bool:
        return self.required_flag is not None or self.eligibility is not None


class GenerationSettings(BaseModel):
    """Constraints shared by all session kinds.

    Parameters
    ----------
    day_start, day_end
        The business day. No session starts before `day_start` or runs past `day_end`.
    increment
        Scan step, in minutes.
    blackouts
        Reserved windows (eg lunch) that no session may overlap, even partially.
    seat_range
        If set, seats are drawn at random from 1..`seat_range`. Otherwise each
        session gets the seat matching its lane (lane 0 is seat 1).
    """

    day_start: ClockTime = "10:00"
    day_end: ClockTime = "19:00"
    increment: int = Field(default=15, ge=1)
    blackouts: list[TimeWindow] = Field(
        default_factory=lambda: [TimeWindow(start="12:30", end="13:30")]
    )
    seat_range: int | None = Field(default=None, ge=1)

    @model_validator(mode="after")
    def _check_day(self) -> Self:
        validate_time_range(self.day_start, self.day_end)
        return self

    def fits(self, start: int, duration: int, window_end: int) -> bool:
        """Whether a session of `duration` minutes starting at `start` stays
        inside its window and the business day and clears every blackout."""
        end = start + duration
        if end > window_end or end > to_minutes(self.day_end):
            return False
        return not any(
            overlaps(start, end, b.start_minutes, b.end_minutes)
            for b in self.blackouts
        )


def _select_trainer(
    rng: RandomSource,
    trainers: list[Trainer],
    eligible: list[Trainer],
    config: GenerationConfig,
    strict_eligibility: bool,
) -> Trainer:
    if not trainers:
        raise ExhaustedInputError(f"No trainer available for a {config.kind} session")
    if not config.has_eligibility_rule:
        return rng.choice(trainers)
    if eligible:
        return rng.choice(eligible)
    if strict_eligibility:
        raise ExhaustedInputError(
            f"No trainer satisfies the eligibility rule of {config.kind} sessions"
        )
    return rng.choice(trainers)


def _generate_kind(
    day: datetime.date,
    config: GenerationConfig,
    trainers: list[Trainer],
    students: list[Student],
    quota: int | None,
    rng: RandomSource,
    settings: GenerationSettings,
    strict_eligibility: bool,
) -> list[Session]:
    placements = []
    if quota == 0:
        return placements
    day_start, day_end = to_minutes(settings.day_start), to_minutes(settings.day_end)
    # minute offset at which each lane is free again
    free_at = [day_start] * config.lane_count
    eligible = [t for t in trainers if config.is_eligible(t)]
    if config.has_eligibility_rule and trainers and not eligible:
        if not strict_eligibility:
            logger.warning(
                f"No trainer is eligible for {config.kind} sessions, "
                "any trainer will be assigned instead"
            )
    for window in config.windows:
        window_start = max(window.start_minutes, day_start)
        window_end = min(window.end_minutes, day_end)
        for offset in range(window_start, window_end, settings.increment):
            for lane in range(config.lane_count):
                if free_at[lane] > offset:
                    continue
                if quota is not None and len(placements) >= quota:
                    return placements
                if not bernoulli(rng, window.probability):
                    continue
                duration = draw(rng, config.durations)
                if not settings.fits(offset, duration, window_end):
                    continue
                trainer = _select_trainer(
                    rng, trainers, eligible, config, strict_eligibility
                )
                if not students:
                    raise ExhaustedInputError(
                        f"No student available for a {config.kind} session"
                    )
                student = rng.choice(students)
                if settings.seat_range is not None:
                    seat = rng.choice(range(1, settings.seat_range + 1))
                else:
                    seat = lane + 1
                session = Session(
                    session_type=config.kind,
                    trainer_id=trainer.trainer_id,
                    student_id=student.student_id,
                    date=day,
                    start_time=from_minutes(offset),
                    end_time=from_minutes(offset + duration),
                    status=SessionStatus.Scheduled,
                    assigned_seat=seat,
                    notes=config.notes,
                )
                placements.append(session)
                logger.debug(
                    f"Placed {config.kind} in lane {lane}: "
                    f"{session.start_time}-{session.end_time}"
                )
                free_at[lane] = offset + duration + draw(rng, config.gaps)
    return placements


def generate(
    day: datetime.date,
    configs: list[GenerationConfig],
    trainers: list[Trainer],
    students: list[Student],
    existing_counts: Mapping[str, int] | None = None,
    rng: RandomSource | None = None,
    settings: GenerationSettings | None = None,
    strict_eligibility: bool = False,
) -> list[Session]:
    """Generate a dense set of non-overlapping sessions on `day`.

    Parameters
    ----------
    day
        The day to fill.
    configs
        Generation rules, one per session kind. Kinds are filled independently.
    trainers, students
        The pools participants are drawn from.
    existing_counts
        Number of sessions of each kind already booked on `day`. They count
        towards each kind's cap.
    rng
        Source of randomness. Pass a seeded `random.Random` for reproducible output.
    settings
        Business day, scan increment and blackouts. Defaults to a 10:00-19:00
        day in 15 minute steps with a 12:30-13:30 lunch break.
    strict_eligibility
        If set, a kind whose eligibility rule no trainer satisfies raises
        instead of falling back to the whole trainer pool.

    Returns
    -------
    Unsaved `scheduled` sessions. Nothing is written to the store.
    Each session sits on the seat of the lane it was placed in (lane 0 is
    seat 1), so sessions sharing a seat never overlap. Set
    `settings.seat_range` to draw seats at random instead.

    Raises
    ------
    ExhaustedInputError
        If a session has to be placed but the trainer or student pool is empty,
        or, with `strict_eligibility`, no trainer is eligible.
    """
    rng = rng or random.Random()
    settings = settings or GenerationSettings()
    existing_counts = existing_counts or {}
    sessions = []
    for config in configs:
        quota = None
        if config.cap is not None:
            quota = max(0, config.cap - existing_counts.get(config.kind, 0))
        placed = _generate_kind(
            day,
            config,
            trainers,
            students,
            quota,
            rng,
            settings,
            strict_eligibility,
        )
        logger.info(f"Generated {len(placed)} {config.kind} session(s) on {day}")
        sessions.extend(placed)
    return sessions


def load_generation_configs(
    cfg: DictConfig,
) -> tuple[GenerationSettings, list[GenerationConfig]]:
    """Build the generation settings and per-kind rules from a config with
    `settings` and `kinds` nodes."""
    container: dict[str, Any] = OmegaConf.to_container(cfg, resolve=True)
    settings = GenerationSettings(**container.get("settings", {}))
    configs = [GenerationConfig(**kind) for kind in container.get("kinds", [])]
    return settings, configs
