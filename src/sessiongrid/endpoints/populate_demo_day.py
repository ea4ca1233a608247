#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
import datetime
import json
import logging
import random
from pathlib import Path

import hydra
from omegaconf import DictConfig, OmegaConf

from sessiongrid.display import display_day, display_workloads
from sessiongrid.records.sessions import list_sessions
from sessiongrid.records.students import list_students
from sessiongrid.records.trainers import list_trainers
from sessiongrid.scheduling.generation import load_generation_configs
from sessiongrid.scheduling.workload import (
    calculate_trainer_workloads,
    workload_summary,
)
from sessiongrid.seeding.demo_day import populate_demo_day
from sessiongrid.seeding.seed import seed_if_empty, simulate_students
from sessiongrid.storage.context import StorageContext, new_context

logger = logging.getLogger(__name__)


@hydra.main(config_name="demo_day", config_path="pkg://sessiongrid.configs")
def main(cfg: DictConfig):
    logger.info(OmegaConf.to_yaml(cfg, resolve=True))
    day = datetime.date.fromisoformat(str(cfg.day))
    rng = random.Random(cfg.seed)
    settings, configs = load_generation_configs(cfg)

    with new_context(StorageContext()) as context:
        seed_if_empty(today=day)
        if cfg.extra_students:
            simulate_students(list(cfg.extra_students), rng=rng)
        populate_demo_day(
            day,
            configs,
            settings=settings,
            rng=rng,
            strict_eligibility=cfg.strict_eligibility,
        )

        trainers = list_trainers()
        display_day(
            list_sessions(date=day),
            trainer_names={t.trainer_id: t.nickname for t in trainers},
            student_names={s.student_id: s.name for s in list_students()},
        )
        workloads = calculate_trainer_workloads(
            trainers,
            list_sessions(),
            now=datetime.datetime.combine(day, datetime.time(12)),
        )
        display_workloads(workloads)
        logger.info(f"Workload summary: {workload_summary(workloads)}")

        if cfg.out_path:
            out_path = Path(cfg.out_path)
            out_path.parent.mkdir(parents=True, exist_ok=True)
            with open(out_path, "w") as f:
                json.dump(context.to_dict(), f, indent=2)
            logger.info(f"Saved the populated store to {out_path}")


if __name__ == "__main__":
    main()
