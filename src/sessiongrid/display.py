#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
from rich.console import Console
from rich.table import Table

from sessiongrid.records.sessions import Session, SessionStatus
from sessiongrid.scheduling.time_utils import format_time
from sessiongrid.scheduling.workload import TrainerWorkload, WorkloadStatus

STATUS_STYLES = {
    SessionStatus.Scheduled: "green",
    SessionStatus.Completed: "blue",
    SessionStatus.Cancelled: "red strike",
    SessionStatus.NoShow: "yellow",
}
WORKLOAD_STYLES = {
    WorkloadStatus.ideal: "green",
    WorkloadStatus.approaching: "yellow",
    WorkloadStatus.overloaded: "red",
}


def display_day(
    sessions: list[Session],
    trainer_names: dict[str, str] | None = None,
    student_names: dict[str, str] | None = None,
    console: Console | None = None,
):
    """Display the sessions of a day as a rich table with the following format

    ┏━━━━━━━━━━━━━━━━━━━┳━━━━━━┳━━━━━━━━━━━━━━━━━━━━┳━━━━━━━━━┳━━━━━━━━━┳━━━━━━━━━━━┓
    ┃ Kind              ┃ Seat ┃ Time               ┃ Trainer ┃ Student ┃ Status    ┃
    ┡━━━━━━━━━━━━━━━━━━━╇━━━━━━╇━━━━━━━━━━━━━━━━━━━━╇━━━━━━━━━╇━━━━━━━━━╇━━━━━━━━━━━┩
    """  # noqa

    trainer_names = trainer_names or {}
    student_names = student_names or {}
    console = console or Console()
    table = Table(show_header=True, header_style="bold magenta", expand=True)

    table.add_column("Kind", style="cyan", no_wrap=True)
    table.add_column("Seat", justify="right")
    table.add_column("Time", no_wrap=True)
    table.add_column("Trainer")
    table.add_column("Student")
    table.add_column("Status", justify="center")

    ordered = sorted(
        sessions, key=lambda s: (s.session_type, s.assigned_seat or 0, s.start_time)
    )
    for session in ordered:
        status = SessionStatus(session.status)
        table.add_row(
            session.session_type,
            str(session.assigned_seat or "-"),
            f"{format_time(session.start_time)} - {format_time(session.end_time)}",
            trainer_names.get(session.trainer_id, session.trainer_id),
            student_names.get(session.student_id, session.student_id),
            f"[{STATUS_STYLES[status]}]{status.value}[/]",
        )

    console.print(table)


def display_workloads(workloads: list[TrainerWorkload], console: Console | None = None):
    console = console or Console()
    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Trainer", style="cyan")
    table.add_column("Students", justify="right")
    table.add_column("Status", justify="center")
    for workload in workloads:
        table.add_row(
            workload.trainer_name,
            str(workload.student_count),
            f"[{WORKLOAD_STYLES[workload.status]}]{workload.status.value}[/]",
        )
    console.print(table)
