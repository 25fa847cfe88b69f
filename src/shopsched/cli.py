"""Command-line interface for shopsched."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer

from . import context
from .config import ShopSchedConfig, discover_config, load_config
from .exceptions import ShopSchedError
from .logger import setup_logger
from .schedule import Schedule
from .scheduler import (
    DispatchRule,
    SchedulingConfig,
    SchedulingService,
    find_machine_conflicts,
)
from .timeutil import format_time

app = typer.Typer(
    name="shopsched",
    help="Machine scheduling with precedence constraints",
    add_completion=False,
)


@app.callback()
def main_callback(
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose",
            "-v",
            help="Verbosity level: 0=silent (default), 1=show changes, 2=show all checks, 3=debug",
            min=0,
            max=3,
        ),
    ] = 0,
    config: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to config file (default: shopsched.yaml)",
        ),
    ] = None,
) -> None:
    """Global options for shopsched commands."""
    setup_logger(verbose)
    context.reset_session()
    context.set_config_path(config)
    context.set_scheduler_config(_load_scheduler_config(config))


def _load_scheduler_config(path: Path | None) -> SchedulingConfig:
    config_path = discover_config(path)
    if config_path is None:
        return ShopSchedConfig().scheduler
    try:
        return load_config(config_path).scheduler
    except (FileNotFoundError, ShopSchedError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from e


def _display_tasks(schedule: Schedule) -> None:
    for machine in schedule.machines:
        typer.echo(machine.name)
        for task in sorted(schedule.tasks_for_machine(machine.id), key=lambda t: t.start_time):
            line = f"  {task.name}: {format_time(task.start_time)}-{format_time(task.end_time)}"
            if task.is_violation:
                line += "  (violation)"
            typer.echo(line)


@app.command()
def schedule(
    rule: Annotated[
        DispatchRule | None,
        typer.Option("--rule", "-r", help="Dispatch rule. Overrides config"),
    ] = None,
    fix: Annotated[
        bool,
        typer.Option("--fix", help="Repair precedence violations left by the dispatch rule"),
    ] = False,
) -> None:
    """Schedule the sample shop and display the result."""
    scheduler_config = context.get_scheduler_config()
    if rule is not None:
        scheduler_config = scheduler_config.model_copy(update={"rule": rule})
    if fix:
        scheduler_config = scheduler_config.model_copy(update={"auto_fix": True})

    shop = Schedule.create_sample()
    result = SchedulingService(shop, scheduler_config).schedule_tasks()

    _display_tasks(shop)
    typer.echo("")
    typer.echo(result.message)
    for violation in result.violations:
        typer.echo(f"  - {violation.message}")

    if result.warnings:
        typer.echo("\nWarnings:", err=True)
        for warning in result.warnings:
            typer.echo(f"  - {warning}", err=True)

    if not result.success:
        raise typer.Exit(1)


@app.command()
def validate() -> None:
    """Validate precedences and machine usage of the sample shop."""
    shop = Schedule.create_sample()
    service = SchedulingService(shop, context.get_scheduler_config())
    result = service.validate()

    typer.echo(result.message)
    for violation in result.violations:
        typer.echo(f"  - {violation.message}")

    for conflict in find_machine_conflicts(service.view):
        machine = shop.get_machine(conflict.machine_id)
        first = shop.get_task(conflict.first_task_id)
        second = shop.get_task(conflict.second_task_id)
        assert machine is not None and first is not None and second is not None
        typer.echo(
            f"Machine conflict on {machine.name}: '{first.name}' and '{second.name}' "
            f"overlap by {format_time(conflict.overlap)}"
        )

    if not result.success:
        raise typer.Exit(1)


@app.command()
def metrics() -> None:
    """Display quality metrics of the sample shop."""
    shop = Schedule.create_sample()
    figures = SchedulingService(shop, context.get_scheduler_config()).metrics()

    typer.echo(f"Tasks:            {figures.task_count}")
    typer.echo(f"Machines:         {figures.machine_count}")
    typer.echo(f"Jobs:             {figures.job_count}")
    typer.echo(f"Makespan:         {format_time(figures.makespan)}")
    typer.echo(f"Processing time:  {format_time(figures.total_processing_time)}")
    typer.echo(f"Avg flow time:    {format_time(figures.average_flow_time)}")
    typer.echo(f"Utilization:      {figures.machine_utilization:.1f}%")
    typer.echo(f"Violations:       {figures.violation_count}")
    typer.echo(f"Late jobs:        {figures.late_job_count}")
    typer.echo(f"Avg machine load: {figures.average_machine_utilization:.1f}%")
    for stat in figures.machine_stats:
        typer.echo(f"  {stat.name}: {stat.utilization:.1f}% ({stat.task_count} tasks)")


def main() -> int:
    """Main entry point."""
    # Typer handles sys.exit() internally
    app()
    return 0


if __name__ == "__main__":
    main()
