"""Command-line session state shared by the global callback and the commands."""

from __future__ import annotations

from pathlib import Path

from .scheduler.config import SchedulingConfig


class _Session:
    """Options and configuration resolved once per CLI invocation."""

    def __init__(self) -> None:
        self.config_path: Path | None = None
        self.scheduler_config: SchedulingConfig | None = None


_session = _Session()


def get_config_path() -> Path | None:
    """Get the config path given with --config, if any."""
    return _session.config_path


def set_config_path(path: Path | None) -> None:
    _session.config_path = path


def get_scheduler_config() -> SchedulingConfig:
    """Get the scheduler config loaded for this session, or the defaults."""
    if _session.scheduler_config is None:
        return SchedulingConfig()
    return _session.scheduler_config


def set_scheduler_config(config: SchedulingConfig | None) -> None:
    _session.scheduler_config = config


def reset_session() -> None:
    """Forget everything set by a previous invocation."""
    _session.config_path = None
    _session.scheduler_config = None
