"""Scheduled backups through the router's crontab."""

from __future__ import annotations

import os
import shutil
from typing import List, Optional

from .shell import run_command

CRONTAB_PATH = "/etc/crontabs/root"
CRON_INIT = "/etc/init.d/cron"
MARKER = "# gitwrt-backup"
BACKUP_COMMAND = "router-backup-run"

SCHEDULES = {
    "off": None,
    "hourly": "0 * * * *",
    "daily": "0 3 * * *",
    "weekly": "0 3 * * 0",
}

LABELS = {
    "off": "No automatic backups",
    "hourly": "Every hour",
    "daily": "Every day at 03:00",
    "weekly": "Every Sunday at 03:00",
}


def options():
    return [(name, LABELS[name]) for name in SCHEDULES]


def cron_line(schedule: str, command: Optional[str] = None) -> Optional[str]:
    if schedule not in SCHEDULES:
        raise ValueError(f"Unknown schedule: {schedule}")
    expression = SCHEDULES[schedule]
    if expression is None:
        return None
    command = command or shutil.which(BACKUP_COMMAND) or BACKUP_COMMAND
    return f"{expression} {command} {MARKER}"


def _read(crontab_path: str) -> List[str]:
    if not os.path.isfile(crontab_path):
        return []
    with open(crontab_path) as handle:
        return handle.read().splitlines()


def installed(crontab_path: str = CRONTAB_PATH) -> str:
    """Name of the schedule currently in the crontab, ``off`` when there is none."""
    for line in _read(crontab_path):
        if line.endswith(MARKER):
            for name, expression in SCHEDULES.items():
                if expression and line.startswith(expression + " "):
                    return name
    return "off"


def install(schedule: str, crontab_path: str = CRONTAB_PATH, command: Optional[str] = None) -> None:
    """Replace the tagged crontab line; ``off`` only removes it."""
    line = cron_line(schedule, command)
    lines = [existing for existing in _read(crontab_path) if not existing.endswith(MARKER)]
    if line:
        lines.append(line)
    directory = os.path.dirname(crontab_path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    with open(crontab_path, "w") as handle:
        handle.write("\n".join(lines) + ("\n" if lines else ""))
    if crontab_path == CRONTAB_PATH and os.path.exists(CRON_INIT):
        run_command([CRON_INIT, "restart"])
