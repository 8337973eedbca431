"""Running the non-git external tools (ssh, ssh-keygen, opkg, cron)."""

from __future__ import annotations

import shutil
import subprocess
from typing import Iterable, List

from .errors import PrerequisiteError
from .vcs import CommandResult


def run_command(cmd: List[str]) -> CommandResult:
    """Run an external tool, capturing merged output and exit status."""
    try:
        proc = subprocess.run(cmd, stdout=subprocess.PIPE, stderr=subprocess.STDOUT, stdin=subprocess.DEVNULL)
    except OSError as e:
        return CommandResult(127, str(e))
    return CommandResult(proc.returncode, proc.stdout.decode(errors="replace").strip())


def check_requirements(tools: Iterable[str]) -> None:
    missing = [tool for tool in tools if shutil.which(tool) is None]
    if missing:
        raise PrerequisiteError(missing)
