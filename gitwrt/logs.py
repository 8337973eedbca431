# -*- coding: utf-8 -*-
"""Console status lines and the optional action log."""

from __future__ import annotations

import os
from datetime import datetime
from typing import Optional

from rich.console import Console
from rich.markup import escape

console = Console()

# Empty means the action log is disabled.
ACTION_LOG: Optional[str] = None


def configure_action_log(path: Optional[str]) -> None:
    global ACTION_LOG
    ACTION_LOG = os.path.expanduser(path) if path else None


def log_action(action_text: str) -> None:
    if not ACTION_LOG:
        return
    try:
        directory = os.path.dirname(ACTION_LOG)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(ACTION_LOG, "a") as log:
            log.write(f"[{datetime.now().strftime('%Y-%m-%d %H:%M:%S')}] {action_text}\n")
    except OSError:
        # non-fatal if logging fails
        pass


def print_success(text: str) -> None:
    console.print(f"[green]✓ {escape(text)}[/green]", highlight=False)


def print_error(text: str) -> None:
    console.print(f"[red]✗ {escape(text)}[/red]", highlight=False)


def print_warning(text: str) -> None:
    console.print(f"[yellow]⚠ {escape(text)}[/yellow]", highlight=False)


def print_info(text: str) -> None:
    console.print(f"→ {escape(text)}", highlight=False)
