"""
Dialog backends.

Both prompters expose the same five calls; ``None`` from a call means the user
cancelled. ``WhiptailPrompter`` drives the whiptail binary found on OpenWrt,
``RichPrompter`` renders numbered tables and prompts in the terminal.
"""

from __future__ import annotations

import os
import re
import shutil
import subprocess
from typing import List, Optional, Sequence, Tuple

from rich.markup import escape
from rich.panel import Panel
from rich.prompt import Confirm, Prompt
from rich.table import Table
from rich.text import Text

from .logs import console

Options = Sequence[Tuple[str, str]]

CANCEL = "q"


class RichPrompter:
    def __init__(self, console_obj=console) -> None:
        self.console = console_obj

    def _header(self, title: str, text: str) -> None:
        self.console.rule(f"[bold blue]{escape(title)}[/bold blue]")
        if text:
            self.console.print(Text(text))

    def _table(self, options: Options, marks: Optional[Sequence[str]] = None) -> None:
        table = Table(show_header=False, box=None)
        table.add_column("Tag", justify="right", style="cyan")
        if marks is not None:
            table.add_column("Sel", justify="center")
        table.add_column("Label")
        for tag, label in options:
            row = [Text(tag)]
            if marks is not None:
                row.append("[green]x[/green]" if tag in marks else " ")
            row.append(Text(label))
            table.add_row(*row)
        self.console.print(table)

    def choose_one(self, title: str, text: str, options: Options, default: Optional[str] = None) -> Optional[str]:
        self._header(title, text)
        self._table(options)
        self.console.print(f"[blue]{CANCEL}[/blue] → Cancel")
        tags = [tag for tag, _ in options]
        try:
            choice = Prompt.ask("👉 Enter your choice", choices=tags + [CANCEL], default=default, show_choices=False)
        except EOFError:
            return None
        return None if choice == CANCEL else choice

    def choose_many(self, title: str, text: str, options: Options, selected: Sequence[str] = ()) -> Optional[List[str]]:
        self._header(title, text)
        self._table(options, marks=selected)
        tags = [tag for tag, _ in options]
        while True:
            try:
                answer = Prompt.ask(
                    f"👉 Tags separated by spaces or commas (blank for none, {CANCEL} to cancel)",
                    default=" ".join(selected),
                    show_default=bool(selected),
                )
            except EOFError:
                return None
            if answer.strip() == CANCEL:
                return None
            picked = [word for word in re.split(r"[\s,]+", answer) if word]
            unknown = [word for word in picked if word not in tags]
            if unknown:
                self.console.print(f"[red]Unknown: {' '.join(unknown)}[/red]")
                continue
            return [tag for tag in tags if tag in picked]

    def text_input(self, title: str, text: str, default: str = "") -> Optional[str]:
        self._header(title, "")
        try:
            if default:
                return Prompt.ask(text, default=default)
            return Prompt.ask(text)
        except EOFError:
            return None

    def message(self, title: str, text: str, scroll: bool = False) -> None:
        panel = Panel(Text(text), title=Text(title), expand=False)
        if scroll:
            with self.console.pager():
                self.console.print(panel)
        else:
            self.console.print(panel)
            try:
                Prompt.ask("Press Enter to continue", default="", show_default=False)
            except EOFError:
                pass

    def confirm(self, title: str, text: str, default: bool = False) -> bool:
        self._header(title, "")
        try:
            return Confirm.ask(text, default=default)
        except EOFError:
            return False


class WhiptailPrompter:
    def __init__(self, binary: str = "whiptail") -> None:
        self.binary = binary

    def _size(self, rows: int = 0) -> Tuple[int, int, int]:
        cols, lines = shutil.get_terminal_size((80, 24))
        height = max(8, min(lines - 2, 12 + rows))
        width = max(40, min(cols - 4, 100))
        return height, width, max(1, min(rows, height - 8))

    def _run(self, title: str, *args: str) -> Tuple[int, str]:
        # whiptail draws on stdout and writes the answer to stderr
        proc = subprocess.run([self.binary, "--title", title, *args], stderr=subprocess.PIPE)
        return proc.returncode, proc.stderr.decode(errors="replace").strip()

    def choose_one(self, title: str, text: str, options: Options, default: Optional[str] = None) -> Optional[str]:
        height, width, list_height = self._size(len(options))
        args = ["--default-item", default] if default else []
        items = [value for option in options for value in option]
        status, answer = self._run(title, *args, "--menu", text, str(height), str(width), str(list_height), *items)
        return answer if status == 0 and answer else None

    def choose_many(self, title: str, text: str, options: Options, selected: Sequence[str] = ()) -> Optional[List[str]]:
        height, width, list_height = self._size(len(options))
        items = []
        for tag, label in options:
            items += [tag, label, "ON" if tag in selected else "OFF"]
        status, answer = self._run(
            title, "--separate-output", "--checklist", text, str(height), str(width), str(list_height), *items
        )
        if status != 0:
            return None
        return [line.strip().strip('"') for line in answer.splitlines() if line.strip()]

    def text_input(self, title: str, text: str, default: str = "") -> Optional[str]:
        height, width, _ = self._size()
        status, answer = self._run(title, "--inputbox", text, str(height), str(width), default)
        return answer if status == 0 else None

    def message(self, title: str, text: str, scroll: bool = False) -> None:
        height, width, _ = self._size(text.count("\n") + 1)
        self._run(title, "--msgbox", text, str(height), str(width), *(["--scrolltext"] if scroll else []))

    def confirm(self, title: str, text: str, default: bool = False) -> bool:
        height, width, _ = self._size()
        args = [] if default else ["--defaultno"]
        status, _ = self._run(title, *args, "--yesno", text, str(height), str(width))
        return status == 0


def make_prompter():
    """Pick the dialog backend from GITWRT_UI, preferring whiptail when installed."""
    choice = os.environ.get("GITWRT_UI", "").lower()
    if choice == "rich":
        return RichPrompter()
    if choice == "whiptail" or shutil.which("whiptail"):
        return WhiptailPrompter()
    return RichPrompter()
