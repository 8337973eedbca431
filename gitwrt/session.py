"""State of one interactive run and the helpers every handler shares."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from .logs import log_action, print_error, print_success
from .vcs import CommandResult

NO_REPO_MESSAGE = "No repository selected."


@dataclass
class Session:
    settings: Any
    store: Any
    prompter: Any
    vcs: Any
    # selected with the repository finder; lives only as long as the process
    active_repo: Optional[str] = None
    catalog: Any = None


def require_repo(session: Session) -> Optional[str]:
    """Return the active repository, or show the error dialog and return ``None``."""
    if not session.active_repo:
        session.prompter.message("Error", NO_REPO_MESSAGE)
        return None
    return session.active_repo


def report(session: Session, result: CommandResult, action: str, success_text: Optional[str] = None) -> bool:
    """Render the result dialog for ``action`` and print the status line."""
    if result.ok:
        text = success_text + ("\n\n" + result.output if result.output else "") if success_text else result.output
        session.prompter.message(f"{action} Successful", text)
        print_success(f"{action} completed successfully")
        log_action(f"{action} succeeded in {session.active_repo or session.settings.storage_root}")
    else:
        session.prompter.message(f"{action} Failed", f"{action} failed with error:\n\n{result.output}")
        print_error(f"{action} failed")
        log_action(f"{action} failed in {session.active_repo or session.settings.storage_root}: {result.output}")
    return result.ok
