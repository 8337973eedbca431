# -*- coding: utf-8 -*-
"""
OpenWrt Git Manager
 - First-run setup: SSH key, GitHub username, repositories directory
 - Repository finder under the home directory and the repositories directory
 - Status, pull, push, commit, branches, clone, log and diff for the selected repository
"""

from __future__ import annotations

import sys

from . import handlers
from .catalog import make_catalog
from .config import MANAGER_CONFIG, ManagerSettings, SettingsStore
from .credentials import CredentialManager
from .errors import ConfigError, CredentialError, PrerequisiteError
from .logs import configure_action_log, console, log_action, print_error, print_success
from .prompter import make_prompter
from .session import Session
from .shell import check_requirements
from .vcs import GitClient
from .wizard import FirstRunWizard

REQUIRED_TOOLS = ("git", "ssh", "ssh-keygen")

MENU = [
    ("1", "Select repository (Repo finder)", handlers.select_repo),
    ("2", "View status", handlers.show_status),
    ("3", "Pull from remote", handlers.do_pull),
    ("4", "Push to remote", handlers.do_push),
    ("5", "Commit changes", handlers.do_commit),
    ("6", "Branch management", handlers.manage_branches),
    ("7", "Clone new repository", handlers.clone_repo),
    ("8", "View commit log", handlers.view_log),
    ("9", "Show diff", handlers.show_diff),
]
EXIT_CHOICE = "0"
ACTIONS = {key: action for key, _, action in MENU}


def menu_title(session: Session) -> str:
    repo_info = f"Current: {session.active_repo}" if session.active_repo else "No repository selected"
    return f"OpenWrt Git Manager - {repo_info}"


def main_menu(session: Session) -> None:
    options = [(key, label) for key, label, _ in MENU] + [(EXIT_CHOICE, "Exit")]
    while True:
        choice = session.prompter.choose_one(menu_title(session), "Choose an option:", options)
        if choice is None or choice == EXIT_CHOICE:
            break
        action = ACTIONS.get(choice)
        if action is None:
            session.prompter.message("Invalid Option", "Please select a valid option.")
            continue
        action(session)


def build_session(store: SettingsStore = None, prompter=None, vcs=None, credentials=None) -> Session:
    """Load settings, running first-time setup when there is no settings file."""
    store = store or SettingsStore(MANAGER_CONFIG, ManagerSettings)
    prompter = prompter or make_prompter()
    settings, found = store.load()
    configure_action_log(settings.action_log)
    if not found:
        FirstRunWizard(prompter, credentials or CredentialManager(), store, settings).run()
        configure_action_log(settings.action_log)
    return Session(
        settings=settings,
        store=store,
        prompter=prompter,
        vcs=vcs or GitClient(),
        catalog=make_catalog(settings.github_username),
    )


def main() -> int:
    try:
        check_requirements(REQUIRED_TOOLS)
        session = build_session()
        main_menu(session)
    except PrerequisiteError as e:
        console.print(str(e))
        console.print(f"Please install them using: opkg install {' '.join(e.missing)}")
        return 1
    except (CredentialError, ConfigError) as e:
        print_error(str(e))
        return 1
    except KeyboardInterrupt:
        console.print("\n[bold yellow]Interrupted by user. Exiting...[/bold yellow]")
        log_action("Interrupted by user - exited")
        return 0
    print_success("Thank you for using OpenWrt Git Manager!")
    log_action("Exited OpenWrt Git Manager")
    return 0


if __name__ == "__main__":
    sys.exit(main())
