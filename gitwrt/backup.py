# -*- coding: utf-8 -*-
"""
OpenWrt Router Backup
 - Snapshots of selected router configuration as commits of a local git repository
 - Changes, history, compare, restore and export of snapshots
 - Optional push to GitHub and a cron schedule for unattended backups
"""

from __future__ import annotations

import sys
from dataclasses import dataclass
from typing import Any, Optional

from . import filesets, schedule
from .config import BACKUP_CONFIG, BackupSettings, SettingsStore
from .credentials import CredentialManager
from .errors import ConfigError, CredentialError, PrerequisiteError
from .logs import configure_action_log, console, log_action, print_error, print_info, print_success, print_warning
from .prompter import make_prompter
from .session import Session, report
from .shell import check_requirements
from .snapshots import NOTHING_TO_COMMIT, BackupService
from .vcs import GitClient
from .wizard import BackupWizard

REQUIRED_TOOLS = ("git", "ssh", "ssh-keygen")
NOT_INITIALISED_MESSAGE = "Backup repository not initialised. Run Settings first."


@dataclass
class BackupSession(Session):
    service: Any = None


def require_backup_repo(session: BackupSession) -> Optional[str]:
    if not session.service.initialised():
        session.prompter.message("Error", NOT_INITIALISED_MESSAGE)
        return None
    return session.service.repo


def save_settings(session: BackupSession) -> bool:
    try:
        session.store.save(session.settings)
    except ConfigError as e:
        session.prompter.message("Error", str(e))
        print_error(str(e))
        return False
    print_success(f"Configuration saved to {session.store.path}")
    return True


def _pick_snapshot(session: BackupSession, title: str, text: str, exclude: str = None) -> Optional[str]:
    snapshots = [s for s in session.service.history() if s.rev != exclude]
    if not snapshots:
        session.prompter.message(title, "No snapshots yet.")
        return None
    options = [(s.short, f"{s.date}  {s.subject}") for s in snapshots]
    choice = session.prompter.choose_one(title, text, options)
    if choice is None:
        return None
    return next(s.rev for s in snapshots if s.short == choice)


# ---------------------------
# Menu actions
# ---------------------------
def backup_now(session: BackupSession) -> None:
    if not require_backup_repo(session):
        return
    note = session.prompter.text_input("Backup Now", "Optional note for this snapshot:")
    if note is None:
        return
    outcome = session.service.backup_now(note.strip())
    if outcome.packages is not None:
        print_warning(f"Package list not refreshed: {outcome.packages.output}")
    if not outcome.changed:
        if NOTHING_TO_COMMIT in outcome.commit.output:
            session.prompter.message("No Changes", "No changes since the last backup.")
            print_info("Nothing to back up")
        else:
            report(session, outcome.commit, "Backup")
        return
    text = outcome.commit.output
    if outcome.push is not None:
        if outcome.push.ok:
            text += "\n\nPushed to remote."
        else:
            text += f"\n\nPush failed:\n{outcome.push.output}"
            print_warning("Snapshot created but push failed")
    session.prompter.message("Backup Successful", text)
    print_success("Backup completed successfully")
    log_action(f"Backup of {session.settings.router_name} created in {session.service.repo}")


def view_changes(session: BackupSession) -> None:
    if not require_backup_repo(session):
        return
    result = session.service.changes()
    if not result.ok:
        report(session, result, "View Changes")
    elif not result.output.strip():
        session.prompter.message("No Changes", "Live configuration matches the latest snapshot.")
    else:
        session.prompter.message("Changes Since Last Backup", result.output, scroll=True)


def show_history(session: BackupSession) -> None:
    if not require_backup_repo(session):
        return
    snapshots = session.service.history()
    if not snapshots:
        session.prompter.message("History", "No snapshots yet.")
        return
    lines = [f"{s.short}  {s.date}  {s.subject}" for s in snapshots]
    session.prompter.message(f"History (Last {len(lines)})", "\n".join(lines), scroll=True)


def restore_snapshot(session: BackupSession) -> None:
    if not require_backup_repo(session):
        return
    rev = _pick_snapshot(session, "Restore", "Select the snapshot to restore:")
    if not rev:
        return
    if not session.prompter.confirm(
        "Restore", f"Overwrite the live configuration with snapshot {rev[:7]}?\nLater snapshots are kept."
    ):
        return
    try:
        restored = session.service.restore(rev)
    except Exception as e:
        session.prompter.message("Restore Failed", f"Restore failed with error:\n\n{e}")
        print_error("Restore failed")
        log_action(f"Restore of {rev} failed: {e}")
        return
    session.prompter.message(
        "Restore Successful",
        f"Restored {len(restored)} files from {rev[:7]}:\n\n" + "\n".join(restored)
        + "\n\nReload the affected services or reboot to apply.",
    )
    print_success(f"Restored snapshot {rev[:7]}")
    log_action(f"Restored snapshot {rev} on {session.settings.router_name}")


def compare_snapshots(session: BackupSession) -> None:
    if not require_backup_repo(session):
        return
    old = _pick_snapshot(session, "Compare", "Select the older snapshot:")
    if not old:
        return
    new = _pick_snapshot(session, "Compare", "Select the newer snapshot:", exclude=old)
    if not new:
        return
    result = session.service.compare(old, new)
    if not result.ok:
        report(session, result, "Compare")
    elif not result.output.strip():
        session.prompter.message("Compare", "The snapshots are identical.")
    else:
        session.prompter.message(f"Compare {old[:7]}..{new[:7]}", result.output, scroll=True)


def health_check(session: BackupSession) -> None:
    checks = session.service.health()
    lines = [f"{'OK ' if c.ok else 'BAD'}  {c.name}: {c.detail}" for c in checks]
    session.prompter.message("Health Check", "\n".join(lines))
    failed = [c.name for c in checks if not c.ok]
    if failed:
        print_warning(f"Health check problems: {', '.join(failed)}")
    else:
        print_success("Health check passed")


def export_snapshot(session: BackupSession) -> None:
    if not require_backup_repo(session):
        return
    if not session.service.history(limit=1):
        session.prompter.message("Export", "No snapshots yet.")
        return
    dest = session.prompter.text_input(
        "Export", "Write the latest snapshot as a tar.gz archive to:", session.service.default_export_path()
    )
    if not dest:
        return
    report(session, session.service.export(dest), "Export", f"Snapshot exported to {dest}")


# ---------------------------
# Settings
# ---------------------------
def edit_router_name(session: BackupSession) -> None:
    name = session.prompter.text_input("Router Name", "Enter a name for this router:", session.settings.router_name)
    if name:
        session.settings.router_name = name
        save_settings(session)


def edit_items(session: BackupSession) -> None:
    items = session.prompter.choose_many(
        "Backup Items", "Select what to back up (use SPACE to select):", filesets.options(), session.settings.item_names
    )
    if items is None:
        return
    if not items:
        session.prompter.message("Backup Items", "Select at least one item.")
        return
    session.settings.item_names = items
    save_settings(session)


def edit_schedule(session: BackupSession) -> None:
    chosen = session.prompter.choose_one(
        "Backup Schedule", "How often should backups run?", schedule.options(), session.settings.schedule
    )
    if not chosen:
        return
    session.settings.schedule = chosen
    if save_settings(session):
        try:
            schedule.install(chosen, session.service.crontab_path)
            print_success(f"Backup schedule set to {chosen}")
        except OSError as e:
            session.prompter.message("Error", f"Could not install backup schedule:\n\n{e}")
            print_error("Schedule not installed")


def edit_backup_dir(session: BackupSession) -> None:
    path = session.prompter.text_input(
        "Backup Directory", "Enter the directory holding the backup repository:", session.settings.backup_dir
    )
    if not path:
        return
    session.settings.backup_dir = path
    if save_settings(session):
        report(session, session.service.initialise(), "Initialise", f"Backup repository ready at {path}")


def edit_remote(session: BackupSession) -> None:
    if not require_backup_repo(session):
        return
    repo = session.service.repo
    current = session.vcs.remote_url(repo)
    if not current and session.settings.github_username:
        current = f"git@github.com:{session.settings.github_username}/{session.settings.router_name}-backup.git"
    url = session.prompter.text_input("Remote", "GitHub repository URL for pushing snapshots:", current or "")
    if not url:
        return
    report(session, session.vcs.set_remote(repo, url), "Set Remote", f"Snapshots will be pushed to {url}")


SETTINGS_ACTIONS = {
    "1": ("Router name", edit_router_name),
    "2": ("Backup items", edit_items),
    "3": ("Backup schedule", edit_schedule),
    "4": ("Backup directory", edit_backup_dir),
    "5": ("Remote repository", edit_remote),
}


def settings_menu(session: BackupSession) -> None:
    while True:
        s = session.settings
        text = f"Router: {s.router_name}\nItems: {s.items}\nSchedule: {s.schedule}\nDirectory: {s.backup_dir}"
        options = [(key, label) for key, (label, _) in SETTINGS_ACTIONS.items()] + [("6", "Back to main menu")]
        choice = session.prompter.choose_one("Settings", text, options)
        if choice not in SETTINGS_ACTIONS:
            return
        SETTINGS_ACTIONS[choice][1](session)


MENU = [
    ("1", "Backup now", backup_now),
    ("2", "View changes since last backup", view_changes),
    ("3", "Restore a snapshot", restore_snapshot),
    ("4", "History", show_history),
    ("5", "Compare snapshots", compare_snapshots),
    ("6", "Health check", health_check),
    ("7", "Export snapshot", export_snapshot),
    ("8", "Settings", settings_menu),
]
EXIT_CHOICE = "0"
ACTIONS = {key: action for key, _, action in MENU}


def main_menu(session: BackupSession) -> None:
    options = [(key, label) for key, label, _ in MENU] + [(EXIT_CHOICE, "Exit")]
    while True:
        title = f"OpenWrt Router Backup - {session.settings.router_name}"
        choice = session.prompter.choose_one(title, "Choose an option:", options)
        if choice is None or choice == EXIT_CHOICE:
            break
        action = ACTIONS.get(choice)
        if action is None:
            session.prompter.message("Invalid Option", "Please select a valid option.")
            continue
        action(session)


def build_session(store: SettingsStore = None, prompter=None, vcs=None, credentials=None, **service_kwargs) -> BackupSession:
    store = store or SettingsStore(BACKUP_CONFIG, BackupSettings)
    prompter = prompter or make_prompter()
    vcs = vcs or GitClient()
    credentials = credentials or CredentialManager()
    settings, found = store.load()
    configure_action_log(settings.action_log)
    service = BackupService(settings, vcs, credentials=credentials, **service_kwargs)
    if not found:
        BackupWizard(prompter, credentials, store, settings, service).run()
        configure_action_log(settings.action_log)
    return BackupSession(settings=settings, store=store, prompter=prompter, vcs=vcs, service=service)


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
    print_success("Thank you for using OpenWrt Router Backup!")
    return 0


def run_scheduled(store: SettingsStore = None, **service_kwargs) -> int:
    """Unattended backup started by cron."""
    store = store or SettingsStore(BACKUP_CONFIG, BackupSettings)
    try:
        settings, found = store.load()
    except ConfigError as e:
        print_error(str(e))
        return 1
    configure_action_log(settings.action_log)
    service = BackupService(settings, **service_kwargs)
    if not found or not service.initialised():
        print_error(NOT_INITIALISED_MESSAGE)
        return 1
    outcome = service.backup_now("scheduled")
    if outcome.packages is not None:
        print_warning(f"Package list not refreshed: {outcome.packages.output}")
        log_action(f"Package list not refreshed: {outcome.packages.output}")
    if outcome.changed:
        print_success(f"Backup of {settings.router_name} created")
        log_action(f"Scheduled backup of {settings.router_name} created")
        if outcome.push is not None and not outcome.push.ok:
            print_warning(f"Push failed: {outcome.push.output}")
            return 1
        return 0
    if NOTHING_TO_COMMIT in outcome.commit.output:
        print_info("No changes since the last backup")
        return 0
    print_error(f"Backup failed: {outcome.commit.output}")
    log_action(f"Scheduled backup failed: {outcome.commit.output}")
    return 1


if __name__ == "__main__":
    sys.exit(main())
