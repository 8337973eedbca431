"""
Router configuration snapshots kept as commits of a local git repository.

The repository working tree mirrors the selected live files; a backup copies
them in and commits, a restore writes a past commit's files back to their live
locations. Snapshots are never deleted here.
"""

from __future__ import annotations

import os
import shutil
import socket
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, List, Optional

import requests

from . import filesets, schedule
from .credentials import CredentialManager
from .shell import run_command
from .vcs import CommandResult, GitClient, Snapshot

NOTHING_TO_COMMIT = "nothing to commit"
GITHUB_HTTPS = "https://github.com"

# Age after which the last snapshot counts as overdue, per schedule.
OVERDUE = {
    "hourly": timedelta(hours=2),
    "daily": timedelta(days=2),
    "weekly": timedelta(days=8),
}


@dataclass
class BackupOutcome:
    commit: CommandResult
    changed: bool
    push: Optional[CommandResult] = None
    packages: Optional[CommandResult] = None


@dataclass
class HealthCheck:
    name: str
    ok: bool
    detail: str


class BackupService:
    def __init__(
        self,
        settings,
        vcs: Optional[GitClient] = None,
        live_root: str = "/",
        runner: Callable[[List[str]], CommandResult] = run_command,
        credentials: Optional[CredentialManager] = None,
        crontab_path: str = schedule.CRONTAB_PATH,
    ) -> None:
        self.settings = settings
        self.vcs = vcs or GitClient()
        self.live_root = live_root
        self.runner = runner
        self.credentials = credentials or CredentialManager()
        self.crontab_path = crontab_path
        self.packages_failure: Optional[CommandResult] = None

    @property
    def repo(self) -> str:
        return self.settings.backup_dir

    def initialised(self) -> bool:
        return self.vcs.is_repository(self.repo)

    def initialise(self) -> CommandResult:
        """Create the snapshot repository if needed and give it a committer identity."""
        if self.initialised():
            result = CommandResult(0, f"Using existing repository {self.repo}")
        else:
            result = self.vcs.init(self.repo)
        if result.ok:
            router = self.settings.router_name or socket.gethostname()
            self.vcs.ensure_identity(self.repo, router, f"{router}@{socket.gethostname()}")
        return result

    # ---------------------------
    # Working tree
    # ---------------------------
    def _tracked_files(self) -> List[str]:
        files = []
        for current, dirs, names in os.walk(self.repo):
            if ".git" in dirs:
                dirs.remove(".git")
            for name in names:
                full = os.path.join(current, name)
                files.append(os.path.relpath(full, self.repo).replace(os.sep, "/"))
        return files

    def sync(self) -> List[str]:
        """Mirror the selected live files into the working tree; returns the repository paths kept.

        A failed package listing keeps the previous package list and is remembered
        in ``packages_failure``.
        """
        paths = filesets.resolve(self.settings.item_names)
        written = []
        self.packages_failure = None
        for source, rel in filesets.live_files(paths, self.live_root):
            dest = os.path.join(self.repo, rel)
            os.makedirs(os.path.dirname(dest), exist_ok=True)
            shutil.copy2(source, dest)
            written.append(rel)
        if filesets.PACKAGES_FILE in paths:
            result = self.runner(["opkg", "list-installed"])
            listing = os.path.join(self.repo, filesets.PACKAGES_FILE)
            if result.ok:
                with open(listing, "w") as handle:
                    handle.write(result.output + "\n")
                written.append(filesets.PACKAGES_FILE)
            else:
                self.packages_failure = result
                if os.path.isfile(listing):
                    written.append(filesets.PACKAGES_FILE)
        for rel in self._tracked_files():
            if rel not in written:
                os.remove(os.path.join(self.repo, rel))
        return written

    # ---------------------------
    # Operations
    # ---------------------------
    def backup_now(self, note: str = "") -> BackupOutcome:
        self.sync()
        added = self.vcs.add_all(self.repo)
        if not added.ok:
            return BackupOutcome(added, False, packages=self.packages_failure)
        message = f"Backup {self.settings.router_name} {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}"
        if note:
            message += f": {note}"
        commit = self.vcs.commit(self.repo, message)
        if not commit.ok:
            return BackupOutcome(commit, False, packages=self.packages_failure)
        outcome = BackupOutcome(commit, True, packages=self.packages_failure)
        if self.vcs.remote_url(self.repo):
            outcome.push = self.vcs.push(self.repo)
        return outcome

    def changes(self) -> CommandResult:
        """Differences between the live files and the latest snapshot."""
        self.sync()
        added = self.vcs.add_all(self.repo)
        if not added.ok:
            return added
        return self.vcs.staged_diff(self.repo)

    def history(self, limit: int = 30) -> List[Snapshot]:
        return self.vcs.snapshots(self.repo, limit)

    def restore(self, rev: str) -> List[str]:
        """Write every file of snapshot ``rev`` back to its live path; returns the live paths written."""
        restored = []
        for rel, data in sorted(self.vcs.snapshot_files(self.repo, rev).items()):
            if rel == filesets.PACKAGES_FILE:
                continue
            dest = filesets.live_path(self.live_root, rel)
            os.makedirs(os.path.dirname(dest), exist_ok=True)
            with open(dest, "wb") as handle:
                handle.write(data)
            restored.append(dest)
        return restored

    def compare(self, old: str, new: str) -> CommandResult:
        return self.vcs.diff_revisions(self.repo, old, new)

    def export(self, dest: str, rev: str = "HEAD") -> CommandResult:
        directory = os.path.dirname(dest)
        if directory:
            os.makedirs(directory, exist_ok=True)
        return self.vcs.export_archive(self.repo, dest, rev)

    def default_export_path(self) -> str:
        stamp = datetime.now().strftime("%Y%m%d-%H%M")
        return f"/tmp/{self.settings.router_name}-backup-{stamp}.tar.gz"

    def health(self) -> List[HealthCheck]:
        checks = [
            HealthCheck("git", shutil.which("git") is not None, shutil.which("git") or "not installed"),
            HealthCheck("SSH key", self.credentials.exists(), self.credentials.key_path),
            HealthCheck("Backup repository", self.initialised(), self.repo),
        ]
        remote = self.vcs.remote_url(self.repo) if self.initialised() else None
        checks.append(HealthCheck("Remote", remote is not None, remote or "not configured"))

        ok, output = self.credentials.test_connection()
        checks.append(HealthCheck("GitHub SSH", ok, output.splitlines()[0] if output else "no answer"))
        try:
            response = requests.head(GITHUB_HTTPS, timeout=10)
            checks.append(HealthCheck("GitHub HTTPS", response.status_code < 400, f"HTTP {response.status_code}"))
        except requests.RequestException as e:
            checks.append(HealthCheck("GitHub HTTPS", False, str(e)))

        last = self.vcs.last_commit_time(self.repo) if self.initialised() else None
        if last is None:
            checks.append(HealthCheck("Last backup", False, "never"))
        else:
            limit = OVERDUE.get(self.settings.schedule)
            overdue = limit is not None and datetime.now() - last > limit
            checks.append(HealthCheck("Last backup", not overdue, last.strftime("%Y-%m-%d %H:%M")))

        active = schedule.installed(self.crontab_path)
        checks.append(
            HealthCheck("Schedule", active == self.settings.schedule, f"configured {self.settings.schedule}, crontab {active}")
        )
        return checks
