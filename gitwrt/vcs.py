"""
Version-control client.

Every call runs ``git --no-pager ...`` through GitPython's command runner and
returns the merged stdout/stderr text with the exit status; a failing git
command is a result, never an exception. The repository path is passed to
each method, the process working directory is never changed.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional, Sequence, Tuple

import git

NO_PAGER_ENV = {"GIT_PAGER": "cat", "PAGER": "cat", "GIT_TERMINAL_PROMPT": "0"}


@dataclass
class CommandResult:
    status: int
    output: str

    @property
    def ok(self) -> bool:
        return self.status == 0


@dataclass
class Snapshot:
    rev: str
    date: str
    subject: str

    @property
    def short(self) -> str:
        return self.rev[:7]


def merge_output(stdout: str, stderr: str) -> str:
    return "\n".join(part for part in (stdout, stderr) if part)


class GitClient:
    """Thin wrapper over the git binary used by both tools."""

    def run(self, path: str, *args: str) -> CommandResult:
        if not os.path.isdir(path):
            return CommandResult(1, f"{path}: no such directory")
        runner = git.Git(path)
        status, stdout, stderr = runner.execute(
            ["git", "--no-pager", *args],
            with_extended_output=True,
            with_exceptions=False,
            env=NO_PAGER_ENV,
        )
        return CommandResult(status, merge_output(stdout, stderr))

    # ---------------------------
    # Queries
    # ---------------------------
    def is_repository(self, path: str) -> bool:
        return os.path.isdir(os.path.join(path, ".git"))

    def current_branch(self, repo: str) -> str:
        result = self.run(repo, "branch", "--show-current")
        return result.output.strip() if result.ok else ""

    def remote_url(self, repo: str, remote: str = "origin") -> Optional[str]:
        result = self.run(repo, "config", "--get", f"remote.{remote}.url")
        if not result.ok or not result.output.strip():
            return None
        return result.output.strip()

    def status(self, repo: str) -> CommandResult:
        return self.run(repo, "status", "-sb")

    def diff(self, repo: str) -> CommandResult:
        return self.run(repo, "diff")

    def changed_files(self, repo: str) -> List[Tuple[str, str]]:
        """Modified, deleted and untracked files as ``(code, path)``; a rename gives its new path."""
        result = self.run(repo, "status", "--porcelain", "-z", "--untracked-files=all")
        if not result.ok:
            return []
        files = []
        entries = iter(result.output.split("\0"))
        for entry in entries:
            if len(entry) < 4:
                continue
            code, path = entry[:2], entry[3:]
            if "R" in code or "C" in code:
                # the source path follows as its own entry
                next(entries, None)
            files.append((code.strip(), path))
        return files

    def list_branches(self, repo: str) -> CommandResult:
        return self.run(repo, "branch", "-a")

    def local_branches(self, repo: str) -> List[str]:
        result = self.run(repo, "branch", "--format=%(refname:short)")
        if not result.ok:
            return []
        return [line.strip() for line in result.output.splitlines() if line.strip()]

    def log(self, repo: str, limit: int = 20) -> CommandResult:
        return self.run(repo, "log", "--oneline", f"-{limit}")

    # ---------------------------
    # Mutations
    # ---------------------------
    def pull(self, repo: str) -> CommandResult:
        # branch is resolved on every call so outside checkouts are honoured
        branch = self.current_branch(repo)
        return self.run(repo, "pull", "origin", *([branch] if branch else []))

    def push(self, repo: str) -> CommandResult:
        branch = self.current_branch(repo)
        return self.run(repo, "push", "origin", *([branch] if branch else []))

    def stage(self, repo: str, paths: Sequence[str]) -> CommandResult:
        return self.run(repo, "add", "--", *paths)

    def commit(self, repo: str, message: str, paths: Sequence[str] = ()) -> CommandResult:
        """Commit the index, or only ``paths`` when given, leaving other staged changes staged."""
        if paths:
            return self.run(repo, "commit", "-m", message, "--", *paths)
        return self.run(repo, "commit", "-m", message)

    def checkout(self, repo: str, branch: str) -> CommandResult:
        return self.run(repo, "checkout", branch)

    def create_branch(self, repo: str, branch: str) -> CommandResult:
        return self.run(repo, "checkout", "-b", branch)

    def clone(self, root: str, url: str) -> CommandResult:
        return self.run(root, "clone", url)

    # ---------------------------
    # Snapshot repository helpers (router-backup)
    # ---------------------------
    def init(self, path: str) -> CommandResult:
        try:
            os.makedirs(path, exist_ok=True)
        except OSError as e:
            return CommandResult(1, str(e))
        return self.run(path, "init")

    def ensure_identity(self, repo: str, name: str, email: str) -> None:
        if not self.run(repo, "config", "--get", "user.name").ok:
            self.run(repo, "config", "user.name", name)
        if not self.run(repo, "config", "--get", "user.email").ok:
            self.run(repo, "config", "user.email", email)

    def add_all(self, repo: str) -> CommandResult:
        return self.run(repo, "add", "-A")

    def set_remote(self, repo: str, url: str) -> CommandResult:
        if self.remote_url(repo):
            return self.run(repo, "remote", "set-url", "origin", url)
        return self.run(repo, "remote", "add", "origin", url)

    def snapshots(self, repo: str, limit: int = 30) -> List[Snapshot]:
        result = self.run(
            repo, "log", f"-{limit}", "--date=format:%Y-%m-%d %H:%M", "--pretty=format:%H%x09%ad%x09%s"
        )
        if not result.ok:
            return []
        snapshots = []
        for line in result.output.splitlines():
            parts = line.split("\t", 2)
            if len(parts) == 3:
                snapshots.append(Snapshot(*parts))
        return snapshots

    def snapshot_files(self, repo: str, rev: str) -> Dict[str, bytes]:
        """Contents of every file recorded in ``rev``, keyed by repository path."""
        with git.Repo(repo) as handle:
            commit = handle.commit(rev)
            return {
                item.path: item.data_stream.read()
                for item in commit.tree.traverse()
                if item.type == "blob"
            }

    def staged_diff(self, repo: str) -> CommandResult:
        return self.run(repo, "diff", "--cached", "--stat", "--patch")

    def diff_revisions(self, repo: str, old: str, new: str) -> CommandResult:
        return self.run(repo, "diff", old, new)

    def export_archive(self, repo: str, dest: str, rev: str = "HEAD") -> CommandResult:
        return self.run(repo, "archive", "--format=tar.gz", "-o", dest, rev)

    def last_commit_time(self, repo: str) -> Optional[datetime]:
        result = self.run(repo, "log", "-1", "--format=%ct")
        if not result.ok or not result.output.strip().isdigit():
            return None
        return datetime.fromtimestamp(int(result.output.strip()))
