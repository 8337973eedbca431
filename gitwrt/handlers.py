"""
git-manager actions.

Each handler checks that a repository is selected, runs one git operation (or
the short commit sequence) against it and shows the captured output. Failures
are shown to the user and never raised.
"""

from __future__ import annotations

import os
from typing import List, Optional

from .locator import search_roots, select_repository
from .logs import print_error, print_success, print_warning
from .session import Session, report, require_repo

NO_REMOTE_MESSAGE = "No remote 'origin' configured for this repository."
LOG_LIMIT = 20


def select_repo(session: Session) -> Optional[str]:
    chosen = select_repository(session.prompter, search_roots(session.settings), session.active_repo)
    if chosen:
        session.active_repo = chosen
        print_success(f"Selected repository: {chosen}")
    return chosen


def show_status(session: Session) -> None:
    repo = require_repo(session)
    if not repo:
        return
    vcs = session.vcs
    branch = vcs.current_branch(repo) or "unknown"
    remote = vcs.remote_url(repo) or "No remote configured"
    status = vcs.status(repo).output
    session.prompter.message(
        "Repository Status",
        f"Repository: {repo}\n\nCurrent Branch: {branch}\nRemote URL: {remote}\n\nStatus:\n{status}",
    )


def _sync(session: Session, action: str) -> None:
    repo = require_repo(session)
    if not repo:
        return
    if not session.vcs.remote_url(repo):
        session.prompter.message("Error", NO_REMOTE_MESSAGE)
        return
    result = session.vcs.pull(repo) if action == "Pull" else session.vcs.push(repo)
    report(session, result, action)


def do_pull(session: Session) -> None:
    _sync(session, "Pull")


def do_push(session: Session) -> None:
    _sync(session, "Push")


def show_diff(session: Session) -> None:
    repo = require_repo(session)
    if not repo:
        return
    output = session.vcs.diff(repo).output
    if not output.strip():
        session.prompter.message("No Changes", "No unstaged changes found.")
    else:
        session.prompter.message("Git Diff", output, scroll=True)


def stage_files(session: Session, repo: str) -> List[str]:
    """Ask which changed files to stage and stage them; empty when nothing was staged."""
    files = session.vcs.changed_files(repo)
    if not files:
        session.prompter.message("No Changes", "No changes to stage.")
        return []
    options = [(path, code) for code, path in files]
    selected = session.prompter.choose_many("Stage Files", "Select files to stage (use SPACE to select):", options)
    if selected is None:
        return []
    if not selected:
        session.prompter.message("No Files Selected", "No files were selected for staging.")
        return []
    result = session.vcs.stage(repo, selected)
    if not result.ok:
        report(session, result, "Stage")
        return []
    for path in selected:
        print_success(f"Staged: {path}")
    return selected


def do_commit(session: Session) -> None:
    repo = require_repo(session)
    if not repo:
        return
    show_diff(session)
    staged = stage_files(session, repo)
    if not staged:
        return
    message = session.prompter.text_input("Commit Message", "Enter commit message:")
    if not message:
        session.prompter.message("Cancelled", "Commit cancelled - no message provided.")
        return
    report(session, session.vcs.commit(repo, message, staged), "Commit")


# ---------------------------
# Branch operations
# ---------------------------
def list_branches(session: Session, repo: str) -> None:
    session.prompter.message("Branches", session.vcs.list_branches(repo).output)


def switch_branch(session: Session, repo: str) -> None:
    branches = session.vcs.local_branches(repo)
    if not branches:
        session.prompter.message("Switch Branch", "No local branches found.")
        return
    current = session.vcs.current_branch(repo)
    selected = session.prompter.choose_one(
        "Switch Branch", "Select branch to switch to:", [(b, "*" if b == current else "-") for b in branches], current
    )
    if not selected:
        return
    report(session, session.vcs.checkout(repo, selected), "Switch Branch", f"Switched to branch: {selected}")


def create_branch(session: Session, repo: str) -> None:
    name = session.prompter.text_input("Create Branch", "Enter new branch name:")
    if not name:
        return
    report(session, session.vcs.create_branch(repo, name), "Create Branch", f"Created and switched to branch: {name}")


BRANCH_ACTIONS = {
    "1": ("List branches", list_branches),
    "2": ("Switch branch", switch_branch),
    "3": ("Create new branch", create_branch),
}


def manage_branches(session: Session) -> None:
    repo = require_repo(session)
    if not repo:
        return
    while True:
        options = [(key, label) for key, (label, _) in BRANCH_ACTIONS.items()] + [("4", "Back to main menu")]
        choice = session.prompter.choose_one("Branch Management", "Choose an option:", options)
        if choice not in BRANCH_ACTIONS:
            return
        BRANCH_ACTIONS[choice][1](session, repo)


# ---------------------------
# Clone and log
# ---------------------------
MANUAL_URL = "url"


def ask_clone_url(session: Session) -> Optional[str]:
    repos = session.catalog.repositories() if session.catalog else []
    if repos:
        options = [(MANUAL_URL, "Enter a repository URL")] + [(name, url) for name, url in repos]
        choice = session.prompter.choose_one(
            "Clone Repository", f"Repositories of {session.settings.github_username}:", options, MANUAL_URL
        )
        if choice is None:
            return None
        if choice != MANUAL_URL:
            return dict(repos)[choice]
    return session.prompter.text_input(
        "Clone Repository", "Enter GitHub repository URL (e.g., git@github.com:user/repo.git):"
    )


def clone_repo(session: Session) -> None:
    url = ask_clone_url(session)
    if not url:
        return
    root = session.settings.storage_root
    try:
        os.makedirs(root, exist_ok=True)
    except OSError as e:
        session.prompter.message("Clone Failed", f"Cannot create {root}:\n\n{e}")
        print_warning(f"Cannot create {root}")
        return
    # the active repository is left unchanged; pick the clone with "Select repository"
    report(
        session,
        session.vcs.clone(root, url),
        "Clone",
        f"Repository cloned successfully to {root}\nUse 'Select repository' to work with it.",
    )


def view_log(session: Session) -> None:
    repo = require_repo(session)
    if not repo:
        return
    result = session.vcs.log(repo, LOG_LIMIT)
    if result.ok:
        session.prompter.message(f"Commit Log (Last {LOG_LIMIT})", result.output, scroll=True)
    else:
        session.prompter.message("Error", f"Failed to retrieve commit log:\n\n{result.output}")
        print_error("Log failed")
