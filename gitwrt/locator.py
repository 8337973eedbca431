"""Finding local git repositories and choosing the active one."""

from __future__ import annotations

import os
from typing import Iterable, List, Optional

MAX_DEPTH = 3


def search_roots(settings, home: Optional[str] = None) -> List[str]:
    """The home directory and the configured storage root, nothing else."""
    return [home or os.path.expanduser("~"), settings.storage_root]


def _depth(root: str, path: str) -> int:
    rel = os.path.relpath(path, root)
    return 0 if rel == "." else rel.count(os.sep) + 1


def find_repositories(roots: Iterable[str], max_depth: int = MAX_DEPTH) -> List[str]:
    """
    Directories directly containing a ``.git`` directory, where ``.git`` sits at
    most ``max_depth`` levels below a root. Missing roots are skipped and a path
    reachable from two roots is reported once.
    """
    found: List[str] = []
    seen = set()
    for root in roots:
        if not root or not os.path.isdir(root):
            continue
        for current, dirs, _files in os.walk(root):
            dirs.sort()
            if ".git" in dirs and _depth(root, current) + 1 <= max_depth:
                key = os.path.realpath(current)
                if key not in seen:
                    seen.add(key)
                    found.append(current)
            if ".git" in dirs:
                dirs.remove(".git")
            if _depth(root, current) + 1 >= max_depth:
                dirs[:] = []
    return found


def select_repository(prompter, roots: List[str], current: Optional[str] = None) -> Optional[str]:
    """Let the user pick one repository; ``None`` when nothing is found or the user cancels."""
    repos = find_repositories(roots)
    if not repos:
        prompter.message("No Repositories", f"No git repositories found in {' or '.join(roots)}")
        return None
    options = [(str(i), path) for i, path in enumerate(repos, 1)]
    default = str(repos.index(current) + 1) if current in repos else None
    choice = prompter.choose_one("Select Repository", "Choose a repository:", options, default=default)
    return repos[int(choice) - 1] if choice else None
