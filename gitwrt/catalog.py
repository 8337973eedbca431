"""Listing the configured GitHub account's repositories for the clone picker."""

from __future__ import annotations

import os
from typing import List, Optional, Tuple

import requests
from dotenv import load_dotenv
from github import Auth, Github, GithubException

from .logs import log_action, print_warning

ENV_PATH = os.path.expanduser("~/.gitwrt.env")


class GitHubCatalog:
    def __init__(self, username: str, token: Optional[str] = None) -> None:
        self.username = username
        self.token = token

    def _client(self) -> Github:
        if self.token:
            return Github(auth=Auth.Token(self.token))
        return Github()

    def repositories(self, limit: int = 50) -> List[Tuple[str, str]]:
        """``(name, ssh_url)`` pairs; empty when GitHub cannot be reached."""
        try:
            gh = self._client()
            user = gh.get_user() if self.token else gh.get_user(self.username)
            repos = list(user.get_repos())[:limit]
            return [(repo.name, repo.ssh_url) for repo in repos]
        except (GithubException, requests.RequestException) as e:
            print_warning(f"Could not list GitHub repositories for {self.username}: {e}")
            log_action(f"GitHub listing failed for {self.username}: {e}")
            return []


def make_catalog(username: str) -> Optional[GitHubCatalog]:
    if not username or username == "user":
        return None
    load_dotenv(dotenv_path=ENV_PATH)
    return GitHubCatalog(username, os.getenv("GITHUB_TOKEN"))
