from __future__ import annotations

from pathlib import Path
from typing import List

import pytest

from gitwrt.config import ManagerSettings, SettingsStore
from gitwrt.errors import CredentialError
from gitwrt.session import Session
from gitwrt.vcs import CommandResult, GitClient


class FakePrompter:
    """Answers dialogs from a script and records every dialog shown."""

    def __init__(self, *answers) -> None:
        self.answers = list(answers)
        self.messages: List[tuple] = []
        self.calls: List[tuple] = []

    def _next(self, kind, title, text):
        self.calls.append((kind, title, text))
        return self.answers.pop(0) if self.answers else None

    def choose_one(self, title, text, options, default=None):
        self.calls.append(("options", title, list(options)))
        return self._next("choose_one", title, text)

    def choose_many(self, title, text, options, selected=()):
        self.calls.append(("options", title, list(options)))
        return self._next("choose_many", title, text)

    def text_input(self, title, text, default=""):
        return self._next("text_input", title, text)

    def confirm(self, title, text, default=False):
        return bool(self._next("confirm", title, text))

    def message(self, title, text, scroll=False):
        self.messages.append((title, text))

    @property
    def titles(self) -> List[str]:
        return [title for title, _ in self.messages]


class FakeVcs:
    """Records calls instead of running git."""

    def __init__(self, remote=None, branches=("main",), files=(), result=CommandResult(0, "done")) -> None:
        self.remote = remote
        self.branches = list(branches)
        self.files = list(files)
        self.result = result
        self.calls: List[tuple] = []

    def __getattr__(self, name):
        def record(*args):
            self.calls.append((name, *args))
            return self.result
        return record

    def remote_url(self, repo):
        self.calls.append(("remote_url", repo))
        return self.remote

    def current_branch(self, repo):
        self.calls.append(("current_branch", repo))
        return self.branches[0] if self.branches else ""

    def local_branches(self, repo):
        self.calls.append(("local_branches", repo))
        return list(self.branches)

    def changed_files(self, repo):
        self.calls.append(("changed_files", repo))
        return list(self.files)


class FakeCredentials:
    def __init__(self, exists=True, fail=False, connected=True, key_path="/tmp/id_ed25519") -> None:
        self._exists = exists
        self.fail = fail
        self.connected = connected
        self.key_path = key_path
        self.created = False
        self.tested = False

    def exists(self):
        return self._exists

    def create(self):
        if self.fail:
            raise CredentialError("ssh-keygen failed")
        self.created = True
        self._exists = True

    def public_key(self):
        return "ssh-ed25519 AAAAC3Nza test@router"

    def test_connection(self):
        self.tested = True
        if self.connected:
            return True, "Hi test! You've successfully authenticated, but GitHub does not provide shell access."
        return False, "Permission denied (publickey)."


@pytest.fixture(autouse=True)
def git_identity(monkeypatch, tmp_path):
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.setenv("GIT_AUTHOR_NAME", "Test User")
    monkeypatch.setenv("GIT_AUTHOR_EMAIL", "test@example.com")
    monkeypatch.setenv("GIT_COMMITTER_NAME", "Test User")
    monkeypatch.setenv("GIT_COMMITTER_EMAIL", "test@example.com")


def commit_count(repo: Path) -> int:
    result = GitClient().run(str(repo), "rev-list", "--count", "HEAD")
    return int(result.output) if result.ok else 0


@pytest.fixture()
def git_repo(tmp_path: Path) -> Path:
    repo = tmp_path / "project"
    client = GitClient()
    assert client.init(str(repo)).ok
    client.run(str(repo), "symbolic-ref", "HEAD", "refs/heads/main")
    (repo / "README.md").write_text("hello\n")
    client.stage(str(repo), ["README.md"])
    assert client.commit(str(repo), "initial").ok
    return repo


@pytest.fixture()
def manager_store(tmp_path: Path) -> SettingsStore:
    return SettingsStore(str(tmp_path / "gitmanager.conf"), ManagerSettings)


@pytest.fixture()
def session_factory(manager_store: SettingsStore, tmp_path: Path):
    def _factory(prompter, vcs=None, active_repo=None, catalog=None) -> Session:
        settings = ManagerSettings(github_username="tester", repos_dir=str(tmp_path / "repos"))
        return Session(
            settings=settings,
            store=manager_store,
            prompter=prompter,
            vcs=vcs or GitClient(),
            active_repo=active_repo,
            catalog=catalog,
        )

    return _factory
