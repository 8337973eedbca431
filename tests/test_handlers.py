from __future__ import annotations

from pathlib import Path

import pytest

from gitwrt import handlers
from gitwrt.manager import main_menu, menu_title
from gitwrt.session import NO_REPO_MESSAGE
from gitwrt.vcs import GitClient

from .conftest import FakePrompter, FakeVcs, commit_count

REPO_ACTIONS = [
    handlers.show_status,
    handlers.do_pull,
    handlers.do_push,
    handlers.do_commit,
    handlers.manage_branches,
    handlers.view_log,
    handlers.show_diff,
]


@pytest.mark.parametrize("action", REPO_ACTIONS)
def test_guard_without_active_repository(action, session_factory) -> None:
    prompter = FakePrompter("1", "feature", "message")
    vcs = FakeVcs(remote="git@github.com:a/b.git", files=[("M", "x")])
    session = session_factory(prompter, vcs=vcs)
    action(session)
    assert vcs.calls == []
    assert prompter.messages == [("Error", NO_REPO_MESSAGE)]
    assert [call for call in prompter.calls if call[0] != "options"] == []


@pytest.mark.parametrize("action", [handlers.do_pull, handlers.do_push])
def test_pull_push_require_remote(action, session_factory) -> None:
    prompter = FakePrompter()
    vcs = FakeVcs(remote=None)
    action(session_factory(prompter, vcs=vcs, active_repo="/repo"))
    assert prompter.messages == [("Error", handlers.NO_REMOTE_MESSAGE)]
    assert [call[0] for call in vcs.calls] == ["remote_url"]


def test_pull_reports_output(session_factory) -> None:
    prompter = FakePrompter()
    vcs = FakeVcs(remote="git@github.com:a/b.git")
    handlers.do_pull(session_factory(prompter, vcs=vcs, active_repo="/repo"))
    assert ("pull", "/repo") in vcs.calls
    assert prompter.messages == [("Pull Successful", "done")]


def test_status_dialog(git_repo: Path, session_factory) -> None:
    prompter = FakePrompter()
    handlers.show_status(session_factory(prompter, active_repo=str(git_repo)))
    title, text = prompter.messages[0]
    assert title == "Repository Status"
    assert "Current Branch: main" in text
    assert "Remote URL: No remote configured" in text


def test_commit_with_no_files_selected_creates_nothing(git_repo: Path, session_factory) -> None:
    (git_repo / "README.md").write_text("edited\n")
    prompter = FakePrompter([], "never used")
    handlers.do_commit(session_factory(prompter, active_repo=str(git_repo)))
    assert commit_count(git_repo) == 1
    assert "No Files Selected" in prompter.titles


def test_commit_cancelled_message_creates_nothing(git_repo: Path, session_factory) -> None:
    (git_repo / "README.md").write_text("edited\n")
    prompter = FakePrompter(["README.md"], "")
    handlers.do_commit(session_factory(prompter, active_repo=str(git_repo)))
    assert commit_count(git_repo) == 1
    assert prompter.messages[-1] == ("Cancelled", "Commit cancelled - no message provided.")


def test_commit_records_exactly_selected_files(git_repo: Path, session_factory) -> None:
    (git_repo / "README.md").write_text("edited\n")
    (git_repo / "keep.txt").write_text("not yet\n")
    prompter = FakePrompter(["README.md"], "Update readme")
    handlers.do_commit(session_factory(prompter, active_repo=str(git_repo)))
    assert commit_count(git_repo) == 2
    client = GitClient()
    changed = client.run(str(git_repo), "show", "--name-only", "--format=", "HEAD").output.split()
    assert changed == ["README.md"]
    assert client.run(str(git_repo), "log", "-1", "--format=%s").output == "Update readme"
    assert ("??", "keep.txt") in client.changed_files(str(git_repo))
    assert prompter.titles[0] == "Git Diff"
    assert prompter.titles[-1] == "Commit Successful"


def test_commit_leaves_previously_staged_files_staged(git_repo: Path, session_factory) -> None:
    client = GitClient()
    (git_repo / "README.md").write_text("edited\n")
    (git_repo / "secret.txt").write_text("token\n")
    assert client.stage(str(git_repo), ["secret.txt"]).ok
    prompter = FakePrompter(["README.md"], "Update readme")
    handlers.do_commit(session_factory(prompter, active_repo=str(git_repo)))
    assert commit_count(git_repo) == 2
    changed = client.run(str(git_repo), "show", "--name-only", "--format=", "HEAD").output.split()
    assert changed == ["README.md"]
    assert client.changed_files(str(git_repo)) == [("A", "secret.txt")]


def test_commit_file_with_non_ascii_name(git_repo: Path, session_factory) -> None:
    (git_repo / "café.txt").write_text("bonjour\n")
    prompter = FakePrompter(["café.txt"], "Add café")
    handlers.do_commit(session_factory(prompter, active_repo=str(git_repo)))
    assert ("options", "Stage Files", [("café.txt", "??")]) in prompter.calls
    assert prompter.titles[-1] == "Commit Successful"
    assert commit_count(git_repo) == 2
    assert GitClient().changed_files(str(git_repo)) == []


@pytest.fixture()
def origin(git_repo: Path, tmp_path: Path) -> Path:
    bare = tmp_path / "origin.git"
    bare.mkdir()
    client = GitClient()
    assert client.run(str(bare), "init", "--bare").ok
    assert client.set_remote(str(git_repo), str(bare)).ok
    return bare


def test_push_uses_branch_checked_out_since_selection(git_repo: Path, origin: Path, session_factory) -> None:
    client = GitClient()
    prompter = FakePrompter()
    session = session_factory(prompter, active_repo=str(git_repo))
    handlers.do_push(session)
    assert client.run(str(git_repo), "checkout", "-b", "feature").ok
    handlers.do_push(session)
    assert prompter.titles == ["Push Successful", "Push Successful"]
    heads = client.run(str(origin), "branch", "--format=%(refname:short)").output.split()
    assert sorted(heads) == ["feature", "main"]


def test_pull_uses_current_branch(git_repo: Path, origin: Path, session_factory, tmp_path: Path) -> None:
    client = GitClient()
    assert client.run(str(git_repo), "checkout", "-b", "feature").ok
    assert client.run(str(git_repo), "push", "origin", "feature").ok
    other = tmp_path / "other"
    assert client.run(str(tmp_path), "clone", "--branch", "feature", str(origin), str(other)).ok
    (other / "remote.txt").write_text("from elsewhere\n")
    client.stage(str(other), ["remote.txt"])
    assert client.commit(str(other), "remote change").ok
    assert client.run(str(other), "push", "origin", "feature").ok

    prompter = FakePrompter()
    handlers.do_pull(session_factory(prompter, active_repo=str(git_repo)))
    assert prompter.titles == ["Pull Successful"]
    assert (git_repo / "remote.txt").read_text() == "from elsewhere\n"


def test_switch_branch(git_repo: Path, session_factory) -> None:
    client = GitClient()
    client.run(str(git_repo), "branch", "feature")
    prompter = FakePrompter("2", "feature", "4")
    handlers.manage_branches(session_factory(prompter, active_repo=str(git_repo)))
    assert client.current_branch(str(git_repo)) == "feature"
    assert "Switch Branch Successful" in prompter.titles


def test_create_existing_branch_fails(git_repo: Path, session_factory) -> None:
    prompter = FakePrompter("3", "main", None)
    handlers.manage_branches(session_factory(prompter, active_repo=str(git_repo)))
    assert prompter.titles == ["Create Branch Failed"]


def test_clone_keeps_active_repository(git_repo: Path, session_factory, tmp_path: Path) -> None:
    prompter = FakePrompter(str(git_repo))
    session = session_factory(prompter, active_repo=None)
    handlers.clone_repo(session)
    assert session.active_repo is None
    assert (tmp_path / "repos" / "project" / ".git").is_dir()
    assert prompter.titles == ["Clone Successful"]


class FakeCatalog:
    def repositories(self):
        return [("router", "git@github.com:tester/router.git")]


def test_clone_picks_from_catalog(session_factory) -> None:
    prompter = FakePrompter("router")
    vcs = FakeVcs()
    session = session_factory(prompter, vcs=vcs, catalog=FakeCatalog())
    handlers.clone_repo(session)
    assert vcs.calls == [("clone", session.settings.repos_dir, "git@github.com:tester/router.git")]


def test_diff_without_changes(git_repo: Path, session_factory) -> None:
    prompter = FakePrompter()
    handlers.show_diff(session_factory(prompter, active_repo=str(git_repo)))
    assert prompter.messages == [("No Changes", "No unstaged changes found.")]


def test_menu_selects_repository_then_exits(git_repo: Path, session_factory, tmp_path: Path) -> None:
    prompter = FakePrompter("1", "1", "0")
    session = session_factory(prompter)
    session.settings.repos_dir = str(tmp_path)
    assert menu_title(session).endswith("No repository selected")
    main_menu(session)
    assert session.active_repo == str(git_repo)
    assert menu_title(session).endswith(f"Current: {git_repo}")


def test_menu_exits_on_cancel(session_factory) -> None:
    prompter = FakePrompter(None)
    main_menu(session_factory(prompter))
    assert prompter.messages == []
