from __future__ import annotations

from pathlib import Path

import git

from gitwrt.vcs import GitClient

from .conftest import commit_count


def test_current_branch_and_no_remote(git_repo: Path) -> None:
    client = GitClient()
    assert client.current_branch(str(git_repo)) == "main"
    assert client.remote_url(str(git_repo)) is None


def test_changed_files_from_status(git_repo: Path) -> None:
    (git_repo / "README.md").write_text("changed\n")
    (git_repo / "notes").mkdir()
    (git_repo / "notes" / "todo.txt").write_text("x\n")
    files = GitClient().changed_files(str(git_repo))
    assert ("M", "README.md") in files
    assert ("??", "notes/todo.txt") in files


def test_changed_files_keeps_non_ascii_and_renamed_paths(git_repo: Path) -> None:
    client = GitClient()
    (git_repo / "café.txt").write_text("bonjour\n")
    (git_repo / "with space.txt").write_text("x\n")
    client.run(str(git_repo), "mv", "README.md", "DOC.md")
    files = client.changed_files(str(git_repo))
    assert sorted(files) == [("??", "café.txt"), ("??", "with space.txt"), ("R", "DOC.md")]
    assert client.stage(str(git_repo), ["café.txt"]).ok


def test_commit_paths_leave_other_staged_files(git_repo: Path) -> None:
    client = GitClient()
    (git_repo / "a.txt").write_text("a\n")
    (git_repo / "b.txt").write_text("b\n")
    assert client.stage(str(git_repo), ["a.txt", "b.txt"]).ok
    assert client.commit(str(git_repo), "add a", ["a.txt"]).ok
    shown = client.run(str(git_repo), "show", "--name-only", "--format=", "HEAD").output.split()
    assert shown == ["a.txt"]
    assert client.changed_files(str(git_repo)) == [("A", "b.txt")]


def test_commit_contains_only_staged_files(git_repo: Path) -> None:
    client = GitClient()
    (git_repo / "a.txt").write_text("a\n")
    (git_repo / "b.txt").write_text("b\n")
    assert client.stage(str(git_repo), ["a.txt"]).ok
    assert client.commit(str(git_repo), "add a").ok
    assert commit_count(git_repo) == 2
    shown = client.run(str(git_repo), "show", "--name-only", "--format=", "HEAD").output.split()
    assert shown == ["a.txt"]


def test_failure_is_a_result(git_repo: Path) -> None:
    result = GitClient().checkout(str(git_repo), "no-such-branch")
    assert not result.ok
    assert "no-such-branch" in result.output


def test_missing_directory_is_a_result(tmp_path: Path) -> None:
    result = GitClient().status(str(tmp_path / "gone"))
    assert result.status == 1


def test_branches(git_repo: Path) -> None:
    client = GitClient()
    assert client.create_branch(str(git_repo), "feature").ok
    assert client.current_branch(str(git_repo)) == "feature"
    assert sorted(client.local_branches(str(git_repo))) == ["feature", "main"]
    assert "feature" in client.list_branches(str(git_repo)).output


def test_snapshots_and_files(git_repo: Path) -> None:
    client = GitClient()
    (git_repo / "etc").mkdir()
    (git_repo / "etc" / "network").write_text("config interface 'lan'\n")
    client.add_all(str(git_repo))
    client.commit(str(git_repo), "Backup router")
    snapshots = client.snapshots(str(git_repo))
    assert [s.subject for s in snapshots] == ["Backup router", "initial"]
    files = client.snapshot_files(str(git_repo), snapshots[0].rev)
    assert files == {"README.md": b"hello\n", "etc/network": b"config interface 'lan'\n"}
    assert client.last_commit_time(str(git_repo)) is not None


def test_set_remote_adds_then_updates(git_repo: Path) -> None:
    client = GitClient()
    assert client.set_remote(str(git_repo), "git@github.com:a/one.git").ok
    assert client.set_remote(str(git_repo), "git@github.com:a/two.git").ok
    assert client.remote_url(str(git_repo)) == "git@github.com:a/two.git"


def test_clone_into_root(git_repo: Path, tmp_path: Path) -> None:
    root = tmp_path / "repos"
    root.mkdir()
    result = GitClient().clone(str(root), str(git_repo))
    assert result.ok
    assert (root / "project" / "README.md").read_text() == "hello\n"


def test_snapshot_files_closes_repository(git_repo: Path, monkeypatch) -> None:
    closed = []

    class RecordingRepo(git.Repo):
        def close(self):
            closed.append(True)
            super().close()

    monkeypatch.setattr(git, "Repo", RecordingRepo)
    assert GitClient().snapshot_files(str(git_repo), "HEAD") == {"README.md": b"hello\n"}
    assert closed
