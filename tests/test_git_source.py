"""Tests for git acquisition into temporary clones."""

import subprocess
import tempfile
from pathlib import Path
from unittest.mock import patch

import pytest

from agentx.errors import CloneFailedError
from agentx.git import is_git_available
from agentx.git_source import TEMP_PREFIX, cleanup, clone_repository, cloned_repository
from agentx.home import DEFAULT_GIT_TIMEOUT, get_git_timeout
from tests.conftest import add_branch, create_fake_git_repo


def _leftover_clones() -> list[Path]:
    return list(Path(tempfile.gettempdir()).glob(f"{TEMP_PREFIX}*"))


class TestCloneRepository:
    """Shallow clone into a fresh temporary directory."""

    def test_clones_default_branch(self, tmp_path: Path) -> None:
        # Given
        repo = create_fake_git_repo(tmp_path, {"SKILL.md": "---\nname: demo\n---\n"})

        # When
        clone_dir = clone_repository(repo.url)

        # Then
        try:
            assert (clone_dir / "SKILL.md").is_file()
            assert clone_dir.name.startswith(TEMP_PREFIX)
        finally:
            cleanup(clone_dir)
        assert not clone_dir.exists()

    def test_clones_named_branch(self, tmp_path: Path) -> None:
        """A ref from a tree URL selects the branch to clone."""
        repo = create_fake_git_repo(tmp_path, {})
        add_branch(repo, "feature", {"skills/new/SKILL.md": "---\nname: new\n---\n"})

        with cloned_repository(repo.url, ref="feature") as clone_dir:
            assert (clone_dir / "skills" / "new" / "SKILL.md").is_file()

    def test_failure_carries_git_output_and_cleans_up(self, tmp_path: Path) -> None:
        before = set(_leftover_clones())
        missing = f"file://{tmp_path / 'no-such-repo'}"

        with pytest.raises(CloneFailedError) as exc_info:
            clone_repository(missing)

        assert exc_info.value.url == missing
        assert exc_info.value.output
        assert set(_leftover_clones()) == before

    def test_unknown_branch_fails(self, tmp_path: Path) -> None:
        repo = create_fake_git_repo(tmp_path, {})

        with pytest.raises(CloneFailedError):
            clone_repository(repo.url, ref="does-not-exist")

    def test_timeout_is_clone_failure(self) -> None:
        with (
            patch(
                "agentx.git_source.shallow_clone",
                side_effect=subprocess.TimeoutExpired(cmd="git clone", timeout=1),
            ),
            pytest.raises(CloneFailedError, match="timed out after 1s"),
        ):
            clone_repository("https://example.com/r.git", timeout=1)

    def test_missing_git_is_clone_failure(self) -> None:
        with (
            patch("agentx.git_source.shallow_clone", side_effect=FileNotFoundError("git")),
            pytest.raises(CloneFailedError, match="git is not installed"),
        ):
            clone_repository("https://example.com/r.git")

    def test_default_timeout_comes_from_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("AGENTX_GIT_TIMEOUT", "7")

        with patch("agentx.git_source.shallow_clone") as mock_clone:
            clone_dir = clone_repository("https://example.com/r.git")
        cleanup(clone_dir)

        assert mock_clone.call_args.kwargs["timeout"] == 7.0


class TestClonedRepository:
    """The context manager always releases the clone."""

    def test_cleanup_on_exception(self, tmp_path: Path) -> None:
        repo = create_fake_git_repo(tmp_path, {})
        seen: list[Path] = []

        with pytest.raises(RuntimeError), cloned_repository(repo.url) as clone_dir:
            seen.append(clone_dir)
            raise RuntimeError("boom")

        assert not seen[0].exists()

    def test_cleanup_is_idempotent(self, tmp_path: Path) -> None:
        target = tmp_path / "gone"
        target.mkdir()

        cleanup(target)
        cleanup(target)

        assert not target.exists()


class TestGitTimeoutSetting:
    """AGENTX_GIT_TIMEOUT parsing."""

    @pytest.mark.parametrize("raw", ["", "abc", "0", "-5"])
    def test_invalid_values_fall_back(self, raw: str, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("AGENTX_GIT_TIMEOUT", raw)

        assert get_git_timeout() == DEFAULT_GIT_TIMEOUT

    def test_valid_value(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("AGENTX_GIT_TIMEOUT", "2.5")

        assert get_git_timeout() == 2.5


def test_git_is_available() -> None:
    assert is_git_available()
