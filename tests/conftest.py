"""Shared test fixtures for AgentX tests."""

import json
import os
import subprocess
from pathlib import Path
from typing import NamedTuple

import pytest
from typer.testing import CliRunner

GIT_ENV = {
    **os.environ,
    "GIT_AUTHOR_NAME": "Test",
    "GIT_AUTHOR_EMAIL": "test@test.com",
    "GIT_COMMITTER_NAME": "Test",
    "GIT_COMMITTER_EMAIL": "test@test.com",
}


def git(work_dir: Path, *args: str) -> str:
    """Run a git command in *work_dir* and return its stdout."""
    return subprocess.run(
        ["git", *args],
        cwd=work_dir, check=True, capture_output=True, text=True, env=GIT_ENV,
    ).stdout.strip()


def git_commit_all(work_dir: Path, message: str) -> str:
    """Stage all changes, commit, and return the new commit hash.

    Uses GIT_ENV for deterministic author/committer identity.
    """
    git(work_dir, "add", "-A")
    git(work_dir, "commit", "-m", message)
    return git(work_dir, "rev-parse", "HEAD")


def write_files(root: Path, files: dict[str, str]) -> None:
    """Write {relative_path: content} under *root*, creating parents."""
    for relative, content in files.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)


def skill_md(name: str | None = None, description: str | None = None, body: str = "Instructions.\n") -> str:
    """SKILL.md / command content with optional frontmatter fields."""
    fields = []
    if name is not None:
        fields.append(f"name: {name}")
    if description is not None:
        fields.append(f"description: {description}")
    if not fields:
        return body
    return "---\n" + "\n".join(fields) + "\n---\n" + body


def write_skill(parent: Path, directory: str, name: str | None = None, description: str | None = "A skill") -> Path:
    """Create <parent>/<directory>/SKILL.md and return the skill directory."""
    skill_dir = parent / directory
    skill_dir.mkdir(parents=True, exist_ok=True)
    (skill_dir / "SKILL.md").write_text(skill_md(name, description))
    return skill_dir


def write_command(parent: Path, name: str, description: str | None = "A command") -> Path:
    """Create <parent>/<name>.md and return the file."""
    parent.mkdir(parents=True, exist_ok=True)
    path = parent / f"{name}.md"
    path.write_text(skill_md(None, description, body=f"Run {name}.\n"))
    return path


def write_plugin(parent: Path, directory: str, manifest: dict | None = None) -> Path:
    """Create a plugin directory with .claude-plugin/plugin.json."""
    plugin_dir = parent / directory
    meta_dir = plugin_dir / ".claude-plugin"
    meta_dir.mkdir(parents=True, exist_ok=True)
    if manifest is None:
        manifest = {"name": directory, "version": "1.0.0", "description": "A plugin"}
    (meta_dir / "plugin.json").write_text(json.dumps(manifest))
    return plugin_dir


class FakeGitRepo(NamedTuple):
    """Result of creating a fake git repo for testing."""

    url: str
    work_dir: Path
    commit_hash: str


def create_fake_git_repo(tmp_path: Path, files: dict[str, str], name: str = "fake-repo") -> FakeGitRepo:
    """Create a local git repo holding *files*, served as a file:// URL.

    Args:
        tmp_path: Base temp directory.
        files: {relative_path: content} committed on the default branch.
        name: Directory name of the work tree.

    Returns:
        FakeGitRepo with file:// URL, work tree path, and commit hash.
    """
    work_dir = tmp_path / name
    work_dir.mkdir()

    # Always create a README so the repo has at least one file
    write_files(work_dir, {"README.md": "# Fake repo\n", **files})

    git(work_dir, "init", "--quiet")
    commit_hash = git_commit_all(work_dir, "Initial")
    return FakeGitRepo(url=f"file://{work_dir}", work_dir=work_dir, commit_hash=commit_hash)


def add_branch(repo: FakeGitRepo, branch: str, files: dict[str, str]) -> None:
    """Commit *files* on a new branch, then switch back."""
    original = git(repo.work_dir, "rev-parse", "--abbrev-ref", "HEAD")
    git(repo.work_dir, "checkout", "--quiet", "-b", branch)
    write_files(repo.work_dir, files)
    git_commit_all(repo.work_dir, f"Add {branch}")
    git(repo.work_dir, "checkout", "--quiet", original)


class AgentEnv(NamedTuple):
    """Isolated home and project directories for one test."""

    home: Path
    project: Path
    agentx_home: Path

    @property
    def claude_skills(self) -> Path:
        return self.home / ".claude" / "skills"

    @property
    def claude_commands(self) -> Path:
        return self.home / ".claude" / "commands"

    @property
    def codex_skills(self) -> Path:
        return self.home / ".codex" / "skills"

    @property
    def plugins(self) -> Path:
        return self.agentx_home / "plugins"

    @property
    def cache(self) -> Path:
        return self.agentx_home / "cache"


@pytest.fixture
def agent_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> AgentEnv:
    """Point HOME, AGENTX_HOME and CODEX_HOME into tmp_path and chdir to a project.

    Nothing a test installs can reach the real ~/.claude or ~/.codex.
    """
    home = tmp_path / "home"
    project = tmp_path / "project"
    agentx_home = home / ".agentx"
    home.mkdir()
    project.mkdir()

    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("AGENTX_HOME", str(agentx_home))
    monkeypatch.setenv("CODEX_HOME", str(home / ".codex"))
    monkeypatch.delenv("AGENTX_FORCE_UPDATE_CHECK", raising=False)
    monkeypatch.delenv("AGENTX_UPGRADE_COMMAND", raising=False)
    monkeypatch.chdir(project)
    return AgentEnv(home=home, project=project, agentx_home=agentx_home)


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Typer CLI test runner."""
    return CliRunner()
