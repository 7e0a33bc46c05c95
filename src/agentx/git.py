"""Git subprocess wrappers for AgentX.

Only the handful of git invocations the install pipeline needs. All of
them are non-interactive: a remote that asks for credentials fails
instead of hanging on a prompt.
"""

import os
import subprocess
from pathlib import Path


def _git_env() -> dict[str, str]:
    """Environment for git calls that must never prompt."""
    return {**os.environ, "GIT_TERMINAL_PROMPT": "0"}


def is_git_available() -> bool:
    """Check if git command is available on the system.

    Returns:
        True if git is available, False otherwise.
    """
    try:
        subprocess.run(
            ["git", "--version"],
            capture_output=True,
            check=True,
        )
        return True
    except (FileNotFoundError, subprocess.CalledProcessError):
        return False


def shallow_clone(url: str, clone_dir: Path, ref: str | None = None, timeout: float | None = None) -> None:
    """Clone the tip of a branch with depth 1.

    Args:
        url: Git URL to clone.
        clone_dir: Target directory; may exist but must be empty.
        ref: Branch or tag to clone. Defaults to the remote HEAD.
        timeout: Seconds before the clone is killed.

    Raises:
        subprocess.CalledProcessError: If git exits non-zero. Output holds
            stdout and stderr combined.
        subprocess.TimeoutExpired: If the clone runs past *timeout*.
        FileNotFoundError: If git is not installed.
    """
    cmd = ["git", "clone", "--depth", "1", "--quiet"]
    if ref:
        cmd += ["--branch", ref]
    cmd += ["--", url, str(clone_dir)]

    subprocess.run(
        cmd,
        check=True,
        stdout=subprocess.PIPE,
        stderr=subprocess.STDOUT,
        text=True,
        timeout=timeout,
        env=_git_env(),
    )
