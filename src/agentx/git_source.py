"""Git acquisition for remote unit sources.

Clones a repository into a fresh temporary directory. The caller owns
that directory and must release it with cleanup(); cloned_repository()
does this on every exit path.
"""

import shutil
import subprocess
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from agentx.errors import CloneFailedError
from agentx.git import shallow_clone
from agentx.home import get_git_timeout

TEMP_PREFIX = "agentx-clone-"


def clone_repository(url: str, ref: str | None = None, timeout: float | None = None) -> Path:
    """Shallow-clone *url* into a new temporary directory.

    Args:
        url: Git URL to clone.
        ref: Branch to clone instead of the remote default.
        timeout: Seconds before the clone is aborted. Defaults to
            AGENTX_GIT_TIMEOUT.

    Returns:
        Path to the temporary clone. Release it with cleanup().

    Raises:
        CloneFailedError: If the clone fails or times out. The partial
            directory has already been removed.
    """
    if timeout is None:
        timeout = get_git_timeout()

    tmp_dir = Path(tempfile.mkdtemp(prefix=TEMP_PREFIX))
    try:
        shallow_clone(url, tmp_dir, ref=ref, timeout=timeout)
    except subprocess.CalledProcessError as e:
        cleanup(tmp_dir)
        raise CloneFailedError(url, e.output or "") from e
    except subprocess.TimeoutExpired as e:
        cleanup(tmp_dir)
        raise CloneFailedError(url, f"clone timed out after {timeout:g}s") from e
    except FileNotFoundError as e:
        cleanup(tmp_dir)
        raise CloneFailedError(url, "git is not installed") from e
    except BaseException:
        cleanup(tmp_dir)
        raise

    return tmp_dir


def cleanup(path: Path) -> None:
    """Remove a clone directory. Idempotent and best-effort."""
    shutil.rmtree(path, ignore_errors=True)


@contextmanager
def cloned_repository(url: str, ref: str | None = None, timeout: float | None = None) -> Iterator[Path]:
    """Context manager around clone_repository() that always cleans up."""
    repo_dir = clone_repository(url, ref=ref, timeout=timeout)
    try:
        yield repo_dir
    finally:
        cleanup(repo_dir)
