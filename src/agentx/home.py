"""AgentX Home resolution and environment-driven settings.

AgentX Home holds the plugin store and the cache directory. Agent
content stores (~/.claude, ~/.codex) live outside it and are resolved in
agentx.profiles.
"""

import os
from pathlib import Path

# Default AgentX Home location
DEFAULT_AGENTX_HOME = Path.home() / ".agentx"

# Environment variable for custom AgentX Home location
AGENTX_HOME_ENV_VAR = "AGENTX_HOME"

CODEX_HOME_ENV_VAR = "CODEX_HOME"

GIT_TIMEOUT_ENV_VAR = "AGENTX_GIT_TIMEOUT"

# Clone bound in seconds
DEFAULT_GIT_TIMEOUT = 120.0

PLUGINS_DIR = "plugins"
CACHE_DIR = "cache"


def get_agentx_home() -> Path:
    """Get the AgentX Home directory path.

    Resolution order:
    1. AGENTX_HOME environment variable (if set)
    2. Default: ~/.agentx/

    Returns:
        Path to AgentX Home directory.
    """
    env_value = os.environ.get(AGENTX_HOME_ENV_VAR)
    if env_value:
        return Path(env_value).expanduser()
    return DEFAULT_AGENTX_HOME


def get_plugins_dir() -> Path:
    """Directory that holds installed plugins, one subdirectory each."""
    return get_agentx_home() / PLUGINS_DIR


def get_cache_dir() -> Path:
    """Directory for registry and update-check caches."""
    return get_agentx_home() / CACHE_DIR


def get_codex_home() -> Path:
    """Codex personal root: CODEX_HOME if set, else ~/.codex."""
    env_value = os.environ.get(CODEX_HOME_ENV_VAR)
    if env_value:
        return Path(env_value).expanduser()
    return Path.home() / ".codex"


def get_git_timeout() -> float:
    """Seconds a clone may run before it is aborted.

    Falls back to DEFAULT_GIT_TIMEOUT when the variable is unset, not a
    number, or not positive.
    """
    raw = os.environ.get(GIT_TIMEOUT_ENV_VAR, "").strip()
    if not raw:
        return DEFAULT_GIT_TIMEOUT
    try:
        value = float(raw)
    except ValueError:
        return DEFAULT_GIT_TIMEOUT
    return value if value > 0 else DEFAULT_GIT_TIMEOUT
