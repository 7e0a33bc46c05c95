"""Tests for AgentX Home resolution."""

from pathlib import Path

import pytest

from agentx.home import (
    DEFAULT_AGENTX_HOME,
    get_agentx_home,
    get_cache_dir,
    get_codex_home,
    get_plugins_dir,
)


class TestGetAgentxHome:
    """Tests for AgentX Home path resolution."""

    @pytest.fixture(autouse=True)
    def clear_agentx_home_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Clear AGENTX_HOME env var before each test."""
        monkeypatch.delenv("AGENTX_HOME", raising=False)

    def test_returns_env_var_when_set(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Verify AGENTX_HOME env var takes precedence."""
        # Given
        monkeypatch.setenv("AGENTX_HOME", "/custom/agentx")

        # When
        result = get_agentx_home()

        # Then
        assert result == Path("/custom/agentx")

    def test_returns_default_when_env_var_not_set(self) -> None:
        assert get_agentx_home() == DEFAULT_AGENTX_HOME

    def test_expands_tilde_in_env_var(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("AGENTX_HOME", "~/my-agentx")

        assert get_agentx_home() == Path.home() / "my-agentx"

    def test_empty_env_var_means_default(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("AGENTX_HOME", "")

        assert get_agentx_home() == DEFAULT_AGENTX_HOME

    def test_subdirectories(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        monkeypatch.setenv("AGENTX_HOME", str(tmp_path))

        assert get_plugins_dir() == tmp_path / "plugins"
        assert get_cache_dir() == tmp_path / "cache"


class TestGetCodexHome:
    def test_env_var(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        monkeypatch.setenv("CODEX_HOME", str(tmp_path / "codex"))

        assert get_codex_home() == tmp_path / "codex"

    def test_default(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("CODEX_HOME", raising=False)

        assert get_codex_home() == Path.home() / ".codex"
