"""Tests for agentx.update_check module."""

from datetime import datetime, timedelta, timezone
from pathlib import Path
from unittest.mock import Mock

import pytest

from agentx.update_check import (
    CACHE_FILENAME,
    DEFAULT_UPGRADE_COMMAND,
    RELEASE_NOTES_URL,
    SemVersion,
    UpdateCacheData,
    UpdateChecker,
    UpdateInfo,
    VersionSource,
    get_upgrade_command,
    parse_semver,
)


def _write_cache(cache_dir: Path, latest: str, age: timedelta, ignored: str = "") -> None:
    """Write a cache file using the same format as production code."""
    cache = UpdateCacheData(checked_at=datetime.now(timezone.utc) - age, latest=latest, ignored=ignored)
    (cache_dir / CACHE_FILENAME).write_text(cache.model_dump_json())


def _source(latest: str) -> Mock:
    source = Mock(spec=VersionSource)
    source.fetch_latest.return_value = latest
    return source


@pytest.fixture(autouse=True)
def _no_env_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("AGENTX_FORCE_UPDATE_CHECK", raising=False)
    monkeypatch.delenv("AGENTX_UPGRADE_COMMAND", raising=False)


class TestParseSemver:
    @pytest.mark.parametrize(
        ("raw", "normalized"),
        [
            ("1.2.3", "v1.2.3"),
            ("v1.2.3", "v1.2.3"),
            ("agentx v0.4.0 (abc123)", "v0.4.0"),
            ("v1.0.0-rc.1", "v1.0.0-rc.1"),
        ],
    )
    def test_normalizes(self, raw: str, normalized: str) -> None:
        parsed = parse_semver(raw)

        assert parsed is not None
        assert parsed[1] == normalized

    @pytest.mark.parametrize("raw", ["dev", "", "1.2", "latest"])
    def test_rejects_non_semver(self, raw: str) -> None:
        assert parse_semver(raw) is None

    def test_build_metadata_is_ignored_for_ordering(self) -> None:
        a = parse_semver("1.0.0+a")
        b = parse_semver("1.0.0+b")
        assert a is not None and b is not None

        assert a[0].compare(b[0]) == 0


class TestSemVersionOrdering:
    """Precedence follows semver: 1.0.0-alpha < 1.0.0-alpha.1 < 1.0.0-beta < 1.0.0-rc.1 < 1.0.0."""

    ORDERED = [
        "1.0.0-alpha",
        "1.0.0-alpha.1",
        "1.0.0-alpha.beta",
        "1.0.0-beta",
        "1.0.0-beta.2",
        "1.0.0-beta.11",
        "1.0.0-rc.1",
        "1.0.0",
        "1.0.1",
        "1.1.0",
        "2.0.0",
    ]

    def test_sorted_sequence(self) -> None:
        versions = []
        for raw in self.ORDERED:
            parsed = parse_semver(raw)
            assert parsed is not None
            versions.append(parsed[0])

        for lower, higher in zip(versions, versions[1:]):
            assert lower.compare(higher) == -1
            assert higher.compare(lower) == 1

    def test_equal(self) -> None:
        assert SemVersion(1, 2, 3).compare(SemVersion(1, 2, 3)) == 0


class TestUpdateInfo:
    """Tests for UpdateInfo dataclass."""

    def test_message_format_is_exact(self) -> None:
        # Given
        info = UpdateInfo(current="v0.4.0", latest="v0.5.0", command="pipx upgrade agentx")

        # When
        actual = info.message()

        # Then
        expected = f"Update available: 0.4.0 → 0.5.0\nRun: pipx upgrade agentx\nRelease notes: {RELEASE_NOTES_URL}"
        assert actual == expected


class TestUpgradeCommand:
    def test_default(self) -> None:
        assert get_upgrade_command() == DEFAULT_UPGRADE_COMMAND

    def test_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("AGENTX_UPGRADE_COMMAND", "brew upgrade agentx")

        assert get_upgrade_command() == "brew upgrade agentx"


class TestUpdateChecker:
    """Tests for UpdateChecker service."""

    def test_shows_update_when_newer_version_exists(self, tmp_path: Path) -> None:
        # Given
        checker = UpdateChecker(_source("v0.5.0"), "0.4.0", tmp_path)

        # When
        result = checker.check()

        # Then
        assert result is not None
        assert result.current == "0.4.0"
        assert result.latest == "v0.5.0"
        assert result.command == DEFAULT_UPGRADE_COMMAND

    def test_no_update_when_up_to_date(self, tmp_path: Path) -> None:
        checker = UpdateChecker(_source("v0.4.0"), "v0.4.0", tmp_path)

        assert checker.check() is None

    def test_release_is_newer_than_its_prerelease(self, tmp_path: Path) -> None:
        checker = UpdateChecker(_source("v1.0.0"), "1.0.0-rc.2", tmp_path)

        assert checker.check() is not None

    def test_older_release_is_not_an_update(self, tmp_path: Path) -> None:
        checker = UpdateChecker(_source("v0.3.9"), "0.4.0", tmp_path)

        assert checker.check() is None

    def test_fetch_writes_cache(self, tmp_path: Path) -> None:
        UpdateChecker(_source("v0.5.0"), "0.4.0", tmp_path).check()

        cache = UpdateCacheData.model_validate_json((tmp_path / CACHE_FILENAME).read_text())
        assert cache.latest == "v0.5.0"
        assert cache.ignored == ""

    def test_uses_fresh_cache_without_fetching(self, tmp_path: Path) -> None:
        # Given
        _write_cache(tmp_path, "v0.6.0", age=timedelta(hours=1))
        source = _source("v0.5.0")

        # When
        result = UpdateChecker(source, "0.4.0", tmp_path).check()

        # Then
        source.fetch_latest.assert_not_called()
        assert result is not None
        assert result.latest == "v0.6.0"

    def test_refetches_stale_cache(self, tmp_path: Path) -> None:
        _write_cache(tmp_path, "v0.5.0", age=timedelta(hours=13))
        source = _source("v0.7.0")

        result = UpdateChecker(source, "0.4.0", tmp_path).check()

        source.fetch_latest.assert_called_once()
        assert result is not None
        assert result.latest == "v0.7.0"

    def test_stale_cache_survives_fetch_failure(self, tmp_path: Path) -> None:
        """A failed refresh falls back to the last known version."""
        _write_cache(tmp_path, "v0.5.0", age=timedelta(days=3))
        source = Mock(spec=VersionSource)
        source.fetch_latest.side_effect = OSError("offline")

        result = UpdateChecker(source, "0.4.0", tmp_path).check()

        assert result is not None
        assert result.latest == "v0.5.0"

    def test_fetch_failure_without_cache_raises(self, tmp_path: Path) -> None:
        source = Mock(spec=VersionSource)
        source.fetch_latest.side_effect = ValueError("update check returned empty tag")

        with pytest.raises(ValueError, match="empty tag"):
            UpdateChecker(source, "0.4.0", tmp_path).check()

    def test_corrupt_cache_is_refetched(self, tmp_path: Path) -> None:
        (tmp_path / CACHE_FILENAME).write_text("not json")
        source = _source("v0.5.0")

        result = UpdateChecker(source, "0.4.0", tmp_path).check()

        source.fetch_latest.assert_called_once()
        assert result is not None

    def test_undecodable_cache_is_refetched(self, tmp_path: Path) -> None:
        (tmp_path / CACHE_FILENAME).write_bytes(b"\xff\xfe\x00garbage")
        source = _source("v0.5.0")

        result = UpdateChecker(source, "0.4.0", tmp_path).check()

        source.fetch_latest.assert_called_once()
        assert result is not None

    def test_dev_build_skips_check(self, tmp_path: Path) -> None:
        source = _source("v0.5.0")

        assert UpdateChecker(source, "dev", tmp_path).check() is None
        source.fetch_latest.assert_not_called()

    def test_dev_build_checks_when_forced(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("AGENTX_FORCE_UPDATE_CHECK", "1")

        result = UpdateChecker(_source("v0.5.0"), "dev", tmp_path).check()

        assert result is not None
        assert result.current == "dev"


class TestSkipVersion:
    """Ignoring a release silences it until a newer one appears."""

    def test_skipped_version_is_not_announced(self, tmp_path: Path) -> None:
        # Given
        checker = UpdateChecker(_source("v0.5.0"), "0.4.0", tmp_path)
        assert checker.check() is not None

        # When
        recorded = checker.skip_version("0.5.0")

        # Then
        assert recorded == "v0.5.0"
        assert checker.check() is None

    def test_newer_release_is_announced_again(self, tmp_path: Path) -> None:
        _write_cache(tmp_path, "v0.5.0", age=timedelta(days=1), ignored="v0.5.0")

        result = UpdateChecker(_source("v0.6.0"), "0.4.0", tmp_path).check()

        assert result is not None
        assert result.latest == "v0.6.0"

    def test_skip_without_cache(self, tmp_path: Path) -> None:
        checker = UpdateChecker(_source("v0.5.0"), "0.4.0", tmp_path)

        checker.skip_version("v0.5.0")

        cache = UpdateCacheData.model_validate_json((tmp_path / CACHE_FILENAME).read_text())
        assert cache.ignored == "v0.5.0"
        assert cache.latest == "v0.5.0"

    def test_invalid_version(self, tmp_path: Path) -> None:
        checker = UpdateChecker(_source("v0.5.0"), "0.4.0", tmp_path)

        with pytest.raises(ValueError, match="Invalid version: soon"):
            checker.skip_version("soon")
