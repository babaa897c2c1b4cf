"""
Tests for odtrefresh.content module.

Tests the content cache handling including:
- Office/Data discovery and version listing
- setup.exe /download invocation
- Pruning with zero, one, and two cached versions
"""

from __future__ import annotations

import subprocess
from unittest.mock import MagicMock, patch

import pytest

from odtrefresh.content import (
    current_content_version,
    find_data_dir,
    list_archives,
    list_content_versions,
    prune_content,
    snapshot_content,
    update_content,
)
from odtrefresh.exceptions import ConfigError, PackagingError

pytestmark = pytest.mark.unit


class TestListing:
    """Tests for data directory helpers."""

    def test_find_data_dir_case_insensitive(self, tmp_test_dir):
        data = tmp_test_dir / "office" / "data"
        data.mkdir(parents=True)
        assert find_data_dir(tmp_test_dir) == data

    def test_find_data_dir_default(self, tmp_test_dir):
        assert find_data_dir(tmp_test_dir) == tmp_test_dir / "Office" / "Data"

    def test_versions_sorted_and_filtered(self, make_package):
        package_dir = make_package(["16.0.10", "16.0.9"])
        data_dir = find_data_dir(package_dir)
        (data_dir / "Temp").mkdir()
        (data_dir / "16.0.²").mkdir()

        assert list_content_versions(data_dir) == ["16.0.9", "16.0.10"]
        assert current_content_version(package_dir) == "16.0.10"

    def test_no_versions(self, tmp_test_dir):
        assert list_content_versions(tmp_test_dir / "missing") == []
        assert current_content_version(tmp_test_dir) is None

    def test_archives_by_version(self, make_package):
        package_dir = make_package(["16.0.1", "16.0.2"], archives=["16.0.1", "16.0.2"])
        data_dir = find_data_dir(package_dir)

        assert [p.name for p in list_archives(data_dir)] == ["v64_16.0.1.cab", "v64_16.0.2.cab"]
        assert [p.name for p in list_archives(data_dir, "16.0.1")] == ["v64_16.0.1.cab"]

    def test_snapshot(self, make_package):
        package_dir = make_package(["16.0.1"], archives=["16.0.1"])
        snapshot = snapshot_content(package_dir)
        assert snapshot.versions == ("16.0.1",)
        assert snapshot.previous_version == "16.0.1"


class TestUpdateContent:
    """Tests for update_content."""

    def test_runs_setup_download_in_package_dir(self, make_package):
        package_dir = make_package(["16.0.1"], archives=["16.0.1"])

        with patch(
            "odtrefresh.content.update.subprocess.run",
            return_value=MagicMock(stdout="Downloading...\n"),
        ) as run:
            snapshot = update_content(package_dir, "configuration.xml")

        cmd = run.call_args[0][0]
        assert cmd == [str(package_dir / "setup.exe"), "/download", "configuration.xml"]
        assert run.call_args[1]["cwd"] == str(package_dir)
        assert snapshot.previous_version == "16.0.1"

    def test_missing_configuration_raises(self, make_package):
        package_dir = make_package(configuration=False)
        with pytest.raises(ConfigError, match="Configuration file not found"):
            update_content(package_dir, "configuration.xml")

    def test_missing_setup_raises(self, make_package):
        package_dir = make_package(setup_exe=False)
        with pytest.raises(ConfigError, match="setup.exe not found"):
            update_content(package_dir, "configuration.xml")

    def test_nonzero_exit_raises(self, make_package):
        package_dir = make_package()
        with patch(
            "odtrefresh.content.update.subprocess.run",
            side_effect=subprocess.CalledProcessError(17002, "setup.exe", stderr="no network"),
        ):
            with pytest.raises(PackagingError, match="exit code 17002"):
                update_content(package_dir, "configuration.xml")


class TestPruneContent:
    """Tests for prune_content."""

    def test_two_versions_removes_previous(self, make_package):
        """Test that exactly one folder/cab pair is deleted."""
        package_dir = make_package(["16.0.1"], archives=["16.0.1"])
        snapshot = snapshot_content(package_dir)
        data_dir = find_data_dir(package_dir)
        # what setup.exe /download would have added
        (data_dir / "16.0.2").mkdir()
        (data_dir / "v64_16.0.2.cab").write_bytes(b"cab")

        result = prune_content(package_dir, snapshot)

        assert result.removed_version == "16.0.1"
        assert set(result.removed_paths) == {data_dir / "16.0.1", data_dir / "v64_16.0.1.cab"}
        assert result.remaining == ("16.0.2",)
        assert (data_dir / "v64_16.0.2.cab").exists()

    def test_one_version_removes_nothing(self, make_package):
        package_dir = make_package(["16.0.1"], archives=["16.0.1"])
        snapshot = snapshot_content(package_dir)

        result = prune_content(package_dir, snapshot)

        assert result.removed_version is None
        assert result.removed_paths == []
        assert result.remaining == ("16.0.1",)

    def test_zero_versions_removes_nothing(self, make_package):
        package_dir = make_package()
        snapshot = snapshot_content(package_dir)
        data_dir = find_data_dir(package_dir)
        (data_dir / "16.0.2").mkdir()

        result = prune_content(package_dir, snapshot)

        assert result.removed_version is None
        assert result.remaining == ("16.0.2",)

    def test_delete_failure_raises(self, make_package):
        package_dir = make_package(["16.0.1", "16.0.2"])
        snapshot = snapshot_content(package_dir)

        with patch(
            "odtrefresh.content.prune.shutil.rmtree",
            side_effect=PermissionError("locked"),
        ):
            with pytest.raises(PackagingError, match="locked"):
                prune_content(package_dir, snapshot)
