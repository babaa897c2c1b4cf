"""
Tests for odtrefresh.tool module.

Tests the downloaded tool handling including:
- Self-extraction into a version-named folder
- Staged setup.exe reconcile (newer, equal, older, missing)
- Temp cleanup warnings
"""

from __future__ import annotations

from pathlib import Path
import subprocess
from unittest.mock import MagicMock, patch

import pytest

from odtrefresh.exceptions import PackagingError, VersionError
from odtrefresh.tool import clean_temp, extract_tool, reconcile_tool
from odtrefresh.versioning import DiscoveredVersion

pytestmark = pytest.mark.unit


def _versions_by_name(mapping: dict[str, str]):
    """Build a fake version reader keyed by file content."""

    def _read(path):
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(path)
        return DiscoveredVersion(version=mapping[path.read_text()], source="exe")

    return _read


class TestExtractTool:
    """Tests for extract_tool."""

    def test_extracts_into_version_folder(self, tmp_test_dir):
        tool = tmp_test_dir / "officedeploymenttool.exe"
        tool.write_bytes(b"MZ")

        def fake_run(cmd, **kwargs):
            target = Path(cmd[2].split(":", 1)[1])
            (target / "setup.exe").write_bytes(b"MZ setup")
            return MagicMock(returncode=0)

        with (
            patch(
                "odtrefresh.tool.extract.version_from_exe_product_version",
                return_value=DiscoveredVersion("16.0.2", "exe"),
            ),
            patch("odtrefresh.tool.extract.subprocess.run", side_effect=fake_run) as run,
        ):
            result = extract_tool(tool, tmp_test_dir)

        assert result.version == "16.0.2"
        assert result.extract_dir == tmp_test_dir / "16.0.2"
        assert result.setup_path == tmp_test_dir / "16.0.2" / "setup.exe"
        cmd = run.call_args[0][0]
        assert cmd[:2] == [str(tool), "/quiet"]
        assert cmd[2] == f"/extract:{tmp_test_dir / '16.0.2'}"

    def test_stale_folder_is_replaced(self, tmp_test_dir):
        tool = tmp_test_dir / "officedeploymenttool.exe"
        tool.write_bytes(b"MZ")
        stale = tmp_test_dir / "16.0.2"
        stale.mkdir()
        (stale / "leftover.xml").write_text("old")

        def fake_run(cmd, **kwargs):
            (stale / "setup.exe").write_bytes(b"MZ")
            return MagicMock(returncode=0)

        with (
            patch(
                "odtrefresh.tool.extract.version_from_exe_product_version",
                return_value=DiscoveredVersion("16.0.2", "exe"),
            ),
            patch("odtrefresh.tool.extract.subprocess.run", side_effect=fake_run),
        ):
            extract_tool(tool, tmp_test_dir)

        assert not (stale / "leftover.xml").exists()

    def test_extractor_failure_raises(self, tmp_test_dir):
        tool = tmp_test_dir / "officedeploymenttool.exe"
        tool.write_bytes(b"MZ")

        with (
            patch(
                "odtrefresh.tool.extract.version_from_exe_product_version",
                return_value=DiscoveredVersion("16.0.2", "exe"),
            ),
            patch(
                "odtrefresh.tool.extract.subprocess.run",
                side_effect=subprocess.CalledProcessError(2, "tool", stderr="bad"),
            ),
        ):
            with pytest.raises(PackagingError, match="exit code 2"):
                extract_tool(tool, tmp_test_dir)

    def test_missing_setup_raises(self, tmp_test_dir):
        tool = tmp_test_dir / "officedeploymenttool.exe"
        tool.write_bytes(b"MZ")

        with (
            patch(
                "odtrefresh.tool.extract.version_from_exe_product_version",
                return_value=DiscoveredVersion("16.0.2", "exe"),
            ),
            patch("odtrefresh.tool.extract.subprocess.run"),
        ):
            with pytest.raises(PackagingError, match="no setup.exe"):
                extract_tool(tool, tmp_test_dir)

    def test_missing_tool_raises(self, tmp_test_dir):
        with pytest.raises(PackagingError, match="not found"):
            extract_tool(tmp_test_dir / "gone.exe", tmp_test_dir)


class TestReconcileTool:
    """Tests for reconcile_tool."""

    def _setup(self, tmp_test_dir):
        staged = tmp_test_dir / "package" / "setup.exe"
        extracted = tmp_test_dir / "16.0.2" / "setup.exe"
        staged.parent.mkdir()
        extracted.parent.mkdir()
        staged.write_text("staged")
        extracted.write_text("extracted")
        return staged, extracted

    def test_newer_extracted_replaces_staged(self, tmp_test_dir):
        staged, extracted = self._setup(tmp_test_dir)
        reader = _versions_by_name({"staged": "16.0.1", "extracted": "16.0.2"})

        with patch("odtrefresh.tool.reconcile.version_from_exe_product_version", side_effect=reader):
            result = reconcile_tool(staged, extracted)

        assert result.replaced is True
        assert result.staged_version == "16.0.1"
        assert result.extracted_version == "16.0.2"
        assert staged.read_text() == "extracted"

    def test_numeric_comparison(self, tmp_test_dir):
        """Test that 16.0.10 counts as newer than 16.0.9."""
        staged, extracted = self._setup(tmp_test_dir)
        reader = _versions_by_name({"staged": "16.0.9", "extracted": "16.0.10"})

        with patch("odtrefresh.tool.reconcile.version_from_exe_product_version", side_effect=reader):
            result = reconcile_tool(staged, extracted)

        assert result.replaced is True

    def test_equal_versions_leave_staged(self, tmp_test_dir):
        staged, extracted = self._setup(tmp_test_dir)
        reader = _versions_by_name({"staged": "16.0.2", "extracted": "16.0.2"})

        with patch("odtrefresh.tool.reconcile.version_from_exe_product_version", side_effect=reader):
            result = reconcile_tool(staged, extracted)

        assert result.replaced is False
        assert staged.read_text() == "staged"

    def test_older_extracted_leaves_staged(self, tmp_test_dir):
        staged, extracted = self._setup(tmp_test_dir)
        reader = _versions_by_name({"staged": "16.0.3", "extracted": "16.0.2"})

        with patch("odtrefresh.tool.reconcile.version_from_exe_product_version", side_effect=reader):
            result = reconcile_tool(staged, extracted)

        assert result.replaced is False

    def test_missing_staged_raises(self, tmp_test_dir):
        staged, extracted = self._setup(tmp_test_dir)
        staged.unlink()
        reader = _versions_by_name({"extracted": "16.0.2"})

        with patch("odtrefresh.tool.reconcile.version_from_exe_product_version", side_effect=reader):
            with pytest.raises(PackagingError, match="Staged setup.exe not found"):
                reconcile_tool(staged, extracted)

    def test_malformed_version_raises(self, tmp_test_dir):
        staged, extracted = self._setup(tmp_test_dir)
        reader = _versions_by_name({"staged": "16.0.1", "extracted": "16.0.2 beta"})

        with patch("odtrefresh.tool.reconcile.version_from_exe_product_version", side_effect=reader):
            with pytest.raises(VersionError):
                reconcile_tool(staged, extracted)


class TestCleanTemp:
    """Tests for clean_temp."""

    def test_removes_folder_and_tool(self, tmp_test_dir):
        extract_dir = tmp_test_dir / "16.0.2"
        extract_dir.mkdir()
        (extract_dir / "setup.exe").write_bytes(b"MZ")
        tool = tmp_test_dir / "officedeploymenttool.exe"
        tool.write_bytes(b"MZ")

        result = clean_temp(extract_dir, tool)

        assert result.removed == [extract_dir, tool]
        assert result.warnings == []
        assert not extract_dir.exists()
        assert not tool.exists()

    def test_missing_paths_are_ignored(self, tmp_test_dir):
        result = clean_temp(tmp_test_dir / "none", tmp_test_dir / "none.exe")
        assert result.removed == []
        assert result.warnings == []

    def test_failures_become_warnings(self, tmp_test_dir):
        """Test that a locked folder is reported, not raised."""
        extract_dir = tmp_test_dir / "16.0.2"
        extract_dir.mkdir()
        tool = tmp_test_dir / "officedeploymenttool.exe"
        tool.write_bytes(b"MZ")

        with patch(
            "odtrefresh.tool.cleanup.shutil.rmtree",
            side_effect=PermissionError("in use"),
        ):
            result = clean_temp(extract_dir, tool)

        assert result.removed == [tool]
        assert len(result.warnings) == 1
        assert "in use" in result.warnings[0]
