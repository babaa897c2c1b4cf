# Copyright 2025 Roger Cibrian
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Click-to-Run content download for odtrefresh.

The staged setup.exe pulls Office source files according to a configuration
XML that lives next to it in the package directory:

    <package>\\setup.exe
    <package>\\configuration.xml
    <package>\\Office\\Data\\16.0.17928.20114\\...      (content folder)
    <package>\\Office\\Data\\v64_16.0.17928.20114.cab   (version archive)

Before downloading, the current folders and archives are recorded so the
pruner knows which version was there before.

Example:
    ```python
    from pathlib import Path
    from odtrefresh.content import update_content

    snapshot = update_content(Path("D:/Sources/Office365"), "configuration.xml")
    print(snapshot.previous_version)
    ```
"""

from __future__ import annotations

from pathlib import Path
import subprocess

from odtrefresh.exceptions import ConfigError, PackagingError
from odtrefresh.results import ContentSnapshot
from odtrefresh.versioning.keys import is_version, sort_versions

SETUP_EXE = "setup.exe"
ARCHIVE_PATTERN = "v*_*.cab"


def find_data_dir(package_dir: Path) -> Path:
    """Locate Office/Data under the package directory.

    Matching is case-insensitive so a package copied from a Windows share
    keeps working. Returns the default Office/Data path if none exists yet.
    """
    package_dir = Path(package_dir)
    if package_dir.is_dir():
        for office in package_dir.iterdir():
            if office.is_dir() and office.name.lower() == "office":
                for data in office.iterdir():
                    if data.is_dir() and data.name.lower() == "data":
                        return data
    return package_dir / "Office" / "Data"


def list_content_versions(data_dir: Path) -> list[str]:
    """Return version-named folders in data_dir, oldest first."""
    data_dir = Path(data_dir)
    if not data_dir.is_dir():
        return []
    names = [p.name for p in data_dir.iterdir() if p.is_dir() and is_version(p.name)]
    return sort_versions(names)


def list_archives(data_dir: Path, version: str | None = None) -> list[Path]:
    """Return v*_*.cab archives in data_dir, optionally for one version."""
    data_dir = Path(data_dir)
    if not data_dir.is_dir():
        return []
    pattern = f"v*_{version}.cab" if version else ARCHIVE_PATTERN
    return sorted(p for p in data_dir.glob(pattern) if p.is_file())


def snapshot_content(package_dir: Path) -> ContentSnapshot:
    """Record the cached content versions before an update."""
    data_dir = find_data_dir(package_dir)
    return ContentSnapshot(
        data_dir=data_dir,
        versions=tuple(list_content_versions(data_dir)),
        archives=tuple(list_archives(data_dir)),
    )


def _run_download(setup_path: Path, configuration_file: str, package_dir: Path) -> None:
    from odtrefresh.logging import get_global_logger

    logger = get_global_logger()
    cmd = [str(setup_path), "/download", configuration_file]
    logger.verbose("CONTENT", f"Running: {' '.join(cmd)} (cwd={package_dir})")

    try:
        result = subprocess.run(
            cmd,
            cwd=str(package_dir),
            capture_output=True,
            text=True,
            check=True,
        )
    except subprocess.CalledProcessError as err:
        error_msg = f"setup.exe /download failed (exit code {err.returncode})"
        if err.stderr:
            error_msg += f"\n{err.stderr}"
        raise PackagingError(error_msg) from err
    except OSError as err:
        raise PackagingError(f"Could not launch {setup_path}: {err}") from err

    if result.stdout:
        for line in result.stdout.strip().splitlines():
            logger.debug("CONTENT", f"  {line}")


def update_content(package_dir: Path, configuration_file: str) -> ContentSnapshot:
    """Download content with the staged setup.exe.

    Args:
        package_dir: Package directory holding setup.exe and the XML.
        configuration_file: Configuration XML file name, relative to the
            package directory.

    Returns:
        The snapshot taken before the download started.

    Raises:
        ConfigError: If setup.exe or the configuration file is missing.
        PackagingError: If setup.exe can't start or exits non-zero.

    """
    from odtrefresh.logging import get_global_logger

    logger = get_global_logger()
    package_dir = Path(package_dir)

    setup_path = package_dir / SETUP_EXE
    if not setup_path.exists():
        raise ConfigError(f"{SETUP_EXE} not found in package directory: {package_dir}")
    config_path = package_dir / configuration_file
    if not config_path.exists():
        raise ConfigError(f"Configuration file not found: {config_path}")

    snapshot = snapshot_content(package_dir)
    if snapshot.previous_version:
        logger.verbose("CONTENT", f"Cached version before update: {snapshot.previous_version}")
    else:
        logger.verbose("CONTENT", "No cached content version found")
    if len(snapshot.archives) > 1:
        logger.warning(
            "CONTENT",
            f"Expected one version archive, found {len(snapshot.archives)}: "
            + ", ".join(p.name for p in snapshot.archives),
        )

    _run_download(setup_path, configuration_file, package_dir)
    return snapshot
