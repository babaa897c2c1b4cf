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

"""Self-extraction of the downloaded Office Deployment Tool.

The download is a self-extracting archive that drops setup.exe and sample
configuration files into a folder:

    officedeploymenttool_17928-20114.exe /quiet /extract:C:\\Temp\\ODT\\16.0.17928.20114

The extraction folder is named after the self-extractor's ProductVersion so
two builds never share a folder.

Example:
    ```python
    from pathlib import Path
    from odtrefresh.tool import extract_tool

    extracted = extract_tool(Path("C:/Temp/ODT/officedeploymenttool.exe"), Path("C:/Temp/ODT"))
    print(extracted.setup_path)
    ```
"""

from __future__ import annotations

from pathlib import Path
import shutil
import subprocess

from odtrefresh.exceptions import PackagingError
from odtrefresh.results import ExtractedTool
from odtrefresh.versioning.exe import version_from_exe_product_version

SETUP_EXE = "setup.exe"


def _run_extractor(tool_path: Path, extract_dir: Path) -> None:
    """Run the self-extractor and wait for it to exit.

    Raises:
        PackagingError: If the process can't start or exits non-zero.
    """
    from odtrefresh.logging import get_global_logger

    logger = get_global_logger()
    cmd = [str(tool_path), "/quiet", f"/extract:{extract_dir}"]
    logger.verbose("TOOL", f"Running: {' '.join(cmd)}")

    try:
        subprocess.run(cmd, capture_output=True, text=True, check=True)
    except subprocess.CalledProcessError as err:
        error_msg = f"{tool_path.name} extraction failed (exit code {err.returncode})"
        if err.stderr:
            error_msg += f"\n{err.stderr}"
        raise PackagingError(error_msg) from err
    except OSError as err:
        raise PackagingError(f"Could not launch {tool_path.name}: {err}") from err


def extract_tool(tool_path: Path, temp_dir: Path) -> ExtractedTool:
    """Extract the downloaded tool into a version-named folder.

    Args:
        tool_path: Path to the downloaded self-extractor.
        temp_dir: Parent folder for the extraction directory.

    Returns:
        The extracted tool, including the path to its setup.exe.

    Raises:
        PackagingError: If the version can't be read, the extractor fails,
            or no setup.exe appears in the extraction folder.

    """
    from odtrefresh.logging import get_global_logger

    logger = get_global_logger()
    tool_path = Path(tool_path)

    try:
        version = version_from_exe_product_version(tool_path).version
    except FileNotFoundError as err:
        raise PackagingError(f"Downloaded tool not found: {tool_path}") from err

    extract_dir = Path(temp_dir) / version
    if extract_dir.exists():
        logger.debug("TOOL", f"Removing stale extraction folder: {extract_dir}")
        shutil.rmtree(extract_dir)
    extract_dir.mkdir(parents=True)

    logger.verbose("TOOL", f"Extracting {tool_path.name} {version} to {extract_dir}")
    _run_extractor(tool_path, extract_dir)

    setup_path = extract_dir / SETUP_EXE
    if not setup_path.exists():
        raise PackagingError(f"Extraction produced no {SETUP_EXE} in {extract_dir}")

    return ExtractedTool(
        tool_path=tool_path,
        extract_dir=extract_dir,
        version=version,
        setup_path=setup_path,
    )
