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

"""EXE ProductVersion extraction for odtrefresh.

Reads the ProductVersion string from the version resource of a Windows
executable. Both the downloaded Office Deployment Tool self-extractor and
the setup.exe it contains carry the tool build number there.

Backend:

On Windows, PowerShell reads FileVersionInfo through Get-Item:

    (Get-Item -LiteralPath 'setup.exe').VersionInfo.ProductVersion

No other host has a backend; the whole pipeline drives Windows executables
anyway.

Example:
    ```python
    from odtrefresh.versioning.exe import version_from_exe_product_version

    discovered = version_from_exe_product_version("C:/ODT/setup.exe")
    print(discovered.version)  # 16.0.17928.20114
    ```

Note:
    This is pure file introspection; no network calls are made. Errors are
    chained for debugging (check the 'from err' clause).
"""

from __future__ import annotations

from pathlib import Path
import subprocess
import sys

from odtrefresh.exceptions import PackagingError

from .keys import DiscoveredVersion


def _is_windows() -> bool:
    return sys.platform.startswith("win")


def version_from_exe_product_version(file_path: str | Path) -> DiscoveredVersion:
    """Extract ProductVersion from an EXE file.

    Args:
        file_path: Path to the executable.

    Returns:
        Discovered version with source "exe".

    Raises:
        FileNotFoundError: If the executable doesn't exist.
        PackagingError: If the version resource can't be read or is empty.
        NotImplementedError: If no extraction backend is available.

    """
    from odtrefresh.logging import get_global_logger

    logger = get_global_logger()
    p = Path(file_path)
    if not p.exists():
        raise FileNotFoundError(f"Executable not found: {p}")

    logger.debug("VERSION", f"Reading ProductVersion from: {p.name}")

    if not _is_windows():
        raise NotImplementedError(
            "EXE version extraction is only available on Windows (PowerShell)."
        )

    # Single quotes are doubled inside a PowerShell literal string
    literal = str(p).replace("'", "''")
    ps_script = f"(Get-Item -LiteralPath '{literal}').VersionInfo.ProductVersion"
    try:
        result = subprocess.run(
            ["powershell", "-NoProfile", "-NonInteractive", "-Command", ps_script],
            check=True,
            capture_output=True,
            text=True,
            timeout=30,
        )
    except subprocess.CalledProcessError as err:
        raise PackagingError(
            f"PowerShell ProductVersion query failed for {p.name}: {err}"
        ) from err
    except subprocess.TimeoutExpired as err:
        raise PackagingError(
            f"PowerShell ProductVersion query timed out for {p.name}"
        ) from err
    except OSError as err:
        raise PackagingError(f"Could not launch PowerShell: {err}") from err

    version = result.stdout.strip()
    if not version:
        raise PackagingError(f"Empty ProductVersion in {p.name}")

    logger.debug("VERSION", f"Extracted: {version} (via PowerShell)")
    return DiscoveredVersion(version=version, source="exe")
