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

"""Exception hierarchy for odtrefresh.

Every pipeline stage raises one of these so the driver can tell the error
families apart when it reports a failed stage:

- ConfigError: Settings problems (YAML parse, missing keys, missing
  setup.exe or configuration XML in the package directory)
- NetworkError: Download page or binary download failures
- PackagingError: External process and file system failures (extraction,
  setup.exe /download, copying or deleting package files)
- CatalogError: Configuration Manager lookups and updates
- VersionError: Version strings that are not plain dotted integers

All exceptions inherit from ODTRError.

Example:
    Catching a single family:
        ```python
        from odtrefresh.discovery import fetch_tool
        from odtrefresh.exceptions import NetworkError

        try:
            tool_path = fetch_tool(page_url, Path("C:/Temp/ODT"))
        except NetworkError as e:
            print(f"Network error: {e}")
        ```
"""

from __future__ import annotations

__all__ = [
    "ODTRError",
    "ConfigError",
    "NetworkError",
    "PackagingError",
    "CatalogError",
    "VersionError",
]


class ODTRError(Exception):
    """Base exception for all odtrefresh errors."""

    pass


class ConfigError(ODTRError):
    """Raised for settings and package layout errors.

    This exception is raised when there are problems with:

    - YAML parsing (syntax errors, non-mapping documents)
    - Missing required settings (package_path, application_name)
    - A package directory without setup.exe or the configuration XML
    """

    pass


class NetworkError(ODTRError):
    """Raised for network/download-related errors.

    This exception is raised when there are problems with:

    - Fetching the Office Deployment Tool confirmation page
    - Finding the manual download link on that page
    - Downloading the tool binary
    """

    pass


class PackagingError(ODTRError):
    """Raised for external process and file operation failures.

    This exception is raised when there are problems with:

    - Reading a product version from an executable
    - Self-extracting the downloaded tool
    - Running setup.exe /download
    - Copying or deleting package files
    """

    pass


class CatalogError(ODTRError):
    """Raised when a Configuration Manager call fails.

    Lookup failures (application or deployment type not found), descriptor
    parsing problems, and rejected updates all surface as CatalogError.
    """

    pass


class VersionError(ODTRError):
    """Raised when a version string is not a dotted-integer version.

    Example:
        ```python
        from odtrefresh.versioning import parse_version

        parse_version("16.0.1-beta")  # raises VersionError
        ```
    """

    pass
