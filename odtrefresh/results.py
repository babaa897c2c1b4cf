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

"""Public API return types for odtrefresh.

Each pipeline stage returns one of these frozen dataclasses, and the driver
folds them into a RefreshResult.

Example:
    ```python
    from odtrefresh.core import refresh_package

    result = refresh_package(settings)
    if result.status == "success":
        print(result.new_version)
    else:
        print(f"{result.failure.stage}: {result.failure.message}")
    ```
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path


@dataclass(frozen=True)
class ExtractedTool:
    """The self-extracted Office Deployment Tool.

    Attributes:
        tool_path: Path to the downloaded self-extractor.
        extract_dir: Directory the tool was extracted into (named by version).
        version: Product version of the downloaded self-extractor.
        setup_path: Path to the extracted setup.exe.
    """

    tool_path: Path
    extract_dir: Path
    version: str
    setup_path: Path


@dataclass(frozen=True)
class ReconcileResult:
    """Outcome of comparing the extracted and staged setup.exe.

    Attributes:
        staged_path: Path to setup.exe in the package directory.
        staged_version: Version of the staged setup.exe before reconciling.
        extracted_version: Version of the freshly extracted setup.exe.
        replaced: True if the staged setup.exe was overwritten.
    """

    staged_path: Path
    staged_version: str
    extracted_version: str
    replaced: bool


@dataclass(frozen=True)
class CleanupResult:
    """Outcome of removing the temporary download and extraction.

    Attributes:
        removed: Paths that were deleted.
        warnings: Messages for paths that could not be deleted.
    """

    removed: list[Path]
    warnings: list[str]


@dataclass(frozen=True)
class ContentSnapshot:
    """Content versions cached in office/data before setup.exe /download.

    Attributes:
        data_dir: The office/data directory.
        versions: Version-named folders, oldest first.
        archives: v*_*.cab archive files found next to the folders.
    """

    data_dir: Path
    versions: tuple[str, ...]
    archives: tuple[Path, ...]

    @property
    def previous_version(self) -> str | None:
        """Oldest cached version, or None on a first run."""
        return self.versions[0] if self.versions else None


@dataclass(frozen=True)
class PruneResult:
    """Outcome of removing the previous content version.

    Attributes:
        removed_version: Version whose folder was deleted, if any.
        removed_paths: Folder and archive paths that were deleted.
        remaining: Version folders left in office/data, oldest first.
    """

    removed_version: str | None
    removed_paths: list[Path]
    remaining: tuple[str, ...]


@dataclass(frozen=True)
class CatalogSyncResult:
    """Outcome of the Configuration Manager synchronization stage.

    Attributes:
        status: "success" when every attempted call succeeded, "partial"
            when at least one call failed after the lookup, "failed" when
            the lookup itself failed.
        application_name: Application display name that was looked up.
        deployment_type: Deployment type name, if the lookup succeeded.
        detection_updated: True if the detection clause was replaced.
        distribution_updated: True if content redistribution was triggered.
        warnings: Human-readable warnings including the source error text.
    """

    status: str
    application_name: str
    deployment_type: str | None = None
    detection_updated: bool = False
    distribution_updated: bool = False
    warnings: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class StageFailure:
    """The first fatal failure in a pipeline run.

    Attributes:
        stage: Stage identifier (e.g., "fetch", "update").
        error_type: Exception class name.
        message: Underlying error text.
    """

    stage: str
    error_type: str
    message: str


@dataclass(frozen=True)
class RefreshResult:
    """Result from a full refresh run.

    Attributes:
        status: "success" if every fatal stage completed, else "failed".
        completed_stages: Stage identifiers that finished, in order.
        failure: The stage failure that stopped the run, if any.
        tool: Reconciler outcome, if that stage ran.
        cleanup: Temp cleaner outcome, if that stage ran.
        prune: Pruner outcome, if that stage ran.
        new_version: Content version after the update, if known.
        catalog: Catalog synchronization outcome, if that stage ran.
    """

    status: str
    completed_stages: list[str]
    failure: StageFailure | None = None
    tool: ReconcileResult | None = None
    cleanup: CleanupResult | None = None
    prune: PruneResult | None = None
    new_version: str | None = None
    catalog: CatalogSyncResult | None = None


@dataclass(frozen=True)
class PackageStatus:
    """Read-only view of a package directory.

    Attributes:
        package_dir: The package directory.
        staged_tool_version: setup.exe product version, or None if unreadable.
        content_versions: Cached content versions, oldest first.
        archives: Cached v*_*.cab archive files.
    """

    package_dir: Path
    staged_tool_version: str | None
    content_versions: tuple[str, ...]
    archives: tuple[Path, ...]


@dataclass(frozen=True)
class ValidationResult:
    """Result from validating a settings file.

    Attributes:
        status: "valid" or "invalid".
        errors: Error messages (empty if valid).
        warnings: Warning messages.
        settings_path: String path to the validated settings file.
    """

    status: str
    errors: list[str]
    warnings: list[str]
    settings_path: str
