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

"""Core orchestration for odtrefresh.

The refresh is a fixed sequence of stages. Each stage reads what earlier
stages produced and returns its own result:

    fetch -> extract -> reconcile -> cleanup -> update -> prune -> catalog

Failure Handling:

- **fetch .. prune** are fatal: the first exception stops the run and is
  recorded as a StageFailure (stage identifier, error type, message).
  Nothing downstream runs, including the catalog stage.
- **cleanup** reports leftover temp files as warnings instead of failing.
- **catalog** never fails the run. A failed lookup ends the stage; a failed
  detection update still lets redistribution run. Both show up as warnings
  on the CatalogSyncResult.

The driver never changes the process working directory; setup.exe gets the
package directory as its cwd and the catalog client is passed explicitly.

Example:
    ```python
    from pathlib import Path
    from odtrefresh.config import load_settings
    from odtrefresh.core import refresh_package

    result = refresh_package(load_settings(Path("settings/office365.yaml")))
    print(result.status, result.new_version)
    ```

"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any

from odtrefresh.catalog import CatalogClient, load_catalog_credentials, synchronize_catalog
from odtrefresh.config import RefreshSettings
from odtrefresh.content import (
    current_content_version,
    find_data_dir,
    list_archives,
    list_content_versions,
    prune_content,
    update_content,
)
from odtrefresh.discovery import fetch_tool
from odtrefresh.exceptions import ODTRError
from odtrefresh.logging import get_global_logger
from odtrefresh.results import (
    CatalogSyncResult,
    PackageStatus,
    RefreshResult,
    StageFailure,
)
from odtrefresh.tool import SETUP_EXE, clean_temp, extract_tool, reconcile_tool
from odtrefresh.versioning import version_from_exe_product_version

STAGES = ("fetch", "extract", "reconcile", "cleanup", "update", "prune", "catalog")

# Exceptions a stage may raise that end the run cleanly; anything else is a bug
_STAGE_ERRORS = (ODTRError, OSError, NotImplementedError)


def _open_catalog(settings: RefreshSettings) -> CatalogClient:
    return CatalogClient(
        settings.catalog_server or "",
        settings.site_code,
        auth=load_catalog_credentials(),
        verify=settings.verify_tls,
        timeout=settings.catalog_timeout,
    )


def _sync_catalog(
    settings: RefreshSettings,
    new_version: str | None,
    catalog: CatalogClient | None,
) -> CatalogSyncResult:
    logger = get_global_logger()
    name = settings.application_name

    if new_version is None:
        message = "No content version folder found after update"
        logger.warning("CATALOG", message)
        return CatalogSyncResult(status="failed", application_name=name, warnings=[message])

    if catalog is not None:
        return synchronize_catalog(
            catalog, name, new_version, skip_detection_update=settings.skip_detection_update
        )

    try:
        client = _open_catalog(settings)
    except ODTRError as err:
        message = f"Could not connect to catalog: {err}"
        logger.warning("CATALOG", message)
        return CatalogSyncResult(status="failed", application_name=name, warnings=[message])

    with client:
        return synchronize_catalog(
            client, name, new_version, skip_detection_update=settings.skip_detection_update
        )


def refresh_package(
    settings: RefreshSettings,
    *,
    catalog: CatalogClient | None = None,
) -> RefreshResult:
    """Run the full refresh pipeline for one package directory.

    Args:
        settings: Effective settings (see odtrefresh.config).
        catalog: Optional open catalog client. When omitted, one is built
            from the settings for the catalog stage and closed afterwards.

    Returns:
        RefreshResult with status "success" if fetch through prune all
            completed, otherwise "failed" with the StageFailure set.

    Example:
        ```python
        result = refresh_package(settings)
        if result.failure:
            print(f"[{result.failure.stage}] {result.failure.message}")
        ```

    """
    logger = get_global_logger()
    package_dir = Path(settings.package_path)
    temp_dir = Path(settings.temp_dir)
    run_catalog = settings.catalog_enabled
    total = len(STAGES) if run_catalog else len(STAGES) - 1

    ctx: dict[str, Any] = {}
    completed: list[str] = []

    chain: list[tuple[str, str, Callable[[], Any]]] = [
        (
            "fetch",
            "Fetching Office Deployment Tool...",
            lambda: fetch_tool(settings.tool_page_url, temp_dir, settings.tool_link_text),
        ),
        (
            "extract",
            "Extracting tool...",
            lambda: extract_tool(ctx["fetch"], temp_dir),
        ),
        (
            "reconcile",
            "Reconciling staged setup.exe...",
            lambda: reconcile_tool(package_dir / SETUP_EXE, ctx["extract"].setup_path),
        ),
        (
            "cleanup",
            "Cleaning temporary files...",
            lambda: clean_temp(ctx["extract"].extract_dir, ctx["fetch"]),
        ),
        (
            "update",
            "Downloading Office content...",
            lambda: update_content(package_dir, settings.configuration_file),
        ),
        (
            "prune",
            "Pruning previous content version...",
            lambda: prune_content(package_dir, ctx["update"]),
        ),
    ]

    for index, (stage, label, run) in enumerate(chain, start=1):
        logger.step(index, total, label)
        try:
            ctx[stage] = run()
        except _STAGE_ERRORS as err:
            failure = StageFailure(
                stage=stage, error_type=type(err).__name__, message=str(err)
            )
            logger.warning(stage.upper(), f"{label.rstrip('.')} failed: {err}")
            return RefreshResult(
                status="failed",
                completed_stages=completed,
                failure=failure,
                tool=ctx.get("reconcile"),
                cleanup=ctx.get("cleanup"),
            )
        completed.append(stage)

    new_version = current_content_version(package_dir)
    logger.verbose("CONTENT", f"Current content version: {new_version}")

    catalog_result = None
    if run_catalog:
        logger.step(total, total, "Synchronizing catalog...")
        catalog_result = _sync_catalog(settings, new_version, catalog)
        completed.append("catalog")

    return RefreshResult(
        status="success",
        completed_stages=completed,
        tool=ctx["reconcile"],
        cleanup=ctx["cleanup"],
        prune=ctx["prune"],
        new_version=new_version,
        catalog=catalog_result,
    )


def package_status(package_path: Path) -> PackageStatus:
    """Describe a package directory without changing anything.

    The staged tool version is None when setup.exe is missing or its
    version can't be read on this host.
    """
    package_dir = Path(package_path)
    staged_version: str | None = None
    try:
        staged_version = version_from_exe_product_version(package_dir / SETUP_EXE).version
    except (FileNotFoundError, ODTRError, NotImplementedError) as err:
        get_global_logger().verbose("STATUS", f"Staged tool version unavailable: {err}")

    data_dir = find_data_dir(package_dir)
    return PackageStatus(
        package_dir=package_dir,
        staged_tool_version=staged_version,
        content_versions=tuple(list_content_versions(data_dir)),
        archives=tuple(list_archives(data_dir)),
    )
