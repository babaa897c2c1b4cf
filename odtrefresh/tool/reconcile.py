"""Staged setup.exe reconciliation.

The package directory keeps its own copy of setup.exe, which later runs
`setup.exe /download`. After each extraction the staged copy is replaced
only when the extracted build is strictly newer; an equal or older build
leaves it alone.
"""

from __future__ import annotations

from pathlib import Path
import shutil

from odtrefresh.exceptions import PackagingError
from odtrefresh.results import ReconcileResult
from odtrefresh.versioning.exe import version_from_exe_product_version
from odtrefresh.versioning.keys import is_newer


def _read_version(path: Path, label: str) -> str:
    try:
        return version_from_exe_product_version(path).version
    except FileNotFoundError as err:
        raise PackagingError(f"{label} setup.exe not found: {path}") from err


def reconcile_tool(staged_path: Path, extracted_path: Path) -> ReconcileResult:
    """Copy the extracted setup.exe over the staged one if it is newer.

    Args:
        staged_path: setup.exe in the package directory.
        extracted_path: setup.exe from the fresh extraction.

    Returns:
        Versions on both sides and whether the staged copy was replaced.

    Raises:
        PackagingError: If either executable is missing or the copy fails.
        VersionError: If either ProductVersion is not a dotted integer.

    """
    from odtrefresh.logging import get_global_logger

    logger = get_global_logger()
    staged_path = Path(staged_path)
    extracted_path = Path(extracted_path)

    staged_version = _read_version(staged_path, "Staged")
    extracted_version = _read_version(extracted_path, "Extracted")

    logger.verbose("TOOL", f"Staged setup.exe: {staged_version}")
    logger.verbose("TOOL", f"Extracted setup.exe: {extracted_version}")

    replaced = False
    if is_newer(extracted_version, staged_version):
        try:
            shutil.copy2(extracted_path, staged_path)
        except OSError as err:
            raise PackagingError(
                f"Failed to replace {staged_path} with {extracted_path}: {err}"
            ) from err
        replaced = True
        logger.verbose(
            "TOOL", f"Replaced staged setup.exe {staged_version} -> {extracted_version}"
        )
    else:
        logger.verbose("TOOL", "Staged setup.exe is current, leaving it in place")

    return ReconcileResult(
        staged_path=staged_path,
        staged_version=staged_version,
        extracted_version=extracted_version,
        replaced=replaced,
    )
