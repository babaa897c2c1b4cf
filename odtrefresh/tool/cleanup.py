"""Removal of the temporary tool download and extraction folder."""

from __future__ import annotations

from pathlib import Path
import shutil

from odtrefresh.results import CleanupResult


def clean_temp(extract_dir: Path, tool_path: Path) -> CleanupResult:
    """Delete the extraction folder, then the downloaded self-extractor.

    Failures are collected as warnings instead of raised; a leftover temp
    file does not affect the content update that follows.

    Args:
        extract_dir: Folder created by extract_tool.
        tool_path: Downloaded self-extractor.

    Returns:
        Deleted paths and warnings for anything left behind.

    """
    from odtrefresh.logging import get_global_logger

    logger = get_global_logger()
    removed: list[Path] = []
    warnings: list[str] = []

    extract_dir = Path(extract_dir)
    tool_path = Path(tool_path)

    if extract_dir.exists():
        try:
            shutil.rmtree(extract_dir)
            removed.append(extract_dir)
            logger.debug("CLEANUP", f"Removed {extract_dir}")
        except OSError as err:
            warnings.append(f"Could not remove {extract_dir}: {err}")

    if tool_path.exists():
        try:
            tool_path.unlink()
            removed.append(tool_path)
            logger.debug("CLEANUP", f"Removed {tool_path}")
        except OSError as err:
            warnings.append(f"Could not remove {tool_path}: {err}")

    for message in warnings:
        logger.warning("CLEANUP", message)

    return CleanupResult(removed=removed, warnings=warnings)
