"""Removal of the superseded content version.

setup.exe /download adds the new version folder and archive but never
deletes the old ones. Once the update leaves two or more version folders,
the folder recorded in the pre-update snapshot is deleted together with
its v*_<version>.cab archive.
"""

from __future__ import annotations

from pathlib import Path
import shutil

from odtrefresh.exceptions import PackagingError
from odtrefresh.results import ContentSnapshot, PruneResult

from .update import find_data_dir, list_archives, list_content_versions


def current_content_version(package_dir: Path) -> str | None:
    """Return the newest cached content version, or None if there is none."""
    versions = list_content_versions(find_data_dir(package_dir))
    return versions[-1] if versions else None


def prune_content(package_dir: Path, snapshot: ContentSnapshot) -> PruneResult:
    """Delete the previous content version after an update.

    Args:
        package_dir: Package directory.
        snapshot: Snapshot taken by update_content before downloading.

    Returns:
        The removed version (if any), deleted paths, and what remains.

    Raises:
        PackagingError: If a folder or archive can't be deleted.

    """
    from odtrefresh.logging import get_global_logger

    logger = get_global_logger()
    data_dir = find_data_dir(package_dir)
    versions = list_content_versions(data_dir)

    previous = snapshot.previous_version
    if len(versions) < 2 or previous is None or previous not in versions:
        logger.verbose("CONTENT", f"Nothing to prune ({len(versions)} version folder(s))")
        return PruneResult(removed_version=None, removed_paths=[], remaining=tuple(versions))

    targets = [data_dir / previous, *list_archives(data_dir, previous)]
    removed: list[Path] = []
    for target in targets:
        try:
            if target.is_dir():
                shutil.rmtree(target)
            else:
                target.unlink()
        except OSError as err:
            raise PackagingError(f"Failed to remove {target}: {err}") from err
        removed.append(target)
        logger.verbose("CONTENT", f"Removed {target}")

    return PruneResult(
        removed_version=previous,
        removed_paths=removed,
        remaining=tuple(list_content_versions(data_dir)),
    )
