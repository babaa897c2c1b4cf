"""Cached Office content management for odtrefresh.

Modules:

update : module
    Snapshot the cached versions and run setup.exe /download.
prune : module
    Delete the superseded version folder and archive.

"""

from .prune import current_content_version, prune_content
from .update import (
    find_data_dir,
    list_archives,
    list_content_versions,
    snapshot_content,
    update_content,
)

__all__ = [
    "current_content_version",
    "find_data_dir",
    "list_archives",
    "list_content_versions",
    "prune_content",
    "snapshot_content",
    "update_content",
]
