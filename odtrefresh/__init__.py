"""
odtrefresh - Office Deployment Tool package refresher

Keeps a Configuration Manager Office 365 ProPlus package source current:
the Office Deployment Tool (setup.exe) in the package is replaced when a
newer one is published, the Office content cache is refreshed, the
previous content version is pruned, and the catalog application is
pointed at the new content.

odtrefresh provides:
  - Download center scraping for the current tool download link
  - Streaming downloads with SHA-256 digests
  - Dotted-integer version comparison (zero-padded, no prerelease tags)
  - Content cache update and single-version pruning
  - Registry detection clause rewrite on the catalog deployment type
  - Distribution point content refresh through the AdminService

Quick Start
-----------
Check a settings file without touching the network:

    $ odtr validate settings/office365.yaml

Run a refresh:

    $ odtr refresh settings/office365.yaml -v

Package Structure
-----------------
cli : module
    Command-line interface with argparse.
core : module
    Stage chain for one refresh run.
config : package
    YAML settings loading and merging.
discovery : package
    Tool download link discovery from the download center page.
tool : package
    Extraction, staged setup.exe reconcile, and temp cleanup.
content : package
    Content cache update and pruning.
catalog : package
    AdminService client, detection clause rewrite, and sync.
versioning : package
    Version parsing, comparison and EXE ProductVersion reading.
io : package
    Download operations.

Public API
----------
    from odtrefresh.config import load_settings
    from odtrefresh.core import refresh_package
    from odtrefresh.validation import validate_settings
    from odtrefresh.versioning import compare_versions, is_newer

Project Information
-------------------
Author: Roger Cibrian
License: Apache-2.0
"""

__version__ = "0.1.0"
__author__ = "Roger Cibrian"
__license__ = "Apache-2.0"
__description__ = "Office Deployment Tool package refresh for Configuration Manager"

# Re-export commonly used functions for convenience
from odtrefresh.config import load_settings
from odtrefresh.core import package_status, refresh_package
from odtrefresh.io import download_file
from odtrefresh.validation import validate_settings
from odtrefresh.versioning import DiscoveredVersion, compare_versions, is_newer

__all__ = [
    "__version__",
    "__author__",
    "__license__",
    "__description__",
    "refresh_package",
    "package_status",
    "validate_settings",
    "load_settings",
    "download_file",
    "compare_versions",
    "is_newer",
    "DiscoveredVersion",
]
