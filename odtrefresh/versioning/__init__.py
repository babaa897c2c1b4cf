"""
Version comparison and extraction utilities for odtrefresh.

Modules
-------
keys : module
    Strict dotted-integer parsing and numeric comparison.
exe : module
    ProductVersion extraction from Windows executables.

Public API
----------
DiscoveredVersion : dataclass
    Container for discovered version information with source tracking.
parse_version : function
    Parse "16.0.10" into (16, 0, 10); malformed strings raise VersionError.
compare_versions : function
    Compare two version strings, returning -1, 0, or 1.
is_newer : function
    Check if a candidate version is strictly newer than the current one.
sort_versions : function
    Order version strings oldest first.
version_from_exe_product_version : function
    Read ProductVersion from an executable.

Examples
--------
    >>> from odtrefresh.versioning import compare_versions, is_newer
    >>> compare_versions("16.0.10", "16.0.9")
    1
    >>> is_newer("16.0.2", "16.0.2")
    False

Notes
-----
- Comparison is numeric per component, never lexical.
- "16.0" and "16.0.0" compare equal.
"""

from .exe import version_from_exe_product_version
from .keys import (
    DiscoveredVersion,
    compare_versions,
    is_newer,
    is_version,
    parse_version,
    sort_versions,
    version_key,
)

__all__ = [
    "DiscoveredVersion",
    "compare_versions",
    "is_newer",
    "is_version",
    "parse_version",
    "sort_versions",
    "version_key",
    "version_from_exe_product_version",
]
