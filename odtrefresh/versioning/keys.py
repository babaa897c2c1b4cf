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

"""Dotted-integer version comparison for odtrefresh.

This module is format-agnostic: it does NOT read files. Office Deployment
Tool builds and Click-to-Run content folders both use plain dotted-integer
versions ("16.0.17928.20114"), so parsing is strict. Anything else (empty
components, letters, pre-release suffixes) raises VersionError instead of
being coerced.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
import re

from odtrefresh.exceptions import VersionError

# ASCII digits only
_COMPONENT = re.compile(r"[0-9]+")

# ----------------------------
# Shared DTO
# ----------------------------


@dataclass(frozen=True)
class DiscoveredVersion:
    """Container for a discovered version string.

    Attributes:
        version: Raw version string (e.g., "16.0.17928.20114").
        source: Where it came from (e.g., "exe", "folder").

    """

    version: str
    source: str


# ----------------------------
# Parsing and comparison
# ----------------------------


def parse_version(text: str) -> tuple[int, ...]:
    """Parse a dotted-integer version into a tuple of ints.

    Raises:
        VersionError: If the string is empty or any component is not a
            non-negative integer.

    Example:
        ```python
        parse_version("16.0.10")  # (16, 0, 10)
        parse_version("16.0.1-beta")  # raises VersionError
        ```
    """
    if not isinstance(text, str) or not text.strip():
        raise VersionError(f"empty version string: {text!r}")
    parts = text.strip().split(".")
    nums: list[int] = []
    for p in parts:
        if not _COMPONENT.fullmatch(p):
            raise VersionError(f"non-numeric version component {p!r} in {text!r}")
        nums.append(int(p))
    return tuple(nums)


def is_version(text: str) -> bool:
    """Return True if text parses as a dotted-integer version."""
    try:
        parse_version(text)
    except VersionError:
        return False
    return True


def _pad_equal(
    a: tuple[int, ...], b: tuple[int, ...]
) -> tuple[tuple[int, ...], tuple[int, ...]]:
    """Pad tuples with zeros so they align for element-wise comparison."""
    n = max(len(a), len(b))
    return a + (0,) * (n - len(a)), b + (0,) * (n - len(b))


def version_key(text: str) -> tuple[int, ...]:
    """Sort key for a version string; trailing zeros do not matter."""
    nums = list(parse_version(text))
    while len(nums) > 1 and nums[-1] == 0:
        nums.pop()
    return tuple(nums)


def compare_versions(a: str, b: str) -> int:
    """Compare two versions numerically.

    Returns -1 if a < b, 0 if equal, 1 if a > b. Missing trailing
    components count as zero, so "16.0" equals "16.0.0".
    """
    aa, bb = _pad_equal(parse_version(a), parse_version(b))
    return (aa > bb) - (aa < bb)


def is_newer(candidate: str, current: str | None) -> bool:
    """Return True iff candidate is strictly newer than current.

    A missing current version (None) always counts as older.
    """
    if current is None:
        return True
    return compare_versions(candidate, current) > 0


def sort_versions(versions: Iterable[str]) -> list[str]:
    """Return the versions ordered oldest first."""
    return sorted(versions, key=version_key)
