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

"""Tool discovery for odtrefresh.

Finds and downloads the current Office Deployment Tool build by scraping
the download center confirmation page for its manual download link.

Public API:

- fetch_tool: Resolve the download link and download the tool
- resolve_tool_url: Resolve the download link only
- find_download_link: Pure HTML scan, no network

"""

from .odt_page import (
    DEFAULT_LINK_TEXT,
    DEFAULT_PAGE_URL,
    fetch_tool,
    find_download_link,
    resolve_tool_url,
)

__all__ = [
    "DEFAULT_LINK_TEXT",
    "DEFAULT_PAGE_URL",
    "fetch_tool",
    "find_download_link",
    "resolve_tool_url",
]
