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

"""Settings loading for odtrefresh.

Layers built-in defaults, an optional YAML settings file, and CLI
overrides into a RefreshSettings.

Public API:

- load_settings: Load, merge and validate settings
- merge_settings: Merge only (used by validation)
- RefreshSettings: The effective settings dataclass

Example:
    from pathlib import Path
    from odtrefresh.config import load_settings

    settings = load_settings(Path("settings/office365.yaml"))
    print(settings.package_path)

"""

from .loader import RefreshSettings, load_settings, merge_settings

__all__ = ["RefreshSettings", "load_settings", "merge_settings"]
