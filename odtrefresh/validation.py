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

"""Settings validation module.

Checks a settings file and the package directory it points at without
touching the network or launching any process. Useful before scheduling a
refresh task.

Validation Checks:

- YAML syntax is valid and the document is a mapping
- Required keys present (package_path, application_name)
- Package directory exists and holds setup.exe and the configuration XML
- Catalog server configured when the catalog stage is enabled
- Cached content folders have dotted-integer names

Example:
    ```python
    from pathlib import Path
    from odtrefresh.validation import validate_settings

    result = validate_settings(Path("settings/office365.yaml"))
    if result.status == "valid":
        print("Settings are valid")
    else:
        for error in result.errors:
            print(f"Error: {error}")
    ```

"""

from __future__ import annotations

from pathlib import Path

from odtrefresh.config.loader import REQUIRED_KEYS, merge_settings
from odtrefresh.content import find_data_dir, list_archives, list_content_versions
from odtrefresh.exceptions import ConfigError
from odtrefresh.results import ValidationResult
from odtrefresh.tool import SETUP_EXE

__all__ = ["validate_settings"]


def validate_settings(settings_path: Path, *, check_catalog: bool = True) -> ValidationResult:
    """Validate a settings file without downloading or running anything.

    Args:
        settings_path: Path to the settings YAML file.
        check_catalog: If False, a missing catalog server is not an error.

    Returns:
        ValidationResult with status "valid" or "invalid".

    """
    errors: list[str] = []
    warnings: list[str] = []

    try:
        merged = merge_settings(settings_path)
    except ConfigError as err:
        return ValidationResult(
            status="invalid",
            errors=[str(err)],
            warnings=[],
            settings_path=str(settings_path),
        )

    for key in REQUIRED_KEYS:
        if not merged.get(key):
            errors.append(f"Missing required field: {key}")

    if merged.get("package_path"):
        package_dir = Path(merged["package_path"])
        if not package_dir.is_dir():
            errors.append(f"Package directory not found: {package_dir}")
        else:
            if not (package_dir / SETUP_EXE).exists():
                errors.append(f"{SETUP_EXE} not found in {package_dir}")
            config_name = merged.get("configuration_file") or "configuration.xml"
            if not (package_dir / config_name).exists():
                errors.append(f"Configuration file not found: {package_dir / config_name}")

            data_dir = find_data_dir(package_dir)
            versions = list_content_versions(data_dir)
            if not versions:
                warnings.append("No cached content version yet (first run)")
            elif len(versions) > 1:
                warnings.append(
                    f"{len(versions)} content versions cached; the oldest is pruned on next run"
                )
            if data_dir.is_dir():
                others = [
                    p.name
                    for p in data_dir.iterdir()
                    if p.is_dir() and p.name not in versions
                ]
                for name in others:
                    warnings.append(f"Ignoring non-version folder in {data_dir}: {name}")
                if len(list_archives(data_dir)) > len(versions):
                    warnings.append("More version archives than version folders")

    catalog = merged.get("catalog") or {}
    enabled = catalog.get("enabled", True)
    if not isinstance(enabled, bool):
        errors.append("catalog.enabled must be true or false")
    elif check_catalog and enabled and not catalog.get("server"):
        errors.append("Missing required field: catalog.server (or set catalog.enabled: false)")

    if not isinstance(merged.get("skip_detection_update", True), bool):
        errors.append("skip_detection_update must be true or false")

    return ValidationResult(
        status="invalid" if errors else "valid",
        errors=errors,
        warnings=warnings,
        settings_path=str(settings_path),
    )
