"""
Settings loading and merging for odtrefresh.

Settings come from three layers, merged in order:

1. **Built-in defaults** (DEFAULTS below)
2. **Settings file** (YAML, optional)
3. **Overrides** (CLI flags), highest priority

Merge Behavior
--------------
Deep merge with "last wins" semantics:
  - **Dicts**: Recursively merged (keys from overlay override base)
  - **Lists**: Completely replaced
  - **Scalars**: Overwritten
  - **None in overrides**: ignored, so unset CLI flags never clobber the file

Path Resolution
---------------
Relative paths in the settings file are resolved against the SETTINGS FILE
location. Currently resolved paths:
  - package_path
  - tool.temp_dir

Example settings file
---------------------

    package_path: "D:/Sources/Office365"
    application_name: "Office 365 ProPlus"
    configuration_file: "configuration.xml"
    skip_detection_update: false
    tool:
      temp_dir: "C:/Temp/ODT"
    catalog:
      server: "cm01.contoso.com"
      site_code: "PS1"

Examples
--------
    >>> from pathlib import Path
    >>> from odtrefresh.config import load_settings
    >>> settings = load_settings(Path("settings/office365.yaml"))
    >>> settings.application_name
    'Office 365 ProPlus'

Error Handling
--------------
- ConfigError: Missing settings file, YAML parse errors, non-mapping
  documents, missing required keys
- All errors are chained with "from err" for better debugging
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
import tempfile
from typing import Any

import yaml

from odtrefresh.discovery.odt_page import DEFAULT_LINK_TEXT, DEFAULT_PAGE_URL
from odtrefresh.exceptions import ConfigError

DEFAULTS: dict[str, Any] = {
    "package_path": None,
    "application_name": None,
    "configuration_file": "configuration.xml",
    "skip_detection_update": True,
    "tool": {
        "page_url": DEFAULT_PAGE_URL,
        "link_text": DEFAULT_LINK_TEXT,
        "temp_dir": str(Path(tempfile.gettempdir()) / "odtrefresh"),
    },
    "catalog": {
        "enabled": True,
        "server": None,
        "site_code": "",
        "verify_tls": True,
        "timeout": 60,
    },
}

REQUIRED_KEYS = ("package_path", "application_name")

# -------------------------------
# Data types
# -------------------------------


@dataclass(frozen=True)
class RefreshSettings:
    """Effective settings for one refresh run.

    Attributes:
        package_path: Package directory holding setup.exe and Office/Data.
        application_name: Application display name in the catalog.
        configuration_file: Configuration XML name inside package_path.
        skip_detection_update: Leave the detection clause untouched.
        tool_page_url: Download center confirmation page for the tool.
        tool_link_text: Visible text of the manual download link.
        temp_dir: Where the tool is downloaded and extracted.
        catalog_enabled: Run the catalog stage at all.
        catalog_server: SMS Provider host, or None.
        site_code: Configuration Manager site code.
        verify_tls: TLS verification for the AdminService (bool or CA path).
        catalog_timeout: AdminService request timeout in seconds.
        settings_path: The settings file these came from, if any.
    """

    package_path: Path
    application_name: str
    configuration_file: str = "configuration.xml"
    skip_detection_update: bool = True
    tool_page_url: str = DEFAULT_PAGE_URL
    tool_link_text: str = DEFAULT_LINK_TEXT
    temp_dir: Path = Path(tempfile.gettempdir()) / "odtrefresh"
    catalog_enabled: bool = True
    catalog_server: str | None = None
    site_code: str = ""
    verify_tls: bool | str = True
    catalog_timeout: int = 60
    settings_path: Path | None = None


# -------------------------------
# YAML helpers
# -------------------------------


def load_yaml_file(p: Path) -> dict[str, Any]:
    """
    Load a YAML settings file and return the parsed mapping.

    Raises:
      ConfigError - when the file is missing, unparsable, empty, or not a mapping
    """
    if not p.exists():
        raise ConfigError(f"Settings file not found: {p}")
    try:
        with p.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as err:
        raise ConfigError(f"Error parsing YAML: {p}: {err}") from err
    if data is None:
        raise ConfigError(f"Settings file is empty: {p}")
    if not isinstance(data, dict):
        raise ConfigError(f"Top-level YAML must be a mapping (dict): {p}")
    return data


# -------------------------------
# Merge logic
# -------------------------------


def _deep_merge_dicts(base: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
    """
    Deep-merge two dicts with "overlay wins".

    Rules:
      - dict + dict -> deep merge
      - None in overlay -> base kept
      - everything else -> overlay overwrites base

    This function does not mutate inputs; returns a new dict.
    """
    result: dict[str, Any] = dict(base)
    for k, v in overlay.items():
        if v is None:
            continue
        if k in result and isinstance(result[k], dict) and isinstance(v, dict):
            result[k] = _deep_merge_dicts(result[k], v)
        else:
            result[k] = v
    return result


# -------------------------------
# Path resolution
# -------------------------------


def _resolve_known_paths(cfg: dict[str, Any], base_dir: Path) -> None:
    """
    Resolve relative path fields against base_dir (the settings file folder).
    Modifies cfg in place.
    """
    raw = cfg.get("package_path")
    if isinstance(raw, str) and raw and not Path(raw).is_absolute():
        cfg["package_path"] = str((base_dir / raw).resolve())

    tool = cfg.get("tool")
    if isinstance(tool, dict):
        raw = tool.get("temp_dir")
        if isinstance(raw, str) and raw and not Path(raw).is_absolute():
            tool["temp_dir"] = str((base_dir / raw).resolve())


# -------------------------------
# Typed access
# -------------------------------


def _section(cfg: dict[str, Any], key: str) -> dict[str, Any]:
    value = cfg.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigError(f"{key} must be a mapping, got {type(value).__name__}: {value!r}")
    return value


def _flag(cfg: dict[str, Any], key: str, default: bool, *, prefix: str = "") -> bool:
    # YAML "false" in quotes is a str, and bool("false") is True
    value = cfg.get(key, default)
    if not isinstance(value, bool):
        raise ConfigError(f"{prefix}{key} must be true or false, got {value!r}")
    return value


# -------------------------------
# Public API
# -------------------------------


def merge_settings(
    settings_path: Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Return the merged settings mapping without validating it."""
    from odtrefresh.logging import get_global_logger

    logger = get_global_logger()
    merged = _deep_merge_dicts({}, DEFAULTS)

    if settings_path is not None:
        settings_path = Path(settings_path).resolve()
        logger.verbose("CONFIG", f"Loading settings: {settings_path}")
        file_cfg = load_yaml_file(settings_path)
        # Checked before merging so a CLI overlay can't replace a bad section
        for section in ("tool", "catalog"):
            _section(file_cfg, section)
        _resolve_known_paths(file_cfg, settings_path.parent)
        merged = _deep_merge_dicts(merged, file_cfg)

    if overrides:
        logger.debug("CONFIG", f"Applying overrides: {sorted(k for k, v in overrides.items() if v is not None)}")
        merged = _deep_merge_dicts(merged, overrides)

    return merged


def load_settings(
    settings_path: Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> RefreshSettings:
    """
    Load, merge, and validate settings for a refresh run.

    Returns
      A RefreshSettings ready for refresh_package.

    Raises
      ConfigError on a bad settings file or missing required keys.
    """
    merged = merge_settings(settings_path, overrides)

    missing = [k for k in REQUIRED_KEYS if not merged.get(k)]
    if missing:
        raise ConfigError(f"Missing required setting(s): {', '.join(missing)}")

    tool = _section(merged, "tool")
    catalog = _section(merged, "catalog")
    skip_detection_update = _flag(merged, "skip_detection_update", True)
    catalog_enabled = _flag(catalog, "enabled", True, prefix="catalog.")

    try:
        timeout = int(catalog.get("timeout", 60))
    except (TypeError, ValueError) as err:
        raise ConfigError(f"catalog.timeout must be an integer: {catalog.get('timeout')!r}") from err

    return RefreshSettings(
        package_path=Path(merged["package_path"]),
        application_name=str(merged["application_name"]),
        configuration_file=str(merged.get("configuration_file") or "configuration.xml"),
        skip_detection_update=skip_detection_update,
        tool_page_url=str(tool.get("page_url") or DEFAULT_PAGE_URL),
        tool_link_text=str(tool.get("link_text") or DEFAULT_LINK_TEXT),
        temp_dir=Path(tool.get("temp_dir") or DEFAULTS["tool"]["temp_dir"]),
        catalog_enabled=catalog_enabled,
        catalog_server=catalog.get("server") or None,
        site_code=str(catalog.get("site_code") or ""),
        verify_tls=catalog.get("verify_tls", True),
        catalog_timeout=timeout,
        settings_path=Path(settings_path).resolve() if settings_path else None,
    )
