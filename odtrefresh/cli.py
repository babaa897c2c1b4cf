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

"""Command-line interface for odtrefresh.

Commands:

    refresh: Update the tool and content, prune, and sync the catalog
    status: Show the staged tool version and cached content versions
    validate: Check a settings file and package directory offline

Example:
    Refresh from a settings file:
        ```bash
        $ odtr refresh settings/office365.yaml
        ```

    Refresh with flags only, updating the detection clause too:
        ```bash
        $ odtr refresh --package-path D:/Sources/Office365 \\
            --application-name "Office 365 ProPlus" \\
            --catalog-server cm01.contoso.com --update-detection
        ```

    Show what is cached:
        ```bash
        $ odtr status --package-path D:/Sources/Office365
        ```

Exit Codes:

- 0: Success (catalog warnings do not change the exit code)
- 1: Settings error, or a fetch/extract/reconcile/update/prune failure

Note:
    Verbose mode shows full tracebacks on settings errors for debugging.
    Debug mode implies verbose mode.

"""

from __future__ import annotations

import argparse
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path
import sys
import traceback
from typing import Any

from odtrefresh.config import load_settings
from odtrefresh.core import package_status, refresh_package
from odtrefresh.exceptions import ODTRError
from odtrefresh.logging import get_logger, set_global_logger
from odtrefresh.validation import validate_settings


def _package_version() -> str:
    try:
        return version("odtrefresh")
    except PackageNotFoundError:
        from odtrefresh import __version__

        return __version__


def _overrides_from_args(args: argparse.Namespace) -> dict[str, Any]:
    """Turn CLI flags into a settings overlay (None means "not given")."""
    catalog: dict[str, Any] = {
        "server": getattr(args, "catalog_server", None),
        "site_code": getattr(args, "site_code", None),
    }
    if getattr(args, "no_catalog", False):
        catalog["enabled"] = False
    return {
        "package_path": getattr(args, "package_path", None),
        "application_name": getattr(args, "application_name", None),
        "configuration_file": getattr(args, "configuration_file", None),
        "skip_detection_update": getattr(args, "skip_detection_update", None),
        "tool": {"temp_dir": getattr(args, "temp_dir", None)},
        "catalog": catalog,
    }


def _print_error(err: Exception, args: argparse.Namespace) -> None:
    print(f"Error: {err}")
    if args.verbose or args.debug:
        traceback.print_exc()


def cmd_refresh(args: argparse.Namespace) -> int:
    """Handler for 'odtr refresh'.

    Args:
        args: Parsed command-line arguments.

    Returns:
        Exit code (0 when every fatal stage succeeded, 1 otherwise).

    """
    logger = get_logger(verbose=args.verbose, debug=args.debug)
    set_global_logger(logger)

    settings_path = Path(args.settings).resolve() if args.settings else None
    try:
        settings = load_settings(settings_path, _overrides_from_args(args))
    except ODTRError as err:
        _print_error(err, args)
        return 1

    print(f"Refreshing package: {settings.package_path}")
    print(f"Application:        {settings.application_name}")
    print()

    result = refresh_package(settings)

    print("=" * 70)
    print("REFRESH RESULTS")
    print("=" * 70)
    print(f"Status:          {result.status}")
    print(f"Stages:          {', '.join(result.completed_stages) or '(none)'}")
    if result.tool:
        action = "replaced" if result.tool.replaced else "kept"
        print(
            f"setup.exe:       {result.tool.staged_version} ({action}, "
            f"downloaded {result.tool.extracted_version})"
        )
    if result.prune and result.prune.removed_version:
        print(f"Pruned Version:  {result.prune.removed_version}")
    if result.new_version:
        print(f"Content Version: {result.new_version}")
    if result.catalog:
        print(f"Catalog:         {result.catalog.status}")
        print(f"  Detection:     {'updated' if result.catalog.detection_updated else 'unchanged'}")
        print(
            f"  Distribution:  "
            f"{'requested' if result.catalog.distribution_updated else 'not requested'}"
        )
        for warning in result.catalog.warnings:
            print(f"  [WARNING] {warning}")
    if result.cleanup:
        for warning in result.cleanup.warnings:
            print(f"[WARNING] {warning}")
    print("=" * 70)
    print()

    if result.failure:
        print(
            f"[FAILED] Stage '{result.failure.stage}' failed: "
            f"{result.failure.error_type}: {result.failure.message}"
        )
        return 1

    print("[SUCCESS] Package refreshed.")
    return 0


def cmd_status(args: argparse.Namespace) -> int:
    """Handler for 'odtr status'."""
    logger = get_logger(verbose=args.verbose, debug=args.debug)
    set_global_logger(logger)

    settings_path = Path(args.settings).resolve() if args.settings else None
    overrides = {"package_path": args.package_path, "application_name": "-"}
    try:
        settings = load_settings(settings_path, overrides)
    except ODTRError as err:
        _print_error(err, args)
        return 1

    status = package_status(settings.package_path)

    print("=" * 70)
    print("PACKAGE STATUS")
    print("=" * 70)
    print(f"Package:         {status.package_dir}")
    print(f"setup.exe:       {status.staged_tool_version or 'unknown'}")
    print(f"Content:         {', '.join(status.content_versions) or '(none)'}")
    print(f"Archives:        {', '.join(p.name for p in status.archives) or '(none)'}")
    print("=" * 70)
    return 0


def cmd_validate(args: argparse.Namespace) -> int:
    """Handler for 'odtr validate'."""
    logger = get_logger(verbose=args.verbose, debug=False)
    set_global_logger(logger)

    settings_path = Path(args.settings).resolve()
    print(f"Validating settings: {settings_path}")
    print()

    result = validate_settings(settings_path, check_catalog=not args.no_catalog)

    print("=" * 70)
    print("VALIDATION RESULTS")
    print("=" * 70)
    print(f"Settings:    {result.settings_path}")
    print(f"Status:      {result.status.upper()}")
    print()

    if result.warnings:
        print(f"Warnings ({len(result.warnings)}):")
        for warning in result.warnings:
            print(f"  [WARNING] {warning}")
        print()

    if result.errors:
        print(f"Errors ({len(result.errors)}):")
        for error in result.errors:
            print(f"  [X] {error}")
        print()

    print("=" * 70)

    if result.status == "valid":
        print()
        print("[SUCCESS] Settings are valid!")
        return 0
    print()
    print(f"[FAILED] Validation failed with {len(result.errors)} error(s).")
    return 1


def _add_output_flags(parser: argparse.ArgumentParser, *, debug: bool = True) -> None:
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show progress and high-level status updates",
    )
    if debug:
        parser.add_argument(
            "-d",
            "--debug",
            action="store_true",
            help="Show detailed debugging output (implies --verbose)",
        )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="odtr",
        description="Refresh a cached Office 365 ProPlus package and sync Configuration Manager",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"odtr {_package_version()}",
    )

    subparsers = parser.add_subparsers(
        dest="command",
        help="Available commands",
        required=True,
    )

    # 'refresh' command
    parser_refresh = subparsers.add_parser(
        "refresh",
        help="Update tool and content, prune, and sync the catalog",
        description="Run the full refresh pipeline for one package directory.",
    )
    parser_refresh.add_argument(
        "settings",
        nargs="?",
        help="Path to a settings YAML file (optional when flags are given)",
    )
    parser_refresh.add_argument("--package-path", help="Package directory")
    parser_refresh.add_argument(
        "--application-name", help="Application display name in the catalog"
    )
    parser_refresh.add_argument(
        "--configuration-file",
        help="Configuration XML in the package directory (default: configuration.xml)",
    )
    parser_refresh.add_argument("--temp-dir", help="Temporary download folder")
    parser_refresh.add_argument("--catalog-server", help="SMS Provider host name")
    parser_refresh.add_argument("--site-code", help="Configuration Manager site code")
    detection = parser_refresh.add_mutually_exclusive_group()
    detection.add_argument(
        "--skip-detection-update",
        dest="skip_detection_update",
        action="store_true",
        default=None,
        help="Leave the detection clause untouched (default)",
    )
    detection.add_argument(
        "--update-detection",
        dest="skip_detection_update",
        action="store_false",
        help="Rewrite the detection clause to the new content version",
    )
    parser_refresh.add_argument(
        "--no-catalog",
        action="store_true",
        help="Skip the catalog stage entirely",
    )
    _add_output_flags(parser_refresh)
    parser_refresh.set_defaults(func=cmd_refresh)

    # 'status' command
    parser_status = subparsers.add_parser(
        "status",
        help="Show staged tool and cached content versions",
        description="Read-only view of a package directory.",
    )
    parser_status.add_argument("settings", nargs="?", help="Path to a settings YAML file")
    parser_status.add_argument("--package-path", help="Package directory")
    _add_output_flags(parser_status)
    parser_status.set_defaults(func=cmd_status)

    # 'validate' command
    parser_validate = subparsers.add_parser(
        "validate",
        help="Validate a settings file (no downloads)",
        description="Check settings and the package directory without network calls.",
    )
    parser_validate.add_argument("settings", help="Path to the settings YAML file")
    parser_validate.add_argument(
        "--no-catalog",
        action="store_true",
        help="Do not require catalog settings",
    )
    _add_output_flags(parser_validate, debug=False)
    parser_validate.set_defaults(func=cmd_validate)

    return parser


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the odtr CLI.

    Registered as the 'odtr' console script in pyproject.toml.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    exit_code = args.func(args)
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
