"""
Tests for odtrefresh.validation module.

Tests settings validation including:
- Required fields
- Package directory layout checks
- Catalog server requirement
- Content folder warnings
"""

from __future__ import annotations

import pytest

from odtrefresh.validation import validate_settings

pytestmark = pytest.mark.unit


def _settings(package_dir, **extra):
    data = {
        "package_path": str(package_dir),
        "application_name": "Office 365 ProPlus",
        "catalog": {"server": "cm01.example.com"},
    }
    data.update(extra)
    return data


def test_valid_package(make_package, create_yaml_file):
    package_dir = make_package(["16.0.1"], archives=["16.0.1"])
    path = create_yaml_file("settings.yaml", _settings(package_dir))

    result = validate_settings(path)

    assert result.status == "valid"
    assert result.errors == []
    assert result.warnings == []
    assert result.settings_path == str(path)


def test_missing_file(tmp_test_dir):
    result = validate_settings(tmp_test_dir / "missing.yaml")
    assert result.status == "invalid"
    assert "not found" in result.errors[0]


def test_missing_required_fields(create_yaml_file):
    path = create_yaml_file("settings.yaml", {"configuration_file": "configuration.xml"})

    result = validate_settings(path, check_catalog=False)

    assert result.status == "invalid"
    assert "Missing required field: package_path" in result.errors
    assert "Missing required field: application_name" in result.errors


def test_missing_package_dir(tmp_test_dir, create_yaml_file):
    path = create_yaml_file("settings.yaml", _settings(tmp_test_dir / "nope"))

    result = validate_settings(path)

    assert result.status == "invalid"
    assert any("Package directory not found" in e for e in result.errors)


def test_missing_setup_and_configuration(make_package, create_yaml_file):
    package_dir = make_package(setup_exe=False, configuration=False)
    path = create_yaml_file("settings.yaml", _settings(package_dir))

    result = validate_settings(path)

    assert result.status == "invalid"
    assert any("setup.exe not found" in e for e in result.errors)
    assert any("Configuration file not found" in e for e in result.errors)


def test_catalog_server_required(make_package, create_yaml_file):
    package_dir = make_package(["16.0.1"])
    data = _settings(package_dir)
    del data["catalog"]
    path = create_yaml_file("settings.yaml", data)

    assert validate_settings(path).status == "invalid"
    assert validate_settings(path, check_catalog=False).status == "valid"


def test_catalog_disabled(make_package, create_yaml_file):
    package_dir = make_package(["16.0.1"])
    path = create_yaml_file("settings.yaml", _settings(package_dir, catalog={"enabled": False}))

    assert validate_settings(path).status == "valid"


def test_content_warnings(make_package, create_yaml_file):
    package_dir = make_package(["16.0.1", "16.0.2"], archives=["16.0.1", "16.0.2", "16.0.3"])
    (package_dir / "Office" / "Data" / "Temp").mkdir()
    path = create_yaml_file("settings.yaml", _settings(package_dir))

    result = validate_settings(path)

    assert result.status == "valid"
    assert any("2 content versions cached" in w for w in result.warnings)
    assert any("non-version folder" in w and "Temp" in w for w in result.warnings)
    assert any("More version archives" in w for w in result.warnings)


def test_first_run_warning(make_package, create_yaml_file):
    package_dir = make_package()
    path = create_yaml_file("settings.yaml", _settings(package_dir))

    result = validate_settings(path)

    assert result.status == "valid"
    assert any("first run" in w for w in result.warnings)


def test_skip_detection_must_be_bool(make_package, create_yaml_file):
    package_dir = make_package(["16.0.1"])
    path = create_yaml_file("settings.yaml", _settings(package_dir, skip_detection_update="yes"))

    result = validate_settings(path)

    assert result.status == "invalid"
    assert any("skip_detection_update" in e for e in result.errors)


def test_non_mapping_catalog_is_invalid(make_package, create_yaml_file):
    package_dir = make_package(["16.0.1"])
    path = create_yaml_file("settings.yaml", _settings(package_dir, catalog="cm01.example.com"))

    result = validate_settings(path)

    assert result.status == "invalid"
    assert any("catalog must be a mapping" in e for e in result.errors)


def test_quoted_catalog_enabled_is_invalid(make_package, create_yaml_file):
    package_dir = make_package(["16.0.1"])
    path = create_yaml_file("settings.yaml", _settings(package_dir, catalog={"enabled": "false"}))

    result = validate_settings(path)

    assert result.status == "invalid"
    assert "catalog.enabled must be true or false" in result.errors
