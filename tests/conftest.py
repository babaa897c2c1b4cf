"""
Pytest configuration and shared fixtures for odtrefresh tests.

This module provides reusable fixtures and test utilities used across
the test suite.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any
from xml.sax.saxutils import escape

import pytest
import yaml

from odtrefresh.logging import SilentLogger, set_global_logger

_DETECTION_PARTS = """\
<Settings xmlns="http://schemas.microsoft.com/SystemsCenterConfigurationManager/2009/07/10/DesiredConfiguration">
  <SimpleSetting LogicalName="RegSetting_old" DataType="Version">
    <RegistryDiscoverySource Hive="HKEY_LOCAL_MACHINE" Depth="Base" Is64Bit="true" CreateMissingPath="true">
      <Key>SOFTWARE\\Microsoft\\Office\\ClickToRun\\Configuration</Key>
      <ValueName>VersionToReport</ValueName>
    </RegistryDiscoverySource>
  </SimpleSetting>
</Settings>
<Rule xmlns="http://schemas.microsoft.com/SystemsCenterConfigurationManager/2009/06/14/Rules" id="Rule_1" Severity="Informational" NonCompliantWhenSettingIsNotFound="false">
  <Expression>
    <Operator>GreaterEquals</Operator>
    <Operands>
      <SettingReference AuthoringScopeId="ScopeId_TEST" LogicalName="Application_1" Version="4" DataType="Version" SettingLogicalName="RegSetting_old" SettingSourceType="Registry" Method="Value" Changeable="false" />
      <ConstantValue Value="16.0.1" DataType="Version" />
    </Operands>
  </Expression>
</Rule>
"""

# DetectAction carries the same detection method as an escaped document
_METHOD_BODY = (
    '<?xml version="1.0" encoding="utf-16"?>'
    '<EnhancedDetectionMethod xmlns="http://schemas.microsoft.com/SystemCenterConfigurationManager/2009/AppMgmtDigest">'
    + _DETECTION_PARTS
    + "</EnhancedDetectionMethod>"
)
_ESCAPED_METHOD_BODY = escape(_METHOD_BODY, {'"': "&quot;"})

SAMPLE_DESCRIPTOR = f"""\
<AppMgmtDigest xmlns="http://schemas.microsoft.com/SystemCenterConfigurationManager/2009/AppMgmtDigest">
  <Application AuthoringScopeId="ScopeId_TEST" LogicalName="Application_1" Version="4">
    <DisplayInfo DefaultLanguage="en-US">
      <Info Language="en-US"><Title>Office 365 ProPlus</Title></Info>
    </DisplayInfo>
  </Application>
  <DeploymentType AuthoringScopeId="ScopeId_TEST" LogicalName="DeploymentType_1" Version="4">
    <Title ResourceId="Res_1">Office 365 ProPlus - Install</Title>
    <Installer Technology="Script">
      <DetectAction>
        <Provider>Script</Provider>
        <Args>
          <Arg Name="ExecutionContext" Type="String">System</Arg>
          <Arg Name="MethodBody" Type="String">{_ESCAPED_METHOD_BODY}</Arg>
        </Args>
      </DetectAction>
      <CustomData>
        <DetectionMethod>Enhanced</DetectionMethod>
        <EnhancedDetectionMethod>
{_DETECTION_PARTS}
        </EnhancedDetectionMethod>
      </CustomData>
    </Installer>
  </DeploymentType>
</AppMgmtDigest>
"""


@pytest.fixture(autouse=True)
def silent_global_logger():
    """Reset the global logger so CLI tests don't leak verbosity."""
    set_global_logger(SilentLogger())
    yield
    set_global_logger(SilentLogger())


@pytest.fixture
def tmp_test_dir(tmp_path: Path) -> Path:
    """
    Provide a temporary directory for test artifacts.

    Automatically cleaned up after test completion.
    """
    return tmp_path


@pytest.fixture
def sample_descriptor() -> str:
    """Provide an SDMPackageXML with one registry detection clause.

    The clause appears twice, as CustomData elements and as the escaped
    DetectAction MethodBody document.
    """
    return SAMPLE_DESCRIPTOR


@pytest.fixture
def make_package(tmp_test_dir: Path):
    """
    Factory fixture for package directories.

    Usage:
        package_dir = make_package(["16.0.1"], archives=["16.0.1"])
    """

    def _create(
        versions: list[str] | None = None,
        *,
        archives: list[str] | None = None,
        setup_exe: bool = True,
        configuration: bool = True,
    ) -> Path:
        package_dir = tmp_test_dir / "package"
        data_dir = package_dir / "Office" / "Data"
        data_dir.mkdir(parents=True, exist_ok=True)
        if setup_exe:
            (package_dir / "setup.exe").write_bytes(b"MZ staged")
        if configuration:
            (package_dir / "configuration.xml").write_text(
                '<Configuration><Add OfficeClientEdition="64" /></Configuration>',
                encoding="utf-8",
            )
        for version in versions or []:
            (data_dir / version).mkdir()
            (data_dir / version / "stream.x64.x-none.dat").write_bytes(b"payload")
        for version in archives or []:
            (data_dir / f"v64_{version}.cab").write_bytes(b"cab")
        return package_dir

    return _create


@pytest.fixture
def create_yaml_file(tmp_test_dir: Path):
    """
    Factory fixture for creating temporary YAML files.

    Usage:
        yaml_path = create_yaml_file("settings.yaml", {"key": "value"})
    """

    def _create(filename: str, data: dict[str, Any]) -> Path:
        path = tmp_test_dir / filename
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8") as f:
            yaml.dump(data, f)
        return path

    return _create
