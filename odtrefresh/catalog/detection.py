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

"""Registry detection clauses for Configuration Manager deployment types.

An application's SDM package descriptor (SDMPackageXML) carries each
deployment type's enhanced detection method as two parts:

- a SimpleSetting (DesiredConfiguration schema) naming the registry value
  to read, identified by its LogicalName
- a Rule (Rules schema) whose expression compares that setting, through a
  SettingReference, with a ConstantValue

Both parts appear twice: once as elements under the installer's CustomData
and once as an escaped XML string in the DetectAction "MethodBody" arg.
Every rewrite updates both copies.

For Office Click-to-Run the installed build is reported in:

    HKLM\\SOFTWARE\\Microsoft\\Office\\ClickToRun\\Configuration
        VersionToReport

so the clause this module builds reads "VersionToReport >= <new version>"
from the 64-bit registry view.

Example:
    Replace the clause in a descriptor:
        ```python
        from odtrefresh.catalog.detection import (
            RegistryDetectionClause,
            find_simple_setting_logical_name,
            replace_detection_clause,
        )

        old_name = find_simple_setting_logical_name(xml, "Office 365 ProPlus")
        new_xml = replace_detection_clause(
            xml, old_name, RegistryDetectionClause(version="16.0.17928.20114")
        )
        ```

Note:
    The descriptor is rewritten in memory only. Saving it back is a single
    catalog call made by CatalogClient.update_descriptor.

"""

from __future__ import annotations

from dataclasses import dataclass
import re
from typing import Literal
import uuid
import xml.etree.ElementTree as ET

from odtrefresh.exceptions import CatalogError
from odtrefresh.versioning.keys import parse_version

NS_DIGEST = "http://schemas.microsoft.com/SystemCenterConfigurationManager/2009/AppMgmtDigest"
NS_DC = "http://schemas.microsoft.com/SystemsCenterConfigurationManager/2009/07/10/DesiredConfiguration"
NS_RULES = "http://schemas.microsoft.com/SystemsCenterConfigurationManager/2009/06/14/Rules"

ET.register_namespace("", NS_DIGEST)
ET.register_namespace("dc", NS_DC)
ET.register_namespace("rules", NS_RULES)

Operator = Literal[
    "Equals", "NotEquals", "GreaterThan", "GreaterEquals", "LessThan", "LessEquals"
]

CLICK_TO_RUN_KEY = "SOFTWARE\\Microsoft\\Office\\ClickToRun\\Configuration"
CLICK_TO_RUN_VALUE = "VersionToReport"

_XML_DECLARATION = re.compile(r"\s*<\?xml[^>]*\?>")


@dataclass(frozen=True)
class RegistryDetectionClause:
    """A registry version comparison used as a detection clause.

    Attributes:
        version: Version the installed value is compared against.
        hive: Registry hive name as used in SDM XML.
        key: Key path below the hive.
        value_name: Registry value holding the installed version.
        operator: Comparison operator (installed <operator> version).
        is_64bit: Read the 64-bit registry view.

    """

    version: str
    hive: str = "HKEY_LOCAL_MACHINE"
    key: str = CLICK_TO_RUN_KEY
    value_name: str = CLICK_TO_RUN_VALUE
    operator: Operator = "GreaterEquals"
    is_64bit: bool = True

    def __post_init__(self) -> None:
        # Fail before anything is sent to the catalog
        parse_version(self.version)


def _q(ns: str, tag: str) -> str:
    return f"{{{ns}}}{tag}"


def _parse(descriptor_xml: str) -> ET.Element:
    try:
        return ET.fromstring(descriptor_xml)
    except ET.ParseError as err:
        raise CatalogError(f"Deployment descriptor is not valid XML: {err}") from err


def _deployment_types(root: ET.Element, deployment_type_name: str | None) -> list[ET.Element]:
    dts = root.findall(_q(NS_DIGEST, "DeploymentType"))
    if deployment_type_name is None:
        return dts
    return [
        dt
        for dt in dts
        if (dt.findtext(_q(NS_DIGEST, "Title")) or "").strip() == deployment_type_name
    ]


def find_simple_setting_logical_name(
    descriptor_xml: str, deployment_type_name: str | None = None
) -> str:
    """Return the LogicalName of the deployment type's SimpleSetting clause.

    Args:
        descriptor_xml: SDMPackageXML of the application.
        deployment_type_name: Deployment type title to restrict the search
            to. Defaults to the first deployment type with a SimpleSetting.

    Returns:
        The SimpleSetting LogicalName (e.g., "RegSetting_3c1f...").

    Raises:
        CatalogError: If the XML is invalid or no SimpleSetting exists.

    """
    root = _parse(descriptor_xml)
    for dt in _deployment_types(root, deployment_type_name):
        setting = dt.find(f".//{_q(NS_DC, 'SimpleSetting')}")
        if setting is not None and setting.get("LogicalName"):
            return setting.get("LogicalName")
    where = f" for deployment type {deployment_type_name!r}" if deployment_type_name else ""
    raise CatalogError(f"No SimpleSetting detection clause found{where}")


def _build_setting(clause: RegistryDetectionClause, logical_name: str) -> ET.Element:
    setting = ET.Element(
        _q(NS_DC, "SimpleSetting"),
        {"LogicalName": logical_name, "DataType": "Version"},
    )
    source = ET.SubElement(
        setting,
        _q(NS_DC, "RegistryDiscoverySource"),
        {
            "Hive": clause.hive,
            "Depth": "Base",
            "Is64Bit": "true" if clause.is_64bit else "false",
            "CreateMissingPath": "true",
        },
    )
    ET.SubElement(source, _q(NS_DC, "Key")).text = clause.key
    ET.SubElement(source, _q(NS_DC, "ValueName")).text = clause.value_name
    return setting


def _swap_setting(root: ET.Element, logical_name: str, new_name: str, clause: RegistryDetectionClause) -> bool:
    for parent in root.iter():
        for index, child in enumerate(list(parent)):
            if child.tag == _q(NS_DC, "SimpleSetting") and child.get("LogicalName") == logical_name:
                parent.remove(child)
                parent.insert(index, _build_setting(clause, new_name))
                return True
    return False


def _rewire_rules(root: ET.Element, logical_name: str, new_name: str, clause: RegistryDetectionClause) -> bool:
    rewired = False
    for expression in root.iter(_q(NS_RULES, "Expression")):
        operands = expression.find(_q(NS_RULES, "Operands"))
        if operands is None:
            continue
        reference = next(
            (
                ref
                for ref in operands.findall(_q(NS_RULES, "SettingReference"))
                if ref.get("SettingLogicalName") == logical_name
            ),
            None,
        )
        if reference is None:
            continue
        reference.set("SettingLogicalName", new_name)
        reference.set("DataType", "Version")
        reference.set("SettingSourceType", "Registry")
        reference.set("Method", "Value")

        constant = operands.find(_q(NS_RULES, "ConstantValue"))
        if constant is None:
            constant = ET.SubElement(operands, _q(NS_RULES, "ConstantValue"))
        constant.set("Value", clause.version)
        constant.set("DataType", "Version")

        operator = expression.find(_q(NS_RULES, "Operator"))
        if operator is None:
            operator = ET.Element(_q(NS_RULES, "Operator"))
            expression.insert(0, operator)
        operator.text = clause.operator
        rewired = True
    return rewired


def _rewrite_method_body(
    arg: ET.Element, logical_name: str, new_name: str, clause: RegistryDetectionClause
) -> bool:
    """Apply the same swap to the escaped copy held in a MethodBody arg.

    Returns False (leaving the arg alone) when the copy does not mention
    logical_name, which is the case for other deployment types.
    """
    body = arg.text or ""
    if logical_name not in body:
        return False
    match = _XML_DECLARATION.match(body)
    declaration = match.group(0) if match else ""
    inner = _parse(body[len(declaration):])

    if not _swap_setting(inner, logical_name, new_name, clause):
        raise CatalogError(f"SimpleSetting {logical_name!r} not found in MethodBody")
    if not _rewire_rules(inner, logical_name, new_name, clause):
        raise CatalogError(f"No MethodBody rule references setting {logical_name!r}")

    arg.text = declaration + ET.tostring(inner, encoding="unicode")
    return True


def replace_detection_clause(
    descriptor_xml: str,
    logical_name: str,
    clause: RegistryDetectionClause,
) -> str:
    """Swap the SimpleSetting named logical_name for a new registry clause.

    The rule expression that referenced the old setting is pointed at the
    new one, and its operator and constant value are set from the clause.
    The escaped copy of the detection method in DetectAction's MethodBody
    arg gets the same change, so both copies name the same new setting.

    Args:
        descriptor_xml: SDMPackageXML of the application.
        logical_name: LogicalName of the setting to replace.
        clause: The new detection clause.

    Returns:
        The rewritten descriptor XML.

    Raises:
        CatalogError: If the setting or its rule reference can't be found.

    """
    root = _parse(descriptor_xml)
    new_name = f"RegSetting_{uuid.uuid4()}"

    if not _swap_setting(root, logical_name, new_name, clause):
        raise CatalogError(f"SimpleSetting {logical_name!r} not found in descriptor")
    if not _rewire_rules(root, logical_name, new_name, clause):
        raise CatalogError(f"No rule references setting {logical_name!r}")

    for arg in root.iter(_q(NS_DIGEST, "Arg")):
        if arg.get("Name") == "MethodBody":
            _rewrite_method_body(arg, logical_name, new_name, clause)

    return ET.tostring(root, encoding="unicode")
