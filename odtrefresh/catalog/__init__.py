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

"""Configuration Manager integration for odtrefresh.

Modules:

client : module
    AdminService REST client and credential loading.
detection : module
    Registry detection clause construction and descriptor rewriting.
sync : module
    The catalog synchronization stage.

"""

from .client import CatalogClient, DeploymentTypeRecord, load_catalog_credentials
from .detection import (
    RegistryDetectionClause,
    find_simple_setting_logical_name,
    replace_detection_clause,
)
from .sync import synchronize_catalog

__all__ = [
    "CatalogClient",
    "DeploymentTypeRecord",
    "RegistryDetectionClause",
    "find_simple_setting_logical_name",
    "load_catalog_credentials",
    "replace_detection_clause",
    "synchronize_catalog",
]
