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

"""Configuration Manager catalog client for odtrefresh.

Talks to the SMS Provider's AdminService REST endpoint
(https://<server>/AdminService/wmi/...). The client object is the catalog
handle: every catalog operation receives it explicitly, and it owns one
requests.Session that is closed when the `with` block ends.

Calls used:

- GET  wmi/SMS_Application?$filter=LocalizedDisplayName eq '<name>' and IsLatest eq true
- GET  wmi/SMS_DeploymentType?$filter=AppModelName eq '<model>' and IsLatest eq true
- GET  wmi/SMS_Application(<CI_ID>)            (loads the lazy SDMPackageXML)
- PUT  wmi/SMS_Application(<CI_ID>)            (saves a rewritten SDMPackageXML)
- POST wmi/SMS_DeploymentType(<CI_ID>)/AdminService.UpdateContent

Credentials:

    ODTR_CATALOG_USERNAME=CONTOSO\\svc-odtr
    ODTR_CATALOG_PASSWORD=...

are read from the environment, or from a .env file via python-dotenv. When
they are absent the session sends no credentials.

Example:
    ```python
    from odtrefresh.catalog import CatalogClient

    with CatalogClient("cm01.contoso.com", site_code="PS1") as catalog:
        record = catalog.get_deployment_type("Office 365 ProPlus")
        catalog.update_distribution_points(record)
    ```
"""

from __future__ import annotations

from dataclasses import dataclass
import os
from typing import Any

from dotenv import load_dotenv
import requests

from odtrefresh.exceptions import CatalogError

ENV_PREFIX = "ODTR_CATALOG_"


@dataclass(frozen=True)
class DeploymentTypeRecord:
    """A deployment type and the application that owns it.

    Attributes:
        application_name: Application display name.
        application_ci_id: CI_ID of the latest application revision.
        model_name: Application ModelName (ScopeId_.../Application_...).
        deployment_type_name: Deployment type display name.
        deployment_type_ci_id: CI_ID of the deployment type.
        descriptor_xml: The application's SDMPackageXML.

    """

    application_name: str
    application_ci_id: int
    model_name: str
    deployment_type_name: str
    deployment_type_ci_id: int
    descriptor_xml: str


def load_catalog_credentials(env_prefix: str = ENV_PREFIX) -> tuple[str, str] | None:
    """Read catalog credentials from the environment (or .env).

    Returns:
        (username, password), or None when no username is configured.

    Raises:
        CatalogError: If a username is set without a password.

    """
    load_dotenv()
    username = os.getenv(f"{env_prefix}USERNAME")
    if not username:
        return None
    password = os.getenv(f"{env_prefix}PASSWORD")
    if password is None:
        raise CatalogError(
            f"Missing required environment variable: {env_prefix}PASSWORD"
        )
    return username, password


def _odata_literal(value: str) -> str:
    return "'" + value.replace("'", "''") + "'"


def _ci_id(record: dict[str, Any], what: str) -> int:
    """Read a CI_ID from an AdminService record.

    Raises:
        CatalogError: If the CI_ID is missing or not an integer.
    """
    raw = record.get("CI_ID")
    try:
        return int(raw)
    except (TypeError, ValueError) as err:
        raise CatalogError(f"{what} record has no usable CI_ID: {raw!r}") from err


class CatalogClient:
    """AdminService client bound to one site.

    Attributes:
        server: SMS Provider host name.
        site_code: Three-character site code, used in log output.
        base_url: AdminService root URL.

    """

    def __init__(
        self,
        server: str,
        site_code: str = "",
        *,
        auth: Any = None,
        verify: bool | str = True,
        timeout: int = 60,
        session: requests.Session | None = None,
    ) -> None:
        if not server:
            raise CatalogError("No catalog server configured")
        self.server = server
        self.site_code = site_code
        self.base_url = f"https://{server}/AdminService"
        self.timeout = timeout
        self._session = session or requests.Session()
        self._session.headers.update({"Accept": "application/json"})
        if auth is not None:
            self._session.auth = auth
        self._session.verify = verify

    def __enter__(self) -> CatalogClient:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        self._session.close()

    # ------------------------------------------------------------------ #
    # HTTP helpers
    # ------------------------------------------------------------------ #

    def _request(self, method: str, path: str, **kwargs: Any) -> dict[str, Any]:
        from odtrefresh.logging import get_global_logger

        logger = get_global_logger()
        url = f"{self.base_url}/{path}"
        logger.debug("CATALOG", f"{method} {url}")
        try:
            response = self._session.request(method, url, timeout=self.timeout, **kwargs)
            response.raise_for_status()
        except requests.exceptions.HTTPError as err:
            raise CatalogError(
                f"{method} {path} failed: {response.status_code} {response.reason}"
            ) from err
        except requests.exceptions.RequestException as err:
            raise CatalogError(f"{method} {path} failed: {err}") from err

        if not response.content:
            return {}
        try:
            data = response.json()
        except ValueError as err:
            raise CatalogError(f"{method} {path} returned invalid JSON") from err
        if not isinstance(data, dict):
            raise CatalogError(
                f"{method} {path} returned {type(data).__name__}, expected a JSON object"
            )
        return data

    def _query(self, wmi_class: str, odata_filter: str) -> list[dict[str, Any]]:
        data = self._request("GET", f"wmi/{wmi_class}", params={"$filter": odata_filter})
        values = data.get("value", [])
        if not isinstance(values, list) or not all(isinstance(v, dict) for v in values):
            raise CatalogError(f"{wmi_class} query returned a malformed 'value' list")
        return values

    # ------------------------------------------------------------------ #
    # Catalog operations
    # ------------------------------------------------------------------ #

    def get_deployment_type(self, application_name: str) -> DeploymentTypeRecord:
        """Look up an application's deployment type and descriptor.

        Args:
            application_name: Application display name in the console.

        Returns:
            The first deployment type of the latest application revision.

        Raises:
            CatalogError: If the application or a deployment type is not
                found, or a call fails.

        """
        from odtrefresh.logging import get_global_logger

        logger = get_global_logger()

        apps = self._query(
            "SMS_Application",
            f"LocalizedDisplayName eq {_odata_literal(application_name)} and IsLatest eq true",
        )
        if not apps:
            raise CatalogError(f"Application {application_name!r} not found")
        app = apps[0]
        model_name = app.get("ModelName", "")
        app_ci_id = _ci_id(app, "SMS_Application")

        deployment_types = self._query(
            "SMS_DeploymentType",
            f"AppModelName eq {_odata_literal(model_name)} and IsLatest eq true",
        )
        if not deployment_types:
            raise CatalogError(f"Application {application_name!r} has no deployment type")
        if len(deployment_types) > 1:
            logger.verbose(
                "CATALOG",
                f"{len(deployment_types)} deployment types found, using the first",
            )
        dt = deployment_types[0]

        detail = self._request("GET", f"wmi/SMS_Application({app_ci_id})")
        values = detail.get("value", [detail])
        first = values[0] if isinstance(values, list) and values else None
        descriptor = first.get("SDMPackageXML") if isinstance(first, dict) else None
        if not descriptor:
            raise CatalogError(f"Application {application_name!r} has no SDMPackageXML")

        record = DeploymentTypeRecord(
            application_name=application_name,
            application_ci_id=app_ci_id,
            model_name=model_name,
            deployment_type_name=dt.get("LocalizedDisplayName", ""),
            deployment_type_ci_id=_ci_id(dt, "SMS_DeploymentType"),
            descriptor_xml=descriptor,
        )
        logger.verbose(
            "CATALOG",
            f"Found deployment type {record.deployment_type_name!r} "
            f"(CI_ID {record.deployment_type_ci_id})",
        )
        return record

    def update_descriptor(self, record: DeploymentTypeRecord, descriptor_xml: str) -> None:
        """Save a rewritten SDMPackageXML for the record's application."""
        self._request(
            "PUT",
            f"wmi/SMS_Application({record.application_ci_id})",
            json={"SDMPackageXML": descriptor_xml},
        )

    def update_distribution_points(self, record: DeploymentTypeRecord) -> None:
        """Redistribute the deployment type's content to its distribution points."""
        self._request(
            "POST",
            f"wmi/SMS_DeploymentType({record.deployment_type_ci_id})/AdminService.UpdateContent",
            json={},
        )
