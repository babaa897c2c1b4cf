"""Catalog synchronization stage.

Pushes a new content version into Configuration Manager:

1. Look up the application's deployment type. If this fails nothing else
   can run, so the stage reports "failed".
2. Unless skipped, replace the registry detection clause with
   "VersionToReport >= <new version>" in one descriptor update.
3. Always ask for content redistribution to distribution points.

Steps 2 and 3 are isolated: a failed detection update is reported as a
warning and the redistribution is still attempted. Nothing here raises
for catalog failures; they end up in CatalogSyncResult.warnings.
"""

from __future__ import annotations

from odtrefresh.exceptions import ODTRError
from odtrefresh.results import CatalogSyncResult

from .client import CatalogClient
from .detection import (
    RegistryDetectionClause,
    find_simple_setting_logical_name,
    replace_detection_clause,
)


def synchronize_catalog(
    catalog: CatalogClient,
    application_name: str,
    new_version: str,
    *,
    skip_detection_update: bool = True,
) -> CatalogSyncResult:
    """Update detection and redistribute content for one application.

    Args:
        catalog: Open catalog client.
        application_name: Application display name.
        new_version: Content version now in the package directory.
        skip_detection_update: Leave the detection clause untouched.
            Defaults to True.

    Returns:
        What was updated, plus warnings for every failed call.

    """
    from odtrefresh.logging import get_global_logger

    logger = get_global_logger()
    warnings: list[str] = []

    try:
        record = catalog.get_deployment_type(application_name)
    except ODTRError as err:
        message = f"Deployment type lookup failed for {application_name!r}: {err}"
        logger.warning("CATALOG", message)
        return CatalogSyncResult(
            status="failed",
            application_name=application_name,
            warnings=[message],
        )

    detection_updated = False
    if skip_detection_update:
        logger.verbose("CATALOG", "Detection method update skipped")
    else:
        try:
            clause = RegistryDetectionClause(version=new_version)
            old_name = find_simple_setting_logical_name(
                record.descriptor_xml, record.deployment_type_name or None
            )
            new_xml = replace_detection_clause(record.descriptor_xml, old_name, clause)
            catalog.update_descriptor(record, new_xml)
            detection_updated = True
            logger.verbose(
                "CATALOG",
                f"Detection clause set to {clause.value_name} >= {new_version}",
            )
        except ODTRError as err:
            message = f"Detection clause update failed: {err}"
            logger.warning("CATALOG", message)
            warnings.append(message)

    distribution_updated = False
    try:
        catalog.update_distribution_points(record)
        distribution_updated = True
        logger.verbose("CATALOG", "Distribution point content update requested")
    except ODTRError as err:
        message = f"Distribution point update failed: {err}"
        logger.warning("CATALOG", message)
        warnings.append(message)

    return CatalogSyncResult(
        status="partial" if warnings else "success",
        application_name=application_name,
        deployment_type=record.deployment_type_name,
        detection_updated=detection_updated,
        distribution_updated=distribution_updated,
        warnings=warnings,
    )
