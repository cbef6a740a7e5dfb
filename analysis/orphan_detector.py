"""Orphan detection: report devices with no counterpart in the inventory."""

import logging

from models.asset import SOURCE_DEFENDER, SOURCE_INTUNE, SOURCE_JAMF, Asset, ComplianceStatus

logger = logging.getLogger(__name__)

_PRESENCE_FIELDS = {
    SOURCE_INTUNE: ("in_intune", "raw_intune_data"),
    SOURCE_JAMF: ("in_jamf", "raw_jamf_data"),
    SOURCE_DEFENDER: ("in_defender", "raw_defender_data"),
}


def _orphan_asset(record, number: int) -> Asset:
    flag, raw_field = _PRESENCE_FIELDS[record.source]
    compliance = ComplianceStatus(**{flag: True, raw_field: dict(record.row)})
    return Asset(
        id=f"orphan-{record.source.lower()}-{number}",
        asset_tag="N/A",
        serial_number=record.serial or f"SN-{number}",
        hostname=record.hostname or f"Unknown-{number}",
        type=record.device_type,
        purchase_date="",
        assigned_user=record.user or "Unassigned",
        brand=record.brand,
        model=record.model,
        status_description="Not in inventory",
        is_orphan=True,
        orphan_source=record.source,
        serial_is_placeholder=not record.serial,
        hostname_is_placeholder=not record.hostname,
        compliance=compliance,
    )


def detect_orphans(indexes, matched_keys) -> list:
    """
    Return report devices whose serial and hostname never appear in the inventory.

    Parameters
    ----------
    indexes : iterable of SourceIndex (None entries are skipped)
    matched_keys : MatchedKeys from parsers.inventory_parser.parse_inventory

    Returns
    -------
    list of Asset with is_orphan=True, one per distinct device per source
    (deduplicated by normalized serial, else hostname)
    """
    orphans = []
    for index in indexes:
        if index is None:
            continue
        seen = set()
        for record in index.records:
            if record.serial_key and record.serial_key in matched_keys.serials:
                continue
            if record.host_key and record.host_key in matched_keys.hostnames:
                continue
            dedup_key = ("serial", record.serial_key) if record.serial_key else ("host", record.host_key)
            if dedup_key in seen:
                continue
            seen.add(dedup_key)
            orphans.append(_orphan_asset(record, len(seen) - 1))
        logger.info("%s: %d orphan devices", index.source, len(seen))
    return orphans
