"""
Cross-source matching: annotates each inventory Asset with its presence in
the Intune, Jamf and Defender reports.

Priority per source:
    Intune   serial, then hostname
    Jamf     serial, then hostname
    Defender hostname, then the Intune bridge (the Asset's serial looked up
             in Intune gives Intune's hostname, which is checked against
             Defender), then, for phones and tablets, the user-name pattern

The identifier that produced each match is recorded for audit display.
"""

import datetime
import logging
import re
from dataclasses import replace

from config.settings import ReconcileConfig
from models.asset import (
    MATCH_HOSTNAME,
    MATCH_SERIAL,
    MATCH_USER,
    Asset,
    ComplianceStatus,
)
from parsers.field_resolver import parse_date_cell, tr_lower
from parsers.identifiers import asset_match_keys

logger = logging.getLogger(__name__)

_TR_TRANSLITERATE = str.maketrans({"ğ": "g", "ü": "u", "ş": "s", "ı": "i", "ö": "o", "ç": "c"})
_NON_NAME_CHARS = re.compile(r"[^a-z0-9\s]")


def format_name_for_defender(full_name: str) -> str:
    """
    Render a full name the way Defender names mobile devices.

    Given names are joined without spaces, then underscore, then surname:
    "Onat Cem Yanik" -> "onatcem_yanik", "Erdinç Zaman" -> "erdinc_zaman".
    """
    clean = tr_lower(full_name).replace("i̇", "i").translate(_TR_TRANSLITERATE)
    parts = _NON_NAME_CHARS.sub("", clean).split()
    if len(parts) < 2:
        return parts[0] if parts else ""
    return f"{''.join(parts[:-1])}_{parts[-1]}"


def _lookup(index, serial_key: str, host_key: str):
    """Return (row, method) trying serial first, then hostname."""
    if serial_key and serial_key in index.by_serial:
        return index.by_serial[serial_key], MATCH_SERIAL
    if host_key and host_key in index.by_hostname:
        return index.by_hostname[host_key], MATCH_HOSTNAME
    return None, None


def _match_defender_by_user(asset: Asset, defender):
    pattern = format_name_for_defender(asset.full_name)
    if not pattern:
        return None
    if pattern in defender.by_user:
        return defender.by_user[pattern]
    if "_" not in pattern:
        return None
    for host_key, row in defender.by_hostname.items():
        if pattern in host_key:
            return row
    return None


def _last_check_in_days(value: str, today: datetime.date):
    parsed = parse_date_cell(value)
    if parsed is None:
        return None
    return (today - parsed).days


def match_asset(asset: Asset, intune=None, jamf=None, defender=None,
                config: ReconcileConfig = None, today: datetime.date = None) -> Asset:
    """Return a copy of ``asset`` with a freshly computed ComplianceStatus."""
    config = config or ReconcileConfig()
    today = today or datetime.date.today()
    serial_key, host_key = asset_match_keys(asset)
    status = {"last_sync": datetime.datetime.now().isoformat(timespec="seconds")}

    if intune is not None:
        row, method = _lookup(intune, serial_key, host_key)
        if row is not None:
            status.update(
                in_intune=True,
                intune_match_method=method,
                raw_intune_data=row,
                intune_compliance_state=intune.resolve(row, "compliance") or None,
                intune_last_check_in_days=_last_check_in_days(intune.resolve(row, "last_check_in"), today),
            )

    if jamf is not None:
        row, method = _lookup(jamf, serial_key, host_key)
        if row is not None:
            status.update(in_jamf=True, jamf_match_method=method, raw_jamf_data=row)

    if defender is not None:
        row, method = None, None
        if host_key and host_key in defender.by_hostname:
            row, method = defender.by_hostname[host_key], MATCH_HOSTNAME
        elif intune is not None:
            bridged_host = intune.serial_to_hostname.get(serial_key)
            if bridged_host and bridged_host in defender.by_hostname:
                row, method = defender.by_hostname[bridged_host], MATCH_SERIAL
        if row is None and config.match_defender_by_user and asset.is_mobile:
            row = _match_defender_by_user(asset, defender)
            method = MATCH_USER if row is not None else None
        if row is not None:
            status.update(in_defender=True, defender_match_method=method, raw_defender_data=row)

    return replace(asset, compliance=ComplianceStatus(**status))


def match_assets(assets, intune=None, jamf=None, defender=None,
                 config: ReconcileConfig = None, today: datetime.date = None) -> list:
    """
    Match every Asset against the supplied report indexes.

    A report that was not supplied (None) leaves its flag False for every
    Asset. Input Assets are not modified.
    """
    config = config or ReconcileConfig()
    today = today or datetime.date.today()
    matched = [match_asset(a, intune, jamf, defender, config, today) for a in assets]
    logger.info(
        "Matched %d assets: intune=%d jamf=%d defender=%d",
        len(matched),
        sum(a.compliance.in_intune for a in matched),
        sum(a.compliance.in_jamf for a in matched),
        sum(a.compliance.in_defender for a in matched),
    )
    return matched
