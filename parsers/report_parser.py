"""Management-report parsers: Intune, Jamf and Defender exports -> lookup indexes."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from models.asset import SOURCE_DEFENDER, SOURCE_INTUNE, SOURCE_JAMF, DeviceType
from parsers.device_classifier import classify_device
from parsers.field_resolver import resolve_field
from parsers.identifiers import (
    clean_mobile_serial,
    fold_identifier,
    normalize_hostname,
    normalize_identifier,
    strip_serial_label,
)

logger = logging.getLogger(__name__)

COLUMN_ALIASES = {
    SOURCE_INTUNE: {
        "hostname": ["device name", "devicename", "hostname", "computer name", "name"],
        "serial": ["serial number", "serial", "seri numarası", "imei"],
        "brand": ["manufacturer", "marka", "brand"],
        "model": ["model"],
        "os": ["operating system", "os version", "platform", "os"],
        "user": ["primary user display name", "primary user", "user", "kullanıcı"],
        "compliance": ["compliance state", "compliance", "uyumluluk"],
        "last_check_in": ["last check-in", "last check in", "last sync", "last contact", "son eşitleme"],
    },
    SOURCE_JAMF: {
        "hostname": ["computer name", "device name", "name", "hostname", "bilgisayar adı"],
        "serial": ["serial number", "serial", "seri numarası", "imei"],
        "brand": ["manufacturer", "marka", "brand"],
        "model": ["model"],
        "os": ["operating system", "os version", "platform", "os"],
        "user": ["full name", "username", "user", "kullanıcı"],
    },
    SOURCE_DEFENDER: {
        "hostname": ["device name", "devicename", "hostname", "computer name", "bilgisayar adı"],
        "serial": ["serial number", "serial", "seri numarası"],
        "brand": ["manufacturer", "marka", "brand"],
        "model": ["model"],
        "os": ["os platform", "operating system", "platform", "os"],
        "user": ["isim_soyisim", "isim soyisim", "user", "username", "kullanıcı"],
    },
}


@dataclass
class ReportRecord:
    """One management-report row with its identifiers already normalized."""

    source: str
    hostname: str
    serial: str
    host_key: str
    serial_key: str
    user: str
    brand: str
    model: str
    device_type: DeviceType
    row: dict


@dataclass
class SourceIndex:
    """
    Lookup tables for one report, built once per reconciliation run.

    Duplicate identifiers overwrite earlier rows (last write wins).
    """

    source: str
    records: list = field(default_factory=list)
    by_serial: dict = field(default_factory=dict)
    by_hostname: dict = field(default_factory=dict)
    by_user: dict = field(default_factory=dict)
    serial_to_hostname: dict = field(default_factory=dict)
    row_count: int = 0

    def resolve(self, row: dict, field_name: str) -> str:
        return resolve_field(row, COLUMN_ALIASES[self.source].get(field_name, []))


def _to_record(source: str, row: dict) -> ReportRecord:
    aliases = COLUMN_ALIASES[source]
    hostname = resolve_field(row, aliases["hostname"])
    model = resolve_field(row, aliases["model"])
    # Category comes from the report's own model/OS columns, not the inventory.
    device_type = classify_device("", model, resolve_field(row, aliases["os"]), "")
    serial = clean_mobile_serial(strip_serial_label(resolve_field(row, aliases["serial"])), device_type)
    return ReportRecord(
        source=source,
        hostname=hostname,
        serial=serial,
        host_key=normalize_hostname(hostname),
        serial_key=normalize_identifier(serial),
        user=resolve_field(row, aliases["user"]),
        brand=resolve_field(row, aliases["brand"]),
        model=model,
        device_type=device_type,
        row=row,
    )


def build_source_index(source: str, rows) -> SourceIndex:
    """
    Index a report by normalized serial and by lowercased hostname.

    Parameters
    ----------
    source : one of "Intune", "Jamf", "Defender"
    rows : row mappings from parsers.tabular_reader.read_table

    Returns
    -------
    SourceIndex
    """
    if source not in COLUMN_ALIASES:
        raise ValueError(f"Unknown report source: {source}")

    index = SourceIndex(source=source)
    skipped = 0
    for row in rows:
        index.row_count += 1
        record = _to_record(source, row)
        if not record.serial_key and not record.host_key:
            skipped += 1
            continue
        index.records.append(record)
        if record.serial_key:
            index.by_serial[record.serial_key] = row
        if record.host_key:
            index.by_hostname[record.host_key] = row
            if record.serial_key:
                index.serial_to_hostname[record.serial_key] = record.host_key
        user_key = fold_identifier(record.user)
        if user_key:
            index.by_user[user_key] = row

    if skipped:
        logger.debug("%s: %d rows had neither serial nor hostname", source, skipped)
    logger.info(
        "%s index: %d rows, %d serials, %d hostnames",
        source, index.row_count, len(index.by_serial), len(index.by_hostname),
    )
    return index
