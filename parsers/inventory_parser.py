"""Inventory (ERP export) parser: raw rows -> canonical Asset records."""

from __future__ import annotations

import datetime
import logging
import re
from dataclasses import dataclass, field

from config.settings import ReconcileConfig
from models.asset import MOBILE_TYPES, PC_TYPES, Asset, DeviceType
from parsers.device_classifier import classify_device
from parsers.field_resolver import parse_date_cell, resolve_field, tr_lower
from parsers.identifiers import (
    asset_match_keys,
    clean_mobile_serial,
    normalize_identifier,
    strip_serial_label,
)

logger = logging.getLogger(__name__)

# Synonyms per field, highest priority first
COLUMN_ALIASES = {
    "asset_tag": ["referans numarası", "referans", "asset tag", "demirbaş no"],
    "status": ["durum açıklama", "durum açıklam", "durum", "status"],
    "brand": ["marka", "brand", "üretici", "manufacturer"],
    "model": ["model", "model adı", "ürün", "ürün adı"],
    "serial": ["seri numarası", "seri", "serial number", "serial"],
    "user_name": ["kullanıcı adı", "kullanıcı", "username", "sicil", "sicil no"],
    "full_name": ["tam isim", "isim", "ad soyad", "adı soyadı", "personel adı", "fullname", "full name"],
    "category": ["kategori", "category", "device type", "cihaz tipi", "cihaz türü", "cins", "asset type"],
    "usage": ["kullanım tipi", "kullanım şekli", "kullanım amacı", "usage type", "usage"],
    "purchase_date": ["demirbaş yaşı", "tarih", "purchase date"],
    "hostname": ["hostname", "device name", "bilgisayar adı", "computer name"],
}

ASSET_TAG_PREFIX = "KSN"
_NUMERIC_TAG = re.compile(r"[0-9]+")


@dataclass
class MatchedKeys:
    """Normalized serials and hostnames seen in the inventory."""

    serials: set = field(default_factory=set)
    hostnames: set = field(default_factory=set)

    def add(self, asset: Asset):
        serial_key, host_key = asset_match_keys(asset)
        if serial_key:
            self.serials.add(serial_key)
        if host_key:
            self.hostnames.add(host_key)


@dataclass
class InventoryParseResult:
    assets: list
    matched_keys: MatchedKeys


def _with_prefix(value: str) -> str:
    if value.upper().startswith(ASSET_TAG_PREFIX):
        value = value[len(ASSET_TAG_PREFIX):]
    return f"{ASSET_TAG_PREFIX}{value}"


def synthesize_asset_tag(tag: str, serial: str, device_type: DeviceType) -> str:
    """
    Apply the per-category reference number rules.

    Returns "" when no rule yields a tag and the row had none; the caller
    substitutes a placeholder.
    """
    if device_type == DeviceType.MACBOOK and serial:
        return _with_prefix(serial)
    if device_type in MOBILE_TYPES and serial and not tag:
        return serial
    if device_type == DeviceType.NOTEBOOK and serial and (not tag or tag.upper().startswith("UNK")):
        return _with_prefix(serial)
    if device_type in PC_TYPES and tag and _NUMERIC_TAG.fullmatch(tag):
        return f"{ASSET_TAG_PREFIX}{tag}"
    return tag


def _pad_user_name(user_name: str, prefixes) -> str:
    if user_name and user_name.startswith(tuple(prefixes)):
        return "0" + user_name
    return user_name


def _age_days(purchase_date: str, today: datetime.date):
    parsed = parse_date_cell(purchase_date)
    if parsed is None:
        logger.debug("Unparseable purchase date %r", purchase_date)
        return None
    return abs((today - parsed).days)


def _is_exempt(serial_key: str, full_name: str, config: ReconcileConfig) -> bool:
    if serial_key and serial_key in config.exempt_serials:
        return True
    name = tr_lower(full_name)
    return bool(name) and any(user in name for user in config.exempt_users)


def build_asset(row: dict, index: int, config: ReconcileConfig, today: datetime.date = None) -> Asset:
    """Convert one inventory row into an Asset with placeholders for missing identity."""
    today = today or datetime.date.today()
    values = {name: resolve_field(row, aliases) for name, aliases in COLUMN_ALIASES.items()}

    device_type = classify_device(values["brand"], values["model"], values["category"], values["status"])
    serial = clean_mobile_serial(strip_serial_label(values["serial"]), device_type)
    user_name = _pad_user_name(values["user_name"], config.user_id_pad_prefixes)
    full_name = values["full_name"]

    tag = synthesize_asset_tag(values["asset_tag"], serial, device_type)

    hostname = values["hostname"] or tag
    if not hostname:
        hostname = f"Unknown-{index}"
        logger.debug("Inventory row %d has no hostname or tag", index)
    if not serial:
        logger.debug("Inventory row %d has no serial number", index)

    purchase_date = values["purchase_date"] or today.isoformat()

    usage = tr_lower(values["usage"])
    status = tr_lower(values["status"])
    is_stock = any(k in usage or k in status for k in config.stock_keywords)
    is_department = "departman" in usage or (
        bool(user_name) and user_name.startswith(tuple(config.department_user_prefixes))
    )

    return Asset(
        id=f"asset-{index}",
        asset_tag=tag or f"UNK-{index}",
        serial_number=serial or f"SN-{index}",
        hostname=hostname,
        type=device_type,
        purchase_date=purchase_date,
        asset_age_days=_age_days(purchase_date, today),
        assigned_user=full_name or user_name or "Unassigned",
        brand=values["brand"],
        model=values["model"],
        status_description=values["status"],
        user_name=user_name,
        full_name=full_name,
        is_stock=is_stock,
        is_department=is_department,
        is_exempt=_is_exempt(normalize_identifier(serial), full_name, config),
        serial_is_placeholder=not serial,
        hostname_is_placeholder=not (values["hostname"] or tag),
    )


def parse_inventory(rows, config: ReconcileConfig = None, today: datetime.date = None) -> InventoryParseResult:
    """
    Build Assets for every inventory row.

    Parameters
    ----------
    rows : iterable of row mappings from parsers.tabular_reader.read_table
    config : ReconcileConfig, optional
    today : date used for age calculation and missing purchase dates

    Returns
    -------
    InventoryParseResult with the assets and the serial/hostname keys later
    used to rule out orphans.
    """
    config = config or ReconcileConfig()
    today = today or datetime.date.today()
    matched = MatchedKeys()
    assets = []
    for index, row in enumerate(rows):
        asset = build_asset(row, index, config, today)
        matched.add(asset)
        assets.append(asset)

    logger.info(
        "Built %d assets (%d stock, %d exempt)",
        len(assets),
        sum(a.is_stock for a in assets),
        sum(a.is_exempt for a in assets),
    )
    return InventoryParseResult(assets=assets, matched_keys=matched)
