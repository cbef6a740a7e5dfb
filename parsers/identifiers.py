"""Serial number and hostname normalization."""

import re

from models.asset import MOBILE_TYPES
from parsers.field_resolver import tr_fold

_LABEL_PREFIX = re.compile(r"^\s*(?:s/n|seri|sn)\s*:\s*", re.IGNORECASE)

# A leading "S" on a mobile serial is an export artifact when what
# remains is still a full-length serial.
_MOBILE_SERIAL_MIN_LEN = 10


def strip_serial_label(raw) -> str:
    """Remove "S/N:", "Seri:", "SN:" labels and surrounding whitespace."""
    if raw is None:
        return ""
    text = str(raw).strip()
    while True:
        stripped = _LABEL_PREFIX.sub("", text, count=1)
        if stripped == text:
            return text.strip()
        text = stripped


def fold_identifier(value) -> str:
    """
    Case-fold an identifier for cross-source comparison.

    Turkish-aware lowercasing, then dotless ı folded to i so that I, İ, i
    and ı compare equal whichever export they came from.
    """
    return tr_fold(value).strip()


def normalize_identifier(raw) -> str:
    """Normalize a serial number: drop labels, trim, fold case."""
    return fold_identifier(strip_serial_label(raw))


def normalize_hostname(raw) -> str:
    return fold_identifier(raw)


def clean_mobile_serial(serial, device_type) -> str:
    """Drop a stray leading S/s from iPhone/iPad serials."""
    if not serial:
        return ""
    serial = str(serial)
    if device_type not in MOBILE_TYPES:
        return serial
    if serial[:1] in ("S", "s") and len(serial) - 1 >= _MOBILE_SERIAL_MIN_LEN:
        return serial[1:]
    return serial


def asset_match_keys(asset) -> tuple[str, str]:
    """
    Return (serial key, hostname key) for an Asset.

    Placeholder identifiers yield "" so they never match a report record.
    """
    serial_key = "" if asset.serial_is_placeholder else normalize_identifier(asset.serial_number)
    host_key = "" if asset.hostname_is_placeholder else normalize_hostname(asset.hostname)
    return serial_key, host_key
