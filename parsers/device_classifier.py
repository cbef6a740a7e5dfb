"""Keyword heuristics that assign a device category from free-text columns.

Inventory exports carry no single reliable "device type" column, so the
brand, model, category and status texts are concatenated and tested
against keyword families in a fixed order. First match wins: phones
before Macs, monitors before notebooks. Anything unmatched is a Notebook.
"""

import re

from models.asset import DeviceType
from parsers.field_resolver import tr_lower

# Dotless variants cover uppercase input lowered with Turkish rules
# (IPAD -> ıpad, IOS -> ıos).
TABLET_KEYWORDS = ("ipad", "ıpad", "tablet")
PHONE_KEYWORDS = ("iphone", "ıphone", "ios", "ıos", "telefon", "phone", "mobile")
MAC_KEYWORDS = ("macbook", "imac", "mac mini", "mac studio", "mac pro", "osx", "macos")
MONITOR_KEYWORDS = ("monitor", "display", "screen", "ekran")
MONITOR_EXCLUSIONS = ("latitude", "thinkpad", "mac")

NOTEBOOK_KEYWORDS = (
    "laptop", "notebook", "dizüstü", "portable", "latitude", "thinkpad", "elitebook",
    "probook", "yoga", "surface", "xps", "zenbook", "spectre", "air", "book",
)
DESKTOP_KEYWORDS = (
    "desktop", "tower", "masaüstü", "optiplex", "precision", "prodesk", "elitedesk",
    "inspiron dt", "veriton", "esprimo", "workstation", "all-in-one", "aio", "kasa", "pc",
)

# Apple devices with no family keyword: model numbers and storage sizes
# such as "13 256GB", "14 Plus", "SE", "16E" point to a phone.
_IPHONE_MODEL_RE = re.compile(r"\b(1[1-9][a-z]?|se|x|xr|xs|mini|plus|max|pro|6s?|7|8|16e)\b")
_PHONE_STORAGE_RE = re.compile(r"\b\d{2,3}gb\b")
MAC_HARDWARE_TOKENS = ("ssd", "tb", "m1", "m2", "m3")


def _has_any(texts, keywords) -> bool:
    return any(k in text for text in texts for k in keywords)


def _apple_fallback(combined: str) -> DeviceType:
    if _IPHONE_MODEL_RE.search(combined):
        if not any(t in combined for t in MAC_HARDWARE_TOKENS):
            return DeviceType.IPHONE
        if _PHONE_STORAGE_RE.search(combined):
            return DeviceType.IPHONE
    return DeviceType.MACBOOK


def classify_device(brand="", model="", raw_type="", status="") -> DeviceType:
    """Return the device category for one inventory or report row."""
    combined = " ".join(tr_lower(part) for part in (brand, model, raw_type, status))
    # Also test with dotless ı folded back, so "THINKPAD" (-> "thınkpad")
    # still hits the notebook list.
    texts = (combined, combined.replace("ı", "i"))

    if _has_any(texts, TABLET_KEYWORDS):
        return DeviceType.IPAD
    if _has_any(texts, PHONE_KEYWORDS):
        return DeviceType.IPHONE
    if _has_any(texts, MAC_KEYWORDS):
        return DeviceType.MACBOOK
    if _has_any(texts, MONITOR_KEYWORDS) and not _has_any(texts, MONITOR_EXCLUSIONS):
        return DeviceType.MONITOR
    if _has_any(texts, NOTEBOOK_KEYWORDS):
        return DeviceType.NOTEBOOK
    if _has_any(texts, DESKTOP_KEYWORDS):
        return DeviceType.DESKTOP
    if "apple" in texts[1]:
        return _apple_fallback(texts[1])
    return DeviceType.NOTEBOOK
