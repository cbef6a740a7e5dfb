"""Synonym-driven column lookup for loosely-typed spreadsheet rows.

Source exports name the same field many ways ("Seri Numarası", "Serial
Number", "SERİ NO") so lookups go through an ordered list of candidate
names instead of a fixed schema.
"""

import datetime

import pandas as pd

# Turkish casing: dotted capital İ lowers to i, plain capital I lowers to
# dotless ı. str.lower() would turn İ into "i" + combining dot.
_TR_UPPER_MAP = str.maketrans({"İ": "i", "I": "ı"})


def tr_lower(text) -> str:
    """Lowercase ``text`` using Turkish locale rules."""
    if text is None:
        return ""
    return str(text).translate(_TR_UPPER_MAP).lower()


def tr_fold(text) -> str:
    """
    Turkish-aware lowercase with dotless ı folded to i.

    Used for comparisons, so "IMEI", "İmei" and "imei" are all equal.
    """
    return tr_lower(text).replace("ı", "i")


def _cell_to_str(value) -> str:
    if value is None:
        return ""
    if isinstance(value, (datetime.datetime, datetime.date)):
        if isinstance(value, datetime.datetime):
            value = value.date()
        return value.isoformat()
    return str(value).strip()


def resolve_field(row: dict, candidates) -> str:
    """
    Return the first non-empty value whose header matches a candidate.

    A header matches a candidate when, after Turkish-aware case folding
    (tr_fold) and trimming, it equals the candidate or contains it (so
    "Personel Tam İsim" matches "tam isim"). Candidates are tried in the
    given order. Returns "" when nothing matches; callers treat that as absent.
    """
    if not row:
        return ""
    headers = [(tr_fold(h).strip(), h) for h in row]
    for candidate in candidates:
        wanted = tr_fold(candidate).strip()
        if not wanted:
            continue
        for header, original in headers:
            if header == wanted or wanted in header:
                value = _cell_to_str(row[original])
                if value:
                    return value
    return ""


def parse_date_cell(value):
    """Parse an ISO or day-first date string into a date, or None."""
    if not value:
        return None
    text = str(value).strip()
    try:
        return datetime.date.fromisoformat(text[:10])
    except ValueError:
        pass
    parsed = pd.to_datetime(text, errors="coerce", dayfirst=True)
    if pd.isna(parsed):
        return None
    return parsed.date()
