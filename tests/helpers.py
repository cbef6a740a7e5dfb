"""Builders for in-memory spreadsheets and Asset records used across tests."""

import csv
import datetime
import io

from openpyxl import Workbook

from models.asset import Asset, ComplianceStatus, DeviceType

TODAY = datetime.date(2025, 1, 15)


def make_csv(rows, delimiter=",", encoding="utf-8-sig") -> bytes:
    headers = []
    for row in rows:
        for key in row:
            if key not in headers:
                headers.append(key)
    buf = io.StringIO()
    writer = csv.DictWriter(buf, fieldnames=headers, delimiter=delimiter)
    writer.writeheader()
    writer.writerows(rows)
    return buf.getvalue().encode(encoding)


def make_xlsx(rows, extra_sheet_rows=None) -> bytes:
    wb = Workbook()
    ws = wb.active
    ws.title = "Inventory"
    headers = list(rows[0].keys()) if rows else []
    ws.append(headers)
    for row in rows:
        ws.append([row.get(h) for h in headers])
    if extra_sheet_rows:
        other = wb.create_sheet("Other")
        other_headers = list(extra_sheet_rows[0].keys())
        other.append(other_headers)
        for row in extra_sheet_rows:
            other.append([row.get(h) for h in other_headers])
    buf = io.BytesIO()
    wb.save(buf)
    return buf.getvalue()


def make_asset(device_type=DeviceType.NOTEBOOK, index=0, intune=False, jamf=False,
               defender=False, **kwargs) -> Asset:
    fields = dict(
        id=f"asset-{index}",
        asset_tag=f"KSN{index}",
        serial_number=f"SER{index}",
        hostname=f"HOST-{index}",
        type=device_type,
        purchase_date=TODAY.isoformat(),
        assigned_user="Unassigned",
        compliance=ComplianceStatus(in_intune=intune, in_jamf=jamf, in_defender=defender),
    )
    fields.update(kwargs)
    return Asset(**fields)
