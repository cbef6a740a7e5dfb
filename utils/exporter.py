"""Excel and CSV export utilities for reconciliation snapshots."""

import io
import math

import pandas as pd

from analysis.stats_engine import is_compliant
from config.compliance_policies import get_policy

CSV_COLUMNS = [
    "Reference No", "Serial Number", "Hostname", "Brand", "Model", "Type",
    "User", "Status", "Stock", "Intune", "Jamf", "Defender",
]

_FLAG_COLUMNS = ("Stock", "Intune", "Jamf", "Defender", "Compliant")


def _yes_no(value: bool) -> str:
    return "Yes" if value else "No"


def assets_to_dataframe(assets, policy_name: str = None) -> pd.DataFrame:
    """
    Flatten Assets into the export column layout.

    With ``policy_name`` set, a Compliant column and the match-method
    columns are appended.
    """
    rows = []
    policy = get_policy(policy_name) if policy_name else None
    for asset in assets:
        c = asset.compliance
        row = {
            "Reference No": asset.asset_tag,
            "Serial Number": asset.serial_number,
            "Hostname": asset.hostname,
            "Brand": asset.brand,
            "Model": asset.model,
            "Type": asset.type.value,
            "User": asset.assigned_user,
            "Status": asset.status_description,
            "Stock": _yes_no(asset.is_stock),
            "Intune": _yes_no(c.in_intune),
            "Jamf": _yes_no(c.in_jamf),
            "Defender": _yes_no(c.in_defender),
        }
        if policy is not None:
            row.update({
                "Compliant": _yes_no(is_compliant(asset, policy)),
                "Intune Match": c.intune_match_method or "",
                "Jamf Match": c.jamf_match_method or "",
                "Defender Match": c.defender_match_method or "",
                "Intune State": c.intune_compliance_state or "",
                "Last Check-in (days)": c.intune_last_check_in_days,
                "Exempt": _yes_no(asset.is_exempt),
                "Department": _yes_no(asset.is_department),
                "Orphan Source": asset.orphan_source or "",
            })
        rows.append(row)
    if not rows:
        return pd.DataFrame(columns=CSV_COLUMNS)
    return pd.DataFrame(rows)


def _summary_df(snapshot) -> pd.DataFrame:
    stats = snapshot.stats
    rows = [
        {"Field": "Period",                    "Value": snapshot.period_label},
        {"Field": "Created",                   "Value": snapshot.date_created.isoformat(timespec="seconds")},
        {"Field": "Total Assets",              "Value": stats.total_assets},
        {"Field": "Production Assets",         "Value": stats.production_count},
        {"Field": "Compliant",                 "Value": stats.compliant_count},
        {"Field": "Exempt",                    "Value": stats.exempt_count},
        {"Field": "Missing Intune",            "Value": stats.missing_intune_count},
        {"Field": "Missing Jamf",              "Value": stats.missing_jamf_count},
        {"Field": "Missing Defender",          "Value": stats.missing_defender_count},
        {"Field": "Missing Defender %",        "Value": stats.missing_defender_ratio},
        {"Field": "Stock",                     "Value": stats.stock_count},
        {"Field": "Risky Stock",               "Value": stats.risky_stock_count},
        {"Field": "Intune Report Rows",        "Value": stats.total_intune_report_count},
        {"Field": "Jamf Report Rows",          "Value": stats.total_jamf_report_count},
        {"Field": "Defender Report Rows",      "Value": stats.total_defender_report_count},
    ]
    for source, count in stats.orphan_counts.items():
        rows.append({"Field": f"Orphans ({source})", "Value": count})
    for bucket in stats.device_type_distribution:
        rows.append({"Field": f"Devices: {bucket['name']}", "Value": bucket["value"]})
    return pd.DataFrame(rows)


# ──────────────────────────────────────────────────────────────────────────────
# Formatting helpers
# ──────────────────────────────────────────────────────────────────────────────

def _add_formats(workbook):
    """Pre-build all reusable cell formats."""
    base = {"border": 1, "text_wrap": True}
    return {
        "header": workbook.add_format({
            "bold": True, "bg_color": "#1a3a5c", "font_color": "white",
            "border": 1, "text_wrap": True, "valign": "vcenter",
        }),
        "yes":  workbook.add_format({**base, "bg_color": "#d5f5e3", "font_color": "#1e8449"}),
        "no":   workbook.add_format({**base, "bg_color": "#fadbd8", "font_color": "#7b241c"}),
        "cell": workbook.add_format({**base, "valign": "top"}),
    }


def _safe_write(ws, row, col, value, fmt):
    """Write a cell, converting NaN/None to empty string to avoid xlsxwriter errors."""
    if value is None:
        ws.write(row, col, "", fmt)
    elif isinstance(value, float) and (math.isnan(value) or math.isinf(value)):
        ws.write(row, col, "", fmt)
    else:
        ws.write(row, col, value, fmt)


def _apply_flag_formatting(ws, df, fmts):
    """Colour Yes/No flag columns; Stock is informational and stays neutral."""
    flag_cols = {i for i, c in enumerate(df.columns) if c in _FLAG_COLUMNS and c != "Stock"}
    for row_idx, values in enumerate(df.itertuples(index=False, name=None), start=1):
        for col_idx, value in enumerate(values):
            if col_idx in flag_cols:
                fmt = fmts["yes"] if value == "Yes" else fmts["no"]
            else:
                fmt = fmts["cell"]
            _safe_write(ws, row_idx, col_idx, value, fmt)


# ──────────────────────────────────────────────────────────────────────────────
# Main export functions
# ──────────────────────────────────────────────────────────────────────────────

def export_excel(snapshot, policy_name: str = "current") -> bytes:
    """
    Export a snapshot to a workbook with Summary, Assets and Orphans sheets.

    Returns
    -------
    bytes : Excel file content
    """
    output = io.BytesIO()

    with pd.ExcelWriter(output, engine="xlsxwriter") as writer:
        workbook = writer.book
        fmts = _add_formats(workbook)

        def write_sheet(df, sheet_name, col_widths=None):
            """Write DataFrame to sheet, returning (worksheet, df_written)."""
            if df.empty:
                df = pd.DataFrame({"No Data": ["No data available for this section"]})
            df.to_excel(writer, sheet_name=sheet_name, index=False)
            ws = writer.sheets[sheet_name]
            for col_num, col_name in enumerate(df.columns):
                ws.write(0, col_num, col_name, fmts["header"])
                width = (col_widths or {}).get(col_name, max(len(str(col_name)) + 2, 15))
                ws.set_column(col_num, col_num, min(width, 60))
            ws.set_row(0, 20)
            ws.freeze_panes(1, 0)
            ws.autofilter(0, 0, 0, len(df.columns) - 1)
            return ws, df

        write_sheet(_summary_df(snapshot), "Summary", {"Field": 30, "Value": 30})

        widths = {"Reference No": 18, "Serial Number": 20, "Hostname": 22, "Model": 28, "User": 28}
        assets_df = assets_to_dataframe(snapshot.assets, policy_name)
        ws_assets, written = write_sheet(assets_df, "Assets", widths)
        if not assets_df.empty:
            _apply_flag_formatting(ws_assets, written, fmts)

        orphans_df = assets_to_dataframe(snapshot.orphans, policy_name)
        ws_orphans, written = write_sheet(orphans_df, "Orphans", widths)
        if not orphans_df.empty:
            _apply_flag_formatting(ws_orphans, written, fmts)

    return output.getvalue()


def export_csv(assets) -> bytes:
    """
    Export Assets to a flat CSV with the fixed reporting columns.

    Returns
    -------
    bytes : CSV file content (UTF-8 with BOM for Excel compatibility)
    """
    df = assets_to_dataframe(assets)[CSV_COLUMNS]
    return df.to_csv(index=False, lineterminator="\n").encode("utf-8-sig")
