import pytest

from models.asset import DeviceType
from parsers.report_parser import build_source_index


def test_indexes_by_folded_serial_and_hostname():
    rows = [{"Device name": "İST-NB-01", "Serial number": "S/N: PF3ABC", "Model": "Latitude 5420"}]

    index = build_source_index("Intune", rows)

    assert index.row_count == 1
    assert index.by_serial["pf3abc"] is rows[0]
    assert index.by_hostname["ist-nb-01"] is rows[0]
    assert index.serial_to_hostname == {"pf3abc": "ist-nb-01"}


def test_report_model_drives_mobile_serial_cleanup():
    rows = [{"Device name": "IPHONE-AY", "Serial number": "SV22P3H6YY3", "Model": "iPhone 14"}]

    index = build_source_index("Intune", rows)

    record = index.records[0]
    assert record.device_type == DeviceType.IPHONE
    assert record.serial == "V22P3H6YY3"
    assert "v22p3h6yy3" in index.by_serial


def test_non_mobile_serial_keeps_leading_s():
    rows = [{"Computer name": "MAC-01", "Serial number": "SC02XYZ12345", "Model": "MacBook Pro"}]

    index = build_source_index("Jamf", rows)

    assert "sc02xyz12345" in index.by_serial


def test_duplicate_identifiers_last_row_wins():
    first = {"Device name": "WS-100", "Serial number": "XYZ", "OS platform": "Windows"}
    second = {"Device name": "WS-100", "Serial number": "XYZ", "OS platform": "Windows 11"}

    index = build_source_index("Defender", [first, second])

    assert index.by_hostname["ws-100"] is second
    assert index.by_serial["xyz"] is second
    assert len(index.records) == 2


def test_rows_without_identifiers_are_counted_but_not_indexed():
    rows = [
        {"Device name": "WS-1", "Serial number": ""},
        {"Model": "Latitude"},
    ]

    index = build_source_index("Intune", rows)

    assert index.row_count == 2
    assert len(index.records) == 1
    assert list(index.by_hostname) == ["ws-1"]


def test_defender_user_column_is_indexed():
    rows = [{"Device name": "iPad-77", "isim_soyisim": "Onatcem_Yanik"}]

    index = build_source_index("Defender", rows)

    assert index.by_user["onatcem_yanik"] is rows[0]


def test_resolve_reads_source_specific_columns():
    row = {"Device name": "WS-1", "Compliance state": "Compliant"}
    index = build_source_index("Intune", [row])

    assert index.resolve(row, "compliance") == "Compliant"
    assert index.resolve(row, "no_such_field") == ""


def test_unknown_source_raises():
    with pytest.raises(ValueError, match="Unknown report source"):
        build_source_index("Kandji", [])


def test_empty_report_gives_empty_index():
    index = build_source_index("Jamf", [])

    assert index.row_count == 0
    assert index.by_serial == {}
    assert index.by_hostname == {}
