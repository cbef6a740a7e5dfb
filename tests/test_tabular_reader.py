import asyncio
import datetime
import io
import logging

import pytest

from helpers import make_csv, make_xlsx
from parsers.tabular_reader import IngestionError, read_table, read_table_async


def test_csv_with_bom_and_turkish_headers():
    content = make_csv([{"Seri Numarası": "PF3ABC", "Marka": "Dell"}])

    rows = read_table(content)

    assert rows == [{"Seri Numarası": "PF3ABC", "Marka": "Dell"}]


def test_semicolon_csv_in_windows_turkish_encoding():
    content = make_csv(
        [{"Kullanıcı Adı": "ayşe", "Durum": "Kullanımda"}, {"Kullanıcı Adı": "ömer", "Durum": "Depoda"}],
        delimiter=";",
        encoding="cp1254",
    )

    rows = read_table(content)

    assert rows[0] == {"Kullanıcı Adı": "ayşe", "Durum": "Kullanımda"}
    assert rows[1]["Durum"] == "Depoda"


def test_empty_cells_and_rows_are_dropped():
    content = b"Serial,Hostname\nA1,\n,\n,WS-2\n"

    assert read_table(content) == [{"Serial": "A1"}, {"Hostname": "WS-2"}]


def test_xlsx_dates_become_iso_strings_and_integral_numbers_ints():
    content = make_xlsx([
        {"Tarih": datetime.datetime(2023, 5, 17, 14, 30), "Referans": 12345, "Fiyat": 10.5},
    ])

    (row,) = read_table(content)

    assert row["Tarih"] == "2023-05-17"
    assert row["Referans"] == 12345
    assert row["Fiyat"] == 10.5


def test_only_first_sheet_is_read():
    content = make_xlsx([{"Serial": "FIRST"}], extra_sheet_rows=[{"Serial": "SECOND"}])

    assert read_table(content) == [{"Serial": "FIRST"}]


def test_path_and_file_like_inputs(tmp_path):
    path = tmp_path / "inventory.xlsx"
    path.write_bytes(make_xlsx([{"Serial": "X1"}]))

    assert read_table(path) == [{"Serial": "X1"}]
    assert read_table(str(path)) == [{"Serial": "X1"}]

    stream = io.BytesIO(make_csv([{"Serial": "X2"}]))
    stream.name = "upload.csv"
    assert read_table(stream) == [{"Serial": "X2"}]


def test_corrupt_workbook_raises_ingestion_error():
    with pytest.raises(IngestionError, match="Could not read workbook"):
        read_table(b"PK\x03\x04this is not a real zip archive")


def test_empty_file_raises_ingestion_error():
    with pytest.raises(IngestionError, match="empty"):
        read_table(b"   \n")


def test_legacy_xls_is_rejected(tmp_path):
    path = tmp_path / "old.xls"
    path.write_bytes(b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1" + b"\x00" * 64)

    with pytest.raises(IngestionError, match="legacy .xls"):
        read_table(path)


def test_missing_path_raises_ingestion_error(tmp_path):
    with pytest.raises(IngestionError, match="Could not read"):
        read_table(tmp_path / "nope.csv")


def test_async_read_matches_sync_read():
    content = make_csv([{"Device name": "WS-1"}])

    rows = asyncio.run(read_table_async(content))

    assert rows == read_table(content)


def test_row_with_extra_fields_is_truncated_and_logged(caplog):
    content = b"Seri Numarasi,Marka,Model\nABC1,Dell,Latitude\nABC2,Dell,Latitude,extra\n"

    with caplog.at_level(logging.WARNING, logger="parsers.tabular_reader"):
        rows = read_table(content)

    assert rows == [
        {"Seri Numarasi": "ABC1", "Marka": "Dell", "Model": "Latitude"},
        {"Seri Numarasi": "ABC2", "Marka": "Dell", "Model": "Latitude"},
    ]
    assert "cut to 3 columns" in caplog.text


def test_tab_delimiter_is_detected():
    content = "Device name\tSerial number\nWS-1\tA1\n".encode("utf-8")

    assert read_table(content) == [{"Device name": "WS-1", "Serial number": "A1"}]


def test_single_column_header_with_spaces_stays_one_column():
    assert read_table(b"Device name\nWS-1\nWS-2\n") == [{"Device name": "WS-1"}, {"Device name": "WS-2"}]
