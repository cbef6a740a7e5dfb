from config.settings import ReconcileConfig
from helpers import TODAY
from models.asset import DeviceType
from parsers.inventory_parser import build_asset, parse_inventory, synthesize_asset_tag


def _build(row, index=0, today=None, **config):
    return build_asset(row, index, ReconcileConfig(**config), today or TODAY)


def test_macbook_tag_is_prefixed_serial():
    asset = _build({"Marka": "Apple", "Model": "MacBook Pro M1", "Seri Numarası": "ABC123"})
    assert asset.type == DeviceType.MACBOOK
    assert asset.asset_tag == "KSNABC123"
    assert asset.serial_number == "ABC123"


def test_macbook_tag_never_double_prefixed():
    asset = _build({"Marka": "Apple", "Model": "MacBook Air", "Seri Numarası": "KSNABC123"})
    assert asset.asset_tag == "KSNABC123"
    assert asset.asset_tag.count("KSN") == 1
    assert asset.asset_tag.startswith("KSN")


def test_iphone_serial_cleaned_and_used_as_tag():
    asset = _build({"Model": "iPhone 14", "Seri Numarası": "SV22P3H6YY3"})
    assert asset.type == DeviceType.IPHONE
    assert asset.serial_number == "V22P3H6YY3"
    assert asset.asset_tag == "V22P3H6YY3"


def test_mobile_keeps_existing_reference_number():
    asset = _build({"Referans Numarası": "MOB-7", "Model": "iPad Pro", "Seri Numarası": "DMPXK2ABCD"})
    assert asset.asset_tag == "MOB-7"


def test_notebook_without_reference_uses_serial():
    asset = _build({"Model": "Latitude 5420", "Seri Numarası": "7XK2L93"})
    assert asset.asset_tag == "KSN7XK2L93"


def test_notebook_with_placeholder_reference_uses_serial():
    asset = _build({"Referans": "UNK5", "Model": "ThinkPad T14", "Seri Numarası": "PF3ABC"})
    assert asset.asset_tag == "KSNPF3ABC"


def test_numeric_reference_gets_prefix():
    asset = _build({"Referans Numarası": "12345", "Model": "OptiPlex 7090", "Seri Numarası": "DSK1"})
    assert asset.type == DeviceType.DESKTOP
    assert asset.asset_tag == "KSN12345"


def test_synthesize_asset_tag_rules():
    assert synthesize_asset_tag("", "", DeviceType.MONITOR) == ""
    assert synthesize_asset_tag("MON-1", "X", DeviceType.MONITOR) == "MON-1"
    assert synthesize_asset_tag("A-12", "X", DeviceType.DESKTOP) == "A-12"
    assert synthesize_asset_tag("", "", DeviceType.MACBOOK) == ""


def test_placeholders_for_missing_identity():
    asset = _build({"Marka": "Dell"}, index=3)
    assert asset.serial_number == "SN-3"
    assert asset.hostname == "Unknown-3"
    assert asset.asset_tag == "UNK-3"
    assert asset.id == "asset-3"


def test_hostname_falls_back_to_reference_number():
    asset = _build({"Referans Numarası": "12345", "Model": "OptiPlex 7090"})
    assert asset.hostname == "KSN12345"


def test_hostname_column_preferred():
    asset = _build({"Bilgisayar Adı": "IST-PC-01", "Model": "OptiPlex", "Referans": "9"})
    assert asset.hostname == "IST-PC-01"


def test_user_identifier_padding_and_display_name():
    asset = _build({"Kullanıcı Adı": "248123", "Model": "Latitude"})
    assert asset.user_name == "0248123"
    assert asset.assigned_user == "0248123"

    named = _build({"Kullanıcı Adı": "555", "Tam İsim": "Ayşe Yılmaz"})
    assert named.assigned_user == "Ayşe Yılmaz"

    nobody = _build({"Model": "Latitude"})
    assert nobody.assigned_user == "Unassigned"


def test_stock_flag_from_status_or_usage():
    assert _build({"Durum": "Depoda", "Model": "Latitude"}).is_stock
    assert _build({"Kullanım Tipi": "Stok", "Model": "Latitude"}).is_stock
    assert not _build({"Durum": "Kullanımda", "Model": "Latitude"}).is_stock


def test_department_flag():
    assert _build({"Kullanım Tipi": "Departman", "Model": "MacBook Pro"}).is_department
    assert _build({"Kullanıcı Adı": "0311234", "Model": "Latitude"}).is_department
    assert not _build({"Kullanıcı Adı": "0451234", "Model": "Latitude"}).is_department


def test_exemption_by_serial_and_user():
    by_serial = _build(
        {"Model": "Latitude", "Seri Numarası": "abc123"},
        exempt_serials=frozenset({"S/N: ABC123"}),
    )
    assert by_serial.is_exempt

    by_user = _build(
        {"Model": "Latitude", "Seri Numarası": "Q1", "Tam İsim": "AYŞE YILMAZ"},
        exempt_users=("Ayşe Yılmaz",),
    )
    assert by_user.is_exempt

    neither = _build({"Model": "Latitude", "Seri Numarası": "Q2", "Tam İsim": "Ali Veli"},
                     exempt_users=("Ayşe",))
    assert not neither.is_exempt


def test_purchase_date_and_age(today):
    asset = _build({"Model": "Latitude", "Demirbaş Yaşı": "2024-01-15"}, today=today)
    assert asset.purchase_date == "2024-01-15"
    assert asset.asset_age_days == 366

    missing = _build({"Model": "Latitude"}, today=today)
    assert missing.purchase_date == today.isoformat()
    assert missing.asset_age_days == 0

    garbage = _build({"Model": "Latitude", "Tarih": "sometime"}, today=today)
    assert garbage.asset_age_days is None


def test_parse_inventory_collects_matched_keys(today):
    rows = [
        {"Model": "MacBook Pro", "Seri Numarası": "S/N: C02ABC", "Hostname": "MAC-01"},
        {"Model": "Latitude", "Seri Numarası": "PF3XYZ", "Hostname": "İST-NB-02"},
    ]
    result = parse_inventory(rows, ReconcileConfig(), today)
    assert [a.id for a in result.assets] == ["asset-0", "asset-1"]
    assert result.matched_keys.serials == {"c02abc", "pf3xyz"}
    assert result.matched_keys.hostnames == {"mac-01", "ist-nb-02"}
    for asset in result.assets:
        assert asset.serial_number and asset.hostname
        assert not asset.compliance.in_intune
        assert not asset.compliance.in_jamf
        assert not asset.compliance.in_defender


def test_usage_column_is_not_read_as_category():
    assert _build({"Kullanım Tipi": "Ekran başı", "Model": "OptiPlex 7090"}).type == DeviceType.DESKTOP
    assert _build({"Usage Type": "Mobile pool", "Model": "Latitude 5420"}).type == DeviceType.NOTEBOOK


def test_category_column_feeds_classifier():
    assert _build({"Cihaz Tipi": "Tablet", "Marka": "Apple"}).type == DeviceType.IPAD


def test_placeholder_identity_is_not_a_match_key(today):
    rows = [{"Marka": "Dell"}, {"Seri Numarası": "PF3REAL", "Model": "Latitude"}]

    result = parse_inventory(rows, ReconcileConfig(), today)

    placeholder = result.assets[0]
    assert (placeholder.serial_number, placeholder.hostname) == ("SN-0", "Unknown-0")
    assert placeholder.serial_is_placeholder and placeholder.hostname_is_placeholder
    assert not result.assets[1].serial_is_placeholder
    assert result.matched_keys.serials == {"pf3real"}
    assert result.matched_keys.hostnames == {"ksnpf3real"}
