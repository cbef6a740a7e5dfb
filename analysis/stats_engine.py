"""Compliance policy evaluation and dashboard roll-ups."""

from collections import Counter

from config.settings import ReconcileConfig
from models.asset import (
    MOBILE_TYPES,
    SOURCE_DEFENDER,
    SOURCE_INTUNE,
    SOURCE_JAMF,
    SOURCES,
    DeviceType,
)
from models.snapshot import DashboardStats

MOBILE_BUCKET = "iPhone & iPad"


def is_compliant(asset, policy: dict) -> bool:
    """Return True if ``asset`` is present in every source its category requires."""
    if asset.is_exempt:
        return True
    required = policy["requirements"].get(asset.type, (SOURCE_INTUNE,))
    return all(asset.compliance.present_in(source) for source in required)


def in_production_universe(asset, policy: dict, config: ReconcileConfig) -> bool:
    """Stock, exempt and (per policy) department devices are not measured."""
    if asset.is_stock or asset.is_exempt:
        return False
    if asset.is_department:
        if policy["exclude_department_users"] and asset.user_name.startswith(
            tuple(config.department_user_prefixes)
        ):
            return False
        if policy["exclude_department_macs"] and asset.type == DeviceType.MACBOOK:
            return False
    return True


def device_type_distribution(assets) -> list[dict]:
    """Count devices per category, phones and tablets merged into one bucket."""
    counts = Counter()
    for asset in assets:
        key = MOBILE_BUCKET if asset.type in MOBILE_TYPES else asset.type.value
        counts[key] += 1
    return [{"name": name, "value": value} for name, value in counts.items()]


def compute_dashboard_stats(
    assets,
    cloud_counts: dict = None,
    config: ReconcileConfig = None,
    orphans=(),
) -> DashboardStats:
    """
    Roll an annotated Asset collection up into dashboard counts.

    Parameters
    ----------
    assets : Assets after analysis.matcher.match_assets (orphans excluded)
    cloud_counts : dict source -> raw report row count
    config : ReconcileConfig selecting the compliance policy
    orphans : orphan Assets, counted per source only

    Returns
    -------
    DashboardStats
    """
    config = config or ReconcileConfig()
    policy = config.policy
    cloud_counts = cloud_counts or {}
    assets = list(assets)

    stock = [a for a in assets if a.is_stock]
    risky_stock = [a for a in stock if a.compliance.in_intune or a.compliance.in_jamf]
    production = [a for a in assets if in_production_universe(a, policy, config)]

    compliant = sum(1 for a in production if is_compliant(a, policy))
    missing_intune = sum(
        1 for a in production if a.type != DeviceType.MACBOOK and not a.compliance.in_intune
    )
    missing_jamf = sum(
        1 for a in production if a.type == DeviceType.MACBOOK and not a.compliance.in_jamf
    )
    defender_types = policy["defender_counted_types"]
    missing_defender = sum(
        1 for a in production if a.type in defender_types and not a.compliance.in_defender
    )
    missing_defender_ratio = (
        round(missing_defender / len(production) * 100, 2) if production else 0.0
    )

    orphan_counts = {source: 0 for source in SOURCES}
    for orphan in orphans:
        orphan_counts[orphan.orphan_source] += 1

    return DashboardStats(
        total_assets=len(assets),
        total_intune_report_count=cloud_counts.get(SOURCE_INTUNE, 0),
        total_jamf_report_count=cloud_counts.get(SOURCE_JAMF, 0),
        total_defender_report_count=cloud_counts.get(SOURCE_DEFENDER, 0),
        production_count=len(production),
        compliant_count=compliant,
        exempt_count=sum(1 for a in assets if a.is_exempt and not a.is_stock),
        missing_intune_count=missing_intune,
        missing_jamf_count=missing_jamf,
        missing_defender_count=missing_defender,
        missing_defender_ratio=missing_defender_ratio,
        stock_count=len(stock),
        risky_stock_count=len(risky_stock),
        device_type_distribution=device_type_distribution(assets),
        orphan_counts=orphan_counts,
    )
