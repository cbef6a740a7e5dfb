"""Aggregate statistics and point-in-time snapshot records."""

from __future__ import annotations

import datetime
from dataclasses import dataclass, field, fields
from types import MappingProxyType
from typing import Mapping

from models.asset import Asset


def _frozen_mapping(value) -> Mapping:
    return MappingProxyType(dict(value or {}))


@dataclass(frozen=True)
class DashboardStats:
    total_assets: int
    total_intune_report_count: int
    total_jamf_report_count: int
    total_defender_report_count: int
    production_count: int
    compliant_count: int
    exempt_count: int
    missing_intune_count: int
    missing_jamf_count: int
    missing_defender_count: int
    missing_defender_ratio: float
    stock_count: int
    risky_stock_count: int
    device_type_distribution: tuple[Mapping, ...] = ()
    orphan_counts: Mapping[str, int] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(
            self,
            "device_type_distribution",
            tuple(_frozen_mapping(bucket) for bucket in self.device_type_distribution),
        )
        object.__setattr__(self, "orphan_counts", _frozen_mapping(self.orphan_counts))

    def to_dict(self) -> dict:
        data = {f.name: getattr(self, f.name) for f in fields(self)}
        data["device_type_distribution"] = [dict(b) for b in self.device_type_distribution]
        data["orphan_counts"] = dict(self.orphan_counts)
        return data


@dataclass(frozen=True)
class InventorySnapshot:
    """
    Result of one ingestion + reconciliation run.

    Snapshots are never mutated; promoting a draft produces a new object
    (see analysis.snapshots.SnapshotStore.promote). Assets and their
    compliance records are frozen too, so a promoted copy may share them.
    """

    id: str
    period_label: str
    date_created: datetime.datetime
    assets: tuple[Asset, ...]
    orphans: tuple[Asset, ...]
    cloud_counts: Mapping[str, int]
    stats: DashboardStats
    is_draft: bool = False

    def __post_init__(self):
        object.__setattr__(self, "assets", tuple(self.assets))
        object.__setattr__(self, "orphans", tuple(self.orphans))
        object.__setattr__(self, "cloud_counts", _frozen_mapping(self.cloud_counts))
