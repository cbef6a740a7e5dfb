"""Asset and compliance record types produced by the inventory parser."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Optional


class DeviceType(str, Enum):
    DESKTOP = "Desktop"
    NOTEBOOK = "Notebook"
    MACBOOK = "MacBook"
    IPHONE = "iPhone"
    IPAD = "iPad"
    MONITOR = "Monitor"
    OTHER = "Other"


MOBILE_TYPES = frozenset({DeviceType.IPHONE, DeviceType.IPAD})
PC_TYPES = frozenset({DeviceType.DESKTOP, DeviceType.NOTEBOOK})

# Report sources, in the order they are matched
SOURCE_INTUNE = "Intune"
SOURCE_JAMF = "Jamf"
SOURCE_DEFENDER = "Defender"
SOURCES = (SOURCE_INTUNE, SOURCE_JAMF, SOURCE_DEFENDER)

MATCH_SERIAL = "Serial"
MATCH_HOSTNAME = "Hostname"
MATCH_ASSET_TAG = "AssetTag"
MATCH_USER = "User"


@dataclass(frozen=True)
class ComplianceStatus:
    """
    Per-source presence flags plus the audit trail of how each match was made.

    Raw report rows are stored as read-only mappings.
    """

    in_intune: bool = False
    in_jamf: bool = False
    in_defender: bool = False
    intune_match_method: Optional[str] = None
    jamf_match_method: Optional[str] = None
    defender_match_method: Optional[str] = None
    intune_compliance_state: Optional[str] = None
    intune_last_check_in_days: Optional[int] = None
    last_sync: Optional[str] = None
    raw_intune_data: Optional[Mapping[str, Any]] = None
    raw_jamf_data: Optional[Mapping[str, Any]] = None
    raw_defender_data: Optional[Mapping[str, Any]] = None

    def __post_init__(self):
        for name in ("raw_intune_data", "raw_jamf_data", "raw_defender_data"):
            row = getattr(self, name)
            if row is not None:
                object.__setattr__(self, name, MappingProxyType(dict(row)))

    def present_in(self, source: str) -> bool:
        return {
            SOURCE_INTUNE: self.in_intune,
            SOURCE_JAMF: self.in_jamf,
            SOURCE_DEFENDER: self.in_defender,
        }[source]


@dataclass(frozen=True)
class Asset:
    """
    One inventory device (or a synthetic orphan record from a report).

    ``serial_is_placeholder`` and ``hostname_is_placeholder`` mark identity
    fields filled with SN-{n} / Unknown-{n}; those never take part in matching.
    """

    id: str
    asset_tag: str
    serial_number: str
    hostname: str
    type: DeviceType
    purchase_date: str
    assigned_user: str
    brand: str = ""
    model: str = ""
    status_description: str = ""
    asset_age_days: Optional[int] = None
    user_name: str = ""
    full_name: str = ""
    is_stock: bool = False
    is_department: bool = False
    is_exempt: bool = False
    is_orphan: bool = False
    orphan_source: Optional[str] = None
    serial_is_placeholder: bool = False
    hostname_is_placeholder: bool = False
    compliance: ComplianceStatus = field(default_factory=ComplianceStatus)

    @property
    def is_mobile(self) -> bool:
        return self.type in MOBILE_TYPES
