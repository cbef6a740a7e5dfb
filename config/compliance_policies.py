"""Named compliance policy generations.

Each policy lists, per device category, the report sources a production
device must appear in to count as compliant, plus the knobs that changed
between policy generations.
"""

from models.asset import SOURCE_DEFENDER, SOURCE_INTUNE, SOURCE_JAMF, DeviceType

_PC_AND_MAC = (DeviceType.MACBOOK, DeviceType.DESKTOP, DeviceType.NOTEBOOK)

COMPLIANCE_POLICIES = {
    "current": {
        "label": "Current",
        "desc": "Mobile devices need Intune only; department Macs and shared accounts are out of scope",
        "requirements": {
            DeviceType.MACBOOK: (SOURCE_JAMF, SOURCE_DEFENDER),
            DeviceType.DESKTOP: (SOURCE_INTUNE, SOURCE_DEFENDER),
            DeviceType.NOTEBOOK: (SOURCE_INTUNE, SOURCE_DEFENDER),
            DeviceType.IPHONE: (SOURCE_INTUNE,),
            DeviceType.IPAD: (SOURCE_INTUNE,),
            DeviceType.MONITOR: (SOURCE_INTUNE,),
            DeviceType.OTHER: (SOURCE_INTUNE,),
        },
        "defender_counted_types": _PC_AND_MAC,
        "exclude_department_macs": True,
        "exclude_department_users": True,
    },
    "legacy": {
        "label": "Legacy",
        "desc": "Earlier generation, mobile devices also need Defender, department devices are measured",
        "requirements": {
            DeviceType.MACBOOK: (SOURCE_JAMF, SOURCE_DEFENDER),
            DeviceType.DESKTOP: (SOURCE_INTUNE, SOURCE_DEFENDER),
            DeviceType.NOTEBOOK: (SOURCE_INTUNE, SOURCE_DEFENDER),
            DeviceType.IPHONE: (SOURCE_INTUNE, SOURCE_DEFENDER),
            DeviceType.IPAD: (SOURCE_INTUNE, SOURCE_DEFENDER),
            DeviceType.MONITOR: (SOURCE_INTUNE,),
            DeviceType.OTHER: (SOURCE_INTUNE,),
        },
        "defender_counted_types": _PC_AND_MAC + (DeviceType.IPHONE, DeviceType.IPAD),
        "exclude_department_macs": False,
        "exclude_department_users": False,
    },
}

DEFAULT_POLICY = "current"

POLICY_OPTIONS = [(k, v["label"]) for k, v in COMPLIANCE_POLICIES.items()]


def get_policy(name: str) -> dict:
    """Return the policy table registered under ``name``."""
    try:
        return COMPLIANCE_POLICIES[name]
    except KeyError:
        options = ", ".join(COMPLIANCE_POLICIES)
        raise ValueError(f"Unknown compliance policy '{name}'. Options: {options}") from None
