"""Reconciliation settings: exemption lists, identifier prefixes, policy choice."""

from __future__ import annotations

import json
from dataclasses import dataclass, fields, replace
from pathlib import Path

from config.compliance_policies import DEFAULT_POLICY, get_policy
from parsers.field_resolver import tr_lower
from parsers.identifiers import normalize_identifier

DEFAULT_STOCK_KEYWORDS = ("stok", "stock", "depo", "depot", "warehouse", "ambar")


@dataclass(frozen=True)
class ReconcileConfig:
    """
    Policy inputs for one reconciliation run.

    Serial exemptions are stored normalized and user exemptions
    locale-lowercased, so lookups never depend on how the list was typed.
    """

    exempt_serials: frozenset = frozenset()
    exempt_users: tuple = ()
    policy_name: str = DEFAULT_POLICY
    department_user_prefixes: tuple = ("031",)
    user_id_pad_prefixes: tuple = ("248", "969")
    stock_keywords: tuple = DEFAULT_STOCK_KEYWORDS
    match_defender_by_user: bool = True

    def __post_init__(self):
        get_policy(self.policy_name)
        serials = frozenset(
            s for s in (normalize_identifier(v) for v in self.exempt_serials) if s
        )
        users = tuple(u for u in (tr_lower(v).strip() for v in self.exempt_users) if u)
        object.__setattr__(self, "exempt_serials", serials)
        object.__setattr__(self, "exempt_users", users)
        object.__setattr__(self, "stock_keywords", tuple(tr_lower(k) for k in self.stock_keywords))

    @property
    def policy(self) -> dict:
        return get_policy(self.policy_name)

    def with_policy(self, policy_name: str) -> "ReconcileConfig":
        return replace(self, policy_name=policy_name)


def load_config(path) -> ReconcileConfig:
    """Build a ReconcileConfig from a JSON file with the same field names."""
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a JSON object")

    known = {f.name for f in fields(ReconcileConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ValueError(f"Unknown config keys in {path}: {', '.join(unknown)}")

    kwargs = {}
    for key, value in data.items():
        if key == "exempt_serials":
            kwargs[key] = frozenset(value)
        elif isinstance(value, list):
            kwargs[key] = tuple(value)
        else:
            kwargs[key] = value
    return ReconcileConfig(**kwargs)
