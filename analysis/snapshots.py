"""In-memory session store for reconciliation snapshots."""

import datetime
import uuid
from dataclasses import replace

from models.snapshot import InventorySnapshot


class SnapshotStore:
    """Holds the snapshots of one session. Nothing is written to disk."""

    def __init__(self):
        self._snapshots: dict[str, InventorySnapshot] = {}

    def __len__(self):
        return len(self._snapshots)

    def add(self, snapshot: InventorySnapshot) -> InventorySnapshot:
        if snapshot.id in self._snapshots:
            raise ValueError(f"Snapshot {snapshot.id} already stored")
        self._snapshots[snapshot.id] = snapshot
        return snapshot

    def get(self, snapshot_id: str) -> InventorySnapshot:
        try:
            return self._snapshots[snapshot_id]
        except KeyError:
            raise KeyError(f"No snapshot with id {snapshot_id}") from None

    def list(self) -> list:
        """Snapshots newest first."""
        return sorted(self._snapshots.values(), key=lambda s: s.date_created, reverse=True)

    def latest(self):
        snapshots = self.list()
        return snapshots[0] if snapshots else None

    def promote(self, draft_id: str, period_label: str) -> InventorySnapshot:
        """Copy a draft into a permanent snapshot with a new id and label."""
        draft = self.get(draft_id)
        if not draft.is_draft:
            raise ValueError(f"Snapshot {draft_id} is not a draft")
        promoted = replace(
            draft,
            id=uuid.uuid4().hex,
            period_label=period_label,
            date_created=datetime.datetime.now(),
            is_draft=False,
        )
        return self.add(promoted)
