"""End-to-end reconciliation run: files in, InventorySnapshot out."""

import asyncio
import datetime
import logging
import uuid

from analysis.matcher import match_assets
from analysis.orphan_detector import detect_orphans
from analysis.stats_engine import compute_dashboard_stats
from config.settings import ReconcileConfig
from models.asset import SOURCE_DEFENDER, SOURCE_INTUNE, SOURCE_JAMF
from models.snapshot import InventorySnapshot
from parsers.inventory_parser import parse_inventory
from parsers.report_parser import build_source_index
from parsers.tabular_reader import read_table_async

logger = logging.getLogger(__name__)


class ReconciliationError(RuntimeError):
    """A run was aborted; no partial results are returned."""


async def _read_all(sources: dict) -> dict:
    """Decode every supplied file concurrently. Any failure aborts the whole run."""
    names = [name for name, src in sources.items() if src is not None]
    try:
        tables = await asyncio.gather(*(read_table_async(sources[name]) for name in names))
    except (ValueError, OSError) as exc:
        logger.error("File processing failed: %s", exc)
        raise ReconciliationError("file processing failed") from exc
    return dict(zip(names, tables))


async def run_reconciliation_async(
    inventory_file,
    intune_file=None,
    jamf_file=None,
    defender_file=None,
    config: ReconcileConfig = None,
    period_label: str = None,
    today: datetime.date = None,
    draft: bool = False,
) -> InventorySnapshot:
    """
    Ingest the inventory and up to three management reports and reconcile them.

    Parameters
    ----------
    inventory_file : path, bytes or file-like (required)
    intune_file, jamf_file, defender_file : same, optional
    config : ReconcileConfig, optional
    period_label : display label for the snapshot, defaults to "<Month> <Year>"
    today : reference date for ages and check-in deltas
    draft : mark the snapshot as a draft that can later be promoted

    Returns
    -------
    InventorySnapshot

    Raises
    ------
    ValueError if no inventory file is supplied.
    ReconciliationError if any file cannot be decoded.
    """
    if inventory_file is None:
        raise ValueError("Inventory file is required")
    config = config or ReconcileConfig()
    today = today or datetime.date.today()

    tables = await _read_all({
        "inventory": inventory_file,
        SOURCE_INTUNE: intune_file,
        SOURCE_JAMF: jamf_file,
        SOURCE_DEFENDER: defender_file,
    })

    parsed = parse_inventory(tables.pop("inventory"), config, today)
    indexes = {source: build_source_index(source, rows) for source, rows in tables.items()}

    assets = match_assets(
        parsed.assets,
        intune=indexes.get(SOURCE_INTUNE),
        jamf=indexes.get(SOURCE_JAMF),
        defender=indexes.get(SOURCE_DEFENDER),
        config=config,
        today=today,
    )
    orphans = detect_orphans(
        [indexes.get(s) for s in (SOURCE_INTUNE, SOURCE_JAMF, SOURCE_DEFENDER)],
        parsed.matched_keys,
    )
    cloud_counts = {
        source: indexes[source].row_count if source in indexes else 0
        for source in (SOURCE_INTUNE, SOURCE_JAMF, SOURCE_DEFENDER)
    }
    stats = compute_dashboard_stats(assets, cloud_counts, config, orphans)

    return InventorySnapshot(
        id=uuid.uuid4().hex,
        period_label=period_label or today.strftime("%B %Y"),
        date_created=datetime.datetime.now(),
        assets=tuple(assets),
        orphans=tuple(orphans),
        cloud_counts=cloud_counts,
        stats=stats,
        is_draft=draft,
    )


def run_reconciliation(inventory_file, intune_file=None, jamf_file=None, defender_file=None, **kwargs):
    """Synchronous wrapper around run_reconciliation_async."""
    return asyncio.run(
        run_reconciliation_async(inventory_file, intune_file, jamf_file, defender_file, **kwargs)
    )
