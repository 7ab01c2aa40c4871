"""Load ledger snapshots from YAML or JSON documents."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import structlog
import yaml  # type: ignore[import-untyped]

from ledgerflow.engine import LedgerSnapshot
from ledgerflow.errors import InputError
from ledgerflow.models import FinancialAccount, LedgerEntry, RecurringRule

logger = structlog.get_logger(__name__)


def _records(data: dict[str, Any], key: str, source: str) -> list[dict[str, Any]]:
    raw = data.get(key) or []
    if not isinstance(raw, list):
        raise InputError(f"{source}: {key} must be a list")
    for position, item in enumerate(raw):
        if not isinstance(item, dict):
            raise InputError(f"{source}: {key}[{position}] must be a mapping")
    return raw


def snapshot_from_dict(data: dict[str, Any], source: str = "snapshot") -> LedgerSnapshot:
    """Build a snapshot from ``accounts``, ``entries`` and ``rules`` record lists."""
    if not isinstance(data, dict):
        raise InputError(f"{source}: document must be a mapping")

    accounts = [FinancialAccount.from_record(r) for r in _records(data, "accounts", source)]
    entries = [LedgerEntry.from_record(r) for r in _records(data, "entries", source)]
    rules = [RecurringRule.from_record(r) for r in _records(data, "rules", source)]

    logger.debug(
        "snapshot_loaded",
        source=source,
        accounts=len(accounts),
        entries=len(entries),
        rules=len(rules),
    )
    return LedgerSnapshot.of(accounts, entries, rules)


def load_snapshot(path: str | Path) -> LedgerSnapshot:
    """Read a snapshot file. ``.json`` is parsed as JSON, anything else as YAML."""
    path = Path(path)
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise InputError(f"Cannot read snapshot {path}: {exc}") from exc

    try:
        if path.suffix.lower() == ".json":
            data = json.loads(raw)
        else:
            data = yaml.safe_load(raw) or {}
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise InputError(f"{path.name}: malformed document") from exc

    return snapshot_from_dict(data, source=path.name)
