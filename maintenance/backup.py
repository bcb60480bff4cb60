"""
Backup utilities for destructive maintenance operations.

Documents about to be deleted are snapshotted to JSON first so a bad cleanup
can be reconstructed by hand.
"""
import json
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Iterable

from loguru import logger

from maintenance.config import settings


@dataclass
class BackupResult:
    success: bool
    backup_id: str
    path: Path | None = None
    document_count: int = 0
    error: str | None = None


def atomic_write_json(dest_path: Path, data: Any, indent: int | None = None) -> Path:
    """
    Write JSON data atomically - only replaces target file on success.

    1. Writes to temp file in same directory
    2. Validates JSON is readable
    3. Renames temp to final (atomic on same filesystem)

    Values JSON cannot represent (ObjectId, datetime) are written as strings.
    """
    dest_path = Path(dest_path)
    dest_path.parent.mkdir(parents=True, exist_ok=True)

    temp_path = dest_path.with_suffix(dest_path.suffix + ".tmp")

    try:
        with open(temp_path, "w", encoding="utf-8") as f:
            json.dump(data, f, default=str, ensure_ascii=False, indent=indent)

        with open(temp_path, encoding="utf-8") as f:
            json.load(f)

        temp_path.replace(dest_path)
        return dest_path

    except Exception:
        if temp_path.exists():
            temp_path.unlink()
        raise


def create_backup(
    label: str,
    documents: Iterable[dict[str, Any]],
    backup_dir: Path | None = None,
) -> BackupResult:
    """Snapshot documents before they are deleted.

    Args:
        label: Short name for what is being backed up (e.g. "users")
        documents: Raw MongoDB documents
        backup_dir: Override for the configured backup directory

    Returns:
        BackupResult with the written path and success status
    """
    backup_dir = Path(backup_dir or settings.maintenance.backup_dir)
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S%f")
    documents = list(documents)

    result = BackupResult(success=True, backup_id=timestamp, document_count=len(documents))
    dest = backup_dir / f"{label}_{timestamp}.json"

    try:
        result.path = atomic_write_json(dest, documents, indent=2)
        logger.info(f"Backed up {len(documents)} {label} documents -> {dest}")
    except OSError as e:
        result.success = False
        result.error = f"Backup to {dest} failed: {e}"
        logger.error(result.error)

    return result


def list_backups(backup_dir: Path | None = None) -> list[tuple[str, str, Path]]:
    """List available backups.

    Returns:
        List of tuples (timestamp, label, path) sorted by timestamp descending
    """
    backup_dir = Path(backup_dir or settings.maintenance.backup_dir)
    if not backup_dir.exists():
        return []

    backups = []
    for f in backup_dir.glob("*_*_*.json"):
        # <label>_<YYYYmmdd>_<HHMMSS[ffffff]>.json; labels may contain underscores
        label, date_part, time_part = f.stem.rsplit("_", 2)
        backups.append((f"{date_part}_{time_part}", label, f))

    return sorted(backups, reverse=True)
