"""Backup file export and import.

エクスポートは日付入りのファイル名で整形済み JSON を書き出し、
インポートはファイル読み込みだけを非同期に行う（状態の変更は同期的）。
"""

from __future__ import annotations

from datetime import date
from pathlib import Path

import anyio

BACKUP_PREFIX = "spaced-repetition-backup-"


def backup_filename(today: date) -> str:
    """Return `spaced-repetition-backup-YYYY-MM-DD.json` for the given day."""

    return f"{BACKUP_PREFIX}{today.isoformat()}.json"


def write_backup(directory: str | Path, text: str, today: date) -> Path:
    target_dir = Path(directory)
    target_dir.mkdir(parents=True, exist_ok=True)
    path = target_dir / backup_filename(today)
    path.write_text(text, encoding="utf-8")
    return path


async def read_backup(path: str | Path) -> str:
    return await anyio.Path(path).read_text(encoding="utf-8")
