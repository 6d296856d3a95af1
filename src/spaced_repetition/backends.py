"""Key-value persistence backends.

スケジューラは状態全体を 1 つの文字列ブロブとして扱い、バックエンドは
`get_item`/`set_item`/`remove_item` だけを提供する。テスト用のメモリ実装、
JSON ファイル実装、SQLite 実装を差し替えて使える。
"""

from __future__ import annotations

import os
import sqlite3
import tempfile
from pathlib import Path
from typing import Protocol, runtime_checkable

from .config import Settings


@runtime_checkable
class PersistenceBackend(Protocol):
    def get_item(self, key: str) -> str | None: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...


class MemoryBackend:
    """In-process backend; state lives as long as the object."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> str | None:
        return self._data.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove_item(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileBackend:
    """One `<key>.json` file per namespace key under a directory.

    書き込みは一時ファイルに出力してから os.replace で差し替えるため、
    途中でプロセスが落ちても読み手が書きかけのファイルを見ることはない。
    """

    def __init__(self, directory: str | Path) -> None:
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def get_item(self, key: str) -> str | None:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set_item(self, key: str, value: str) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.directory, prefix=f".{key}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(value)
            os.replace(tmp_name, self._path(key))
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def remove_item(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)


class SQLiteBackend:
    """SQLite-backed key-value table.

    接続は操作ごとに開いて閉じる。WAL モードで読み手と書き手の衝突を減らす。
    """

    def __init__(self, db_path: str) -> None:
        self.db_path = db_path
        self._ensure_dirs()
        self._init_db()

    # --- low-level helpers ---
    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path, timeout=10.0, isolation_level=None, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        with conn:  # autocommit on pragma
            conn.execute("PRAGMA journal_mode=WAL;")
        return conn

    def _ensure_dirs(self) -> None:
        p = Path(self.db_path)
        if p.parent and not p.parent.exists():
            p.parent.mkdir(parents=True, exist_ok=True)

    def _init_db(self) -> None:
        conn = self._connect()
        try:
            with conn:
                conn.execute(
                    """
                    CREATE TABLE IF NOT EXISTS kv (
                        key TEXT PRIMARY KEY,
                        value TEXT NOT NULL
                    );
                    """
                )
        finally:
            conn.close()

    # --- public API ---
    def get_item(self, key: str) -> str | None:
        conn = self._connect()
        try:
            row = conn.execute("SELECT value FROM kv WHERE key = ?;", (key,)).fetchone()
            return None if row is None else str(row["value"])
        finally:
            conn.close()

    def set_item(self, key: str, value: str) -> None:
        conn = self._connect()
        try:
            with conn:
                conn.execute(
                    "INSERT OR REPLACE INTO kv(key, value) VALUES (?, ?);",
                    (key, value),
                )
        finally:
            conn.close()

    def remove_item(self, key: str) -> None:
        conn = self._connect()
        try:
            with conn:
                conn.execute("DELETE FROM kv WHERE key = ?;", (key,))
        finally:
            conn.close()


def build_backend(settings: Settings) -> PersistenceBackend:
    """Create the backend selected by `settings.backend`."""

    if settings.backend == "memory":
        return MemoryBackend()
    if settings.backend == "sqlite":
        return SQLiteBackend(settings.sqlite_path)
    return JsonFileBackend(settings.data_dir)
