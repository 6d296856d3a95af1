"""Review scheduler built on a fixed interval ladder.

保存したアイテムを `[1, 3, 7, 14, 30]` 日の段階で復習させる。
- 思い出せたら段階を 1 つ進め、忘れたら最初（1 日後）からやり直す
- 最終段階に達したアイテムは「習得済み」として 30 日間隔で復習し続ける
- 状態は毎回ストア全体を読み込み、変更し、まとめて書き戻す（last-writer-wins）
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any

from .backends import PersistenceBackend, build_backend
from .clock import Clock, SystemClock
from .codec import Store, dumps_store, loads_store
from .config import DEFAULT_INTERVALS, DEFAULT_STORAGE_KEY, Settings
from .errors import StoreFormatError
from .logging import logger
from .models import LEVELS, ItemType, Level, LevelStats, ReviewItem, StatsReport, make_key
from .prompts import Prompter, ScriptedPrompter
from .transfer import read_backup, write_backup

RESET_CONFIRM_MESSAGE = "Delete all review data? This cannot be undone."
IMPORT_CONFIRM_MESSAGE = "All current review data will be replaced. Continue?"
IMPORT_FAILED_MESSAGE = "Could not import review data. Make sure the file is a valid backup."


class ReviewScheduler:
    """Owns the review store and every scheduling decision.

    ホストアプリケーションが一度だけ生成し、必要な呼び出し側へ渡す。
    永続化・時計・確認ダイアログはすべてコンストラクタで注入する。
    """

    def __init__(
        self,
        backend: PersistenceBackend,
        *,
        clock: Clock | None = None,
        prompter: Prompter | None = None,
        storage_key: str = DEFAULT_STORAGE_KEY,
        intervals: Sequence[int] = DEFAULT_INTERVALS,
    ) -> None:
        if not intervals:
            raise ValueError("intervals must not be empty")
        self.backend = backend
        self.clock = clock or SystemClock()
        # 確認手段が無い場合は破壊的操作を常に拒否する
        self.prompter = prompter or ScriptedPrompter(default=False)
        self.storage_key = storage_key
        self.intervals: tuple[int, ...] = tuple(intervals)

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        *,
        clock: Clock | None = None,
        prompter: Prompter | None = None,
    ) -> "ReviewScheduler":
        return cls(
            build_backend(settings),
            clock=clock,
            prompter=prompter,
            storage_key=settings.storage_key,
            intervals=settings.intervals,
        )

    # --- persistence ---
    def load(self) -> Store:
        """Return the whole store; an absent blob yields an empty mapping."""

        return loads_store(self.backend.get_item(self.storage_key), source=self.storage_key)

    def save(self, store: Mapping[str, ReviewItem]) -> None:
        self.backend.set_item(self.storage_key, dumps_store(store))

    # --- interval math ---
    def interval_for(self, review_count: int) -> int:
        """Days until the next review after `review_count` successful recalls."""

        index = min(max(review_count, 0), len(self.intervals) - 1)
        return self.intervals[index]

    def calculate_next_review(self, review_count: int, now: datetime | None = None) -> datetime:
        current = now if now is not None else self.clock.now()
        return current + timedelta(days=self.interval_for(review_count))

    @property
    def mastery_threshold(self) -> int:
        return len(self.intervals) - 1

    # --- item lifecycle ---
    def save_item(
        self,
        level: Level | str,
        item_type: ItemType | str,
        item_id: int,
        data: Mapping[str, Any],
    ) -> ReviewItem:
        """Save an item, or refresh the payload of an existing one.

        既存アイテムの場合は data と last_modified だけを更新し、
        復習回数や次回復習日には触れない。
        """

        key = make_key(level, item_type, item_id)
        store = self.load()
        now = self.clock.now()

        existing = store.get(key)
        if existing is not None:
            item = existing.model_copy(update={"data": dict(data), "last_modified": now})
        else:
            item = ReviewItem(
                level=Level(level),
                type=ItemType(item_type),
                id=int(item_id),
                data=dict(data),
                saved_date=now,
                last_reviewed=None,
                review_count=0,
                next_review_date=self.calculate_next_review(0, now),
                last_modified=now,
            )
        store[key] = item

        self.save(store)
        logger.info(
            "item_saved",
            key=key,
            english=item.data.get("english"),
            created=existing is None,
        )
        return item

    def add_item(
        self,
        level: Level | str,
        item_type: ItemType | str,
        item_id: int,
        data: Mapping[str, Any],
    ) -> ReviewItem:
        return self.save_item(level, item_type, item_id, data)

    def review_item(self, key: str, remembered: bool) -> ReviewItem | None:
        """Record one review and reschedule the item.

        - remembered=True: 段階を 1 つ進める
        - remembered=False: 段階を 0 に戻し、1 日後に再出題する
        存在しないキーはエラーログを出して何もせず None を返す。
        """

        store = self.load()
        existing = store.get(key)
        if existing is None:
            logger.error("review_item_not_found", key=key)
            return None

        now = self.clock.now()
        review_count = existing.review_count + 1 if remembered else 0
        item = existing.model_copy(
            update={
                "review_count": review_count,
                "next_review_date": self.calculate_next_review(review_count, now),
                "last_reviewed": now,
                "last_modified": now,
            }
        )
        store[key] = item

        self.save(store)
        logger.info(
            "item_reviewed",
            key=key,
            remembered=remembered,
            review_count=review_count,
            next_interval_days=self.interval_for(review_count),
        )
        return item

    def delete_item(self, key: str) -> bool:
        store = self.load()
        if key not in store:
            return False
        del store[key]
        self.save(store)
        logger.info("item_deleted", key=key)
        return True

    def remove_item(self, level: Level | str, item_type: ItemType | str, item_id: int) -> bool:
        return self.delete_item(make_key(level, item_type, item_id))

    def reset_all(self) -> bool:
        """Wipe the whole store after the user confirms."""

        if not self.prompter.confirm(RESET_CONFIRM_MESSAGE):
            return False
        self.backend.remove_item(self.storage_key)
        logger.warning("store_reset", storage_key=self.storage_key)
        return True

    # --- queries ---
    @staticmethod
    def _filter(
        items: Iterable[ReviewItem],
        level: Level | str | None,
        item_type: ItemType | str | None,
    ) -> list[ReviewItem]:
        wanted_level = Level(level) if level else None
        wanted_type = ItemType(item_type) if item_type else None
        return [
            item
            for item in items
            if (wanted_level is None or item.level == wanted_level)
            and (wanted_type is None or item.type == wanted_type)
        ]

    def get_due_items(
        self,
        level: Level | str | None = None,
        item_type: ItemType | str | None = None,
    ) -> list[ReviewItem]:
        """Items whose next review is at or before now, most overdue first."""

        now = self.clock.now()
        due = [
            item
            for item in self._filter(self.load().values(), level, item_type)
            if item.next_review_date <= now
        ]
        due.sort(key=lambda item: item.next_review_date)
        return due

    def get_all_items(
        self,
        level: Level | str | None = None,
        item_type: ItemType | str | None = None,
    ) -> list[ReviewItem]:
        """All matching items, most recently saved first."""

        items = self._filter(self.load().values(), level, item_type)
        items.sort(key=lambda item: item.saved_date, reverse=True)
        return items

    def get_statistics(self, level: Level | str | None = None) -> StatsReport:
        """Aggregate counts for `level` (or all levels).

        by_level は level 引数を無視して常に 6 レベル分を返す。
        """

        all_items = self.get_all_items(level)
        due_items = self.get_due_items(level)

        by_level: dict[Level, LevelStats] = {}
        for lvl in LEVELS:
            level_items = self.get_all_items(lvl)
            by_level[lvl] = LevelStats(
                total=len(level_items),
                due_today=len(self.get_due_items(lvl)),
                vocab=sum(1 for item in level_items if item.type == ItemType.vocab),
                sentences=sum(1 for item in level_items if item.type == ItemType.sentence),
            )

        return StatsReport(
            total=len(all_items),
            due_today=len(due_items),
            reviewed=sum(1 for item in all_items if item.review_count > 0),
            mastered=sum(1 for item in all_items if item.review_count >= self.mastery_threshold),
            by_level=by_level,
        )

    # --- export / import ---
    def export_data(self, directory: str | Path) -> Path:
        """Write a pretty-printed backup named after today's date."""

        store = self.load()
        path = write_backup(directory, dumps_store(store, indent=2), self.clock.now().date())
        logger.info("store_exported", path=str(path), items=len(store))
        return path

    def import_text(self, text: str, *, source: str | None = None) -> bool:
        """Replace the store with a parsed backup after confirmation.

        形式が不正な場合はユーザーへ通知し、状態は変更しない。
        """

        try:
            store = loads_store(text, source=source, allow_empty=False)
        except StoreFormatError as exc:
            logger.error("store_import_failed", source=source, error=str(exc))
            self.prompter.alert(IMPORT_FAILED_MESSAGE)
            return False

        if not self.prompter.confirm(IMPORT_CONFIRM_MESSAGE):
            return False
        self.save(store)
        logger.info("store_imported", source=source, items=len(store))
        return True

    async def import_data(self, path: str | Path) -> bool:
        try:
            text = await read_backup(path)
        except (OSError, UnicodeDecodeError) as exc:
            logger.error("store_import_failed", source=str(path), error=str(exc))
            self.prompter.alert(IMPORT_FAILED_MESSAGE)
            return False
        return self.import_text(text, source=str(path))
