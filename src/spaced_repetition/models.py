from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import AwareDatetime, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Level(str, Enum):
    """CEFR level an item belongs to."""

    a1 = "a1"
    a2 = "a2"
    b1 = "b1"
    b2 = "b2"
    c1 = "c1"
    c2 = "c2"


class ItemType(str, Enum):
    """Kind of learning unit."""

    vocab = "vocab"
    sentence = "sentence"


# byLevel の集計は常にこの順序で全レベルを返す。
LEVELS: tuple[Level, ...] = tuple(Level)


def make_key(level: Level | str, item_type: ItemType | str, item_id: int) -> str:
    """Return the composite key `level_type_id` addressing one item."""

    return f"{Level(level).value}_{ItemType(item_type).value}_{int(item_id)}"


class _CamelModel(BaseModel):
    # 永続化フォーマットは camelCase（savedDate など）。Python 側は snake_case。
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=False,
        extra="ignore",
    )


class ReviewItem(_CamelModel):
    """One tracked learning unit and its scheduling state.

    - data: 呼び出し側が渡すペイロード（english/arabic/pronunciation など）をそのまま保持
    - review_count: 連続で思い出せた回数。忘れると 0 に戻る
    - next_review_date: 次回復習日時（UTC）
    日時はタイムゾーン付きのみ受け付ける。naive な値は時計の UTC と比較できない。
    """

    level: Level
    type: ItemType
    id: int
    data: dict[str, Any] = Field(default_factory=dict)
    saved_date: AwareDatetime
    last_reviewed: AwareDatetime | None = None
    review_count: int = Field(default=0, ge=0)
    next_review_date: AwareDatetime
    last_modified: AwareDatetime

    @property
    def key(self) -> str:
        return make_key(self.level, self.type, self.id)


class LevelStats(_CamelModel):
    total: int = 0
    due_today: int = 0
    vocab: int = 0
    sentences: int = 0


class StatsReport(_CamelModel):
    """Review statistics.

    total/due_today/reviewed/mastered は level 引数で絞り込まれるが、
    by_level は引数に関係なく常に 6 レベルすべてを集計する。
    """

    total: int = 0
    due_today: int = 0
    reviewed: int = 0
    mastered: int = 0
    by_level: dict[Level, LevelStats] = Field(default_factory=dict)
