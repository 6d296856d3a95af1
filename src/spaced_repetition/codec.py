"""Serialization of the whole store.

ストア全体（キー → ReviewItem）を 1 つの JSON オブジェクト文字列として
読み書きする。永続化バックエンドもインポート/エクスポートも同じ形式を使う。
"""

from __future__ import annotations

import json
from collections.abc import Mapping

from pydantic import TypeAdapter, ValidationError

from .errors import StoreFormatError
from .models import ReviewItem

Store = dict[str, ReviewItem]

_STORE_ADAPTER: TypeAdapter[Store] = TypeAdapter(Store)


def dumps_store(store: Mapping[str, ReviewItem], *, indent: int | None = None) -> str:
    """Serialize the store to JSON text with camelCase field names."""

    payload = {
        key: item.model_dump(mode="json", by_alias=True)
        for key, item in store.items()
    }
    return json.dumps(payload, ensure_ascii=False, indent=indent)


def loads_store(
    text: str | None,
    *,
    source: str | None = None,
    allow_empty: bool = True,
) -> Store:
    """Parse JSON text into a store mapping.

    allow_empty が真なら空文字や None は「未保存」として空のストアを返す。
    JSON として壊れている場合、トップレベルがオブジェクトでない場合、
    各値が ReviewItem として検証できない場合、キーがアイテムの level_type_id と
    一致しない場合は StoreFormatError を送出する。
    """

    if text is None or not text.strip():
        if allow_empty:
            return {}
        raise StoreFormatError("store is empty", source=source)
    try:
        raw = json.loads(text)
    except json.JSONDecodeError as exc:
        raise StoreFormatError(f"store is not valid JSON: {exc.msg}", source=source) from exc
    if not isinstance(raw, dict):
        raise StoreFormatError(
            f"store must be a JSON object, got {type(raw).__name__}", source=source
        )
    try:
        store = _STORE_ADAPTER.validate_python(raw)
    except ValidationError as exc:
        raise StoreFormatError(
            f"store contains invalid review items ({exc.error_count()} errors)",
            source=source,
        ) from exc
    # キーは必ず level_type_id と一致させる（別アイテムを別キーで保存させない）
    for key, item in store.items():
        if key != item.key:
            raise StoreFormatError(
                f"store key {key!r} does not match item identity {item.key!r}",
                source=source,
            )
    return store
