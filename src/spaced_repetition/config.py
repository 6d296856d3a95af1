from typing import Annotated, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic_settings.sources.types import NoDecode


DEFAULT_STORAGE_KEY = "spacedRepetitionData"
DEFAULT_INTERVALS: tuple[int, ...] = (1, 3, 7, 14, 30)


class Settings(BaseSettings):
    """Scheduler settings loaded from environment variables.

    環境変数（`SRS_` プレフィックス）または `.env` から読み込まれる設定。
    - storage_key: 永続化ブロブを保存する名前空間キー
    - backend: 永続化バックエンドの種類（memory/file/sqlite）
    - intervals: 復習間隔の段階（日数）
    """

    storage_key: str = Field(
        default=DEFAULT_STORAGE_KEY,
        description="Namespace key of the persisted store blob / 永続化ブロブのキー",
    )
    backend: Literal["memory", "file", "sqlite"] = Field(
        default="file",
        description="Persistence backend kind / 永続化バックエンドの種類",
    )
    data_dir: str = Field(
        default=".data",
        description="Directory for the JSON file backend / JSON ファイル保存先ディレクトリ",
    )
    sqlite_path: str = Field(
        default=".data/srs.sqlite3",
        description="Path to the SQLite key-value database / SQLite DB パス",
    )
    intervals: Annotated[tuple[int, ...], NoDecode] = Field(
        default=DEFAULT_INTERVALS,
        description="Review interval ladder in days (comma separated) / 復習間隔（日数、カンマ区切り）",
    )
    log_level: str = Field(
        default="INFO",
        description="Log level for the stdlib root logger / ログレベル",
    )

    model_config = SettingsConfigDict(
        env_prefix="SRS_",
        env_file=".env",
        extra="ignore",
        case_sensitive=False,
    )

    @field_validator("intervals", mode="before")
    @classmethod
    def _normalise_intervals(cls, raw_intervals: object) -> tuple[int, ...] | object:
        """Accept a comma separated string as well as a sequence.

        なぜ: 環境変数では `1,3,7,14,30` のような文字列でしか渡せないため、
        モデル検証の前にタプルへ変換しておく。
        """

        if isinstance(raw_intervals, str):
            parts = [part.strip() for part in raw_intervals.split(",")]
            return tuple(int(part) for part in parts if part)
        return raw_intervals

    @field_validator("intervals", mode="after")
    @classmethod
    def _validate_intervals(cls, value: tuple[int, ...]) -> tuple[int, ...]:
        if not value:
            raise ValueError("SRS_INTERVALS must contain at least one interval")
        if any(days <= 0 for days in value):
            raise ValueError("SRS_INTERVALS must only contain positive day counts")
        return value


settings = Settings()
