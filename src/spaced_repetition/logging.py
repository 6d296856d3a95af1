"""Logging setup for the scheduler.

標準 logging と structlog を初期化し、保存・復習・インポートなどの
イベントを JSON 形式の構造化ログとして出力する。
"""

import logging

import structlog
from structlog import contextvars as structlog_contextvars

from .config import settings


def configure_logging(level: str | None = None) -> None:
    """Configure structlog for application-wide logging.

    ホストアプリケーションの起動時に一度だけ呼び出す。標準 logging を
    メッセージのみのフォーマットで初期化し、structlog で ISO タイムスタンプと
    ログレベルを付与した JSON を出力する。
    """
    logging.basicConfig(
        level=(level or settings.log_level).upper(),
        format="%(message)s",
        handlers=[logging.StreamHandler()],
        force=True,
    )
    structlog.configure(
        processors=[
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            structlog_contextvars.merge_contextvars,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(ensure_ascii=False),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
    )


logger = structlog.get_logger()
