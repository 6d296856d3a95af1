"""User confirmation and alert capability.

リセットやインポートなど取り消せない操作の前に確認を取り、
インポート失敗などをユーザーへ一度だけ通知する。
"""

from __future__ import annotations

from collections import deque
from collections.abc import Callable, Iterable
from typing import Protocol

_YES_ANSWERS = frozenset({"y", "yes"})


class Prompter(Protocol):
    def confirm(self, message: str) -> bool: ...

    def alert(self, message: str) -> None: ...


class ConsolePrompter:
    """Prompt on a terminal; only an explicit `y`/`yes` counts as consent."""

    def __init__(
        self,
        input_func: Callable[[str], str] = input,
        output_func: Callable[[str], None] = print,
    ) -> None:
        self._input = input_func
        self._output = output_func

    def confirm(self, message: str) -> bool:
        try:
            answer = self._input(f"{message} [y/N] ")
        except EOFError:
            return False
        return answer.strip().lower() in _YES_ANSWERS

    def alert(self, message: str) -> None:
        self._output(message)


class ScriptedPrompter:
    """Answers confirmations from a queue and records every message.

    キューが空になった後は `default` を返す。ヘッドレス実行やテストで使う。
    """

    def __init__(self, answers: Iterable[bool] = (), *, default: bool = False) -> None:
        self._answers: deque[bool] = deque(answers)
        self.default = default
        self.confirmations: list[str] = []
        self.alerts: list[str] = []

    def confirm(self, message: str) -> bool:
        self.confirmations.append(message)
        if self._answers:
            return self._answers.popleft()
        return self.default

    def alert(self, message: str) -> None:
        self.alerts.append(message)
