#!/usr/bin/env python3
"""
Stream Segmenter - Logger
名前空間付きの構造化ロガー（コンソール出力はcolorama）
"""

import sys
import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from colorama import Fore, Style  # type: ignore[import-untyped]

from stream_segmenter.domain import LoggingSettings, LogLevel

LogContext = Mapping[str, Any] | Callable[[], Mapping[str, Any]]

_LEVEL_PRIORITY = {
    LogLevel.DEBUG: 0,
    LogLevel.INFO: 1,
    LogLevel.WARNING: 2,
    LogLevel.ERROR: 3,
    LogLevel.SILENT: 4,
}


@dataclass(frozen=True)
class LogEntry:
    """1件のログ"""

    level: LogLevel
    namespace: str
    message: str
    context: Mapping[str, Any] | None
    timestamp: float  # time.time()


LogOutput = Callable[[LogEntry], None]


def console_output(entry: LogEntry) -> None:
    """ログレベルに応じた色で標準エラーへ1行出力"""
    color_map = {
        LogLevel.DEBUG: Style.DIM,
        LogLevel.INFO: Fore.CYAN,
        LogLevel.WARNING: Fore.YELLOW,
        LogLevel.ERROR: Fore.RED,
    }
    color = color_map.get(entry.level, Fore.WHITE)
    line = f"[{entry.namespace}] {entry.message}"
    if entry.context:
        details = " ".join(f"{key}={value}" for key, value in entry.context.items())
        line = f"{line} ({details})"
    sys.stderr.write(f"{color}{line}{Style.RESET_ALL}\n")
    sys.stderr.flush()


class Logger:
    """
    名前空間付きロガー

    context には辞書か引数なし関数を渡せる。関数はレベル判定を通過した
    場合のみ評価されるため、重い情報の組み立てを遅延できる。
    """

    def __init__(
        self,
        level: LogLevel = LogLevel.INFO,
        namespace: str = "stream_segmenter",
        output: LogOutput = console_output,
    ) -> None:
        self.level = LogLevel(level)
        self.namespace = namespace
        self.output = output

    @classmethod
    def from_settings(
        cls, settings: LoggingSettings, output: LogOutput = console_output
    ) -> "Logger":
        """LoggingSettingsからロガーを生成"""
        return cls(level=settings.level, namespace=settings.namespace, output=output)

    def is_enabled_for(self, level: LogLevel) -> bool:
        if level == LogLevel.SILENT:
            return False
        return _LEVEL_PRIORITY[level] >= _LEVEL_PRIORITY[self.level]

    def _log(self, level: LogLevel, message: str, context: LogContext | None) -> None:
        if not self.is_enabled_for(level):
            return
        resolved = context() if callable(context) else context
        self.output(
            LogEntry(
                level=level,
                namespace=self.namespace,
                message=message,
                context=resolved,
                timestamp=time.time(),
            )
        )

    def debug(self, message: str, context: LogContext | None = None) -> None:
        self._log(LogLevel.DEBUG, message, context)

    def info(self, message: str, context: LogContext | None = None) -> None:
        self._log(LogLevel.INFO, message, context)

    def warning(self, message: str, context: LogContext | None = None) -> None:
        self._log(LogLevel.WARNING, message, context)

    def error(self, message: str, context: LogContext | None = None) -> None:
        self._log(LogLevel.ERROR, message, context)

    def child(self, namespace: str) -> "Logger":
        """名前空間を1段深くした子ロガー（レベルと出力先は継承）"""
        return Logger(
            level=self.level,
            namespace=f"{self.namespace}:{namespace}",
            output=self.output,
        )


# 何も出力しないロガー
NOOP_LOGGER = Logger(level=LogLevel.SILENT)
