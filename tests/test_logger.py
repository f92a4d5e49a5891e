"""Loggerのテスト"""

import pytest

from stream_segmenter.domain import LoggingSettings, LogLevel
from stream_segmenter.infrastructure import NOOP_LOGGER, LogEntry, Logger, console_output


@pytest.fixture
def entries() -> list[LogEntry]:
    return []


class TestLevels:
    """レベル判定のテスト"""

    def test_filters_below_level(self, entries: list[LogEntry]) -> None:
        """設定レベル未満のログは出力しない"""
        logger = Logger(level=LogLevel.WARNING, output=entries.append)

        logger.debug("debug")
        logger.info("info")
        logger.warning("warning")
        logger.error("error")

        assert [entry.message for entry in entries] == ["warning", "error"]
        assert [entry.level for entry in entries] == [LogLevel.WARNING, LogLevel.ERROR]

    def test_silent_outputs_nothing(self, entries: list[LogEntry]) -> None:
        logger = Logger(level=LogLevel.SILENT, output=entries.append)

        logger.error("error")

        assert entries == []
        assert NOOP_LOGGER.is_enabled_for(LogLevel.ERROR) is False

    def test_from_settings(self, entries: list[LogEntry]) -> None:
        settings = LoggingSettings(level=LogLevel.DEBUG, namespace="app")
        logger = Logger.from_settings(settings, output=entries.append)

        logger.debug("hello")

        assert entries[0].namespace == "app"
        assert entries[0].level == LogLevel.DEBUG


class TestContext:
    """コンテキストとネームスペースのテスト"""

    def test_lazy_context_is_not_evaluated_when_filtered(
        self, entries: list[LogEntry]
    ) -> None:
        """レベルで除外されたログのコンテキスト関数は呼ばれない"""
        calls: list[int] = []

        def build() -> dict[str, int]:
            calls.append(1)
            return {"value": 1}

        logger = Logger(level=LogLevel.INFO, output=entries.append)
        logger.debug("skipped", build)
        logger.info("kept", build)

        assert calls == [1]
        assert entries[0].context == {"value": 1}

    def test_child_namespace(self, entries: list[LogEntry]) -> None:
        """childは名前空間を連結し、レベルと出力先を引き継ぐ"""
        logger = Logger(level=LogLevel.INFO, namespace="root", output=entries.append)
        child = logger.child("pipeline").child("segmenter")

        child.debug("hidden")
        child.info("shown")

        assert [(entry.namespace, entry.message) for entry in entries] == [
            ("root:pipeline:segmenter", "shown")
        ]


class TestConsoleOutput:
    def test_writes_to_stderr(self, capsys: pytest.CaptureFixture[str]) -> None:
        """namespace・メッセージ・コンテキストを標準エラーへ1行で出力"""
        console_output(
            LogEntry(
                level=LogLevel.WARNING,
                namespace="stream_segmenter",
                message="queue full",
                context={"dropped": 3},
                timestamp=0.0,
            )
        )

        captured = capsys.readouterr()
        assert captured.out == ""
        assert "[stream_segmenter] queue full (dropped=3)" in captured.err
