#!/usr/bin/env python3
"""
Stream Segmenter - Core Application
プレゼンテーション層：StreamSegmenterAppコアロジック
"""

from pathlib import Path

from stream_segmenter.domain import (
    CoreError,
    PipelineEvent,
    Segment,
    SegmentationSession,
    Settings,
)
from stream_segmenter.infrastructure import (
    Pipeline,
    Runtime,
    RuntimeServices,
    StreamClock,
)
from stream_segmenter.infrastructure.audio import FrameSource
from stream_segmenter.infrastructure.logger import Logger
from stream_segmenter.infrastructure.persistence import (
    SegmentWavExporter,
    SessionJsonExporter,
)


class StreamSegmenterApp:
    """
    Stream Segmenterコアアプリケーション

    責務:
    - Runtimeとパイプライン（VAD → メーター → セグメンタ）の初期化
    - イベントサブスクリプションの設定（セッション記録・WAV保存）
    - ソースの実行とセッションの保存

    Note:
    - UI層は self.pipeline.events を直接購読して表示を行う
    """

    def __init__(
        self,
        settings: Settings,
        logger: Logger | None = None,
        output_dir: Path | None = None,
    ) -> None:
        """
        Args:
            settings: アプリケーション設定
            logger: ロガー（Noneの場合は設定から生成）
            output_dir: セグメントWAVの保存先（Noneの場合は保存しない）
        """
        self.settings = settings
        self.session = SegmentationSession()
        self.saved_files: list[Path] = []

        # 1. Runtime初期化（ファイル入力でもflush時刻がストリーム時刻になる時計）
        self.runtime = Runtime(
            settings=settings,
            services=RuntimeServices(
                logger=logger or Logger.from_settings(settings.logging),
                clock=StreamClock(),
            ),
        )

        # 2. パイプライン初期化
        self.vad_stage = self.runtime.create_vad_stage()
        self.pipeline: Pipeline = self.runtime.create_pipeline(
            stages=[self.vad_stage, self.runtime.create_meter_stage()],
        )

        # 3. WAVエクスポーター初期化
        self.wav_exporter = SegmentWavExporter(output_dir) if output_dir else None

        # 4. イベントサブスクリプション設定
        self._setup_event_subscriptions()

    def _setup_event_subscriptions(self) -> None:
        """イベントサブスクリプションを設定"""
        self.pipeline.events.on(PipelineEvent.SEGMENT, self._on_segment)
        self.pipeline.events.on(PipelineEvent.ERROR, self._on_error)

    # ========== イベントハンドラ ==========

    def _on_segment(self, segment: Segment) -> None:
        """セグメント確定時：セッション記録とWAV保存"""
        self.session.add_segment(segment)
        if self.wav_exporter:
            path = self.wav_exporter.save(segment)
            if path is not None:
                self.saved_files.append(path)

    def _on_error(self, error: CoreError) -> None:
        """エラー発生時：セッションに記録"""
        self.session.add_error(error)

    # ========== 実行制御 ==========

    def run(self, source: FrameSource) -> SegmentationSession:
        """
        ソースを最後まで処理

        Returns:
            SegmentationSession: 処理結果のセッション
        """
        try:
            self.runtime.run(source, self.pipeline)
        finally:
            self.pipeline.dispose()
        return self.session

    def save_session(self, output_path: Path | None = None) -> Path:
        """セッションをJSONで保存"""
        return SessionJsonExporter.save_to_file(self.session, output_path)
