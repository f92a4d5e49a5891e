#!/usr/bin/env python3
"""
Stream Segmenter - Runtime Module
サービス（ロガー・時計・ID生成）の配線とソース駆動を行うモジュール
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Literal

from stream_segmenter.domain import (
    CoreError,
    EnergyVADSettings,
    Frame,
    PipelineEvent,
    SegmenterSettings,
    Settings,
)

from .audio import FrameSource
from .logger import Logger
from .pipeline import Pipeline, Stage, monotonic_ms, random_id
from .stages import EnergyVadStage, MeterStage, SegmenterStage

SegmenterOption = SegmenterSettings | Stage | Literal[False] | None


class StreamClock:
    """
    ストリーム時刻の時計

    観測した最後のフレームの終端時刻（ミリ秒）を返す。ファイル入力などで
    flush時の終了時刻を実時間ではなくストリーム上の時刻に揃える。
    """

    def __init__(self) -> None:
        self.now_ms = 0.0

    def __call__(self) -> float:
        return self.now_ms

    def observe(self, frame: Frame) -> None:
        self.now_ms = max(self.now_ms, frame.ts_ms + frame.duration_ms)


@dataclass
class RuntimeServices:
    """パイプラインへ注入する共有サービス"""

    logger: Logger = field(default_factory=Logger)
    clock: Callable[[], float] = monotonic_ms
    create_id: Callable[[], str] = random_id


class Runtime:
    """
    パイプライン実行環境

    責務:
    - 設定とサービスからパイプライン・標準ステージを生成
    - フレームソースをパイプラインへ接続して最後まで駆動
    - error イベントのログ出力
    """

    def __init__(
        self,
        settings: Settings | None = None,
        services: RuntimeServices | None = None,
    ) -> None:
        self.settings = settings or Settings()
        self.services = services or RuntimeServices(
            logger=Logger.from_settings(self.settings.logging)
        )
        self.logger = self.services.logger

    # ========== 生成 ==========

    def create_segmenter(self, settings: SegmenterSettings | None = None) -> Stage:
        """セグメンタを生成（省略時は設定ファイルの値）"""
        return SegmenterStage(settings or self.settings.segmenter)

    def create_vad_stage(self, settings: EnergyVADSettings | None = None) -> EnergyVadStage:
        """エネルギーVADを生成（省略時は設定ファイルの値）"""
        return EnergyVadStage(settings or self.settings.vad)

    def create_meter_stage(self) -> MeterStage:
        return MeterStage()

    def _resolve_segmenter(self, segmenter: SegmenterOption) -> Stage | None:
        if segmenter is False:
            return None
        if isinstance(segmenter, Stage):
            return segmenter
        return self.create_segmenter(segmenter)

    def create_pipeline(
        self,
        stages: Sequence[Stage] = (),
        segmenter: SegmenterOption = None,
    ) -> Pipeline:
        """
        パイプラインを生成

        Args:
            stages: 先頭から登録するステージ
            segmenter: 末尾に追加するセグメンタ（設定/ステージを指定、Falseで追加しない）

        Returns:
            Pipeline: error イベントをログ出力するよう購読済みのパイプライン
        """
        pipeline = Pipeline(
            now=self.services.clock,
            create_id=self.services.create_id,
            logger=self.logger.child("pipeline"),
            pending_capacity=self.settings.pipeline.pending_capacity,
        )
        for stage in stages:
            pipeline.use(stage)
        segmenter_stage = self._resolve_segmenter(segmenter)
        if segmenter_stage is not None:
            pipeline.use(segmenter_stage)

        pipeline.events.on(PipelineEvent.ERROR, self._log_error)
        return pipeline

    def _log_error(self, error: CoreError) -> None:
        self.logger.error(
            error.message,
            lambda: {"code": error.code, "cause": repr(error.cause)}
            if error.cause is not None
            else {"code": error.code},
        )

    # ========== 実行 ==========

    def run(
        self, source: FrameSource, pipeline: Pipeline, auto_flush: bool = True
    ) -> None:
        """
        ソースの全フレームをパイプラインへ流す

        Args:
            source: フレームソース
            pipeline: 対象パイプライン
            auto_flush: ソース終了後にflushして記録中の区間を確定するか
        """
        clock = self.services.clock

        def on_frame(frame: Frame) -> None:
            if isinstance(clock, StreamClock):
                clock.observe(frame)
            pipeline.push(frame)

        try:
            source.start(on_frame)
            if auto_flush:
                pipeline.flush()
        finally:
            source.stop()
