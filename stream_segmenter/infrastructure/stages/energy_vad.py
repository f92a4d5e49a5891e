#!/usr/bin/env python3
"""
Stream Segmenter - Energy VAD Stage
フレームのエネルギーから発話/無音を判定するステージ
"""

import math
from dataclasses import dataclass
from typing import Any

from stream_segmenter.domain import (
    EnergyVADSettings,
    Frame,
    PipelineEvent,
    VADScore,
)

from ..dsp import Hysteresis, rms, to_float32
from ..pipeline import Stage, StageContext


@dataclass
class _SmoothingState:
    """平滑化の内部状態"""

    has_value: bool = False
    smoothed_db: float = 0.0
    last_ts_ms: float = 0.0


class EnergyVadStage(Stage):
    """
    エネルギーベースのVAD

    処理（フレームごと）:
    1. RMSを計算し min_rms でクランプして dBFS に変換
    2. 経過時間で重み付けした指数移動平均（重み = min(1, Δt / smooth_ms)）
    3. スコア = (平滑値 - floor) / (ceiling - floor) を 0〜1 にクランプ
    4. 平滑値を閾値（ヒステリシス付き）と比較して発話判定し、vad イベントを発行

    時間重み付きのため、フレーム長が変動しても判定境界が変わらない。
    """

    name = "vad-energy"

    def __init__(self, settings: EnergyVADSettings | None = None) -> None:
        self.settings = settings or EnergyVADSettings()
        self._context: StageContext | None = None
        self._state = _SmoothingState()
        self._decision = self._create_decision()

    def _create_decision(self) -> Hysteresis:
        return Hysteresis(
            enter=self.settings.threshold_db,
            exit=self.settings.exit_threshold_db,
            hold_ms=self.settings.hold_ms,
        )

    def update_config(self, **changes: Any) -> None:
        """
        設定を部分更新（平滑化状態は保持）

        Raises:
            ValueError: 不正な設定値の場合（現在の設定は変更されない）
        """
        merged = {**self.settings.model_dump(), **changes}
        settings = EnergyVADSettings(**merged)
        self._decision.configure(
            enter=settings.threshold_db,
            exit=settings.exit_threshold_db,
            hold_ms=settings.hold_ms,
        )
        self.settings = settings

    def setup(self, context: StageContext) -> None:
        self._context = context
        self._state = _SmoothingState()
        self._decision.reset()

    def _smooth(self, current_db: float, ts_ms: float) -> float:
        """経過時間で重み付けした指数移動平均"""
        state = self._state
        if not state.has_value:
            self._state = _SmoothingState(True, current_db, ts_ms)
            return current_db

        delta_ms = max(1.0, ts_ms - state.last_ts_ms)
        weight = min(1.0, delta_ms / self.settings.smooth_ms)
        smoothed = state.smoothed_db + (current_db - state.smoothed_db) * weight
        self._state = _SmoothingState(True, smoothed, ts_ms)
        return smoothed

    def handle(self, frame: Frame) -> None:
        if self._context is None:
            return
        settings = self.settings

        energy = max(rms(to_float32(frame.pcm)), settings.min_rms)
        current_db = 20.0 * math.log10(energy)
        smoothed_db = self._smooth(current_db, frame.ts_ms)

        span = settings.ceiling_db - settings.floor_db
        score = min(1.0, max(0.0, (smoothed_db - settings.floor_db) / span))
        speech = self._decision.update(smoothed_db, frame.ts_ms)

        self._context.emit(
            PipelineEvent.VAD, VADScore(ts_ms=frame.ts_ms, score=score, speech=speech)
        )

    @property
    def smoothed_db(self) -> float | None:
        """現在の平滑化レベル（未初期化ならNone）"""
        return self._state.smoothed_db if self._state.has_value else None

    def teardown(self) -> None:
        self._state = _SmoothingState()
        self._decision.reset()
        self._context = None
