#!/usr/bin/env python3
"""
Stream Segmenter - Segmenter Stage
VADイベントから発話区間を切り出すステートマシン
"""

import math
from dataclasses import dataclass
from typing import Any

from stream_segmenter.domain import (
    CoreError,
    Frame,
    PipelineEvent,
    SegmenterSettings,
    SpeechBoundary,
    VADScore,
)
from stream_segmenter.domain.events import Unsubscribe

from ..dsp import FloatRingBuffer, to_float32
from ..pipeline import Stage, StageContext
from .segment_buffer import SegmentBuffer


@dataclass
class SegmentState:
    """
    セグメンタの状態

    active=False が待機（Idle）、active=True が区間記録中（Active）。
    pending_silence_since は記録中に最初に無音を観測した時刻（ハングオーバー計測中）。
    """

    active: bool = False
    id: str = ""
    start_ms: float = 0.0
    pending_silence_since: float | None = None


class SegmenterStage(Stage):
    """
    発話区間セグメンタ

    状態遷移（vad イベント駆動）:
    - Idle + 発話 → 区間開始（プリロールを先頭に格納し speechStart を発行）
    - Active + 無音 → pending_silence_since を記録（記録済みなら上書きしない）
    - Active + 発話 → pending_silence_since を解除（区間継続）
    - Active + 無音継続が hangover_ms 以上（フレーム到着時に判定）
      → speechEnd、segment を順に発行して Idle へ

    プリロールは直近 pre_roll_ms 分を保持するスライディングウィンドウ。
    """

    name = "segmenter"

    def __init__(self, settings: SegmenterSettings | None = None) -> None:
        self.settings = settings or SegmenterSettings()
        self.state = SegmentState()
        self._context: StageContext | None = None
        self._unsubscribe_vad: Unsubscribe | None = None
        self._sample_rate = 0
        self._channels = 0
        self._pre_roll: FloatRingBuffer | None = None
        self._buffer = SegmentBuffer()

    def update_config(self, **changes: Any) -> None:
        """設定を部分更新（プリロール長が変わった場合はプリロールを作り直す）"""
        settings = SegmenterSettings(**{**self.settings.model_dump(), **changes})
        if settings.pre_roll_ms != self.settings.pre_roll_ms:
            self._pre_roll = None
        self.settings = settings

    @property
    def is_active(self) -> bool:
        return self.state.active

    # ========== ライフサイクル ==========

    def setup(self, context: StageContext) -> None:
        # teardownを経ずに再setupされた場合の古い購読を解除
        if self._unsubscribe_vad is not None:
            self._unsubscribe_vad()
        self._reset()
        self._context = context
        self._unsubscribe_vad = context.on(PipelineEvent.VAD, self._on_vad)

    def teardown(self) -> None:
        if self._unsubscribe_vad is not None:
            self._unsubscribe_vad()
        self._unsubscribe_vad = None
        self._reset()
        self._context = None

    def _reset(self) -> None:
        self._pre_roll = None
        self._sample_rate = 0
        self._channels = 0
        self._buffer.clear()
        self.state = SegmentState()

    # ========== フレーム処理 ==========

    def _ensure_pre_roll(self, frame: Frame) -> FloatRingBuffer:
        if self._pre_roll is None:
            self._sample_rate = frame.sample_rate
            self._channels = frame.channels
            # インターリーブのフレーム境界に揃える（チャンネル数の倍数）
            frames_per_ms = frame.sample_rate / 1000.0
            pre_roll_frames = max(1, math.ceil(frames_per_ms * self.settings.pre_roll_ms))
            capacity = pre_roll_frames * frame.channels
            self._pre_roll = FloatRingBuffer(capacity)
        return self._pre_roll

    def _format_matches(self, frame: Frame) -> bool:
        if self._pre_roll is None:
            return True
        return (
            frame.sample_rate == self._sample_rate
            and frame.channels == self._channels
        )

    def handle(self, frame: Frame) -> None:
        if self._context is None:
            return
        if not self._format_matches(frame):
            self._context.emit(
                PipelineEvent.ERROR,
                CoreError(
                    code="segmenter.format_mismatch",
                    message=(
                        f"Frame format {frame.sample_rate}Hz/{frame.channels}ch differs "
                        f"from stream format {self._sample_rate}Hz/{self._channels}ch"
                    ),
                ),
            )
            return

        pre_roll = self._ensure_pre_roll(frame)
        samples = to_float32(frame.pcm)
        pre_roll.write(samples)

        if not self.state.active:
            return
        self._buffer.append(samples)

        pending = self.state.pending_silence_since
        if pending is not None and frame.ts_ms - pending >= self.settings.hangover_ms:
            self._finish_segment(frame.ts_ms)

    def flush(self) -> None:
        """記録中の区間を即座に閉じる（無音観測時刻があればそれを終了時刻にする）"""
        if self._context is None or not self.state.active:
            return
        pending = self.state.pending_silence_since
        self._finish_segment(pending if pending is not None else self._context.now())

    # ========== 状態遷移 ==========

    def _on_vad(self, score: VADScore) -> None:
        if self._context is None:
            return
        if score.speech:
            self.state.pending_silence_since = None
            if not self.state.active:
                self._begin_segment(score.ts_ms)
        elif self.state.active and self.state.pending_silence_since is None:
            self.state.pending_silence_since = score.ts_ms

    def _begin_segment(self, ts_ms: float) -> None:
        assert self._context is not None
        self.state = SegmentState(
            active=True,
            id=self._context.create_id(),
            start_ms=ts_ms,
        )
        self._buffer.clear()
        if self._pre_roll is not None:
            self._buffer.append(self._pre_roll.snapshot())
        self._context.logger.debug(
            "Segment started", {"id": self.state.id, "ts_ms": ts_ms}
        )
        self._context.emit(PipelineEvent.SPEECH_START, SpeechBoundary(ts_ms=ts_ms))

    def _finish_segment(self, end_ms: float) -> None:
        if self._context is None or not self.state.active:
            return
        state = self.state
        end_ms = max(state.start_ms, end_ms)
        segment = self._buffer.build_segment(
            segment_id=state.id,
            start_ms=state.start_ms,
            end_ms=end_ms,
            sample_rate=self._sample_rate,
            channels=self._channels,
        )
        # イベント発行前にIdleへ戻す
        self.state = SegmentState()
        self._buffer.clear()

        self._context.logger.debug(
            "Segment finished",
            lambda: {"id": segment.id, "duration_ms": segment.duration_ms},
        )
        self._context.emit(PipelineEvent.SPEECH_END, SpeechBoundary(ts_ms=end_ms))
        self._context.emit(PipelineEvent.SEGMENT, segment)
