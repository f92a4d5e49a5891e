#!/usr/bin/env python3
"""
Stream Segmenter - Meter Stage
フレームごとのレベル（RMS・ピーク・dBFS）を計測するステージ
"""

import numpy as np

from stream_segmenter.domain import Frame, MeterReading, PipelineEvent
from stream_segmenter.domain.constants import METER_EPSILON

from ..dsp import to_dbfs, to_float32
from ..pipeline import Stage, StageContext


def measure(frame: Frame) -> MeterReading:
    """フレームのレベルを計測（NaNは0として扱う）"""
    samples = to_float32(frame.pcm)
    if len(samples) == 0:
        return MeterReading(ts_ms=frame.ts_ms, rms=0.0, peak=0.0, db=float("-inf"))

    values = np.where(np.isnan(samples), 0.0, samples).astype(np.float64)
    rms_value = float(np.sqrt(np.mean(values * values)))
    peak = float(np.max(np.abs(values)))
    db = to_dbfs(rms_value) if rms_value > METER_EPSILON else float("-inf")
    return MeterReading(ts_ms=frame.ts_ms, rms=rms_value, peak=peak, db=db)


class MeterStage(Stage):
    """レベルメーター（ステージ間で状態を持たない）"""

    name = "meter"

    def __init__(self) -> None:
        self._context: StageContext | None = None

    def setup(self, context: StageContext) -> None:
        self._context = context

    def handle(self, frame: Frame) -> None:
        if self._context is None:
            return
        self._context.emit(PipelineEvent.METER, measure(frame))

    def teardown(self) -> None:
        self._context = None
