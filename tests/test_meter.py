"""MeterStageのテスト"""

import math

import numpy as np
import pytest

from stream_segmenter.domain import Frame, MeterReading, PipelineEvent
from stream_segmenter.infrastructure import Pipeline
from stream_segmenter.infrastructure.stages import MeterStage, measure


def make_frame(values: list[float], dtype: type = np.float32, ts_ms: float = 0) -> Frame:
    return Frame(pcm=np.array(values, dtype=dtype), ts_ms=ts_ms, sample_rate=16000)


class TestMeasure:
    """measure関数のテスト"""

    def test_all_zero_is_negative_infinity(self) -> None:
        """無音のRMSは0で、dBは -inf"""
        reading = measure(make_frame([0.0, 0.0, 0.0]))

        assert reading.rms == 0.0
        assert reading.peak == 0.0
        assert reading.db == -math.inf

    def test_full_scale_is_zero_db(self) -> None:
        """フルスケール信号はRMS≈1、dB≈0"""
        reading = measure(make_frame([1.0, 1.0, 1.0]))

        assert reading.rms == pytest.approx(1.0)
        assert reading.db == pytest.approx(0.0, abs=1e-6)

    def test_nan_is_treated_as_zero(self) -> None:
        """NaNは0として計算する"""
        reading = measure(make_frame([float("nan"), 1.0, float("nan"), 1.0]))

        assert reading.rms == pytest.approx(math.sqrt(0.5))
        assert reading.peak == 1.0

    def test_peak_uses_absolute_value(self) -> None:
        """ピークは絶対値の最大"""
        reading = measure(make_frame([0.1, -0.8, 0.5]))

        assert reading.peak == pytest.approx(0.8)

    def test_int16_frame_is_normalized(self) -> None:
        """int16は -1.0〜1.0 に正規化して計測する"""
        reading = measure(make_frame([-32768, -32768], dtype=np.int16))

        assert reading.rms == pytest.approx(1.0)
        assert reading.peak == pytest.approx(1.0)

    def test_empty_frame(self) -> None:
        """空フレームは無音として扱う"""
        reading = measure(make_frame([]))

        assert reading == MeterReading(ts_ms=0, rms=0.0, peak=0.0, db=-math.inf)


class TestMeterStage:
    """MeterStageのテスト"""

    def test_emits_one_reading_per_frame(self) -> None:
        """フレームごとに meter イベントを発行する"""
        readings: list[MeterReading] = []
        pipeline = Pipeline()
        pipeline.events.on(PipelineEvent.METER, readings.append)
        pipeline.use(MeterStage())

        pipeline.push(make_frame([0.5, -0.5], ts_ms=0))
        pipeline.push(make_frame([0.0, 0.0], ts_ms=10))

        assert [reading.ts_ms for reading in readings] == [0, 10]
        assert readings[0].db == pytest.approx(20 * math.log10(0.5))
        assert readings[1].db == -math.inf

    def test_no_events_after_dispose(self) -> None:
        readings: list[MeterReading] = []
        pipeline = Pipeline()
        pipeline.events.on(PipelineEvent.METER, readings.append)
        pipeline.use(MeterStage())
        pipeline.dispose()

        pipeline.push(make_frame([0.5]))

        assert readings == []
