"""Runtimeのテスト"""

import io

import numpy as np
import pytest

from stream_segmenter.domain import (
    CoreError,
    EnergyVADSettings,
    Frame,
    LogLevel,
    PipelineEvent,
    Segment,
    SegmenterSettings,
    Settings,
)
from stream_segmenter.infrastructure import (
    LogEntry,
    Logger,
    Runtime,
    RuntimeServices,
    StreamClock,
)
from stream_segmenter.infrastructure.audio import Pcm16StreamSource
from stream_segmenter.infrastructure.stages import SegmenterStage


def frame_bytes(value: int, samples: int) -> bytes:
    return np.full(samples, value, dtype="<i2").tobytes()


@pytest.fixture
def entries() -> list[LogEntry]:
    return []


@pytest.fixture
def runtime(entries: list[LogEntry]) -> Runtime:
    """ログを記録し、ストリーム時刻で動くRuntime"""
    return Runtime(
        services=RuntimeServices(
            logger=Logger(level=LogLevel.DEBUG, output=entries.append),
            clock=StreamClock(),
        )
    )


class TestRun:
    """ソース駆動のテスト"""

    def test_processes_pcm_stream_through_vad_and_segmenter(self, runtime: Runtime) -> None:
        """PCMストリームをVADとセグメンタに通して1つのセグメントを得る"""
        frame_size = 160
        values = [0, 0, 12000, 11000, 9000, 0, 0, 0]
        stream = io.BytesIO(b"".join(frame_bytes(v, frame_size) for v in values))

        vad_stage = runtime.create_vad_stage(
            EnergyVADSettings(threshold_db=-45, smooth_ms=5)
        )
        pipeline = runtime.create_pipeline(
            stages=[vad_stage],
            segmenter=SegmenterSettings(pre_roll_ms=40, hangover_ms=40),
        )
        segments: list[Segment] = []
        pipeline.events.on(PipelineEvent.SEGMENT, segments.append)

        source = Pcm16StreamSource(stream, sample_rate=16000, frame_size=frame_size)
        runtime.run(source, pipeline)
        pipeline.dispose()

        assert len(segments) == 1
        assert segments[0].start_ms == 20
        assert segments[0].end_ms == 50
        assert segments[0].duration_ms > 0
        assert segments[0].pcm is not None
        # プリロール2フレーム + 区間6フレーム
        assert len(segments[0].pcm) == 8 * frame_size

    def test_flush_uses_stream_time(self, runtime: Runtime) -> None:
        """終端まで発話が続く場合、ストリーム終端時刻で閉じる"""
        stream = io.BytesIO(b"".join(frame_bytes(12000, 160) for _ in range(5)))
        pipeline = runtime.create_pipeline(
            stages=[runtime.create_vad_stage(EnergyVADSettings(threshold_db=-45))],
        )
        segments: list[Segment] = []
        pipeline.events.on(PipelineEvent.SEGMENT, segments.append)

        runtime.run(Pcm16StreamSource(stream, sample_rate=16000), pipeline)

        assert [(s.start_ms, s.end_ms) for s in segments] == [(0.0, 50.0)]

    def test_without_auto_flush_segment_stays_open(self, runtime: Runtime) -> None:
        stream = io.BytesIO(frame_bytes(12000, 160))
        pipeline = runtime.create_pipeline(
            stages=[runtime.create_vad_stage(EnergyVADSettings(threshold_db=-45))],
        )
        segments: list[Segment] = []
        pipeline.events.on(PipelineEvent.SEGMENT, segments.append)

        runtime.run(Pcm16StreamSource(stream, sample_rate=16000), pipeline, auto_flush=False)

        assert segments == []
        pipeline.flush()
        assert len(segments) == 1

    def test_source_is_stopped_when_stage_fails(self, runtime: Runtime) -> None:
        """ステージの例外は伝播し、ソースは停止される"""
        pipeline = runtime.create_pipeline(segmenter=False)

        def failing(_frame: Frame) -> None:
            raise RuntimeError("downstream failure")

        pipeline.push = failing  # type: ignore[method-assign]
        source = Pcm16StreamSource(io.BytesIO(frame_bytes(0, 160)), sample_rate=16000)

        with pytest.raises(RuntimeError, match="downstream failure"):
            runtime.run(source, pipeline)
        assert source.is_running is False


class TestCreatePipeline:
    """パイプライン生成のテスト"""

    def test_appends_default_segmenter(self) -> None:
        runtime = Runtime(settings=Settings())
        pipeline = runtime.create_pipeline(stages=[runtime.create_meter_stage()])

        assert [stage.name for stage in pipeline.stages] == ["meter", "segmenter"]

    def test_segmenter_can_be_omitted(self) -> None:
        pipeline = Runtime().create_pipeline(segmenter=False)
        assert pipeline.stages == ()

    def test_accepts_segmenter_stage_instance(self) -> None:
        segmenter = SegmenterStage()
        pipeline = Runtime().create_pipeline(segmenter=segmenter)
        assert pipeline.stages == (segmenter,)

    def test_segmenter_defaults_come_from_settings(self) -> None:
        settings = Settings(segmenter=SegmenterSettings(hangover_ms=123))
        segmenter = Runtime(settings=settings).create_segmenter()

        assert isinstance(segmenter, SegmenterStage)
        assert segmenter.settings.hangover_ms == 123

    def test_error_events_are_logged(
        self, runtime: Runtime, entries: list[LogEntry]
    ) -> None:
        """error イベントはロガーへerrorレベルで出力される"""
        pipeline = runtime.create_pipeline(segmenter=False)

        pipeline.events.emit(
            PipelineEvent.ERROR, CoreError(code="test.failure", message="broken")
        )

        errors = [entry for entry in entries if entry.level == LogLevel.ERROR]
        assert len(errors) == 1
        assert errors[0].message == "broken"
        assert errors[0].context == {"code": "test.failure"}


class TestStreamClock:
    def test_tracks_frame_end(self) -> None:
        clock = StreamClock()
        clock.observe(Frame(pcm=np.zeros(160, dtype=np.int16), ts_ms=20, sample_rate=16000))

        assert clock() == 30.0
