"""永続化（JSON・WAV出力）のテスト"""

import json
from pathlib import Path

import numpy as np
import soundfile as sf  # type: ignore[import-untyped]

from stream_segmenter.domain import CoreError, Segment, SegmentationSession
from stream_segmenter.infrastructure.persistence import (
    SegmentWavExporter,
    SessionJsonExporter,
)


def make_segment(segment_id: str, start_ms: float, end_ms: float, samples: int) -> Segment:
    return Segment(
        id=segment_id,
        start_ms=start_ms,
        end_ms=end_ms,
        sample_rate=16000,
        channels=1,
        pcm=np.arange(samples, dtype=np.int16),
    )


class TestSessionJsonExporter:
    """SessionJsonExporterのテスト"""

    def test_saves_segments_and_errors(self, tmp_path: Path) -> None:
        session = SegmentationSession()
        session.add_segment(make_segment("a", 20, 180, 10))
        session.add_segment(make_segment("b", 500, 650, 5))
        session.add_error(CoreError(code="segmenter.format_mismatch", message="bad"))
        output_path = tmp_path / "session.json"

        saved = SessionJsonExporter.save_to_file(session, output_path)

        data = json.loads(saved.read_text(encoding="utf-8"))
        assert data["total_segments"] == 2
        assert data["total_errors"] == 1
        assert data["total_speech_ms"] == 310
        assert data["segments"][0] == {
            "id": "a",
            "start_ms": 20,
            "end_ms": 180,
            "duration_ms": 160,
            "sample_rate": 16000,
            "channels": 1,
            "samples": 10,
        }
        assert data["errors"][0]["code"] == "segmenter.format_mismatch"
        assert data["errors"][0]["cause"] is None

    def test_default_filename(self, tmp_path: Path, monkeypatch) -> None:
        """出力先未指定なら segments_YYYYMMDD_HHMMSS.json"""
        monkeypatch.chdir(tmp_path)

        saved = SessionJsonExporter.save_to_file(SegmentationSession())

        assert saved.name.startswith("segments_")
        assert saved.suffix == ".json"
        assert (tmp_path / saved).exists()


class TestSegmentWavExporter:
    """SegmentWavExporterのテスト"""

    def test_writes_pcm16_wav(self, tmp_path: Path) -> None:
        exporter = SegmentWavExporter(tmp_path / "out")

        path = exporter.save(make_segment("abc", 1234.5, 2000, 160))

        assert path is not None
        assert path.name == "segment_00001234_abc.wav"
        data, sample_rate = sf.read(str(path), dtype="int16")
        assert sample_rate == 16000
        assert list(data[:3]) == [0, 1, 2]
        assert sf.info(str(path)).subtype == "PCM_16"

    def test_skips_segment_without_pcm(self, tmp_path: Path) -> None:
        exporter = SegmentWavExporter(tmp_path)
        segment = Segment(id="x", start_ms=0, end_ms=10, sample_rate=16000, channels=1)

        assert exporter.save(segment) is None
