#!/usr/bin/env python3
"""
Stream Segmenter - WAV Exporter
インフラ層：セグメント音声のWAV保存
"""

from pathlib import Path

import soundfile as sf  # type: ignore[import-untyped]

from stream_segmenter.domain import Segment


class SegmentWavExporter:
    """
    Segmentの16bit PCMをWAVファイルとして保存

    ファイル名は segment_{開始ミリ秒}_{ID}.wav
    """

    def __init__(self, output_dir: Path) -> None:
        self.output_dir = output_dir

    def save(self, segment: Segment) -> Path | None:
        """
        セグメントを保存

        Returns:
            Path | None: 保存先パス（PCMが無いセグメントはNone）
        """
        if segment.pcm is None or len(segment.pcm) == 0:
            return None

        self.output_dir.mkdir(parents=True, exist_ok=True)
        output_path = self.output_dir / f"segment_{int(segment.start_ms):08d}_{segment.id}.wav"

        # インターリーブ配列を (frames, channels) に整形
        data = segment.pcm.reshape(-1, segment.channels)
        sf.write(str(output_path), data, segment.sample_rate, subtype="PCM_16")
        return output_path
