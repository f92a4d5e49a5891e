#!/usr/bin/env python3
"""
Stream Segmenter - Segment Buffer
発話区間の音声を蓄積し、16bit PCMのSegmentに組み立てる
"""

import numpy as np

from stream_segmenter.domain import Segment

from ..dsp import float32_to_int16


class SegmentBuffer:
    """セグメント音声のアキュムレータ（float32チャンクのリスト）"""

    def __init__(self) -> None:
        self._chunks: list[np.ndarray] = []

    def __len__(self) -> int:
        """蓄積済みのサンプル数"""
        return sum(len(chunk) for chunk in self._chunks)

    def clear(self) -> None:
        self._chunks = []

    def append(self, samples: np.ndarray) -> None:
        """サンプルをコピーして追加"""
        if len(samples) > 0:
            self._chunks.append(np.array(samples, dtype=np.float32, copy=True))

    def is_empty(self) -> bool:
        return not self._chunks

    def build_segment(
        self,
        segment_id: str,
        start_ms: float,
        end_ms: float,
        sample_rate: int,
        channels: int,
    ) -> Segment:
        """
        蓄積内容からSegmentを生成

        Args:
            segment_id: セグメントID
            start_ms: 開始時刻（ミリ秒）
            end_ms: 終了時刻（ミリ秒、開始より前なら開始に揃える）
            sample_rate: サンプルレート
            channels: チャンネル数

        Returns:
            Segment: プリロールを含む16bit PCM付きセグメント
        """
        if self._chunks:
            pcm = float32_to_int16(np.concatenate(self._chunks))
        else:
            pcm = np.zeros(0, dtype=np.int16)

        return Segment(
            id=segment_id,
            start_ms=start_ms,
            end_ms=max(start_ms, end_ms),
            sample_rate=sample_rate,
            channels=channels,
            pcm=pcm,
        )
