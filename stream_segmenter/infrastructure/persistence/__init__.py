#!/usr/bin/env python3
"""
Stream Segmenter - Persistence Infrastructure
永続化層のインフラストラクチャ（JSON・WAV出力）
"""

# JSONエクスポート
from .json_exporter import SessionJsonExporter

# WAVエクスポート
from .wav_exporter import SegmentWavExporter

__all__ = [
    # JSONエクスポート
    "SessionJsonExporter",
    # WAVエクスポート
    "SegmentWavExporter",
]
