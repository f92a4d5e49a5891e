#!/usr/bin/env python3
"""
Stream Segmenter - Stages
パイプラインに接続する標準ステージ
"""

# VAD
from .energy_vad import EnergyVadStage

# レベルメーター
from .meter import MeterStage, measure

# セグメンタ
from .segment_buffer import SegmentBuffer
from .segmenter import SegmenterStage, SegmentState

__all__ = [
    # VAD
    "EnergyVadStage",
    # メーター
    "MeterStage",
    "measure",
    # セグメンタ
    "SegmentBuffer",
    "SegmenterStage",
    "SegmentState",
]
