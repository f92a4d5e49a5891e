#!/usr/bin/env python3
"""
Stream Segmenter - DSP Primitives
数値処理の基本部品（I/Oなし）
"""

from .hysteresis import Hysteresis
from .pcm import downmix_to_mono, float32_to_int16, int16_to_float32, to_float32
from .ring_buffer import FloatRingBuffer
from .rms import rms, to_dbfs

__all__ = [
    "FloatRingBuffer",
    "Hysteresis",
    "downmix_to_mono",
    "float32_to_int16",
    "int16_to_float32",
    "rms",
    "to_dbfs",
    "to_float32",
]
