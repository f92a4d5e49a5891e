#!/usr/bin/env python3
"""
Stream Segmenter - Audio Infrastructure
フレームソース（パイプライン外の入力アダプタ）
"""

from .sources import (
    FileFrameSource,
    FrameCallback,
    FrameSource,
    Pcm16StreamSource,
    default_frame_size,
)

__all__ = [
    "FileFrameSource",
    "FrameCallback",
    "FrameSource",
    "Pcm16StreamSource",
    "default_frame_size",
]
