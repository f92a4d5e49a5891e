#!/usr/bin/env python3
"""
Stream Segmenter - Presentation Layer
プレゼンテーション層：アプリケーションロジック、CLI
"""

# コアアプリケーション
from .app import StreamSegmenterApp

__all__ = [
    # コアアプリケーション
    "StreamSegmenterApp",
]
