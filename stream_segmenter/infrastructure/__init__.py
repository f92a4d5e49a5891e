#!/usr/bin/env python3
"""
Stream Segmenter - Infrastructure Layer
インフラストラクチャ層: パイプライン、ステージ、入力アダプタ、設定読み込み
"""

from .config import load_settings
from .logger import NOOP_LOGGER, LogEntry, Logger, console_output
from .pipeline import Pipeline, Stage, StageContext
from .runtime import Runtime, RuntimeServices, StreamClock

__all__ = [
    "load_settings",
    "LogEntry",
    "Logger",
    "NOOP_LOGGER",
    "console_output",
    "Pipeline",
    "Stage",
    "StageContext",
    "Runtime",
    "RuntimeServices",
    "StreamClock",
]
