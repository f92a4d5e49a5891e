#!/usr/bin/env python3
"""
Stream Segmenter - Domain Layer
ドメイン層：値オブジェクト、イベント、設定
"""

# モデルとデータ構造
from .models import (
    CoreError,
    Frame,
    MeterReading,
    Segment,
    SegmentationSession,
    SpeechBoundary,
    VADScore,
)

# イベント（Pub/Sub）
from .events import EventBus, PipelineEvent

# 設定スキーマ（Pydantic）
from .settings import (
    CoreSettings,
    EnergyVADSettings,
    LoggingSettings,
    LogLevel,
    PipelineSettings,
    SegmenterSettings,
    Settings,
)

__all__ = [
    # モデル
    "CoreError",
    "Frame",
    "MeterReading",
    "Segment",
    "SegmentationSession",
    "SpeechBoundary",
    "VADScore",
    # イベント
    "EventBus",
    "PipelineEvent",
    # 設定
    "CoreSettings",
    "EnergyVADSettings",
    "LoggingSettings",
    "LogLevel",
    "PipelineSettings",
    "SegmenterSettings",
    "Settings",
]
