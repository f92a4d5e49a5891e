#!/usr/bin/env python3
"""
Stream Segmenter - Pipeline Core
パイプラインとステージ契約
"""

from .pipeline import Pipeline, monotonic_ms, random_id
from .stage import Stage, StageContext

__all__ = [
    "Pipeline",
    "Stage",
    "StageContext",
    "monotonic_ms",
    "random_id",
]
