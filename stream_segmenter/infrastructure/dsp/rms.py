#!/usr/bin/env python3
"""
Stream Segmenter - RMS
二乗平均平方根によるエネルギー計算
"""

import numpy as np


def rms(samples: np.ndarray) -> float:
    """サンプル列のRMS（空配列は0.0、NaNは0として扱う）"""
    if len(samples) == 0:
        return 0.0
    values = np.nan_to_num(np.asarray(samples, dtype=np.float64))
    return float(np.sqrt(np.mean(values * values)))


def to_dbfs(value: float) -> float:
    """振幅をdBFSに変換（0以下は -inf）"""
    if value <= 0:
        return float("-inf")
    return float(20.0 * np.log10(value))
