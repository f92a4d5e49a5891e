#!/usr/bin/env python3
"""
Stream Segmenter - PCM Conversion
float32 / int16 PCMの相互変換とダウンミックス
"""

import numpy as np

from stream_segmenter.domain.constants import (
    INT16_NEGATIVE_SCALE,
    INT16_POSITIVE_SCALE,
)


def int16_to_float32(pcm: np.ndarray) -> np.ndarray:
    """int16 PCMを -1.0〜1.0 のfloat32に変換"""
    return np.asarray(pcm, dtype=np.int16).astype(np.float32) / INT16_NEGATIVE_SCALE


def float32_to_int16(samples: np.ndarray) -> np.ndarray:
    """
    float PCMをint16に変換

    範囲外の値は -1.0〜1.0 にクリップし、負側は32768、正側は32767でスケールする。
    NaNは0として扱う。
    """
    clipped = np.clip(np.nan_to_num(np.asarray(samples, dtype=np.float32)), -1.0, 1.0)
    scaled = np.where(
        clipped < 0, clipped * INT16_NEGATIVE_SCALE, clipped * INT16_POSITIVE_SCALE
    )
    return scaled.astype(np.int16)


def to_float32(pcm: np.ndarray) -> np.ndarray:
    """dtypeに応じてfloat32へ揃える"""
    if pcm.dtype == np.int16:
        return int16_to_float32(pcm)
    return np.asarray(pcm, dtype=np.float32)


def downmix_to_mono(interleaved: np.ndarray, channels: int) -> np.ndarray:
    """
    インターリーブされたマルチチャンネル音声をモノラルに変換

    Args:
        interleaved: チャンネル順に並んだサンプル列（または (frames, channels) 配列）
        channels: チャンネル数

    Returns:
        np.ndarray: 各チャンネルの平均を取ったfloat32配列
    """
    samples = to_float32(np.asarray(interleaved))
    if channels <= 1:
        return samples.reshape(-1).copy()
    if samples.size % channels != 0:
        raise ValueError(
            f"Sample count {samples.size} is not divisible by channels ({channels})"
        )
    return samples.reshape(-1, channels).mean(axis=1).astype(np.float32)
