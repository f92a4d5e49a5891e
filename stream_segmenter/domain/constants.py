#!/usr/bin/env python3
"""
Stream Segmenter - Constants
既定値と数値定数を管理するモジュール
"""

# ========================================
# 基礎パラメータ
# ========================================
SAMPLE_RATE = 16000  # 既定のサンプルレート
FRAME_MS = 10  # 既定のフレーム長（10ミリ秒）
PCM16_BYTES_PER_SAMPLE = 2  # 16bit PCMのバイト数

# ========================================
# Energy VAD
# ========================================
VAD_THRESHOLD_DB = -50.0  # 発話判定の境界（dBFS）
VAD_FLOOR_DB = -100.0  # スコア正規化の下限
VAD_CEILING_DB = 0.0  # スコア正規化の上限
VAD_SMOOTH_MS = 50.0  # 指数平滑化の時定数
VAD_MIN_RMS = 1e-4  # -inf dB を防ぐエネルギー下限

# ========================================
# セグメンタ
# ========================================
PRE_ROLL_MS = 250.0  # 発話開始前に含める音声
HANGOVER_MS = 400.0  # セグメント終了に必要な最小無音時間

# ========================================
# パイプライン
# ========================================
PENDING_FRAME_CAPACITY = 64  # ステージ未設定時に保持するフレーム数

# ========================================
# メーター
# ========================================
METER_EPSILON = 1e-12  # これ以下のRMSは -inf dB とみなす

# ========================================
# PCM変換
# ========================================
INT16_NEGATIVE_SCALE = 32768.0
INT16_POSITIVE_SCALE = 32767.0
