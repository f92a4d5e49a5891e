#!/usr/bin/env python3
"""
Stream Segmenter - Settings Schema
設定のスキーマ定義（Pydanticモデル）
"""

from enum import StrEnum

from pydantic import Field, computed_field, model_validator
from pydantic_settings import BaseSettings
from typing_extensions import Self

from . import constants


# ========================================
# Core Configuration
# ========================================
class CoreSettings(BaseSettings):
    """基礎パラメータ（フレームソースで共有）"""

    sample_rate: int = Field(
        default=constants.SAMPLE_RATE,
        gt=0,
        description="サンプルレート（Hz）",
    )
    frame_ms: float = Field(
        default=constants.FRAME_MS,
        gt=0,
        description="フレーム長（ミリ秒） - ソースはこの単位でフレームを生成する",
    )

    @computed_field  # type: ignore[prop-decorator]
    @property
    def frame_size(self) -> int:
        """フレームサイズ（チャンネルあたりのサンプル数）"""
        return max(1, int(self.sample_rate * self.frame_ms / 1000))


# ========================================
# VAD Configuration
# ========================================
class EnergyVADSettings(BaseSettings):
    """エネルギーVAD設定（実行中に更新可能）"""

    threshold_db: float = Field(
        default=constants.VAD_THRESHOLD_DB,
        description="発話判定閾値（dBFS） - 平滑化後のレベルがこれ以上なら発話",
    )
    floor_db: float = Field(
        default=constants.VAD_FLOOR_DB,
        description="スコア正規化の下限（dBFS）",
    )
    ceiling_db: float = Field(
        default=constants.VAD_CEILING_DB,
        description="スコア正規化の上限（dBFS）",
    )
    smooth_ms: float = Field(
        default=constants.VAD_SMOOTH_MS,
        gt=0,
        description="指数平滑化の時定数（ミリ秒） - 大きいほど反応が遅く安定する",
    )
    min_rms: float = Field(
        default=constants.VAD_MIN_RMS,
        gt=0,
        description="RMSの下限 - log10(0) による -inf を防ぐ",
    )
    hysteresis_db: float = Field(
        default=0.0,
        ge=0,
        description="発話終了側の閾値幅（dB） - 終了閾値は threshold_db - hysteresis_db",
    )
    hold_ms: float = Field(
        default=0.0,
        ge=0,
        description="判定反転の最小間隔（ミリ秒）",
    )

    @model_validator(mode="after")
    def validate_score_range(self) -> Self:
        """正規化範囲を検証"""
        if self.ceiling_db <= self.floor_db:
            raise ValueError(
                f"ceiling_db ({self.ceiling_db}) must be greater than floor_db ({self.floor_db})"
            )
        return self

    @property
    def exit_threshold_db(self) -> float:
        """発話終了側の閾値"""
        return self.threshold_db - self.hysteresis_db


# ========================================
# Segmenter Configuration
# ========================================
class SegmenterSettings(BaseSettings):
    """発話区間セグメンタ設定"""

    pre_roll_ms: float = Field(
        default=constants.PRE_ROLL_MS,
        ge=0,
        description="プリロール（ミリ秒） - 発話開始前の音声をセグメントに含める",
    )
    hangover_ms: float = Field(
        default=constants.HANGOVER_MS,
        ge=0,
        description="ハングオーバー（ミリ秒） - この時間無音が続いたらセグメントを閉じる",
    )


# ========================================
# Pipeline Configuration
# ========================================
class PipelineSettings(BaseSettings):
    """パイプライン設定"""

    pending_capacity: int = Field(
        default=constants.PENDING_FRAME_CAPACITY,
        ge=0,
        description="ステージ未設定時に保持するフレーム数（超過分は破棄）",
    )


# ========================================
# Logging Configuration
# ========================================
class LogLevel(StrEnum):
    """ログレベル"""

    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    SILENT = "silent"


class LoggingSettings(BaseSettings):
    """ログ設定"""

    level: LogLevel = Field(
        default=LogLevel.INFO,
        description="出力する最小ログレベル",
    )
    namespace: str = Field(
        default="stream_segmenter",
        description="ルートロガーの名前空間",
    )


# ========================================
# Main Settings Class
# ========================================
class Settings(BaseSettings):
    """
    Stream Segmenter全体設定

    設定の読み込み優先順位（後勝ち）:
    1. デフォルト値（各Settingsクラス内）
    2. config.toml
    3. config.local.toml
    """

    core: CoreSettings = Field(default_factory=CoreSettings)
    vad: EnergyVADSettings = Field(default_factory=EnergyVADSettings)
    segmenter: SegmenterSettings = Field(default_factory=SegmenterSettings)
    pipeline: PipelineSettings = Field(default_factory=PipelineSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
