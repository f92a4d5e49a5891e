#!/usr/bin/env python3
"""
Stream Segmenter - Domain Models
ドメイン層：フレーム・判定結果・セグメントなどの値オブジェクト
"""

from dataclasses import dataclass, field
from datetime import datetime

import numpy as np

_SUPPORTED_DTYPES = (np.dtype(np.float32), np.dtype(np.int16))


def _readonly(array: np.ndarray) -> np.ndarray:
    """書き込み不可のビューを返す（元配列のフラグは変更しない）"""
    view = array.view()
    view.flags.writeable = False
    return view


@dataclass(frozen=True)
class Frame:
    """
    音声フレーム（固定長のサンプル列）

    pcm は float32（-1.0〜1.0）または int16 のインターリーブ配列。
    生成後は変更不可。
    """

    pcm: np.ndarray
    ts_ms: float  # フレーム開始時刻（ミリ秒、単調増加）
    sample_rate: int
    channels: int = 1

    def __post_init__(self) -> None:
        pcm = np.asarray(self.pcm)
        # float64 などは float32 に揃える
        if np.issubdtype(pcm.dtype, np.floating) and pcm.dtype != np.float32:
            pcm = pcm.astype(np.float32)
        if pcm.dtype not in _SUPPORTED_DTYPES:
            raise ValueError(f"Unsupported PCM dtype: {pcm.dtype}")
        if pcm.ndim != 1:
            raise ValueError("Frame PCM must be a 1-D interleaved buffer")
        if self.channels not in (1, 2):
            raise ValueError(f"channels must be 1 or 2, got {self.channels}")
        if self.sample_rate <= 0:
            raise ValueError(f"sample_rate must be positive, got {self.sample_rate}")
        object.__setattr__(self, "pcm", _readonly(pcm))

    @property
    def sample_count(self) -> int:
        """チャンネルあたりのサンプル数"""
        return len(self.pcm) // self.channels

    @property
    def duration_ms(self) -> float:
        """フレームの長さ（ミリ秒）"""
        return self.sample_count * 1000.0 / self.sample_rate


@dataclass(frozen=True)
class VADScore:
    """1フレーム分の発話判定"""

    ts_ms: float
    score: float  # 0.0〜1.0 の発話らしさ
    speech: bool


@dataclass(frozen=True)
class SpeechBoundary:
    """発話開始/終了イベントのペイロード"""

    ts_ms: float


@dataclass(frozen=True)
class MeterReading:
    """フレーム単位のレベル計測結果"""

    ts_ms: float
    rms: float
    peak: float
    db: float  # dBFS（無音時は -inf）


@dataclass(frozen=True)
class CoreError:
    """
    業務レベルのエラー

    ストリームを中断せずに報告したい問題を error イベントで通知する。
    """

    code: str
    message: str
    cause: BaseException | None = None


@dataclass(frozen=True)
class Segment:
    """
    確定した発話区間

    pcm はプリロールを含む区間全体の16bit PCM（省略可）。
    """

    id: str
    start_ms: float
    end_ms: float
    sample_rate: int
    channels: int
    pcm: np.ndarray | None = field(default=None, repr=False)

    def __post_init__(self) -> None:
        if self.end_ms < self.start_ms:
            raise ValueError(
                f"Segment end ({self.end_ms}) precedes start ({self.start_ms})"
            )
        if self.pcm is not None:
            object.__setattr__(self, "pcm", _readonly(np.asarray(self.pcm)))

    @property
    def duration_ms(self) -> float:
        """区間の長さ（ミリ秒）"""
        return self.end_ms - self.start_ms


class SegmentationSession:
    """
    セグメンテーションセッション（ドメインエンティティ）

    責務:
    - 確定したセグメントの集約
    - error イベントの集約

    Note: 永続化ロジックは infrastructure/persistence に分離
    """

    def __init__(self) -> None:
        self.segments: list[Segment] = []
        self.errors: list[CoreError] = []
        self.session_start = datetime.now()

    def add_segment(self, segment: Segment) -> None:
        """セグメントを追加"""
        self.segments.append(segment)

    def add_error(self, error: CoreError) -> None:
        """エラーを追加"""
        self.errors.append(error)

    def get_total_segments(self) -> int:
        """総セグメント数を取得"""
        return len(self.segments)

    def get_total_errors(self) -> int:
        """総エラー数を取得"""
        return len(self.errors)

    def get_total_speech_ms(self) -> float:
        """発話区間の合計時間（ミリ秒）"""
        return sum((segment.duration_ms for segment in self.segments), 0.0)
