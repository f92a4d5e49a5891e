#!/usr/bin/env python3
"""
Stream Segmenter - Frame Sources Module
PCMバイトストリーム・音声ファイルからフレームを生成するモジュール
"""

from __future__ import annotations

import threading
import time
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import BinaryIO

import numpy as np
import soundfile as sf  # type: ignore[import-untyped]

from stream_segmenter.domain import Frame
from stream_segmenter.domain.constants import FRAME_MS, PCM16_BYTES_PER_SAMPLE

from ..dsp import downmix_to_mono

FrameCallback = Callable[[Frame], None]


def default_frame_size(sample_rate: int) -> int:
    """既定のフレームサイズ（FRAME_MS分のサンプル数）"""
    return max(1, int(sample_rate * FRAME_MS / 1000))


class FrameSource(ABC):
    """
    フレームソースの抽象基底クラス

    start はソースが尽きるか stop されるまでブロックし、フレームごとに
    コールバックを呼ぶ。start / stop はともに冪等で、stop が戻った後に
    コールバックが呼ばれることはない。
    """

    @abstractmethod
    def start(self, on_frame: FrameCallback) -> None:
        """フレームの配信を開始（終了までブロック）"""
        pass

    @abstractmethod
    def stop(self) -> None:
        """フレームの配信を停止"""
        pass

    @property
    @abstractmethod
    def is_running(self) -> bool:
        """配信中かどうか"""
        pass


class _ChunkedFrameSource(FrameSource):
    """
    固定長フレームに分割して配信する共通実装

    コールバックはロック内で呼ぶため、別スレッドからのstopは
    配信中のコールバックの完了を待ってから戻る。
    """

    def __init__(self, sample_rate: int, channels: int, frame_size: int | None) -> None:
        if sample_rate <= 0:
            raise ValueError(f"sample_rate must be positive, got {sample_rate}")
        if channels not in (1, 2):
            raise ValueError(f"channels must be 1 or 2, got {channels}")
        size = default_frame_size(sample_rate) if frame_size is None else frame_size
        if size <= 0:
            raise ValueError("frame_size must be greater than zero")

        self.sample_rate = sample_rate
        self.channels = channels
        self.frame_size = size
        self._lock = threading.RLock()
        self._running = False

    @property
    def frame_duration_ms(self) -> float:
        """1フレームの長さ（ミリ秒）"""
        return self.frame_size * 1000.0 / self.sample_rate

    @property
    def is_running(self) -> bool:
        return self._running

    def _begin(self) -> bool:
        """配信を開始済みにする（既に配信中ならFalse）"""
        with self._lock:
            if self._running:
                return False
            self._running = True
            return True

    def _deliver(self, index: int, pcm: np.ndarray, on_frame: FrameCallback) -> bool:
        """
        フレームを1つ配信

        Returns:
            bool: 配信を継続できるか（stop済みならFalse）
        """
        frame = Frame(
            pcm=pcm,
            ts_ms=index * self.frame_duration_ms,
            sample_rate=self.sample_rate,
            channels=self.channels,
        )
        with self._lock:
            if not self._running:
                return False
            on_frame(frame)
            return True

    def stop(self) -> None:
        with self._lock:
            self._running = False


class Pcm16StreamSource(_ChunkedFrameSource):
    """
    16bit リトルエンディアンPCMのバイトストリームからのフレームソース

    末尾の端数はゼロパディングして1フレームとして配信する。
    タイムスタンプは0から始まり、フレーム長ずつ進む。
    """

    def __init__(
        self,
        stream: BinaryIO,
        sample_rate: int,
        channels: int = 1,
        frame_size: int | None = None,
    ) -> None:
        """
        Args:
            stream: read() でバイト列を返すバイナリストリーム
            sample_rate: サンプルレート
            channels: チャンネル数（1 or 2、インターリーブ）
            frame_size: チャンネルあたりのフレームサンプル数（既定は10ミリ秒分）
        """
        super().__init__(sample_rate, channels, frame_size)
        self.stream = stream

    @property
    def frame_bytes(self) -> int:
        return self.frame_size * self.channels * PCM16_BYTES_PER_SAMPLE

    def _decode(self, chunk: bytes) -> np.ndarray:
        if len(chunk) < self.frame_bytes:
            chunk = chunk + bytes(self.frame_bytes - len(chunk))
        return np.frombuffer(chunk, dtype="<i2").astype(np.int16)

    def start(self, on_frame: FrameCallback) -> None:
        if not self._begin():
            return

        frame_bytes = self.frame_bytes
        pending = b""
        index = 0
        try:
            while self._running:
                data = self.stream.read(frame_bytes)
                if not data:
                    break
                pending += data
                while len(pending) >= frame_bytes:
                    chunk, pending = pending[:frame_bytes], pending[frame_bytes:]
                    if not self._deliver(index, self._decode(chunk), on_frame):
                        return
                    index += 1

            if pending and self._running:
                self._deliver(index, self._decode(pending), on_frame)
        finally:
            self.stop()


class FileFrameSource(_ChunkedFrameSource):
    """
    音声ファイル（wav/flac等）からのフレームソース

    soundfile で16bit整数として読み込む。mono=True または3ch以上の場合は
    モノラルにダウンミックスしたfloat32フレームを配信する。
    """

    def __init__(
        self,
        path: str | Path,
        frame_size: int | None = None,
        mono: bool = False,
        realtime_simulation: bool = False,
    ) -> None:
        """
        Args:
            path: 音声ファイルのパス
            frame_size: チャンネルあたりのフレームサンプル数（既定は10ミリ秒分）
            mono: Trueの場合はモノラルにダウンミックス
            realtime_simulation: Trueの場合、実時間に合わせてsleepを入れる
        """
        self.path = Path(path)
        info = sf.info(str(self.path))
        self.source_channels = int(info.channels)
        self.mono = mono or self.source_channels > 2
        super().__init__(
            int(info.samplerate), 1 if self.mono else self.source_channels, frame_size
        )
        self.realtime_simulation = realtime_simulation

    def _load(self) -> np.ndarray:
        """ファイルを読み込み、インターリーブされた1次元配列で返す"""
        data, _ = sf.read(str(self.path), dtype="int16", always_2d=True)
        if self.mono and self.source_channels > 1:
            return downmix_to_mono(data, self.source_channels)
        return np.ascontiguousarray(data).reshape(-1)

    def _chunks(self, samples: np.ndarray) -> Iterator[np.ndarray]:
        step = self.frame_size * self.channels
        for offset in range(0, len(samples), step):
            chunk = samples[offset : offset + step]
            # 最後のフレームが短い場合はゼロパディング
            if len(chunk) < step:
                chunk = np.pad(chunk, (0, step - len(chunk)), mode="constant")
            yield chunk

    def start(self, on_frame: FrameCallback) -> None:
        if not self._begin():
            return
        try:
            samples = self._load()
            for index, chunk in enumerate(self._chunks(samples)):
                if not self._deliver(index, chunk, on_frame):
                    return
                if self.realtime_simulation:
                    time.sleep(self.frame_duration_ms / 1000.0)
        finally:
            self.stop()
