#!/usr/bin/env python3
"""
Stream Segmenter - Events (Pub/Sub)
ドメイン層: ステージ間通信を担うイベントバス
"""

from collections.abc import Callable, Iterable
from enum import StrEnum
from typing import Any

from blinker import Namespace

Handler = Callable[[Any], None]
Unsubscribe = Callable[[], None]


# ========================================
# イベント名定義
# ========================================
class PipelineEvent(StrEnum):
    """パイプライン上を流れるイベント（閉じた集合）"""

    VAD = "vad"  # VADScore
    SPEECH_START = "speechStart"  # SpeechBoundary
    SPEECH_END = "speechEnd"  # SpeechBoundary
    SEGMENT = "segment"  # Segment
    METER = "meter"  # MeterReading
    ERROR = "error"  # CoreError


# ========================================
# イベントバス
# ========================================
class EventBus:
    """
    名前付きイベントの同期Pub/Sub

    blinkerのSignalをイベント名ごとに1つ持ち、emitは呼び出し元のスタック上で
    全ハンドラを即座に実行する。ハンドラの例外は握りつぶさず伝播させる。

    Note:
        ハンドラ間の呼び出し順序は保証しない（全ハンドラが1回ずつ呼ばれることのみ保証）。
    """

    def __init__(self, names: Iterable[str] | None = None) -> None:
        """
        Args:
            names: 許可するイベント名（Noneの場合は任意の名前を許可）
        """
        self._names: frozenset[str] | None = (
            frozenset(str(name) for name in names) if names is not None else None
        )
        self._signals = Namespace()
        # (イベント名, ハンドラ) -> blinkerに登録したレシーバ
        self._receivers: dict[tuple[str, Handler], Callable[..., None]] = {}

    def _resolve(self, name: str) -> str:
        """イベント名を検証して正規化"""
        key = str(name)
        if self._names is not None and key not in self._names:
            raise ValueError(f"Unknown event: {key!r}")
        return key

    def on(self, name: str, handler: Handler) -> Unsubscribe:
        """
        ハンドラを登録

        Args:
            name: イベント名
            handler: ペイロードを1引数で受け取る関数

        Returns:
            登録解除関数（複数回呼んでも安全）
        """
        key = self._resolve(name)
        signal = self._signals.signal(key)
        registration = (key, handler)

        if registration not in self._receivers:

            def receiver(_sender: object, payload: Any = None) -> None:
                handler(payload)

            self._receivers[registration] = receiver
            signal.connect(receiver, weak=False)

        def unsubscribe() -> None:
            receiver = self._receivers.pop(registration, None)
            if receiver is not None:
                signal.disconnect(receiver)

        return unsubscribe

    def emit(self, name: str, payload: Any) -> None:
        """登録済みの全ハンドラへ同期的に配信（ハンドラなしなら何もしない）"""
        key = self._resolve(name)
        signal = self._signals.get(key)
        if signal is None or not signal.receivers:
            return
        signal.send(self, payload=payload)

    def handler_count(self, name: str) -> int:
        """登録中のハンドラ数"""
        key = self._resolve(name)
        return sum(1 for event, _ in self._receivers if event == key)

    def clear(self) -> None:
        """全ての購読を解除"""
        for (key, _), receiver in list(self._receivers.items()):
            self._signals.signal(key).disconnect(receiver)
        self._receivers.clear()
