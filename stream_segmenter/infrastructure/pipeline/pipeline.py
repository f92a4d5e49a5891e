#!/usr/bin/env python3
"""
Stream Segmenter - Pipeline Module
ステージの登録・フレーム配信・ライフサイクル管理を行うモジュール
"""

from __future__ import annotations

import time
import uuid
from collections import deque
from collections.abc import Callable, Sequence
from typing import Any

from stream_segmenter.domain import EventBus, Frame, PipelineEvent
from stream_segmenter.domain.constants import PENDING_FRAME_CAPACITY
from stream_segmenter.domain.events import Handler, Unsubscribe

from ..logger import NOOP_LOGGER, Logger
from .stage import Stage, StageContext


def monotonic_ms() -> float:
    """単調増加時計（ミリ秒）"""
    return time.monotonic() * 1000.0


def random_id() -> str:
    """UUID4文字列"""
    return str(uuid.uuid4())


class _StageBinding:
    """
    ステージとパイプラインの接続1回分

    コンテキスト経由の購読を記録し、release後はemit/onを無効化する。
    """

    def __init__(
        self,
        stage: Stage,
        bus: EventBus,
        now: Callable[[], float],
        create_id: Callable[[], str],
        logger: Logger,
    ) -> None:
        self.stage = stage
        self.active = True
        self._bus = bus
        self._unsubscribes: list[Unsubscribe] = []
        self.context = StageContext(
            emit=self._emit,
            on=self._on,
            now=now,
            create_id=create_id,
            logger=logger.child(stage.name),
        )

    def _emit(self, name: str, payload: Any) -> None:
        if self.active:
            self._bus.emit(name, payload)

    def _on(self, name: str, handler: Handler) -> Unsubscribe:
        if not self.active:
            return lambda: None
        unsubscribe = self._bus.on(name, handler)
        self._unsubscribes.append(unsubscribe)
        return unsubscribe

    def release(self) -> None:
        """購読を解除し、コンテキストを無効化"""
        self.active = False
        for unsubscribe in self._unsubscribes:
            unsubscribe()
        self._unsubscribes.clear()


class Pipeline:
    """
    ストリーミング処理パイプライン

    責務:
    - ステージの順序付きリストと共有イベントバスの保持
    - フレームの登録順配信（同期）
    - flush / dispose / configure / reinitialize のライフサイクル
    - ステージ未設定時のフレーム保留（容量超過分は新しいものから破棄）

    ステージが送出した例外は捕捉せず、呼び出し元へそのまま伝播する。
    """

    def __init__(
        self,
        now: Callable[[], float] | None = None,
        create_id: Callable[[], str] | None = None,
        logger: Logger = NOOP_LOGGER,
        pending_capacity: int = PENDING_FRAME_CAPACITY,
    ) -> None:
        """
        Args:
            now: 時計（ミリ秒）。省略時は単調増加時計
            create_id: ID生成関数。省略時はUUID4
            logger: パイプラインのロガー
            pending_capacity: ステージ未設定時に保留するフレーム数の上限
        """
        if pending_capacity < 0:
            raise ValueError(
                f"pending_capacity must be non-negative, got {pending_capacity}"
            )
        self.events = EventBus(PipelineEvent)
        self.logger = logger
        self.pending_capacity = pending_capacity
        self.dropped_frames = 0

        self._now = now or monotonic_ms
        self._create_id = create_id or random_id
        self._bindings: list[_StageBinding] = []
        self._pending: deque[Frame] = deque()
        self._disposed = False

    # ========== 状態 ==========

    @property
    def stages(self) -> tuple[Stage, ...]:
        """登録順のステージ一覧"""
        return tuple(binding.stage for binding in self._bindings)

    @property
    def is_configured(self) -> bool:
        """フレームを即時処理できる状態か"""
        return bool(self._bindings) and not self._disposed

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    @property
    def pending_count(self) -> int:
        """保留中のフレーム数"""
        return len(self._pending)

    def now(self) -> float:
        """パイプラインの現在時刻（ミリ秒）"""
        return self._now()

    # ========== ステージ管理 ==========

    def _bind(self, stage: Stage) -> _StageBinding:
        binding = _StageBinding(
            stage, self.events, self._now, self._create_id, self.logger
        )
        try:
            stage.setup(binding.context)
        except Exception:
            binding.release()
            raise
        return binding

    def _teardown_all(self) -> None:
        for binding in self._bindings:
            binding.stage.teardown()
            binding.release()

    def use(self, stage: Stage) -> Pipeline:
        """
        ステージを末尾に追加（保留中のフレームがあれば順に再生）

        Returns:
            Pipeline: メソッドチェーン用に自身を返す
        """
        if self._disposed:
            raise RuntimeError(
                "Pipeline is disposed; call configure() or reinitialize() first"
            )
        self._bindings.append(self._bind(stage))
        self.logger.debug("Stage attached", {"stage": stage.name})
        self._drain_pending()
        return self

    def configure(self, stages: Sequence[Stage]) -> None:
        """
        ステージ一覧を置き換える

        既存ステージをteardownし、新しいステージをsetupした後、
        保留中のフレームを順に再生する。
        """
        if not self._disposed:
            self._teardown_all()
        self._bindings = []
        self._disposed = False

        try:
            for stage in stages:
                self._bindings.append(self._bind(stage))
        except Exception:
            self._teardown_all()
            self._bindings = []
            raise

        self.logger.debug(
            "Pipeline configured",
            lambda: {"stages": ",".join(stage.name for stage in self.stages)},
        )
        self._drain_pending()

    def reinitialize(self) -> None:
        """
        現在のステージを取り外さずに、新しいコンテキストでsetupし直す

        途中のsetupが失敗した場合はsetup済みのステージをteardownして再送出する。
        """
        stages = self.stages
        for binding in self._bindings:
            binding.release()
        self._bindings = []
        self._disposed = False
        try:
            for stage in stages:
                self._bindings.append(self._bind(stage))
        except Exception:
            self._teardown_all()
            self._bindings = []
            raise
        self.logger.debug("Pipeline reinitialized", {"stages": len(stages)})
        self._drain_pending()

    # ========== フレーム処理 ==========

    def _dispatch(self, frame: Frame) -> None:
        for binding in tuple(self._bindings):
            binding.stage.handle(frame)

    def _enqueue(self, frame: Frame) -> None:
        if len(self._pending) >= self.pending_capacity:
            self.dropped_frames += 1
            self.logger.debug(
                "Pending queue full, frame dropped",
                {"ts_ms": frame.ts_ms, "dropped": self.dropped_frames},
            )
            return
        self._pending.append(frame)

    def _drain_pending(self) -> None:
        while self._pending and self.is_configured:
            self._dispatch(self._pending.popleft())

    def push(self, frame: Frame) -> None:
        """フレームを全ステージへ登録順に配信（未設定時は保留）"""
        if self._disposed:
            self.logger.debug("Pipeline disposed, frame ignored", {"ts_ms": frame.ts_ms})
            return
        if not self._bindings:
            self._enqueue(frame)
            return
        self._dispatch(frame)

    def flush(self) -> None:
        """全ステージのflushを登録順に呼ぶ"""
        if self._disposed:
            return
        for binding in tuple(self._bindings):
            binding.stage.flush()

    def dispose(self) -> None:
        """全ステージのteardownを登録順に呼び、以降の処理を止める"""
        if self._disposed:
            return
        self._teardown_all()
        self._pending.clear()
        self._disposed = True
        self.logger.debug("Pipeline disposed")
