#!/usr/bin/env python3
"""
Stream Segmenter - Stage Contract
パイプラインに接続する処理単位のインターフェース
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from stream_segmenter.domain import Frame
from stream_segmenter.domain.events import Handler, Unsubscribe

from ..logger import Logger


@dataclass(frozen=True)
class StageContext:
    """
    setup時にステージへ渡される実行コンテキスト

    Attributes:
        emit: イベント発行関数
        on: イベント購読関数（登録解除関数を返す）
        now: パイプラインの時計（ミリ秒）
        create_id: ID生成関数
        logger: ステージ名の名前空間を持つロガー
    """

    emit: Callable[[str, Any], None]
    on: Callable[[str, Handler], Unsubscribe]
    now: Callable[[], float]
    create_id: Callable[[], str]
    logger: Logger


class Stage(ABC):
    """
    パイプラインのステージ抽象基底クラス

    ライフサイクル:
    - setup: パイプラインへの接続時（teardown後やreinitialize時に再度呼ばれうる）
    - handle: フレームごとに登録順で同期的に呼ばれる
    - flush: ストリーム終端で保留中の出力を確定させる
    - teardown: 取り外し時にバッファと内部状態を解放する
    """

    name: str = "stage"

    @abstractmethod
    def setup(self, context: StageContext) -> None:
        """パイプラインへの接続"""
        pass

    @abstractmethod
    def handle(self, frame: Frame) -> None:
        """フレームを1つ処理"""
        pass

    def flush(self) -> None:
        """保留中の出力を確定（既定は何もしない）"""
        return None

    def teardown(self) -> None:
        """内部状態の解放（既定は何もしない）"""
        return None
