#!/usr/bin/env python3
"""
Stream Segmenter - Hysteresis
開始/終了で閾値を切り替える二値判定
"""


class Hysteresis:
    """
    ヒステリシス付き閾値判定

    - 非アクティブ時: 値が enter 以上でアクティブへ
    - アクティブ時: 値が exit 未満で非アクティブへ
    - hold_ms > 0 の場合、直前の状態変化から hold_ms 経過するまで反転しない
    """

    def __init__(self, enter: float, exit: float, hold_ms: float = 0.0) -> None:
        self.enter = enter
        self.exit = exit
        self.hold_ms = hold_ms
        self._validate()
        self.active = False
        self._last_change_ms: float | None = None

    def _validate(self) -> None:
        if self.exit > self.enter:
            raise ValueError(
                f"exit threshold ({self.exit}) must not exceed enter threshold ({self.enter})"
            )
        if self.hold_ms < 0:
            raise ValueError(f"hold_ms must be non-negative, got {self.hold_ms}")

    def configure(
        self,
        enter: float | None = None,
        exit: float | None = None,
        hold_ms: float | None = None,
    ) -> None:
        """閾値を更新（現在の状態は保持）"""
        previous = (self.enter, self.exit, self.hold_ms)
        if enter is not None:
            self.enter = enter
        if exit is not None:
            self.exit = exit
        if hold_ms is not None:
            self.hold_ms = hold_ms
        try:
            self._validate()
        except ValueError:
            self.enter, self.exit, self.hold_ms = previous
            raise

    def update(self, value: float, ts_ms: float) -> bool:
        """
        値を評価して現在の状態を返す

        Args:
            value: 判定対象の値
            ts_ms: 値の時刻（ミリ秒）

        Returns:
            bool: 評価後の状態
        """
        wanted = value >= self.exit if self.active else value >= self.enter
        if wanted == self.active:
            return self.active

        if (
            self._last_change_ms is not None
            and ts_ms - self._last_change_ms < self.hold_ms
        ):
            return self.active

        self.active = wanted
        self._last_change_ms = ts_ms
        return self.active

    def reset(self) -> None:
        """状態を初期化"""
        self.active = False
        self._last_change_ms = None
