#!/usr/bin/env python3
"""
Stream Segmenter - Ring Buffer
固定容量のfloat32サンプル用リングバッファ
"""

import numpy as np


class FloatRingBuffer:
    """
    固定容量のサンプルバッファ

    2つの書き込みモードを持つ:
    - overwrite=True（既定）: 満杯時は最も古いサンプルを上書きし、常に直近
      capacity サンプルを保持する（スライディングウィンドウ）
    - overwrite=False: 満杯になった時点で以降の書き込みを無視する（clearまで）
    """

    def __init__(self, capacity: int, overwrite: bool = True) -> None:
        if capacity <= 0:
            raise ValueError(f"capacity must be positive, got {capacity}")
        self.capacity = capacity
        self.overwrite = overwrite
        self._buffer = np.zeros(capacity, dtype=np.float32)
        self._read_index = 0
        self._available = 0

    def __len__(self) -> int:
        return self._available

    @property
    def size(self) -> int:
        """保持しているサンプル数"""
        return self._available

    @property
    def is_full(self) -> bool:
        return self._available == self.capacity

    def clear(self) -> None:
        """内容を破棄"""
        self._read_index = 0
        self._available = 0

    def write(self, data: np.ndarray) -> int:
        """
        サンプルを書き込む

        Returns:
            int: バッファに書き込んだサンプル数
        """
        samples = np.asarray(data, dtype=np.float32).reshape(-1)
        if not self.overwrite:
            samples = samples[: self.capacity - self._available]
        elif len(samples) > self.capacity:
            # 直近 capacity 分だけ残れば十分
            samples = samples[-self.capacity :]

        count = len(samples)
        if count == 0:
            return 0

        write_index = (self._read_index + self._available) % self.capacity
        first = min(count, self.capacity - write_index)
        self._buffer[write_index : write_index + first] = samples[:first]
        self._buffer[: count - first] = samples[first:]

        overflow = max(0, self._available + count - self.capacity)
        self._read_index = (self._read_index + overflow) % self.capacity
        self._available = min(self.capacity, self._available + count)
        return count

    def read(self, count: int) -> np.ndarray:
        """先頭から最大 count サンプルを取り出す（破壊的）"""
        result = self.snapshot()[: max(0, count)]
        self._read_index = (self._read_index + len(result)) % self.capacity
        self._available -= len(result)
        return result

    def snapshot(self) -> np.ndarray:
        """書き込み順に並べた内容のコピー（非破壊）"""
        indices = (self._read_index + np.arange(self._available)) % self.capacity
        return self._buffer[indices].copy()
