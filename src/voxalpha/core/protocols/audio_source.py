"""
Audio Source Protocol

事件驅動的麥克風輸入：start() 之後，宿主環境會在自己的節奏下
以固定大小的 float32 區塊呼叫 callback。
"""

from typing import Callable, Protocol, runtime_checkable

import numpy as np

ChunkCallback = Callable[[np.ndarray], None]


@runtime_checkable
class AudioSource(Protocol):
    sample_rate: int

    @property
    def is_open(self) -> bool:
        ...

    def open(self) -> None:
        """取得輸入裝置，失敗時拋出 AudioCaptureError 子類"""
        ...

    def start(self, callback: ChunkCallback) -> None:
        ...

    def stop(self) -> None:
        ...

    def close(self) -> None:
        ...
