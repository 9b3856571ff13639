"""
錄音狀態機模組

    IDLE → CAPTURING → DRAINING → READY

- start(): 開始把輸入區塊依序加入緩衝清單；裝置未取得時拒絕。
- stop(): 停止接收新區塊，等待串流關閉後串接並前處理。
- 區塊由宿主環境的音訊執行緒送入，以 lock 保護；
  前處理期間緩衝只由 stop() 這個 task 存取。
"""

from __future__ import annotations

import asyncio
import threading
from enum import Enum
from typing import List, Optional

import numpy as np

from voxalpha.config import AudioConfig
from voxalpha.core.errors import AudioCaptureError, DeviceUnavailableError, EmptyCaptureError
from voxalpha.core.protocols.audio_source import AudioSource
from voxalpha.utils.logger import TimingContext, get_logger

from .processing import AudioBuffer, preprocess


class CaptureState(Enum):
    IDLE = "idle"
    CAPTURING = "capturing"
    DRAINING = "draining"
    READY = "ready"


class AudioRecorder:
    """
    錄音器

    持有一個 AudioSource，負責單次錄音的生命週期。

    使用範例:
        >>> recorder = AudioRecorder(SoundDeviceSource())
        >>> recorder.open()
        >>> recorder.start()
        >>> buffer = await recorder.stop()
    """

    def __init__(self, source: AudioSource, config: Optional[AudioConfig] = None):
        self.source = source
        self.config = config or AudioConfig()
        self.state = CaptureState.IDLE
        self._chunks: List[np.ndarray] = []
        self._lock = threading.Lock()
        self._logger = get_logger("audio.capture")

    @property
    def is_recording(self) -> bool:
        return self.state is CaptureState.CAPTURING

    def open(self) -> None:
        """取得輸入裝置 (失敗時拋出 DeviceUnavailableError / PermissionDeniedError / AudioCaptureError)"""
        if self.source.is_open:
            self._logger.debug("Microphone already initialized")
            return
        self.source.open()
        self._logger.info(f"Microphone initialized ({self.source.sample_rate}Hz)")

    def close(self) -> None:
        if self.state is CaptureState.CAPTURING:
            self.source.stop()
        self.source.close()
        self.state = CaptureState.IDLE
        with self._lock:
            self._chunks = []

    def start(self) -> None:
        """
        開始錄音

        Raises:
            DeviceUnavailableError: 麥克風從未成功取得
        """
        if not self.source.is_open:
            raise DeviceUnavailableError(
                "audio source was never opened",
                user_message="Microphone not initialized. Please allow microphone access and retry.",
            )
        if self.state in (CaptureState.CAPTURING, CaptureState.DRAINING):
            self._logger.warning("Already recording")
            return

        with self._lock:
            self._chunks = []
        self.state = CaptureState.CAPTURING
        try:
            self.source.start(self._on_chunk)
        except AudioCaptureError:
            self.state = CaptureState.IDLE
            raise
        self._logger.debug("Recording started")

    def _on_chunk(self, chunk: np.ndarray) -> None:
        # 由音訊執行緒呼叫
        with self._lock:
            if self.state is not CaptureState.CAPTURING:
                return
            self._chunks.append(np.array(chunk, dtype=np.float32, copy=True).reshape(-1))

    async def stop(self) -> AudioBuffer:
        """
        停止錄音並回傳前處理後的音訊

        Raises:
            EmptyCaptureError: 沒有擷取到任何樣本
        """
        if self.state is not CaptureState.CAPTURING:
            self._logger.warning("Not recording")
            raise EmptyCaptureError("stop() called while not recording")

        with self._lock:
            self.state = CaptureState.DRAINING

        loop = asyncio.get_running_loop()
        try:
            await loop.run_in_executor(None, self.source.stop)
        except AudioCaptureError:
            self.state = CaptureState.IDLE
            raise

        with self._lock:
            chunks, self._chunks = self._chunks, []

        self._logger.debug(f"Stopped recording, captured {len(chunks)} chunks")

        if not chunks or sum(chunk.size for chunk in chunks) == 0:
            self.state = CaptureState.IDLE
            raise EmptyCaptureError("no audio data captured")

        with TimingContext("AudioRecorder.preprocess", self._logger):
            buffer = preprocess(chunks, self.source.sample_rate, self.config)

        self.state = CaptureState.READY
        return buffer
