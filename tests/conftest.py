"""
測試用的假協作者 (麥克風、辨識器)

不需要真實麥克風或 Whisper 模型。
"""
import asyncio
from typing import List, Optional

import numpy as np
import pytest


class FakeAudioSource:
    """start() 時依序送出預先準備的區塊"""

    def __init__(self, chunks=None, sample_rate: int = 16000, open_error: Optional[Exception] = None):
        self.sample_rate = sample_rate
        self.chunks: List[np.ndarray] = list(chunks or [])
        self.open_error = open_error
        self.callback = None
        self.stop_calls = 0
        self._open = False

    @property
    def is_open(self) -> bool:
        return self._open

    def open(self) -> None:
        if self.open_error is not None:
            raise self.open_error
        self._open = True

    def start(self, callback) -> None:
        self.callback = callback
        for chunk in self.chunks:
            callback(chunk)

    def push(self, chunk) -> None:
        if self.callback is not None:
            self.callback(chunk)

    def stop(self) -> None:
        self.stop_calls += 1

    def close(self) -> None:
        self._open = False


class FakeRecognizer:
    """依序回傳預先準備的逐字稿"""

    def __init__(self, transcripts=None, error: Optional[Exception] = None, delay: float = 0.0):
        self.transcripts = list(transcripts or [])
        self.error = error
        self.delay = delay
        self.calls = []

    async def transcribe(self, samples: np.ndarray, language: str, threads: int) -> str:
        self.calls.append({"samples": samples, "language": language, "threads": threads})
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.transcripts.pop(0) if self.transcripts else ""


def tone(seconds: float, sample_rate: int = 16000, amplitude: float = 0.5) -> np.ndarray:
    t = np.arange(int(seconds * sample_rate)) / sample_rate
    return (amplitude * np.sin(2 * np.pi * 440 * t)).astype(np.float32)


@pytest.fixture
def fake_source_cls():
    return FakeAudioSource


@pytest.fixture
def fake_recognizer_cls():
    return FakeRecognizer


@pytest.fixture
def make_tone():
    return tone
