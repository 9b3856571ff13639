"""
Speech Recognizer Protocol

外部語音辨識引擎的最小介面：一次呼叫回傳完整逐字稿或失敗。
串流/分段輸出的彙整屬於 adapter 內部細節。
"""

from typing import Protocol, runtime_checkable

import numpy as np


@runtime_checkable
class SpeechRecognizer(Protocol):
    async def transcribe(self, samples: np.ndarray, language: str, threads: int) -> str:
        """將 16 kHz 單聲道 float32 樣本轉成文字"""
        ...
