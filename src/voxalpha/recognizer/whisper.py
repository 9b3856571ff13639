"""
Whisper 語音辨識 adapter

使用 faster-whisper 將 16 kHz 單聲道樣本轉成文字。
模型在 open() 時載入一次；transcribe() 在預設 executor 中執行，
把分段結果合併成一個完整逐字稿回傳。

環境需求:
    pip install "voxalpha[whisper]"
"""

from __future__ import annotations

import asyncio
import os
import threading
from typing import Optional

import numpy as np

from voxalpha.core.errors import RecognizerFailedError, RecognizerUnavailableError
from voxalpha.utils.lazy_imports import WHISPER_INSTALL_HINT
from voxalpha.utils.logger import TimingContext, get_logger

DEFAULT_MODEL = "tiny"


def default_thread_count() -> int:
    return os.cpu_count() or 4


def _get_whisper_model_class():
    """延遲載入 faster_whisper.WhisperModel"""
    try:
        from faster_whisper import WhisperModel
    except ImportError as exc:
        raise ImportError(WHISPER_INSTALL_HINT) from exc
    return WhisperModel


class WhisperRecognizer:
    """
    faster-whisper 辨識器

    Args:
        model_size_or_path: 模型名稱 (例如 "tiny"、"base") 或本機路徑
        device: "cpu" / "cuda" / "auto"
        compute_type: 例如 "int8"、"float16"
        beam_size: beam search 寬度
    """

    def __init__(
        self,
        model_size_or_path: str = DEFAULT_MODEL,
        *,
        device: str = "cpu",
        compute_type: str = "int8",
        beam_size: int = 1,
    ):
        self.model_size_or_path = model_size_or_path
        self.device = device
        self.compute_type = compute_type
        self.beam_size = beam_size
        self._model = None
        self._load_error: Optional[BaseException] = None
        self._lock = threading.Lock()
        self._logger = get_logger("recognizer.whisper")

    def is_initialized(self) -> bool:
        return self._model is not None

    def open(self, threads: Optional[int] = None) -> None:
        """
        載入模型

        Raises:
            ImportError: 未安裝 faster-whisper
            RecognizerUnavailableError: 模型載入失敗
        """
        if self._model is not None:
            return

        WhisperModel = _get_whisper_model_class()
        with TimingContext(f"WhisperRecognizer.open({self.model_size_or_path})", self._logger):
            try:
                self._model = WhisperModel(
                    self.model_size_or_path,
                    device=self.device,
                    compute_type=self.compute_type,
                    cpu_threads=threads or default_thread_count(),
                )
            except Exception as exc:
                self._load_error = exc
                self._logger.exception("Failed to load Whisper model")
                raise RecognizerUnavailableError(f"Whisper model failed to load: {exc}") from exc

        self._load_error = None
        self._logger.info(f"Whisper model loaded ({self.model_size_or_path}, {self.device})")

    def close(self) -> None:
        self._model = None

    async def transcribe(self, samples: np.ndarray, language: str, threads: int = 0) -> str:
        """
        辨識一段音訊

        Args:
            samples: 16 kHz 單聲道 float32 樣本
            language: 語言代碼 (例如 "en"、"de")
            threads: 平行處理提示 (模型載入時已決定，這裡只做記錄)

        Raises:
            RecognizerUnavailableError: 模型未載入
            RecognizerFailedError: 靜音或引擎錯誤
        """
        if self._model is None:
            reason = f": {self._load_error}" if self._load_error else ""
            raise RecognizerUnavailableError(f"Whisper model not loaded{reason}")

        samples = np.asarray(samples, dtype=np.float32)
        if samples.size == 0 or float(np.max(np.abs(samples))) == 0.0:
            raise RecognizerFailedError(
                "cannot transcribe silent audio",
                user_message="Audio is silent - check microphone settings",
            )

        self._logger.debug(
            f"Transcribing {samples.size} samples ({samples.size / 16000:.1f}s), "
            f"language={language}, threads={threads or default_thread_count()}"
        )

        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self._transcribe_sync, samples, language)

    def _transcribe_sync(self, samples: np.ndarray, language: str) -> str:
        with self._lock:
            try:
                segments, _info = self._model.transcribe(
                    samples,
                    language=language,
                    beam_size=self.beam_size,
                    temperature=0.0,
                    condition_on_previous_text=False,
                )
                # segments 是 generator，必須在 lock 內消耗完
                text = " ".join(segment.text.strip() for segment in segments).strip()
            except Exception as exc:
                self._logger.exception("Whisper transcription failed")
                raise RecognizerFailedError(f"Whisper transcription failed: {exc}") from exc

        self._logger.debug(f'Transcription result: "{text}"')
        return text
