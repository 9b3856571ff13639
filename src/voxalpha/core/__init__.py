"""
核心抽象層

定義錯誤分類、事件模型與外部協作者介面。
"""

from .errors import (
    AudioCaptureError,
    DeviceUnavailableError,
    EmptyCaptureError,
    NoChallengeError,
    PermissionDeniedError,
    RecognizerError,
    RecognizerFailedError,
    RecognizerTimeoutError,
    RecognizerUnavailableError,
    TrialError,
    TrialInProgressError,
    UnsupportedLanguageError,
    VocabularyLoadError,
    VoxAlphaError,
)
from .events import AlternativeRecord, TrialEvent, TrialEventHandler

__all__ = [
    "VoxAlphaError",
    "VocabularyLoadError",
    "UnsupportedLanguageError",
    "TrialError",
    "AudioCaptureError",
    "DeviceUnavailableError",
    "PermissionDeniedError",
    "EmptyCaptureError",
    "RecognizerError",
    "RecognizerUnavailableError",
    "RecognizerTimeoutError",
    "RecognizerFailedError",
    "NoChallengeError",
    "TrialInProgressError",
    "TrialEvent",
    "TrialEventHandler",
    "AlternativeRecord",
]
