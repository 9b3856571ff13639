"""
錯誤分類 (Error Taxonomy)

設計原則：
- TrialError 及其子類皆為「單次練習」層級的錯誤，可恢復：
  session 會把它轉成 REJECTED 結果並繼續下一題。
- VocabularyLoadError 是唯一會讓整個 session 無法啟動的錯誤。
"""

from __future__ import annotations


class VoxAlphaError(Exception):
    """所有 voxalpha 錯誤的基底類別"""


class VocabularyLoadError(VoxAlphaError):
    """字母表或城市清單載入失敗 (session 無法產生題目)"""


class UnsupportedLanguageError(VoxAlphaError):
    """未註冊的語言代碼"""

    def __init__(self, tag: str, available: list[str] | None = None):
        self.tag = tag
        self.available = list(available or [])
        hint = f" (available: {', '.join(self.available)})" if self.available else ""
        super().__init__(f"Unsupported language: {tag!r}{hint}")


class TrialError(VoxAlphaError):
    """
    單次練習錯誤

    Attributes:
        user_message: 可直接顯示給使用者的說明

    message 只用於 str(exc) 與日誌；沒有指定 user_message 時顯示類別的 default_message。
    """

    default_message = "Something went wrong. Please try again."

    def __init__(self, message: str | None = None, *, user_message: str | None = None):
        super().__init__(message or self.default_message)
        self.user_message = user_message or self.default_message


class AudioCaptureError(TrialError):
    default_message = "Microphone error. Please check your audio input."


class DeviceUnavailableError(AudioCaptureError):
    default_message = "No microphone found. Please connect a microphone."


class PermissionDeniedError(AudioCaptureError):
    default_message = "Microphone permission denied. Please allow microphone access."


class EmptyCaptureError(TrialError):
    default_message = "(no audio recorded)"


class RecognizerError(TrialError):
    default_message = "Speech recognition failed."


class RecognizerUnavailableError(RecognizerError):
    default_message = "Speech recognition is not available."


class RecognizerTimeoutError(RecognizerError):
    default_message = "Speech recognition timed out."


class RecognizerFailedError(RecognizerError):
    default_message = "Speech recognition did not produce a transcript."


class NoChallengeError(TrialError):
    default_message = "No answer detected"


class TrialInProgressError(TrialError):
    default_message = "Still evaluating the previous attempt."
