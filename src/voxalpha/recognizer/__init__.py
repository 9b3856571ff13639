"""
語音辨識 adapter

官方 adapter:
- `WhisperRecognizer` (需要 voxalpha[whisper])

任何實作 `voxalpha.core.protocols.SpeechRecognizer` 的物件都可以交給 TrainerSession。
"""

from .whisper import WhisperRecognizer, default_thread_count

__all__ = ["WhisperRecognizer", "default_thread_count"]
