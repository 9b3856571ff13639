"""
外部協作者介面 (Protocols)
"""

from .audio_source import AudioSource, ChunkCallback
from .recognizer import SpeechRecognizer
from .store import PreferenceStore

__all__ = [
    "AudioSource",
    "ChunkCallback",
    "SpeechRecognizer",
    "PreferenceStore",
]
