"""
可選依賴檢查

核心比對功能只需要 Levenshtein 與 numpy；
錄音 (sounddevice) 與語音辨識 (faster-whisper) 為可選依賴。
"""

import importlib.util

AUDIO_INSTALL_HINT = (
    "缺少錄音依賴。請執行:\n"
    "  pip install \"voxalpha[audio]\"\n\n"
    "注意: sounddevice 需要系統安裝 PortAudio:\n"
    "  macOS: brew install portaudio\n"
    "  Linux: apt install libportaudio2"
)

WHISPER_INSTALL_HINT = (
    "缺少語音辨識依賴。請執行:\n"
    "  pip install \"voxalpha[whisper]\"\n"
    "或安裝完整版本:\n"
    "  pip install \"voxalpha[all]\""
)


def _has_module(name: str) -> bool:
    return importlib.util.find_spec(name) is not None


def is_audio_available() -> bool:
    """檢查 sounddevice 是否已安裝"""
    return _has_module("sounddevice")


def is_whisper_available() -> bool:
    """檢查 faster-whisper 是否已安裝"""
    return _has_module("faster_whisper")


def check_audio_dependencies() -> None:
    """缺少錄音依賴時拋出 ImportError (附安裝提示)"""
    if not is_audio_available():
        raise ImportError(AUDIO_INSTALL_HINT)


def check_whisper_dependencies() -> None:
    """缺少語音辨識依賴時拋出 ImportError (附安裝提示)"""
    if not is_whisper_available():
        raise ImportError(WHISPER_INSTALL_HINT)
