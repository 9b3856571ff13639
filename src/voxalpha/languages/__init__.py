"""
語言設定檔註冊表

官方入口:
- `get_profile(tag)`: 取得 (並快取) 指定語言的設定檔
- `available_languages()`: 已註冊的語言代碼
"""

from __future__ import annotations

import threading
from typing import Callable, Dict, List

from voxalpha.core.errors import UnsupportedLanguageError, VocabularyLoadError
from voxalpha.utils.logger import get_logger

from .english import build_english_profile
from .german import build_german_profile
from .profile import LanguageProfile, VocabularyKind, spell_text

_logger = get_logger("languages")

_BUILDERS: Dict[str, Callable[[], LanguageProfile]] = {
    "en": build_english_profile,
    "de": build_german_profile,
}

_profiles: Dict[str, LanguageProfile] = {}
_lock = threading.Lock()


def available_languages() -> List[str]:
    return list(_BUILDERS.keys())


def register_language(tag: str, builder: Callable[[], LanguageProfile]) -> None:
    """註冊新語言 (新增語言不需修改比對程式碼)"""
    with _lock:
        _BUILDERS[tag] = builder
        _profiles.pop(tag, None)


def get_profile(tag: str) -> LanguageProfile:
    """
    取得語言設定檔

    Raises:
        UnsupportedLanguageError: 未註冊的語言代碼
        VocabularyLoadError: 字母表或城市清單載入失敗
    """
    with _lock:
        profile = _profiles.get(tag)
        if profile is not None:
            return profile

        builder = _BUILDERS.get(tag)
        if builder is None:
            raise UnsupportedLanguageError(tag, list(_BUILDERS.keys()))

        profile = builder()
        if not profile.alphabet:
            raise VocabularyLoadError(f"Alphabet for {tag!r} is empty")

        _profiles[tag] = profile
        _logger.debug(f"Loaded language profile '{tag}' ({profile.display_name})")
        return profile


def load_profiles() -> Dict[str, LanguageProfile]:
    """一次載入所有已註冊語言"""
    return {tag: get_profile(tag) for tag in available_languages()}


def clear_profile_cache() -> None:
    with _lock:
        _profiles.clear()


__all__ = [
    "LanguageProfile",
    "VocabularyKind",
    "spell_text",
    "get_profile",
    "available_languages",
    "register_language",
    "load_profiles",
    "clear_profile_cache",
]
