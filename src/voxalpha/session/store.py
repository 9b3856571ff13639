"""
記憶體內的偏好/紀錄儲存

PreferenceStore 的參考實作，供測試與不需要持久化的情境使用。
"""

import threading
import time
from typing import Any, Dict, List, Optional

DEFAULT_LANGUAGE = "en"


class InMemoryStore:
    """語言偏好 (key-value) 與練習紀錄 (append-only)"""

    def __init__(self, language: Optional[str] = None):
        self._settings: Dict[str, Any] = {}
        self._history: List[Dict[str, Any]] = []
        self._lock = threading.Lock()
        if language:
            self._settings["language"] = language

    def save_language(self, tag: str) -> None:
        with self._lock:
            self._settings["language"] = tag

    def get_language(self) -> str:
        with self._lock:
            return self._settings.get("language", DEFAULT_LANGUAGE)

    def save_history(self, entry: Dict[str, Any]) -> None:
        record = dict(entry)
        record.setdefault("timestamp", time.time())
        with self._lock:
            self._history.append(record)

    def get_history(self, limit: int = 100) -> List[Dict[str, Any]]:
        with self._lock:
            ordered = list(reversed(self._history))
        return ordered[:limit]

    def clear(self) -> None:
        with self._lock:
            self._settings.clear()
            self._history.clear()
