"""
Preference Store Protocol

語言偏好與練習紀錄的儲存介面（實際持久化不在本套件範圍內）。
"""

from typing import Any, Dict, List, Protocol, runtime_checkable


@runtime_checkable
class PreferenceStore(Protocol):
    def save_language(self, tag: str) -> None:
        ...

    def get_language(self) -> str:
        """未儲存時回傳預設語言 "en" """
        ...

    def save_history(self, entry: Dict[str, Any]) -> None:
        ...

    def get_history(self, limit: int = 100) -> List[Dict[str, Any]]:
        """最新的紀錄排在最前面"""
        ...
