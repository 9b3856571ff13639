"""
練習 session 模組

官方入口:
- `TrainerSession`: 出題 → 錄音 → 辨識 → 判定 → 下一題
- `InMemoryStore`: 語言偏好與練習紀錄的記憶體實作
"""

from .store import InMemoryStore
from .trainer import TrainerSession, TrialOutcome

__all__ = ["TrainerSession", "TrialOutcome", "InMemoryStore"]
