"""
voxalpha - 語音拼字字母練習器 (Spoken Spelling-Alphabet Trainer)

核心概念：
- 每一題顯示一個字母，使用者念出對應的代碼詞 (NATO: "Alpha"、DIN 5009: "Aachen")
- 錄音經前處理後交給語音辨識引擎，逐字稿再以編輯距離模糊比對
- 城市字母表 (德文) 先依首字母縮減城市清單，再選出最佳候選

官方入口（穩定 API）：
- `voxalpha.TrainerSession`
- `voxalpha.DecisionPolicy`
- `voxalpha.get_profile`
"""

# =============================================================================
# Session 層（官方入口）
# =============================================================================
from voxalpha.session import InMemoryStore, TrainerSession, TrialOutcome

# =============================================================================
# 比對與語言設定
# =============================================================================
from voxalpha.matching import (
    Challenge,
    DecisionPolicy,
    MatchResult,
    TrialState,
    Verdict,
    normalize,
    rank_candidates,
    select_best,
    similarity,
)
from voxalpha.languages import LanguageProfile, available_languages, get_profile, spell_text

# =============================================================================
# 配置
# =============================================================================
from voxalpha.config import AudioConfig, MatchingConfig, TrainerConfig

# =============================================================================
# 日誌工具
# =============================================================================
from voxalpha.utils.logger import enable_debug_logging, enable_timing_logging, get_logger

# =============================================================================
# 依賴檢查工具
# =============================================================================
from voxalpha.utils.lazy_imports import (
    check_audio_dependencies,
    check_whisper_dependencies,
    is_audio_available,
    is_whisper_available,
)

# =============================================================================
# Protocol（進階用途）
# =============================================================================
from voxalpha.core.protocols import AudioSource, PreferenceStore, SpeechRecognizer

__all__ = [
    # Session
    "TrainerSession",
    "TrialOutcome",
    "InMemoryStore",
    # Matching
    "DecisionPolicy",
    "Challenge",
    "Verdict",
    "TrialState",
    "MatchResult",
    "normalize",
    "similarity",
    "select_best",
    "rank_candidates",
    # Languages
    "LanguageProfile",
    "get_profile",
    "available_languages",
    "spell_text",
    # Config
    "TrainerConfig",
    "MatchingConfig",
    "AudioConfig",
    # Logging
    "get_logger",
    "enable_debug_logging",
    "enable_timing_logging",
    # Dependency checks
    "is_audio_available",
    "is_whisper_available",
    "check_audio_dependencies",
    "check_whisper_dependencies",
    # Protocols (advanced)
    "SpeechRecognizer",
    "PreferenceStore",
    "AudioSource",
]

__version__ = "0.1.0"
