"""
工具模組

提供日誌、計時、可選依賴檢查等通用工具。
"""

from .lazy_imports import (
    AUDIO_INSTALL_HINT,
    WHISPER_INSTALL_HINT,
    check_audio_dependencies,
    check_whisper_dependencies,
    is_audio_available,
    is_whisper_available,
)
from .logger import (
    TimingContext,
    enable_debug_logging,
    enable_timing_logging,
    get_logger,
    log_timing,
    setup_logger,
)

__all__ = [
    # 日誌工具
    "get_logger",
    "setup_logger",
    "log_timing",
    "TimingContext",
    "enable_debug_logging",
    "enable_timing_logging",

    # 依賴檢查
    "is_audio_available",
    "is_whisper_available",
    "check_audio_dependencies",
    "check_whisper_dependencies",
    "AUDIO_INSTALL_HINT",
    "WHISPER_INSTALL_HINT",
]
