"""
全域配置模組

提供比對、錄音與練習 session 的配置類別。

使用方式:
    from voxalpha import TrainerSession
    from voxalpha.config import TrainerConfig, MatchingConfig

    # 簡單開啟 verbose 模式
    config = TrainerConfig(language="de", verbose=True)

    # 進階: 調整比對參數
    config = TrainerConfig(matching=MatchingConfig(acceptance_threshold=0.75))

    # 或使用標準 logging 控制
    import logging
    logging.getLogger("voxalpha").setLevel(logging.DEBUG)
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Optional

from .utils.logger import setup_logger


def configure_logging(verbose: bool = False) -> None:
    """
    根據 verbose 設定配置 logging

    Args:
        verbose: 是否開啟詳細日誌
    """
    if verbose:
        setup_logger(level=logging.DEBUG)


@dataclass
class MatchingConfig:
    """
    比對配置

    屬性:
        acceptance_threshold: 封閉詞彙 (單一目標) 的接受門檻
        length_penalty: 每差一個字元扣除的相似度
        top_n: 保留的替代候選數量

    兩個數值皆為經驗值，換語言或換詞彙時需重新調整。
    """

    acceptance_threshold: float = 0.7
    length_penalty: float = 0.05
    top_n: int = 3

    def __post_init__(self):
        if not 0.0 <= self.acceptance_threshold <= 1.0:
            raise ValueError(
                f"acceptance_threshold must be between 0.0 and 1.0, got {self.acceptance_threshold}"
            )
        if self.length_penalty < 0.0:
            raise ValueError(f"length_penalty must be >= 0.0, got {self.length_penalty}")
        if self.top_n < 1:
            raise ValueError(f"top_n must be >= 1, got {self.top_n}")


@dataclass
class AudioConfig:
    """
    錄音與前處理配置

    屬性:
        target_sample_rate: 辨識引擎要求的取樣率
        min_duration_s: 辨識引擎要求的最短長度 (不足時補零)
        quiet_threshold: 峰值低於此值視為音量過小
        safe_peak: 增益後的目標峰值
        capture_sample_rate: 麥克風取樣率
        chunk_size: 每個輸入區塊的樣本數
        max_record_s: 自動停止錄音的上限
    """

    target_sample_rate: int = 16000
    min_duration_s: float = 1.0
    quiet_threshold: float = 0.01
    safe_peak: float = 0.1
    capture_sample_rate: int = 48000
    chunk_size: int = 4096
    max_record_s: float = 10.0

    def __post_init__(self):
        if self.target_sample_rate <= 0 or self.capture_sample_rate <= 0:
            raise ValueError("sample rates must be positive")
        if not 0.0 < self.safe_peak <= 1.0:
            raise ValueError(f"safe_peak must be in (0.0, 1.0], got {self.safe_peak}")

    @property
    def min_samples(self) -> int:
        return int(round(self.target_sample_rate * self.min_duration_s))


@dataclass
class TrainerConfig:
    """
    練習 session 配置

    屬性:
        language: 預設語言 (store 中有儲存時以 store 為準)
        recognizer_timeout_s: 等待辨識結果的上限
        accept_delay_s / closed_accept_delay_s / reject_delay_s / no_answer_delay_s:
            判定後進入下一題前的延遲
        verbose: 是否開啟詳細日誌
        on_timing: 計時回呼函數 (operation: str, elapsed: float) -> None
    """

    language: str = "en"
    recognizer_timeout_s: float = 30.0
    accept_delay_s: float = 2.0
    closed_accept_delay_s: float = 1.5
    reject_delay_s: float = 3.0
    no_answer_delay_s: float = 2.0
    verbose: bool = False
    on_timing: Optional[Callable[[str, float], None]] = None
    matching: MatchingConfig = field(default_factory=MatchingConfig)
    audio: AudioConfig = field(default_factory=AudioConfig)

    def __post_init__(self):
        """初始化後設定 logger"""
        configure_logging(self.verbose)
