"""
音訊前處理模組

把麥克風擷取的原始樣本整理成辨識引擎要求的固定格式：
串接 → 量測音量 → 音量過小時增益 → 線性內插重取樣 → 不足最短長度時補零。

重取樣只做相鄰樣本的線性內插，不做低通濾波；
輸入是語音頻帶，且幾乎都是往下取樣到 16 kHz，這樣的品質已足夠。
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

import numpy as np

from voxalpha.config import AudioConfig
from voxalpha.utils.logger import get_logger

_logger = get_logger("audio.processing")


@dataclass
class AudioBuffer:
    """
    送往辨識引擎的音訊

    Attributes:
        samples: float32 單聲道樣本，範圍 [-1.0, 1.0]
        sample_rate: 取樣率
        peak: 前處理前的峰值
        mean_level: 前處理前的平均絕對振幅
        gain: 套用的增益 (1.0 表示未調整)
        source_rate: 擷取時的取樣率
        padded_samples: 結尾補零的樣本數
    """
    samples: np.ndarray
    sample_rate: int
    peak: float = 0.0
    mean_level: float = 0.0
    gain: float = 1.0
    source_rate: Optional[int] = None
    padded_samples: int = 0

    @property
    def duration(self) -> float:
        return len(self.samples) / self.sample_rate if self.sample_rate else 0.0

    def __len__(self) -> int:
        return len(self.samples)


def concatenate_chunks(chunks: Sequence[np.ndarray]) -> np.ndarray:
    """把區塊依序串接成一段連續的 float32 樣本"""
    if not chunks:
        return np.zeros(0, dtype=np.float32)
    return np.concatenate([np.asarray(chunk, dtype=np.float32).reshape(-1) for chunk in chunks])


def measure_levels(samples: np.ndarray) -> Tuple[float, float]:
    """回傳 (峰值絕對振幅, 平均絕對振幅)"""
    if samples.size == 0:
        return 0.0, 0.0
    magnitude = np.abs(samples)
    return float(magnitude.max()), float(magnitude.mean())


def apply_safety_gain(
    samples: np.ndarray,
    peak: float,
    quiet_threshold: float = AudioConfig.quiet_threshold,
    safe_peak: float = AudioConfig.safe_peak,
) -> Tuple[np.ndarray, float]:
    """
    音量過小時放大到安全峰值

    只有 0 < peak < quiet_threshold 才會調整；完全靜音不處理。

    Returns:
        (樣本, 增益)
    """
    if not 0.0 < peak < quiet_threshold:
        return samples, 1.0

    gain = safe_peak / peak
    _logger.debug(f"Audio too quiet, applying gain: {gain:.1f}x")
    adjusted = (samples * gain).astype(np.float32)
    # 浮點誤差不得讓任何樣本超出 [-1, 1]
    np.clip(adjusted, -1.0, 1.0, out=adjusted)
    return adjusted, gain


def resample_linear(samples: np.ndarray, from_rate: int, to_rate: int) -> np.ndarray:
    """
    線性內插重取樣

    新長度為 round(len / ratio)；第 i 個輸出樣本取自來源索引 i * ratio，
    在相鄰兩個樣本之間做線性內插，超出最後一個樣本時沿用最後一個值。
    """
    if from_rate == to_rate or samples.size == 0:
        return samples

    ratio = from_rate / to_rate
    new_length = int(round(samples.size / ratio))
    source_index = np.arange(new_length, dtype=np.float64) * ratio
    resampled = np.interp(source_index, np.arange(samples.size), samples)
    return resampled.astype(np.float32)


def pad_to_minimum(samples: np.ndarray, min_samples: int) -> Tuple[np.ndarray, int]:
    """
    不足最短長度時在結尾補零

    Returns:
        (樣本, 補上的樣本數)
    """
    missing = min_samples - samples.size
    if missing <= 0:
        return samples, 0
    _logger.debug(f"Audio too short ({samples.size} samples, need {min_samples}). Padding with zeros.")
    padded = np.zeros(min_samples, dtype=np.float32)
    padded[: samples.size] = samples
    return padded, missing


def preprocess(
    chunks: Sequence[np.ndarray],
    source_rate: int,
    config: Optional[AudioConfig] = None,
) -> AudioBuffer:
    """
    把擷取到的區塊整理成辨識引擎要求的 AudioBuffer

    Args:
        chunks: 依擷取順序排列的樣本區塊
        source_rate: 擷取時的取樣率
        config: 錄音配置

    Returns:
        AudioBuffer: target_sample_rate、至少 min_duration_s 長的樣本
    """
    config = config or AudioConfig()

    samples = concatenate_chunks(chunks)
    peak, mean_level = measure_levels(samples)
    _logger.debug(f"Raw audio levels: max={peak:.3f}, avg={mean_level:.3f}")

    samples, gain = apply_safety_gain(samples, peak, config.quiet_threshold, config.safe_peak)

    if source_rate != config.target_sample_rate:
        _logger.debug(f"Resampling from {source_rate}Hz to {config.target_sample_rate}Hz")
        samples = resample_linear(samples, source_rate, config.target_sample_rate)

    samples, padded = pad_to_minimum(samples, config.min_samples)

    buffer = AudioBuffer(
        samples=samples,
        sample_rate=config.target_sample_rate,
        peak=peak,
        mean_level=mean_level,
        gain=gain,
        source_rate=source_rate,
        padded_samples=padded,
    )
    _logger.debug(f"Prepared {len(buffer)} samples ({buffer.duration:.2f}s)")
    return buffer
