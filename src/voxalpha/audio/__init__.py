"""
錄音與前處理模組

- AudioRecorder: IDLE → CAPTURING → DRAINING → READY 狀態機
- preprocess: 串接、音量量測、增益、重取樣、補零
- SoundDeviceSource: sounddevice 麥克風輸入 (需要 voxalpha[audio])
"""

from .capture import AudioRecorder, CaptureState
from .processing import (
    AudioBuffer,
    apply_safety_gain,
    concatenate_chunks,
    measure_levels,
    pad_to_minimum,
    preprocess,
    resample_linear,
)
from .sounddevice_source import SoundDeviceSource, classify_device_error

__all__ = [
    "AudioRecorder",
    "CaptureState",
    "AudioBuffer",
    "preprocess",
    "concatenate_chunks",
    "measure_levels",
    "apply_safety_gain",
    "resample_linear",
    "pad_to_minimum",
    "SoundDeviceSource",
    "classify_device_error",
]
