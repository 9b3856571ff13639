"""
sounddevice 麥克風輸入

包裝 sounddevice.InputStream (單聲道 float32)，並把裝置錯誤轉成
可區分的錯誤類型：找不到裝置、權限被拒、其他錯誤。
"""

from __future__ import annotations

import threading
from typing import Optional, Union

import numpy as np

from voxalpha.config import AudioConfig
from voxalpha.core.errors import AudioCaptureError, DeviceUnavailableError, PermissionDeniedError
from voxalpha.core.protocols.audio_source import ChunkCallback
from voxalpha.utils.lazy_imports import AUDIO_INSTALL_HINT
from voxalpha.utils.logger import get_logger

_PERMISSION_MARKERS = ("permission", "not permitted", "access denied", "not allowed")

_sd = None


def _get_sounddevice():
    """延遲載入 sounddevice 模組 (import 時就需要 PortAudio)"""
    global _sd
    if _sd is not None:
        return _sd
    try:
        import sounddevice
    except ImportError as exc:
        raise ImportError(AUDIO_INSTALL_HINT) from exc
    except OSError as exc:
        # PortAudio 函式庫不存在
        raise DeviceUnavailableError(f"PortAudio library not found: {exc}") from exc
    _sd = sounddevice
    return _sd


def classify_device_error(exc: BaseException) -> AudioCaptureError:
    """把底層例外轉成 AudioCaptureError 子類"""
    if isinstance(exc, AudioCaptureError):
        return exc
    if isinstance(exc, PermissionError):
        return PermissionDeniedError(str(exc))
    message = str(exc)
    lowered = message.lower()
    if any(marker in lowered for marker in _PERMISSION_MARKERS):
        return PermissionDeniedError(message)
    if "no default input device" in lowered or "invalid device" in lowered or "device unavailable" in lowered:
        return DeviceUnavailableError(message)
    return AudioCaptureError(
        f"Microphone error: {message}",
        user_message=f"Microphone error: {message}",
    )


class SoundDeviceSource:
    """
    sounddevice 輸入來源

    Args:
        config: 錄音配置 (取樣率、區塊大小)
        device: 裝置索引或名稱；None 使用系統預設
    """

    def __init__(self, config: Optional[AudioConfig] = None, device: Optional[Union[int, str]] = None):
        self.config = config or AudioConfig()
        self.device = device
        self.sample_rate = self.config.capture_sample_rate
        self._stream = None
        self._opened = False
        self._callback: Optional[ChunkCallback] = None
        self._lock = threading.Lock()
        self._logger = get_logger("audio.sounddevice")

    @property
    def is_open(self) -> bool:
        return self._opened

    def open(self) -> None:
        sd = _get_sounddevice()
        try:
            inputs = [dev for dev in sd.query_devices() if dev.get("max_input_channels", 0) > 0]
        except Exception as exc:
            raise classify_device_error(exc) from exc

        if not inputs:
            raise DeviceUnavailableError("no audio input device found")

        self._logger.debug(
            "Available microphones: " + ", ".join(str(dev.get("name")) for dev in inputs)
        )

        try:
            sd.check_input_settings(
                device=self.device,
                channels=1,
                dtype="float32",
                samplerate=self.sample_rate,
            )
        except Exception as exc:
            # 裝置不支援指定取樣率時改用裝置預設值，之後再重取樣
            try:
                info = sd.query_devices(self.device, "input")
                self.sample_rate = int(info["default_samplerate"])
            except Exception:
                raise classify_device_error(exc) from exc
            self._logger.debug(f"Falling back to device sample rate {self.sample_rate}Hz")

        self._opened = True

    def _wrap_callback(self, indata, frames, time_info, status) -> None:
        if status:
            self._logger.debug(f"Audio stream status: {status}")
        callback = self._callback
        if callback is None:
            return
        try:
            callback(np.array(indata[:, 0], dtype=np.float32, copy=True))
        except Exception:
            self._logger.exception("Error in audio chunk callback.")

    def start(self, callback: ChunkCallback) -> None:
        sd = _get_sounddevice()
        with self._lock:
            if self._stream is not None:
                return
            self._callback = callback
            try:
                self._stream = sd.InputStream(
                    samplerate=self.sample_rate,
                    blocksize=self.config.chunk_size,
                    dtype="float32",
                    channels=1,
                    callback=self._wrap_callback,
                    device=self.device,
                )
                self._stream.start()
            except Exception as exc:
                self._stream = None
                self._callback = None
                self._logger.exception(f"Failed to start audio stream (device={self.device!r})")
                raise classify_device_error(exc) from exc
            self._logger.debug(f"Audio stream started. device={self.device!r}")

    def stop(self) -> None:
        with self._lock:
            if self._stream is None:
                return
            try:
                self._stream.stop()
                self._stream.close()
            except Exception as exc:
                raise classify_device_error(exc) from exc
            finally:
                self._stream = None
                self._callback = None
                self._logger.debug("Audio stream stopped.")

    def close(self) -> None:
        self.stop()
        self._opened = False
