"""
練習 session 範例

使用麥克風 (sounddevice) 與 faster-whisper 進行拼字字母練習：
每一題按 Enter 開始錄音，再按 Enter 停止並判定。

環境需求:
    pip install "voxalpha[all]"

用法:
    python examples/trainer_demo.py de
"""

import asyncio
import sys

from voxalpha import TrainerConfig, TrainerSession, check_audio_dependencies, check_whisper_dependencies
from voxalpha.audio import AudioRecorder, SoundDeviceSource
from voxalpha.recognizer import WhisperRecognizer


def print_event(event):
    if event["type"] == "challenge":
        print(f"\n字母: {event['unit']}  (按 Enter 開始錄音)")
    elif event["type"] == "recording":
        print(f"[錄音 {event['recording']}]")
    elif event["type"] == "verdict":
        print(event["message"])
        for alt in event.get("alternatives", []):
            print(f"  - {alt['candidate']} ({alt['similarity'] * 100:.1f}%)")
    elif event["type"] == "error":
        print(f"錯誤: {event['message']}")


async def main(language: str):
    check_audio_dependencies()
    check_whisper_dependencies()

    config = TrainerConfig(language=language, verbose="-v" in sys.argv)
    recorder = AudioRecorder(SoundDeviceSource(config.audio), config.audio)
    loop = asyncio.get_running_loop()

    async with TrainerSession(language, WhisperRecognizer(), recorder, config=config, on_event=print_event) as session:
        while True:
            await loop.run_in_executor(None, input)
            await session.start_recording()
            await loop.run_in_executor(None, input)
            outcome = await session.stop_recording()
            if outcome is not None and outcome.next_delay:
                await asyncio.sleep(outcome.next_delay + 0.1)


if __name__ == "__main__":
    try:
        asyncio.run(main(sys.argv[1] if len(sys.argv) > 1 and sys.argv[1] != "-v" else "en"))
    except KeyboardInterrupt:
        print("\n結束練習")
