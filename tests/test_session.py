"""
練習 session 測試 (假麥克風、假辨識器、記憶體 store)
"""
import asyncio
import random

import numpy as np
import pytest

from voxalpha.audio import AudioRecorder
from voxalpha.audio.processing import AudioBuffer
from voxalpha.config import AudioConfig, TrainerConfig
from voxalpha.core.errors import (
    DeviceUnavailableError,
    EmptyCaptureError,
    NoChallengeError,
    RecognizerFailedError,
    RecognizerTimeoutError,
    RecognizerUnavailableError,
    TrialInProgressError,
    UnsupportedLanguageError,
)
from voxalpha.matching import TrialState
from voxalpha.recognizer import WhisperRecognizer
from voxalpha.recognizer import whisper as whisper_module
from voxalpha.session import InMemoryStore, TrainerSession
from voxalpha.utils.lazy_imports import AUDIO_INSTALL_HINT, WHISPER_INSTALL_HINT

FAST = dict(
    accept_delay_s=0.01,
    closed_accept_delay_s=0.01,
    reject_delay_s=0.01,
    no_answer_delay_s=0.01,
)


class FixedRng:
    """每次都出同一個字母"""

    def __init__(self, unit):
        self.unit = unit

    def choice(self, seq):
        assert self.unit in seq
        return self.unit


def _speech(seconds=1.0):
    return AudioBuffer(samples=np.full(int(16000 * seconds), 0.2, dtype=np.float32), sample_rate=16000)


@pytest.fixture
def events():
    return []


@pytest.fixture
def store():
    return InMemoryStore()


def _session(events, store=None, recognizer=None, recorder=None, language="en", unit="A", **config):
    return TrainerSession(
        language,
        recognizer=recognizer,
        recorder=recorder,
        store=store,
        config=TrainerConfig(**config),
        on_event=events.append,
        rng=FixedRng(unit),
    )


class TestLifecycle:
    """開啟、關閉與出題測試"""

    def test_open_issues_challenge(self, events):
        session = _session(events).open()

        assert session.challenge.unit == "A"
        assert session.challenge.answer == "Alpha"
        assert session.trial.state is TrialState.AWAITING_ANSWER
        assert events[-1]["type"] == "challenge"
        assert events[-1]["expected"] == "Alpha"
        assert events[-1]["language"] == "en"

    def test_language_from_store(self, events):
        store = InMemoryStore(language="de")
        session = TrainerSession(store=store, on_event=events.append, rng=FixedRng("K")).open()

        assert session.language == "de"
        assert session.challenge.answer == "Köln"

    def test_unknown_language_is_fatal(self, events):
        with pytest.raises(UnsupportedLanguageError):
            _session(events, language="xx").open()

    def test_random_challenges(self):
        session = TrainerSession("en", rng=random.Random(7)).open()
        units = {session.next_challenge().unit for _ in range(50)}

        assert len(units) > 1
        assert units <= set(session.profile.units)

    def test_async_context_manager(self, events, fake_source_cls):
        recorder = AudioRecorder(fake_source_cls())

        async def run():
            async with _session(events, recorder=recorder) as session:
                assert session.is_open
                assert recorder.source.is_open
            return session

        session = asyncio.run(run())
        assert not session.is_open
        assert not recorder.source.is_open

    def test_event_handler_errors_are_swallowed(self):
        def _broken(event):
            raise RuntimeError("ui crashed")

        session = TrainerSession("en", on_event=_broken, rng=FixedRng("A")).open()
        assert session.evaluate("alpha").accepted is True


class TestEvaluate:
    """文字作答測試"""

    def test_correct_answer(self, events, store):
        session = _session(events, store=store).open()

        outcome = session.evaluate("alfa")

        assert outcome.state is TrialState.ACCEPTED
        assert outcome.message == "✓ Correct!"
        assert outcome.policy == "closed"
        assert outcome.next_delay == TrainerConfig().closed_accept_delay_s
        assert events[-1]["type"] == "verdict"
        assert events[-1]["accepted"] is True

    def test_wrong_answer(self, events):
        session = _session(events).open()

        outcome = session.evaluate("bravo")

        assert outcome.state is TrialState.REJECTED
        assert outcome.message == "✗ Wrong! Expected: Alpha"
        assert outcome.next_delay == TrainerConfig().reject_delay_s

    def test_empty_answer(self, events):
        session = _session(events).open()

        outcome = session.evaluate("")

        assert outcome.accepted is False
        assert outcome.message == "No answer detected"
        assert outcome.policy is None
        assert outcome.next_delay == TrainerConfig().no_answer_delay_s

    def test_open_vocabulary_answer(self, events):
        session = _session(events, language="de", unit="B").open()

        outcome = session.evaluate("Bun")

        assert outcome.policy == "open"
        assert outcome.message == 'You said: "Bonn". Expected: Bremen'
        assert outcome.match.best_candidate == "Bonn"
        assert outcome.next_delay == TrainerConfig().reject_delay_s
        assert events[-1]["matched"] == "Bonn"
        assert len(events[-1]["alternatives"]) == 3

    def test_second_answer_is_rejected(self, events):
        session = _session(events).open()
        session.evaluate("alpha")

        outcome = session.evaluate("alpha")

        assert outcome.state is TrialState.REJECTED
        assert isinstance(outcome.error, TrialInProgressError)
        assert outcome.next_delay is None
        assert session.trial.state is TrialState.ACCEPTED
        assert events[-1]["type"] == "error"

    def test_without_challenge(self, events):
        session = _session(events)

        outcome = session.evaluate("alpha")

        assert isinstance(outcome.error, NoChallengeError)
        assert outcome.message == "No answer detected"

    def test_history(self, store, events):
        session = _session(events, store=store).open()
        session.evaluate("alpha")
        session.next_challenge()
        session.evaluate("zulu")

        history = session.history()
        assert [entry["correct"] for entry in history] == [False, True]
        assert history[0]["unit"] == "A"
        assert history[0]["word"] == "Alpha"
        assert history[0]["transcript"] == "zulu"
        assert history[0]["language"] == "en"
        assert "timestamp" in history[0]
        assert session.history(limit=1) == history[:1]


class TestScheduling:
    """判定後自動換題測試"""

    def test_next_challenge_after_delay(self, events):
        async def run():
            session = _session(events, **FAST).open()
            first = session.trial
            session.evaluate("alpha")
            await asyncio.sleep(0.05)
            return first, session.trial

        first, current = asyncio.run(run())
        assert current is not first
        assert current.state is TrialState.AWAITING_ANSWER
        assert [event["type"] for event in events] == ["challenge", "verdict", "challenge"]

    def test_close_cancels_pending_challenge(self, events):
        async def run():
            session = _session(events, **FAST).open()
            session.evaluate("alpha")
            session.close()
            await asyncio.sleep(0.05)

        asyncio.run(run())
        assert [event["type"] for event in events] == ["challenge", "verdict"]

    def test_no_event_loop(self, events):
        session = _session(events).open()
        assert session.schedule_next(0.01) is None


class TestAudioAnswers:
    """音訊作答測試"""

    def test_submit_audio(self, events, fake_recognizer_cls):
        recognizer = fake_recognizer_cls(["Alpha"])
        session = _session(events, recognizer=recognizer).open()

        outcome = asyncio.run(session.submit_audio(_speech()))

        assert outcome.accepted is True
        assert outcome.transcript == "Alpha"
        assert recognizer.calls[0]["language"] == "en"
        assert recognizer.calls[0]["threads"] >= 1

    def test_recognizer_timeout(self, events, fake_recognizer_cls):
        recognizer = fake_recognizer_cls(["Alpha"], delay=1.0)
        session = _session(events, recognizer=recognizer, recognizer_timeout_s=0.05).open()

        outcome = asyncio.run(session.submit_audio(_speech()))

        assert isinstance(outcome.error, RecognizerTimeoutError)
        assert outcome.message == "Speech recognition timed out."
        assert "no transcript within" in events[-1]["exception_message"]
        assert outcome.state is TrialState.REJECTED
        assert outcome.next_delay == TrainerConfig().reject_delay_s
        assert session.trial.state is TrialState.REJECTED

    def test_recognizer_exception(self, events, fake_recognizer_cls):
        recognizer = fake_recognizer_cls(error=RuntimeError("engine exploded"))
        session = _session(events, recognizer=recognizer).open()

        outcome = asyncio.run(session.submit_audio(_speech()))

        assert isinstance(outcome.error, RecognizerFailedError)
        assert outcome.message == "Speech recognition did not produce a transcript."
        assert "engine exploded" not in outcome.message
        assert events[-1]["type"] == "error"
        assert events[-1]["exception_type"] == "RecognizerFailedError"

    def test_empty_audio_skips_recognizer(self, events, fake_recognizer_cls):
        recognizer = fake_recognizer_cls(["Alpha"])
        session = _session(events, recognizer=recognizer).open()

        outcome = asyncio.run(session.submit_audio(np.zeros(0, dtype=np.float32)))

        assert isinstance(outcome.error, EmptyCaptureError)
        assert outcome.message == "(no audio recorded)"
        assert recognizer.calls == []
        assert session.trial.state is TrialState.AWAITING_ANSWER

    def test_empty_transcript(self, events, fake_recognizer_cls):
        session = _session(events, recognizer=fake_recognizer_cls([""])).open()

        outcome = asyncio.run(session.submit_audio(_speech()))

        assert outcome.message == "No answer detected"


class TestRecording:
    """錄音流程測試"""

    def test_record_and_evaluate(self, events, fake_source_cls, fake_recognizer_cls, make_tone):
        recorder = AudioRecorder(fake_source_cls(chunks=[make_tone(0.5)]))
        recognizer = fake_recognizer_cls(["alpha"])
        session = _session(events, recognizer=recognizer, recorder=recorder).open()

        async def run():
            assert await session.start_recording() is None
            return await session.stop_recording()

        outcome = asyncio.run(run())

        assert outcome.accepted is True
        assert recognizer.calls[0]["samples"].size == 16000
        assert [event["type"] for event in events] == ["challenge", "recording", "recording", "verdict"]
        assert events[1]["recording"] == "started"
        assert events[2]["recording"] == "stopped"

    def test_auto_stop(self, events, fake_source_cls, fake_recognizer_cls, make_tone):
        recorder = AudioRecorder(fake_source_cls(chunks=[make_tone(0.5)]))
        session = _session(
            events,
            recognizer=fake_recognizer_cls(["alpha"]),
            recorder=recorder,
            audio=AudioConfig(max_record_s=0.02),
        ).open()

        async def run():
            await session.start_recording()
            await asyncio.sleep(0.2)

        asyncio.run(run())

        assert not recorder.is_recording
        assert {"type": "recording", "recording": "timeout"}.items() <= events[2].items()
        assert events[3]["type"] == "verdict"
        assert events[3]["accepted"] is True

    def test_auto_stop_outcome_and_late_stop(self, events, fake_source_cls, fake_recognizer_cls, make_tone):
        """自動停止後產生判定結果，之後手動停止回傳 None"""
        recorder = AudioRecorder(fake_source_cls(chunks=[make_tone(0.5)]))
        recognizer = fake_recognizer_cls(["bravo"])
        session = _session(
            events,
            recognizer=recognizer,
            recorder=recorder,
            audio=AudioConfig(max_record_s=0.02),
        ).open()

        async def run():
            await session.start_recording()
            await asyncio.sleep(0.2)
            return await session.stop_recording()

        late = asyncio.run(run())

        assert late is None
        assert len(recognizer.calls) == 1
        verdicts = [event for event in events if event["type"] == "verdict"]
        assert len(verdicts) == 1
        assert verdicts[0]["message"] == "✗ Wrong! Expected: Alpha"
        assert session.trial.state is TrialState.REJECTED

    def test_auto_stop_without_audio(self, events, fake_source_cls, fake_recognizer_cls):
        """自動停止時沒有錄到聲音，題目維持可重試"""
        recognizer = fake_recognizer_cls(["alpha"])
        session = _session(
            events,
            recognizer=recognizer,
            recorder=AudioRecorder(fake_source_cls()),
            audio=AudioConfig(max_record_s=0.02),
        ).open()

        async def run():
            await session.start_recording()
            await asyncio.sleep(0.2)

        asyncio.run(run())

        assert events[-2]["recording"] == "timeout"
        assert events[-1]["type"] == "error"
        assert events[-1]["message"] == "(no audio recorded)"
        assert recognizer.calls == []
        assert session.trial.state is TrialState.AWAITING_ANSWER

    def test_stop_without_recording(self, events, fake_source_cls):
        session = _session(events, recorder=AudioRecorder(fake_source_cls())).open()
        assert asyncio.run(session.stop_recording()) is None

    def test_no_audio_captured(self, events, fake_source_cls, fake_recognizer_cls):
        recognizer = fake_recognizer_cls(["alpha"])
        session = _session(events, recognizer=recognizer, recorder=AudioRecorder(fake_source_cls())).open()

        async def run():
            await session.start_recording()
            return await session.stop_recording()

        outcome = asyncio.run(run())

        assert isinstance(outcome.error, EmptyCaptureError)
        assert outcome.message == "(no audio recorded)"
        assert outcome.next_delay is None
        assert events[-1]["type"] == "error"
        assert events[-1]["message"] == "(no audio recorded)"
        assert recognizer.calls == []
        assert session.trial.state is TrialState.AWAITING_ANSWER

    def test_microphone_unavailable(self, events, fake_source_cls):
        recorder = AudioRecorder(fake_source_cls(open_error=DeviceUnavailableError()))
        session = _session(events, recorder=recorder).open()

        assert events[0]["type"] == "error"
        assert events[0]["message"] == "No microphone found. Please connect a microphone."

        outcome = asyncio.run(session.start_recording())

        assert isinstance(outcome.error, DeviceUnavailableError)
        assert "Microphone not initialized" in outcome.message

    def test_missing_audio_library(self, events, fake_source_cls):
        """sounddevice 未安裝時 session 仍可開啟，錄音會被拒絕"""
        recorder = AudioRecorder(fake_source_cls(open_error=ImportError(AUDIO_INSTALL_HINT)))
        session = _session(events, recorder=recorder).open()

        assert session.is_open
        assert events[0]["type"] == "error"
        assert events[0]["exception_type"] == "DeviceUnavailableError"
        assert "voxalpha[audio]" in events[0]["exception_message"]
        assert events[1]["type"] == "challenge"

        outcome = asyncio.run(session.start_recording())
        assert isinstance(outcome.error, DeviceUnavailableError)

    def test_missing_whisper_library(self, events, monkeypatch):
        """faster-whisper 未安裝時 session 仍可開啟，作答得到「無法辨識」結果"""

        def _missing():
            raise ImportError(WHISPER_INSTALL_HINT)

        monkeypatch.setattr(whisper_module, "_get_whisper_model_class", _missing)
        session = _session(events, recognizer=WhisperRecognizer()).open()

        assert session.is_open
        assert events[0]["exception_type"] == "RecognizerUnavailableError"
        assert "voxalpha[whisper]" in events[0]["exception_message"]
        assert session.challenge.answer == "Alpha"

        outcome = asyncio.run(session.submit_audio(_speech()))

        assert isinstance(outcome.error, RecognizerUnavailableError)
        assert outcome.message == "Speech recognition is not available."

    def test_without_recorder(self, events):
        session = _session(events).open()
        outcome = asyncio.run(session.start_recording())
        assert isinstance(outcome.error, DeviceUnavailableError)

    def test_recording_after_answer_is_rejected(self, events, fake_source_cls):
        session = _session(events, recorder=AudioRecorder(fake_source_cls())).open()
        session.evaluate("alpha")

        outcome = asyncio.run(session.start_recording())

        assert isinstance(outcome.error, TrialInProgressError)
        assert not session.recorder.is_recording


class TestLanguageSwitch:
    """語言切換測試"""

    def test_switch_persists_and_reissues(self, events, store):
        session = _session(events, store=store, unit="B").open()

        challenge = session.set_language("de")

        assert challenge.answer == "Bremen"
        assert store.get_language() == "de"
        assert events[-1]["type"] == "challenge"
        assert events[-1]["language"] == "de"

    def test_same_language_is_noop(self, events, store):
        session = _session(events, store=store).open()
        count = len(events)

        assert session.set_language("en") is None
        assert len(events) == count

    def test_unknown_language(self, events):
        session = _session(events).open()
        with pytest.raises(UnsupportedLanguageError):
            session.set_language("xx")
        assert session.language == "en"

    def test_switch_during_recording_keeps_recording_language(
        self, events, store, fake_source_cls, fake_recognizer_cls, make_tone
    ):
        """錄音中切換語言，這段錄音仍以開始錄音時的語言辨識與判定"""
        recorder = AudioRecorder(fake_source_cls(chunks=[make_tone(0.5)]))
        recognizer = fake_recognizer_cls(["Köln"])
        session = _session(events, store=store, recognizer=recognizer, recorder=recorder, language="de", unit="K").open()

        async def run():
            await session.start_recording()
            session.set_language("en")
            return await session.stop_recording()

        outcome = asyncio.run(run())

        assert recognizer.calls[0]["language"] == "de"
        assert outcome.policy == "open"
        assert outcome.accepted is True
        assert outcome.challenge.answer == "Köln"
        assert outcome.next_delay is None
        assert events[-1]["type"] == "verdict"
        assert events[-1]["language"] == "de"
        assert store.get_history()[0]["language"] == "de"
        assert session.language == "en"
        assert session.challenge.answer == "Kilo"
        assert session.trial.state is TrialState.AWAITING_ANSWER
