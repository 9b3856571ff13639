"""
練習 Session

串接出題、錄音、語音辨識與判定的完整流程：

    next_challenge() → start_recording() → stop_recording()
        → recognizer.transcribe() → DecisionPolicy.evaluate()
        → schedule_next()

設計原則：
- 單次練習的錯誤 (TrialError) 一律轉成 REJECTED 的 TrialOutcome，流程不中斷。
- 語言設定檔載入失敗 (VocabularyLoadError / UnsupportedLanguageError) 直接拋出。
- UI 不在此處理，所有結果以 TrialEvent 回呼送出。
"""

from __future__ import annotations

import asyncio
import random
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Union

import numpy as np

from voxalpha.audio.capture import AudioRecorder, CaptureState
from voxalpha.audio.processing import AudioBuffer
from voxalpha.config import TrainerConfig
from voxalpha.core.errors import (
    AudioCaptureError,
    DeviceUnavailableError,
    EmptyCaptureError,
    NoChallengeError,
    RecognizerError,
    RecognizerFailedError,
    RecognizerTimeoutError,
    RecognizerUnavailableError,
    TrialError,
    TrialInProgressError,
)
from voxalpha.core.events import TrialEvent, TrialEventHandler
from voxalpha.core.protocols.recognizer import SpeechRecognizer
from voxalpha.core.protocols.store import PreferenceStore
from voxalpha.languages import LanguageProfile, get_profile
from voxalpha.matching.policy import POLICY_OPEN, Challenge, DecisionPolicy, Trial, TrialState, Verdict
from voxalpha.matching.selector import MatchResult
from voxalpha.recognizer.whisper import default_thread_count
from voxalpha.utils.logger import TimingContext, get_logger


@dataclass
class TrialOutcome:
    """
    一次作答 (或失敗的作答) 的結果

    Attributes:
        state: ACCEPTED / REJECTED
        accepted: 是否正確
        message: 給使用者的說明
        challenge: 作答時的題目 (沒有題目時為 None)
        transcript: 辨識出的原始逐字稿
        match: 開放詞彙的比對結果
        similarity: 最佳相似度
        policy: "open" / "closed"；短路判定或錯誤時為 None
        error: 造成 REJECTED 的 TrialError
        next_delay: 進入下一題前的延遲；None 表示不會自動換題
    """
    state: TrialState
    accepted: bool
    message: str
    challenge: Optional[Challenge] = None
    transcript: str = ""
    match: Optional[MatchResult] = None
    similarity: Optional[float] = None
    policy: Optional[str] = None
    error: Optional[TrialError] = None
    next_delay: Optional[float] = None

    @classmethod
    def from_verdict(
        cls, verdict: Verdict, challenge: Challenge, next_delay: Optional[float] = None
    ) -> "TrialOutcome":
        return cls(
            state=verdict.state,
            accepted=verdict.accepted,
            message=verdict.message,
            challenge=challenge,
            transcript=verdict.transcript,
            match=verdict.match,
            similarity=verdict.similarity,
            policy=verdict.policy,
            next_delay=next_delay,
        )

    @classmethod
    def from_error(
        cls, error: TrialError, challenge: Optional[Challenge], next_delay: Optional[float] = None
    ) -> "TrialOutcome":
        return cls(
            state=TrialState.REJECTED,
            accepted=False,
            message=error.user_message,
            challenge=challenge,
            error=error,
            next_delay=next_delay,
        )


class TrainerSession:
    """
    拼字字母練習 session

    Args:
        profile: 語言代碼、LanguageProfile，或 None (使用 store 中儲存的語言)
        recognizer: 實作 SpeechRecognizer 的物件
        recorder: AudioRecorder；None 時只能透過 evaluate()/submit_audio() 作答
        store: PreferenceStore (語言偏好與練習紀錄)
        config: TrainerConfig
        on_event: TrialEvent 回呼
        rng: 出題用的 random.Random (測試時可注入固定種子)

    使用範例:
        >>> async with TrainerSession("de", WhisperRecognizer(), recorder) as session:
        ...     await session.start_recording()
        ...     outcome = await session.stop_recording()
    """

    def __init__(
        self,
        profile: Union[str, LanguageProfile, None] = None,
        recognizer: Optional[SpeechRecognizer] = None,
        recorder: Optional[AudioRecorder] = None,
        store: Optional[PreferenceStore] = None,
        config: Optional[TrainerConfig] = None,
        on_event: Optional[TrialEventHandler] = None,
        rng: Optional[random.Random] = None,
    ):
        self.recognizer = recognizer
        self.recorder = recorder
        self.store = store
        self.config = config or TrainerConfig()
        self._on_event = on_event
        self._rng = rng or random.Random()
        self._requested = profile
        self._profile: Optional[LanguageProfile] = None
        self._policy: Optional[DecisionPolicy] = None
        self._trial: Optional[Trial] = None
        self._recording_trial: Optional[Trial] = None
        self._recording_policy: Optional[DecisionPolicy] = None
        self._next_handle: Optional[asyncio.TimerHandle] = None
        self._auto_stop_task: Optional[asyncio.Task] = None
        self._threads = default_thread_count()
        self._opened = False
        self._logger = get_logger("session")

    # ------------------------------------------------------------------
    # 生命週期
    # ------------------------------------------------------------------

    @property
    def profile(self) -> LanguageProfile:
        if self._profile is None:
            raise RuntimeError("TrainerSession is not open")
        return self._profile

    @property
    def language(self) -> Optional[str]:
        return self._profile.tag if self._profile is not None else None

    @property
    def trial(self) -> Optional[Trial]:
        return self._trial

    @property
    def challenge(self) -> Optional[Challenge]:
        return self._trial.challenge if self._trial is not None else None

    @property
    def is_open(self) -> bool:
        return self._opened

    def open(self) -> "TrainerSession":
        """
        載入語言設定檔、初始化麥克風與辨識器，並出第一題

        麥克風或辨識器初始化失敗 (含可選套件未安裝) 只記錄警告並送出 error 事件，
        之後的作答會以對應的 TrialError 被拒絕。

        Raises:
            UnsupportedLanguageError: 未註冊的語言代碼
            VocabularyLoadError: 詞彙載入失敗
        """
        if self._opened:
            return self

        requested = self._requested
        if requested is None:
            requested = self.store.get_language() if self.store is not None else self.config.language
        profile = requested if isinstance(requested, LanguageProfile) else get_profile(requested)
        self._use_profile(profile)
        self._logger.info(f"Session opened: {profile.tag} ({profile.display_name})")

        if self.recorder is not None:
            try:
                self.recorder.open()
            except ImportError as exc:
                self._report_unavailable(DeviceUnavailableError(str(exc)))
            except AudioCaptureError as exc:
                self._report_unavailable(exc)

        if self.recognizer is not None and hasattr(self.recognizer, "open"):
            try:
                self.recognizer.open(self._threads)
            except ImportError as exc:
                self._report_unavailable(RecognizerUnavailableError(str(exc)))
            except RecognizerError as exc:
                self._report_unavailable(exc)

        self._opened = True
        self.next_challenge()
        return self

    def close(self) -> None:
        self._cancel_scheduled()
        self._cancel_auto_stop()
        if self.recorder is not None:
            self.recorder.close()
        if self.recognizer is not None and hasattr(self.recognizer, "close"):
            self.recognizer.close()
        self._trial = None
        self._recording_trial = None
        self._recording_policy = None
        self._opened = False
        self._logger.info("Session closed")

    async def __aenter__(self) -> "TrainerSession":
        return self.open()

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _report_unavailable(self, error: TrialError) -> None:
        self._logger.warning(f"{type(error).__name__}: {error}")
        self._emit_error(error, trace_id=None)

    def _use_profile(self, profile: LanguageProfile) -> None:
        self._profile = profile
        self._policy = DecisionPolicy(profile, self.config.matching)

    # ------------------------------------------------------------------
    # 出題與語言
    # ------------------------------------------------------------------

    def next_challenge(self) -> Challenge:
        """隨機選一個字母出題，狀態回到 AWAITING_ANSWER"""
        self._cancel_scheduled()
        profile = self.profile
        unit = self._rng.choice(profile.units)
        challenge = Challenge(unit=unit, answer=profile.answer_for(unit))
        self._trial = Trial(challenge)

        self._logger.info(f"Challenge: {unit} ({challenge.answer})")
        self._emit(
            {
                "type": "challenge",
                "language": profile.tag,
                "trace_id": self._trial.trace_id,
                "unit": unit,
                "expected": challenge.answer,
            }
        )
        return challenge

    def set_language(self, tag: str) -> Optional[Challenge]:
        """
        切換語言並出新題目 (相同語言時不做任何事)

        Raises:
            UnsupportedLanguageError: 未註冊的語言代碼
            VocabularyLoadError: 詞彙載入失敗
        """
        if self._profile is not None and self._profile.tag == tag:
            return None

        profile = get_profile(tag)
        self._use_profile(profile)
        if self.store is not None:
            self.store.save_language(tag)
        self._logger.info(f"Language switched to {tag} ({profile.display_name})")

        if not self._opened:
            return None
        return self.next_challenge()

    def schedule_next(self, delay: float) -> Optional[asyncio.TimerHandle]:
        """
        在 delay 秒後出下一題

        沒有執行中的 event loop 時不排程，由呼叫端自行呼叫 next_challenge()。
        """
        self._cancel_scheduled()
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self._logger.debug("No running event loop, next challenge is not scheduled")
            return None
        self._next_handle = loop.call_later(delay, self.next_challenge)
        return self._next_handle

    def _cancel_scheduled(self) -> None:
        if self._next_handle is not None:
            self._next_handle.cancel()
            self._next_handle = None

    # ------------------------------------------------------------------
    # 作答
    # ------------------------------------------------------------------

    def evaluate(self, transcript: Optional[str]) -> TrialOutcome:
        """以文字作答 (不經過錄音與辨識)"""
        trial = self._trial
        if trial is None:
            return self._reject(NoChallengeError(), None)
        try:
            trial.begin_evaluation()
        except TrialError as exc:
            return self._reject(exc, trial.challenge, trace_id=trial.trace_id)
        return self._conclude(trial, transcript, self._policy)

    async def submit_audio(self, buffer: Union[AudioBuffer, np.ndarray]) -> TrialOutcome:
        """
        以一段已前處理的音訊作答

        空音訊不會送進辨識器；辨識失敗或逾時會讓本題 REJECTED 並排程下一題。
        """
        return await self._submit(self._trial, buffer, self._policy)

    async def start_recording(self) -> Optional[TrialOutcome]:
        """
        開始錄音，並在 max_record_s 後自動停止

        Returns:
            None 表示已開始錄音；無法開始時回傳 REJECTED 的 TrialOutcome
        """
        trial = self._trial
        if trial is None:
            return self._reject(NoChallengeError(), None)
        if self.recorder is None:
            return self._reject(DeviceUnavailableError(), trial.challenge, trace_id=trial.trace_id)
        if self.recorder.is_recording:
            self._logger.debug("Already recording")
            return None

        try:
            if self.recorder.state is CaptureState.DRAINING:
                raise TrialInProgressError()
            trial.ensure_awaiting()
            self.recorder.start()
        except TrialError as exc:
            return self._reject(exc, trial.challenge, trace_id=trial.trace_id)

        self._recording_trial = trial
        self._recording_policy = self._policy
        self._emit(
            {
                "type": "recording",
                "recording": "started",
                "language": self.profile.tag,
                "trace_id": trial.trace_id,
                "unit": trial.challenge.unit,
            }
        )

        max_record_s = self.config.audio.max_record_s
        self._auto_stop_task = asyncio.get_running_loop().create_task(self._auto_stop(max_record_s))
        return None

    async def stop_recording(self, *, timed_out: bool = False) -> Optional[TrialOutcome]:
        """
        停止錄音並判定

        Returns:
            本次作答的 TrialOutcome；沒有在錄音時回傳 None
        """
        if self.recorder is None or not self.recorder.is_recording:
            return None

        self._cancel_auto_stop()
        # 錄音期間切換語言時，仍以開始錄音時的語言辨識與判定
        trial = self._recording_trial or self._trial
        policy = self._recording_policy or self._policy
        self._recording_trial = None
        self._recording_policy = None

        event: TrialEvent = {
            "type": "recording",
            "recording": "timeout" if timed_out else "stopped",
            "language": policy.profile.tag,
        }
        if trial is not None:
            event["trace_id"] = trial.trace_id
        self._emit(event)

        try:
            buffer = await self.recorder.stop()
        except TrialError as exc:
            challenge = trial.challenge if trial is not None else None
            trace_id = trial.trace_id if trial is not None else None
            return self._reject(exc, challenge, trace_id=trace_id)

        return await self._submit(trial, buffer, policy)

    async def _auto_stop(self, delay: float) -> None:
        await asyncio.sleep(delay)
        self._logger.info(f"Auto-stopping recording after {delay:.0f}s")
        await self.stop_recording(timed_out=True)

    def _cancel_auto_stop(self) -> None:
        task, self._auto_stop_task = self._auto_stop_task, None
        if task is not None and not task.done() and task is not asyncio.current_task():
            task.cancel()

    async def _submit(
        self,
        trial: Optional[Trial],
        buffer: Union[AudioBuffer, np.ndarray],
        policy: DecisionPolicy,
    ) -> TrialOutcome:
        if trial is None:
            return self._reject(NoChallengeError(), None)

        samples = buffer.samples if isinstance(buffer, AudioBuffer) else np.asarray(buffer, dtype=np.float32)
        if samples.size == 0:
            return self._reject(EmptyCaptureError(), trial.challenge, trace_id=trial.trace_id)

        try:
            trial.begin_evaluation()
        except TrialError as exc:
            return self._reject(exc, trial.challenge, trace_id=trial.trace_id)

        try:
            transcript = await self._transcribe(samples, policy.profile.tag)
        except TrialError as exc:
            trial.abort(Verdict(accepted=False, message=exc.user_message))
            return self._reject(
                exc,
                trial.challenge,
                trace_id=trial.trace_id,
                next_delay=self.config.reject_delay_s if trial is self._trial else None,
            )
        except asyncio.CancelledError:
            trial.abort(Verdict(accepted=False, message="Cancelled"))
            raise

        return self._conclude(trial, transcript, policy)

    async def _transcribe(self, samples: np.ndarray, language: str) -> str:
        if self.recognizer is None:
            raise RecognizerUnavailableError("no recognizer configured")

        timeout = self.config.recognizer_timeout_s
        with TimingContext("SpeechRecognizer.transcribe", self._logger, callback=self.config.on_timing):
            try:
                transcript = await asyncio.wait_for(
                    self.recognizer.transcribe(samples, language, self._threads),
                    timeout=timeout,
                )
            except asyncio.TimeoutError as exc:
                raise RecognizerTimeoutError(f"no transcript within {timeout:.0f}s") from exc
            except TrialError:
                raise
            except Exception as exc:
                self._logger.exception("Recognizer raised an unexpected error")
                raise RecognizerFailedError(f"recognizer error: {exc}") from exc

        self._logger.info(f'Transcript: "{transcript}"')
        return transcript or ""

    # ------------------------------------------------------------------
    # 判定結果
    # ------------------------------------------------------------------

    def _conclude(self, trial: Trial, transcript: Optional[str], policy: DecisionPolicy) -> TrialOutcome:
        with TimingContext("DecisionPolicy.evaluate", self._logger, callback=self.config.on_timing):
            verdict = policy.evaluate(transcript, trial.challenge)
        trial.complete(verdict)

        is_current = trial is self._trial
        delay = self._delay_for(verdict) if is_current else None
        outcome = TrialOutcome.from_verdict(verdict, trial.challenge, delay)

        self._logger.info(
            f"[{'ACCEPTED' if verdict.accepted else 'REJECTED'}] {trial.challenge.unit}: {verdict.message}"
        )
        self._record_history(policy.profile.tag, trial.challenge, verdict)
        self._emit_verdict(outcome, trial.trace_id, policy.profile.tag)

        if is_current:
            self.schedule_next(delay)
        return outcome

    def _delay_for(self, verdict: Verdict) -> float:
        if verdict.policy is None:
            return self.config.no_answer_delay_s
        if not verdict.accepted:
            return self.config.reject_delay_s
        if verdict.policy == POLICY_OPEN:
            return self.config.accept_delay_s
        return self.config.closed_accept_delay_s

    def _reject(
        self,
        error: TrialError,
        challenge: Optional[Challenge],
        *,
        trace_id: Optional[str] = None,
        next_delay: Optional[float] = None,
    ) -> TrialOutcome:
        """
        將 TrialError 轉成 REJECTED 結果

        next_delay 為 None 時題目不變，使用者可以直接重試。
        """
        self._logger.warning(f"Trial rejected ({type(error).__name__}): {error}")
        self._emit_error(error, trace_id=trace_id, challenge=challenge, next_delay=next_delay)
        if next_delay is not None:
            self.schedule_next(next_delay)
        return TrialOutcome.from_error(error, challenge, next_delay)

    def _record_history(self, language: str, challenge: Challenge, verdict: Verdict) -> None:
        if self.store is None:
            return
        self.store.save_history(
            {
                "language": language,
                "unit": challenge.unit,
                "word": challenge.answer,
                "correct": verdict.accepted,
                "transcript": verdict.transcript,
                "timestamp": time.time(),
            }
        )

    def history(self, limit: int = 100) -> List[Dict[str, Any]]:
        """最近的練習紀錄 (新到舊)"""
        if self.store is None:
            return []
        return self.store.get_history(limit)

    # ------------------------------------------------------------------
    # 事件
    # ------------------------------------------------------------------

    def _emit_verdict(self, outcome: TrialOutcome, trace_id: str, language: str) -> None:
        challenge = outcome.challenge
        event: TrialEvent = {
            "type": "verdict",
            "language": language,
            "trace_id": trace_id,
            "unit": challenge.unit,
            "expected": challenge.answer,
            "transcript": outcome.transcript,
            "accepted": outcome.accepted,
            "message": outcome.message,
        }
        if outcome.policy is not None:
            event["policy"] = outcome.policy
        if outcome.similarity is not None:
            event["similarity"] = outcome.similarity
        if outcome.match is not None:
            event["matched"] = outcome.match.best_candidate
            event["alternatives"] = [
                {"candidate": alt.candidate, "similarity": alt.similarity}
                for alt in outcome.match.alternatives
            ]
        if outcome.next_delay is not None:
            event["next_delay"] = outcome.next_delay
        self._emit(event)

    def _emit_error(
        self,
        error: TrialError,
        *,
        trace_id: Optional[str],
        challenge: Optional[Challenge] = None,
        next_delay: Optional[float] = None,
    ) -> None:
        event: TrialEvent = {
            "type": "error",
            "language": self.language or "",
            "message": error.user_message,
            "exception_type": type(error).__name__,
            "exception_message": str(error),
        }
        if trace_id is not None:
            event["trace_id"] = trace_id
        if challenge is not None:
            event["unit"] = challenge.unit
            event["expected"] = challenge.answer
        if next_delay is not None:
            event["next_delay"] = next_delay
        self._emit(event)

    def _emit(self, event: TrialEvent) -> None:
        try:
            if self._on_event is not None:
                self._on_event(event)
        except Exception:
            self._logger.exception("on_event 回呼執行失敗")
