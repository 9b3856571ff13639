"""
判定策略模組 (Decision Policy)

依詞彙類型選擇判定方式：
- 開放詞彙 (城市清單)：先依首字母縮減候選，再選最佳候選；
  最佳候選等於預期答案才算正確。
- 封閉詞彙 (字母表) 或非城市條目：逐字稿直接與預期答案 (含別名) 比對，
  相似度達門檻即正確。

每一題的狀態機：
    AWAITING_ANSWER → EVALUATING → {ACCEPTED, REJECTED}
新題目會重新回到 AWAITING_ANSWER。
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Optional

from voxalpha.config import MatchingConfig
from voxalpha.core.errors import TrialInProgressError
from voxalpha.utils.logger import get_logger

from .normalizer import leading_unit
from .reducer import reduce_candidates
from .scorer import similarity
from .selector import MatchResult, select_best

if TYPE_CHECKING:
    from voxalpha.languages.profile import LanguageProfile

NO_ANSWER_MESSAGE = "No answer detected"

POLICY_OPEN = "open"
POLICY_CLOSED = "closed"


class TrialState(Enum):
    AWAITING_ANSWER = "awaiting_answer"
    EVALUATING = "evaluating"
    ACCEPTED = "accepted"
    REJECTED = "rejected"

    @property
    def is_terminal(self) -> bool:
        return self in (TrialState.ACCEPTED, TrialState.REJECTED)


@dataclass(frozen=True)
class Challenge:
    """
    一道題目

    Attributes:
        unit: 顯示給使用者的字母 (例如 "K"、"Ä")
        answer: 標準答案 (例如 "Köln")
    """
    unit: str
    answer: str


@dataclass
class Verdict:
    """
    判定結果

    Attributes:
        accepted: 是否正確
        message: 給使用者的說明 (你說了什麼 vs. 預期答案)
        policy: "open" / "closed"；短路判定時為 None
        transcript: 原始逐字稿
        normalized: 正規化逐字稿
        matched: 開放詞彙時選出的候選詞
        similarity: 最佳相似度
        match: 開放詞彙的完整比對結果
    """
    accepted: bool
    message: str
    policy: Optional[str] = None
    transcript: str = ""
    normalized: str = ""
    matched: Optional[str] = None
    similarity: Optional[float] = None
    match: Optional[MatchResult] = None

    @property
    def state(self) -> TrialState:
        return TrialState.ACCEPTED if self.accepted else TrialState.REJECTED


class DecisionPolicy:
    """
    答案判定器

    由語言設定檔與比對配置建立，對單一逐字稿產生 Verdict。
    本身不持有題目狀態，狀態由 Trial 管理。
    """

    def __init__(self, profile: "LanguageProfile", config: Optional[MatchingConfig] = None):
        self.profile = profile
        self.config = config or MatchingConfig()
        self._logger = get_logger("matching.policy")

    def evaluate(self, transcript: Optional[str], challenge: Optional[Challenge]) -> Verdict:
        """
        判定逐字稿是否符合題目

        逐字稿為空 (或正規化後為空)、或沒有題目時直接判定為錯誤，不進行評分。
        """
        normalized = self.profile.normalize(transcript or "")
        if not normalized or challenge is None:
            return Verdict(accepted=False, message=NO_ANSWER_MESSAGE, transcript=transcript or "")

        if self.profile.uses_open_vocabulary(challenge.answer):
            return self._evaluate_open(transcript, normalized, challenge)
        return self._evaluate_closed(transcript, normalized, challenge)

    def _evaluate_open(self, transcript: str, normalized: str, challenge: Challenge) -> Verdict:
        fold_table = self.profile.fold_table
        expected_unit = leading_unit(challenge.unit, fold_table)
        candidates = reduce_candidates(self.profile.gazetteer or (), expected_unit, fold_table)

        result = select_best(
            normalized,
            candidates,
            expected=challenge.answer,
            fold_table=fold_table,
            config=self.config,
        )

        self._logger.debug(
            f"Best match: '{result.best_candidate}' ({result.best_similarity * 100:.1f}%), "
            f"expected: '{challenge.answer}'"
        )
        top = ", ".join(f"{alt.candidate} ({alt.similarity * 100:.1f}%)" for alt in result.alternatives)
        self._logger.debug(f"Top {self.config.top_n}: {top}")

        if result.is_correct:
            message = f'✓ Correct! "{result.best_candidate}"'
        else:
            message = f'You said: "{result.best_candidate}". Expected: {challenge.answer}'

        return Verdict(
            accepted=result.is_correct,
            message=message,
            policy=POLICY_OPEN,
            transcript=transcript,
            normalized=normalized,
            matched=result.best_candidate,
            similarity=result.best_similarity,
            match=result,
        )

    def _evaluate_closed(self, transcript: str, normalized: str, challenge: Challenge) -> Verdict:
        best_form = challenge.answer
        best_score = float("-inf")
        for form in self.profile.accepted_forms(challenge.answer):
            score = similarity(normalized, self.profile.normalize(form), self.config.length_penalty)
            if score > best_score:
                best_form, best_score = form, score

        threshold = self.config.acceptance_threshold
        accepted = best_score >= threshold

        self._logger.debug(
            f"Match: '{normalized}' vs '{self.profile.normalize(best_form)}' - "
            f"similarity={best_score * 100:.1f}%, threshold={threshold * 100:.0f}%"
        )

        message = "✓ Correct!" if accepted else f"✗ Wrong! Expected: {challenge.answer}"
        return Verdict(
            accepted=accepted,
            message=message,
            policy=POLICY_CLOSED,
            transcript=transcript,
            normalized=normalized,
            matched=best_form if accepted else None,
            similarity=best_score,
        )


class Trial:
    """
    單一題目的狀態機

    只有 AWAITING_ANSWER 可以開始評估；評估中再次提交會被拒絕。
    """

    def __init__(self, challenge: Challenge, trace_id: Optional[str] = None):
        self.challenge = challenge
        self.trace_id = trace_id or uuid.uuid4().hex
        self.state = TrialState.AWAITING_ANSWER
        self.verdict: Optional[Verdict] = None

    def ensure_awaiting(self) -> None:
        """
        Raises:
            TrialInProgressError: 正在評估或已判定
        """
        if self.state is TrialState.EVALUATING:
            raise TrialInProgressError()
        if self.state.is_terminal:
            raise TrialInProgressError(
                f"challenge {self.challenge.unit!r} already answered",
                user_message="This challenge has already been answered.",
            )

    def begin_evaluation(self) -> None:
        self.ensure_awaiting()
        self.state = TrialState.EVALUATING

    def complete(self, verdict: Verdict) -> Verdict:
        self.verdict = verdict
        self.state = verdict.state
        return verdict

    def abort(self, verdict: Verdict) -> Verdict:
        """評估中發生錯誤 (辨識失敗/逾時) 時直接進入 REJECTED"""
        self.verdict = verdict
        self.state = TrialState.REJECTED
        return verdict
