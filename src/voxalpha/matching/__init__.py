"""
答案比對模組

正規化 → 評分 → 候選縮減 → 最佳候選選擇 → 判定策略。
"""

from .normalizer import fold, leading_unit, normalize
from .policy import (
    NO_ANSWER_MESSAGE,
    Challenge,
    DecisionPolicy,
    Trial,
    TrialState,
    Verdict,
)
from .reducer import reduce_candidates
from .scorer import base_similarity, edit_distance, score_pair, similarity
from .selector import MatchResult, ScoredCandidate, rank_candidates, score_candidates, select_best

__all__ = [
    "normalize",
    "fold",
    "leading_unit",
    "edit_distance",
    "base_similarity",
    "score_pair",
    "similarity",
    "reduce_candidates",
    "select_best",
    "rank_candidates",
    "score_candidates",
    "MatchResult",
    "ScoredCandidate",
    "DecisionPolicy",
    "Challenge",
    "Trial",
    "TrialState",
    "Verdict",
    "NO_ANSWER_MESSAGE",
]
