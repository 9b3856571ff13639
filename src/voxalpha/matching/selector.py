"""
最佳候選選擇模組

對每個候選詞計算相似度，找出最高分的並列集合，
並以「預期答案優先、否則依詞彙順序」的規則決定唯一結果。
"""

from dataclasses import dataclass, field
from typing import List, Mapping, Optional, Sequence

from voxalpha.config import MatchingConfig

from .normalizer import normalize
from .scorer import score_pair


@dataclass(frozen=True)
class ScoredCandidate:
    """
    單一候選詞的評分

    Attributes:
        candidate: 原始詞彙 (例如 "Köln")
        normalized: 正規化結果 (例如 "koln")
        distance: 與逐字稿的編輯距離
        similarity: 含長度懲罰、上限 1.0 的相似度
    """
    candidate: str
    normalized: str
    distance: int
    similarity: float


@dataclass
class MatchResult:
    """
    一次比對的結果

    Attributes:
        best_candidate: 並列處理後選出的候選詞
        best_similarity: 最高相似度
        is_correct: 最佳候選 (正規化後) 是否等於預期答案
        alternatives: 相似度最高的前 N 名 (與並列處理無關)
        ties: 達到最高相似度的所有候選詞 (詞彙順序)
    """
    best_candidate: str
    best_similarity: float
    is_correct: bool = False
    alternatives: List[ScoredCandidate] = field(default_factory=list)
    ties: List[str] = field(default_factory=list)


def score_candidates(
    transcript_norm: str,
    candidates: Sequence[str],
    fold_table: Optional[Mapping[str, str]] = None,
    length_penalty: float = MatchingConfig.length_penalty,
) -> List[ScoredCandidate]:
    """依詞彙順序為每個候選詞評分"""
    scored = []
    for candidate in candidates:
        normalized = normalize(candidate, fold_table)
        distance, score = score_pair(transcript_norm, normalized, length_penalty)
        scored.append(ScoredCandidate(candidate, normalized, distance, score))
    return scored


def rank_candidates(
    transcript_norm: str,
    candidates: Sequence[str],
    fold_table: Optional[Mapping[str, str]] = None,
    length_penalty: float = MatchingConfig.length_penalty,
) -> List[ScoredCandidate]:
    """
    依相似度由高到低排序所有候選詞

    同分時保持詞彙順序，可用於分析某個逐字稿為何沒有選中預期答案。
    """
    scored = score_candidates(transcript_norm, candidates, fold_table, length_penalty)
    return sorted(scored, key=lambda item: -item.similarity)


def select_best(
    transcript_norm: str,
    candidates: Sequence[str],
    expected: Optional[str] = None,
    fold_table: Optional[Mapping[str, str]] = None,
    config: Optional[MatchingConfig] = None,
) -> MatchResult:
    """
    選出最佳候選詞

    Args:
        transcript_norm: 已正規化的逐字稿
        candidates: 候選詞彙 (可能已縮減)
        expected: 標準答案；並列時若在並列集合中則優先選它
        fold_table: 語言折疊表
        config: 比對配置 (長度懲罰、top_n)

    Returns:
        MatchResult

    Raises:
        ValueError: 候選詞彙為空
    """
    if not candidates:
        raise ValueError("candidates must not be empty")

    config = config or MatchingConfig()
    scored = score_candidates(transcript_norm, candidates, fold_table, config.length_penalty)

    best_similarity = float("-inf")
    ties: List[ScoredCandidate] = []
    for item in scored:
        # 分數來自整數距離與整數長度差，同分以浮點數相等判斷即可
        if item.similarity > best_similarity:
            best_similarity = item.similarity
            ties = [item]
        elif item.similarity == best_similarity:
            ties.append(item)

    expected_norm = normalize(expected, fold_table) if expected else None
    chosen = ties[0]
    if expected_norm is not None:
        for item in ties:
            if item.normalized == expected_norm:
                chosen = item
                break

    alternatives = sorted(scored, key=lambda item: -item.similarity)[: config.top_n]

    return MatchResult(
        best_candidate=chosen.candidate,
        best_similarity=best_similarity,
        is_correct=expected_norm is not None and chosen.normalized == expected_norm,
        alternatives=alternatives,
        ties=[item.candidate for item in ties],
    )
