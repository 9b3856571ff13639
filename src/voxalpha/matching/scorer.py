"""
編輯距離評分模組

以 Levenshtein 距離計算正規化相似度，並加上長度差懲罰：
單純的編輯距離容易讓「包含短逐字稿的長詞」勝出 (例如 "krön" 比對
"Kronach" 與 "Köln")，每差一個字元扣一點分數即可抵銷。
"""

from typing import Optional, Tuple

import Levenshtein

from voxalpha.config import MatchingConfig

DEFAULT_LENGTH_PENALTY = MatchingConfig.length_penalty


def edit_distance(a: str, b: str) -> int:
    """插入、刪除、替換皆為單位成本的編輯距離"""
    return Levenshtein.distance(a, b)


def base_similarity(a: str, b: str, distance: Optional[int] = None) -> float:
    """1 - distance / max(len(a), len(b), 1)，不含長度懲罰"""
    if distance is None:
        distance = edit_distance(a, b)
    return 1.0 - distance / max(len(a), len(b), 1)


def score_pair(a: str, b: str, length_penalty: float = DEFAULT_LENGTH_PENALTY) -> Tuple[int, float]:
    """回傳 (編輯距離, 相似度)"""
    distance = edit_distance(a, b)
    score = base_similarity(a, b, distance)
    score -= length_penalty * abs(len(a) - len(b))
    return distance, min(1.0, score)


def similarity(a: str, b: str, length_penalty: float = DEFAULT_LENGTH_PENALTY) -> float:
    """
    計算兩個已正規化字串的相似度

    公式: 1 - distance / max_len - length_penalty * |len(a) - len(b)|
    上限截在 1.0，沒有下限 (很差的比對可以是負數，排序依然正確)。

    Args:
        a: 正規化字串 (通常是逐字稿)
        b: 正規化字串 (通常是候選詞)
        length_penalty: 每差一個字元扣除的分數

    Returns:
        float: (-inf, 1.0] 之間的分數

    範例:
        >>> similarity("koln", "koln")
        1.0
        >>> similarity("koln", "kronach") < similarity("koln", "koln")
        True
    """
    return score_pair(a, b, length_penalty)[1]
