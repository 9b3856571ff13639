"""
候選縮減模組

已知正確答案的首字母時，只保留首字母相同的詞彙。
編輯距離在未過濾的大型詞彙上常讓「首字母錯但較長」的詞勝出，
先依首字母縮減就能避開這個問題，不需要額外的語音模型。
"""

from typing import List, Mapping, Optional, Sequence

from voxalpha.utils.logger import get_logger

from .normalizer import leading_unit

_logger = get_logger("matching.reducer")


def reduce_candidates(
    vocabulary: Sequence[str],
    expected_leading_unit: str,
    fold_table: Optional[Mapping[str, str]] = None,
) -> List[str]:
    """
    依首個正規化單位過濾詞彙

    Args:
        vocabulary: 完整詞彙 (保持原順序)
        expected_leading_unit: 已正規化的預期首單位 (例如 "k"、"ss")
        fold_table: 語言折疊表

    Returns:
        List[str]: 過濾後的詞彙；過濾結果為空時回傳完整詞彙
    """
    reduced = [
        entry for entry in vocabulary
        if leading_unit(entry, fold_table) == expected_leading_unit
    ]

    _logger.debug(
        f"Context filter: {len(reduced)}/{len(vocabulary)} entries start with '{expected_leading_unit}'"
    )

    if not reduced:
        # 罕見字母可能沒有任何城市，退回完整詞彙
        return list(vocabulary)
    return reduced
