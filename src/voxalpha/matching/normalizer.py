"""
文字正規化模組

把逐字稿或詞彙條目轉成可比對的形式：
小寫 → 去頭尾空白 → 依語言折疊變音符號 → 移除英數以外的字元。

多個輸入可能折疊成同一個結果 (例如 "Köln" 與 "koln")，這是預期行為。
"""

import re
from typing import Mapping, Optional

_DISALLOWED = re.compile(r"[^a-z0-9]")


def fold(text: str, fold_table: Optional[Mapping[str, str]] = None) -> str:
    """依折疊表逐字替換 (例如 ä -> a, ß -> ss)"""
    if not fold_table:
        return text
    return "".join(fold_table.get(ch, ch) for ch in text)


def normalize(text: str, fold_table: Optional[Mapping[str, str]] = None) -> str:
    """
    正規化文字

    Args:
        text: 任意文字 (None 視為空字串)
        fold_table: 語言專屬折疊表

    Returns:
        str: 只含 a-z0-9 的字串，空輸入回傳空字串

    範例:
        >>> normalize("  Köln! ", {"ö": "o"})
        'koln'
        >>> normalize("Alpha 123!")
        'alpha123'
    """
    if not text:
        return ""
    folded = fold(text.lower().strip(), fold_table)
    return _DISALLOWED.sub("", folded)


def leading_unit(text: str, fold_table: Optional[Mapping[str, str]] = None) -> str:
    """
    取得文字的首個正規化單位

    回傳第一個在正規化後仍有內容的字元的正規化結果；
    折疊成雙字母的字元 (例如 ß -> ss) 會回傳兩個字母。
    """
    for ch in text or "":
        unit = normalize(ch, fold_table)
        if unit:
            return unit
    return ""
