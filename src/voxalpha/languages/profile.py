"""
語言設定檔 (LanguageProfile)

每個語言的折疊表、字母表、別名與城市清單集中在一個不可變的設定物件，
於 session 啟動時解析一次；比對程式碼不再依語言代碼分支。
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from functools import cached_property
from typing import Dict, List, Mapping, Optional, Tuple

from voxalpha.matching.normalizer import normalize


class VocabularyKind(Enum):
    """詞彙類型"""
    CLOSED = "closed"  # 小型固定字母表，每個字母一個答案
    OPEN = "open"      # 大型城市清單，用於上下文感知的模糊查詢


SPACE_WORD = "(space)"


@dataclass(frozen=True)
class LanguageProfile:
    """
    語言設定檔

    Attributes:
        tag: 語言代碼 (例如 "en", "de")
        display_name: 字母表標準名稱
        fold_table: 變音符號折疊表 (字元 -> 基本字母或雙字母)
        vocabulary_kind: 詞彙類型
        alphabet: 字母 -> 標準答案 (保持順序)
        aliases: 標準答案 -> 可接受的其他拼法
        gazetteer: 城市清單 (僅 OPEN 類型使用)
    """
    tag: str
    display_name: str
    alphabet: Mapping[str, str]
    fold_table: Mapping[str, str] = field(default_factory=dict)
    vocabulary_kind: VocabularyKind = VocabularyKind.CLOSED
    aliases: Mapping[str, Tuple[str, ...]] = field(default_factory=dict)
    gazetteer: Optional[Tuple[str, ...]] = None

    def normalize(self, text: str) -> str:
        """以本語言的折疊表正規化文字"""
        return normalize(text, self.fold_table)

    @property
    def units(self) -> List[str]:
        return list(self.alphabet.keys())

    @property
    def answers(self) -> List[str]:
        return list(self.alphabet.values())

    @property
    def vocabulary(self) -> Tuple[str, ...]:
        """目前語言的有效詞彙 (OPEN 時為城市清單，否則為字母表答案)"""
        if self.vocabulary_kind is VocabularyKind.OPEN and self.gazetteer:
            return self.gazetteer
        return tuple(self.alphabet.values())

    def answer_for(self, unit: str) -> str:
        return self.alphabet[unit]

    def accepted_forms(self, answer: str) -> List[str]:
        """標準答案本身加上所有別名"""
        return [answer, *self.aliases.get(answer, ())]

    def is_gazetteer_member(self, answer: str) -> bool:
        """檢查答案 (正規化後) 是否為城市清單中的真實城市"""
        if not self.gazetteer:
            return False
        return self.normalize(answer) in self.gazetteer_keys

    def uses_open_vocabulary(self, answer: str) -> bool:
        """
        判斷此答案是否走開放詞彙策略

        Umlaut Aachen、Eszett、Ypsilon 這類不是城市的條目改走單一目標比對。
        """
        return (
            self.vocabulary_kind is VocabularyKind.OPEN
            and bool(self.gazetteer)
            and self.is_gazetteer_member(answer)
        )

    @cached_property
    def gazetteer_keys(self) -> frozenset:
        """城市清單的正規化集合"""
        return frozenset(self.normalize(city) for city in self.gazetteer or ())

    def spell(self, text: str) -> str:
        """
        將文字逐字拼成代碼詞

        範例:
            >>> profile.spell("A B")
            'Alpha - (space) - Bravo'
        """
        words = []
        for char in text:
            # "ß".upper() 是 "SS"，所以大寫查不到時再用原字元查
            upper = char.upper()
            if upper in self.alphabet:
                words.append(self.alphabet[upper])
            elif char in self.alphabet:
                words.append(self.alphabet[char])
            elif char == " ":
                words.append(SPACE_WORD)
            else:
                words.append(upper)
        return " - ".join(words)


def spell_text(text: str, profile: LanguageProfile) -> str:
    """LanguageProfile.spell 的函式版本"""
    return profile.spell(text)


def build_alias_table(aliases: Dict[str, List[str]]) -> Dict[str, Tuple[str, ...]]:
    return {answer: tuple(forms) for answer, forms in aliases.items()}
