"""
英文語言設定

NATO/ICAO 拼讀字母表，使用單一目標門檻判定。
"""

from voxalpha.languages.profile import LanguageProfile, VocabularyKind, build_alias_table

from .config import EnglishAlphabetConfig


def build_english_profile() -> LanguageProfile:
    config = EnglishAlphabetConfig
    return LanguageProfile(
        tag=config.TAG,
        display_name=config.DISPLAY_NAME,
        alphabet=dict(config.ALPHABET),
        fold_table=dict(config.FOLD_TABLE),
        vocabulary_kind=VocabularyKind.CLOSED,
        aliases=build_alias_table(config.ALIASES),
    )


__all__ = ["EnglishAlphabetConfig", "build_english_profile"]
