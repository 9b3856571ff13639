"""
德文語言設定

DIN 5009 城市字母表；城市條目以完整城市清單做上下文感知比對，
Umlaut/Eszett/Ypsilon 等非城市條目改用單一目標門檻判定。
"""

from importlib import resources
from typing import Tuple

from voxalpha.core.errors import VocabularyLoadError
from voxalpha.languages.profile import LanguageProfile, VocabularyKind, build_alias_table
from voxalpha.utils.logger import get_logger

from .config import GermanAlphabetConfig

_logger = get_logger("languages.german")


def parse_gazetteer(text: str) -> Tuple[str, ...]:
    """一行一個城市名稱，忽略空行與前後空白"""
    return tuple(line.strip() for line in text.splitlines() if line.strip())


def load_gazetteer() -> Tuple[str, ...]:
    """
    讀取內建的德國城市清單

    Raises:
        VocabularyLoadError: 檔案不存在、無法讀取或內容為空
    """
    config = GermanAlphabetConfig
    try:
        text = (
            resources.files(config.GAZETTEER_PACKAGE)
            .joinpath(config.GAZETTEER_RESOURCE)
            .read_text(encoding="utf-8")
        )
    except (OSError, ModuleNotFoundError) as exc:
        raise VocabularyLoadError(f"Failed to load German cities: {exc}") from exc

    cities = parse_gazetteer(text)
    if not cities:
        raise VocabularyLoadError("German cities list is empty")

    _logger.debug(f"Loaded {len(cities)} German cities")
    return cities


def build_german_profile() -> LanguageProfile:
    config = GermanAlphabetConfig
    return LanguageProfile(
        tag=config.TAG,
        display_name=config.DISPLAY_NAME,
        alphabet=dict(config.ALPHABET),
        fold_table=dict(config.FOLD_TABLE),
        vocabulary_kind=VocabularyKind.OPEN,
        aliases=build_alias_table(config.ALIASES),
        gazetteer=load_gazetteer(),
    )


__all__ = ["GermanAlphabetConfig", "build_german_profile", "load_gazetteer", "parse_gazetteer"]
