"""
德文 (DIN 5009) 字母表配置

德文字母以城市名稱拼讀，答案比對時會參考完整的城市清單。
"""


class GermanAlphabetConfig:
    """德文拼讀字母表配置 - 開放詞彙 (城市清單)"""

    TAG = "de"
    DISPLAY_NAME = "DIN 5009:2022-06"

    ALPHABET = {
        "A": "Aachen",
        "B": "Bremen",
        "C": "Chemnitz",
        "D": "Düsseldorf",
        "E": "Essen",
        "F": "Frankfurt",
        "G": "Goslar",
        "H": "Hamburg",
        "I": "Ingelheim",
        "J": "Jena",
        "K": "Köln",
        "L": "Leipzig",
        "M": "München",
        "N": "Nürnberg",
        "O": "Oldenburg",
        "P": "Potsdam",
        "Q": "Quickborn",
        "R": "Rostock",
        "S": "Salzwedel",
        "T": "Tübingen",
        "U": "Unna",
        "V": "Völklingen",
        "W": "Wuppertal",
        "X": "Xanten",
        "Y": "Ypsilon",
        "Z": "Zerbst",
        "Ä": "Umlaut Aachen",
        "Ö": "Umlaut Oldenburg",
        "Ü": "Umlaut Unna",
        "ß": "Eszett",
    }

    ALIASES = {
        "Ypsilon": ["Üpsilon"],
        "Eszett": ["Scharfes S"],
    }

    # 變音符號折疊表
    # 格式: 字元 -> 基本字母或雙字母
    FOLD_TABLE = {
        "ä": "a",
        "ö": "o",
        "ü": "u",
        "ß": "ss",
    }

    GAZETTEER_PACKAGE = "voxalpha.languages.german"
    GAZETTEER_RESOURCE = "data/german_cities.txt"
