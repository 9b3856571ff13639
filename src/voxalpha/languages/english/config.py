"""
英文 (NATO/ICAO) 字母表配置
"""


class EnglishAlphabetConfig:
    """英文拼讀字母表配置 - 封閉詞彙，每個字母一個代碼詞"""

    TAG = "en"
    DISPLAY_NAME = "NATO phonetic alphabet"

    ALPHABET = {
        "A": "Alpha",
        "B": "Bravo",
        "C": "Charlie",
        "D": "Delta",
        "E": "Echo",
        "F": "Foxtrot",
        "G": "Golf",
        "H": "Hotel",
        "I": "India",
        "J": "Juliet",
        "K": "Kilo",
        "L": "Lima",
        "M": "Mike",
        "N": "November",
        "O": "Oscar",
        "P": "Papa",
        "Q": "Quebec",
        "R": "Romeo",
        "S": "Sierra",
        "T": "Tango",
        "U": "Uniform",
        "V": "Victor",
        "W": "Whiskey",
        "X": "X-ray",
        "Y": "Yankee",
        "Z": "Zulu",
    }

    # ICAO 官方拼法與常見辨識結果
    # 格式: 標準答案 -> [同樣接受的拼法]
    ALIASES = {
        "Alpha": ["Alfa"],
        "Juliet": ["Juliett"],
        "Whiskey": ["Whisky"],
        "X-ray": ["Xray", "Ex-ray"],
    }

    # 英文不需要折疊變音符號
    FOLD_TABLE: dict = {}
