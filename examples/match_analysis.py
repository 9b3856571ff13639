"""
比對分析範例

列出某個逐字稿在整個詞彙中的前 20 名候選，以及預期答案的排名，
用來找出為什麼辨識結果沒有對到預期的城市。

用法:
    python examples/match_analysis.py "Groftok" Rostock
    python examples/match_analysis.py "alfa" Alpha en
"""

import sys

from voxalpha import MatchingConfig, get_profile, rank_candidates

TOP_N = 20


def analyze(transcript: str, expected: str, language: str = "de", config: MatchingConfig = None):
    config = config or MatchingConfig()
    profile = get_profile(language)
    normalized = profile.normalize(transcript)

    print("=" * 60)
    print(f'逐字稿: "{transcript}" (正規化: "{normalized}")')
    print(f"語言: {profile.display_name}, 詞彙數: {len(profile.vocabulary)}")
    print("=" * 60)

    ranked = rank_candidates(normalized, profile.vocabulary, profile.fold_table, config.length_penalty)

    print(f"前 {TOP_N} 名:")
    for index, item in enumerate(ranked[:TOP_N], start=1):
        print(f"{index:2d}. {item.candidate:<30} ({item.similarity * 100:5.1f}%, distance={item.distance})")
    print()

    expected_norm = profile.normalize(expected)
    for index, item in enumerate(ranked, start=1):
        if item.normalized == expected_norm:
            print(f'預期答案 "{expected}" 排名第 {index} ({item.similarity * 100:.1f}%, distance={item.distance})')
            better = [other.candidate for other in ranked[: index - 1]]
            if better:
                print(f"分數較高的候選: {', '.join(better[:10])}")
            break
    else:
        print(f'預期答案 "{expected}" 不在詞彙中')
    print()


if __name__ == "__main__":
    if len(sys.argv) >= 3:
        analyze(sys.argv[1], sys.argv[2], *sys.argv[3:4])
    else:
        analyze("Groftok", "Rostock")
        analyze("Bun", "Bonn")
        analyze("alfa", "Alpha", "en")
