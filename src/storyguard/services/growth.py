"""
成長ログ（ユーザーの手直し履歴・反応数）の集計。

- summarize_preferences: 直近の修正から「好み」を抜き出し、生成プロンプトに差し込む
- engagement_stats: 直近1週間 vs 先週の反応数比較
"""

from __future__ import annotations

import math
import re
from collections import Counter
from dataclasses import dataclass
from typing import Any, Iterable, Optional

_EMOJI_RE = re.compile("[\U0001F300-\U0001F9FF]|[\u2600-\u26FF]|[\u2700-\u27BF]")

TREND_SHORTER = "テキストを短くする傾向"
TREND_LONGER = "テキストを長くする傾向"
TREND_EMOJI_ADDED = "絵文字を追加する傾向"
TREND_EMOJI_REMOVED = "絵文字を削除する傾向"
TREND_REWORDED = "文言を独自に調整する傾向"


def _count_emoji(text: str) -> int:
    return len(_EMOJI_RE.findall(text))


def summarize_preferences(
    modification_batches: Iterable[Iterable[dict]], top_n: int = 5
) -> Optional[str]:
    """
    growth_logs.user_modifications の並び（新しい順）から修正傾向を数える。
    傾向が無ければ None（プロンプトに何も足さない）。
    """
    trends: Counter[str] = Counter()

    for mods in modification_batches:
        for mod in mods or []:
            original = str(mod.get("original_text") or "")
            modified = str(mod.get("modified_text") or "")

            if len(modified) < len(original) * 0.8:
                trends[TREND_SHORTER] += 1
            elif len(modified) > len(original) * 1.2:
                trends[TREND_LONGER] += 1

            orig_emoji = _count_emoji(original)
            mod_emoji = _count_emoji(modified)
            if mod_emoji > orig_emoji:
                trends[TREND_EMOJI_ADDED] += 1
            elif orig_emoji > mod_emoji:
                trends[TREND_EMOJI_REMOVED] += 1

            if original != modified:
                trends[TREND_REWORDED] += 1

    if not trends:
        return None
    return "\n".join(f"- {trend}（過去{count}回）" for trend, count in trends.most_common(top_n))


@dataclass
class EngagementTotals:
    impressions: int = 0
    reactions: int = 0
    dm_count: int = 0


def sum_metrics(metrics: Iterable[Optional[dict[str, Any]]]) -> EngagementTotals:
    totals = EngagementTotals()
    for m in metrics:
        if not m:
            continue
        totals.impressions += int(m.get("impressions") or 0)
        totals.reactions += int(m.get("reactions") or 0)
        totals.dm_count += int(m.get("dm_count") or 0)
    return totals


def percent_change(current: int, previous: int) -> int:
    if previous == 0:
        return 100 if current > 0 else 0
    # .5 は正の方向へ丸める（-2.5 -> -2）
    return math.floor((current - previous) / previous * 100 + 0.5)


def engagement_stats(
    recent: Iterable[Optional[dict]], previous: Iterable[Optional[dict]], script_count: int
) -> dict[str, int]:
    now = sum_metrics(recent)
    before = sum_metrics(previous)
    return {
        "totalImpressions": now.impressions,
        "totalReactions": now.reactions,
        "totalDmCount": now.dm_count,
        "scriptCount": script_count,
        "impressionChange": percent_change(now.impressions, before.impressions),
        "reactionChange": percent_change(now.reactions, before.reactions),
    }
