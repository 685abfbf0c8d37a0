"""
Pure aggregation helpers behind the admin analytics endpoints.
"""

from collections import OrderedDict
from datetime import date, timedelta
from typing import Dict, Iterable, List, Tuple

from app.core.utils import parse_timestamp


def percentage(count: int, total: int) -> int:
    """count/total as a whole percentage, halves rounded up"""
    if total <= 0:
        return 0
    return int(count * 100 / total + 0.5)


def daily_buckets(timestamps: Iterable, days: int, today: date) -> List[Dict]:
    """One {date, count} bucket per UTC day ending today, oldest first, zero-filled"""
    buckets: "OrderedDict[str, int]" = OrderedDict()
    for offset in range(days - 1, -1, -1):
        buckets[(today - timedelta(days=offset)).isoformat()] = 0
    for value in timestamps:
        if not value:
            continue
        key = parse_timestamp(value).date().isoformat()
        if key in buckets:
            buckets[key] += 1
    return [{"date": key, "count": count} for key, count in buckets.items()]


def distribution(counts: Iterable[Tuple[str, int]], label: str) -> List[Dict]:
    """Non-zero (label, count) pairs with their share of the total"""
    present = [(name, count) for name, count in counts if count > 0]
    total = sum(count for _, count in present)
    return [
        {label: name, "count": count, "percentage": percentage(count, total)}
        for name, count in present
    ]


def rank_creators(rows: Iterable[Dict], limit: int) -> List[Tuple[str, int, int]]:
    """(user_id, activity_count, total_plays) for the users with the most activities"""
    stats: Dict[str, List[int]] = {}
    for row in rows:
        user_id = row.get("user_id")
        if not user_id:
            continue
        entry = stats.setdefault(user_id, [0, 0])
        entry[0] += 1
        entry[1] += row.get("play_count") or 0
    ranked = sorted(stats.items(), key=lambda item: item[1][0], reverse=True)[:limit]
    return [(user_id, counts[0], counts[1]) for user_id, counts in ranked]
