"""Evaluation Stats - rating aggregation for speaker evaluations and dashboards.

Invariants:
    - average_rating is the arithmetic mean rounded to 2 decimals (0 when empty)
    - rating_distribution always has keys "1".."5"; ratings floor into buckets
    - criteria averages only include criteria that appear in at least one evaluation
"""

import math
from collections import Counter
from typing import Iterable


def average_rating(ratings: Iterable[float]) -> float:
    values = list(ratings)
    if not values:
        return 0.0
    return round(sum(values) / len(values), 2)


def rating_distribution(ratings: Iterable[float]) -> dict[str, int]:
    dist = {str(k): 0 for k in range(1, 6)}
    for r in ratings:
        bucket = min(5, max(1, math.floor(r)))
        dist[str(bucket)] += 1
    return dist


def criteria_averages(criteria: Iterable[dict | None]) -> dict[str, float]:
    sums: dict[str, float] = {}
    counts: dict[str, int] = {}
    for entry in criteria:
        for name, value in (entry or {}).items():
            sums[name] = sums.get(name, 0.0) + value
            counts[name] = counts.get(name, 0) + 1
    return {name: round(sums[name] / counts[name], 2) for name in sums}


def evaluation_summary(
    ratings: list[float], criteria: list[dict | None],
) -> dict:
    """{totalEvaluations, averageRating, ratingDistribution, criteriaAverages}."""
    return {
        "totalEvaluations": len(ratings),
        "averageRating": average_rating(ratings),
        "ratingDistribution": rating_distribution(ratings),
        "criteriaAverages": criteria_averages(criteria),
    }


def most_common(values: Iterable[str], default: str) -> str:
    """Most frequent value; ties go to the first seen. `default` when empty."""
    counts = Counter(values)
    if not counts:
        return default
    return counts.most_common(1)[0][0]
