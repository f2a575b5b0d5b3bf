"""Evaluation Stats tests - rating aggregation."""

from tradeconnect.core.evaluation_stats import (
    average_rating,
    criteria_averages,
    evaluation_summary,
    most_common,
    rating_distribution,
)


def test_average_rating_rounds():
    assert average_rating([4.0, 5.0, 4.5]) == 4.5
    assert average_rating([1.0, 2.0, 2.0]) == 1.67


def test_average_rating_empty():
    assert average_rating([]) == 0.0


def test_distribution_has_every_bucket():
    dist = rating_distribution([4.9, 4.0, 1.0, 5.0])
    assert dist == {"1": 1, "2": 0, "3": 0, "4": 2, "5": 1}


def test_criteria_averages_only_seen_criteria():
    result = criteria_averages([
        {"content": 5, "delivery": 4},
        None,
        {"content": 4},
    ])
    assert result == {"content": 4.5, "delivery": 4.0}


def test_evaluation_summary_shape():
    summary = evaluation_summary([5.0, 3.0], [None, None])
    assert summary["totalEvaluations"] == 2
    assert summary["averageRating"] == 4.0
    assert summary["criteriaAverages"] == {}


def test_most_common():
    assert most_common(["virtual", "presential", "virtual"], "none") == "virtual"
    assert most_common([], "none") == "none"
