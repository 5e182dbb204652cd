import random
from datetime import datetime

from balance_model import (
    MultiObjectiveScorer,
    PairwiseRelationshipAnalyzer,
    Player,
    WeightedSelector,
    WeightVector,
    generate_teams,
)
from balance_model.repositories import InMemoryMatchRepository
from balance_model.scoring import normalize_scores
from balance_model.types import OBJECTIVES

NOW = datetime(2024, 3, 10)


def _score(players, seed=1):
    analyzer = PairwiseRelationshipAnalyzer(InMemoryMatchRepository())
    ids = [p.id for p in players]
    return MultiObjectiveScorer().score(
        players,
        analyzer.build_familiarity(ids),
        analyzer.build_recency(ids),
        now=NOW,
        rng=random.Random(seed),
    )


def _players():
    return [
        Player("A", "A", games=12, wins=9, losses=3, rating=1380),
        Player("B", "B", games=8, wins=4, losses=4, rating=1239),
        Player("C", "C", games=2, wins=0, losses=2, rating=1149),
        Player("D", "D", games=5, wins=2, losses=3, rating=1209),
        Player("E", "E", rating=1200),
        Player("F", "F", games=1, wins=1, losses=0, rating=1089),
    ]


def test_normalize_scores_directions():
    assert normalize_scores([10, 20, 30], maximize=False) == [1.0, 0.5, 0.0]
    assert normalize_scores([10, 20, 30], maximize=True) == [0.0, 0.5, 1.0]
    assert normalize_scores([4, 4, 4], maximize=False) == [1.0, 1.0, 1.0]
    assert normalize_scores([], maximize=True) == []


def test_scored_partitions_are_normalized():
    scored = _score(_players())
    assert len(scored) == 20
    for name in OBJECTIVES:
        column = scored.normalized[name]
        assert len(column) == 20
        assert all(0.0 <= value <= 1.0 for value in column)
    # no history: every pair reads as never teamed
    assert scored.normalized["novelty"] == [1.0] * 20
    assert scored.normalized["reunion"] == [1.0] * 20


def test_weighted_skill_only_matches_skill_mode():
    players = _players()
    analyzer = PairwiseRelationshipAnalyzer(InMemoryMatchRepository())
    weighted = WeightedSelector().select(_score(players), WeightVector(skill=1))
    single = generate_teams(players, "skill", analyzer)

    assert weighted.objective == "custom"
    assert weighted.side1_ids == single.side1_ids
    assert weighted.side2_ids == single.side2_ids
    assert weighted.normalized_scores["skill"] == 1.0
    assert weighted.raw_scores["skill"] == single.raw_scores["skill"]


def test_weights_are_scale_free():
    scored = _score(_players())
    small = WeightedSelector().select(scored, WeightVector(skill=1, experience=2))
    large = WeightedSelector().select(scored, WeightVector(skill=10, experience=20))
    assert small.side1_ids == large.side1_ids
    assert small.stats["score"] == large.stats["score"]


def test_zero_weights_fall_back_to_equal_blend():
    scored = _score(_players())
    zero = WeightedSelector().select(scored, WeightVector())
    equal = WeightedSelector().select(scored, WeightVector(1, 1, 1, 1, 1, 1))
    assert zero.side1_ids == equal.side1_ids
    assert 0.0 <= zero.stats["score"] <= 1.0


def test_empty_scores_are_rejected():
    scored = _score(_players()[:3])
    assert len(scored) == 0
    result = WeightedSelector().select(scored, WeightVector(skill=1))
    assert result.rejected
    assert result.reason == "insufficient_players"
