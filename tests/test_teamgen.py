import random
from datetime import datetime

import pytest

from balance_model import (
    CandidateLimitExceeded,
    Config,
    Match,
    MatchParticipation,
    PairwiseRelationshipAnalyzer,
    Player,
    SingleObjectiveBalancer,
    WeightVector,
    generate_teams,
)
from balance_model.errors import UnknownObjective
from balance_model.repositories import InMemoryMatchRepository
from balance_model.teamgen import skill_metric

NOW = datetime(2024, 3, 10)


def _players(ratings):
    return [Player(id=pid, name=pid, rating=rating) for pid, rating in ratings.items()]


def _analyzer(history=()):
    repo = InMemoryMatchRepository()
    for match_id, date, titans, atlanteans in history:
        parts = [MatchParticipation(match_id, pid, "titans") for pid in titans]
        parts += [MatchParticipation(match_id, pid, "atlanteans") for pid in atlanteans]
        repo.add(Match(id=match_id, date=date, winning_side="titans"), parts)
    return PairwiseRelationshipAnalyzer(repo)


def test_skill_balance_pairs_strongest_with_weakest():
    players = _players({"A": 1300, "B": 1200, "C": 1200, "D": 1100})
    result = generate_teams(players, "skill", _analyzer())

    assert result.side1_ids == ["A", "D"]
    assert result.side2_ids == ["B", "C"]
    assert result.stats["difference"] == 0
    assert result.stats["side1_average"] == 1200


def test_skill_balance_reference_example():
    players = _players({"A": 1500, "B": 1400, "C": 1300, "D": 1200})
    result = generate_teams(players, "skill", _analyzer())
    assert (result.side1_ids, result.side2_ids) == (["A", "D"], ["B", "C"])


def test_skill_balance_is_deterministic_on_input_order():
    players = _players({"A": 1400, "B": 1250, "C": 1230, "D": 1100, "E": 1000})
    forward = generate_teams(players, "skill", _analyzer())
    backward = generate_teams(list(reversed(players)), "skill", _analyzer())
    assert forward.side1_ids == backward.side1_ids
    assert len(forward.side1_ids) == 3
    assert len(forward.side2_ids) == 2


def test_experience_and_win_rate_modes():
    players = [
        Player("A", "A", games=10, wins=8, losses=2),
        Player("B", "B", games=6, wins=3, losses=3),
        Player("C", "C", games=4, wins=1, losses=3),
        Player("D", "D"),
    ]
    experience = generate_teams(players, "experience", _analyzer())
    assert sorted(experience.side1_ids) == ["A", "D"]

    win_rate = generate_teams(players, "win_rate", _analyzer())
    assert win_rate.objective == "win_rate"
    assert win_rate.side1_ids == ["A", "C"]
    assert win_rate.stats["difference"] == pytest.approx(0.025)


def test_novelty_and_reunion_split_frequent_teammates():
    history = [
        ("m1", datetime(2024, 3, 1), ["A", "B"], ["C"]),
        ("m2", datetime(2024, 3, 5), ["A", "B"], ["D"]),
    ]
    players = _players({"A": 1200, "B": 1200, "C": 1200, "D": 1200})

    novelty = generate_teams(players, "novelty", _analyzer(history), now=NOW)
    assert ("A" in novelty.side1_ids) != ("B" in novelty.side1_ids)
    assert novelty.raw_scores["novelty"] == 0

    reunion = generate_teams(players, "reunion", _analyzer(history), now=NOW)
    assert ("A" in reunion.side1_ids) != ("B" in reunion.side1_ids)
    assert reunion.raw_scores["reunion"] == 2 * 3650


def test_random_mode_uses_given_rng():
    players = _players({pid: 1200 for pid in "ABCDE"})
    first = generate_teams(players, "random", _analyzer(), rng=random.Random(3))
    second = generate_teams(players, "random", _analyzer(), rng=random.Random(3))
    assert first.side1_ids == second.side1_ids
    assert len(first.side1_ids) == 3
    assert sorted(first.side1_ids + first.side2_ids) == list("ABCDE")


@pytest.mark.parametrize("mode", ["skill", "novelty", "random", "custom"])
def test_too_few_players_is_rejected(mode):
    players = _players({"A": 1200, "B": 1200, "C": 1200})
    result = generate_teams(players, mode, _analyzer(), weights=WeightVector(skill=1))
    assert result.rejected
    assert result.reason == "insufficient_players"
    assert result.side1_ids == [] and result.side2_ids == []


def test_too_many_players_raises():
    players = _players({f"p{i:02d}": 1200 for i in range(21)})
    with pytest.raises(CandidateLimitExceeded):
        generate_teams(players, "novelty", _analyzer())
    with pytest.raises(CandidateLimitExceeded):
        generate_teams(players, "skill", _analyzer())


def test_unknown_mode_raises():
    with pytest.raises(UnknownObjective):
        generate_teams(_players({"A": 1200}), "chaos", _analyzer())


def test_duplicate_candidates_count_once():
    players = _players({"A": 1300, "B": 1200, "C": 1200, "D": 1100})
    result = generate_teams(players + players[:2], "skill", _analyzer())
    assert sorted(result.side1_ids + result.side2_ids) == ["A", "B", "C", "D"]


def test_balancer_pairwise_directions():
    balancer = SingleObjectiveBalancer(Config())
    players = _players({pid: 1200 for pid in "ABCD"})
    friends = {frozenset("AB"): 5.0}

    def weight(a, b):
        return friends.get(frozenset((a, b)), 0.0)

    low = balancer.minimize_total_pairwise_sum(players, weight)
    high = balancer.maximize_total_pairwise_sum(players, weight)
    assert low.raw_scores["pairwise_min"] == 0.0
    assert high.raw_scores["pairwise_max"] == 5.0
    assert high.side1_ids == ["A", "B"]
    assert high.stats["average_per_pair"] == 2.5


def test_skill_metric_reads_display_rating():
    cfg = Config(display_scale=0.5, display_offset=100)
    assert skill_metric(cfg)(Player("A", "A", rating=1200)) == 700
