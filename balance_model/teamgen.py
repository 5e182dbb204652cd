import logging
import math
import random
from datetime import datetime
from typing import Callable, Dict, List, Optional, Sequence

from .config import Config
from .errors import CandidateLimitExceeded, UnknownObjective
from .partitions import AverageSplit, PairwiseSplit, TeamPartitionEnumerator, pair_count, pair_weights
from .ratings import display_rating
from .relationships import PairwiseRelationshipAnalyzer, recency_days
from .scoring import MultiObjectiveScorer, WeightedSelector
from .types import DateRange, PartitionResult, Player, WeightVector
from .utils import utc_now

logger = logging.getLogger(__name__)

MODES = ("skill", "experience", "novelty", "reunion", "win_rate", "random", "custom")


def skill_metric(cfg: Config) -> Callable[[Player], float]:
    return lambda player: display_rating(player, cfg)


def experience_metric(player: Player) -> float:
    return player.games


def win_rate_metric(cfg: Config) -> Callable[[Player], float]:
    return lambda player: player.win_rate(cfg.neutral_win_rate)


def unique_candidates(candidates: Sequence[Player]) -> List[Player]:
    by_id: Dict[str, Player] = {}
    for player in candidates:
        by_id.setdefault(player.id, player)
    return [by_id[key] for key in sorted(by_id)]


class SingleObjectiveBalancer:
    def __init__(self, config: Optional[Config] = None):
        self.config = config or Config()

    def _too_few(self, candidates: List[Player], objective: str) -> Optional[PartitionResult]:
        if len(candidates) >= self.config.min_candidates:
            return None
        logger.info("%s balance rejected: %d candidates", objective, len(candidates))
        return PartitionResult.rejection(objective, "insufficient_players")

    def minimize_average_difference(
        self,
        candidates: Sequence[Player],
        metric: Callable[[Player], float],
        objective: str = "average",
    ) -> PartitionResult:
        players = unique_candidates(candidates)
        rejected = self._too_few(players, objective)
        if rejected:
            return rejected
        enumerator = TeamPartitionEnumerator([p.id for p in players], self.config)
        split = AverageSplit([metric(p) for p in players], enumerator.side1_size)

        best = None
        best_diff = math.inf
        for side1 in enumerator:
            diff = split.difference(side1)
            if diff < best_diff:
                best, best_diff = side1, diff

        side1_ids, side2_ids = enumerator.sides(best)
        avg1, avg2 = split.averages(best)
        return PartitionResult(
            side1_ids=side1_ids,
            side2_ids=side2_ids,
            objective=objective,
            raw_scores={objective: best_diff},
            stats={"side1_average": avg1, "side2_average": avg2, "difference": best_diff},
        )

    def _pairwise_search(
        self,
        candidates: Sequence[Player],
        pairwise: Callable[[str, str], float],
        objective: str,
        maximize: bool,
    ) -> PartitionResult:
        players = unique_candidates(candidates)
        rejected = self._too_few(players, objective)
        if rejected:
            return rejected
        enumerator = TeamPartitionEnumerator([p.id for p in players], self.config)
        split = PairwiseSplit(pair_weights(enumerator.player_ids, pairwise))

        best = None
        best_total = -math.inf if maximize else math.inf
        for side1 in enumerator:
            total = split.same_side_total(side1)
            if (total > best_total) if maximize else (total < best_total):
                best, best_total = side1, total

        side1_ids, side2_ids = enumerator.sides(best)
        side1_total = split.inner(best)
        side2_total = split.inner(enumerator.side2(best))
        pair_total = pair_count(enumerator.side1_size) + pair_count(enumerator.side2_size)
        return PartitionResult(
            side1_ids=side1_ids,
            side2_ids=side2_ids,
            objective=objective,
            raw_scores={objective: best_total},
            stats={
                "side1_total": side1_total,
                "side2_total": side2_total,
                "average_per_pair": best_total / pair_total if pair_total else 0.0,
            },
        )

    def minimize_total_pairwise_sum(
        self,
        candidates: Sequence[Player],
        pairwise: Callable[[str, str], float],
        objective: str = "pairwise_min",
    ) -> PartitionResult:
        return self._pairwise_search(candidates, pairwise, objective, maximize=False)

    def maximize_total_pairwise_sum(
        self,
        candidates: Sequence[Player],
        pairwise: Callable[[str, str], float],
        objective: str = "pairwise_max",
    ) -> PartitionResult:
        return self._pairwise_search(candidates, pairwise, objective, maximize=True)

    def random_split(self, candidates: Sequence[Player], rng: Optional[random.Random] = None) -> PartitionResult:
        players = unique_candidates(candidates)
        rejected = self._too_few(players, "random")
        if rejected:
            return rejected
        ids = [p.id for p in players]
        (rng or random.Random()).shuffle(ids)
        halfway = math.ceil(len(ids) / 2)
        return PartitionResult(side1_ids=ids[:halfway], side2_ids=ids[halfway:], objective="random")


def generate_teams(
    candidates: Sequence[Player],
    mode: str,
    analyzer: PairwiseRelationshipAnalyzer,
    weights: Optional[WeightVector] = None,
    date_range: Optional[DateRange] = None,
    now: Optional[datetime] = None,
    rng: Optional[random.Random] = None,
    config: Optional[Config] = None,
) -> PartitionResult:
    cfg = config or analyzer.config
    if mode not in MODES:
        raise UnknownObjective(f"unknown balancing mode {mode!r}")
    balancer = SingleObjectiveBalancer(cfg)
    players = unique_candidates(candidates)
    ids = [p.id for p in players]

    if mode == "skill":
        return balancer.minimize_average_difference(players, skill_metric(cfg), "skill")
    if mode == "experience":
        return balancer.minimize_average_difference(players, experience_metric, "experience")
    if mode == "win_rate":
        return balancer.minimize_average_difference(players, win_rate_metric(cfg), "win_rate")
    if mode == "random":
        return balancer.random_split(players, rng)
    if len(players) < cfg.min_candidates:
        logger.info("%s balance rejected: %d candidates", mode, len(players))
        return PartitionResult.rejection(mode, "insufficient_players")
    if len(players) > cfg.max_candidates:
        raise CandidateLimitExceeded(len(players), cfg.max_candidates)

    now = now or utc_now()
    if mode == "novelty":
        familiarity = analyzer.build_familiarity(ids, date_range)
        return balancer.minimize_total_pairwise_sum(players, familiarity.get, "novelty")
    if mode == "reunion":
        recency = analyzer.build_recency(ids, date_range)
        return balancer.maximize_total_pairwise_sum(
            players,
            lambda a, b: recency_days(recency, a, b, now, cfg),
            "reunion",
        )

    familiarity = analyzer.build_familiarity(ids, date_range)
    recency = analyzer.build_recency(ids, date_range)
    scored = MultiObjectiveScorer(cfg).score(players, familiarity, recency, now=now, rng=rng)
    return WeightedSelector().select(scored, weights or WeightVector())
