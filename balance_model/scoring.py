import random
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Sequence

from .config import Config
from .partitions import AverageSplit, Indices, PairwiseSplit, TeamPartitionEnumerator, pair_weights
from .ratings import display_rating
from .relationships import recency_days
from .types import OBJECTIVES, PairMatrix, PartitionResult, Player, WeightVector
from .utils import utc_now

MAXIMIZED = frozenset({"reunion", "random"})


def normalize_scores(values: Sequence[float], maximize: bool) -> List[float]:
    # 1 is always the most desirable value
    if not values:
        return []
    low = min(values)
    high = max(values)
    if high == low:
        return [1.0] * len(values)
    span = high - low
    if maximize:
        return [(value - low) / span for value in values]
    return [(high - value) / span for value in values]


@dataclass
class ScoredPartitions:
    enumerator: TeamPartitionEnumerator
    partitions: List[Indices] = field(default_factory=list)
    raw: Dict[str, List[float]] = field(default_factory=dict)
    normalized: Dict[str, List[float]] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.partitions)

    def scores_at(self, index: int) -> tuple[Dict[str, float], Dict[str, float]]:
        raw = {name: self.raw[name][index] for name in OBJECTIVES}
        normalized = {name: self.normalized[name][index] for name in OBJECTIVES}
        return raw, normalized


class MultiObjectiveScorer:
    def __init__(self, config: Optional[Config] = None):
        self.config = config or Config()

    def score(
        self,
        candidates: Sequence[Player],
        familiarity: PairMatrix,
        recency: PairMatrix,
        now: Optional[datetime] = None,
        rng: Optional[random.Random] = None,
    ) -> ScoredPartitions:
        cfg = self.config
        now = now or utc_now()
        rng = rng or random.Random()
        by_id = {p.id: p for p in candidates}
        enumerator = TeamPartitionEnumerator(by_id, cfg)
        players = [by_id[player_id] for player_id in enumerator.player_ids]
        size1 = enumerator.side1_size
        if len(players) < cfg.min_candidates:
            return ScoredPartitions(
                enumerator=enumerator,
                raw={name: [] for name in OBJECTIVES},
                normalized={name: [] for name in OBJECTIVES},
            )

        skill = AverageSplit([display_rating(p, cfg) for p in players], size1)
        experience = AverageSplit([p.games for p in players], size1)
        win_rate = AverageSplit([p.win_rate(cfg.neutral_win_rate) for p in players], size1)
        novelty = PairwiseSplit(pair_weights(enumerator.player_ids, familiarity.get))
        reunion = PairwiseSplit(
            pair_weights(enumerator.player_ids, lambda a, b: recency_days(recency, a, b, now, cfg))
        )

        scored = ScoredPartitions(enumerator=enumerator, raw={name: [] for name in OBJECTIVES})
        raw = scored.raw
        for side1 in enumerator:
            scored.partitions.append(side1)
            raw["skill"].append(skill.difference(side1))
            raw["experience"].append(experience.difference(side1))
            raw["novelty"].append(novelty.same_side_total(side1))
            raw["reunion"].append(reunion.same_side_total(side1))
            raw["win_rate"].append(win_rate.difference(side1))
            raw["random"].append(rng.random())

        scored.normalized = {name: normalize_scores(raw[name], name in MAXIMIZED) for name in OBJECTIVES}
        return scored


class WeightedSelector:
    def select(self, scored: ScoredPartitions, weights: WeightVector) -> PartitionResult:
        if not len(scored):
            return PartitionResult.rejection("custom", "insufficient_players")
        blend = weights.normalized()
        columns = [(blend[name], scored.normalized[name]) for name in OBJECTIVES]

        best_index = 0
        best_score = -1.0
        for index in range(len(scored)):
            score = sum(weight * column[index] for weight, column in columns)
            if score > best_score:
                best_index, best_score = index, score

        side1_ids, side2_ids = scored.enumerator.sides(scored.partitions[best_index])
        raw, normalized = scored.scores_at(best_index)
        return PartitionResult(
            side1_ids=side1_ids,
            side2_ids=side2_ids,
            objective="custom",
            raw_scores=raw,
            normalized_scores=normalized,
            stats={"score": best_score, "partitions": float(len(scored))},
        )
