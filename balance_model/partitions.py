import math
from itertools import combinations
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple

from .config import Config
from .errors import CandidateLimitExceeded
from .utils import pairs

Indices = Tuple[int, ...]


# for even N each split also appears mirrored; both copies are kept
class TeamPartitionEnumerator:
    def __init__(self, candidate_ids: Iterable[str], config: Optional[Config] = None):
        cfg = config or Config()
        self.player_ids: Tuple[str, ...] = tuple(sorted(set(candidate_ids)))
        if len(self.player_ids) > cfg.max_candidates:
            raise CandidateLimitExceeded(len(self.player_ids), cfg.max_candidates)
        self.side1_size = math.ceil(len(self.player_ids) / 2)
        self.side2_size = len(self.player_ids) - self.side1_size

    def __iter__(self) -> Iterator[Indices]:
        return combinations(range(len(self.player_ids)), self.side1_size)

    def __len__(self) -> int:
        return math.comb(len(self.player_ids), self.side1_size)

    def enumerate(self) -> Iterator[Indices]:
        return iter(self)

    def side2(self, side1: Indices) -> Indices:
        chosen = set(side1)
        return tuple(i for i in range(len(self.player_ids)) if i not in chosen)

    def sides(self, side1: Indices) -> Tuple[List[str], List[str]]:
        return [self.player_ids[i] for i in side1], [self.player_ids[i] for i in self.side2(side1)]


class AverageSplit:
    def __init__(self, values: Sequence[float], side1_size: int):
        self.values = list(values)
        self.total = sum(self.values)
        self.side1_size = side1_size
        self.side2_size = len(self.values) - side1_size

    def averages(self, side1: Indices) -> Tuple[float, float]:
        side1_sum = sum(self.values[i] for i in side1)
        return side1_sum / self.side1_size, (self.total - side1_sum) / self.side2_size

    def difference(self, side1: Indices) -> float:
        avg1, avg2 = self.averages(side1)
        return abs(avg1 - avg2)


class PairwiseSplit:
    """Same-side pair totals without walking side 2.

    With row sums R and grand total T over all pairs, the same-side total for
    side 1 = A is T + 2 * S(A) - sum(R[i] for i in A).
    """

    def __init__(self, weights: Sequence[Sequence[float]]):
        self.weights = weights
        size = len(weights)
        self.row_sums = [sum(weights[i][j] for j in range(size) if j != i) for i in range(size)]
        self.total = sum(weights[i][j] for i, j in pairs(range(size)))

    def inner(self, side: Indices) -> float:
        return sum(self.weights[i][j] for i, j in pairs(side))

    def same_side_total(self, side1: Indices) -> float:
        return self.total + 2 * self.inner(side1) - sum(self.row_sums[i] for i in side1)


def pair_weights(player_ids: Sequence[str], value) -> List[List[float]]:
    size = len(player_ids)
    weights = [[0.0] * size for _ in range(size)]
    for i, j in pairs(range(size)):
        weight = value(player_ids[i], player_ids[j])
        weights[i][j] = weight
        weights[j][i] = weight
    return weights


def pair_count(side_size: int) -> int:
    return side_size * (side_size - 1) // 2
