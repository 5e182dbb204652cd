import math
from typing import Optional, Sequence, Tuple

from .config import Config
from .types import Player, WinProbability
from .utils import clamp, mean

# logistic approximation of the standard normal CDF
LOGISTIC_NORMAL_FACTOR = 1.702


def _percent(probability: float) -> int:
    return int(math.floor(clamp(probability, 0.0, 1.0) * 100 + 0.5))


class WinProbabilityEstimator:
    def __init__(self, config: Optional[Config] = None):
        self.config = config or Config()

    def team_rating(self, players: Sequence[Player]) -> Tuple[float, float]:
        if not players:
            raise ValueError("a side needs at least one player")
        mu = mean(p.rating for p in players)
        sigma = math.sqrt(sum(p.sigma ** 2 for p in players)) / len(players)
        return mu, sigma

    def _logistic(self, gap: float, scale: float) -> float:
        if scale <= 0:
            return 0.5 if gap == 0 else float(gap > 0)
        exponent = clamp(-LOGISTIC_NORMAL_FACTOR * gap / scale, -60.0, 60.0)
        return 1.0 / (1.0 + math.exp(exponent))

    def from_aggregates(self, mu1: float, sigma1: float, mu2: float, sigma2: float) -> WinProbability:
        cfg = self.config
        combined = math.sqrt(sigma1 ** 2 + sigma2 ** 2 + 2 * cfg.win_prob_beta ** 2)
        gap = mu1 - mu2
        spread = cfg.win_prob_band_z * math.sqrt(sigma1 ** 2 + sigma2 ** 2)

        point = _percent(self._logistic(gap, combined))
        lower = min(point, _percent(self._logistic(gap - spread, combined)))
        upper = max(point, _percent(self._logistic(gap + spread, combined)))
        return WinProbability(
            side1_probability=point,
            side1_lower=lower,
            side1_upper=upper,
            side2_probability=100 - point,
            side2_lower=100 - upper,
            side2_upper=100 - lower,
        )

    def estimate(self, side1: Sequence[Player], side2: Sequence[Player]) -> WinProbability:
        mu1, sigma1 = self.team_rating(side1)
        mu2, sigma2 = self.team_rating(side2)
        return self.from_aggregates(mu1, sigma1, mu2, sigma2)
