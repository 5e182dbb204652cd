import math
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Dict, List, Optional, Tuple

from .utils import utc_now

SIDE_TITANS = "titans"
SIDE_ATLANTEANS = "atlanteans"
SIDES = (SIDE_TITANS, SIDE_ATLANTEANS)

OBJECTIVES = ("skill", "experience", "novelty", "reunion", "win_rate", "random")


def other_side(side: str) -> str:
    return SIDE_ATLANTEANS if side == SIDE_TITANS else SIDE_TITANS


@dataclass
class Player:
    id: str
    name: str
    games: int = 0
    wins: int = 0
    losses: int = 0
    rating: float = 1200.0
    sigma: float = 350.0
    last_played: Optional[datetime] = None
    created_at: datetime = field(default_factory=utc_now)

    def win_rate(self, neutral: float = 0.5) -> float:
        if self.games <= 0:
            return neutral
        return self.wins / self.games

    def copy(self) -> "Player":
        return replace(self)


@dataclass(frozen=True)
class Match:
    id: str
    date: datetime
    winning_side: str  # one of SIDES
    game_length: str = "quick"  # "quick" or "long"
    double_lanes: bool = False


@dataclass(frozen=True)
class MatchParticipation:
    match_id: str
    player_id: str
    side: str
    hero_id: Optional[int] = None
    hero_name: Optional[str] = None
    kills: Optional[int] = None
    deaths: Optional[int] = None
    assists: Optional[int] = None


@dataclass(frozen=True)
class DateRange:
    start: Optional[datetime] = None
    end: Optional[datetime] = None

    def contains(self, value: datetime) -> bool:
        if self.start is not None and value < self.start:
            return False
        if self.end is not None and value > self.end:
            return False
        return True


@dataclass(frozen=True)
class WeightVector:
    skill: float = 0.0
    experience: float = 0.0
    novelty: float = 0.0
    reunion: float = 0.0
    win_rate: float = 0.0
    random: float = 0.0

    def __post_init__(self):
        for name in OBJECTIVES:
            value = getattr(self, name)
            if not math.isfinite(value) or value < 0:
                raise ValueError(f"weight {name!r} must be a finite non-negative number")

    @classmethod
    def from_dict(cls, data: dict) -> "WeightVector":
        try:
            values = {name: float(data.get(name, 0.0) or 0.0) for name in OBJECTIVES}
        except (TypeError, ValueError):
            raise ValueError("invalid_weights")
        return cls(**values)

    def as_dict(self) -> Dict[str, float]:
        return {name: getattr(self, name) for name in OBJECTIVES}

    def normalized(self) -> Dict[str, float]:
        total = sum(self.as_dict().values())
        if total <= 0:
            return {name: 1.0 / len(OBJECTIVES) for name in OBJECTIVES}
        return {name: value / total for name, value in self.as_dict().items()}


@dataclass(frozen=True)
class WeightPreset:
    id: str
    name: str
    weights: WeightVector
    created_at: datetime = field(default_factory=utc_now)
    is_built_in: bool = False


@dataclass
class PairMatrix:
    player_ids: Tuple[str, ...]
    values: Dict[frozenset, object] = field(default_factory=dict)
    default: object = None

    def get(self, player_a: str, player_b: str):
        return self.values.get(frozenset({player_a, player_b}), self.default)

    def set(self, player_a: str, player_b: str, value) -> None:
        if player_a == player_b:
            return
        self.values[frozenset({player_a, player_b})] = value

    def has(self, player_a: str, player_b: str) -> bool:
        return frozenset({player_a, player_b}) in self.values


@dataclass(frozen=True)
class PartitionResult:
    side1_ids: List[str]
    side2_ids: List[str]
    objective: str
    raw_scores: Dict[str, float] = field(default_factory=dict)
    normalized_scores: Dict[str, float] = field(default_factory=dict)
    stats: Dict[str, float] = field(default_factory=dict)
    rejected: bool = False
    reason: Optional[str] = None

    @classmethod
    def rejection(cls, objective: str, reason: str) -> "PartitionResult":
        return cls(side1_ids=[], side2_ids=[], objective=objective, rejected=True, reason=reason)

    def to_dict(self) -> dict:
        return {
            "side1_ids": list(self.side1_ids),
            "side2_ids": list(self.side2_ids),
            "objective": self.objective,
            "raw_scores": dict(self.raw_scores),
            "normalized_scores": dict(self.normalized_scores),
            "stats": dict(self.stats),
            "rejected": self.rejected,
            "reason": self.reason,
        }


@dataclass(frozen=True)
class WinProbability:
    side1_probability: int
    side1_lower: int
    side1_upper: int
    side2_probability: int
    side2_lower: int
    side2_upper: int

    def to_dict(self) -> dict:
        return {
            "side1_probability": self.side1_probability,
            "side1_lower": self.side1_lower,
            "side1_upper": self.side1_upper,
            "side2_probability": self.side2_probability,
            "side2_lower": self.side2_lower,
            "side2_upper": self.side2_upper,
        }


@dataclass
class RelationshipStat:
    player_id: str
    games: int = 0
    wins: int = 0

    @property
    def win_rate(self) -> float:
        return self.wins / self.games if self.games else 0.0

    def to_dict(self) -> dict:
        return {
            "player_id": self.player_id,
            "games": self.games,
            "wins": self.wins,
            "win_rate": self.win_rate,
        }


@dataclass(frozen=True)
class PlayerRelationships:
    player_id: str
    min_games: int
    teammates: List[RelationshipStat] = field(default_factory=list)
    opponents: List[RelationshipStat] = field(default_factory=list)
    best_teammates: List[RelationshipStat] = field(default_factory=list)
    nemeses: List[RelationshipStat] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "player_id": self.player_id,
            "min_games": self.min_games,
            "teammates": [s.to_dict() for s in self.teammates],
            "opponents": [s.to_dict() for s in self.opponents],
            "best_teammates": [s.to_dict() for s in self.best_teammates],
            "nemeses": [s.to_dict() for s in self.nemeses],
        }
