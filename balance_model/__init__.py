from .config import Config
from .errors import BalanceError, CandidateLimitExceeded, InvalidMatch, MissingPlayerRecord
from .learning import update_from_match
from .partitions import TeamPartitionEnumerator
from .probability import WinProbabilityEstimator
from .ratings import RatingEngine, display_rating
from .relationships import PairwiseRelationshipAnalyzer
from .scoring import MultiObjectiveScorer, WeightedSelector
from .teamgen import SingleObjectiveBalancer, generate_teams
from .types import (
    SIDE_ATLANTEANS,
    SIDE_TITANS,
    DateRange,
    Match,
    MatchParticipation,
    PartitionResult,
    Player,
    PlayerRelationships,
    RelationshipStat,
    WeightPreset,
    WeightVector,
    WinProbability,
)

__all__ = [
    "BalanceError",
    "CandidateLimitExceeded",
    "Config",
    "DateRange",
    "InvalidMatch",
    "Match",
    "MatchParticipation",
    "MissingPlayerRecord",
    "MultiObjectiveScorer",
    "PairwiseRelationshipAnalyzer",
    "PartitionResult",
    "Player",
    "PlayerRelationships",
    "RatingEngine",
    "RelationshipStat",
    "SIDE_ATLANTEANS",
    "SIDE_TITANS",
    "SingleObjectiveBalancer",
    "TeamPartitionEnumerator",
    "WeightPreset",
    "WeightVector",
    "WeightedSelector",
    "WinProbability",
    "WinProbabilityEstimator",
    "display_rating",
    "generate_teams",
    "update_from_match",
]
