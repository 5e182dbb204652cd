from datetime import datetime
from typing import Dict, Iterable, List, Optional, Tuple

from .config import Config
from .repositories import MatchRepository
from .types import SIDES, DateRange, Match, MatchParticipation, PairMatrix, PlayerRelationships, RelationshipStat
from .utils import days_between, pairs


class PairwiseRelationshipAnalyzer:
    def __init__(self, matches: MatchRepository, config: Optional[Config] = None):
        self.matches = matches
        self.config = config or Config()

    def _matches_in_range(self, date_range: Optional[DateRange]) -> List[Match]:
        matches = self.matches.get_all()
        if date_range is None:
            return matches
        return [m for m in matches if date_range.contains(m.date)]

    def _teammate_groups(self, match: Match, candidates: set) -> List[List[str]]:
        groups = {side: [] for side in SIDES}
        for part in self.matches.get_participations(match.id):
            if part.player_id in candidates and part.side in groups:
                groups[part.side].append(part.player_id)
        return [sorted(ids) for ids in groups.values()]

    def build_familiarity(self, candidate_ids: Iterable[str], date_range: Optional[DateRange] = None) -> PairMatrix:
        candidates = set(candidate_ids)
        matrix = PairMatrix(player_ids=tuple(sorted(candidates)), default=0)
        for match in self._matches_in_range(date_range):
            for group in self._teammate_groups(match, candidates):
                for player_a, player_b in pairs(group):
                    matrix.set(player_a, player_b, matrix.get(player_a, player_b) + 1)
        return matrix

    def build_recency(self, candidate_ids: Iterable[str], date_range: Optional[DateRange] = None) -> PairMatrix:
        candidates = set(candidate_ids)
        matrix = PairMatrix(player_ids=tuple(sorted(candidates)), default=None)
        newest_first = sorted(self._matches_in_range(date_range), key=lambda m: m.date, reverse=True)
        for match in newest_first:
            for group in self._teammate_groups(match, candidates):
                for player_a, player_b in pairs(group):
                    if not matrix.has(player_a, player_b):
                        matrix.set(player_a, player_b, match.date)
        return matrix

    def _player_matches(
        self, player_id: str, date_range: Optional[DateRange]
    ) -> List[Tuple[Match, MatchParticipation, List[MatchParticipation]]]:
        found = []
        for match in sorted(self._matches_in_range(date_range), key=lambda m: m.date, reverse=True):
            parts = self.matches.get_participations(match.id)
            own = next((p for p in parts if p.player_id == player_id), None)
            if own is not None:
                found.append((match, own, parts))
        return found

    def player_history(
        self, player_id: str, date_range: Optional[DateRange] = None
    ) -> List[Tuple[Match, MatchParticipation]]:
        return [(match, own) for match, own, _ in self._player_matches(player_id, date_range)]

    def build_player_relationships(
        self,
        player_id: str,
        date_range: Optional[DateRange] = None,
        min_games: Optional[int] = None,
    ) -> PlayerRelationships:
        if min_games is None:
            min_games = self.config.relationship_min_games
        teammates: Dict[str, RelationshipStat] = {}
        opponents: Dict[str, RelationshipStat] = {}
        for match, own, parts in self._player_matches(player_id, date_range):
            won = own.side == match.winning_side
            for part in parts:
                if part.player_id == player_id:
                    continue
                bucket = teammates if part.side == own.side else opponents
                stat = bucket.setdefault(part.player_id, RelationshipStat(part.player_id))
                stat.games += 1
                if won:
                    stat.wins += 1

        by_teammate = sorted(teammates.values(), key=lambda s: (-s.win_rate, -s.games, s.player_id))
        by_opponent = sorted(opponents.values(), key=lambda s: (s.win_rate, -s.games, s.player_id))
        return PlayerRelationships(
            player_id=player_id,
            min_games=min_games,
            teammates=by_teammate,
            opponents=by_opponent,
            best_teammates=_tied_leaders(by_teammate, min_games),
            nemeses=_tied_leaders(by_opponent, min_games),
        )


def recency_days(recency: PairMatrix, player_a: str, player_b: str, now: datetime, cfg: Config) -> int:
    last_teamed = recency.get(player_a, player_b)
    if last_teamed is None:
        return cfg.never_paired_days
    return days_between(last_teamed, now)


def _tied_leaders(ranked: List[RelationshipStat], min_games: int) -> List[RelationshipStat]:
    eligible = [s for s in ranked if s.games >= min_games]
    if not eligible:
        return []
    return [s for s in eligible if s.win_rate == eligible[0].win_rate]
