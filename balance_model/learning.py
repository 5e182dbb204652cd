import math
from typing import Dict, List

from .config import Config
from .errors import InvalidMatch, MissingPlayerRecord
from .types import SIDES, Match, MatchParticipation, Player, other_side
from .utils import mean


def expected_score(rating: float, opponent_rating: float, cfg: Config) -> float:
    return 1.0 / (1.0 + 10.0 ** ((opponent_rating - rating) / cfg.logistic_scale))


def uncertainty_after(games: int, cfg: Config) -> float:
    return max(cfg.min_sigma, cfg.default_sigma / math.sqrt(1 + max(0, games)))


def split_sides(match: Match, participations: List[MatchParticipation]) -> Dict[str, List[str]]:
    if match.winning_side not in SIDES:
        raise InvalidMatch(f"match {match.id}: unknown winning side {match.winning_side!r}")
    sides: Dict[str, List[str]] = {side: [] for side in SIDES}
    seen = set()
    for part in participations:
        if part.match_id != match.id:
            raise InvalidMatch(f"participation for {part.match_id} passed with match {match.id}")
        if part.side not in sides:
            raise InvalidMatch(f"match {match.id}: unknown side {part.side!r}")
        if part.player_id in seen:
            raise InvalidMatch(f"match {match.id}: player {part.player_id} appears twice")
        seen.add(part.player_id)
        sides[part.side].append(part.player_id)
    if not all(sides.values()):
        raise InvalidMatch(f"match {match.id}: both sides need at least one player")
    return sides


def update_from_match(
    players: Dict[str, Player],
    match: Match,
    participations: List[MatchParticipation],
    cfg: Config,
) -> Dict[str, float]:
    # expectations use pre-match ratings, so participation order never matters
    sides = split_sides(match, participations)
    for ids in sides.values():
        for player_id in ids:
            if player_id not in players:
                raise MissingPlayerRecord(player_id, match.id)

    side_avg = {side: mean(players[p].rating for p in ids) for side, ids in sides.items()}

    deltas: Dict[str, float] = {}
    for side, ids in sides.items():
        opponent_avg = side_avg[other_side(side)]
        actual = 1.0 if side == match.winning_side else 0.0
        for player_id in ids:
            player = players[player_id]
            own = cfg.team_weight * side_avg[side] + (1.0 - cfg.team_weight) * player.rating
            deltas[player_id] = cfg.k_factor * (actual - expected_score(own, opponent_avg, cfg))

    for side, ids in sides.items():
        won = side == match.winning_side
        for player_id in ids:
            player = players[player_id]
            player.rating += deltas[player_id]
            player.games += 1
            if won:
                player.wins += 1
            else:
                player.losses += 1
            player.sigma = uncertainty_after(player.games, cfg)
            if player.last_played is None or match.date >= player.last_played:
                player.last_played = match.date
    return deltas
