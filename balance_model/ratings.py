import logging
import threading
from typing import Dict, List, Optional, Tuple

from .config import Config
from .errors import MissingPlayerRecord
from .learning import update_from_match
from .repositories import MatchRepository, PlayerRepository
from .types import Match, MatchParticipation, Player

logger = logging.getLogger(__name__)


def display_rating(player: Player, cfg: Config) -> int:
    return int(round(player.rating * cfg.display_scale + cfg.display_offset))


def reset_player(player: Player, cfg: Config) -> Player:
    fresh = player.copy()
    fresh.games = 0
    fresh.wins = 0
    fresh.losses = 0
    fresh.rating = cfg.default_rating
    fresh.sigma = cfg.default_sigma
    fresh.last_played = None
    return fresh


def ordered_history(matches: MatchRepository) -> List[Tuple[Match, List[MatchParticipation]]]:
    # equal dates keep repository insertion order
    indexed = list(enumerate(matches.get_all()))
    indexed.sort(key=lambda item: (item[1].date, item[0]))
    return [(match, matches.get_participations(match.id)) for _, match in indexed]


class RatingEngine:
    def __init__(self, players: PlayerRepository, matches: MatchRepository, config: Optional[Config] = None):
        self.players = players
        self.matches = matches
        self.config = config or Config()
        self._lock = threading.RLock()

    def new_player(self, player_id: str, name: Optional[str] = None) -> Player:
        cfg = self.config
        return Player(id=player_id, name=name or player_id, rating=cfg.default_rating, sigma=cfg.default_sigma)

    def ensure_player(self, player_id: str, name: Optional[str] = None) -> Player:
        with self._lock:
            existing = self.players.get(player_id)
            if existing is not None:
                return existing
            player = self.new_player(player_id, name)
            self.players.put(player)
            return player

    def display_rating(self, player: Player) -> int:
        return display_rating(player, self.config)

    def record_match(self, match: Match, participations: List[MatchParticipation]) -> Dict[str, float]:
        with self._lock, self.players.atomic():
            state: Dict[str, Player] = {}
            for part in participations:
                player = self.players.get(part.player_id)
                if player is None:
                    raise MissingPlayerRecord(part.player_id, match.id)
                state[player.id] = player
            deltas = update_from_match(state, match, participations, self.config)
            for player in state.values():
                self.players.put(player)
        return deltas

    def recompute_all(self) -> List[Player]:
        with self._lock:
            players = {p.id: reset_player(p, self.config) for p in self.players.get_all()}
            history = ordered_history(self.matches)
            logger.info("recomputing ratings for %d players over %d matches", len(players), len(history))
            try:
                for match, participations in history:
                    update_from_match(players, match, participations, self.config)
            except MissingPlayerRecord as exc:
                logger.error("recompute aborted, nothing written: %s", exc)
                raise

            with self.players.atomic():
                for player in players.values():
                    self.players.put(player)
            logger.info("recompute finished")
            return list(players.values())
