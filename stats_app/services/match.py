import logging
import threading
import uuid
from dataclasses import dataclass

from balance_model import Config as TeamConfig
from balance_model import Match as TeamMatch
from balance_model import MatchParticipation as TeamParticipation
from balance_model import PairwiseRelationshipAnalyzer, RatingEngine, display_rating
from balance_model.errors import InvalidMatch
from balance_model.learning import split_sides
from balance_model.presets import PresetService
from balance_model.types import SIDES, Player as TeamPlayer

from ..config import Config
from ..utils import isoformat, now_utc, parse_datetime
from .storage import SqlMatchRepository, SqlPlayerRepository, SqlPresetRepository, Transaction

logger = logging.getLogger(__name__)

# one writer at a time for rating read-modify-write sequences
_WRITE_LOCK = threading.Lock()

GAME_LENGTHS = ("quick", "long")


@dataclass
class Services:
    db: object
    tx: Transaction
    config: TeamConfig
    players: SqlPlayerRepository
    matches: SqlMatchRepository
    presets: PresetService
    engine: RatingEngine
    analyzer: PairwiseRelationshipAnalyzer


def team_config() -> TeamConfig:
    return TeamConfig(max_candidates=Config.MAX_CANDIDATES)


def build_services(db) -> Services:
    cfg = team_config()
    tx = Transaction(db)
    players = SqlPlayerRepository(db, tx)
    matches = SqlMatchRepository(db, tx)
    return Services(
        db=db,
        tx=tx,
        config=cfg,
        players=players,
        matches=matches,
        presets=PresetService(SqlPresetRepository(db, tx)),
        engine=RatingEngine(players, matches, cfg),
        analyzer=PairwiseRelationshipAnalyzer(matches, cfg),
    )


def player_payload(player: TeamPlayer, cfg: TeamConfig) -> dict:
    return {
        "id": player.id,
        "name": player.name,
        "games": player.games,
        "wins": player.wins,
        "losses": player.losses,
        "win_rate": player.win_rate(cfg.neutral_win_rate),
        "rating": player.rating,
        "sigma": player.sigma,
        "display_rating": display_rating(player, cfg),
        "last_played": isoformat(player.last_played),
    }


def match_payload(match: TeamMatch, participations: list[TeamParticipation]) -> dict:
    return {
        "id": match.id,
        "date": isoformat(match.date),
        "winning_side": match.winning_side,
        "game_length": match.game_length,
        "double_lanes": match.double_lanes,
        "players": [
            {
                "player_id": part.player_id,
                "side": part.side,
                "hero_id": part.hero_id,
                "hero_name": part.hero_name,
                "kills": part.kills,
                "deaths": part.deaths,
                "assists": part.assists,
            }
            for part in participations
        ],
    }


def _optional_int(value) -> int | None:
    if value is None or value == "":
        return None
    return int(value)


def parse_match_payload(data: dict) -> tuple[TeamMatch, list[TeamParticipation], dict[str, str]]:
    winning_side = data.get("winning_side")
    if winning_side not in SIDES:
        raise InvalidMatch("invalid_winning_side")
    game_length = data.get("game_length") or "quick"
    if game_length not in GAME_LENGTHS:
        raise InvalidMatch("invalid_game_length")
    entries = data.get("players")
    if not isinstance(entries, list) or not entries:
        raise InvalidMatch("players_required")

    match = TeamMatch(
        id=str(data.get("id") or uuid.uuid4().hex),
        date=parse_datetime(data.get("date")) or now_utc(),
        winning_side=winning_side,
        game_length=game_length,
        double_lanes=bool(data.get("double_lanes", False)),
    )
    participations = []
    names: dict[str, str] = {}
    for entry in entries:
        if not isinstance(entry, dict) or not entry.get("id"):
            raise InvalidMatch("invalid_player_entry")
        player_id = str(entry["id"])
        names[player_id] = str(entry.get("name") or player_id)
        participations.append(
            TeamParticipation(
                match_id=match.id,
                player_id=player_id,
                side=entry.get("side"),
                hero_id=_optional_int(entry.get("hero_id")),
                hero_name=entry.get("hero_name"),
                kills=_optional_int(entry.get("kills")),
                deaths=_optional_int(entry.get("deaths")),
                assists=_optional_int(entry.get("assists")),
            )
        )
    split_sides(match, participations)
    return match, participations, names


def record_match(services: Services, data: dict) -> tuple[TeamMatch, dict[str, float]]:
    """Store a finished match and fold it into the ratings.

    A match dated before the newest stored one triggers a full replay so the
    ratings keep matching the chronological history.
    """
    match, participations, names = parse_match_payload(data)
    with _WRITE_LOCK, services.tx.atomic():
        if services.matches.get(match.id) is not None:
            raise InvalidMatch("match_exists")
        backdated = any(existing.date > match.date for existing in services.matches.get_all())
        for player_id, name in names.items():
            services.engine.ensure_player(player_id, name)
        services.matches.add(match, participations)
        if backdated:
            logger.info("match %s is backdated, replaying history", match.id)
            before = {p.player_id: services.players.get(p.player_id).rating for p in participations}
            services.engine.recompute_all()
            deltas = {pid: services.players.get(pid).rating - rating for pid, rating in before.items()}
        else:
            deltas = services.engine.record_match(match, participations)
    return match, deltas


def delete_match(services: Services, match_id: str) -> bool:
    with _WRITE_LOCK, services.tx.atomic():
        if not services.matches.delete(match_id):
            return False
        services.engine.recompute_all()
    return True


def recompute(services: Services) -> list[TeamPlayer]:
    with _WRITE_LOCK, services.tx.atomic():
        return services.engine.recompute_all()


def wipe(services: Services) -> None:
    with _WRITE_LOCK, services.tx.atomic():
        services.matches.delete_all()
        services.players.delete_all()
    logger.info("all players and matches deleted")
