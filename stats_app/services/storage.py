from contextlib import contextmanager

from balance_model.types import Match as CoreMatch
from balance_model.types import MatchParticipation as CoreParticipation
from balance_model.types import Player as CorePlayer
from balance_model.types import WeightPreset as CorePreset
from balance_model.types import WeightVector

from ..models import Match, MatchParticipation, Player, WeightPreset


class Transaction:
    """Commit/rollback shared by the repositories of one session.

    Nested ``atomic()`` blocks join the outermost one; only that one commits.
    """

    def __init__(self, db):
        self.db = db
        self.depth = 0

    @contextmanager
    def atomic(self):
        self.depth += 1
        try:
            yield
        except BaseException:
            self.depth -= 1
            if self.depth == 0:
                self.db.rollback()
            raise
        self.depth -= 1
        if self.depth == 0:
            self.db.commit()


def _to_player(row: Player) -> CorePlayer:
    return CorePlayer(
        id=row.id,
        name=row.name,
        games=row.games,
        wins=row.wins,
        losses=row.losses,
        rating=row.rating,
        sigma=row.sigma,
        last_played=row.last_played,
        created_at=row.created_at,
    )


def _to_match(row: Match) -> CoreMatch:
    return CoreMatch(
        id=row.id,
        date=row.date,
        winning_side=row.winning_side,
        game_length=row.game_length,
        double_lanes=bool(row.double_lanes),
    )


def _to_participation(row: MatchParticipation) -> CoreParticipation:
    return CoreParticipation(
        match_id=row.match_id,
        player_id=row.player_id,
        side=row.side,
        hero_id=row.hero_id,
        hero_name=row.hero_name,
        kills=row.kills,
        deaths=row.deaths,
        assists=row.assists,
    )


def _to_preset(row: WeightPreset) -> CorePreset:
    return CorePreset(
        id=row.id,
        name=row.name,
        weights=WeightVector.from_dict(row.weights_json or {}),
        created_at=row.created_at,
    )


class SqlPlayerRepository:
    def __init__(self, db, tx: Transaction):
        self.db = db
        self.tx = tx

    def get(self, player_id: str) -> CorePlayer | None:
        row = self.db.query(Player).filter_by(id=player_id).one_or_none()
        return _to_player(row) if row else None

    def get_all(self) -> list[CorePlayer]:
        return [_to_player(row) for row in self.db.query(Player).order_by(Player.created_at.asc(), Player.id.asc())]

    def put(self, player: CorePlayer) -> None:
        row = self.db.query(Player).filter_by(id=player.id).one_or_none()
        if row is None:
            row = Player(id=player.id, created_at=player.created_at)
            self.db.add(row)
        row.name = player.name
        row.games = player.games
        row.wins = player.wins
        row.losses = player.losses
        row.rating = player.rating
        row.sigma = player.sigma
        row.last_played = player.last_played
        self.db.flush()

    def delete_all(self) -> None:
        self.db.query(Player).delete()

    def atomic(self):
        return self.tx.atomic()


class SqlMatchRepository:
    def __init__(self, db, tx: Transaction):
        self.db = db
        self.tx = tx

    def get_all(self) -> list[CoreMatch]:
        return [_to_match(row) for row in self.db.query(Match).order_by(Match.seq.asc())]

    def get(self, match_id: str) -> CoreMatch | None:
        row = self.db.query(Match).filter_by(id=match_id).one_or_none()
        return _to_match(row) if row else None

    def get_participations(self, match_id: str) -> list[CoreParticipation]:
        rows = (
            self.db.query(MatchParticipation)
            .filter_by(match_id=match_id)
            .order_by(MatchParticipation.side.asc(), MatchParticipation.player_id.asc())
            .all()
        )
        return [_to_participation(row) for row in rows]

    def add(self, match: CoreMatch, participations: list[CoreParticipation]) -> None:
        self.db.add(
            Match(
                id=match.id,
                date=match.date,
                winning_side=match.winning_side,
                game_length=match.game_length,
                double_lanes=match.double_lanes,
            )
        )
        self.db.flush()
        for part in participations:
            self.db.add(
                MatchParticipation(
                    match_id=part.match_id,
                    player_id=part.player_id,
                    side=part.side,
                    hero_id=part.hero_id,
                    hero_name=part.hero_name,
                    kills=part.kills,
                    deaths=part.deaths,
                    assists=part.assists,
                )
            )
        self.db.flush()

    def delete(self, match_id: str) -> bool:
        self.db.query(MatchParticipation).filter_by(match_id=match_id).delete()
        deleted = self.db.query(Match).filter_by(id=match_id).delete()
        self.db.flush()
        return deleted > 0

    def delete_all(self) -> None:
        self.db.query(MatchParticipation).delete()
        self.db.query(Match).delete()


class SqlPresetRepository:
    def __init__(self, db, tx: Transaction):
        self.db = db
        self.tx = tx

    def load_all(self) -> list[CorePreset]:
        return [_to_preset(row) for row in self.db.query(WeightPreset).all()]

    def save(self, preset: CorePreset) -> None:
        with self.tx.atomic():
            row = self.db.query(WeightPreset).filter_by(id=preset.id).one_or_none()
            if row is None:
                row = WeightPreset(id=preset.id, created_at=preset.created_at)
                self.db.add(row)
            row.name = preset.name
            row.weights_json = preset.weights.as_dict()

    def delete(self, preset_id: str) -> bool:
        with self.tx.atomic():
            deleted = self.db.query(WeightPreset).filter_by(id=preset_id).delete()
        return deleted > 0

    def rename(self, preset_id: str, name: str) -> CorePreset | None:
        with self.tx.atomic():
            row = self.db.query(WeightPreset).filter_by(id=preset_id).one_or_none()
            if row is None:
                return None
            row.name = name
        return _to_preset(row)
