from flask import Blueprint, request

from balance_model import WeightVector, WinProbabilityEstimator, generate_teams
from balance_model.presets import DEFAULT_WEIGHTS

from ..db import get_db
from ..services.match import build_services
from ..utils import err, ok, parse_date_range

bp = Blueprint("teams", __name__, url_prefix="/teams")


def _id_list(value) -> list[str] | None:
    if not isinstance(value, list):
        return None
    return [str(item) for item in value]


def _resolve_weights(services, data: dict) -> WeightVector | None:
    if data.get("weights") is not None:
        if not isinstance(data["weights"], dict):
            raise ValueError("invalid_weights")
        return WeightVector.from_dict(data["weights"])
    preset_id = data.get("preset_id")
    if preset_id:
        preset = services.presets.get(str(preset_id))
        return preset.weights if preset else None
    return DEFAULT_WEIGHTS


@bp.post("/balance")
def balance():
    data = request.get_json(silent=True) or {}
    player_ids = _id_list(data.get("player_ids"))
    if player_ids is None:
        return err("invalid_payload", 400)
    mode = str(data.get("mode") or "skill")
    services = build_services(get_db())

    players = []
    for player_id in dict.fromkeys(player_ids):
        player = services.players.get(player_id)
        if player is None:
            return err("player_not_found", 404, player_id=player_id)
        players.append(player)

    weights = None
    if mode == "custom":
        weights = _resolve_weights(services, data)
        if weights is None:
            return err("preset_not_found", 404)

    result = generate_teams(
        players,
        mode,
        services.analyzer,
        weights=weights,
        date_range=parse_date_range(data),
        config=services.config,
    )
    if result.rejected:
        return err("not_enough_players", 400, result=result.to_dict())

    by_id = {p.id: p for p in players}
    probability = WinProbabilityEstimator(services.config).estimate(
        [by_id[pid] for pid in result.side1_ids],
        [by_id[pid] for pid in result.side2_ids],
    )
    return ok({"result": result.to_dict(), "win_probability": probability.to_dict()})


@bp.post("/win-probability")
def win_probability():
    data = request.get_json(silent=True) or {}
    side1_ids = _id_list(data.get("side1_ids"))
    side2_ids = _id_list(data.get("side2_ids"))
    if not side1_ids or not side2_ids:
        return err("invalid_payload", 400)
    if set(side1_ids) & set(side2_ids):
        return err("overlapping_sides", 400)
    services = build_services(get_db())

    def _lookup(player_id: str):
        return services.players.get(player_id) or services.engine.new_player(player_id)

    probability = WinProbabilityEstimator(services.config).estimate(
        [_lookup(pid) for pid in side1_ids],
        [_lookup(pid) for pid in side2_ids],
    )
    return ok({"win_probability": probability.to_dict()})
