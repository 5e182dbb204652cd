from flask import Blueprint, request

from ..db import get_db
from ..services.match import build_services, match_payload, player_payload
from ..utils import err, ok, parse_date_range

bp = Blueprint("players", __name__, url_prefix="/players")


@bp.get("")
def list_players():
    services = build_services(get_db())
    cfg = services.config
    players = sorted(services.players.get_all(), key=lambda p: (-p.rating, p.id))
    active_only = request.args.get("active") == "1"
    if active_only:
        players = [p for p in players if p.games > 0]
    return ok({"players": [player_payload(p, cfg) for p in players]})


@bp.get("/<player_id>")
def get_player(player_id: str):
    services = build_services(get_db())
    player = services.players.get(player_id)
    if player is None:
        return err("player_not_found", 404)
    return ok({"player": player_payload(player, services.config)})


@bp.post("")
def create_player():
    data = request.get_json(silent=True) or {}
    player_id = str(data.get("id") or data.get("name") or "").strip()
    if not player_id:
        return err("player_id_required", 400)
    services = build_services(get_db())
    if services.players.get(player_id) is not None:
        return err("player_exists", 409)
    with services.tx.atomic():
        player = services.engine.ensure_player(player_id, data.get("name"))
    return ok({"player": player_payload(player, services.config)}, 201)


@bp.get("/<player_id>/relationships")
def get_relationships(player_id: str):
    min_games = request.args.get("min_games", type=int)
    if min_games is not None and min_games < 0:
        return err("invalid_min_games", 400)
    services = build_services(get_db())
    if services.players.get(player_id) is None:
        return err("player_not_found", 404)
    relationships = services.analyzer.build_player_relationships(
        player_id, date_range=parse_date_range(request.args), min_games=min_games
    )
    return ok({"relationships": relationships.to_dict()})


@bp.get("/<player_id>/matches")
def get_player_matches(player_id: str):
    limit = request.args.get("limit", type=int)
    if limit is not None and limit < 0:
        return err("invalid_limit", 400)
    services = build_services(get_db())
    if services.players.get(player_id) is None:
        return err("player_not_found", 404)
    history = services.analyzer.player_history(player_id, date_range=parse_date_range(request.args))
    if limit is not None:
        history = history[:limit]
    matches = []
    for match, own in history:
        payload = match_payload(match, services.matches.get_participations(match.id))
        payload["side"] = own.side
        payload["won"] = own.side == match.winning_side
        matches.append(payload)
    return ok({"matches": matches})
