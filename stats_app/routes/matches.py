from flask import Blueprint, request

from ..db import get_db
from ..services.match import (
    build_services,
    delete_match,
    match_payload,
    player_payload,
    recompute,
    record_match,
    wipe,
)
from ..utils import err, ok

bp = Blueprint("matches", __name__, url_prefix="/matches")


@bp.get("")
def list_matches():
    limit = request.args.get("limit", type=int)
    if limit is not None and limit < 0:
        return err("invalid_limit", 400)
    services = build_services(get_db())
    matches = sorted(services.matches.get_all(), key=lambda m: m.date, reverse=True)
    if limit is not None:
        matches = matches[:limit]
    return ok(
        {
            "matches": [
                match_payload(match, services.matches.get_participations(match.id))
                for match in matches
            ]
        }
    )


@bp.get("/<match_id>")
def get_match(match_id: str):
    services = build_services(get_db())
    match = services.matches.get(match_id)
    if match is None:
        return err("match_not_found", 404)
    return ok({"match": match_payload(match, services.matches.get_participations(match_id))})


@bp.post("")
def create_match():
    data = request.get_json(silent=True) or {}
    services = build_services(get_db())
    match, deltas = record_match(services, data)
    return ok(
        {
            "match": match_payload(match, services.matches.get_participations(match.id)),
            "deltas": deltas,
        },
        201,
    )


@bp.delete("/<match_id>")
def remove_match(match_id: str):
    services = build_services(get_db())
    if not delete_match(services, match_id):
        return err("match_not_found", 404)
    return ok()


@bp.post("/recompute")
def recompute_ratings():
    services = build_services(get_db())
    players = recompute(services)
    players.sort(key=lambda p: (-p.rating, p.id))
    return ok({"players": [player_payload(p, services.config) for p in players]})


@bp.post("/wipe")
def wipe_all():
    data = request.get_json(silent=True) or {}
    if data.get("confirm") is not True:
        return err("confirmation_required", 400)
    wipe(build_services(get_db()))
    return ok()
