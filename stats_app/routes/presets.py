from flask import Blueprint, request

from balance_model import WeightVector

from ..db import get_db
from ..services.match import build_services
from ..utils import err, isoformat, ok

bp = Blueprint("presets", __name__, url_prefix="/presets")


def _preset_payload(preset) -> dict:
    return {
        "id": preset.id,
        "name": preset.name,
        "weights": preset.weights.as_dict(),
        "created_at": isoformat(preset.created_at),
        "is_built_in": preset.is_built_in,
    }


@bp.get("")
def list_presets():
    services = build_services(get_db())
    return ok({"presets": [_preset_payload(p) for p in services.presets.list_presets()]})


@bp.post("")
def create_preset():
    data = request.get_json(silent=True) or {}
    weights = data.get("weights")
    if not isinstance(weights, dict):
        return err("invalid_weights", 400)
    services = build_services(get_db())
    preset = services.presets.save(str(data.get("name") or ""), WeightVector.from_dict(weights))
    return ok({"preset": _preset_payload(preset)}, 201)


@bp.patch("/<preset_id>")
def rename_preset(preset_id: str):
    data = request.get_json(silent=True) or {}
    services = build_services(get_db())
    preset = services.presets.rename(preset_id, str(data.get("name") or ""))
    return ok({"preset": _preset_payload(preset)})


@bp.delete("/<preset_id>")
def delete_preset(preset_id: str):
    services = build_services(get_db())
    services.presets.delete(preset_id)
    return ok()
