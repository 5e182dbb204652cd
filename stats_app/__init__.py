import logging

from flask import Flask
from flask_cors import CORS
from sqlalchemy.exc import SQLAlchemyError

from balance_model.errors import (
    BalanceError,
    CandidateLimitExceeded,
    MissingPlayerRecord,
    PresetError,
    UnknownObjective,
)

from .config import Config
from .db import SessionLocal
from .seed import ensure_schema, seed_if_empty

logger = logging.getLogger(__name__)

PRESET_ERROR_STATUS = {
    "preset_not_found": 404,
    "preset_built_in": 403,
    "preset_name_taken": 409,
}


def create_app() -> Flask:
    logging.basicConfig(
        level=Config.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app = Flask(__name__)
    app.url_map.strict_slashes = False
    CORS(
        app,
        resources={r"/*": {"origins": "*"}},
        allow_headers=["Content-Type"],
    )

    from .routes import matches, players, presets, teams

    api_prefix = "/api"
    app.register_blueprint(players.bp, url_prefix=f"{api_prefix}/players")
    app.register_blueprint(matches.bp, url_prefix=f"{api_prefix}/matches")
    app.register_blueprint(teams.bp, url_prefix=f"{api_prefix}/teams")
    app.register_blueprint(presets.bp, url_prefix=f"{api_prefix}/presets")

    @app.get("/api/health")
    def healthcheck():
        return {"ok": True}

    @app.teardown_appcontext
    def shutdown_session(_exc=None):
        SessionLocal.remove()

    @app.errorhandler(MissingPlayerRecord)
    def handle_missing_player(exc):
        return {"ok": False, "error": "player_not_found", "player_id": exc.player_id}, 404

    @app.errorhandler(CandidateLimitExceeded)
    def handle_too_many(exc):
        return {"ok": False, "error": "too_many_players", "limit": exc.limit}, 400

    @app.errorhandler(UnknownObjective)
    def handle_unknown_mode(exc):
        return {"ok": False, "error": "unknown_mode"}, 400

    @app.errorhandler(PresetError)
    def handle_preset_error(exc):
        status = PRESET_ERROR_STATUS.get(str(exc), 400)
        return {"ok": False, "error": str(exc)}, status

    @app.errorhandler(BalanceError)
    def handle_balance_error(exc):
        return {"ok": False, "error": str(exc)}, 400

    @app.errorhandler(ValueError)
    def handle_value_error(exc):
        return {"ok": False, "error": str(exc)}, 400

    @app.errorhandler(SQLAlchemyError)
    def handle_storage_error(exc):
        SessionLocal.rollback()
        logger.exception("storage failure")
        return {"ok": False, "error": "storage_error"}, 500

    ensure_schema()
    seed_if_empty()

    return app
