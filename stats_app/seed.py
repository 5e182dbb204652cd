from __future__ import annotations

import logging
from datetime import timedelta

from .config import Config
from .db import SessionLocal, engine
from .models import Base, Match
from .services.match import build_services, record_match
from .utils import now_utc

logger = logging.getLogger(__name__)

PLAYER_NAMES = {
    "p1": "Aria",
    "p2": "Bram",
    "p3": "Cole",
    "p4": "Dara",
    "p5": "Enzo",
    "p6": "Faye",
    "p7": "Gus",
    "p8": "Hana",
}

HISTORICAL_MATCHES = [
    {
        "titans": ["p1", "p2", "p3", "p4"],
        "atlanteans": ["p5", "p6", "p7", "p8"],
        "winning_side": "titans",
        "game_length": "quick",
    },
    {
        "titans": ["p1", "p5", "p3", "p7"],
        "atlanteans": ["p2", "p6", "p4", "p8"],
        "winning_side": "atlanteans",
        "game_length": "long",
    },
    {
        "titans": ["p2", "p3", "p6", "p7"],
        "atlanteans": ["p1", "p4", "p5", "p8"],
        "winning_side": "titans",
        "game_length": "quick",
    },
    {
        "titans": ["p1", "p2", "p5", "p6"],
        "atlanteans": ["p3", "p4", "p7", "p8"],
        "winning_side": "titans",
        "game_length": "long",
        "double_lanes": True,
    },
    {
        "titans": ["p4", "p6", "p7", "p8"],
        "atlanteans": ["p1", "p2", "p3", "p5"],
        "winning_side": "atlanteans",
        "game_length": "quick",
    },
]


def ensure_schema() -> None:
    Base.metadata.create_all(engine)


def _match_data(idx: int, data: dict, base_time) -> dict:
    players = [
        {"id": pid, "name": PLAYER_NAMES[pid], "side": side}
        for side in ("titans", "atlanteans")
        for pid in data[side]
    ]
    return {
        "id": f"seed{idx}",
        "date": (base_time + timedelta(days=idx)).isoformat(),
        "winning_side": data["winning_side"],
        "game_length": data["game_length"],
        "double_lanes": data.get("double_lanes", False),
        "players": players,
    }


def seed() -> bool:
    base_time = now_utc() - timedelta(days=len(HISTORICAL_MATCHES) + 1)
    session = SessionLocal()
    try:
        services = build_services(session)
        for idx, data in enumerate(HISTORICAL_MATCHES, start=1):
            record_match(services, _match_data(idx, data, base_time))
    finally:
        SessionLocal.remove()
    logger.info("seeded %d demo matches", len(HISTORICAL_MATCHES))
    return True


def seed_if_empty() -> bool:
    if not Config.AUTO_SEED:
        return False
    session = SessionLocal()
    try:
        existing = session.query(Match).first()
    finally:
        SessionLocal.remove()
    if existing:
        return False
    return seed()
