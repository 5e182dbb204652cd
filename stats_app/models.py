from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import declarative_base

from balance_model.utils import utc_now

Base = declarative_base()

JSONType = JSON().with_variant(JSONB(), "postgresql")


class Player(Base):
    __tablename__ = "players"
    id = Column(String, primary_key=True)
    name = Column(String, nullable=False)
    games = Column(Integer, nullable=False, default=0)
    wins = Column(Integer, nullable=False, default=0)
    losses = Column(Integer, nullable=False, default=0)
    rating = Column(Float, nullable=False)
    sigma = Column(Float, nullable=False)
    last_played = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utc_now, nullable=False)


class Match(Base):
    __tablename__ = "matches"
    seq = Column(Integer, primary_key=True, autoincrement=True)
    id = Column(String, unique=True, nullable=False)
    date = Column(DateTime, nullable=False, index=True)
    winning_side = Column(String, nullable=False)  # "titans" | "atlanteans"
    game_length = Column(String, nullable=False, default="quick")
    double_lanes = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, default=utc_now, nullable=False)


class MatchParticipation(Base):
    __tablename__ = "match_participations"
    match_id = Column(String, ForeignKey("matches.id"), primary_key=True)
    player_id = Column(String, ForeignKey("players.id"), primary_key=True)
    side = Column(String, nullable=False)
    hero_id = Column(Integer, nullable=True)
    hero_name = Column(String, nullable=True)
    kills = Column(Integer, nullable=True)
    deaths = Column(Integer, nullable=True)
    assists = Column(Integer, nullable=True)


class WeightPreset(Base):
    __tablename__ = "weight_presets"
    id = Column(String, primary_key=True)
    name = Column(String, nullable=False)
    weights_json = Column(JSONType, nullable=False)
    created_at = Column(DateTime, default=utc_now, nullable=False)