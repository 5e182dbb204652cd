from sqlalchemy import create_engine
from sqlalchemy.orm import scoped_session, sessionmaker
from sqlalchemy.pool import StaticPool

from .config import Config


def _engine_options(url: str) -> dict:
    if not url.startswith("sqlite"):
        return {"pool_pre_ping": True}
    options = {"connect_args": {"check_same_thread": False}}
    if ":memory:" in url or url.rstrip("/").endswith(("sqlite:", "pysqlite:")):
        options["poolclass"] = StaticPool
    return options


engine = create_engine(Config.DATABASE_URL, echo=Config.SQLALCHEMY_ECHO, **_engine_options(Config.DATABASE_URL))
SessionLocal = scoped_session(sessionmaker(bind=engine, autoflush=False, autocommit=False))


def get_db():
    return SessionLocal()
