import os

os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")
os.environ["AUTO_SEED"] = "0"

import pytest

from stats_app import create_app
from stats_app.db import SessionLocal, engine
from stats_app.models import Base


@pytest.fixture
def app():
    app = create_app()
    app.config["TESTING"] = True
    yield app
    SessionLocal.remove()
    Base.metadata.drop_all(engine)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def add_match(client):
    def _add(titans, atlanteans, winner="titans", date=None, **extra):
        players = [{"id": pid, "side": "titans"} for pid in titans]
        players += [{"id": pid, "side": "atlanteans"} for pid in atlanteans]
        payload = {"winning_side": winner, "players": players, **extra}
        if date:
            payload["date"] = date
        return client.post("/api/matches", json=payload)

    return _add
