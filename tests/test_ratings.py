import math
from datetime import datetime

import pytest

from balance_model import (
    Config,
    InvalidMatch,
    Match,
    MatchParticipation,
    MissingPlayerRecord,
    Player,
    RatingEngine,
    update_from_match,
)
from balance_model.repositories import InMemoryMatchRepository, InMemoryPlayerRepository


def _match(match_id, date, titans, atlanteans, winner="titans"):
    match = Match(id=match_id, date=date, winning_side=winner)
    parts = [MatchParticipation(match_id, pid, "titans") for pid in titans]
    parts += [MatchParticipation(match_id, pid, "atlanteans") for pid in atlanteans]
    return match, parts


def _engine(ids=("A", "B", "C", "D")):
    players = InMemoryPlayerRepository([Player(id=pid, name=pid) for pid in ids])
    return RatingEngine(players, InMemoryMatchRepository(), Config())


def test_rating_update_even_teams():
    cfg = Config()
    players = {pid: Player(id=pid, name=pid) for pid in "ABCD"}
    match, parts = _match("m1", datetime(2024, 1, 1), ["A", "B"], ["C", "D"])

    deltas = update_from_match(players, match, parts, cfg)

    assert deltas["A"] == pytest.approx(16.0)
    assert deltas["C"] == pytest.approx(-16.0)
    assert players["A"].rating == pytest.approx(1216.0)
    assert players["A"].wins == 1 and players["A"].losses == 0
    assert players["D"].losses == 1 and players["D"].games == 1
    assert players["B"].sigma == pytest.approx(350 / math.sqrt(2))
    assert players["C"].last_played == datetime(2024, 1, 1)


def test_rating_update_is_order_independent():
    cfg = Config()
    base = {
        "A": Player("A", "A", rating=1300),
        "B": Player("B", "B", rating=1150),
        "C": Player("C", "C", rating=1250),
        "D": Player("D", "D", rating=1100),
    }
    match, parts = _match("m1", datetime(2024, 1, 1), ["A", "B"], ["C", "D"], "atlanteans")

    first = {k: v.copy() for k, v in base.items()}
    second = {k: v.copy() for k, v in base.items()}
    deltas1 = update_from_match(first, match, parts, cfg)
    deltas2 = update_from_match(second, match, list(reversed(parts)), cfg)

    assert deltas1 == pytest.approx(deltas2)
    assert deltas1["C"] > 0 > deltas1["A"]


def test_update_rejects_malformed_match():
    players = {pid: Player(id=pid, name=pid) for pid in "ABC"}
    match, parts = _match("m1", datetime(2024, 1, 1), ["A", "B", "C"], [])
    with pytest.raises(InvalidMatch):
        update_from_match(players, match, parts, Config())

    match, parts = _match("m2", datetime(2024, 1, 1), ["A"], ["B"], "draw")
    with pytest.raises(InvalidMatch):
        update_from_match(players, match, parts, Config())


def test_update_raises_for_missing_player():
    players = {pid: Player(id=pid, name=pid) for pid in "AB"}
    match, parts = _match("m1", datetime(2024, 1, 1), ["A"], ["Z"])
    with pytest.raises(MissingPlayerRecord) as info:
        update_from_match(players, match, parts, Config())
    assert info.value.player_id == "Z"
    assert players["A"].games == 0


def test_record_match_updates_repository():
    engine = _engine()
    match, parts = _match("m1", datetime(2024, 1, 1), ["A", "B"], ["C", "D"])
    engine.matches.add(match, parts)

    deltas = engine.record_match(match, parts)

    assert set(deltas) == {"A", "B", "C", "D"}
    assert engine.players.get("A").rating == pytest.approx(1216.0)
    assert engine.players.get("C").losses == 1


def test_record_match_missing_player_writes_nothing():
    engine = _engine(("A", "B", "C"))
    match, parts = _match("m1", datetime(2024, 1, 1), ["A", "B"], ["C", "D"])
    with pytest.raises(MissingPlayerRecord):
        engine.record_match(match, parts)
    assert all(p.games == 0 for p in engine.players.get_all())


def test_recompute_matches_incremental_updates():
    engine = _engine()
    history = [
        _match("m1", datetime(2024, 1, 1), ["A", "B"], ["C", "D"]),
        _match("m2", datetime(2024, 1, 2), ["A", "C"], ["B", "D"], "atlanteans"),
        _match("m3", datetime(2024, 1, 3), ["A", "D"], ["B", "C"]),
    ]
    for match, parts in history:
        engine.matches.add(match, parts)
        engine.record_match(match, parts)
    incremental = {p.id: p.rating for p in engine.players.get_all()}

    engine.recompute_all()
    first = {p.id: (p.rating, p.games, p.wins) for p in engine.players.get_all()}
    engine.recompute_all()
    second = {p.id: (p.rating, p.games, p.wins) for p in engine.players.get_all()}

    assert first == second
    for pid, rating in incremental.items():
        assert first[pid][0] == pytest.approx(rating)


def test_recompute_orders_by_date_not_insertion():
    engine = _engine()
    late = _match("late", datetime(2024, 2, 1), ["A", "B"], ["C", "D"])
    early = _match("early", datetime(2024, 1, 1), ["A", "C"], ["B", "D"])
    engine.matches.add(*late)
    engine.matches.add(*early)
    engine.recompute_all()

    expected = _engine()
    expected.matches.add(*early)
    expected.matches.add(*late)
    expected.recompute_all()

    for player in engine.players.get_all():
        assert player.rating == pytest.approx(expected.players.get(player.id).rating)
    assert engine.players.get("A").last_played == datetime(2024, 2, 1)


def test_recompute_with_empty_history_resets_players():
    players = InMemoryPlayerRepository(
        [Player("A", "A", games=3, wins=2, losses=1, rating=1320, sigma=90, last_played=datetime(2024, 1, 1))]
    )
    engine = RatingEngine(players, InMemoryMatchRepository())

    engine.recompute_all()

    player = players.get("A")
    assert player.rating == 1200.0
    assert (player.games, player.wins, player.losses) == (0, 0, 0)
    assert player.sigma == 350.0
    assert player.last_played is None


def test_recompute_aborts_without_writing_on_missing_player():
    engine = _engine(("A", "B", "C"))
    ok_match = _match("m1", datetime(2024, 1, 1), ["A"], ["B"])
    engine.matches.add(*ok_match)
    engine.record_match(*ok_match)
    before = {p.id: (p.rating, p.games) for p in engine.players.get_all()}

    engine.matches.add(*_match("m2", datetime(2024, 1, 2), ["A", "C"], ["Z"]))
    with pytest.raises(MissingPlayerRecord):
        engine.recompute_all()

    after = {p.id: (p.rating, p.games) for p in engine.players.get_all()}
    assert after == before


def test_ensure_player_creates_once():
    engine = _engine(())
    created = engine.ensure_player("new", "Newbie")
    again = engine.ensure_player("new", "Other")
    assert created.name == again.name == "Newbie"
    assert engine.display_rating(created) == 1200


def test_recompute_keeps_insertion_order_for_equal_dates():
    same_day = datetime(2024, 4, 1, 19, 0)
    first = _match("x", same_day, ["A", "B"], ["C", "D"])
    second = _match("y", same_day, ["A", "C"], ["B", "D"])

    forward = _engine()
    for match, parts in (first, second):
        forward.matches.add(match, parts)
        forward.record_match(match, parts)
    incremental = {p.id: p.rating for p in forward.players.get_all()}
    forward.recompute_all()
    replayed = {p.id: p.rating for p in forward.players.get_all()}

    backward = _engine()
    backward.matches.add(*second)
    backward.matches.add(*first)
    backward.recompute_all()
    reversed_order = {p.id: p.rating for p in backward.players.get_all()}

    assert replayed == pytest.approx(incremental)
    assert replayed["B"] != pytest.approx(reversed_order["B"])
