import pathlib
import sys
from datetime import datetime

ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from balance_model import (
    Config,
    Match,
    MatchParticipation,
    PairwiseRelationshipAnalyzer,
    RatingEngine,
    WinProbabilityEstimator,
    generate_teams,
)
from balance_model.presets import DEFAULT_WEIGHTS
from balance_model.repositories import InMemoryMatchRepository, InMemoryPlayerRepository


def main() -> None:
    cfg = Config()
    players = InMemoryPlayerRepository()
    matches = InMemoryMatchRepository()
    engine = RatingEngine(players, matches, cfg)

    names = ["Alex", "Ben", "Chen", "Dana", "Eli", "Fran"]
    for name in names:
        engine.ensure_player(name)

    history = [
        (datetime(2024, 5, 1), ["Alex", "Ben", "Chen"], ["Dana", "Eli", "Fran"], "titans"),
        (datetime(2024, 5, 3), ["Alex", "Dana", "Eli"], ["Ben", "Chen", "Fran"], "atlanteans"),
        (datetime(2024, 5, 8), ["Alex", "Ben", "Dana"], ["Chen", "Eli", "Fran"], "atlanteans"),
        (datetime(2024, 5, 10), ["Alex", "Chen", "Fran"], ["Ben", "Dana", "Eli"], "titans"),
        (datetime(2024, 5, 15), ["Alex", "Dana", "Fran"], ["Ben", "Chen", "Eli"], "atlanteans"),
    ]
    for idx, (date, titans, atlanteans, winner) in enumerate(history, start=1):
        match = Match(id=f"game{idx}", date=date, winning_side=winner)
        parts = [MatchParticipation(match.id, pid, "titans") for pid in titans]
        parts += [MatchParticipation(match.id, pid, "atlanteans") for pid in atlanteans]
        matches.add(match, parts)
        engine.record_match(match, parts)

    print("Ratings after 5 games:")
    for player in sorted(players.get_all(), key=lambda p: p.rating, reverse=True):
        print(f"{player.name:>6}: {engine.display_rating(player):5d}  sigma={player.sigma:5.1f}  {player.wins}-{player.losses}")

    analyzer = PairwiseRelationshipAnalyzer(matches, cfg)
    estimator = WinProbabilityEstimator(cfg)
    candidates = players.get_all()
    by_id = {p.id: p for p in candidates}
    now = datetime(2024, 5, 20)

    print("\nSuggested splits:")
    for mode in ("skill", "novelty", "reunion", "custom"):
        result = generate_teams(candidates, mode, analyzer, weights=DEFAULT_WEIGHTS, now=now, config=cfg)
        chance = estimator.estimate(
            [by_id[pid] for pid in result.side1_ids],
            [by_id[pid] for pid in result.side2_ids],
        )
        side1 = ", ".join(result.side1_ids)
        side2 = ", ".join(result.side2_ids)
        print(
            f"{mode:>8}: T=[{side1}]  A=[{side2}]  "
            f"{chance.side1_probability}% ({chance.side1_lower}-{chance.side1_upper})"
        )


if __name__ == "__main__":
    main()
