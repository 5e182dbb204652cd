from dataclasses import dataclass


@dataclass(frozen=True)
class Config:
    default_rating: float = 1200.0
    k_factor: float = 32.0
    team_weight: float = 0.7
    logistic_scale: float = 400.0

    default_sigma: float = 350.0
    min_sigma: float = 60.0

    display_scale: float = 1.0
    display_offset: float = 0.0

    # performance noise of a single match, on the rating scale
    win_prob_beta: float = 200.0
    win_prob_band_z: float = 1.0

    min_candidates: int = 4
    max_candidates: int = 20

    never_paired_days: int = 3650
    neutral_win_rate: float = 0.5

    # teammates and opponents need this many shared games to count as best or nemesis
    relationship_min_games: int = 3
