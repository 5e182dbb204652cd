class BalanceError(Exception):
    pass


class MissingPlayerRecord(BalanceError, LookupError):
    def __init__(self, player_id: str, match_id: str | None = None):
        self.player_id = player_id
        self.match_id = match_id
        where = f" in match {match_id}" if match_id else ""
        super().__init__(f"unknown player {player_id!r}{where}")


class InvalidMatch(BalanceError, ValueError):
    pass


class CandidateLimitExceeded(BalanceError, ValueError):
    def __init__(self, count: int, limit: int):
        self.count = count
        self.limit = limit
        super().__init__(f"{count} candidates exceeds the limit of {limit}")


class UnknownObjective(BalanceError, ValueError):
    pass


class PresetError(BalanceError, ValueError):
    pass
