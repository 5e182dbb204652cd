import copy
from contextlib import contextmanager
from typing import ContextManager, Dict, Iterator, List, Optional, Protocol

from .types import Match, MatchParticipation, Player, WeightPreset


class PlayerRepository(Protocol):
    def get(self, player_id: str) -> Optional[Player]: ...

    def get_all(self) -> List[Player]: ...

    def put(self, player: Player) -> None: ...

    def atomic(self) -> ContextManager[None]: ...


class MatchRepository(Protocol):
    def get_all(self) -> List[Match]: ...

    def get(self, match_id: str) -> Optional[Match]: ...

    def get_participations(self, match_id: str) -> List[MatchParticipation]: ...


class PresetRepository(Protocol):
    def load_all(self) -> List[WeightPreset]: ...

    def save(self, preset: WeightPreset) -> None: ...

    def delete(self, preset_id: str) -> bool: ...

    def rename(self, preset_id: str, name: str) -> Optional[WeightPreset]: ...


class InMemoryPlayerRepository:
    def __init__(self, players: Optional[List[Player]] = None):
        self._players: Dict[str, Player] = {}
        for player in players or []:
            self._players[player.id] = player.copy()

    def get(self, player_id: str) -> Optional[Player]:
        player = self._players.get(player_id)
        return player.copy() if player else None

    def get_all(self) -> List[Player]:
        return [p.copy() for p in self._players.values()]

    def put(self, player: Player) -> None:
        self._players[player.id] = player.copy()

    def delete_all(self) -> None:
        self._players.clear()

    @contextmanager
    def atomic(self) -> Iterator[None]:
        snapshot = copy.deepcopy(self._players)
        try:
            yield
        except BaseException:
            self._players = snapshot
            raise


class InMemoryMatchRepository:
    def __init__(self):
        self._matches: Dict[str, Match] = {}
        self._participations: Dict[str, List[MatchParticipation]] = {}

    def add(self, match: Match, participations: List[MatchParticipation]) -> None:
        self._matches[match.id] = match
        self._participations[match.id] = list(participations)

    def delete(self, match_id: str) -> bool:
        self._participations.pop(match_id, None)
        return self._matches.pop(match_id, None) is not None

    def delete_all(self) -> None:
        self._matches.clear()
        self._participations.clear()

    def get_all(self) -> List[Match]:
        return list(self._matches.values())

    def get(self, match_id: str) -> Optional[Match]:
        return self._matches.get(match_id)

    def get_participations(self, match_id: str) -> List[MatchParticipation]:
        return list(self._participations.get(match_id, []))


class InMemoryPresetRepository:
    def __init__(self):
        self._presets: Dict[str, WeightPreset] = {}

    def load_all(self) -> List[WeightPreset]:
        return list(self._presets.values())

    def save(self, preset: WeightPreset) -> None:
        self._presets[preset.id] = preset

    def delete(self, preset_id: str) -> bool:
        return self._presets.pop(preset_id, None) is not None

    def rename(self, preset_id: str, name: str) -> Optional[WeightPreset]:
        preset = self._presets.get(preset_id)
        if preset is None:
            return None
        renamed = WeightPreset(
            id=preset.id,
            name=name,
            weights=preset.weights,
            created_at=preset.created_at,
            is_built_in=preset.is_built_in,
        )
        self._presets[preset_id] = renamed
        return renamed
