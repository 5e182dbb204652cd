import uuid
from datetime import datetime
from typing import List, Optional

from .errors import PresetError
from .repositories import PresetRepository
from .types import WeightPreset, WeightVector

_EPOCH = datetime(2024, 1, 1)

BUILT_IN_PRESETS = (
    WeightPreset(
        id="balanced",
        name="Balanced",
        weights=WeightVector(skill=20, experience=20, novelty=20, reunion=20, win_rate=20, random=0),
        created_at=_EPOCH,
        is_built_in=True,
    ),
    WeightPreset(
        id="competitive",
        name="Competitive",
        weights=WeightVector(skill=40, experience=15, novelty=10, reunion=10, win_rate=15, random=10),
        created_at=_EPOCH,
        is_built_in=True,
    ),
    WeightPreset(
        id="social",
        name="Social",
        weights=WeightVector(skill=10, experience=10, novelty=35, reunion=35, win_rate=10, random=0),
        created_at=_EPOCH,
        is_built_in=True,
    ),
)

DEFAULT_WEIGHTS = WeightVector(skill=17, experience=17, novelty=17, reunion=17, win_rate=16, random=16)


class PresetService:
    def __init__(self, store: PresetRepository):
        self.store = store

    def list_presets(self) -> List[WeightPreset]:
        saved = sorted(self.store.load_all(), key=lambda p: (p.created_at, p.id))
        return list(BUILT_IN_PRESETS) + saved

    def get(self, preset_id: str) -> Optional[WeightPreset]:
        for preset in self.list_presets():
            if preset.id == preset_id:
                return preset
        return None

    def _check_name(self, name: str, exclude_id: Optional[str] = None) -> str:
        name = (name or "").strip()
        if not name:
            raise PresetError("preset_name_required")
        for preset in self.list_presets():
            if preset.id != exclude_id and preset.name.lower() == name.lower():
                raise PresetError("preset_name_taken")
        return name

    def save(self, name: str, weights: WeightVector) -> WeightPreset:
        preset = WeightPreset(id=uuid.uuid4().hex, name=self._check_name(name), weights=weights)
        self.store.save(preset)
        return preset

    def rename(self, preset_id: str, name: str) -> WeightPreset:
        if any(p.id == preset_id for p in BUILT_IN_PRESETS):
            raise PresetError("preset_built_in")
        name = self._check_name(name, exclude_id=preset_id)
        renamed = self.store.rename(preset_id, name)
        if renamed is None:
            raise PresetError("preset_not_found")
        return renamed

    def delete(self, preset_id: str) -> None:
        if any(p.id == preset_id for p in BUILT_IN_PRESETS):
            raise PresetError("preset_built_in")
        if not self.store.delete(preset_id):
            raise PresetError("preset_not_found")
