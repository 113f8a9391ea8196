"""
Scene model: the interaction state shared by the navigation controller and renderers.

All mutation goes through the transition methods, which keep two invariants:
    - an area selection and the "current panorama" highlight are never both active
    - the view mode always maps to exactly one visible surface
"""

# Floorwalk imports
from floorwalk.records import Area, Panorama

# Standard library imports
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterator, List, Optional, Sequence, Tuple


class ViewMode(Enum):
    IDLE = "idle"
    PANORAMA = "panorama"
    AREA = "area"


class Surface(Enum):
    SPLASH = "splash"
    PANORAMA = "panorama"
    DESCRIPTION = "description"


_SURFACE_FOR_MODE = {
    ViewMode.IDLE:     Surface.SPLASH,
    ViewMode.PANORAMA: Surface.PANORAMA,
    ViewMode.AREA:     Surface.DESCRIPTION,
}


@dataclass(frozen=True)
class SceneChange:
    """Outcome of a transition. ``changed`` means a re-render is needed."""

    changed: bool
    selected: Optional[bool] = None


UNCHANGED = SceneChange(changed=False)


class SceneModel:
    """
    Holds the panorama/area working sets and the current selection state.

    Args:
        panoramas: Valid panoramas, in load order.
        areas: Areas, in load order.
    """

    def __init__(self, panoramas: Sequence[Panorama], areas: Sequence[Area] = ()):
        self.panoramas: Tuple[Panorama, ...] = tuple(panoramas)
        self.areas: Tuple[Area, ...] = tuple(areas)
        self._areas_by_key: Dict[str, Area] = {a.key: a for a in self.areas}

        self._current_level: Optional[str] = None
        self._current_panorama_index: Optional[int] = None
        self._selected_area_key: Optional[str] = None
        self._view_mode: ViewMode = ViewMode.IDLE

    # -------------------------------------------------------------------------
    # State (read-only)
    # -------------------------------------------------------------------------

    @property
    def current_level(self) -> Optional[str]:
        return self._current_level

    @property
    def current_panorama_index(self) -> Optional[int]:
        return self._current_panorama_index

    @property
    def selected_area_key(self) -> Optional[str]:
        return self._selected_area_key

    @property
    def view_mode(self) -> ViewMode:
        return self._view_mode

    @property
    def visible_surface(self) -> Surface:
        return _SURFACE_FOR_MODE[self._view_mode]

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    @property
    def current_panorama(self) -> Optional[Panorama]:
        if self._current_panorama_index is None:
            return None
        return self.panoramas[self._current_panorama_index]

    @property
    def selected_area(self) -> Optional[Area]:
        if self._selected_area_key is None:
            return None
        return self._areas_by_key.get(self._selected_area_key)

    @property
    def active_level(self) -> Optional[str]:
        """The explicitly selected level, else the current panorama's level."""
        if self._current_level:
            return self._current_level
        panorama = self.current_panorama
        return panorama.level if panorama else None

    def area_by_key(self, key: str) -> Optional[Area]:
        return self._areas_by_key.get(key)

    def index_of(self, file_path: str) -> Optional[int]:
        for i, panorama in enumerate(self.panoramas):
            if panorama.file_path == file_path:
                return i
        return None

    def panoramas_on(self, level: Optional[str]) -> Iterator[Tuple[int, Panorama]]:
        for i, panorama in enumerate(self.panoramas):
            if panorama.level == level:
                yield i, panorama

    def areas_on(self, level: Optional[str]) -> List[Area]:
        return [a for a in self.areas if a.level == level]

    def is_highlighted(self, index: int) -> bool:
        """True for the current panorama while no area is selected."""
        return self._selected_area_key is None and index == self._current_panorama_index

    # -------------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------------

    def _mode_after_deselect(self) -> ViewMode:
        return ViewMode.PANORAMA if self._current_panorama_index is not None else ViewMode.IDLE

    def select_level(self, level: Optional[str]) -> SceneChange:
        """Switch the displayed level; always clears the area selection."""
        changed = level != self._current_level or self._selected_area_key is not None
        if self._selected_area_key is not None:
            self._selected_area_key = None
            self._view_mode = self._mode_after_deselect()
        self._current_level = level
        return SceneChange(changed=changed)

    def select_panorama(self, index: int) -> SceneChange:
        """Make ``index`` the current panorama, follow its level and clear any area selection."""
        if not 0 <= index < len(self.panoramas):
            raise IndexError(f"Panorama index out of range: {index}")
        level = self.panoramas[index].level
        changed = (
            index != self._current_panorama_index
            or level != self._current_level
            or self._selected_area_key is not None
            or self._view_mode is not ViewMode.PANORAMA
        )
        self._current_panorama_index = index
        self._current_level = level
        self._selected_area_key = None
        self._view_mode = ViewMode.PANORAMA
        return SceneChange(changed=changed)

    def toggle_area(self, key: str) -> SceneChange:
        """Select ``key``, or deselect it if it is already the selection."""
        if key == self._selected_area_key:
            self._selected_area_key = None
            self._view_mode = self._mode_after_deselect()
            return SceneChange(changed=True, selected=False)
        if key not in self._areas_by_key:
            raise KeyError(f"Unknown area key: {key}")
        self._selected_area_key = key
        self._view_mode = ViewMode.AREA
        return SceneChange(changed=True, selected=True)

    def clear_selection_on_empty_click(self) -> SceneChange:
        """Deselect the current area, if any; a no-op otherwise."""
        if self._selected_area_key is None:
            return UNCHANGED
        self._selected_area_key = None
        self._view_mode = self._mode_after_deselect()
        return SceneChange(changed=True, selected=False)
