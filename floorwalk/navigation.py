"""Navigation controller: turns user input into scene transitions, renders and viewer calls."""

# Floorwalk imports
from floorwalk import config
from floorwalk.collaborators import (
    DescriptionSource,
    DescriptionView,
    ErrorReporter,
    MarkerSpec,
    PanoramaViewer,
)
from floorwalk.hit_testing import AreaHit, HitResult, PanoramaHit, resolve_click
from floorwalk.i18n import Localizer
from floorwalk.orientation_feed import LiveOrientationFeed
from floorwalk.records import Area
from floorwalk.renderers import FloorPlanRenderer
from floorwalk.scene import SceneModel

# Standard library imports
import logging
from concurrent.futures import Future
from typing import Callable, List, Optional, Sequence

logger = logging.getLogger(__name__)


class NavigationController:
    """
    Orchestrates floor plan clicks, level switches, panorama switches and area selection.

    Every user action applies its scene transition and render synchronously;
    viewer loads and description fetches complete later through futures. Each
    of those requests carries a generation number, and a completion whose
    generation has been superseded by a newer request is discarded.

    Args:
        scene: Scene model, mutated only through its transitions.
        renderer: Floor plan renderer (raster or vector).
        viewer: Panorama viewer collaborator.
        description_source: Fetches area description documents.
        description_view: Surface showing area descriptions.
        localizer: UI string lookup.
        report_error: Shows a localized error message to the user.
    """

    def __init__(
        self,
        scene:              SceneModel,
        renderer:           FloorPlanRenderer,
        viewer:             PanoramaViewer,
        description_source: Optional[DescriptionSource]     = None,
        description_view:   Optional[DescriptionView]       = None,
        localizer:          Optional[Localizer]             = None,
        report_error:       Optional[ErrorReporter]         = None,
    ):
        self.scene                                          = scene
        self.renderer                                       = renderer
        self.viewer                                         = viewer
        self.description_source                             = description_source
        self.description_view                               = description_view
        self.localizer                                      = localizer or renderer.localizer
        self.report_error:  ErrorReporter                   = report_error or self._log_error
        self.level_listeners: List[Callable[[Optional[str]], None]] = []

        self._panorama_generation:      int                 = 0
        self._description_generation:   int                 = 0

        self.orientation_feed = LiveOrientationFeed(viewer, self.refresh_orientation)
        self.viewer.markers.on_marker_activated(self._on_marker_activated)

    @staticmethod
    def _log_error(message: str) -> None:
        logger.error(message)

    # -------------------------------------------------------------------------
    # Rendering
    # -------------------------------------------------------------------------

    def render(self) -> None:
        """Redraw the active level with the viewer's live facing angle."""
        facing = 0.0
        if self.scene.current_panorama_index is not None:
            facing = self.viewer.get_current_facing_angle()
        self.renderer.render(self.scene, self.scene.active_level, facing)

    def refresh_orientation(self) -> None:
        """Orientation feed hook: redraw so the highlighted marker follows the view."""
        if self.renderer.has_floor_plan:
            self.render()

    def _load_floor_plan(self, level: Optional[str]) -> None:
        # A user action is the only trigger that retries a previously failed plan
        if level:
            self.renderer.assets.forget_failed(level)
        self.renderer.load_floor_plan(level)

    def _notify_level(self) -> None:
        level = self.scene.active_level
        for listener in self.level_listeners:
            listener(level)

    # -------------------------------------------------------------------------
    # User input
    # -------------------------------------------------------------------------

    def on_floor_plan_click(
        self,
        screen_point: Sequence[float],
        display_size: Optional[Sequence[float]] = None,
    ) -> HitResult:
        """
        Handle a click on the floor plan surface.

        Args:
            screen_point: Pointer position relative to the displayed surface.
            display_size: Displayed (width, height) of the surface, if scaled.

        Returns:
            The resolved hit, after it has been dispatched.
        """
        point = self.renderer.to_scene_coords(screen_point, display_size)
        level = self.scene.active_level
        hit = resolve_click(point, level, self.scene.panoramas, self.scene.areas,
                            radius=config.CLICK_RADIUS)
        logger.debug(f"Click at {point} on level {level!r}: {hit}")

        if isinstance(hit, PanoramaHit):
            self.switch_to_panorama(hit.index)
        elif isinstance(hit, AreaHit):
            change = self.scene.toggle_area(hit.area.key)
            self.render()
            if change.selected:
                self._show_description(hit.area)
            else:
                self._hide_description()
        else:
            change = self.scene.clear_selection_on_empty_click()
            if change.changed:
                self._hide_description()
                self.render()
        return hit

    def on_level_button_click(self, level: Optional[str]) -> None:
        """Show ``level``'s floor plan; None follows the current panorama's level."""
        had_selection = self.scene.selected_area_key is not None
        self.scene.select_level(level)
        if had_selection:
            self._hide_description()
        self._load_floor_plan(self.scene.active_level)
        self.render()
        self._notify_level()

    def switch_to_panorama(self, index: int) -> bool:
        """
        Make panorama ``index`` current and load it into the viewer.

        An out-of-range index is logged and ignored. Directional markers are
        rebuilt once the viewer reports a successful load; a failed load is
        reported to the user and leaves the markers as they were.

        Returns:
            bool: False if the index was rejected.
        """
        if not 0 <= index < len(self.scene.panoramas):
            logger.warning(f"Invalid panorama index: {index}")
            return False

        self.scene.select_panorama(index)
        self._hide_description()
        panorama = self.scene.panoramas[index]
        self._load_floor_plan(panorama.level)
        self.render()
        self._notify_level()

        self._panorama_generation += 1
        generation = self._panorama_generation
        logger.info(f"Loading panorama: {panorama.file_path}")
        future = self.viewer.set_current_panorama(panorama.file_path)
        future.add_done_callback(lambda f: self._on_panorama_loaded(f, generation, index))
        return True

    # -------------------------------------------------------------------------
    # Panorama surface markers
    # -------------------------------------------------------------------------

    def navigation_markers(self, index: int) -> List[MarkerSpec]:
        """One marker per compass direction linking to a known valid panorama."""
        panorama = self.scene.panoramas[index]
        markers = []
        for key, yaw in config.DIRECTIONS:
            link = panorama.links.get(key)
            if not link:
                continue
            target = self.scene.index_of(link)
            if target is None:
                logger.debug(f"{panorama.file_path}: {key} link {link!r} is not a valid panorama")
                continue
            markers.append(MarkerSpec(
                id           = key,
                yaw          = yaw,
                pitch        = 0.0,
                label        = self.localizer.t(f"direction_{key}"),
                tooltip      = self.localizer.t(f"go_{key}"),
                target_index = target,
            ))
        return markers

    def _on_panorama_loaded(self, future: Future, generation: int, index: int) -> None:
        if generation != self._panorama_generation:
            logger.debug(f"Discarding stale panorama load for index {index}")
            return
        if future.cancelled():
            return
        error = future.exception()
        if error is not None:
            path = self.scene.panoramas[index].file_path
            logger.error(f"Failed to load panorama {path}: {error}")
            self.report_error(self.localizer.t("panorama_load_failed", path=path))
            return

        markers = self.viewer.markers
        markers.clear()
        for spec in self.navigation_markers(index):
            markers.add(spec)
        self.orientation_feed.attach()
        self.render()

    def _on_marker_activated(self, spec: MarkerSpec) -> None:
        self.switch_to_panorama(spec.target_index)

    # -------------------------------------------------------------------------
    # Area descriptions
    # -------------------------------------------------------------------------

    def _show_description(self, area: Area) -> None:
        self._description_generation += 1
        generation = self._description_generation
        if self.description_view is None:
            return
        title = area.display_name(self.localizer.language)
        if not area.description_path or self.description_source is None:
            self.description_view.show(title, "")
            return
        future = self.description_source.fetch(area.description_path)
        future.add_done_callback(lambda f: self._on_description_loaded(f, generation, title))

    def _on_description_loaded(self, future: Future, generation: int, title: str) -> None:
        if generation != self._description_generation or future.cancelled():
            return
        text = None
        error = future.exception()
        if error is not None:
            logger.warning(f"Failed to fetch description for {title!r}: {error}")
        else:
            text = future.result()
        if text is None:
            text = self.localizer.t("description_not_found")
        self.description_view.show(title, text)

    def _hide_description(self) -> None:
        self._description_generation += 1
        if self.description_view is not None:
            self.description_view.hide()
