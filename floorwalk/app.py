"""
Interactive floor plan and panorama viewer window.

Left:  floor plan with panorama markers; click a marker to jump to that
       panorama, click inside a room to toggle its description.
Right: the current panorama (or the selected area's description, or the
       splash before anything is loaded).

Controls:
    Left-click      Select panorama marker / toggle area (floor plan)
    Click arrow     Follow a directional link (panorama pane)
    Left/Right      Turn the view
    Up/Down         Previous / next location
    Location list   Click an entry (or the arrows) to jump to that panorama
    Level buttons   Show another floor plan ("All Levels" follows the panorama)
    q               Quit
"""

# fmt: off
# autopep8: off

# Standard library imports
import logging
import math
import textwrap
from concurrent.futures import Future
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple, Union

# Third-party imports
import matplotlib.pyplot as plt
import numpy as np
from matplotlib.widgets import Button
from PIL import Image, UnidentifiedImageError

# Floorwalk imports
from floorwalk import config
from floorwalk.assets import FloorPlanAssets, load_marker_icon
from floorwalk.collaborators import FileDescriptionSource, MarkerSpec
from floorwalk.i18n import Localizer
from floorwalk.navigation import NavigationController
from floorwalk.records import (
    DataSourceError,
    NoValidPanoramasError,
    level_choices,
    load_areas,
    load_panoramas,
    panorama_choices,
)
from floorwalk.renderers import VectorRenderer
from floorwalk.scene import SceneModel, Surface

logger = logging.getLogger(__name__)

FIELD_OF_VIEW = math.pi / 2     # horizontal field of view of the panorama pane
TURN_STEP     = math.radians(15)
LOCATION_ROWS = 3               # entries visible in the location list


class AxesMarkerLayer:
    """Directional markers drawn as clickable text on the panorama pane."""

    def __init__(self, viewer: "ImagePanoramaViewer"):
        self.viewer                                         = viewer
        self.specs:     List[MarkerSpec]                    = []
        self._artists:  Dict[str, object]                   = {}
        self._callbacks: List[Callable[[MarkerSpec], None]] = []

    def clear(self) -> None:
        for artist in self._artists.values():
            artist.remove()
        self._artists.clear()
        self.specs.clear()

    def add(self, spec: MarkerSpec) -> None:
        self.specs.append(spec)
        self._draw(spec)

    def reset(self) -> None:
        """Forget markers whose artists went away with a cleared pane."""
        self._artists.clear()
        self.specs.clear()

    def _draw(self, spec: MarkerSpec) -> None:
        x, y = self.viewer.yaw_pitch_to_pixel(spec.yaw, spec.pitch)
        text = self.viewer.ax.text(
            x, y, spec.label, fontsize=11, fontweight='bold', color='white',
            ha='center', va='center', zorder=5, picker=True,
            bbox=dict(boxstyle='round,pad=0.4', facecolor=(0, 0, 0, 0.6), edgecolor='white'),
        )
        text._floorwalk_marker = spec
        self._artists[spec.id] = text

    def on_marker_activated(self, callback: Callable[[MarkerSpec], None]) -> None:
        self._callbacks.append(callback)

    def activate(self, spec: MarkerSpec) -> None:
        for callback in self._callbacks:
            callback(spec)


class ImagePanoramaViewer:
    """
    Minimal panorama surface: shows a window of an equirectangular image.

    Loading is synchronous, so the returned future is already complete.
    """

    def __init__(self, ax, image_root: Path):
        self.ax                                                 = ax
        self.image_root                                         = Path(image_root)
        self.yaw:           float                               = 0.0
        self.markers                                            = AxesMarkerLayer(self)
        self._image:        Optional[np.ndarray]                = None
        self._facing_callbacks: List[Callable[..., None]]       = []

    def set_current_panorama(self, path: str) -> Future:
        future: Future = Future()
        file_path = Path(path)
        if not file_path.is_absolute():
            file_path = self.image_root / file_path
        try:
            with Image.open(file_path) as img:
                self._image = np.asarray(img.convert('RGB'))
        except (OSError, UnidentifiedImageError) as exc:
            future.set_exception(exc)
            return future

        self.yaw = 0.0
        self.ax.clear()
        self.ax.axis('off')
        self.markers.reset()
        h, w = self._image.shape[:2]
        self.ax.imshow(self._image, origin='upper', extent=(0, w, h, 0), zorder=0)
        self._apply_view()
        future.set_result(None)
        return future

    def get_current_facing_angle(self) -> float:
        return self.yaw

    def on_facing_changed(self, callback: Callable[..., None]) -> None:
        self._facing_callbacks.append(callback)

    def turn(self, delta: float) -> None:
        """Rotate the view by ``delta`` radians and notify listeners."""
        if self._image is None:
            return
        self.yaw = (self.yaw + delta + math.pi) % (2 * math.pi) - math.pi
        self._apply_view()
        for callback in self._facing_callbacks:
            callback(self.yaw)

    def yaw_pitch_to_pixel(self, yaw: float, pitch: float) -> tuple:
        if self._image is None:
            return (0.0, 0.0)
        h, w = self._image.shape[:2]
        x = (yaw / (2 * math.pi) + 0.5) * w
        y = (0.5 - pitch / math.pi) * h
        return (x, y)

    def _apply_view(self) -> None:
        h, w = self._image.shape[:2]
        cx, _ = self.yaw_pitch_to_pixel(self.yaw, 0.0)
        half = w * FIELD_OF_VIEW / (4 * math.pi)
        self.ax.set_xlim(cx - half, cx + half)
        self.ax.set_ylim(h * 0.75, h * 0.25)
        self.ax.figure.canvas.draw_idle()


class DescriptionPane:
    """Shows an area's title and description text."""

    def __init__(self, ax):
        self.ax = ax
        self.ax.axis('off')
        self._title = self.ax.text(0.02, 0.96, "", fontsize=13, fontweight='bold',
                                   va='top', transform=self.ax.transAxes)
        self._body  = self.ax.text(0.02, 0.88, "", fontsize=10, va='top',
                                   transform=self.ax.transAxes, wrap=True)

    def show(self, title: str, text: str) -> None:
        self._title.set_text(title)
        self._body.set_text("\n".join(textwrap.fill(p, 80) for p in text.splitlines()))
        self.ax.figure.canvas.draw_idle()

    def hide(self) -> None:
        self._title.set_text("")
        self._body.set_text("")


class FloorWalkApp:
    """
    Floor plan and panorama tour window.

    Args:
        assets_dir: Directory with floor plans, panoramas, icons and descriptions.
        panoramas_csv: Panorama data source; defaults to ``assets_dir/assets.csv``.
        areas_csv: Area data source; defaults to ``assets_dir/areas.csv``.
        language: UI language code.
    """

    _WINDOW_TITLE = "Floorwalk"

    def __init__(
        self,
        assets_dir:     Union[Path, str]            = config.ASSETS_DIR,
        panoramas_csv:  Optional[Union[Path, str]]  = None,
        areas_csv:      Optional[Union[Path, str]]  = None,
        language:       Optional[str]               = None,
    ):
        self.assets_dir                             = Path(assets_dir)
        self.panoramas_csv                          = Path(panoramas_csv or self.assets_dir / "assets.csv")
        self.areas_csv                              = Path(areas_csv or self.assets_dir / "areas.csv")
        self.localizer                              = Localizer(language)

        self.controller: Optional[NavigationController] = None
        self.scene:      Optional[SceneModel]           = None
        self.level_buttons: Dict[Optional[str], Button] = {}
        self.location_choices: List[Tuple[int, str]]    = []
        self._location_hit_boxes: List[Tuple[float, float, int]] = []

        self._btn_color     = '#E8E8E0'
        self._btn_hover     = '#D8D8D0'
        self._btn_active    = '#90CDF4'

    def _axes(self, x, y, w, h):
        """Create figure axes at (x, y) measured from top-left corner."""
        return self.fig.add_axes((x, 1.0 - y - h, w, h))

    # -------------------------------------------------------------------------
    # Launch
    # -------------------------------------------------------------------------

    def launch(self):
        """Load the tour data, build the window and show it."""
        self.fig = plt.figure(figsize=(16, 8), facecolor='#F5F5F0')
        self.fig.canvas.manager.set_window_title(self._WINDOW_TITLE)

        try:
            panoramas = load_panoramas(self.panoramas_csv)
            areas = load_areas(self.areas_csv)
        except DataSourceError as exc:
            logger.error(f"Startup failed: {exc}")
            self._show_startup_error(exc)
            plt.show()
            return

        self._build(panoramas, areas)
        self.controller.switch_to_panorama(0)
        self._sync_surfaces()
        plt.show()

    def _show_startup_error(self, exc: DataSourceError) -> None:
        ax = self._axes(0.1, 0.4, 0.8, 0.2)
        ax.axis('off')
        if isinstance(exc, NoValidPanoramasError):
            message = self.localizer.t("no_valid_panoramas")
        else:
            message = self.localizer.t("data_source_failed", reason=exc)
        ax.text(0.5, 0.5, message, ha='center', va='center', fontsize=12, color='#C53030', wrap=True)

    def _build(self, panoramas, areas) -> None:
        self.scene = SceneModel(panoramas, areas)

        self.ax_plan = self._axes(0.02, 0.10, 0.46, 0.82)
        self.ax_pano = self._axes(0.52, 0.10, 0.46, 0.82)
        self.ax_desc = self._axes(0.52, 0.10, 0.46, 0.82)
        self.ax_splash = self._axes(0.52, 0.10, 0.46, 0.82)
        self.ax_splash.axis('off')
        self.ax_splash.text(0.5, 0.5, self.localizer.t("select_location"),
                            ha='center', va='center', fontsize=14, color='#505050')

        self.ax_status = self._axes(0.02, 0.95, 0.96, 0.04)
        self.ax_status.axis('off')
        self.status_text = self.ax_status.text(0, 0.5, "", fontsize=9, color='#C53030')

        renderer = VectorRenderer(
            ax                  = self.ax_plan,
            device_pixel_ratio  = self._canvas_pixel_ratio(),
            assets              = FloorPlanAssets(self.assets_dir),
            marker_icon         = load_marker_icon([self.assets_dir / "icons" / p.name
                                                    for p in config.MARKER_ICON_PATHS]),
            localizer           = self.localizer,
        )
        self.viewer = ImagePanoramaViewer(self.ax_pano, self.assets_dir)
        self.description_pane = DescriptionPane(self.ax_desc)

        self.controller = NavigationController(
            scene               = self.scene,
            renderer            = renderer,
            viewer              = self.viewer,
            description_source  = FileDescriptionSource(self.assets_dir / "descriptions"),
            description_view    = self.description_pane,
            localizer           = self.localizer,
            report_error        = self._update_status,
        )
        self.controller.level_listeners.append(self._on_level_changed)

        self._setup_level_buttons(level_choices(panoramas))
        self._setup_location_picker(panoramas)

        self.fig.canvas.mpl_connect('button_press_event', self._on_click)
        self.fig.canvas.mpl_connect('button_press_event', self._on_location_click)
        self.fig.canvas.mpl_connect('resize_event', self._on_resize)
        self.fig.canvas.mpl_connect('pick_event', self._on_pick)
        self.fig.canvas.mpl_connect('key_press_event', self._on_key_press)

    def _setup_level_buttons(self, levels: List[str]) -> None:
        entries = [(None, self.localizer.t("all_levels"))]
        entries += [(level, level[:1].upper() + level[1:]) for level in levels]
        btn_w, btn_h, gap = 0.08, 0.04, 0.005
        for i, (level, label) in enumerate(entries):
            ax_btn = self._axes(0.02 + i * (btn_w + gap), 0.02, btn_w, btn_h)
            button = Button(ax_btn, label, color=self._btn_color, hovercolor=self._btn_hover)
            button.on_clicked(lambda event, lvl=level: self._on_level_button(lvl))
            self.level_buttons[level] = button

    def _setup_location_picker(self, panoramas) -> None:
        """Location list with up/down arrows above the panorama pane."""
        self.location_choices = panorama_choices(panoramas, self.localizer.language)
        arrow_w, arrow_h, gap = 0.02, 0.07, 0.004
        row_y = 0.015

        ax_prev = self._axes(0.52, row_y, arrow_w, arrow_h)
        self.btn_prev_location = Button(ax_prev, '\u25b2', color=self._btn_color, hovercolor=self._btn_hover)
        self.btn_prev_location.on_clicked(lambda event: self._step_location(-1))

        ax_next = self._axes(0.52 + arrow_w + gap, row_y, arrow_w, arrow_h)
        self.btn_next_location = Button(ax_next, '\u25bc', color=self._btn_color, hovercolor=self._btn_hover)
        self.btn_next_location.on_clicked(lambda event: self._step_location(1))

        self.ax_location_list = self._axes(0.52 + 2 * (arrow_w + gap), row_y, 0.30, arrow_h)
        self.ax_location_list.axis('off')
        self._update_location_list()

    # -------------------------------------------------------------------------
    # Event handlers
    # -------------------------------------------------------------------------

    def _on_click(self, event):
        if event.inaxes is not self.ax_plan or event.button != 1:
            return
        dpr = self.controller.renderer.device_pixel_ratio
        screen_point = (event.x / dpr, (self.fig.bbox.height - event.y) / dpr)
        self.controller.on_floor_plan_click(screen_point)
        self._sync_surfaces()

    def _on_pick(self, event):
        spec = getattr(event.artist, '_floorwalk_marker', None)
        if spec is not None:
            self.viewer.markers.activate(spec)
            self._sync_surfaces()

    def _on_level_button(self, level: Optional[str]):
        self.controller.on_level_button_click(level)
        self._sync_surfaces()

    def _on_key_press(self, event):
        """Handle keyboard shortcuts."""
        if event.key == 'left':
            self.viewer.turn(-TURN_STEP)
        elif event.key == 'right':
            self.viewer.turn(TURN_STEP)
        elif event.key in ('up', 'down'):
            self._step_location(-1 if event.key == 'up' else 1)
        elif event.key == 'q':
            plt.close(self.fig)

    def _on_location_click(self, event):
        """Jump to the location whose list row was clicked."""
        if event.inaxes is not self.ax_location_list or event.ydata is None:
            return
        for (y_min, y_max, index) in self._location_hit_boxes:
            if y_min <= event.ydata <= y_max:
                self._select_location(index)
                return

    def _step_location(self, step: int):
        """Move to the previous (-1) or next (+1) location, wrapping around."""
        total = len(self.scene.panoramas)
        current = self.scene.current_panorama_index
        if current is None:
            index = 0 if step > 0 else total - 1
        else:
            index = (current + step) % total
        self._select_location(index)

    def _select_location(self, index: int):
        self.controller.switch_to_panorama(index)
        self._sync_surfaces()

    def _on_resize(self, event):
        # The window may have moved to a screen with another pixel density
        self.controller.renderer.device_pixel_ratio = self._canvas_pixel_ratio()

    def _on_level_changed(self, level: Optional[str]):
        selected = self.scene.current_level if self.scene else None
        for key, button in self.level_buttons.items():
            color = self._btn_active if key == selected else self._btn_color
            button.color = color
            button.ax.set_facecolor(color)
        self.fig.suptitle(self.controller.renderer.title, fontsize=12, fontweight='bold')

    # -------------------------------------------------------------------------
    # Chrome
    # -------------------------------------------------------------------------

    def _canvas_pixel_ratio(self) -> float:
        return float(getattr(self.fig.canvas, 'device_pixel_ratio', 1.0))

    def _update_location_list(self):
        """Refresh the location list around the current panorama."""
        self.ax_location_list.clear()
        self.ax_location_list.axis('off')
        self.ax_location_list.set_xlim(0, 1)
        self.ax_location_list.set_ylim(0, 1)
        self._location_hit_boxes = []

        current = self.scene.current_panorama_index
        total = len(self.location_choices)
        start = 0 if current is None else max(0, min(current - 1, total - LOCATION_ROWS))
        row_h = 1.0 / LOCATION_ROWS
        for row, (index, label) in enumerate(self.location_choices[start:start + LOCATION_ROWS]):
            y_max = 1.0 - row * row_h
            is_current = index == current
            self.ax_location_list.text(
                0, y_max - row_h / 2, f"{'*' if is_current else 'o'} {label}", fontsize=8, va='center',
                fontweight='bold' if is_current else 'normal',
                color='green' if is_current else 'dimgray',
            )
            self._location_hit_boxes.append((y_max - row_h, y_max, index))

    def _sync_surfaces(self):
        """Show exactly the surface the scene's view mode asks for and mark the current location."""
        self._update_location_list()
        surface = self.scene.visible_surface
        self.ax_pano.set_visible(surface is Surface.PANORAMA)
        self.ax_desc.set_visible(surface is Surface.DESCRIPTION)
        self.ax_splash.set_visible(surface is Surface.SPLASH)
        self.fig.canvas.draw_idle()

    def _update_status(self, message: str, color: str = '#C53030'):
        """Update the status line."""
        self.status_text.set_text(message)
        self.status_text.set_color(color)
        self.fig.canvas.draw_idle()


def main(assets_dir: Union[Path, str] = config.ASSETS_DIR, language: Optional[str] = None) -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s",
    )
    FloorWalkApp(assets_dir=assets_dir, language=language).launch()
