"""
Floor plan renderers.

One draw-order algorithm (FloorPlanRenderer.render) with two backends:
    RasterRenderer   immediate-mode, composites onto a Pillow image
    VectorRenderer   retained-mode, rebuilds a matplotlib artist tree

Back-to-front order on every render:
    1. floor plan base (or a "not available" placeholder)
    2. the selected area polygon only
    3. one marker per panorama on the level, the current one highlighted
    4. the name label of the highlighted marker
"""

# Floorwalk imports
from floorwalk import config
from floorwalk.assets import FloorPlanAssets
from floorwalk.i18n import Localizer
from floorwalk.records import Panorama
from floorwalk.scene import SceneModel

# Standard library imports
import logging
import math
import re
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional, Sequence, Tuple, Union

# Third-party imports
import numpy as np
from matplotlib.axes import Axes
from matplotlib.backends.backend_agg import FigureCanvasAgg
from matplotlib.figure import Figure
from matplotlib.patches import Circle, Polygon, Rectangle
from matplotlib.transforms import Affine2D
from PIL import Image, ImageColor, ImageDraw, ImageFont

logger = logging.getLogger(__name__)

RGBA = Tuple[int, int, int, int]

_CSS_RGBA_PATTERN = re.compile(
    r"^rgba?\(\s*(\d+)\s*,\s*(\d+)\s*,\s*(\d+)\s*(?:,\s*([\d.]+)\s*)?\)$", re.IGNORECASE
)


def parse_color(value: Optional[str], default: RGBA) -> RGBA:
    """
    Parse a configured colour (``#rgb``, ``#rrggbb[aa]``, named, ``rgb()``/``rgba()``
    with a 0-1 alpha) into an RGBA tuple. Blank or unreadable values give ``default``.
    """
    if not value:
        return default
    text = value.strip()
    match = _CSS_RGBA_PATTERN.match(text)
    if match:
        r, g, b = (min(int(c), 255) for c in match.groups()[:3])
        alpha = match.group(4)
        a = 255 if alpha is None else round(min(float(alpha), 1.0) * 255)
        return (r, g, b, a)
    try:
        return ImageColor.getcolor(text, "RGBA")
    except ValueError:
        logger.warning(f"Unreadable colour {value!r}, using default")
        return default


def marker_rotation(panorama: Panorama, highlighted: bool, facing_angle: float) -> float:
    """Marker rotation in degrees: baseline orientation plus, when highlighted, the live facing angle (radians)."""
    rotation = panorama.orientation or 0.0
    if highlighted:
        rotation += math.degrees(facing_angle)
    return rotation


def _load_font(font_size: int) -> ImageFont.ImageFont:
    """Load a TrueType font or fallback to default."""
    for name in ("DejaVuSans.ttf", "arial.ttf"):
        try:
            return ImageFont.truetype(name, font_size)
        except OSError:
            continue
    return ImageFont.load_default(size=font_size)


class FloorPlanRenderer(ABC):
    """
    Shared draw-order algorithm for floor plan backends.

    Subclasses implement the drawing primitives only. Each render rebuilds the
    whole surface, so repeated calls with unchanged inputs give identical output
    and nothing from a previous state survives a state change.

    Args:
        assets: Floor plan image provider.
        marker_icon: RGBA marker icon, or None to draw circles.
        localizer: UI string lookup for the placeholder caption and labels.
    """

    def __init__(
        self,
        assets:         Optional[FloorPlanAssets]   = None,
        marker_icon:    Optional[Image.Image]       = None,
        localizer:      Optional[Localizer]         = None,
    ):
        self.assets                                 = assets or FloorPlanAssets()
        self.marker_icon                            = marker_icon
        self.localizer                              = localizer or Localizer()
        self.loaded_level:  Optional[str]           = None
        self._base:         Optional[Image.Image]   = None
        self._surface_size: Tuple[int, int]         = config.PLACEHOLDER_SIZE

    # -------------------------------------------------------------------------
    # Base asset
    # -------------------------------------------------------------------------

    def load_floor_plan(self, level: Optional[str]) -> bool:
        """Switch the base asset to ``level``; False when the plan is unavailable."""
        self.loaded_level = level
        self._base = self.assets.get(level) if level else None
        if self._base is not None:
            self._surface_size = self._base.size
        return self._base is not None

    @property
    def has_floor_plan(self) -> bool:
        return self.loaded_level is not None

    @property
    def surface_size(self) -> Tuple[int, int]:
        """(width, height) of the floor plan's native coordinate space."""
        return self._surface_size

    @property
    def title(self) -> str:
        if not self.loaded_level:
            return ""
        level = self.loaded_level[:1].upper() + self.loaded_level[1:]
        return self.localizer.t("floor_plan_title", level=level)

    def to_scene_coords(
        self,
        screen_point: Sequence[float],
        display_size: Optional[Sequence[float]] = None,
    ) -> Tuple[float, float]:
        """
        Map a pointer position on the displayed surface into scene coordinates.

        Args:
            screen_point: (x, y) relative to the displayed surface's top-left corner.
            display_size: (width, height) the surface is displayed at. None means
                          it is displayed at its native size.
        """
        x, y = float(screen_point[0]), float(screen_point[1])
        if display_size is None:
            return (x, y)
        width, height = self.surface_size
        return (x * width / float(display_size[0]), y * height / float(display_size[1]))

    # -------------------------------------------------------------------------
    # Draw order
    # -------------------------------------------------------------------------

    def render(self, scene: SceneModel, level: Optional[str], facing_angle: float = 0.0) -> None:
        """
        Redraw the floor plan of ``level`` from ``scene``.

        Args:
            scene: Current scene model.
            level: Level to draw.
            facing_angle: Live facing angle of the panorama viewer, radians.
        """
        if level != self.loaded_level:
            self.load_floor_plan(level)

        width, height = self.surface_size
        self._begin_surface(width, height)

        if self._base is None:
            self._draw_placeholder(self.localizer.t("floor_plan_not_available"))
            self._end_surface()
            return

        self._draw_base(self._base)

        area = scene.selected_area
        if area is not None and area.level == level and area.has_geometry:
            self._draw_polygon(
                area.points,
                parse_color(area.fill_color, config.AREA_FILL_DEFAULT),
                parse_color(area.border_color, config.AREA_BORDER_DEFAULT),
                config.AREA_STROKE_WIDTH,
            )

        highlighted = None
        for index, panorama in scene.panoramas_on(level):
            is_current = scene.is_highlighted(index)
            self._draw_marker(panorama, is_current, facing_angle)
            if is_current:
                highlighted = panorama

        if highlighted is not None:
            label = self.localizer.name(highlighted.names)
            if label:
                dx, dy = config.LABEL_OFFSET
                self._draw_label(highlighted.x + dx, highlighted.y + dy, label)

        self._end_surface()

    def _draw_marker(self, panorama: Panorama, highlighted: bool, facing_angle: float) -> None:
        x, y = panorama.x, panorama.y
        if self.marker_icon is not None:
            size = config.ICON_SIZE_CURRENT if highlighted else config.ICON_SIZE_OTHER
            if highlighted:
                self._draw_halo(x, y, size * config.HALO_FACTOR)
            self._draw_icon(x, y, size, marker_rotation(panorama, highlighted, facing_angle))
        elif highlighted:
            self._draw_circle(x, y, config.CIRCLE_RADIUS_CURRENT, config.CIRCLE_FILL_CURRENT)
        else:
            self._draw_circle(x, y, config.CIRCLE_RADIUS_OTHER, config.CIRCLE_FILL_OTHER)

    # -------------------------------------------------------------------------
    # Primitives
    # -------------------------------------------------------------------------

    @abstractmethod
    def _begin_surface(self, width: int, height: int) -> None: ...

    @abstractmethod
    def _draw_base(self, base: Image.Image) -> None: ...

    @abstractmethod
    def _draw_placeholder(self, caption: str) -> None: ...

    @abstractmethod
    def _draw_polygon(self, points: np.ndarray, fill: RGBA, border: RGBA, width: int) -> None: ...

    @abstractmethod
    def _draw_halo(self, x: float, y: float, radius: float) -> None: ...

    @abstractmethod
    def _draw_icon(self, x: float, y: float, size: int, rotation: float) -> None: ...

    @abstractmethod
    def _draw_circle(self, x: float, y: float, radius: float, fill: RGBA) -> None: ...

    @abstractmethod
    def _draw_label(self, x: float, y: float, text: str) -> None: ...

    @abstractmethod
    def _end_surface(self) -> None: ...

    @abstractmethod
    def save(self, path: Union[Path, str]) -> None: ...


class RasterRenderer(FloorPlanRenderer):
    """Pillow backend. The finished frame is available as ``image`` after each render."""

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.image:     Optional[Image.Image]   = None
        self._canvas:   Optional[Image.Image]   = None
        self._font                              = _load_font(config.LABEL_FONT_SIZE)
        self._caption_font                      = _load_font(config.PLACEHOLDER_FONT_SIZE)

    def _composite(self, overlay: Image.Image) -> None:
        self._canvas = Image.alpha_composite(self._canvas, overlay)

    def _new_overlay(self) -> Tuple[Image.Image, ImageDraw.ImageDraw]:
        overlay = Image.new("RGBA", self._canvas.size, (0, 0, 0, 0))
        return overlay, ImageDraw.Draw(overlay)

    def _begin_surface(self, width, height):
        self._canvas = Image.new("RGBA", (width, height), (0, 0, 0, 0))

    def _draw_base(self, base):
        self._canvas.alpha_composite(base)

    def _draw_placeholder(self, caption):
        draw = ImageDraw.Draw(self._canvas)
        w, h = self._canvas.size
        draw.rectangle([0, 0, w, h], fill=config.PLACEHOLDER_FILL)
        draw.text((w / 2, h / 2), caption, font=self._caption_font,
                  fill=config.PLACEHOLDER_TEXT_COLOR, anchor="mm")

    def _draw_polygon(self, points, fill, border, width):
        overlay, draw = self._new_overlay()
        xy = [(float(px), float(py)) for px, py in points]
        draw.polygon(xy, fill=fill)
        draw.line(xy + [xy[0]], fill=border, width=width, joint="curve")
        self._composite(overlay)

    def _draw_halo(self, x, y, radius):
        overlay, draw = self._new_overlay()
        draw.ellipse([x - radius, y - radius, x + radius, y + radius],
                     fill=config.HALO_FILL, outline=config.HALO_STROKE,
                     width=config.HALO_STROKE_WIDTH)
        self._composite(overlay)

    def _draw_icon(self, x, y, size, rotation):
        icon = self.marker_icon.resize((size, size), Image.Resampling.LANCZOS)
        # PIL rotates counter-clockwise; y points down so negate to turn clockwise
        icon = icon.rotate(-rotation, resample=Image.Resampling.BICUBIC, expand=True)
        overlay, _ = self._new_overlay()
        overlay.paste(icon, (round(x - icon.width / 2), round(y - icon.height / 2)), icon)
        self._composite(overlay)

    def _draw_circle(self, x, y, radius, fill):
        draw = ImageDraw.Draw(self._canvas)
        draw.ellipse([x - radius, y - radius, x + radius, y + radius],
                     fill=fill, outline=config.CIRCLE_STROKE, width=config.CIRCLE_STROKE_WIDTH)

    def _draw_label(self, x, y, text):
        overlay, draw = self._new_overlay()
        bbox = draw.textbbox((0, 0), text, font=self._font)
        tw = bbox[2] - bbox[0]
        pad = config.LABEL_PADDING
        draw.rectangle([x, y, x + tw + 2 * pad, y + config.LABEL_HEIGHT], fill=config.LABEL_BACKGROUND)
        draw.text((x + pad, y + config.LABEL_HEIGHT / 2), text, font=self._font,
                  fill=config.LABEL_TEXT_COLOR, anchor="lm")
        self._composite(overlay)

    def _end_surface(self):
        self.image = self._canvas
        self._canvas = None

    def save(self, path):
        if self.image is None:
            raise RuntimeError("Nothing rendered yet")
        self.image.save(path)


def _mpl_color(rgba: RGBA) -> Tuple[float, float, float, float]:
    return tuple(c / 255.0 for c in rgba)


class VectorRenderer(FloorPlanRenderer):
    """
    matplotlib backend drawing into a single Axes.

    Every render clears the Axes and recreates all artists. The y axis is
    inverted so data coordinates equal floor plan pixel coordinates.

    Args:
        ax: Axes to draw into. When None an Agg-backed Figure is created.
        device_pixel_ratio: Backing pixels per logical pointer pixel.
    """

    def __init__(self, ax: Optional[Axes] = None, device_pixel_ratio: float = 1.0, **kwargs):
        super().__init__(**kwargs)
        if ax is None:
            figure = Figure(figsize=(8, 6), dpi=100)
            FigureCanvasAgg(figure)
            ax = figure.add_axes((0, 0, 1, 1))
        self.ax                     = ax
        self.figure                 = ax.figure
        self.device_pixel_ratio     = float(device_pixel_ratio)
        self._icon_array            = None if self.marker_icon is None else np.asarray(self.marker_icon)
        self._size: Tuple[int, int] = config.PLACEHOLDER_SIZE

    def to_scene_coords(self, screen_point, display_size=None):
        """
        Map a logical pointer position (top-left origin, relative to the figure)
        into scene coordinates, accounting for device pixel density.
        """
        backing_w, backing_h = self.figure.bbox.width, self.figure.bbox.height
        if display_size is None:
            display_size = (backing_w / self.device_pixel_ratio, backing_h / self.device_pixel_ratio)
        px = float(screen_point[0]) * backing_w / float(display_size[0])
        py = backing_h - float(screen_point[1]) * backing_h / float(display_size[1])
        x, y = self.ax.transData.inverted().transform((px, py))
        return (float(x), float(y))

    def _begin_surface(self, width, height):
        self._size = (width, height)
        self.ax.clear()
        self.ax.axis("off")

    def _draw_base(self, base):
        w, h = base.size
        self.ax.imshow(np.asarray(base), origin="upper", extent=(0, w, h, 0),
                       interpolation="nearest", zorder=0)

    def _draw_placeholder(self, caption):
        w, h = self._size
        self.ax.add_patch(Rectangle((0, 0), w, h, facecolor=_mpl_color(config.PLACEHOLDER_FILL),
                                    edgecolor="none", zorder=0))
        self.ax.text(w / 2, h / 2, caption, color=_mpl_color(config.PLACEHOLDER_TEXT_COLOR),
                     fontsize=config.PLACEHOLDER_FONT_SIZE, ha="center", va="center", zorder=1)

    def _draw_polygon(self, points, fill, border, width):
        self.ax.add_patch(Polygon(np.asarray(points), closed=True, facecolor=_mpl_color(fill),
                                  edgecolor=_mpl_color(border), linewidth=width, zorder=1))

    def _draw_halo(self, x, y, radius):
        self.ax.add_patch(Circle((x, y), radius, facecolor=_mpl_color(config.HALO_FILL),
                                 edgecolor=_mpl_color(config.HALO_STROKE),
                                 linewidth=config.HALO_STROKE_WIDTH, zorder=2))

    def _draw_icon(self, x, y, size, rotation):
        half = size / 2
        icon = self.ax.imshow(self._icon_array, origin="upper",
                              extent=(x - half, x + half, y + half, y - half),
                              interpolation="bilinear", zorder=3)
        # With the y axis inverted, a positive data-space rotation reads clockwise on screen
        icon.set_transform(Affine2D().rotate_deg_around(x, y, rotation) + self.ax.transData)

    def _draw_circle(self, x, y, radius, fill):
        self.ax.add_patch(Circle((x, y), radius, facecolor=_mpl_color(fill),
                                 edgecolor=_mpl_color(config.CIRCLE_STROKE),
                                 linewidth=config.CIRCLE_STROKE_WIDTH, zorder=3))

    def _draw_label(self, x, y, text):
        self.ax.text(x + config.LABEL_PADDING, y + config.LABEL_HEIGHT / 2, text,
                     color=_mpl_color(config.LABEL_TEXT_COLOR), fontsize=config.LABEL_FONT_SIZE * 0.75,
                     ha="left", va="center", zorder=4,
                     bbox=dict(boxstyle="square,pad=0.4", facecolor=_mpl_color(config.LABEL_BACKGROUND),
                               edgecolor="none"))

    def _end_surface(self):
        w, h = self._size
        self.ax.set_xlim(0, w)
        self.ax.set_ylim(h, 0)
        self.ax.set_aspect("equal", adjustable="box")
        self.ax.apply_aspect()
        if self.figure.canvas is not None:
            self.figure.canvas.draw_idle()

    def save(self, path):
        self.figure.savefig(path)
