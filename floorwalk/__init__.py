from .records import Area, Panorama, DataSourceError, NoValidPanoramasError, load_areas, load_panoramas
from .scene import SceneModel, Surface, ViewMode
from .hit_testing import resolve_click
from .renderers import RasterRenderer, VectorRenderer
from .navigation import NavigationController
from .orientation_feed import LiveOrientationFeed
from . import config, geometry_utils
