# Floorwalk imports
from floorwalk.assets import FloorPlanAssets
from floorwalk.geometry_utils import parse_polygon
from floorwalk.i18n import Localizer
from floorwalk.navigation import NavigationController
from floorwalk.records import Area, Panorama
from floorwalk.renderers import RasterRenderer
from floorwalk.scene import SceneModel

# Standard library imports
from concurrent.futures import Future

# Third-party imports
import pytest
from PIL import Image


LOBBY_POLYGON = "POLYGON((10 10, 60 10, 60 60, 10 60))"
LOBBY_POLYGON_FLAT = "10,10,60,10,60,60,10,60"


# -----------------------------------------------------------------------------
# Collaborator doubles
# -----------------------------------------------------------------------------

class FakeMarkerLayer:
    """Records the markers placed on the panorama surface."""

    def __init__(self):
        self.specs = []
        self.clear_count = 0
        self._callbacks = []

    def clear(self):
        self.specs.clear()
        self.clear_count += 1

    def add(self, spec):
        self.specs.append(spec)

    def on_marker_activated(self, callback):
        self._callbacks.append(callback)

    def activate(self, marker_id):
        spec = next(s for s in self.specs if s.id == marker_id)
        for callback in self._callbacks:
            callback(spec)


class FakeViewer:
    """
    Panorama viewer double. Loads complete immediately unless ``deferred``
    is set, in which case they wait in ``pending`` until completed by hand.
    """

    def __init__(self):
        self.markers = FakeMarkerLayer()
        self.facing = 0.0
        self.requested = []
        self.failing = set()
        self.deferred = False
        self.pending = []
        self.facing_callbacks = []

    def set_current_panorama(self, path):
        self.requested.append(path)
        future = Future()
        if self.deferred:
            self.pending.append((path, future))
        else:
            self._complete(path, future)
        return future

    def _complete(self, path, future):
        if path in self.failing:
            future.set_exception(OSError(f"cannot open {path}"))
        else:
            future.set_result(None)

    def complete(self, position):
        path, future = self.pending[position]
        self._complete(path, future)

    def get_current_facing_angle(self):
        return self.facing

    def on_facing_changed(self, callback):
        self.facing_callbacks.append(callback)

    def turn_to(self, angle):
        self.facing = angle
        for callback in self.facing_callbacks:
            callback(angle)


class FakeDescriptionSource:
    """Serves descriptions from a dict; unknown paths resolve to None."""

    def __init__(self, documents=None, deferred=False):
        self.documents = documents or {}
        self.deferred = deferred
        self.pending = []
        self.requested = []

    def fetch(self, path):
        self.requested.append(path)
        future = Future()
        if self.deferred:
            self.pending.append((path, future))
        else:
            future.set_result(self.documents.get(path))
        return future

    def complete(self, position):
        path, future = self.pending[position]
        future.set_result(self.documents.get(path))


class RecordingDescriptionView:
    def __init__(self):
        self.shown = []
        self.hide_count = 0
        self.visible = False

    def show(self, title, text):
        self.shown.append((title, text))
        self.visible = True

    def hide(self):
        self.hide_count += 1
        self.visible = False


# -----------------------------------------------------------------------------
# Scenario data
# -----------------------------------------------------------------------------

@pytest.fixture
def panoramas():
    """A links north to B on the ground floor; C sits alone on the first floor"""
    return [
        Panorama(file_path="a.jpg", level="ground", x=100.0, y=100.0,
                 names={"en": "Entrance", "fr": "Entrée"}, links={"north": "b.jpg"}),
        Panorama(file_path="b.jpg", level="ground", x=100.0, y=50.0, orientation=90.0,
                 names={"en": "Hall"}, links={"south": "a.jpg", "east": "missing.jpg"}),
        Panorama(file_path="c.jpg", level="first", x=50.0, y=150.0),
    ]


@pytest.fixture
def lobby():
    """Lobby area in the tagged polygon encoding"""
    return Area(key="lobby#0", area_id="lobby", level="ground", polygon_raw=LOBBY_POLYGON,
                points=parse_polygon(LOBBY_POLYGON), names={"en": "Lobby", "fr": "Hall d'accueil"},
                description_path="lobby.md")


@pytest.fixture
def areas(lobby):
    storage = Area(key="storage#1", area_id="storage", level="ground", polygon_raw="not a polygon",
                   points=None, names={"en": "Storage"})
    office = Area(key="office#2", area_id="office", level="first", polygon_raw=LOBBY_POLYGON_FLAT,
                  points=parse_polygon(LOBBY_POLYGON_FLAT), names={"en": "Office"})
    return [lobby, storage, office]


@pytest.fixture
def scene(panoramas, areas):
    return SceneModel(panoramas, areas)


@pytest.fixture
def assets_dir(tmp_path):
    """Directory holding a plain white 200x200 ground floor plan and nothing for 'first'"""
    Image.new("RGBA", (200, 200), (255, 255, 255, 255)).save(tmp_path / "ground.png")
    return tmp_path


@pytest.fixture
def assets(assets_dir):
    return FloorPlanAssets(assets_dir)


@pytest.fixture
def localizer():
    return Localizer("en")


@pytest.fixture
def raster_renderer(assets, localizer):
    return RasterRenderer(assets=assets, marker_icon=None, localizer=localizer)


@pytest.fixture
def viewer():
    return FakeViewer()


@pytest.fixture
def description_source():
    return FakeDescriptionSource({"lobby.md": "# Lobby\nMain entrance hall."})


@pytest.fixture
def description_view():
    return RecordingDescriptionView()


@pytest.fixture
def errors():
    return []


@pytest.fixture
def controller(scene, raster_renderer, viewer, description_source, description_view, localizer, errors):
    return NavigationController(
        scene=scene,
        renderer=raster_renderer,
        viewer=viewer,
        description_source=description_source,
        description_view=description_view,
        localizer=localizer,
        report_error=errors.append,
    )
