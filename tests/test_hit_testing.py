# Floorwalk imports
from floorwalk.hit_testing import EMPTY, AreaHit, PanoramaHit, resolve_click
from floorwalk.records import Area, Panorama
from floorwalk.geometry_utils import parse_polygon

# Third-party imports
import pytest


class TestResolveClick:
    """Tests for resolve_click function"""

    def test_marker_within_radius(self, panoramas, areas):
        """Test that a click near a marker on the active level hits it"""
        hit = resolve_click((110, 105), "ground", panoramas, areas)
        assert hit == PanoramaHit(0)

    def test_radius_is_inclusive(self, panoramas, areas):
        """Test that a click exactly one radius away still hits"""
        assert resolve_click((115, 100), "ground", panoramas, areas, radius=15) == PanoramaHit(0)
        assert resolve_click((115.5, 100), "ground", panoramas, areas, radius=15) is EMPTY

    def test_first_in_stored_order_wins_over_nearest(self):
        """Test that overlapping markers resolve to the first stored, not the closest"""
        panoramas = [
            Panorama(file_path="p0.jpg", level="ground", x=0.0, y=0.0),
            Panorama(file_path="p1.jpg", level="ground", x=5.0, y=0.0),
        ]
        assert resolve_click((4, 0), "ground", panoramas, []) == PanoramaHit(0)

    def test_marker_index_refers_to_full_list(self, panoramas, areas):
        """Test that the hit index is the position in the full panorama list"""
        assert resolve_click((50, 150), "first", panoramas, areas) == PanoramaHit(2)

    def test_other_levels_are_ignored(self, panoramas, areas):
        """Test that markers on other levels are not hit"""
        assert resolve_click((50, 150), "ground", panoramas, areas) is EMPTY

    def test_area_hit(self, panoramas, areas, lobby):
        """Test that a click inside an area polygon hits the area"""
        hit = resolve_click((30, 30), "ground", panoramas, areas)
        assert isinstance(hit, AreaHit)
        assert hit.area.key == lobby.key

    def test_marker_beats_area(self, lobby):
        """Test that a marker inside an area takes precedence"""
        panoramas = [Panorama(file_path="in.jpg", level="ground", x=30.0, y=30.0)]
        assert resolve_click((32, 30), "ground", panoramas, [lobby]) == PanoramaHit(0)

    def test_first_area_in_stored_order_wins(self, lobby):
        """Test that overlapping areas resolve to the first stored"""
        inner = Area(key="inner#1", area_id="inner", level="ground",
                     points=parse_polygon("20,20,40,20,40,40,20,40"))
        hit = resolve_click((30, 30), "ground", [], [lobby, inner])
        assert hit.area.key == "lobby#0"
        hit = resolve_click((30, 30), "ground", [], [inner, lobby])
        assert hit.area.key == "inner#1"

    def test_area_without_geometry_is_ignored(self):
        """Test that areas whose polygon did not decode are never hit"""
        broken = Area(key="broken#0", area_id="broken", level="ground", polygon_raw="nope")
        assert resolve_click((30, 30), "ground", [], [broken]) is EMPTY

    def test_area_on_other_level_is_ignored(self, areas):
        """Test that the first-floor office is not hit from the ground floor"""
        assert resolve_click((30, 30), "first", [], areas).area.key == "office#2"
        assert resolve_click((30, 30), "basement", [], areas) is EMPTY

    def test_empty_space(self, panoramas, areas):
        """Test that a click on nothing resolves to EMPTY"""
        assert resolve_click((180, 180), "ground", panoramas, areas) is EMPTY

    def test_same_click_same_answer(self, panoramas, areas):
        """Test that resolving the same click twice gives equal results"""
        for point, level in [((101, 99), "ground"), ((30, 30), "ground"), ((30, 30), "first"), ((500, 500), "ground")]:
            assert resolve_click(point, level, panoramas, areas) == resolve_click(point, level, panoramas, areas)


class TestTwoRoomTour:
    """Tests for a two-panorama ground floor with one large lobby"""

    LOBBY = "POLYGON((0 0, 0 200, 200 200, 200 0))"
    LOBBY_FLAT = "0,0,0,200,200,200,200,0"

    @pytest.fixture
    def tour(self):
        return [
            Panorama(file_path="a.jpg", level="ground", x=100.0, y=100.0, links={"north": "b.jpg"}),
            Panorama(file_path="b.jpg", level="ground", x=100.0, y=50.0, links={"south": "a.jpg"}),
        ]

    @pytest.fixture
    def tagged_lobby(self):
        return Area(key="Lobby#0", area_id="Lobby", level="ground", polygon_raw=self.LOBBY,
                    points=parse_polygon(self.LOBBY))

    @pytest.fixture
    def flat_lobby(self):
        return Area(key="Lobby#1", area_id="Lobby", level="ground", polygon_raw=self.LOBBY_FLAT,
                    points=parse_polygon(self.LOBBY_FLAT))

    def test_click_next_to_marker(self, tour, tagged_lobby, flat_lobby):
        """Test that a click one pixel off A's marker hits A even inside the lobby"""
        assert resolve_click((101, 99), "ground", tour, [tagged_lobby, flat_lobby]) == PanoramaHit(0)

    def test_both_encodings_hit(self, tour, tagged_lobby, flat_lobby):
        """Test that the tagged and flat forms of the same polygon both contain the point"""
        assert resolve_click((50, 50), "ground", tour, [tagged_lobby, flat_lobby]).area.key == "Lobby#0"
        assert resolve_click((50, 50), "ground", tour, [flat_lobby]).area.key == "Lobby#1"
        assert isinstance(resolve_click((50, 50), "ground", tour, [flat_lobby]), AreaHit)

    def test_outside_everything(self, tour, tagged_lobby, flat_lobby):
        assert resolve_click((500, 500), "ground", tour, [tagged_lobby, flat_lobby]) is EMPTY

    def test_truncated_polygon_has_no_geometry(self):
        assert parse_polygon("POLYGON((") is None
