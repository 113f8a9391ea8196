# Floorwalk imports
from floorwalk.records import (
    DataSourceError,
    NoValidPanoramasError,
    areas_from_rows,
    level_choices,
    load_areas,
    load_panoramas,
    make_area_key,
    panorama_choices,
    panoramas_from_rows,
    read_rows,
)

# Third-party imports
import pytest


@pytest.fixture
def panoramas_csv(tmp_path):
    """Panorama source with one row per exclusion reason"""
    path = tmp_path / "assets.csv"
    path.write_text(
        "file_path,position_x,position_y,level,orientation,north,east,south,west,name_en,name_fr\n"
        "a.jpg,100,100,ground,,b.jpg,,,,Entrance,Entrée\n"
        "b.jpg,100.5,50,ground,90,,,a.jpg,,Hall,\n"
        ",10,10,ground,,,,,,No file,\n"
        "c.jpg,,10,ground,,,,,,No x,\n"
        "d.jpg,10,10,,,,,,,No level,\n"
        "e.jpg,left,10,ground,,,,,,Bad x,\n"
        "f.jpg,5,6,first,north,,,,,Bad orientation,\n",
        encoding="utf-8",
    )
    return path


@pytest.fixture
def areas_csv(tmp_path):
    path = tmp_path / "areas.csv"
    path.write_text(
        "area_id,level,polygon,fill_color,border_color,description,name_en,name_fr\n"
        'lobby,ground,"POLYGON((10 10, 60 10, 60 60, 10 60))","rgba(255,0,0,0.3)",,lobby.md,Lobby,Hall\n'
        'lobby,ground,"70,10,90,10,90,30",,,,Lobby annex,\n'
        'storage,ground,"1,2,3",,,,Storage,\n'
        'orphan,,"0,0,5,0,5,5",,,,Orphan,\n',
        encoding="utf-8",
    )
    return path


class TestPanoramaIngestion:
    """Tests for panorama row validation"""

    def test_only_complete_rows_are_kept(self, panoramas_csv):
        """Test that rows missing a required field or with a bad position are excluded"""
        panoramas = load_panoramas(panoramas_csv)
        assert [p.file_path for p in panoramas] == ["a.jpg", "b.jpg", "f.jpg"]

    def test_fields_are_typed(self, panoramas_csv):
        """Test positions become floats and optional fields are decoded"""
        a, b, f = load_panoramas(panoramas_csv)
        assert (a.x, a.y) == (100.0, 100.0)
        assert b.x == 100.5
        assert a.orientation is None
        assert b.orientation == 90.0
        assert f.orientation is None
        assert a.links == {"north": "b.jpg"}
        assert b.links == {"south": "a.jpg"}
        assert a.names == {"en": "Entrance", "fr": "Entrée"}
        assert a.display_name("fr") == "Entrée"
        assert b.display_name("fr") == "Hall"

    def test_skipped_rows_are_logged(self, panoramas_csv, caplog):
        """Test that each excluded row leaves a warning"""
        with caplog.at_level("WARNING"):
            load_panoramas(panoramas_csv)
        skipped = [r for r in caplog.records if "Skipping panorama row" in r.getMessage()]
        assert len(skipped) == 4

    def test_no_valid_rows_raises(self, tmp_path):
        """Test that a source with no usable panorama is a startup failure"""
        path = tmp_path / "assets.csv"
        path.write_text("file_path,position_x,position_y,level\n,1,2,ground\n", encoding="utf-8")
        with pytest.raises(NoValidPanoramasError):
            load_panoramas(path)

    def test_no_valid_rows_is_a_data_source_error(self):
        """Test the error hierarchy the shell relies on"""
        assert issubclass(NoValidPanoramasError, DataSourceError)

    def test_missing_source_raises(self, tmp_path):
        """Test that an unreachable source is reported as DataSourceError"""
        with pytest.raises(DataSourceError):
            load_panoramas(tmp_path / "nope.csv")

    def test_empty_source_raises(self, tmp_path):
        """Test that an empty file is reported as DataSourceError"""
        path = tmp_path / "assets.csv"
        path.write_text("", encoding="utf-8")
        with pytest.raises(DataSourceError):
            read_rows(path)

    def test_rows_from_mappings(self):
        """Test ingestion straight from row mappings, including NaN cells"""
        rows = [
            {"file_path": "a.jpg", "position_x": 1, "position_y": 2.5, "level": "ground"},
            {"file_path": "b.jpg", "position_x": float("nan"), "position_y": 2, "level": "ground"},
        ]
        panoramas = panoramas_from_rows(rows)
        assert len(panoramas) == 1
        assert panoramas[0].position == (1.0, 2.5)

    def test_equality_uses_identity_fields(self):
        """Test that name and link dicts do not take part in comparisons"""
        rows = [
            {"file_path": "a.jpg", "position_x": "1", "position_y": "2", "level": "g", "name_en": "A"},
            {"file_path": "a.jpg", "position_x": "1", "position_y": "2", "level": "g", "name_en": "B"},
        ]
        first, second = panoramas_from_rows(rows)
        assert first == second


class TestAreaIngestion:
    """Tests for area row decoding"""

    def test_keys_are_synthetic_and_unique(self, areas_csv):
        """Test that rows sharing an area_id get distinct keys"""
        areas = load_areas(areas_csv)
        assert [a.key for a in areas] == ["lobby#0", "lobby#1", "storage#2"]
        assert [a.area_id for a in areas] == ["lobby", "lobby", "storage"]

    def test_geometry_and_styles(self, areas_csv):
        """Test polygon decoding in both encodings and optional style fields"""
        lobby, annex, storage = load_areas(areas_csv)
        assert lobby.points.shape == (4, 2)
        assert annex.points.shape == (3, 2)
        assert lobby.fill_color == "rgba(255,0,0,0.3)"
        assert lobby.border_color is None
        assert lobby.description_path == "lobby.md"
        assert annex.description_path is None

    def test_bad_geometry_is_kept_without_points(self, areas_csv, caplog):
        """Test that an undecodable polygon keeps the area but drops its geometry"""
        with caplog.at_level("WARNING"):
            storage = load_areas(areas_csv)[2]
        assert not storage.has_geometry
        assert any("no usable geometry" in r.getMessage() for r in caplog.records)

    def test_missing_source_means_no_areas(self, tmp_path):
        """Test that a tour without an area file still loads"""
        assert load_areas(tmp_path / "areas.csv") == []

    def test_display_name_falls_back_to_id(self):
        """Test that an area without names shows its identifier"""
        area = areas_from_rows([{"area_id": "kitchen", "level": "ground", "polygon": ""}])[0]
        assert area.display_name("fr") == "kitchen"

    def test_make_area_key_without_id(self):
        """Test that rows with a blank area_id still get a key"""
        assert make_area_key("", 4) == "area#4"


class TestChoices:
    """Tests for level and panorama pickers"""

    def test_level_choices_sorted_unique(self, panoramas):
        assert level_choices(panoramas) == ["first", "ground"]

    def test_panorama_choices_fall_back_to_path(self, panoramas):
        assert panorama_choices(panoramas, "fr") == [(0, "Entrée"), (1, "Hall"), (2, "c.jpg")]
