"""
Floorwalk: Render one floor plan to a PNG without opening a window.

Draws every panorama marker on the level, highlights the first panorama and
writes the result next to the assets directory.
"""

# fmt: off
# autopep8: off

from floorwalk import config
from floorwalk.assets import FloorPlanAssets, load_marker_icon
from floorwalk.records import load_areas, load_panoramas
from floorwalk.renderers import RasterRenderer
from floorwalk.scene import SceneModel

if __name__ == "__main__":
    panoramas   = load_panoramas(config.PANORAMAS_CSV)
    areas       = load_areas(config.AREAS_CSV)
    scene       = SceneModel(panoramas, areas)
    scene.select_panorama(0)

    renderer = RasterRenderer(assets=FloorPlanAssets(config.ASSETS_DIR), marker_icon=load_marker_icon())
    renderer.render(scene, scene.active_level)
    renderer.save(config.ASSETS_DIR / f"render_{scene.active_level}.png")
