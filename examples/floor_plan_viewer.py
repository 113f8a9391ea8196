"""
Floorwalk: Floor Plan Navigation for a 360° Panorama Tour

Expects an assets directory laid out as:
    assets.csv              panoramas (file_path, position_x, position_y, level,
                            orientation, north/east/south/west, name_<lang>)
    areas.csv               optional areas (area_id, level, polygon, fill_color,
                            border_color, description, name_<lang>)
    <level>.png             one floor plan per level
    icons/                  walking_person_top_view.png marker icon
    descriptions/           markdown area descriptions

Controls:
    Left-click      Jump to a panorama marker / toggle an area (floor plan)
    Click arrow     Follow a directional link (panorama pane)
    Left/Right      Turn the view
    Up/Down         Previous / next location
    Location list   Click an entry (or the arrows) to jump to that panorama
    q               Quit

Set FLOORWALK_ASSETS_DIR to point at another tour and FLOORWALK_LANG=fr for
French UI strings.
"""

# fmt: off
# autopep8: off

from floorwalk.app import main

if __name__ == "__main__":
    main()
