"""
Floorwalk Configuration Module
==============================

Centralized configuration for asset paths, interaction constants and drawing
styles. This module provides consistent references throughout the codebase.
"""

# fmt: off
# autopep8: off

import os
from pathlib import Path

# Root directory of the project
PROJECT_ROOT        = Path(__file__).parent.parent

# ============================================================================
# ASSET PATHS
# ============================================================================
# Users can set FLOORWALK_ASSETS_DIR env var to point at another tour
ASSETS_DIR          = Path(os.getenv("FLOORWALK_ASSETS_DIR", str(PROJECT_ROOT / "assets")))
ICONS_DIR           = ASSETS_DIR / "icons"
DESCRIPTIONS_DIR    = ASSETS_DIR / "descriptions"

# Tabular data sources
PANORAMAS_CSV       = ASSETS_DIR / "assets.csv"
AREAS_CSV           = ASSETS_DIR / "areas.csv"

# Per-level floor plan base asset, resolved relative to ASSETS_DIR
FLOOR_PLAN_PATTERN  = "{level}.png"

# Marker icon candidates, first readable one wins
MARKER_ICON_PATHS   = [
    ICONS_DIR / "walking_person_top_view.png",
    ICONS_DIR / "walking_person_top_view.webp",
]

DEFAULT_LANGUAGE    = os.getenv("FLOORWALK_LANG", "en")

# ============================================================================
# INTERACTION
# ============================================================================
CLICK_RADIUS            = 15.0      # panorama hit radius, scene units
ORIENTATION_THROTTLE_S  = 0.1       # live orientation feed interval, seconds

# Compass directions for panorama links: (key, yaw radians)
DIRECTIONS = [
    ("north",   0.0),
    ("east",    1.5707963267948966),
    ("south",   3.141592653589793),
    ("west",   -1.5707963267948966),
]

# ============================================================================
# DRAWING STYLES
# ============================================================================
# Marker icons (pixels in scene space)
ICON_SIZE_CURRENT       = 30
ICON_SIZE_OTHER         = 24
HALO_FACTOR             = 0.7
HALO_FILL               = (66, 153, 225, 77)
HALO_STROKE             = (66, 153, 225, 255)
HALO_STROKE_WIDTH       = 2

# Fallback circle markers when the icon is unavailable
CIRCLE_RADIUS_CURRENT   = 10
CIRCLE_RADIUS_OTHER     = 8
CIRCLE_FILL_CURRENT     = (66, 153, 225, 255)
CIRCLE_FILL_OTHER       = (72, 187, 120, 255)
CIRCLE_STROKE           = (255, 255, 255, 255)
CIRCLE_STROKE_WIDTH     = 2

# Selected area polygon
AREA_FILL_DEFAULT       = (66, 153, 225, 64)
AREA_BORDER_DEFAULT     = (43, 108, 176, 255)
AREA_STROKE_WIDTH       = 3

# Label box next to the highlighted marker
LABEL_OFFSET            = (15, -10)     # box top-left relative to marker
LABEL_PADDING           = 5
LABEL_HEIGHT            = 20
LABEL_FONT_SIZE         = 12
LABEL_BACKGROUND        = (0, 0, 0, 179)
LABEL_TEXT_COLOR        = (255, 255, 255, 255)

# Placeholder drawn when the floor plan is missing
PLACEHOLDER_FILL        = (51, 51, 51, 255)
PLACEHOLDER_TEXT_COLOR  = (255, 255, 255, 255)
PLACEHOLDER_FONT_SIZE   = 16
PLACEHOLDER_SIZE        = (800, 600)
