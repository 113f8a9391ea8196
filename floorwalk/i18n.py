"""Localized UI strings and display-name lookup."""

# Floorwalk imports
from floorwalk import config

# Standard library imports
import logging
from typing import Dict, Mapping, Optional

logger = logging.getLogger(__name__)

FALLBACK_LANGUAGE = "en"

STRINGS: Dict[str, Dict[str, str]] = {
    "en": {
        "floor_plan_title":         "Floor Plan - {level}",
        "floor_plan_not_available": "Floor plan not available",
        "all_levels":               "All Levels",
        "select_location":          "Select a location...",
        "no_valid_panoramas":       "No valid panoramas found. Ensure panoramas have file_path, position_x, position_y, and level fields filled.",
        "data_source_failed":       "Failed to initialize: {reason}",
        "panorama_load_failed":     "Failed to load panorama: {path}",
        "description_not_found":    "No description available for this area.",
        "direction_north":          "North ↑",
        "direction_east":           "East →",
        "direction_south":          "South ↓",
        "direction_west":           "West ←",
        "go_north":                 "Go north",
        "go_east":                  "Go east",
        "go_south":                 "Go south",
        "go_west":                  "Go west",
    },
    "fr": {
        "floor_plan_title":         "Plan d'étage - {level}",
        "floor_plan_not_available": "Plan d'étage non disponible",
        "all_levels":               "Tous les niveaux",
        "select_location":          "Choisir un emplacement...",
        "no_valid_panoramas":       "Aucun panorama valide. Vérifiez que file_path, position_x, position_y et level sont renseignés.",
        "data_source_failed":       "Échec de l'initialisation : {reason}",
        "panorama_load_failed":     "Impossible de charger le panorama : {path}",
        "description_not_found":    "Aucune description disponible pour cette zone.",
        "direction_north":          "Nord ↑",
        "direction_east":           "Est →",
        "direction_south":          "Sud ↓",
        "direction_west":           "Ouest ←",
        "go_north":                 "Aller au nord",
        "go_east":                  "Aller à l'est",
        "go_south":                 "Aller au sud",
        "go_west":                  "Aller à l'ouest",
    },
}


def best_name(names: Mapping[str, str], language: str = FALLBACK_LANGUAGE) -> str:
    """
    Pick the best available display name from a {language: name} mapping.

    Preference order: requested language, English, French, then any other
    non-empty entry. Returns an empty string when nothing is available.
    """
    for lang in (language, FALLBACK_LANGUAGE, "fr"):
        value = names.get(lang)
        if value:
            return value
    for value in names.values():
        if value:
            return value
    return ""


class Localizer:
    """Looks up UI strings for one language, falling back to English."""

    def __init__(self, language: Optional[str] = None):
        self.language = language or config.DEFAULT_LANGUAGE
        if self.language not in STRINGS:
            logger.warning(f"Unknown language '{self.language}', using '{FALLBACK_LANGUAGE}'")
            self.language = FALLBACK_LANGUAGE
        self._reported_missing = set()

    def t(self, key: str, **kwargs) -> str:
        """Translate ``key`` and format it with ``kwargs``; unknown keys return the key itself."""
        template = STRINGS[self.language].get(key) or STRINGS[FALLBACK_LANGUAGE].get(key)
        if template is None:
            if key not in self._reported_missing:
                logger.warning(f"Missing UI string: {key}")
                self._reported_missing.add(key)
            return key
        return template.format(**kwargs) if kwargs else template

    def name(self, names: Mapping[str, str]) -> str:
        return best_name(names, self.language)
