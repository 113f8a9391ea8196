"""Throttled feed of the panorama viewer's facing direction into floor plan redraws."""

# Floorwalk imports
from floorwalk import config
from floorwalk.collaborators import PanoramaViewer

# Standard library imports
import time
from typing import Callable, Optional


class LiveOrientationFeed:
    """
    Forwards facing-changed notifications at most once per ``interval`` seconds.

    Notifications arriving sooner than ``interval`` after the last accepted one
    are dropped, not queued; the next accepted one reads the latest angle anyway.

    Args:
        viewer: Panorama viewer emitting facing-changed notifications.
        on_update: Called for every accepted notification.
        interval: Minimum seconds between accepted notifications.
        clock: Monotonic time source in seconds.
    """

    def __init__(
        self,
        viewer:     PanoramaViewer,
        on_update:  Callable[[], None],
        interval:   float                   = config.ORIENTATION_THROTTLE_S,
        clock:      Callable[[], float]     = time.monotonic,
    ):
        self.viewer                         = viewer
        self.on_update                      = on_update
        self.interval                       = interval
        self.clock                          = clock
        self._last_update: Optional[float]  = None
        self._attached:    bool             = False

    def attach(self) -> None:
        """Subscribe to the viewer; repeated calls do not subscribe twice."""
        if self._attached:
            return
        self.viewer.on_facing_changed(self._on_facing_changed)
        self._attached = True

    def _on_facing_changed(self, *args, **kwargs) -> None:
        now = self.clock()
        if self._last_update is not None and now - self._last_update < self.interval:
            return
        self._last_update = now
        self.on_update()
