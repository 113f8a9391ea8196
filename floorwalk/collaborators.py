"""
Interfaces of the external collaborators the navigation engine talks to.

The panorama viewer, its marker layer, the description document source and
the description surface are provided by the application shell; the engine
depends on these narrow protocols only.
"""

# Floorwalk imports
from floorwalk import config

# Standard library imports
import logging
from concurrent.futures import Executor, Future
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional, Protocol, Union

logger = logging.getLogger(__name__)

ErrorReporter = Callable[[str], None]


@dataclass(frozen=True)
class MarkerSpec:
    """A navigation marker placed on the panorama surface."""

    id: str
    yaw: float
    pitch: float
    label: str
    tooltip: str
    target_index: int


class MarkerLayer(Protocol):
    def clear(self) -> None: ...

    def add(self, spec: MarkerSpec) -> None: ...

    def on_marker_activated(self, callback: Callable[[MarkerSpec], None]) -> None: ...


class PanoramaViewer(Protocol):
    markers: MarkerLayer

    def set_current_panorama(self, path: str) -> Future: ...

    def get_current_facing_angle(self) -> float:
        """Current yaw in radians."""
        ...

    def on_facing_changed(self, callback: Callable[..., None]) -> None: ...


class DescriptionSource(Protocol):
    def fetch(self, path: str) -> "Future[Optional[str]]": ...


class DescriptionView(Protocol):
    def show(self, title: str, text: str) -> None: ...

    def hide(self) -> None: ...


class FileDescriptionSource:
    """
    Reads description documents (markdown text) from a directory.

    Args:
        base_dir: Directory relative paths are resolved against.
        executor: Optional executor to read in the background. Without one the
                  returned future is already complete.

    With an executor the future completes on a worker thread, and so do its
    done-callbacks. Callers that update a GUI from those callbacks must hand
    the result back to the GUI thread themselves; FloorWalkApp reads
    synchronously for that reason.
    """

    def __init__(
        self,
        base_dir: Union[Path, str] = config.DESCRIPTIONS_DIR,
        executor: Optional[Executor] = None,
    ):
        self.base_dir = Path(base_dir)
        self.executor = executor

    def _read(self, path: str) -> Optional[str]:
        file_path = Path(path)
        if not file_path.is_absolute():
            file_path = self.base_dir / file_path
        try:
            return file_path.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.warning(f"Description not found: {file_path}")
            return None

    def fetch(self, path: str) -> "Future[Optional[str]]":
        if self.executor is not None:
            return self.executor.submit(self._read, path)
        future: Future = Future()
        try:
            future.set_result(self._read(path))
        except OSError as exc:
            future.set_exception(exc)
        return future
