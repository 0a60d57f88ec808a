import threading
from typing import Callable, Iterable, List, Optional

from nino.inference import load_project
from nino.model import ProjectData
from nino.utils.logging import logger


class ProjectStore:
    """Holds the current ProjectData snapshot for a set of input paths.

    Readers call `snapshot()` once per operation and work on that object only.
    `reload()` builds a complete new ProjectData off to the side and publishes
    it with a single reference assignment, so a reader sees either the old or
    the new model, never a mixture. Reloads are serialized among themselves;
    readers never wait on them.
    """

    def __init__(
        self,
        input_paths: Iterable[str],
        loader: Callable[[List[str]], ProjectData] = load_project,
        project: Optional[ProjectData] = None,
    ):
        self.input_paths = list(input_paths)
        self._loader = loader
        self._reload_lock = threading.Lock()
        self._project = project if project is not None else loader(self.input_paths)

    def snapshot(self) -> ProjectData:
        return self._project

    def reload(self) -> ProjectData:
        """Re-run discovery and parsing, then swap the model in.

        Raises:
            DiscoveryError: If an input path disappeared; the current model is kept
        """
        with self._reload_lock:
            project = self._loader(self.input_paths)
            self._project = project
        logger.info("Successfully reloaded schemas", folders=len(project))
        return project
