import logging
from typing import Callable, List

from kairos.app.services.navigator import INavigator

logger = logging.getLogger(__name__)


class ShellNavigator(INavigator):
    """
    Navigator for the shell process.

    A hard reload moves `location` and runs every registered reload hook,
    which is how in-memory client state gets discarded.
    """

    def __init__(self, location: str = "/"):
        self.location = location
        self.reload_count = 0
        self._reload_hooks: List[Callable[[str], None]] = []

    def add_reload_hook(self, hook: Callable[[str], None]) -> None:
        self._reload_hooks.append(hook)

    def hard_reload(self, path: str) -> None:
        logger.info(f"Hard navigation to {path}")
        self.location = path
        self.reload_count += 1
        for hook in list(self._reload_hooks):
            hook(path)
